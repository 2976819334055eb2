"""Customer-scoped data connection model."""
from sqlalchemy import Column, String, DateTime, ForeignKey, Uuid
from sqlalchemy.sql import func
from ..database import Base, JSONType
import uuid


class Connection(Base):
    __tablename__ = "connections"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    customer_id = Column(
        String(64), ForeignKey("customers.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name = Column(String(255), nullable=False)
    plugin = Column(String(64), nullable=False)  # github, gitlab, jira, ...
    endpoint = Column(String(1024), nullable=True)
    config = Column(JSONType, default=dict)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
