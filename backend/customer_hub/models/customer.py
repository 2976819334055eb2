"""Customer, CustomerProject, and CustomerSelection models."""
from sqlalchemy import Column, String, Text, DateTime, Boolean, Integer, ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.sql import func
from ..database import Base, JSONType
import uuid


class Customer(Base):
    __tablename__ = "customers"

    id = Column(String(64), primary_key=True)  # e.g. cust-001
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
    extra = Column(JSONType, default=dict)


class CustomerProject(Base):
    __tablename__ = "customer_projects"
    __table_args__ = (UniqueConstraint("customer_id", "project_id", name="uq_customer_project"),)

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    customer_id = Column(
        String(64), ForeignKey("customers.id", ondelete="CASCADE"), nullable=False, index=True
    )
    project_id = Column(Integer, nullable=False, index=True)  # DevLake project id
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class CustomerSelection(Base):
    """Customer last picked in the selector, per user."""
    __tablename__ = "customer_selections"

    user_id = Column(String(255), primary_key=True)
    customer_id = Column(
        String(64), ForeignKey("customers.id", ondelete="CASCADE"), nullable=False, index=True
    )
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
