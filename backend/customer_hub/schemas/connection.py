"""Connection schemas."""
from pydantic import BaseModel, Field
from typing import Optional, Dict, Any
from uuid import UUID
from datetime import datetime


class ConnectionCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    plugin: str = Field(..., min_length=1, max_length=64)
    endpoint: Optional[str] = None
    config: Dict[str, Any] = {}
    # Accepted for older clients that post it; must match the request's customer context
    customer_id: Optional[str] = Field(None, alias="customerId")

    class Config:
        populate_by_name = True


class ConnectionOut(BaseModel):
    id: UUID
    customer_id: str
    name: str
    plugin: str
    endpoint: Optional[str] = None
    config: Dict[str, Any] = {}
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
