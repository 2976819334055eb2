"""Customer, project assignment, and selection schemas."""
from pydantic import BaseModel, Field
from typing import List, Optional, Dict, Any
from datetime import datetime

CUSTOMER_ID_PATTERN = r"^[A-Za-z0-9][A-Za-z0-9_-]{0,63}$"


class CustomerCreate(BaseModel):
    id: Optional[str] = Field(None, pattern=CUSTOMER_ID_PATTERN)  # generated as cust-NNN when omitted
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    is_active: bool = True
    projects: List[int] = []
    extra: Dict[str, Any] = {}


class CustomerUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    is_active: Optional[bool] = None
    extra: Optional[Dict[str, Any]] = None


class CustomerOut(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    is_active: bool
    projects: List[int] = []
    extra: Dict[str, Any] = {}
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ProjectAssignment(BaseModel):
    project_ids: List[int]


class CustomerProjects(BaseModel):
    customer_id: str
    project_ids: List[int]
    added: Optional[List[int]] = None  # set by POST: ids that were newly assigned


class SelectionIn(BaseModel):
    customer_id: str


class SelectionOut(BaseModel):
    user_id: str
    customer: Optional[CustomerOut] = None
    remembered: bool = False  # False when the first active customer was used as default
