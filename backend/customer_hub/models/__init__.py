"""SQLAlchemy models."""
from .customer import Customer, CustomerProject, CustomerSelection
from .connection import Connection

__all__ = [
    "Customer",
    "CustomerProject",
    "CustomerSelection",
    "Connection",
]
