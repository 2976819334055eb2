"""Data access layer with customer isolation."""
from .customer import CustomerRepository, CustomerProjectRepository, SelectionRepository
from .connection import ConnectionRepository

__all__ = [
    "CustomerRepository",
    "CustomerProjectRepository",
    "SelectionRepository",
    "ConnectionRepository",
]
