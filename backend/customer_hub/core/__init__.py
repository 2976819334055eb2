"""Core utilities: customer context, dependencies."""
from .customer import (
    CustomerContext,
    CustomerContextMiddleware,
    extract_customer_id,
    get_customer_context,
    get_optional_customer_context,
)

__all__ = [
    "CustomerContext",
    "CustomerContextMiddleware",
    "extract_customer_id",
    "get_customer_context",
    "get_optional_customer_context",
]
