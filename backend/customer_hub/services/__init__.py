"""Business logic services."""
from .customers import CustomerService
from .selection import SelectionService
from .devlake import DevLakeClient, get_devlake_client
from .customer_data import CustomerDataService, resolve_time_range

__all__ = [
    "CustomerService",
    "SelectionService",
    "DevLakeClient",
    "get_devlake_client",
    "CustomerDataService",
    "resolve_time_range",
]
