"""Pydantic request/response schemas."""
from .customer import (
    CustomerCreate,
    CustomerUpdate,
    CustomerOut,
    ProjectAssignment,
    CustomerProjects,
    SelectionIn,
    SelectionOut,
)
from .connection import ConnectionCreate, ConnectionOut
from .metrics import (
    MetricsQuery,
    MetricsOut,
    DeploymentPoint,
    HoursPoint,
    PercentagePoint,
    ProjectOut,
    DashboardData,
)

__all__ = [
    "CustomerCreate",
    "CustomerUpdate",
    "CustomerOut",
    "ProjectAssignment",
    "CustomerProjects",
    "SelectionIn",
    "SelectionOut",
    "ConnectionCreate",
    "ConnectionOut",
    "MetricsQuery",
    "MetricsOut",
    "DeploymentPoint",
    "HoursPoint",
    "PercentagePoint",
    "ProjectOut",
    "DashboardData",
]
