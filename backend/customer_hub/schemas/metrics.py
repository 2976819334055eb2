"""DORA metrics and dashboard schemas. Serialized in camelCase for the dashboard client."""
import datetime as dt
from pydantic import BaseModel
from pydantic.alias_generators import to_camel
from typing import List, Optional, Dict, Any, Union


class _CamelModel(BaseModel):
    class Config:
        alias_generator = to_camel
        populate_by_name = True


class DeploymentPoint(_CamelModel):
    date: dt.date
    count: Union[int, float]  # integer counts stay integers


class HoursPoint(_CamelModel):
    date: dt.date
    hours: float


class PercentagePoint(_CamelModel):
    date: dt.date
    percentage: float


class MetricsQuery(_CamelModel):
    time_range: Optional[str] = None  # last7days | last30days | last90days | thisYear | custom
    start_date: Optional[dt.date] = None
    end_date: Optional[dt.date] = None
    project_id: Optional[int] = None


class MetricsOut(_CamelModel):
    customer_id: str
    start_date: dt.date
    end_date: dt.date
    project_ids: List[int]
    # None when the upstream has no data for the series
    deployment_frequency: Optional[List[DeploymentPoint]] = None
    lead_time: Optional[List[HoursPoint]] = None
    change_failure_rate: Optional[List[PercentagePoint]] = None
    time_to_restore: Optional[List[HoursPoint]] = None


class ProjectOut(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    extra: Dict[str, Any] = {}


class DashboardData(BaseModel):
    dashboard_id: str
    customer_id: str
    project_ids: List[int]
    data: Any = None
