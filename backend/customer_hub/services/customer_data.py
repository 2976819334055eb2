"""
Customer-aware access to DevLake data.

Everything read from DevLake is narrowed to the projects assigned to the
customer in the request context. A customer with no projects never causes an
unscoped upstream call.
"""
import csv
import io
from datetime import date, timedelta
from typing import Any, Optional

from pydantic import BaseModel, ValidationError

from ..core import CustomerContext
from ..errors import InvalidTimeRangeError, ProjectNotAssignedError
from ..logging_config import get_logger
from ..schemas import (
    MetricsQuery,
    MetricsOut,
    DeploymentPoint,
    HoursPoint,
    PercentagePoint,
    ProjectOut,
    DashboardData,
)
from .devlake import DevLakeClient

logger = get_logger(__name__)

ROLLING_RANGES = {"last7days": 7, "last30days": 30, "last90days": 90}
DEFAULT_TIME_RANGE = "last30days"

# attribute on MetricsOut -> (upstream keys, point model, value field)
SERIES = {
    "deployment_frequency": (("deploymentFrequency", "deployment_frequency"), DeploymentPoint, "count"),
    "lead_time": (("leadTime", "lead_time"), HoursPoint, "hours"),
    "change_failure_rate": (("changeFailureRate", "change_failure_rate"), PercentagePoint, "percentage"),
    "time_to_restore": (("timeToRestore", "time_to_restore"), HoursPoint, "hours"),
}


def resolve_time_range(
    time_range: Optional[str],
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    today: Optional[date] = None,
) -> tuple[date, date]:
    """Turn a named range (or an explicit custom pair) into inclusive [start, end] dates."""
    today = today or date.today()
    if not time_range:
        time_range = "custom" if (start_date or end_date) else DEFAULT_TIME_RANGE

    if time_range in ROLLING_RANGES:
        return today - timedelta(days=ROLLING_RANGES[time_range] - 1), today
    if time_range == "thisYear":
        return date(today.year, 1, 1), today
    if time_range == "custom":
        if start_date is None or end_date is None:
            raise InvalidTimeRangeError("Custom range requires both startDate and endDate")
        if start_date > end_date:
            raise InvalidTimeRangeError("startDate must not be after endDate")
        return start_date, end_date
    raise InvalidTimeRangeError(
        f"Unknown timeRange: {time_range}",
        details={"allowed": sorted(ROLLING_RANGES) + ["thisYear", "custom"]},
    )


def _series(payload: dict, keys: tuple[str, ...], model: type[BaseModel]) -> Optional[list]:
    raw = None
    for key in keys:
        if payload.get(key):
            raw = payload[key]
            break
    if not isinstance(raw, list):
        return None
    points = []
    for item in raw:
        try:
            points.append(model.model_validate(item))
        except ValidationError:
            logger.warning("skipping malformed metric point", series=keys[0], point=item)
    return points or None


class CustomerDataService:
    def __init__(self, client: DevLakeClient, context: CustomerContext):
        self.client = client
        self.context = context

    def _scope_params(self, project_ids: list[int]) -> dict:
        return {
            "customer": self.context.customer_id,
            "projectIds": ",".join(str(p) for p in project_ids),
        }

    async def get_projects(self) -> list[ProjectOut]:
        if not self.context.project_ids:
            return []
        allowed = set(self.context.project_ids)
        projects = await self.client.list_projects()
        return [ProjectOut(**p) for p in projects if p["id"] in allowed]

    async def get_dashboard_data(self, dashboard_id: str, extra_params: dict | None = None) -> DashboardData:
        data: Any = None
        if self.context.project_ids:
            params = dict(extra_params or {})
            params.update(self._scope_params(self.context.project_ids))
            data = await self.client.get_dashboard_data(dashboard_id, params=params)
        return DashboardData(
            dashboard_id=dashboard_id,
            customer_id=self.context.customer_id,
            project_ids=self.context.project_ids,
            data=data,
        )

    def _project_ids_for(self, project_id: Optional[int]) -> list[int]:
        if project_id is None:
            return list(self.context.project_ids)
        if project_id not in self.context.project_ids:
            raise ProjectNotAssignedError(self.context.customer_id, project_id)
        return [project_id]

    async def get_metrics(self, query: MetricsQuery, today: Optional[date] = None) -> MetricsOut:
        start, end = resolve_time_range(query.time_range, query.start_date, query.end_date, today=today)
        project_ids = self._project_ids_for(query.project_id)
        out = MetricsOut(customer_id=self.context.customer_id, start_date=start, end_date=end, project_ids=project_ids)
        if not project_ids:
            return out

        params = self._scope_params(project_ids)
        params.update({"startDate": start.isoformat(), "endDate": end.isoformat()})
        payload = await self.client.get_metrics(params=params)
        if not isinstance(payload, dict):
            logger.warning("unexpected metrics payload", payload_type=type(payload).__name__)
            return out
        for attr, (keys, model, _) in SERIES.items():
            setattr(out, attr, _series(payload, keys, model))
        return out

    async def export_metrics_csv(self, query: MetricsQuery, today: Optional[date] = None) -> str:
        metrics = await self.get_metrics(query, today=today)
        buf = io.StringIO()
        writer = csv.writer(buf, lineterminator="\n")
        writer.writerow(["metric", "date", "value"])
        for attr, (keys, _, value_field) in SERIES.items():
            for point in getattr(metrics, attr) or []:
                writer.writerow([keys[0], point.date.isoformat(), getattr(point, value_field)])
        return buf.getvalue()
