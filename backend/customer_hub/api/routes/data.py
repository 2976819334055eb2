"""Customer-scoped views of DevLake data: projects, dashboards, metrics."""
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, Response

from ...config import get_settings
from ...core import CustomerContext, get_customer_context
from ...schemas import MetricsQuery, MetricsOut, ProjectOut, DashboardData
from ...services import CustomerDataService, DevLakeClient, get_devlake_client

router = APIRouter(tags=["data"])


def _data_service(
    context: CustomerContext = Depends(get_customer_context),
    client: DevLakeClient = Depends(get_devlake_client),
) -> CustomerDataService:
    return CustomerDataService(client, context)


def _metrics_query(
    time_range: Optional[str] = Query(None, alias="timeRange"),
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    project_id: Optional[int] = Query(None, alias="projectId"),
) -> MetricsQuery:
    return MetricsQuery(time_range=time_range, start_date=start_date, end_date=end_date, project_id=project_id)


@router.get("/projects", response_model=list[ProjectOut])
async def list_projects(service: CustomerDataService = Depends(_data_service)):
    return await service.get_projects()


@router.get("/dashboards/{dashboard_id}/data", response_model=DashboardData)
async def get_dashboard_data(
    dashboard_id: str,
    request: Request,
    service: CustomerDataService = Depends(_data_service),
):
    # Forward any other filters; the scope params are always set by the service
    skip = {get_settings().customer_query_param}
    extra = {k: v for k, v in request.query_params.items() if k not in skip}
    return await service.get_dashboard_data(dashboard_id, extra)


@router.get("/metrics", response_model=MetricsOut)
async def get_metrics(
    query: MetricsQuery = Depends(_metrics_query),
    service: CustomerDataService = Depends(_data_service),
):
    return await service.get_metrics(query)


@router.get("/metrics/export")
async def export_metrics(
    query: MetricsQuery = Depends(_metrics_query),
    service: CustomerDataService = Depends(_data_service),
):
    content = await service.export_metrics_csv(query)
    filename = f"metrics-{service.context.customer_id}.csv"
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
