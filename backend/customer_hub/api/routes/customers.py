"""Customer management, project assignment, and current-customer selection."""
from fastapi import APIRouter, Depends, Header, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from ...database import get_db
from ...schemas import (
    CustomerCreate,
    CustomerUpdate,
    CustomerOut,
    ProjectAssignment,
    CustomerProjects,
    SelectionIn,
    SelectionOut,
)
from ...services import CustomerService, SelectionService

router = APIRouter(prefix="/customers", tags=["customers"])


@router.get("", response_model=list[CustomerOut])
async def list_customers(
    include_inactive: bool = Query(False),
    db: AsyncSession = Depends(get_db),
):
    return await CustomerService(db).list_customers(include_inactive=include_inactive)


@router.post("", response_model=CustomerOut, status_code=status.HTTP_201_CREATED)
async def create_customer(body: CustomerCreate, db: AsyncSession = Depends(get_db)):
    return await CustomerService(db).create_customer(body)


# /current is declared before /{customer_id} so it is not captured as an id
@router.get("/current", response_model=SelectionOut)
async def get_current_customer(
    x_user_id: str = Header("default", alias="X-User-ID"),
    db: AsyncSession = Depends(get_db),
):
    return await SelectionService(db).get_current(x_user_id)


@router.put("/current", response_model=SelectionOut)
async def select_customer(
    body: SelectionIn,
    x_user_id: str = Header("default", alias="X-User-ID"),
    db: AsyncSession = Depends(get_db),
):
    return await SelectionService(db).select(x_user_id, body.customer_id)


@router.get("/{customer_id}", response_model=CustomerOut)
async def get_customer(customer_id: str, db: AsyncSession = Depends(get_db)):
    return await CustomerService(db).get_customer(customer_id)


@router.patch("/{customer_id}", response_model=CustomerOut)
async def update_customer(customer_id: str, body: CustomerUpdate, db: AsyncSession = Depends(get_db)):
    return await CustomerService(db).update_customer(customer_id, body)


@router.delete("/{customer_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_customer(customer_id: str, db: AsyncSession = Depends(get_db)):
    await CustomerService(db).delete_customer(customer_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{customer_id}/projects", response_model=CustomerProjects)
async def list_customer_projects(customer_id: str, db: AsyncSession = Depends(get_db)):
    return await CustomerService(db).list_projects(customer_id)


@router.post("/{customer_id}/projects", response_model=CustomerProjects)
async def assign_projects(customer_id: str, body: ProjectAssignment, db: AsyncSession = Depends(get_db)):
    return await CustomerService(db).assign_projects(customer_id, body.project_ids)


@router.put("/{customer_id}/projects", response_model=CustomerProjects)
async def replace_projects(customer_id: str, body: ProjectAssignment, db: AsyncSession = Depends(get_db)):
    return await CustomerService(db).set_projects(customer_id, body.project_ids)


@router.delete("/{customer_id}/projects/{project_id}", status_code=status.HTTP_204_NO_CONTENT)
async def unassign_project(customer_id: str, project_id: int, db: AsyncSession = Depends(get_db)):
    await CustomerService(db).unassign_project(customer_id, project_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
