"""Data connections owned by the current customer."""
from uuid import UUID
from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from ...core import CustomerContext, get_customer_context
from ...database import get_db
from ...errors import ConnectionNotFoundError
from ...logging_config import get_logger
from ...repositories import ConnectionRepository
from ...schemas import ConnectionCreate, ConnectionOut

router = APIRouter(prefix="/connections", tags=["connections"])
logger = get_logger(__name__)


@router.get("", response_model=list[ConnectionOut])
async def list_connections(
    context: CustomerContext = Depends(get_customer_context),
    db: AsyncSession = Depends(get_db),
):
    return await ConnectionRepository(db, context.customer_id).list_all()


@router.post("", response_model=ConnectionOut, status_code=status.HTTP_201_CREATED)
async def create_connection(
    body: ConnectionCreate,
    context: CustomerContext = Depends(get_customer_context),
    db: AsyncSession = Depends(get_db),
):
    if body.customer_id and body.customer_id != context.customer_id:
        raise HTTPException(status_code=400, detail="customerId does not match the selected customer")
    conn = await ConnectionRepository(db, context.customer_id).create(
        name=body.name,
        plugin=body.plugin,
        endpoint=body.endpoint,
        config=body.config,
    )
    logger.info("connection created", connection_id=str(conn.id), plugin=conn.plugin)
    return conn


@router.get("/{connection_id}", response_model=ConnectionOut)
async def get_connection(
    connection_id: UUID,
    context: CustomerContext = Depends(get_customer_context),
    db: AsyncSession = Depends(get_db),
):
    conn = await ConnectionRepository(db, context.customer_id).get(connection_id)
    if not conn:
        raise ConnectionNotFoundError(f"Connection not found: {connection_id}")
    return conn


@router.delete("/{connection_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_connection(
    connection_id: UUID,
    context: CustomerContext = Depends(get_customer_context),
    db: AsyncSession = Depends(get_db),
):
    deleted = await ConnectionRepository(db, context.customer_id).delete(connection_id)
    if not deleted:
        raise ConnectionNotFoundError(f"Connection not found: {connection_id}")
    logger.info("connection deleted", connection_id=str(connection_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
