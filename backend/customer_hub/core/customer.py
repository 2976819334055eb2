"""Customer context from headers (or query string) for request scoping."""
from typing import List, Optional
from uuid import uuid4

from fastapi import Depends, Request
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from ..config import get_settings
from ..database import get_db
from ..errors import CustomerRequiredError, CustomerNotFoundError, CustomerInactiveError
from ..logging_config import bind_customer_context, clear_request_context
from ..repositories import CustomerRepository, CustomerProjectRepository


class CustomerContext(BaseModel):
    customer_id: str
    customer_name: str
    project_ids: List[int] = []


def extract_customer_id(request: Request) -> Optional[str]:
    """Header first, then the query parameter; blank values count as missing."""
    settings = get_settings()
    raw = request.headers.get(settings.customer_header)
    if not raw or not raw.strip():
        raw = request.query_params.get(settings.customer_query_param)
    if raw is None:
        return None
    raw = raw.strip()
    return raw or None


class CustomerContextMiddleware(BaseHTTPMiddleware):
    """
    Puts the requested customer id on ``request.state.customer_id`` and on the
    structured log context. Never rejects; routes that need a customer use
    ``get_customer_context``.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        customer_id = extract_customer_id(request)
        request.state.customer_id = customer_id
        try:
            bind_customer_context(
                customer_id=customer_id,
                request_id=request.headers.get("X-Request-ID") or str(uuid4()),
                path=request.url.path,
                method=request.method,
            )
            return await call_next(request)
        finally:
            clear_request_context()


async def _load_context(db: AsyncSession, customer_id: str) -> CustomerContext:
    customer = await CustomerRepository(db).get(customer_id)
    if customer is None:
        raise CustomerNotFoundError(customer_id)
    if not customer.is_active:
        raise CustomerInactiveError(customer_id)
    project_ids = await CustomerProjectRepository(db, customer.id).list_project_ids()
    return CustomerContext(customer_id=customer.id, customer_name=customer.name, project_ids=project_ids)


async def get_optional_customer_context(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> Optional[CustomerContext]:
    customer_id = getattr(request.state, "customer_id", None)
    if customer_id is None:
        # Middleware not installed (e.g. a bare router in tests)
        customer_id = extract_customer_id(request)
    if not customer_id:
        return None
    return await _load_context(db, customer_id)


async def get_customer_context(
    context: Optional[CustomerContext] = Depends(get_optional_customer_context),
) -> CustomerContext:
    if context is None:
        raise CustomerRequiredError()
    return context
