"""Domain errors raised by services, and their HTTP mapping."""
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from .logging_config import get_logger

logger = get_logger(__name__)


class DomainError(Exception):
    """Base class for service-level errors. Services raise these, never HTTPException."""
    code: str = "domain_error"
    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(
        self,
        message: str = "",
        *,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message or self.__class__.__name__
        self.details = details
        super().__init__(self.message)


class CustomerRequiredError(DomainError):
    code = "customer_required"
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str = "Please select a customer first", **kwargs: Any) -> None:
        super().__init__(message, **kwargs)


class CustomerNotFoundError(DomainError):
    code = "customer_not_found"
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, customer_id: str) -> None:
        super().__init__(f"Customer not found: {customer_id}", details={"customer_id": customer_id})


class CustomerInactiveError(DomainError):
    code = "customer_inactive"
    status_code = status.HTTP_403_FORBIDDEN

    def __init__(self, customer_id: str) -> None:
        super().__init__(f"Customer is inactive: {customer_id}", details={"customer_id": customer_id})


class CustomerConflictError(DomainError):
    code = "customer_conflict"
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, customer_id: str) -> None:
        super().__init__(f"Customer already exists: {customer_id}", details={"customer_id": customer_id})


class ProjectNotAssignedError(DomainError):
    code = "project_not_assigned"
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, customer_id: str, project_id: int) -> None:
        super().__init__(
            f"Project {project_id} is not assigned to customer {customer_id}",
            details={"customer_id": customer_id, "project_id": project_id},
        )


class ConnectionNotFoundError(DomainError):
    code = "connection_not_found"
    status_code = status.HTTP_404_NOT_FOUND


class InvalidTimeRangeError(DomainError):
    code = "invalid_time_range"
    status_code = 422  # Unprocessable Content


class UpstreamError(DomainError):
    """DevLake returned an error or could not be reached."""
    code = "upstream_error"
    status_code = status.HTTP_502_BAD_GATEWAY

    def __init__(self, message: str, upstream_status: Optional[int] = None) -> None:
        super().__init__(message, details={"upstream_status": upstream_status})
        self.upstream_status = upstream_status


async def _domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    log = logger.warning if exc.status_code < 500 else logger.error
    log("request failed", code=exc.code, status_code=exc.status_code, error=exc.message, path=request.url.path)
    # "message" mirrors "detail" for clients that read either key
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "detail": exc.message,
            "message": exc.message,
            "code": exc.code,
            "details": exc.details or {},
        },
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DomainError, _domain_error_handler)
