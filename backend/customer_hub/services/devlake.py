"""DevLake REST API client. Retries transient failures; every other failure becomes UpstreamError."""
from typing import Any, AsyncIterator

import httpx
from tenacity import (
    AsyncRetrying,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from ..config import get_settings
from ..errors import UpstreamError
from ..logging_config import get_logger

logger = get_logger(__name__)


def _is_retryable(exc: BaseException) -> bool:
    if isinstance(exc, httpx.TransportError):
        return True
    return isinstance(exc, httpx.HTTPStatusError) and exc.response.status_code >= 500


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return f"Request failed with status {response.status_code}"


def _log_retry(retry_state) -> None:
    logger.warning(
        "devlake request retry",
        attempt=retry_state.attempt_number,
        error=str(retry_state.outcome.exception()),
    )


def _normalize_project(raw: Any) -> dict | None:
    if not isinstance(raw, dict):
        return None
    try:
        pid = int(raw.get("id"))
    except (TypeError, ValueError):
        return None
    extra = {k: v for k, v in raw.items() if k not in ("id", "name", "description")}
    return {
        "id": pid,
        "name": raw.get("name") or f"Project {pid}",
        "description": raw.get("description"),
        "extra": extra,
    }


class DevLakeClient:
    def __init__(
        self,
        base_url: str,
        token: str = "",
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
        max_attempts: int = 3,
        retry_wait=None,
    ):
        headers = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            headers=headers,
            timeout=timeout,
            transport=transport,
        )
        self.max_attempts = max_attempts
        self.retry_wait = retry_wait or wait_exponential(multiplier=1, min=1, max=10)

    async def request(
        self,
        method: str,
        path: str,
        params: dict | None = None,
        json: Any = None,
    ) -> Any:
        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self.max_attempts),
                wait=self.retry_wait,
                retry=retry_if_exception(_is_retryable),
                before_sleep=_log_retry,
                reraise=True,
            ):
                with attempt:
                    response = await self._client.request(method, path, params=params, json=json)
                    if response.status_code >= 500:
                        response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error("devlake request failed", path=path, status_code=e.response.status_code)
            raise UpstreamError(_error_message(e.response), upstream_status=e.response.status_code) from e
        except httpx.TransportError as e:
            logger.error("devlake unreachable", path=path, error=str(e))
            raise UpstreamError(f"DevLake unreachable: {e}") from e

        if response.status_code >= 400:
            logger.warning("devlake request rejected", path=path, status_code=response.status_code)
            raise UpstreamError(_error_message(response), upstream_status=response.status_code)
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise UpstreamError("DevLake returned a non-JSON response", upstream_status=response.status_code) from e

    async def list_projects(self) -> list[dict]:
        """Accepts a bare list or DevLake's {"projects": [...], "count": n} envelope."""
        data = await self.request("GET", "/projects")
        if isinstance(data, dict):
            data = data.get("projects") or []
        projects = []
        for raw in data or []:
            p = _normalize_project(raw)
            if p is not None:
                projects.append(p)
        return projects

    async def get_dashboard_data(self, dashboard_id: str, params: dict | None = None) -> Any:
        return await self.request("GET", f"/dashboards/{dashboard_id}/data", params=params)

    async def get_metrics(self, params: dict | None = None) -> Any:
        return await self.request("GET", "/metrics", params=params)

    async def aclose(self) -> None:
        await self._client.aclose()


def build_devlake_client() -> DevLakeClient:
    settings = get_settings()
    return DevLakeClient(
        base_url=settings.devlake_api_url,
        token=settings.devlake_api_token,
        timeout=settings.devlake_timeout_seconds,
    )


async def get_devlake_client() -> AsyncIterator[DevLakeClient]:
    client = build_devlake_client()
    try:
        yield client
    finally:
        await client.aclose()
