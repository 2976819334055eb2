"""HTTP client for the CustomerHub API that attaches the selected customer to every request."""
import os
from typing import Any, Optional

import requests
import structlog

API_BASE = os.environ.get("CUSTOMERHUB_API_URL", "http://localhost:8000")
CUSTOMER_HEADER = "X-Customer-ID"

logger = structlog.get_logger("customerhub.frontend")


class DataServiceError(Exception):
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class DataService:
    def __init__(self, base_url: str = API_BASE, timeout: float = 30):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.current_customer: Optional[dict] = None

    def set_customer_context(self, customer: Optional[dict]):
        self.current_customer = customer
        logger.info("data service customer context", customer=(customer or {}).get("name"))

    def get_headers(self) -> dict:
        headers = {"Content-Type": "application/json"}
        if self.current_customer:
            headers[CUSTOMER_HEADER] = str(self.current_customer["id"])
        return headers

    def get_contextual_url(self, url: str) -> str:
        """Append ?customer=<id> (or &customer=) unless the url already carries one."""
        if self.current_customer and "customer=" not in url:
            separator = "&" if "?" in url else "?"
            return f"{url}{separator}customer={self.current_customer['id']}"
        return url

    def request(self, endpoint: str, method: str = "GET", raw: bool = False, **kwargs) -> Any:
        url = self.get_contextual_url(f"{self.base_url}{endpoint}")
        headers = {**self.get_headers(), **kwargs.pop("headers", {})}
        try:
            r = requests.request(method, url, headers=headers, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            logger.error("api request failed", error=str(e))
            raise DataServiceError(f"Failed to fetch data: {e}") from e
        if not r.ok:
            try:
                body = r.json()
            except ValueError:
                body = {}
            message = None
            if isinstance(body, dict):
                message = body.get("message") or body.get("detail")
            if not isinstance(message, str):
                message = f"Request failed with status {r.status_code}"
            logger.error("api request failed", error=message, status_code=r.status_code)
            raise DataServiceError(message, status_code=r.status_code)
        if raw:
            return r.content
        if r.status_code == 204 or not r.content:
            return None
        return r.json()

    # customers

    def list_customers(self) -> list:
        return self.request("/customers")

    def get_current_customer(self, user_id: str) -> dict:
        return self.request("/customers/current", headers={"X-User-ID": user_id})

    def select_customer(self, user_id: str, customer_id: str) -> dict:
        return self.request(
            "/customers/current",
            method="PUT",
            json={"customer_id": customer_id},
            headers={"X-User-ID": user_id},
        )

    # customer-scoped data

    def get_projects(self) -> list:
        if not self.current_customer:
            return []
        return self.request("/projects")

    def get_dashboard_data(self, dashboard_id: str) -> Optional[dict]:
        if not self.current_customer:
            return None
        return self.request(f"/dashboards/{dashboard_id}/data")

    @staticmethod
    def _metric_params(params: Optional[dict]) -> dict:
        return {
            k: v for k, v in (params or {}).items()
            if v is not None and not (k == "projectId" and v == "all")
        }

    def get_metrics(self, params: Optional[dict] = None) -> Optional[dict]:
        if not self.current_customer:
            return None
        return self.request("/metrics", params=self._metric_params(params))

    def export_metrics(self, params: Optional[dict] = None) -> Optional[bytes]:
        if not self.current_customer:
            return None
        return self.request("/metrics/export", params=self._metric_params(params), raw=True)

    def list_connections(self) -> list:
        if not self.current_customer:
            return []
        return self.request("/connections")

    def create_connection(self, connection_data: dict) -> Optional[dict]:
        if not self.current_customer:
            return None
        return self.request(
            "/connections",
            method="POST",
            json={**connection_data, "customerId": self.current_customer["id"]},
        )
