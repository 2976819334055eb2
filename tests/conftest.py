"""
Shared fixtures. The database is an on-disk SQLite file and the DevLake API is
an in-process fake served through httpx.MockTransport.

Run with: pytest -q
"""
import asyncio
import os
import tempfile
from contextlib import contextmanager

# Must be set before customer_hub is imported: the engine is built at import time
_DB_DIR = tempfile.mkdtemp(prefix="customerhub-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{os.path.join(_DB_DIR, 'test.db')}"
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ["SEED_DEMO_CUSTOMERS"] = "false"

import httpx  # noqa: E402
import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from tenacity import wait_none  # noqa: E402

from customer_hub.config import get_settings  # noqa: E402
from customer_hub.database import Base, engine  # noqa: E402
from customer_hub.main import app  # noqa: E402
from customer_hub.services.devlake import DevLakeClient, get_devlake_client  # noqa: E402

DEVLAKE_BASE = "http://devlake.test/api/rest"


class FakeDevLake:
    """Minimal stand-in for the DevLake REST API."""

    def __init__(self):
        self.projects = [
            {"id": 1, "name": "payments"},
            {"id": 2, "name": "checkout"},
            {"id": 3, "name": "search"},
            {"id": 4, "name": "warehouse"},
            {"id": 5, "name": "billing"},
        ]
        self.metrics = {
            "deploymentFrequency": [{"date": "2024-03-01", "count": 4}, {"date": "2024-03-02", "count": 2}],
            "leadTime": [{"date": "2024-03-01", "hours": 12.5}],
            "changeFailureRate": [],
            "timeToRestore": [{"date": "2024-03-02", "hours": 3}],
        }
        self.dashboard = {"panels": [{"title": "Deployments", "value": 6}]}
        self.requests: list[httpx.Request] = []
        # path -> list of (status, body) returned before the normal response
        self.failures: dict[str, list[tuple[int, dict]]] = {}

    def paths(self) -> list[str]:
        return [self._path(r) for r in self.requests]

    @staticmethod
    def _path(request: httpx.Request) -> str:
        return request.url.path[len("/api/rest"):]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = self._path(request)
        queued = self.failures.get(path)
        if queued:
            status, body = queued.pop(0)
            return httpx.Response(status, json=body)
        if path == "/projects":
            return httpx.Response(200, json={"projects": self.projects, "count": len(self.projects)})
        if path == "/metrics":
            return httpx.Response(200, json=self.metrics)
        if path.startswith("/dashboards/") and path.endswith("/data"):
            return httpx.Response(200, json=self.dashboard)
        return httpx.Response(404, json={"message": "not found"})

    def client(self, **kwargs) -> DevLakeClient:
        return DevLakeClient(
            base_url=DEVLAKE_BASE,
            transport=httpx.MockTransport(self.handler),
            retry_wait=wait_none(),
            **kwargs,
        )


async def _reset_db():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@contextmanager
def _running_app(devlake: FakeDevLake):
    async def _override():
        client = devlake.client()
        try:
            yield client
        finally:
            await client.aclose()

    app.dependency_overrides[get_devlake_client] = _override
    try:
        with TestClient(app) as c:
            yield c
    finally:
        app.dependency_overrides.clear()
        asyncio.run(_reset_db())


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def devlake():
    return FakeDevLake()


@pytest.fixture
def client(devlake):
    with _running_app(devlake) as c:
        yield c


@pytest.fixture
def seeded_client(devlake, monkeypatch):
    monkeypatch.setattr(get_settings(), "seed_demo_customers", True)
    with _running_app(devlake) as c:
        yield c


@pytest.fixture
def make_customer(client):
    def _make(name="Acme Corporation", projects=None, **fields):
        body = {"name": name, "projects": projects or [], **fields}
        resp = client.post("/customers", json=body)
        assert resp.status_code == 201, resp.text
        return resp.json()
    return _make
