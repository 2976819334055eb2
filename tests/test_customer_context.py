"""Resolving the customer context from headers and the query string."""
import structlog
from fastapi import FastAPI
from fastapi.testclient import TestClient

from customer_hub.core import CustomerContextMiddleware


def test_missing_customer_is_rejected(client):
    resp = client.get("/projects")
    assert resp.status_code == 400
    body = resp.json()
    assert body["code"] == "customer_required"
    assert body["message"] == "Please select a customer first"


def test_blank_header_counts_as_missing(client):
    resp = client.get("/projects", headers={"X-Customer-ID": "   "})
    assert resp.status_code == 400


def test_unknown_customer(client):
    resp = client.get("/projects", headers={"X-Customer-ID": "nobody"})
    assert resp.status_code == 404
    assert resp.json()["code"] == "customer_not_found"


def test_inactive_customer(client, make_customer):
    c = make_customer("Acme", projects=[1])
    client.patch(f"/customers/{c['id']}", json={"is_active": False})
    resp = client.get("/projects", headers={"X-Customer-ID": c["id"]})
    assert resp.status_code == 403
    assert resp.json()["code"] == "customer_inactive"


def test_query_param_fallback(client, make_customer):
    c = make_customer("Acme", projects=[2])
    resp = client.get("/projects", params={"customer": c["id"]})
    assert resp.status_code == 200
    assert [p["id"] for p in resp.json()] == [2]


def test_header_wins_over_query_param(client, make_customer):
    acme = make_customer("Acme", projects=[1])
    globex = make_customer("Globex", projects=[4])
    resp = client.get(
        "/projects",
        params={"customer": globex["id"]},
        headers={"X-Customer-ID": acme["id"]},
    )
    assert resp.status_code == 200
    assert [p["id"] for p in resp.json()] == [1]


def test_customer_management_does_not_need_context(client):
    assert client.get("/customers").status_code == 200


def _context_app():
    app = FastAPI()
    app.add_middleware(CustomerContextMiddleware)

    @app.get("/log-context")
    async def log_context():
        return structlog.contextvars.get_contextvars()

    return app


def test_middleware_binds_customer_to_log_context():
    with TestClient(_context_app()) as c:
        bound = c.get("/log-context", headers={"X-Customer-ID": "cust-007", "X-Request-ID": "req-1"}).json()
        assert bound["customer_id"] == "cust-007"
        assert bound["request_id"] == "req-1"
        assert (bound["method"], bound["path"]) == ("GET", "/log-context")

        # nothing leaks into the next request
        bound = c.get("/log-context").json()
        assert "customer_id" not in bound
        assert bound["request_id"] != "req-1"
