"""DevLakeClient against an httpx.MockTransport."""
import httpx
import pytest
from tenacity import wait_none

from customer_hub.errors import UpstreamError
from customer_hub.services.devlake import DevLakeClient

pytestmark = pytest.mark.anyio


def _client(handler, **kwargs) -> DevLakeClient:
    return DevLakeClient(
        base_url="http://devlake.test/api/rest/",
        transport=httpx.MockTransport(handler),
        retry_wait=wait_none(),
        **kwargs,
    )


async def test_list_projects_accepts_bare_list_and_skips_bad_ids():
    def handler(request):
        return httpx.Response(200, json=[
            {"id": "7", "name": "seven", "owner": "ops"},
            {"id": "abc", "name": "broken"},
            {"name": "no id"},
            {"id": 8},
        ])

    client = _client(handler)
    try:
        projects = await client.list_projects()
    finally:
        await client.aclose()
    assert projects == [
        {"id": 7, "name": "seven", "description": None, "extra": {"owner": "ops"}},
        {"id": 8, "name": "Project 8", "description": None, "extra": {}},
    ]


async def test_list_projects_accepts_envelope():
    def handler(request):
        return httpx.Response(200, json={"projects": [{"id": 1, "name": "a"}], "count": 1})

    client = _client(handler)
    try:
        assert [p["id"] for p in await client.list_projects()] == [1]
    finally:
        await client.aclose()


async def test_token_sent_as_bearer():
    seen = {}

    def handler(request):
        seen["auth"] = request.headers.get("Authorization")
        seen["path"] = request.url.path
        return httpx.Response(200, json={})

    client = _client(handler, token="s3cret")
    try:
        await client.get_metrics({"projectIds": "1"})
    finally:
        await client.aclose()
    assert seen == {"auth": "Bearer s3cret", "path": "/api/rest/metrics"}


async def test_transport_errors_are_retried():
    calls = {"n": 0}

    def handler(request):
        calls["n"] += 1
        if calls["n"] < 3:
            raise httpx.ConnectError("connection refused", request=request)
        return httpx.Response(200, json={"ok": True})

    client = _client(handler)
    try:
        assert await client.get_dashboard_data("dora") == {"ok": True}
    finally:
        await client.aclose()
    assert calls["n"] == 3


async def test_unreachable_after_retries():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    client = _client(handler, max_attempts=2)
    try:
        with pytest.raises(UpstreamError) as exc:
            await client.list_projects()
    finally:
        await client.aclose()
    assert "unreachable" in exc.value.message
    assert exc.value.upstream_status is None


async def test_non_json_error_body():
    def handler(request):
        return httpx.Response(401, text="nope")

    client = _client(handler)
    try:
        with pytest.raises(UpstreamError) as exc:
            await client.get_metrics()
    finally:
        await client.aclose()
    assert exc.value.message == "Request failed with status 401"
    assert exc.value.upstream_status == 401
