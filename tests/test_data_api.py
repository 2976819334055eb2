"""Customer-scoped projects, dashboards, and metrics served from the fake DevLake."""
from datetime import date, timedelta


def _headers(customer):
    return {"X-Customer-ID": customer["id"]}


def test_projects_filtered_server_side(client, make_customer):
    acme = make_customer("Acme", projects=[1, 3, 99])
    resp = client.get("/projects", headers=_headers(acme))
    assert resp.status_code == 200
    assert [(p["id"], p["name"]) for p in resp.json()] == [(1, "payments"), (3, "search")]


def test_customer_without_projects_never_calls_upstream(client, devlake, make_customer):
    empty = make_customer("Empty")
    assert client.get("/projects", headers=_headers(empty)).json() == []
    dash = client.get("/dashboards/dora/data", headers=_headers(empty)).json()
    assert dash["data"] is None
    metrics = client.get("/metrics", headers=_headers(empty)).json()
    assert metrics["deploymentFrequency"] is None
    assert devlake.requests == []


def test_dashboard_data_is_scoped(client, devlake, make_customer):
    acme = make_customer("Acme", projects=[2, 1])
    resp = client.get("/dashboards/dora/data", params={"panel": "deploys"}, headers=_headers(acme))
    assert resp.status_code == 200
    body = resp.json()
    assert body["customer_id"] == acme["id"]
    assert body["project_ids"] == [1, 2]
    assert body["data"] == devlake.dashboard

    sent = devlake.requests[-1].url.params
    assert sent["customer"] == acme["id"]
    assert sent["projectIds"] == "1,2"
    assert sent["panel"] == "deploys"


def test_metrics_default_range_and_scope(client, devlake, make_customer):
    acme = make_customer("Acme", projects=[1, 2, 3])
    resp = client.get("/metrics", headers=_headers(acme))
    assert resp.status_code == 200
    body = resp.json()

    today = date.today()
    assert body["customerId"] == acme["id"]
    assert body["endDate"] == today.isoformat()
    assert body["startDate"] == (today - timedelta(days=29)).isoformat()
    assert body["projectIds"] == [1, 2, 3]
    assert body["deploymentFrequency"] == [
        {"date": "2024-03-01", "count": 4},
        {"date": "2024-03-02", "count": 2},
    ]
    assert all(isinstance(p["count"], int) for p in body["deploymentFrequency"])
    assert body["leadTime"] == [{"date": "2024-03-01", "hours": 12.5}]
    # empty upstream series renders as "no data"
    assert body["changeFailureRate"] is None

    sent = devlake.requests[-1].url.params
    assert sent["projectIds"] == "1,2,3"
    assert sent["startDate"] == body["startDate"]
    assert sent["endDate"] == body["endDate"]


def test_metrics_custom_range_and_project_filter(client, devlake, make_customer):
    acme = make_customer("Acme", projects=[1, 2])
    resp = client.get(
        "/metrics",
        params={"startDate": "2024-01-01", "endDate": "2024-01-31", "projectId": 2},
        headers=_headers(acme),
    )
    assert resp.status_code == 200
    body = resp.json()
    assert (body["startDate"], body["endDate"]) == ("2024-01-01", "2024-01-31")
    assert body["projectIds"] == [2]
    assert devlake.requests[-1].url.params["projectIds"] == "2"


def test_metrics_rejects_foreign_project(client, devlake, make_customer):
    acme = make_customer("Acme", projects=[1])
    resp = client.get("/metrics", params={"projectId": 4}, headers=_headers(acme))
    assert resp.status_code == 404
    assert resp.json()["code"] == "project_not_assigned"
    assert devlake.requests == []


def test_metrics_invalid_time_range(client, make_customer):
    acme = make_customer("Acme", projects=[1])
    resp = client.get("/metrics", params={"timeRange": "forever"}, headers=_headers(acme))
    assert resp.status_code == 422
    assert resp.json()["code"] == "invalid_time_range"

    resp = client.get("/metrics", params={"timeRange": "custom", "startDate": "2024-01-01"}, headers=_headers(acme))
    assert resp.status_code == 422


def test_upstream_server_error_is_retried_then_reported(client, devlake, make_customer):
    acme = make_customer("Acme", projects=[1])
    devlake.failures["/projects"] = [(503, {})] * 3
    resp = client.get("/projects", headers=_headers(acme))
    assert resp.status_code == 502
    body = resp.json()
    assert body["code"] == "upstream_error"
    assert body["message"] == "Request failed with status 503"
    assert body["details"]["upstream_status"] == 503
    assert devlake.paths().count("/projects") == 3


def test_upstream_recovers_within_retries(client, devlake, make_customer):
    acme = make_customer("Acme", projects=[1])
    devlake.failures["/projects"] = [(500, {})]
    resp = client.get("/projects", headers=_headers(acme))
    assert resp.status_code == 200
    assert [p["id"] for p in resp.json()] == [1]


def test_upstream_client_error_message_passed_through(client, devlake, make_customer):
    acme = make_customer("Acme", projects=[1])
    devlake.failures["/dashboards/nope/data"] = [(404, {"message": "dashboard nope not found"})]
    resp = client.get("/dashboards/nope/data", headers=_headers(acme))
    assert resp.status_code == 502
    assert resp.json()["message"] == "dashboard nope not found"
    # 4xx is not retried
    assert devlake.paths().count("/dashboards/nope/data") == 1


def test_metrics_csv_export(client, make_customer):
    acme = make_customer("Acme", projects=[1])
    resp = client.get("/metrics/export", headers=_headers(acme))
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/csv")
    assert f'filename="metrics-{acme["id"]}.csv"' in resp.headers["content-disposition"]
    lines = resp.text.strip().splitlines()
    assert lines[0] == "metric,date,value"
    assert "deploymentFrequency,2024-03-01,4" in lines
    assert "timeToRestore,2024-03-02,3.0" in lines
    assert not any(line.startswith("changeFailureRate") for line in lines)
