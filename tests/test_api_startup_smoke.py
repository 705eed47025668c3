from fastapi.testclient import TestClient


REQUIRED_ROUTES = {
    "/health",
    "/api/health",
    "/api/customers",
    "/api/customers/{customer_id}",
    "/api/customers/{customer_id}/analytics",
    "/api/orders",
    "/api/orders/daily/{order_date}",
    "/api/orders/{order_id}",
    "/api/orders/{order_id}/status",
    "/api/subscriptions",
    "/api/subscriptions/customer/{customer_id}",
    "/api/subscriptions/generate-orders",
    "/api/subscriptions/{subscription_id}",
    "/api/reports/customer-analysis",
    "/api/reports/top-customers-30days",
    "/api/reports/daily-average",
    "/api/reports/weekly-trend",
    "/api/reports/monthly-trend",
    "/api/reports/inactive-customers",
    "/api/reports/delivery-time-analysis",
    "/api/reports/daily-distribution",
    "/api/reports/dashboard",
    "/api/backup/manual",
    "/api/backup/info",
}


def test_api_startup_and_router_registration(monkeypatch):
    from dairy_app import main

    monkeypatch.setattr(main, "_startup_tasks", lambda: None)

    with TestClient(main.app) as client:
        response = client.get("/")
        health_response = client.get("/api/health")
        docs_response = client.get("/docs")
        openapi_response = client.get("/openapi.json")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}
    assert health_response.json() == {"status": "OK", "message": "Server is running"}
    assert docs_response.status_code == 200
    assert openapi_response.status_code == 200

    paths = set(openapi_response.json()["paths"]) | {getattr(route, "path", None) for route in main.app.routes}
    assert REQUIRED_ROUTES.issubset(paths)


def test_startup_runs_database_checks(monkeypatch):
    from dairy_app import main

    calls = []
    monkeypatch.setattr(main, "ensure_database_directory", lambda: calls.append("directory"))
    monkeypatch.setattr(main, "apply_migrations", lambda **_kwargs: calls.append("apply"))
    monkeypatch.setattr(main, "ensure_migrations_applied", lambda **_kwargs: calls.append("check"))

    with TestClient(main.app):
        pass

    assert calls == ["directory", "apply", "check"]


def test_request_id_header_is_echoed(client):
    response = client.get("/api/health", headers={"X-Request-ID": "req-123"})

    assert response.headers["X-Request-ID"] == "req-123"
