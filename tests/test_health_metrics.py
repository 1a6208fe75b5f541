from tests.storecare_helpers import bearer, seed_and_login


def test_health_and_ready(client):
    health = client.get("/health")
    assert health.status_code == 200
    assert health.json()["status"] == "ok"

    ready = client.get("/ready")
    assert ready.status_code == 200
    assert ready.json()["status"] == "ready"


def test_trace_id_is_echoed(client):
    response = client.get("/health", headers={"X-Trace-ID": "trace-123"})
    assert response.headers["X-Trace-ID"] == "trace-123"
    assert response.json()["trace_id"] == "trace-123"

    generated = client.get("/health")
    assert generated.headers["X-Trace-ID"]


def test_error_envelope_carries_trace_id(client):
    response = client.get("/api/stores", headers={"X-Trace-ID": "trace-err"})
    assert response.status_code == 401
    body = response.json()
    assert set(body) == {"code", "message", "details", "trace_id"}
    assert body["trace_id"] == "trace-err"


def test_validation_errors_use_envelope(client, db_session):
    token = seed_and_login(client, db_session)

    response = client.post("/api/categories", headers=bearer(token), json={"category_name": ""})
    assert response.status_code == 422
    body = response.json()
    assert body["code"] == "VALIDATION_ERROR"
    assert body["details"]["errors"][0]["field"] == "category_name"


def test_metrics_exposed(client, db_session):
    token = seed_and_login(client, db_session)
    client.get("/api/categories", headers=bearer(token))

    response = client.get("/metrics")
    assert response.status_code == 200
    assert "http_requests_total" in response.text
