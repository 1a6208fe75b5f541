from sqlalchemy import select

from app.storecare.db.models import AuditEvent, ProductCategory
from tests.storecare_helpers import bearer, seed_and_login


def test_replay_returns_stored_response(client, db_session):
    token = seed_and_login(client, db_session)
    headers = bearer(token, **{"Idempotency-Key": "category-shoes-1"})

    first = client.post("/api/categories", headers=headers, json={"category_name": "Shoes"})
    assert first.status_code == 201

    second = client.post("/api/categories", headers=headers, json={"category_name": "Shoes"})
    assert second.status_code == 201
    assert second.headers["X-Idempotency-Result"] == "IDEMPOTENCY_REPLAY"
    assert second.json()["category"]["id"] == first.json()["category"]["id"]

    rows = db_session.execute(select(ProductCategory)).scalars().all()
    assert len(rows) == 1


def test_key_reuse_with_different_payload_conflicts(client, db_session):
    token = seed_and_login(client, db_session)
    headers = bearer(token, **{"Idempotency-Key": "category-1"})

    assert client.post("/api/categories", headers=headers, json={"category_name": "Shoes"}).status_code == 201
    response = client.post("/api/categories", headers=headers, json={"category_name": "Bags"})
    assert response.status_code == 409
    assert response.json()["code"] == "IDEMPOTENCY_KEY_REUSED_WITH_DIFFERENT_PAYLOAD"


def test_without_key_each_call_executes(client, db_session):
    token = seed_and_login(client, db_session)

    assert client.post("/api/categories", headers=bearer(token), json={"category_name": "Shoes"}).status_code == 201
    duplicate = client.post("/api/categories", headers=bearer(token), json={"category_name": "Shoes"})
    assert duplicate.status_code == 422


def test_mutations_leave_an_audit_trail(client, db_session):
    token = seed_and_login(client, db_session)
    response = client.post(
        "/api/categories",
        headers=bearer(token, **{"X-Trace-ID": "trace-audit-1"}),
        json={"category_name": "Shoes"},
    )
    category_id = response.json()["category"]["id"]

    event = (
        db_session.execute(select(AuditEvent).where(AuditEvent.action == "category.create")).scalars().one()
    )
    assert event.entity_id == category_id
    assert event.trace_id == "trace-audit-1"
    assert event.actor_role == "SuperAdmin"
    assert event.result == "success"


def test_failed_login_is_audited(client, db_session):
    seed_and_login(client, db_session)

    response = client.post("/api/auth/login", json={"email": "superadmin@example.com", "password": "wrong-pass"})
    assert response.status_code == 401

    event = (
        db_session.execute(select(AuditEvent).where(AuditEvent.action == "auth.login.failed")).scalars().one()
    )
    assert event.result == "failure"
    assert event.event_metadata == {"error_code": "INVALID_CREDENTIALS"}
