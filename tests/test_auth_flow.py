from sqlalchemy import select

from app.storecare.core.context import STOREADMIN
from app.storecare.core.lookups import STATUS_INACTIVE, STATUS_SUSPENDED
from app.storecare.db.models import Store, User
from app.storecare.db.seed import run_seed
from tests.storecare_helpers import PASSWORD, bearer, create_store, create_user, login, seed_and_login


def _register(client, **overrides):
    payload = {
        "full_name": "Jane Doe",
        "email": "jane@example.com",
        "password": "Secret123",
        "confirm_password": "Secret123",
    }
    payload.update(overrides)
    return client.post("/api/auth/register", json=payload)


def test_login_success_sets_last_login(client, db_session):
    run_seed(db_session)
    user = create_user(db_session, email="jane@example.com")

    response = client.post("/api/auth/login", json={"email": "Jane@Example.com", "password": PASSWORD})
    assert response.status_code == 200
    body = response.json()
    assert body["access_token"]
    assert body["token_type"] == "bearer"
    assert body["role"] == "Customer"
    assert body["store_id"] is None

    db_session.expire_all()
    assert db_session.get(User, user.id).last_login is not None


def test_login_invalid_password(client, db_session):
    run_seed(db_session)
    create_user(db_session, email="jane@example.com")

    response = client.post("/api/auth/login", json={"email": "jane@example.com", "password": "wrong-pass"})
    assert response.status_code == 401
    assert response.json()["code"] == "INVALID_CREDENTIALS"


def test_login_blocked_for_inactive_and_suspended_status(client, db_session):
    run_seed(db_session)
    create_user(db_session, email="inactive@example.com", status=STATUS_INACTIVE)
    create_user(db_session, email="suspended@example.com", status=STATUS_SUSPENDED)

    for email in ("inactive@example.com", "suspended@example.com"):
        response = client.post("/api/auth/login", json={"email": email, "password": PASSWORD})
        assert response.status_code == 403
        assert response.json()["code"] == "USER_INACTIVE"


def test_login_rejects_retired_user(client, db_session):
    run_seed(db_session)
    create_user(db_session, email="gone@example.com", active=False)

    response = client.post("/api/auth/login", json={"email": "gone@example.com", "password": PASSWORD})
    assert response.status_code == 401
    assert response.json()["code"] == "INVALID_CREDENTIALS"


def test_store_admin_token_carries_store(client, db_session):
    run_seed(db_session)
    store = create_store(db_session, "Uptown")
    create_user(db_session, email="admin@example.com", role=STOREADMIN, store=store)

    response = client.post("/api/auth/login", json={"email": "admin@example.com", "password": PASSWORD})
    assert response.status_code == 200
    assert response.json()["store_id"] == str(store.id)


def test_me_requires_token(client, db_session):
    response = client.get("/api/auth/me")
    assert response.status_code == 401
    assert response.json()["code"] == "INVALID_TOKEN"

    response = client.get("/api/auth/me", headers=bearer("not-a-jwt"))
    assert response.status_code == 401
    assert response.json()["code"] == "INVALID_TOKEN"


def test_register_customer_and_fetch_me(client, db_session):
    run_seed(db_session)

    response = _register(client, email="New.Customer@Example.com")
    assert response.status_code == 201
    user = response.json()["user"]
    assert user["email"] == "new.customer@example.com"
    assert user["role"] == "Customer"
    assert user["user_code"].startswith("CUST-")
    assert user["modified_by"] == "Not modified"

    token = login(client, "new.customer@example.com", "Secret123")
    me = client.get("/api/auth/me", headers=bearer(token))
    assert me.status_code == 200
    assert me.json()["user"]["id"] == user["id"]
    assert me.json()["trace_id"]


def test_register_rejects_duplicate_email_and_bad_passwords(client, db_session):
    run_seed(db_session)
    assert _register(client).status_code == 201

    duplicate = _register(client, email="JANE@example.com")
    assert duplicate.status_code == 409
    assert duplicate.json()["code"] == "EMAIL_ALREADY_REGISTERED"

    short = _register(client, email="short@example.com", password="abc", confirm_password="abc")
    assert short.status_code == 422
    assert short.json()["code"] == "PASSWORD_TOO_SHORT"

    mismatch = _register(client, email="mismatch@example.com", confirm_password="Different123")
    assert mismatch.status_code == 422
    assert mismatch.json()["code"] == "PASSWORD_MISMATCH"


def test_register_with_unknown_home_store(client, db_session):
    run_seed(db_session)

    response = _register(client, store_id="2d7a8f3c-0000-4000-8000-000000000000")
    assert response.status_code == 422
    assert response.json()["code"] == "INVALID_REFERENCE"


def test_update_profile_and_change_password(client, db_session):
    run_seed(db_session)
    user = create_user(db_session, email="jane@example.com")
    token = login(client, "jane@example.com")

    profile = client.put("/api/auth/me", headers=bearer(token), json={"full_name": "Jane Q. Doe", "phone": "5551234567"})
    assert profile.status_code == 200
    assert profile.json()["user"]["full_name"] == "Jane Q. Doe"
    assert profile.json()["user"]["modified_by"] == str(user.id)

    wrong = client.put(
        "/api/auth/change-password",
        headers=bearer(token),
        json={"current_password": "nope", "new_password": "NewPass123", "confirm_new_password": "NewPass123"},
    )
    assert wrong.status_code == 422
    assert wrong.json()["code"] == "CURRENT_PASSWORD_INCORRECT"

    changed = client.put(
        "/api/auth/change-password",
        headers=bearer(token),
        json={"current_password": PASSWORD, "new_password": "NewPass123", "confirm_new_password": "NewPass123"},
    )
    assert changed.status_code == 200
    assert changed.json()["ok"] is True

    login(client, "jane@example.com", "NewPass123")


def test_oauth2_token_form(client, db_session):
    run_seed(db_session)
    create_user(db_session, email="jane@example.com")

    response = client.post(
        "/api/auth/token",
        data={"username": "jane@example.com", "password": PASSWORD},
    )
    assert response.status_code == 200
    assert response.json()["token_type"] == "bearer"
    assert response.json()["access_token"]


def test_token_of_deactivated_user_is_refused(client, db_session):
    token = seed_and_login(client, db_session)
    create_user(db_session, email="jane@example.com")
    jane_token = login(client, "jane@example.com")

    target = db_session.execute(select(User).where(User.email == "jane@example.com")).scalars().one()
    response = client.patch(f"/api/users/{target.id}/active", headers=bearer(token), json={"active": False})
    assert response.status_code == 200

    me = client.get("/api/auth/me", headers=bearer(jane_token))
    assert me.status_code == 403
    assert me.json()["code"] == "USER_INACTIVE"


def test_create_store_admin_builds_store_and_user(client, db_session):
    token = seed_and_login(client, db_session)

    response = client.post(
        "/api/auth/store-admins",
        headers=bearer(token),
        json={
            "full_name": "Sam Manager",
            "email": "sam@example.com",
            "password": "Secret123",
            "confirm_password": "Secret123",
        },
    )
    assert response.status_code == 201
    body = response.json()
    assert body["store_name"] == "Sam Manager's Store"

    admin_token = login(client, "sam@example.com", "Secret123")
    me = client.get("/api/auth/me", headers=bearer(admin_token))
    assert me.json()["user"]["role"] == "StoreAdmin"
    assert me.json()["user"]["store_id"] == body["store_id"]


def test_create_store_admin_is_atomic_on_duplicate_email(client, db_session):
    token = seed_and_login(client, db_session)
    create_user(db_session, email="taken@example.com")
    stores_before = db_session.execute(select(Store)).scalars().all()

    response = client.post(
        "/api/auth/store-admins",
        headers=bearer(token),
        json={
            "full_name": "Dup Admin",
            "email": "taken@example.com",
            "password": "Secret123",
            "confirm_password": "Secret123",
            "store_name": "Should Not Exist",
        },
    )
    assert response.status_code == 409
    assert response.json()["code"] == "EMAIL_ALREADY_REGISTERED"

    db_session.expire_all()
    stores_after = db_session.execute(select(Store)).scalars().all()
    assert len(stores_after) == len(stores_before)


def test_store_admin_cannot_create_store_admins(client, db_session):
    run_seed(db_session)
    store = create_store(db_session)
    create_user(db_session, email="admin@example.com", role=STOREADMIN, store=store)
    token = login(client, "admin@example.com")

    response = client.post(
        "/api/auth/store-admins",
        headers=bearer(token),
        json={
            "full_name": "Other",
            "email": "other@example.com",
            "password": "Secret123",
            "confirm_password": "Secret123",
        },
    )
    assert response.status_code == 403
    assert response.json()["code"] == "PERMISSION_DENIED"
