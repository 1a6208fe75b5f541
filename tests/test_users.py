from sqlalchemy import select

from app.storecare.core.context import CUSTOMER, STOREADMIN, SUPERADMIN, Principal
from app.storecare.db.models import User
from app.storecare.db.seed import run_seed
from app.storecare.services.directory import StoreDirectory, UserDirectory
from tests.storecare_helpers import SUPERADMIN_EMAIL, bearer, create_store, create_user, login, seed_and_login


def _superadmin(db_session) -> User:
    return db_session.execute(select(User).where(User.email == SUPERADMIN_EMAIL)).scalars().one()


def test_superadmin_cannot_deactivate_self(client, db_session):
    token = seed_and_login(client, db_session)
    me = _superadmin(db_session)
    peer = create_user(db_session, email="peer@example.com", role=SUPERADMIN)

    own = client.patch(f"/api/users/{me.id}/active", headers=bearer(token), json={"active": False})
    assert own.status_code == 403
    assert own.json()["code"] == "SELF_LOCKOUT_DENIED"

    delete_own = client.delete(f"/api/users/{me.id}", headers=bearer(token))
    assert delete_own.json()["code"] == "SELF_LOCKOUT_DENIED"

    other = client.patch(f"/api/users/{peer.id}/active", headers=bearer(token), json={"active": False})
    assert other.status_code == 200
    assert other.json()["user"]["status"] == "Inactive"
    assert other.json()["user"]["active"] is True

    restored = client.patch(f"/api/users/{peer.id}/active", headers=bearer(token), json={"active": True})
    assert restored.json()["user"]["status"] == "Active"


def test_store_admin_lists_only_own_store_customers(client, db_session):
    run_seed(db_session)
    store = create_store(db_session, "Mine")
    other = create_store(db_session, "Other")
    create_user(db_session, email="admin@example.com", role=STOREADMIN, store=store, full_name="Admin")
    create_user(db_session, email="colleague@example.com", role=STOREADMIN, store=store, full_name="Colleague")
    create_user(db_session, email="local@example.com", role=CUSTOMER, store=store, full_name="Local")
    create_user(db_session, email="away@example.com", role=CUSTOMER, store=other, full_name="Away")
    create_user(db_session, email="global@example.com", role=CUSTOMER, full_name="Global")
    token = login(client, "admin@example.com")

    response = client.get("/api/users", headers=bearer(token))
    assert response.status_code == 200
    assert [user["email"] for user in response.json()["users"]] == ["local@example.com"]

    admins = client.get("/api/users", headers=bearer(token), params={"role": "StoreAdmin"})
    assert admins.json()["count"] == 0


def test_superadmin_filters_users_by_role(client, db_session):
    token = seed_and_login(client, db_session)
    store = create_store(db_session)
    create_user(db_session, email="admin@example.com", role=STOREADMIN, store=store)
    create_user(db_session, email="cust@example.com", role=CUSTOMER)

    response = client.get("/api/users", headers=bearer(token), params={"role": "storeadmin"})
    assert [user["email"] for user in response.json()["users"]] == ["admin@example.com"]

    everyone = client.get("/api/users", headers=bearer(token))
    assert everyone.json()["count"] == 3

    bad_role = client.get("/api/users", headers=bearer(token), params={"role": "Manager"})
    assert bad_role.status_code == 422


def test_store_admin_cannot_reach_other_users(client, db_session):
    run_seed(db_session)
    store = create_store(db_session, "Mine")
    other = create_store(db_session, "Other")
    create_user(db_session, email="admin@example.com", role=STOREADMIN, store=store)
    colleague = create_user(db_session, email="colleague@example.com", role=STOREADMIN, store=store)
    foreign = create_user(db_session, email="away@example.com", role=CUSTOMER, store=other)
    local = create_user(db_session, email="local@example.com", role=CUSTOMER, store=store)
    token = login(client, "admin@example.com")

    for target in (colleague, foreign):
        response = client.get(f"/api/users/{target.id}", headers=bearer(token))
        assert response.status_code == 404
        assert response.json()["code"] == "USER_NOT_FOUND"

    blocked = client.patch(f"/api/users/{foreign.id}/active", headers=bearer(token), json={"active": False})
    assert blocked.status_code == 404

    updated = client.put(f"/api/users/{local.id}", headers=bearer(token), json={"full_name": "Local Shopper"})
    assert updated.status_code == 200
    assert updated.json()["user"]["full_name"] == "Local Shopper"


def test_store_admin_cannot_delete_self(client, db_session):
    run_seed(db_session)
    store = create_store(db_session)
    admin = create_user(db_session, email="admin@example.com", role=STOREADMIN, store=store)
    token = login(client, "admin@example.com")

    response = client.delete(f"/api/users/{admin.id}", headers=bearer(token))
    assert response.status_code == 403
    assert response.json()["code"] == "SELF_LOCKOUT_DENIED"


def test_update_user_email_must_stay_unique(client, db_session):
    token = seed_and_login(client, db_session)
    first = create_user(db_session, email="first@example.com")
    create_user(db_session, email="second@example.com")

    response = client.put(f"/api/users/{first.id}", headers=bearer(token), json={"email": "Second@example.com"})
    assert response.status_code == 409
    assert response.json()["code"] == "EMAIL_ALREADY_REGISTERED"


def test_deleted_user_disappears(client, db_session):
    token = seed_and_login(client, db_session)
    target = create_user(db_session, email="target@example.com")

    assert client.delete(f"/api/users/{target.id}", headers=bearer(token)).status_code == 200
    assert client.get(f"/api/users/{target.id}", headers=bearer(token)).status_code == 404


def test_directory_services_list_stores_and_users(client, db_session):
    run_seed(db_session)
    store = create_store(db_session, "Uptown")
    create_user(db_session, email="regular@example.com", role=CUSTOMER, store=store)
    principal = Principal(user_id=str(_superadmin(db_session).id), role=SUPERADMIN)

    summaries = StoreDirectory(db_session).list_stores(principal)
    assert [summary.store.store_name for summary in summaries] == ["Uptown"]

    customers = UserDirectory(db_session).list_users(principal, role=CUSTOMER)
    assert [user.email for user in customers] == ["regular@example.com"]
