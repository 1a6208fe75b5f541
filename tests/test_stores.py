import uuid

from app.storecare.core.context import CUSTOMER, STOREADMIN
from app.storecare.core.lookups import STATUS_SUSPENDED
from app.storecare.db.models import Item, Store, User
from app.storecare.db.seed import run_seed
from tests.storecare_helpers import (
    assignment_rows,
    bearer,
    create_assignment,
    create_category,
    create_item,
    create_product,
    create_store,
    create_user,
    login,
    seed_and_login,
    status_id,
)


def test_create_and_get_store(client, db_session):
    token = seed_and_login(client, db_session)

    created = client.post(
        "/api/stores",
        headers=bearer(token),
        json={"store_name": "Harbor", "address": "1 Pier Rd", "email": "harbor@example.com"},
    )
    assert created.status_code == 201
    store = created.json()["store"]
    assert store["store_code"].startswith("ST-")
    assert store["status"] == "Active"

    detail = client.get(f"/api/stores/{store['id']}", headers=bearer(token))
    assert detail.status_code == 200
    assert detail.json()["store"]["total_employees"] == 0


def test_store_admin_sees_only_own_store(client, db_session):
    run_seed(db_session)
    mine = create_store(db_session, "Mine")
    other = create_store(db_session, "Other")
    token = login(client, create_user(db_session, email="admin@example.com", role=STOREADMIN, store=mine).email)

    listing = client.get("/api/stores", headers=bearer(token))
    assert [store["store_name"] for store in listing.json()["stores"]] == ["Mine"]
    assert listing.json()["stores"][0]["total_employees"] == 1

    hidden = client.get(f"/api/stores/{other.id}", headers=bearer(token))
    assert hidden.status_code == 404
    assert hidden.json()["code"] == "STORE_NOT_FOUND"

    updated = client.put(f"/api/stores/{mine.id}", headers=bearer(token), json={"address": "2 Main St"})
    assert updated.status_code == 200
    assert updated.json()["store"]["address"] == "2 Main St"

    foreign_update = client.put(f"/api/stores/{other.id}", headers=bearer(token), json={"address": "x"})
    assert foreign_update.status_code == 404

    create = client.post("/api/stores", headers=bearer(token), json={"store_name": "Rogue"})
    assert create.status_code == 403


def test_store_delete_cascades_to_dependents(client, db_session):
    token = seed_and_login(client, db_session)
    store = create_store(db_session, "Closing")
    survivor = create_store(db_session, "Survivor")
    admin = create_user(db_session, email="admin@example.com", role=STOREADMIN, store=store)
    other_admin = create_user(db_session, email="other@example.com", role=STOREADMIN, store=survivor)
    category = create_category(db_session, "Shoes")
    product = create_product(db_session, category, "Runner")
    create_assignment(db_session, store, product)
    create_assignment(db_session, survivor, product)
    item = create_item(db_session, store, product)

    response = client.delete(f"/api/stores/{store.id}", headers=bearer(token))
    assert response.status_code == 200
    assert response.json()["retired"] == {"users": 1, "store_product_assignments": 1, "items": 1}

    db_session.expire_all()
    assert db_session.get(Store, store.id).active is False
    retired_admin = db_session.get(User, admin.id)
    assert retired_admin.active is False
    assert retired_admin.modified_by is not None
    assert db_session.get(Item, item.id).active is False
    assert all(not row.active for row in assignment_rows(db_session, store))

    assert db_session.get(User, other_admin.id).active is True
    assert all(row.active for row in assignment_rows(db_session, survivor))

    assert client.get(f"/api/stores/{store.id}", headers=bearer(token)).status_code == 404


def test_change_store_status_and_statistics(client, db_session):
    token = seed_and_login(client, db_session)
    busy = create_store(db_session, "Busy")
    paused = create_store(db_session, "Paused")
    create_user(db_session, email="admin@example.com", role=STOREADMIN, store=busy)
    create_user(db_session, email="shopper@example.com", role=CUSTOMER, store=busy)
    category = create_category(db_session, "Shoes")
    create_assignment(db_session, busy, create_product(db_session, category, "Runner"))

    response = client.patch(
        f"/api/stores/{paused.id}/status",
        headers=bearer(token),
        json={"status_id": status_id(db_session, STATUS_SUSPENDED)},
    )
    assert response.json()["store"]["status"] == "Suspended"

    stats = client.get("/api/stores/statistics", headers=bearer(token))
    assert stats.status_code == 200
    overview = stats.json()["overview"]
    assert overview == {"total_stores": 2, "active_stores": 1, "suspended_stores": 1, "inactive_stores": 0}
    performance = {row["store_name"]: row for row in stats.json()["store_performance"]}
    assert performance["Busy"]["total_employees"] == 1
    assert performance["Busy"]["total_products"] == 1


def test_store_statistics_is_superadmin_only(client, db_session):
    run_seed(db_session)
    store = create_store(db_session)
    token = login(client, create_user(db_session, email="admin@example.com", role=STOREADMIN, store=store).email)

    response = client.get("/api/stores/statistics", headers=bearer(token))
    assert response.status_code == 403


def test_unknown_store_is_not_found(client, db_session):
    token = seed_and_login(client, db_session)

    assert client.get(f"/api/stores/{uuid.uuid4()}", headers=bearer(token)).status_code == 404
    assert client.get("/api/stores/not-a-uuid", headers=bearer(token)).status_code == 404
