from app.storecare.core.context import STOREADMIN
from app.storecare.core.lookups import STATUS_INACTIVE, STATUS_PENDING, STATUS_SUSPENDED
from app.storecare.db.models import ProductCategory
from app.storecare.db.seed import run_seed
from app.storecare.services.catalog import CategoryService
from tests.storecare_helpers import (
    bearer,
    create_category,
    create_product,
    create_store,
    create_user,
    login,
    seed_and_login,
    status_id,
)


def test_create_category_appends_display_order(client, db_session):
    token = seed_and_login(client, db_session)
    create_category(db_session, "Bags", display_order=2)
    create_category(db_session, "Hats", display_order=4)

    response = client.post("/api/categories", headers=bearer(token), json={"category_name": "  Shoes  "})
    assert response.status_code == 201
    category = response.json()["category"]
    assert category["category_name"] == "Shoes"
    assert category["display_order"] == 5
    assert category["category_code"].startswith("CAT-")
    assert category["status"] == "Active"
    assert category["status_color"] == "green"


def test_non_positive_display_order_is_replaced(client, db_session):
    token = seed_and_login(client, db_session)
    create_category(db_session, "Bags", display_order=3)

    response = client.post(
        "/api/categories", headers=bearer(token), json={"category_name": "Belts", "display_order": 0}
    )
    assert response.status_code == 201
    assert response.json()["category"]["display_order"] == 4


def test_category_name_is_unique_case_insensitively_among_active(client, db_session):
    token = seed_and_login(client, db_session)
    create_category(db_session, "Shoes")

    duplicate = client.post("/api/categories", headers=bearer(token), json={"category_name": "SHOES"})
    assert duplicate.status_code == 422
    assert duplicate.json()["code"] == "DUPLICATE_NAME"

    retired = create_category(db_session, "Gloves")
    retired.active = False
    db_session.commit()
    reused = client.post("/api/categories", headers=bearer(token), json={"category_name": "gloves"})
    assert reused.status_code == 201


def test_anonymous_sees_only_active_status_categories(client, db_session):
    run_seed(db_session)
    visible = create_category(db_session, "Visible", display_order=1)
    create_category(db_session, "Dormant", display_order=2, status=STATUS_INACTIVE)
    create_category(db_session, "Frozen", display_order=3, status=STATUS_SUSPENDED)
    create_category(db_session, "Waiting", display_order=4, status=STATUS_PENDING)

    response = client.get("/api/categories")
    assert response.status_code == 200
    names = [category["category_name"] for category in response.json()["categories"]]
    assert names == ["Visible"]

    hidden = create_category(db_session, "Hidden", status=STATUS_INACTIVE)
    assert client.get(f"/api/categories/{hidden.id}").status_code == 404
    assert client.get(f"/api/categories/{visible.id}").status_code == 200


def test_superadmin_sees_every_status(client, db_session):
    token = seed_and_login(client, db_session)
    create_category(db_session, "Visible", display_order=1)
    create_category(db_session, "Dormant", display_order=2, status=STATUS_INACTIVE)

    response = client.get("/api/categories", headers=bearer(token))
    assert response.json()["count"] == 2


def test_category_delete_guard(client, db_session):
    token = seed_and_login(client, db_session)
    category = create_category(db_session, "Shoes")
    product = create_product(db_session, category, "Runner")

    blocked = client.delete(f"/api/categories/{category.id}", headers=bearer(token))
    assert blocked.status_code == 409
    assert blocked.json()["code"] == "HAS_ACTIVE_DEPENDENCIES"
    assert blocked.json()["details"]["active_products"] == 1

    assert client.delete(f"/api/products/{product.id}", headers=bearer(token)).status_code == 200
    allowed = client.delete(f"/api/categories/{category.id}", headers=bearer(token))
    assert allowed.status_code == 200

    db_session.expire_all()
    assert db_session.get(ProductCategory, category.id).active is False
    assert client.get(f"/api/categories/{category.id}", headers=bearer(token)).status_code == 404


def test_reorder_is_all_or_nothing(client, db_session):
    token = seed_and_login(client, db_session)
    first = create_category(db_session, "First", display_order=1)
    second = create_category(db_session, "Second", display_order=2)

    rejected = client.post(
        "/api/categories/reorder",
        headers=bearer(token),
        json={"items": [{"id": str(first.id), "display_order": 9}, {"id": "missing", "display_order": 1}]},
    )
    assert rejected.status_code == 422
    assert rejected.json()["code"] == "INVALID_REFERENCE"
    assert rejected.json()["details"]["invalid_category_ids"] == ["missing"]

    db_session.expire_all()
    assert db_session.get(ProductCategory, first.id).display_order == 1

    applied = client.post(
        "/api/categories/reorder",
        headers=bearer(token),
        json={
            "items": [
                {"id": str(first.id), "display_order": 2},
                {"id": str(second.id), "display_order": 1},
            ]
        },
    )
    assert applied.status_code == 200
    names = [category["category_name"] for category in applied.json()["categories"]]
    assert names == ["Second", "First"]


def test_reorder_rejects_repeated_ids(client, db_session):
    token = seed_and_login(client, db_session)
    first = create_category(db_session, "First", display_order=1)

    response = client.post(
        "/api/categories/reorder",
        headers=bearer(token),
        json={"items": [{"id": str(first.id), "display_order": 3}, {"id": str(first.id), "display_order": 5}]},
    )
    assert response.status_code == 422
    assert response.json()["code"] == "VALIDATION_ERROR"

    db_session.expire_all()
    assert db_session.get(ProductCategory, first.id).display_order == 1


def test_change_status_validates_lookup(client, db_session):
    token = seed_and_login(client, db_session)
    category = create_category(db_session, "Shoes")

    invalid = client.patch(f"/api/categories/{category.id}/status", headers=bearer(token), json={"status_id": 999})
    assert invalid.status_code == 422
    assert invalid.json()["code"] == "INVALID_STATUS"

    suspended = status_id(db_session, STATUS_SUSPENDED)
    response = client.patch(
        f"/api/categories/{category.id}/status", headers=bearer(token), json={"status_id": suspended}
    )
    assert response.status_code == 200
    assert response.json()["category"]["status"] == "Suspended"
    assert response.json()["category"]["status_color"] == "red"


def test_popular_categories_are_public(client, db_session):
    run_seed(db_session)
    create_category(db_session, "Shoes", display_order=2, is_popular=True)
    create_category(db_session, "Bags", display_order=1, is_popular=True)
    create_category(db_session, "Socks", display_order=3)
    create_category(db_session, "Hidden", display_order=4, is_popular=True, status=STATUS_INACTIVE)

    response = client.get("/api/categories/popular")
    assert response.status_code == 200
    assert [c["category_name"] for c in response.json()["categories"]] == ["Bags", "Shoes"]


def test_audit_columns_track_modifier(client, db_session):
    token = seed_and_login(client, db_session)
    me = client.get("/api/auth/me", headers=bearer(token)).json()["user"]
    touched = create_category(db_session, "Touched", display_order=1)
    create_category(db_session, "Untouched", display_order=2)

    response = client.put(f"/api/categories/{touched.id}", headers=bearer(token), json={"description": "New"})
    assert response.status_code == 200
    assert response.json()["category"]["modified_by"] == me["id"]
    assert response.json()["category"]["modified_date"] is not None

    listing = {c["category_name"]: c for c in client.get("/api/categories", headers=bearer(token)).json()["categories"]}
    assert listing["Untouched"]["modified_by"] == "Not modified"
    assert listing["Untouched"]["created_by"] == "system"


def test_store_admin_cannot_write_categories(client, db_session):
    run_seed(db_session)
    store = create_store(db_session)
    create_user(db_session, email="admin@example.com", role=STOREADMIN, store=store)
    token = login(client, "admin@example.com")

    response = client.post("/api/categories", headers=bearer(token), json={"category_name": "Shoes"})
    assert response.status_code == 403
    assert response.json()["code"] == "PERMISSION_DENIED"

    anonymous = client.post("/api/categories", json={"category_name": "Shoes"})
    assert anonymous.status_code == 401


def test_null_popular_flag_is_rejected(client, db_session):
    token = seed_and_login(client, db_session)
    category = create_category(db_session, "Shoes", is_popular=True)

    response = client.put(f"/api/categories/{category.id}", headers=bearer(token), json={"is_popular": None})
    assert response.status_code == 422
    assert response.json()["code"] == "VALIDATION_ERROR"
    assert response.json()["details"]["field"] == "is_popular"

    db_session.expire_all()
    assert db_session.get(ProductCategory, category.id).is_popular is True


def test_category_service_lists_for_anonymous(client, db_session):
    run_seed(db_session)
    create_category(db_session, "Shoes", display_order=2)
    create_category(db_session, "Hats", display_order=1)
    create_category(db_session, "Hidden", display_order=3, status=STATUS_INACTIVE)

    names = [category.category_name for category in CategoryService(db_session).list_categories(None)]
    assert names == ["Hats", "Shoes"]
