from app.storecare.core.context import CUSTOMER, STOREADMIN
from app.storecare.core.lookups import STATUS_INACTIVE
from app.storecare.db.models import Product, StoreProductAssignment
from app.storecare.db.seed import run_seed
from app.storecare.services.catalog import ProductService
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
)


def test_create_product_requires_active_category(client, db_session):
    token = seed_and_login(client, db_session)
    category = create_category(db_session, "Shoes")
    retired = create_category(db_session, "Retired")
    retired.active = False
    db_session.commit()

    created = client.post(
        "/api/products",
        headers=bearer(token),
        json={"product_name": "Runner", "category_id": str(category.id), "brand_name": "Acme"},
    )
    assert created.status_code == 201
    product = created.json()["product"]
    assert product["product_code"].startswith("PRD-")
    assert product["category_name"] == "Shoes"
    assert product["view_count"] == 0

    rejected = client.post(
        "/api/products",
        headers=bearer(token),
        json={"product_name": "Runner", "category_id": str(retired.id)},
    )
    assert rejected.status_code == 422
    assert rejected.json()["code"] == "INVALID_REFERENCE"


def test_product_name_unique_within_category(client, db_session):
    token = seed_and_login(client, db_session)
    shoes = create_category(db_session, "Shoes")
    boots = create_category(db_session, "Boots")
    create_product(db_session, shoes, "Classic")
    other = create_product(db_session, boots, "classic")

    duplicate = client.post(
        "/api/products",
        headers=bearer(token),
        json={"product_name": "CLASSIC", "category_id": str(shoes.id)},
    )
    assert duplicate.status_code == 422
    assert duplicate.json()["code"] == "DUPLICATE_NAME"

    moved = client.put(f"/api/products/{other.id}", headers=bearer(token), json={"category_id": str(shoes.id)})
    assert moved.status_code == 422
    assert moved.json()["code"] == "DUPLICATE_NAME"

    renamed_and_moved = client.put(
        f"/api/products/{other.id}",
        headers=bearer(token),
        json={"category_id": str(shoes.id), "product_name": "Classic II"},
    )
    assert renamed_and_moved.status_code == 200
    assert renamed_and_moved.json()["product"]["category_name"] == "Shoes"


def test_get_product_counts_views(client, db_session):
    run_seed(db_session)
    category = create_category(db_session, "Shoes")
    product = create_product(db_session, category, "Runner")

    first = client.get(f"/api/products/{product.id}")
    second = client.get(f"/api/products/{product.id}")
    assert first.json()["product"]["view_count"] == 1
    assert second.json()["product"]["view_count"] == 2


def test_customer_only_sees_active_status_products(client, db_session):
    run_seed(db_session)
    create_user(db_session, email="cust@example.com", role=CUSTOMER)
    token = login(client, "cust@example.com")
    category = create_category(db_session, "Shoes")
    create_product(db_session, category, "Visible")
    hidden = create_product(db_session, category, "Hidden", status=STATUS_INACTIVE)

    listing = client.get("/api/products", headers=bearer(token))
    assert [p["product_name"] for p in listing.json()["products"]] == ["Visible"]
    assert client.get(f"/api/products/{hidden.id}", headers=bearer(token)).status_code == 404


def test_list_products_by_category(client, db_session):
    run_seed(db_session)
    shoes = create_category(db_session, "Shoes")
    bags = create_category(db_session, "Bags")
    create_product(db_session, shoes, "Runner")
    create_product(db_session, bags, "Tote")

    response = client.get("/api/products", params={"category_id": str(bags.id)})
    assert [p["product_name"] for p in response.json()["products"]] == ["Tote"]

    garbage = client.get("/api/products", params={"category_id": "not-a-uuid"})
    assert garbage.json()["count"] == 0


def test_store_admin_sees_only_assigned_products(client, db_session):
    run_seed(db_session)
    store = create_store(db_session, "Mine")
    create_user(db_session, email="admin@example.com", role=STOREADMIN, store=store)
    category = create_category(db_session, "Shoes")
    carried = create_product(db_session, category, "Carried")
    not_carried = create_product(db_session, category, "Not carried")
    create_assignment(db_session, store, carried)
    token = login(client, "admin@example.com")

    listing = client.get("/api/products", headers=bearer(token))
    assert [p["product_name"] for p in listing.json()["products"]] == ["Carried"]
    assert client.get(f"/api/products/{not_carried.id}", headers=bearer(token)).status_code == 404


def test_featured_products_ordered_by_views(client, db_session):
    run_seed(db_session)
    category = create_category(db_session, "Shoes")
    quiet = create_product(db_session, category, "Quiet", is_featured=True)
    popular = create_product(db_session, category, "Popular", is_featured=True)
    create_product(db_session, category, "Plain")
    popular.view_count = 10
    quiet.view_count = 1
    db_session.commit()

    response = client.get("/api/products/featured")
    assert [p["product_name"] for p in response.json()["products"]] == ["Popular", "Quiet"]


def test_product_delete_blocked_by_items_and_retires_assignments(client, db_session):
    token = seed_and_login(client, db_session)
    store = create_store(db_session)
    category = create_category(db_session, "Shoes")
    product = create_product(db_session, category, "Runner")
    create_assignment(db_session, store, product)
    item = create_item(db_session, store, product)

    blocked = client.delete(f"/api/products/{product.id}", headers=bearer(token))
    assert blocked.status_code == 409
    assert blocked.json()["details"]["active_items"] == 1

    item.active = False
    db_session.commit()
    deleted = client.delete(f"/api/products/{product.id}", headers=bearer(token))
    assert deleted.status_code == 200

    rows = assignment_rows(db_session, store, product)
    assert len(rows) == 1
    assert rows[0].active is False
    assert isinstance(rows[0], StoreProductAssignment)


def test_null_featured_flag_is_rejected(client, db_session):
    token = seed_and_login(client, db_session)
    category = create_category(db_session, "Shoes")
    product = create_product(db_session, category, "Runner", is_featured=True)

    response = client.put(f"/api/products/{product.id}", headers=bearer(token), json={"is_featured": None})
    assert response.status_code == 422
    assert response.json()["code"] == "VALIDATION_ERROR"
    assert response.json()["details"]["field"] == "is_featured"

    db_session.expire_all()
    assert db_session.get(Product, product.id).is_featured is True


def test_product_service_lists_by_category(client, db_session):
    run_seed(db_session)
    shoes = create_category(db_session, "Shoes")
    hats = create_category(db_session, "Hats", display_order=2)
    create_product(db_session, shoes, "Trail")
    create_product(db_session, shoes, "Runner")
    create_product(db_session, hats, "Cap")

    products = ProductService(db_session).list_products(None, category_id=str(shoes.id))
    assert [product.product_name for product in products] == ["Runner", "Trail"]
