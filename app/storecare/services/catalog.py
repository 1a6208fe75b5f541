import logging

from app.storecare.core.clock import Clock, utcnow
from app.storecare.core.codes import CATEGORY_PREFIX, PRODUCT_PREFIX, generate_code
from app.storecare.core.config import settings
from app.storecare.core.context import Principal
from app.storecare.core.error_catalog import AppError, ErrorCatalog
from app.storecare.core.lookups import STATUS_ACTIVE
from app.storecare.core.scope import authorize
from app.storecare.db.models import Product, ProductCategory, coerce_uuid
from app.storecare.repos.categories import CategoryRepository
from app.storecare.repos.products import ProductRepository
from app.storecare.services.cascade import retire_dependents
from app.storecare.services.statuses import StatusService
from app.storecare.services.transaction import transaction

logger = logging.getLogger(__name__)

CATEGORY_FIELDS = ("category_name", "description", "display_order", "is_popular", "icon_ref", "image_ref")
PRODUCT_FIELDS = ("product_name", "description", "image_ref", "brand_name", "is_featured")
NON_NULL_FLAGS = ("is_popular", "is_featured")


def _clean_name(name: str | None, field: str) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise AppError(ErrorCatalog.VALIDATION_ERROR, details={"field": field, "message": "Name is required"})
    return cleaned


def _reject_null_flags(changes: dict) -> None:
    for field in NON_NULL_FLAGS:
        if field in changes and changes[field] is None:
            raise AppError(ErrorCatalog.VALIDATION_ERROR, details={"field": field, "message": "Must be true or false"})


def _status_visible(row, status_filter: str | None) -> bool:
    if status_filter is None:
        return True
    return row.status is not None and row.status.table_value == status_filter


class CategoryService:
    def __init__(self, db, clock: Clock = utcnow):
        self.db = db
        self.clock = clock
        self.repo = CategoryRepository(db)
        self.statuses = StatusService(db)

    def create(
        self,
        principal: Principal,
        *,
        category_name: str,
        description: str | None = None,
        display_order: int | None = None,
        is_popular: bool = False,
        icon_ref: str | None = None,
        image_ref: str | None = None,
        status_id: int | None = None,
    ) -> ProductCategory:
        authorize(principal, "category", "write")
        with transaction(self.db):
            name = _clean_name(category_name, "category_name")
            if self.repo.name_taken(name):
                raise AppError(ErrorCatalog.DUPLICATE_NAME, details={"category_name": name})
            status = self.statuses.resolve(status_id)
            if not display_order or display_order <= 0:
                display_order = self.repo.max_display_order() + 1
            category = self.repo.add(
                ProductCategory(
                    category_code=generate_code(CATEGORY_PREFIX),
                    category_name=name,
                    description=description,
                    display_order=display_order,
                    is_popular=is_popular,
                    icon_ref=icon_ref,
                    image_ref=image_ref,
                    status_id=status.id,
                    created_by=principal.user_id,
                    created_date=self.clock(),
                    active=True,
                )
            )
        logger.info("Category %s created by %s", category.category_code, principal.user_id)
        return category

    def update(self, principal: Principal, category_id, changes: dict) -> ProductCategory:
        authorize(principal, "category", "write")
        with transaction(self.db):
            category = self._require(category_id)
            _reject_null_flags(changes)
            if "category_name" in changes:
                name = _clean_name(changes["category_name"], "category_name")
                if self.repo.name_taken(name, exclude_id=category.id):
                    raise AppError(ErrorCatalog.DUPLICATE_NAME, details={"category_name": name})
                changes = {**changes, "category_name": name}
            if "display_order" in changes and (changes["display_order"] or 0) <= 0:
                changes = {**changes, "display_order": self.repo.max_display_order() + 1}
            for key in CATEGORY_FIELDS:
                if key in changes:
                    setattr(category, key, changes[key])
            category.stamp_modified(principal.user_id, self.clock())
        return category

    def change_status(self, principal: Principal, category_id, status_id: int) -> ProductCategory:
        authorize(principal, "category", "write")
        with transaction(self.db):
            category = self._require(category_id)
            category.status = self.statuses.validate_id(status_id)
            category.stamp_modified(principal.user_id, self.clock())
        return category

    def soft_delete(self, principal: Principal, category_id) -> ProductCategory:
        authorize(principal, "category", "write")
        with transaction(self.db):
            category = self._require(category_id)
            active_products = self.repo.count_active_products(category.id)
            if active_products:
                raise AppError(
                    ErrorCatalog.HAS_ACTIVE_DEPENDENCIES,
                    details={"category_id": str(category.id), "active_products": active_products},
                )
            category.active = False
            category.stamp_modified(principal.user_id, self.clock())
        return category

    def reorder(self, principal: Principal, orders: dict) -> list[ProductCategory]:
        """Apply a batch of id -> display order; nothing is applied if any id is unknown."""
        authorize(principal, "category", "write")
        if not orders:
            raise AppError(ErrorCatalog.VALIDATION_ERROR, details={"message": "orders must not be empty"})
        with transaction(self.db):
            parsed = {str(raw): coerce_uuid(raw) for raw in orders}
            found = {
                category.id: category
                for category in self.repo.list_active_by_ids([uid for uid in parsed.values() if uid is not None])
            }
            invalid = [raw for raw, uid in parsed.items() if uid is None or uid not in found]
            if invalid:
                raise AppError(ErrorCatalog.INVALID_REFERENCE, details={"invalid_category_ids": invalid})
            now = self.clock()
            for raw, new_order in orders.items():
                category = found[parsed[str(raw)]]
                category.display_order = new_order
                category.stamp_modified(principal.user_id, now)
        return sorted(found.values(), key=lambda c: (c.display_order, c.category_name))

    def list_categories(self, principal: Principal | None) -> list[ProductCategory]:
        decision = authorize(principal, "category", "read")
        return self.repo.list_active(status_value=decision.status_filter)

    def get(self, principal: Principal | None, category_id) -> ProductCategory:
        decision = authorize(principal, "category", "read")
        category = self.repo.get_active(category_id)
        if category is None or not _status_visible(category, decision.status_filter):
            raise AppError(ErrorCatalog.CATEGORY_NOT_FOUND)
        return category

    def list_popular(self, principal: Principal | None) -> list[ProductCategory]:
        authorize(principal, "category", "read")
        return self.repo.list_active(
            status_value=STATUS_ACTIVE,
            popular_only=True,
            limit=settings.POPULAR_CATEGORIES_LIMIT,
        )

    def _require(self, category_id) -> ProductCategory:
        category = self.repo.get_active(category_id)
        if category is None:
            raise AppError(ErrorCatalog.CATEGORY_NOT_FOUND)
        return category


class ProductService:
    def __init__(self, db, clock: Clock = utcnow):
        self.db = db
        self.clock = clock
        self.repo = ProductRepository(db)
        self.categories = CategoryRepository(db)
        self.statuses = StatusService(db)

    def create(
        self,
        principal: Principal,
        *,
        product_name: str,
        category_id,
        description: str | None = None,
        image_ref: str | None = None,
        brand_name: str | None = None,
        is_featured: bool = False,
        status_id: int | None = None,
    ) -> Product:
        authorize(principal, "product", "write")
        with transaction(self.db):
            name = _clean_name(product_name, "product_name")
            category = self._require_category(category_id)
            if self.repo.name_taken_in_category(name, category.id):
                raise AppError(
                    ErrorCatalog.DUPLICATE_NAME,
                    details={"product_name": name, "category_id": str(category.id)},
                )
            status = self.statuses.resolve(status_id)
            product = self.repo.add(
                Product(
                    product_code=generate_code(PRODUCT_PREFIX),
                    product_name=name,
                    description=description,
                    image_ref=image_ref,
                    brand_name=brand_name,
                    is_featured=is_featured,
                    view_count=0,
                    category_id=category.id,
                    status_id=status.id,
                    created_by=principal.user_id,
                    created_date=self.clock(),
                    active=True,
                )
            )
        logger.info("Product %s created by %s", product.product_code, principal.user_id)
        return product

    def update(self, principal: Principal, product_id, changes: dict) -> Product:
        authorize(principal, "product", "write")
        with transaction(self.db):
            product = self._require(product_id)
            _reject_null_flags(changes)
            name = product.product_name
            category_id = product.category_id
            new_category = None
            if "product_name" in changes:
                name = _clean_name(changes["product_name"], "product_name")
                changes = {**changes, "product_name": name}
            if changes.get("category_id") is not None:
                new_category = self._require_category(changes["category_id"])
                category_id = new_category.id
            if name != product.product_name or category_id != product.category_id:
                if self.repo.name_taken_in_category(name, category_id, exclude_id=product.id):
                    raise AppError(
                        ErrorCatalog.DUPLICATE_NAME,
                        details={"product_name": name, "category_id": str(category_id)},
                    )
            for key in PRODUCT_FIELDS:
                if key in changes:
                    setattr(product, key, changes[key])
            if new_category is not None:
                product.category = new_category
            product.stamp_modified(principal.user_id, self.clock())
        return product

    def change_status(self, principal: Principal, product_id, status_id: int) -> Product:
        authorize(principal, "product", "write")
        with transaction(self.db):
            product = self._require(product_id)
            product.status = self.statuses.validate_id(status_id)
            product.stamp_modified(principal.user_id, self.clock())
        return product

    def soft_delete(self, principal: Principal, product_id) -> Product:
        """Retire a product and its store assignments; blocked while active items reference it."""
        authorize(principal, "product", "write")
        with transaction(self.db):
            product = self._require(product_id)
            active_items = self.repo.count_active_items(product.id)
            if active_items:
                raise AppError(
                    ErrorCatalog.HAS_ACTIVE_DEPENDENCIES,
                    details={"product_id": str(product.id), "active_items": active_items},
                )
            now = self.clock()
            product.active = False
            product.stamp_modified(principal.user_id, now)
            retired = retire_dependents(self.db, product, actor_id=principal.user_id, now=now)
        logger.info("Product %s retired by %s, dependents: %s", product.product_code, principal.user_id, retired)
        return product

    def list_products(self, principal: Principal | None, *, category_id=None) -> list[Product]:
        decision = authorize(principal, "product", "read")
        category_filter = None
        if category_id is not None:
            category_filter = coerce_uuid(category_id)
            if category_filter is None:
                return []
        return self.repo.list_active(
            status_value=decision.status_filter,
            category_id=category_filter,
            assigned_store_id=coerce_uuid(decision.store_id),
        )

    def get(self, principal: Principal | None, product_id) -> Product:
        """Fetch a visible product and count the view."""
        decision = authorize(principal, "product", "read")
        product = self.repo.get_active(product_id, assigned_store_id=coerce_uuid(decision.store_id))
        if product is None or not _status_visible(product, decision.status_filter):
            raise AppError(ErrorCatalog.PRODUCT_NOT_FOUND)
        with transaction(self.db):
            self.repo.increment_view_count(product)
        return product

    def list_featured(self, principal: Principal | None) -> list[Product]:
        authorize(principal, "product", "read")
        return self.repo.list_active(
            status_value=STATUS_ACTIVE,
            featured_only=True,
            limit=settings.FEATURED_PRODUCTS_LIMIT,
        )

    def _require(self, product_id) -> Product:
        product = self.repo.get_active(product_id)
        if product is None:
            raise AppError(ErrorCatalog.PRODUCT_NOT_FOUND)
        return product

    def _require_category(self, category_id) -> ProductCategory:
        category = self.categories.get_active(category_id)
        if category is None:
            raise AppError(ErrorCatalog.INVALID_REFERENCE, details={"category_id": str(category_id)})
        return category
