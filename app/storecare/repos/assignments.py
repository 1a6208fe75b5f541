from sqlalchemy import func, select

from app.storecare.db.models import Product, ProductCategory, Store, StoreProductAssignment, coerce_uuid


class AssignmentRepository:
    def __init__(self, db):
        self.db = db

    def get_active(self, assignment_id, *, for_update: bool = False) -> StoreProductAssignment | None:
        assignment_uuid = coerce_uuid(assignment_id)
        if assignment_uuid is None:
            return None
        stmt = select(StoreProductAssignment).where(
            StoreProductAssignment.id == assignment_uuid,
            StoreProductAssignment.active.is_(True),
        )
        if for_update:
            stmt = stmt.with_for_update()
        return self.db.execute(stmt).scalars().first()

    def get_by_pair(self, store_id, product_id, *, for_update: bool = False) -> StoreProductAssignment | None:
        stmt = select(StoreProductAssignment).where(
            StoreProductAssignment.store_id == store_id,
            StoreProductAssignment.product_id == product_id,
        )
        if for_update:
            stmt = stmt.with_for_update()
        return self.db.execute(stmt).scalars().first()

    def map_by_pairs(self, store_id, product_ids, *, for_update: bool = False) -> dict:
        """Existing rows (active or retired) for ``store_id`` keyed by product id."""
        if not product_ids:
            return {}
        stmt = select(StoreProductAssignment).where(
            StoreProductAssignment.store_id == store_id,
            StoreProductAssignment.product_id.in_(product_ids),
        )
        if for_update:
            stmt = stmt.with_for_update()
        rows = self.db.execute(stmt).scalars().all()
        return {row.product_id: row for row in rows}

    def list_active(self, *, store_id=None, product_id=None) -> list[StoreProductAssignment]:
        stmt = (
            select(StoreProductAssignment)
            .join(Store, StoreProductAssignment.store_id == Store.id)
            .join(Product, StoreProductAssignment.product_id == Product.id)
            .where(StoreProductAssignment.active.is_(True))
        )
        if store_id is not None:
            stmt = stmt.where(StoreProductAssignment.store_id == store_id)
        if product_id is not None:
            stmt = stmt.where(StoreProductAssignment.product_id == product_id)
        stmt = stmt.order_by(Store.store_name.asc(), Product.product_name.asc())
        return self.db.execute(stmt).scalars().all()

    def assigned_product_ids(self, store_id) -> set:
        stmt = select(StoreProductAssignment.product_id).where(
            StoreProductAssignment.store_id == store_id,
            StoreProductAssignment.active.is_(True),
        )
        return set(self.db.execute(stmt).scalars().all())

    def insert(self, assignment: StoreProductAssignment) -> StoreProductAssignment:
        self.db.add(assignment)
        self.db.flush()
        return assignment

    def count_active(self) -> int:
        stmt = select(func.count()).select_from(StoreProductAssignment).where(
            StoreProductAssignment.active.is_(True)
        )
        return self.db.execute(stmt).scalar_one()

    def top_stores(self, limit: int = 10) -> list[tuple]:
        total = func.count(StoreProductAssignment.id).label("total")
        stmt = (
            select(Store.id, Store.store_name, total)
            .join(StoreProductAssignment, StoreProductAssignment.store_id == Store.id)
            .where(StoreProductAssignment.active.is_(True))
            .group_by(Store.id, Store.store_name)
            .order_by(total.desc(), Store.store_name.asc())
            .limit(limit)
        )
        return self.db.execute(stmt).all()

    def top_categories(self, limit: int = 10) -> list[tuple]:
        total = func.count(StoreProductAssignment.id).label("total")
        stmt = (
            select(ProductCategory.id, ProductCategory.category_name, total)
            .join(Product, Product.category_id == ProductCategory.id)
            .join(StoreProductAssignment, StoreProductAssignment.product_id == Product.id)
            .where(StoreProductAssignment.active.is_(True))
            .group_by(ProductCategory.id, ProductCategory.category_name)
            .order_by(total.desc(), ProductCategory.category_name.asc())
            .limit(limit)
        )
        return self.db.execute(stmt).all()

    def top_products(self, limit: int = 10) -> list[tuple]:
        total = func.count(StoreProductAssignment.id).label("total")
        stmt = (
            select(Product.id, Product.product_name, total)
            .join(StoreProductAssignment, StoreProductAssignment.product_id == Product.id)
            .where(StoreProductAssignment.active.is_(True))
            .group_by(Product.id, Product.product_name)
            .order_by(total.desc(), Product.product_name.asc())
            .limit(limit)
        )
        return self.db.execute(stmt).all()
