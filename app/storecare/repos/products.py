from sqlalchemy import func, select, update

from app.storecare.db.models import Item, LookupValue, Product, StoreProductAssignment, coerce_uuid


class ProductRepository:
    def __init__(self, db):
        self.db = db

    def get_active(self, product_id, *, assigned_store_id=None) -> Product | None:
        product_uuid = coerce_uuid(product_id)
        if product_uuid is None:
            return None
        stmt = select(Product).where(Product.id == product_uuid, Product.active.is_(True))
        if assigned_store_id is not None:
            stmt = stmt.where(Product.id.in_(self._assigned_ids_subquery(assigned_store_id)))
        return self.db.execute(stmt).scalars().first()

    def list_active(
        self,
        *,
        status_value: str | None = None,
        category_id=None,
        assigned_store_id=None,
        featured_only: bool = False,
        limit: int | None = None,
    ) -> list[Product]:
        stmt = select(Product).where(Product.active.is_(True))
        if status_value:
            stmt = stmt.join(LookupValue, Product.status_id == LookupValue.id).where(
                LookupValue.table_value == status_value
            )
        if category_id is not None:
            stmt = stmt.where(Product.category_id == category_id)
        if assigned_store_id is not None:
            stmt = stmt.where(Product.id.in_(self._assigned_ids_subquery(assigned_store_id)))
        if featured_only:
            stmt = stmt.where(Product.is_featured.is_(True))
            stmt = stmt.order_by(Product.view_count.desc(), Product.product_name.asc())
        else:
            stmt = stmt.order_by(Product.product_name.asc())
        if limit:
            stmt = stmt.limit(limit)
        return self.db.execute(stmt).scalars().all()

    def list_active_by_ids(self, product_ids, *, category_id=None, status_value: str | None = None) -> list[Product]:
        if not product_ids:
            return []
        stmt = select(Product).where(Product.id.in_(product_ids), Product.active.is_(True))
        if category_id is not None:
            stmt = stmt.where(Product.category_id == category_id)
        if status_value:
            stmt = stmt.join(LookupValue, Product.status_id == LookupValue.id).where(
                LookupValue.table_value == status_value
            )
        return self.db.execute(stmt).scalars().all()

    def name_taken_in_category(self, name: str, category_id, *, exclude_id=None) -> bool:
        stmt = select(func.count()).select_from(Product).where(
            func.lower(Product.product_name) == name.strip().lower(),
            Product.category_id == category_id,
            Product.active.is_(True),
        )
        if exclude_id is not None:
            stmt = stmt.where(Product.id != exclude_id)
        return self.db.execute(stmt).scalar_one() > 0

    def count_active_items(self, product_id) -> int:
        stmt = select(func.count()).select_from(Item).where(Item.product_id == product_id, Item.active.is_(True))
        return self.db.execute(stmt).scalar_one()

    def increment_view_count(self, product: Product) -> Product:
        self.db.execute(
            update(Product).where(Product.id == product.id).values(view_count=Product.view_count + 1)
        )
        self.db.refresh(product, attribute_names=["view_count"])
        return product

    def add(self, product: Product) -> Product:
        self.db.add(product)
        self.db.flush()
        return product

    @staticmethod
    def _assigned_ids_subquery(store_id):
        return select(StoreProductAssignment.product_id).where(
            StoreProductAssignment.store_id == store_id,
            StoreProductAssignment.active.is_(True),
        )
