from sqlalchemy import func, select

from app.storecare.db.models import LookupValue, Product, ProductCategory, coerce_uuid


class CategoryRepository:
    def __init__(self, db):
        self.db = db

    def get_active(self, category_id) -> ProductCategory | None:
        category_uuid = coerce_uuid(category_id)
        if category_uuid is None:
            return None
        stmt = select(ProductCategory).where(
            ProductCategory.id == category_uuid,
            ProductCategory.active.is_(True),
        )
        return self.db.execute(stmt).scalars().first()

    def list_active(
        self,
        *,
        status_value: str | None = None,
        popular_only: bool = False,
        limit: int | None = None,
    ) -> list[ProductCategory]:
        stmt = select(ProductCategory).where(ProductCategory.active.is_(True))
        if status_value:
            stmt = stmt.join(LookupValue, ProductCategory.status_id == LookupValue.id).where(
                LookupValue.table_value == status_value
            )
        if popular_only:
            stmt = stmt.where(ProductCategory.is_popular.is_(True))
        stmt = stmt.order_by(ProductCategory.display_order.asc(), ProductCategory.category_name.asc())
        if limit:
            stmt = stmt.limit(limit)
        return self.db.execute(stmt).scalars().all()

    def list_active_by_ids(self, category_ids) -> list[ProductCategory]:
        if not category_ids:
            return []
        stmt = select(ProductCategory).where(
            ProductCategory.id.in_(list(category_ids)),
            ProductCategory.active.is_(True),
        )
        return self.db.execute(stmt).scalars().all()

    def name_taken(self, name: str, *, exclude_id=None) -> bool:
        stmt = select(func.count()).select_from(ProductCategory).where(
            func.lower(ProductCategory.category_name) == name.strip().lower(),
            ProductCategory.active.is_(True),
        )
        if exclude_id is not None:
            stmt = stmt.where(ProductCategory.id != exclude_id)
        return self.db.execute(stmt).scalar_one() > 0

    def max_display_order(self) -> int:
        stmt = select(func.max(ProductCategory.display_order)).where(ProductCategory.active.is_(True))
        return self.db.execute(stmt).scalar_one_or_none() or 0

    def count_active_products(self, category_id, *, status_value: str | None = None) -> int:
        stmt = select(func.count()).select_from(Product).where(
            Product.category_id == category_id,
            Product.active.is_(True),
        )
        if status_value:
            stmt = stmt.join(LookupValue, Product.status_id == LookupValue.id).where(
                LookupValue.table_value == status_value
            )
        return self.db.execute(stmt).scalar_one()

    def add(self, category: ProductCategory) -> ProductCategory:
        self.db.add(category)
        self.db.flush()
        return category
