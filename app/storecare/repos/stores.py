from sqlalchemy import func, select

from app.storecare.core.context import CUSTOMER
from app.storecare.db.models import LookupValue, Store, StoreProductAssignment, User, coerce_uuid


class StoreRepository:
    def __init__(self, db):
        self.db = db

    def get_active(self, store_id) -> Store | None:
        store_uuid = coerce_uuid(store_id)
        if store_uuid is None:
            return None
        stmt = select(Store).where(Store.id == store_uuid, Store.active.is_(True))
        return self.db.execute(stmt).scalars().first()

    def list_active(self, *, store_id=None) -> list[Store]:
        stmt = select(Store).where(Store.active.is_(True))
        if store_id is not None:
            stmt = stmt.where(Store.id == store_id)
        return self.db.execute(stmt.order_by(Store.created_date.desc(), Store.store_name.asc())).scalars().all()

    def employee_counts(self, store_ids) -> dict:
        if not store_ids:
            return {}
        stmt = (
            select(User.store_id, func.count(User.id))
            .where(User.store_id.in_(store_ids), User.active.is_(True), User.role != CUSTOMER)
            .group_by(User.store_id)
        )
        return dict(self.db.execute(stmt).all())

    def product_counts(self, store_ids) -> dict:
        if not store_ids:
            return {}
        stmt = (
            select(StoreProductAssignment.store_id, func.count(StoreProductAssignment.id))
            .where(StoreProductAssignment.store_id.in_(store_ids), StoreProductAssignment.active.is_(True))
            .group_by(StoreProductAssignment.store_id)
        )
        return dict(self.db.execute(stmt).all())

    def count_by_status(self) -> dict[str, int]:
        stmt = (
            select(LookupValue.table_value, func.count(Store.id))
            .join(LookupValue, Store.status_id == LookupValue.id)
            .where(Store.active.is_(True))
            .group_by(LookupValue.table_value)
        )
        return dict(self.db.execute(stmt).all())

    def add(self, store: Store) -> Store:
        self.db.add(store)
        self.db.flush()
        return store
