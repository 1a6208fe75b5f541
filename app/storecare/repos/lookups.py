from sqlalchemy import select

from app.storecare.core.lookups import STATUS_TABLE
from app.storecare.db.models import LookupValue


class LookupRepository:
    def __init__(self, db):
        self.db = db

    def get_value(self, table_name: str, value: str) -> LookupValue | None:
        stmt = select(LookupValue).where(
            LookupValue.table_name == table_name,
            LookupValue.table_value == value,
            LookupValue.active.is_(True),
        )
        return self.db.execute(stmt).scalars().first()

    def get_status(self, value: str) -> LookupValue | None:
        return self.get_value(STATUS_TABLE, value)

    def get_status_by_id(self, status_id: int) -> LookupValue | None:
        stmt = select(LookupValue).where(
            LookupValue.id == status_id,
            LookupValue.table_name == STATUS_TABLE,
            LookupValue.active.is_(True),
        )
        return self.db.execute(stmt).scalars().first()
