from sqlalchemy import select

from app.storecare.core.config import settings
from app.storecare.core.context import ROLES, SUPERADMIN
from app.storecare.core.lookups import (
    ROLE_TABLE,
    STATUS_ACTIVE,
    STATUS_INACTIVE,
    STATUS_PENDING,
    STATUS_SUSPENDED,
    STATUS_TABLE,
)
from app.storecare.core.security import get_password_hash
from app.storecare.db.models import LookupValue, User
from app.storecare.core.codes import SUPERADMIN_PREFIX, generate_code


DEFAULT_LOOKUPS = {
    STATUS_TABLE: [
        (STATUS_ACTIVE, "Record is live"),
        (STATUS_INACTIVE, "Record is administratively disabled"),
        (STATUS_SUSPENDED, "Record is suspended"),
        (STATUS_PENDING, "Record awaits approval"),
    ],
    ROLE_TABLE: [(role, f"System role: {role}") for role in ROLES],
}


def _get_or_create_lookups(db):
    existing = {
        (row.table_name, row.table_value)
        for row in db.execute(select(LookupValue)).scalars().all()
    }
    for table_name, values in DEFAULT_LOOKUPS.items():
        for sequence, (value, description) in enumerate(values, start=1):
            if (table_name, value) in existing:
                continue
            db.add(
                LookupValue(
                    table_name=table_name,
                    table_value=value,
                    table_sequence=sequence,
                    description=description,
                    active=True,
                )
            )


def _get_or_create_superadmin(db):
    user = db.execute(select(User).where(User.email == settings.SUPERADMIN_EMAIL)).scalars().first()
    if user:
        return user
    active_status = (
        db.execute(
            select(LookupValue).where(
                LookupValue.table_name == STATUS_TABLE,
                LookupValue.table_value == STATUS_ACTIVE,
            )
        )
        .scalars()
        .one()
    )
    user = User(
        user_code=generate_code(SUPERADMIN_PREFIX),
        full_name=settings.SUPERADMIN_FULL_NAME,
        email=settings.SUPERADMIN_EMAIL,
        hashed_password=get_password_hash(settings.SUPERADMIN_PASSWORD),
        role=SUPERADMIN,
        store_id=None,
        status_id=active_status.id,
        created_by="system",
        active=True,
    )
    db.add(user)
    return user


def run_seed(db):
    _get_or_create_lookups(db)
    db.flush()
    _get_or_create_superadmin(db)
    db.commit()


if __name__ == "__main__":
    from app.storecare.db.session import SessionLocal

    with SessionLocal() as session:
        run_seed(session)
