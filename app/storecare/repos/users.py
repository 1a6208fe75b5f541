from sqlalchemy import func, select

from app.storecare.db.models import User, coerce_uuid


class UserRepository:
    def __init__(self, db):
        self.db = db

    def get_active(self, user_id) -> User | None:
        user_uuid = coerce_uuid(user_id)
        if user_uuid is None:
            return None
        stmt = select(User).where(User.id == user_uuid, User.active.is_(True))
        return self.db.execute(stmt).scalars().first()

    def get_by_email(self, email: str) -> User | None:
        stmt = select(User).where(func.lower(User.email) == email.strip().lower())
        return self.db.execute(stmt).scalars().first()

    def list_active(self, *, store_id=None, role: str | None = None) -> list[User]:
        stmt = select(User).where(User.active.is_(True))
        if store_id is not None:
            stmt = stmt.where(User.store_id == store_id)
        if role:
            stmt = stmt.where(User.role == role)
        return self.db.execute(stmt.order_by(User.full_name.asc())).scalars().all()

    def add(self, user: User) -> User:
        self.db.add(user)
        self.db.flush()
        return user
