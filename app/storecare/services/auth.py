from app.storecare.core.clock import Clock, utcnow
from app.storecare.core.config import settings
from app.storecare.core.context import Principal
from app.storecare.core.error_catalog import AppError, ErrorCatalog
from app.storecare.core.lookups import STATUS_ACTIVE
from app.storecare.core.security import create_user_access_token, get_password_hash, verify_password
from app.storecare.db.models import User
from app.storecare.repos.users import UserRepository
from app.storecare.services.transaction import transaction


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def validate_new_password(password: str, confirm_password: str | None) -> None:
    if len(password or "") < settings.PASSWORD_MIN_LENGTH:
        raise AppError(ErrorCatalog.PASSWORD_TOO_SHORT, details={"min_length": settings.PASSWORD_MIN_LENGTH})
    if confirm_password is not None and password != confirm_password:
        raise AppError(ErrorCatalog.PASSWORD_MISMATCH)


class AuthService:
    def __init__(self, db, clock: Clock = utcnow):
        self.db = db
        self.clock = clock
        self.repo = UserRepository(db)

    def login(self, email: str, password: str) -> tuple[User, str]:
        user = self.repo.get_by_email(normalize_email(email))
        if user is None or not user.active or not verify_password(password, user.hashed_password):
            raise AppError(ErrorCatalog.INVALID_CREDENTIALS)
        self.ensure_user_active(user)
        with transaction(self.db):
            user.last_login = self.clock()
        return user, create_user_access_token(user)

    def current_user(self, principal: Principal) -> User:
        user = self.repo.get_active(principal.user_id)
        if user is None:
            raise AppError(ErrorCatalog.INVALID_TOKEN)
        return user

    def update_profile(self, principal: Principal, changes: dict) -> User:
        with transaction(self.db):
            user = self.current_user(principal)
            if "full_name" in changes:
                full_name = (changes["full_name"] or "").strip()
                if not full_name:
                    raise AppError(ErrorCatalog.VALIDATION_ERROR, details={"field": "full_name"})
                user.full_name = full_name
            if "phone" in changes:
                user.phone = changes["phone"]
            user.stamp_modified(principal.user_id, self.clock())
        return user

    def change_password(
        self,
        principal: Principal,
        *,
        current_password: str,
        new_password: str,
        confirm_new_password: str,
    ) -> User:
        with transaction(self.db):
            user = self.current_user(principal)
            if not verify_password(current_password, user.hashed_password):
                raise AppError(ErrorCatalog.CURRENT_PASSWORD_INCORRECT)
            validate_new_password(new_password, confirm_new_password)
            user.hashed_password = get_password_hash(new_password)
            user.stamp_modified(principal.user_id, self.clock())
        return user

    @staticmethod
    def ensure_user_active(user: User) -> None:
        if not user.active or user.status is None or user.status.table_value != STATUS_ACTIVE:
            raise AppError(ErrorCatalog.USER_INACTIVE)
