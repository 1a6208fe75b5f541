import logging
from dataclasses import dataclass

from app.storecare.core.clock import Clock, utcnow
from app.storecare.core.codes import CUSTOMER_PREFIX, STORE_ADMIN_PREFIX, STORE_PREFIX, generate_code
from app.storecare.core.context import CUSTOMER, STOREADMIN, Principal, normalize_role
from app.storecare.core.error_catalog import AppError, ErrorCatalog
from app.storecare.core.lookups import STATUS_ACTIVE, STATUS_INACTIVE, STATUS_SUSPENDED
from app.storecare.core.scope import authorize, enforce_resource_scope, ensure_not_self
from app.storecare.core.security import get_password_hash
from app.storecare.db.models import Store, User, coerce_uuid
from app.storecare.repos.stores import StoreRepository
from app.storecare.repos.users import UserRepository
from app.storecare.services.auth import normalize_email, validate_new_password
from app.storecare.services.cascade import retire_dependents
from app.storecare.services.statuses import StatusService
from app.storecare.services.transaction import transaction

logger = logging.getLogger(__name__)

STORE_FIELDS = ("store_name", "address", "contact_number", "email")
USER_FIELDS = ("full_name", "phone")


@dataclass
class StoreSummary:
    store: Store
    total_employees: int = 0
    total_products: int = 0


@dataclass
class StoreAdminRegistration:
    store_id: str
    store_name: str
    user_id: str


class StoreDirectory:
    def __init__(self, db, clock: Clock = utcnow):
        self.db = db
        self.clock = clock
        self.repo = StoreRepository(db)
        self.statuses = StatusService(db)

    def list_stores(self, principal: Principal) -> list[StoreSummary]:
        decision = authorize(principal, "store", "read")
        stores = self.repo.list_active(store_id=coerce_uuid(decision.store_id))
        return self._summaries(stores)

    def get(self, principal: Principal, store_id) -> StoreSummary:
        authorize(principal, "store", "read")
        store = self._require_in_scope(principal, store_id, verb="read")
        return self._summaries([store])[0]

    def create(self, principal: Principal, *, store_name: str, status_id: int | None = None, **fields) -> Store:
        authorize(principal, "store", "write")
        with transaction(self.db):
            store = self._new_store(principal, store_name=store_name, status_id=status_id, **fields)
        logger.info("Store %s created by %s", store.store_code, principal.user_id)
        return store

    def update(self, principal: Principal, store_id, changes: dict) -> Store:
        authorize(principal, "store", "update")
        with transaction(self.db):
            store = self._require_in_scope(principal, store_id, verb="update")
            if "store_name" in changes:
                name = (changes["store_name"] or "").strip()
                if not name:
                    raise AppError(ErrorCatalog.VALIDATION_ERROR, details={"field": "store_name"})
                changes = {**changes, "store_name": name}
            for key in STORE_FIELDS:
                if key in changes:
                    setattr(store, key, changes[key])
            store.stamp_modified(principal.user_id, self.clock())
        return store

    def change_status(self, principal: Principal, store_id, status_id: int) -> Store:
        authorize(principal, "store", "write")
        with transaction(self.db):
            store = self._require(store_id)
            store.status = self.statuses.validate_id(status_id)
            store.stamp_modified(principal.user_id, self.clock())
        return store

    def soft_delete(self, principal: Principal, store_id) -> dict[str, int]:
        """Retire the store and, in the same transaction, its users, assignments and items."""
        authorize(principal, "store", "write")
        with transaction(self.db):
            store = self._require(store_id)
            now = self.clock()
            store.active = False
            store.stamp_modified(principal.user_id, now)
            retired = retire_dependents(self.db, store, actor_id=principal.user_id, now=now)
        logger.info("Store %s retired by %s, dependents: %s", store.store_code, principal.user_id, retired)
        return retired

    def statistics(self, principal: Principal) -> dict:
        authorize(principal, "store", "statistics")
        by_status = self.repo.count_by_status()
        total = sum(by_status.values())
        active = by_status.get(STATUS_ACTIVE, 0)
        suspended = by_status.get(STATUS_SUSPENDED, 0)
        return {
            "overview": {
                "total_stores": total,
                "active_stores": active,
                "suspended_stores": suspended,
                "inactive_stores": total - active - suspended,
            },
            "store_performance": self._summaries(self.repo.list_active()),
        }

    def _new_store(self, principal: Principal, *, store_name: str, status_id: int | None = None, **fields) -> Store:
        name = (store_name or "").strip()
        if not name:
            raise AppError(ErrorCatalog.VALIDATION_ERROR, details={"field": "store_name"})
        status = self.statuses.resolve(status_id)
        return self.repo.add(
            Store(
                store_code=generate_code(STORE_PREFIX, 5),
                store_name=name,
                address=fields.get("address"),
                contact_number=fields.get("contact_number"),
                email=fields.get("email"),
                status_id=status.id,
                created_by=principal.user_id,
                created_date=self.clock(),
                active=True,
            )
        )

    def _summaries(self, stores: list[Store]) -> list[StoreSummary]:
        ids = [store.id for store in stores]
        employees = self.repo.employee_counts(ids)
        products = self.repo.product_counts(ids)
        return [
            StoreSummary(
                store=store,
                total_employees=employees.get(store.id, 0),
                total_products=products.get(store.id, 0),
            )
            for store in stores
        ]

    def _require(self, store_id) -> Store:
        store = self.repo.get_active(store_id)
        if store is None:
            raise AppError(ErrorCatalog.STORE_NOT_FOUND)
        return store

    def _require_in_scope(self, principal: Principal, store_id, *, verb: str) -> Store:
        store = self._require(store_id)
        enforce_resource_scope(
            principal,
            entity="store",
            verb=verb,
            target_id=store_id,
            owner_store_id=store.id,
            not_found=ErrorCatalog.STORE_NOT_FOUND,
        )
        return store


class UserDirectory:
    def __init__(self, db, clock: Clock = utcnow):
        self.db = db
        self.clock = clock
        self.repo = UserRepository(db)
        self.stores = StoreRepository(db)
        self.statuses = StatusService(db)

    def list_users(self, principal: Principal, *, role: str | None = None) -> list[User]:
        """SuperAdmin sees every user; a StoreAdmin sees only the Customers of its own store."""
        decision = authorize(principal, "user", "read")
        role_filter = None
        if role:
            role_filter = normalize_role(role)
            if role_filter is None:
                raise AppError(ErrorCatalog.VALIDATION_ERROR, details={"role": role})
        if decision.store_id is not None:
            if role_filter not in (None, CUSTOMER):
                return []
            return self.repo.list_active(store_id=coerce_uuid(decision.store_id), role=CUSTOMER)
        return self.repo.list_active(role=role_filter)

    def get(self, principal: Principal, user_id) -> User:
        authorize(principal, "user", "read")
        return self._require_in_scope(principal, user_id, verb="read")

    def update(self, principal: Principal, user_id, changes: dict) -> User:
        authorize(principal, "user", "write")
        with transaction(self.db):
            user = self._require_in_scope(principal, user_id, verb="update")
            if "full_name" in changes:
                full_name = (changes["full_name"] or "").strip()
                if not full_name:
                    raise AppError(ErrorCatalog.VALIDATION_ERROR, details={"field": "full_name"})
                changes = {**changes, "full_name": full_name}
            if changes.get("email") is not None:
                email = normalize_email(changes["email"])
                existing = self.repo.get_by_email(email)
                if existing is not None and existing.id != user.id:
                    raise AppError(ErrorCatalog.EMAIL_ALREADY_REGISTERED)
                user.email = email
            for key in USER_FIELDS:
                if key in changes:
                    setattr(user, key, changes[key])
            user.stamp_modified(principal.user_id, self.clock())
        return user

    def toggle_active(self, principal: Principal, user_id, active: bool) -> User:
        """Move a user between the Active and Inactive status values."""
        authorize(principal, "user", "write")
        with transaction(self.db):
            user = self._require(user_id)
            if not active:
                ensure_not_self(principal, user.id, verb="deactivate")
            self._enforce_scope(principal, user, verb="toggle_active")
            status = self.statuses.require(STATUS_ACTIVE if active else STATUS_INACTIVE)
            if user.status_id != status.id:
                user.status = status
                user.stamp_modified(principal.user_id, self.clock())
        return user

    def soft_delete(self, principal: Principal, user_id) -> User:
        authorize(principal, "user", "write")
        with transaction(self.db):
            user = self._require(user_id)
            ensure_not_self(principal, user.id, verb="delete")
            self._enforce_scope(principal, user, verb="delete")
            user.active = False
            user.stamp_modified(principal.user_id, self.clock())
        return user

    def register_customer(
        self,
        *,
        full_name: str,
        email: str,
        password: str,
        confirm_password: str,
        phone: str | None = None,
        store_id=None,
    ) -> User:
        with transaction(self.db):
            validate_new_password(password, confirm_password)
            email = normalize_email(email)
            if self.repo.get_by_email(email) is not None:
                raise AppError(ErrorCatalog.EMAIL_ALREADY_REGISTERED)
            home_store = None
            if store_id is not None:
                home_store = self.stores.get_active(store_id)
                if home_store is None:
                    raise AppError(ErrorCatalog.INVALID_REFERENCE, details={"store_id": str(store_id)})
            user = self._new_user(
                role=CUSTOMER,
                code_prefix=CUSTOMER_PREFIX,
                full_name=full_name,
                email=email,
                phone=phone,
                password=password,
                store_id=home_store.id if home_store else None,
                created_by="system",
            )
        logger.info("Customer %s registered", user.user_code)
        return user

    def create_store_admin(
        self,
        principal: Principal,
        *,
        full_name: str,
        email: str,
        password: str,
        confirm_password: str,
        phone: str | None = None,
        store_name: str | None = None,
        address: str | None = None,
        contact_number: str | None = None,
    ) -> StoreAdminRegistration:
        """Create a store and its StoreAdmin as one unit; a failure on either side leaves neither."""
        authorize(principal, "user", "create_store_admin")
        with transaction(self.db):
            validate_new_password(password, confirm_password)
            email = normalize_email(email)
            if self.repo.get_by_email(email) is not None:
                raise AppError(ErrorCatalog.EMAIL_ALREADY_REGISTERED)
            store = StoreDirectory(self.db, clock=self.clock)._new_store(
                principal,
                store_name=store_name or f"{(full_name or '').strip()}'s Store",
                address=address,
                contact_number=contact_number,
                email=email,
            )
            user = self._new_user(
                role=STOREADMIN,
                code_prefix=STORE_ADMIN_PREFIX,
                full_name=full_name,
                email=email,
                phone=phone,
                password=password,
                store_id=store.id,
                created_by=principal.user_id,
            )
        logger.info("StoreAdmin %s created for store %s by %s", user.user_code, store.store_code, principal.user_id)
        return StoreAdminRegistration(store_id=str(store.id), store_name=store.store_name, user_id=str(user.id))

    def _new_user(
        self,
        *,
        role: str,
        code_prefix: str,
        full_name: str,
        email: str,
        phone: str | None,
        password: str,
        store_id,
        created_by: str,
    ) -> User:
        name = (full_name or "").strip()
        if not name:
            raise AppError(ErrorCatalog.VALIDATION_ERROR, details={"field": "full_name"})
        return self.repo.add(
            User(
                user_code=generate_code(code_prefix),
                full_name=name,
                email=email,
                phone=phone,
                hashed_password=get_password_hash(password),
                role=role,
                store_id=store_id,
                status_id=self.statuses.active().id,
                created_by=created_by,
                created_date=self.clock(),
                active=True,
            )
        )

    def _require(self, user_id) -> User:
        user = self.repo.get_active(user_id)
        if user is None:
            raise AppError(ErrorCatalog.USER_NOT_FOUND)
        return user

    def _enforce_scope(self, principal: Principal, user: User, *, verb: str) -> None:
        enforce_resource_scope(
            principal,
            entity="user",
            verb=verb,
            target_id=user.id,
            owner_store_id=user.store_id,
            not_found=ErrorCatalog.USER_NOT_FOUND,
            owner_role_tag=user.role,
        )

    def _require_in_scope(self, principal: Principal, user_id, *, verb: str) -> User:
        user = self._require(user_id)
        self._enforce_scope(principal, user, verb=verb)
        return user
