"""Store/product assignment lifecycle.

A (store, product) pair is Unassigned (no row), Assigned (row, active) or
Retired (row, inactive). ``create`` and the bulk variants resolve every pair
independently to one of three outcomes:

* ``created``: no row existed, a new one is inserted
* ``reactivated``: a retired row is flipped back to active, keeping its id
* ``already_assigned``: the row is already active, nothing is written

Existing rows are read ``FOR UPDATE`` and inserts are flushed immediately, so
a concurrent insert of the same pair surfaces as an ``IntegrityError`` from
the unique index. The whole unit of work is then rolled back and re-run; on
the re-run the competing row is visible and the reactivate/no-op branch is
taken.
"""

import logging
from dataclasses import dataclass, field

from sqlalchemy.exc import IntegrityError

from app.storecare.core.clock import Clock, utcnow
from app.storecare.core.config import settings
from app.storecare.core.context import Principal
from app.storecare.core.error_catalog import AppError, ErrorCatalog
from app.storecare.core.lookups import STATUS_ACTIVE
from app.storecare.core.metrics import metrics
from app.storecare.core.scope import authorize, deny, enforce_resource_scope
from app.storecare.db.models import Store, StoreProductAssignment, coerce_uuid
from app.storecare.repos.assignments import AssignmentRepository
from app.storecare.repos.categories import CategoryRepository
from app.storecare.repos.products import ProductRepository
from app.storecare.repos.stores import StoreRepository
from app.storecare.services.cascade import assignment_rule_for, retire_by_rule
from app.storecare.services.statuses import StatusService
from app.storecare.services.transaction import transaction

logger = logging.getLogger(__name__)

CREATED = "created"
REACTIVATED = "reactivated"
ALREADY_ASSIGNED = "already_assigned"
RETIRED = "retired"

STATISTICS_TOP_N = 10


@dataclass
class AssignmentResult:
    outcome: str
    assignment: StoreProductAssignment


@dataclass
class BulkAssignmentResult:
    created_count: int = 0
    reactivated_count: int = 0
    skipped_count: int = 0
    assignments: list[StoreProductAssignment] = field(default_factory=list)

    def add(self, outcome: str, assignment: StoreProductAssignment) -> None:
        if outcome == CREATED:
            self.created_count += 1
        elif outcome == REACTIVATED:
            self.reactivated_count += 1
        else:
            self.skipped_count += 1
        self.assignments.append(assignment)


@dataclass
class AvailableProduct:
    product_id: str
    product_code: str
    product_name: str
    brand_name: str | None
    is_assigned: bool


@dataclass
class AvailableCategory:
    category_id: str
    category_name: str
    products: list[AvailableProduct] = field(default_factory=list)


def dedupe_ids(product_ids) -> list[str]:
    """Drop repeated ids, keeping the order of first occurrence."""
    if not product_ids:
        raise AppError(ErrorCatalog.VALIDATION_ERROR, details={"message": "product_ids must not be empty"})
    return list(dict.fromkeys(str(product_id) for product_id in product_ids))


class AssignmentManager:
    def __init__(self, db, clock: Clock = utcnow, max_retries: int | None = None):
        self.db = db
        self.clock = clock
        self.max_retries = max_retries or settings.ASSIGNMENT_MAX_RETRIES
        self.repo = AssignmentRepository(db)
        self.products = ProductRepository(db)
        self.categories = CategoryRepository(db)
        self.stores = StoreRepository(db)
        self.statuses = StatusService(db)

    # -- mutations -----------------------------------------------------------

    def create(
        self,
        principal: Principal,
        store_id,
        product_id,
        *,
        can_manage: bool = True,
        status_id: int | None = None,
    ) -> AssignmentResult:
        authorize(principal, "assignment", "write")
        store_uuid = coerce_uuid(store_id)
        product_uuid = coerce_uuid(product_id)

        def unit():
            self._require_store(store_uuid, store_id)
            if product_uuid is None or self.products.get_active(product_uuid) is None:
                raise AppError(ErrorCatalog.INVALID_REFERENCE, details={"product_id": str(product_id)})
            status = self.statuses.resolve(status_id)
            existing = self.repo.get_by_pair(store_uuid, product_uuid, for_update=True)
            return self._resolve(
                existing,
                store_uuid,
                product_uuid,
                can_manage=can_manage,
                status=status,
                actor_id=principal.user_id,
            )

        outcome, assignment = self._run_in_transaction(unit)
        metrics.record_assignment_outcome(outcome)
        return AssignmentResult(outcome=outcome, assignment=assignment)

    def bulk_assign(self, principal: Principal, store_id, product_ids, *, can_manage: bool = True) -> BulkAssignmentResult:
        authorize(principal, "assignment", "write")
        raw_ids = dedupe_ids(product_ids)
        store_uuid = coerce_uuid(store_id)

        def unit():
            self._require_store(store_uuid, store_id)
            product_uuids = self._validate_batch(raw_ids)
            return self._resolve_batch(principal, store_uuid, product_uuids, can_manage=can_manage)

        result = self._run_in_transaction(unit)
        self._record_bulk_metrics(result)
        return result

    def assign_by_category(
        self,
        principal: Principal,
        store_id,
        category_id,
        product_ids,
        *,
        can_manage: bool = True,
    ) -> BulkAssignmentResult:
        authorize(principal, "assignment", "write")
        raw_ids = dedupe_ids(product_ids)
        store_uuid = coerce_uuid(store_id)
        category_uuid = coerce_uuid(category_id)

        def unit():
            self._require_store(store_uuid, store_id)
            if category_uuid is None or self.categories.get_active(category_uuid) is None:
                raise AppError(ErrorCatalog.INVALID_REFERENCE, details={"category_id": str(category_id)})
            product_uuids = self._validate_batch(raw_ids, category_id=category_uuid)
            return self._resolve_batch(principal, store_uuid, product_uuids, can_manage=can_manage)

        result = self._run_in_transaction(unit)
        self._record_bulk_metrics(result)
        return result

    def unassign(self, principal: Principal, assignment_id) -> StoreProductAssignment:
        authorize(principal, "assignment", "unassign")
        with transaction(self.db):
            assignment = self.repo.get_active(assignment_id, for_update=True)
            if assignment is None:
                raise AppError(ErrorCatalog.ASSIGNMENT_NOT_FOUND)
            enforce_resource_scope(
                principal,
                entity="assignment",
                verb="unassign",
                target_id=assignment_id,
                owner_store_id=assignment.store_id,
                not_found=ErrorCatalog.ASSIGNMENT_NOT_FOUND,
            )
            if principal.is_store_admin and not assignment.can_manage:
                deny(principal, entity="assignment", verb="unassign", target_id=assignment_id, reason="can_manage")
            assignment.active = False
            assignment.stamp_modified(principal.user_id, self.clock())
        metrics.record_assignment_outcome(RETIRED)
        return assignment

    def unassign_all_for_store(self, principal: Principal, store_id) -> int:
        """Retire every active assignment of a store; zero retired rows is still a success."""
        authorize(principal, "assignment", "write")
        with transaction(self.db):
            store = self.stores.get_active(store_id)
            if store is None:
                raise AppError(ErrorCatalog.STORE_NOT_FOUND)
            count = retire_by_rule(
                self.db,
                assignment_rule_for(Store),
                store.id,
                actor_id=principal.user_id,
                now=self.clock(),
            )
        metrics.record_assignment_outcome(RETIRED, count)
        logger.info("Retired %s assignments for store %s", count, store_id)
        return count

    def update(
        self,
        principal: Principal,
        assignment_id,
        *,
        can_manage: bool | None = None,
        status_id: int | None = None,
    ) -> StoreProductAssignment:
        authorize(principal, "assignment", "write")
        with transaction(self.db):
            assignment = self.repo.get_active(assignment_id, for_update=True)
            if assignment is None:
                raise AppError(ErrorCatalog.ASSIGNMENT_NOT_FOUND)
            changed = False
            if can_manage is not None and can_manage != assignment.can_manage:
                assignment.can_manage = can_manage
                changed = True
            if status_id is not None and status_id != assignment.status_id:
                assignment.status = self.statuses.validate_id(status_id)
                changed = True
            if changed:
                assignment.stamp_modified(principal.user_id, self.clock())
        return assignment

    # -- reads ---------------------------------------------------------------

    def get(self, principal: Principal, assignment_id) -> StoreProductAssignment:
        authorize(principal, "assignment", "read")
        assignment = self.repo.get_active(assignment_id)
        if assignment is None:
            raise AppError(ErrorCatalog.ASSIGNMENT_NOT_FOUND)
        enforce_resource_scope(
            principal,
            entity="assignment",
            verb="read",
            target_id=assignment_id,
            owner_store_id=assignment.store_id,
            not_found=ErrorCatalog.ASSIGNMENT_NOT_FOUND,
        )
        return assignment

    def list_all(self, principal: Principal, *, store_id=None, product_id=None) -> list[StoreProductAssignment]:
        decision = authorize(principal, "assignment", "read")
        store_filter = None
        if store_id is not None:
            store_filter = coerce_uuid(store_id)
            if store_filter is None:
                return []
        if decision.store_id is not None:
            if store_filter is not None and str(store_filter) != decision.store_id:
                return []
            store_filter = coerce_uuid(decision.store_id)
        product_filter = None
        if product_id is not None:
            product_filter = coerce_uuid(product_id)
            if product_filter is None:
                return []
        return self.repo.list_active(store_id=store_filter, product_id=product_filter)

    def list_by_store(self, principal: Principal, store_id) -> list[StoreProductAssignment]:
        return self.list_all(principal, store_id=store_id)

    def list_by_product(self, principal: Principal, product_id) -> list[StoreProductAssignment]:
        return self.list_all(principal, product_id=product_id)

    def available_products(self, principal: Principal, store_id, *, category_id=None) -> list[AvailableCategory]:
        """Active catalog products grouped by category, flagged with whether the store carries them."""
        authorize(principal, "assignment", "read")
        store = self.stores.get_active(store_id)
        if store is None:
            raise AppError(ErrorCatalog.STORE_NOT_FOUND)
        enforce_resource_scope(
            principal,
            entity="assignment",
            verb="read",
            target_id=store_id,
            owner_store_id=store.id,
            not_found=ErrorCatalog.STORE_NOT_FOUND,
        )
        category_filter = None
        if category_id is not None:
            category_filter = coerce_uuid(category_id)
            if category_filter is None:
                return []

        products = self.products.list_active(status_value=STATUS_ACTIVE, category_id=category_filter)
        assigned = self.repo.assigned_product_ids(store.id)
        categories = {
            category.id: category
            for category in self.categories.list_active_by_ids({product.category_id for product in products})
        }
        by_category: dict = {}
        for product in products:
            by_category.setdefault(product.category_id, []).append(product)

        groups = []
        for category in sorted(categories.values(), key=lambda c: (c.display_order, c.category_name)):
            group = AvailableCategory(category_id=str(category.id), category_name=category.category_name)
            for product in by_category.get(category.id, []):
                group.products.append(
                    AvailableProduct(
                        product_id=str(product.id),
                        product_code=product.product_code,
                        product_name=product.product_name,
                        brand_name=product.brand_name,
                        is_assigned=product.id in assigned,
                    )
                )
            groups.append(group)
        return groups

    def statistics(self, principal: Principal) -> dict:
        authorize(principal, "assignment", "statistics")

        def rows(result):
            return [{"id": str(row[0]), "name": row[1], "count": row[2]} for row in result]

        return {
            "total_active_assignments": self.repo.count_active(),
            "top_stores": rows(self.repo.top_stores(STATISTICS_TOP_N)),
            "top_categories": rows(self.repo.top_categories(STATISTICS_TOP_N)),
            "top_products": rows(self.repo.top_products(STATISTICS_TOP_N)),
        }

    # -- internals -----------------------------------------------------------

    def _run_in_transaction(self, unit):
        attempt = 0
        while True:
            attempt += 1
            try:
                result = unit()
                self.db.commit()
                return result
            except IntegrityError as exc:
                self.db.rollback()
                if attempt >= self.max_retries:
                    logger.error("Assignment write still conflicting after %s attempts", attempt)
                    raise AppError(ErrorCatalog.LOCK_TIMEOUT, details={"reason": "assignment_conflict"}) from exc
                logger.info("Concurrent assignment insert detected, retrying (attempt %s)", attempt)
            except Exception:
                self.db.rollback()
                raise

    def _require_store(self, store_uuid, raw_store_id) -> Store:
        store = self.stores.get_active(store_uuid) if store_uuid is not None else None
        if store is None:
            raise AppError(ErrorCatalog.INVALID_REFERENCE, details={"store_id": str(raw_store_id)})
        return store

    def _validate_batch(self, raw_ids: list[str], *, category_id=None) -> list:
        parsed = [(raw, coerce_uuid(raw)) for raw in raw_ids]
        found = {
            product.id
            for product in self.products.list_active_by_ids(
                [product_uuid for _, product_uuid in parsed if product_uuid is not None],
                category_id=category_id,
            )
        }
        invalid = [raw for raw, product_uuid in parsed if product_uuid is None or product_uuid not in found]
        if invalid:
            raise AppError(ErrorCatalog.BATCH_REFERENCES_INVALID, details={"invalid_product_ids": invalid})
        return [product_uuid for _, product_uuid in parsed]

    def _resolve_batch(self, principal: Principal, store_uuid, product_uuids: list, *, can_manage: bool):
        status = self.statuses.active()
        existing = self.repo.map_by_pairs(store_uuid, product_uuids, for_update=True)
        result = BulkAssignmentResult()
        for product_uuid in product_uuids:
            outcome, assignment = self._resolve(
                existing.get(product_uuid),
                store_uuid,
                product_uuid,
                can_manage=can_manage,
                status=status,
                actor_id=principal.user_id,
            )
            result.add(outcome, assignment)
        return result

    def _resolve(self, existing, store_uuid, product_uuid, *, can_manage: bool, status, actor_id: str):
        if existing is None:
            assignment = self.repo.insert(
                StoreProductAssignment(
                    store_id=store_uuid,
                    product_id=product_uuid,
                    can_manage=can_manage,
                    status=status,
                    created_by=actor_id,
                    created_date=self.clock(),
                    active=True,
                )
            )
            return CREATED, assignment
        if not existing.active:
            existing.active = True
            existing.can_manage = can_manage
            existing.status = status
            existing.stamp_modified(actor_id, self.clock())
            return REACTIVATED, existing
        return ALREADY_ASSIGNED, existing

    @staticmethod
    def _record_bulk_metrics(result: BulkAssignmentResult) -> None:
        metrics.record_assignment_outcome(CREATED, result.created_count)
        metrics.record_assignment_outcome(REACTIVATED, result.reactivated_count)
        metrics.record_assignment_outcome(ALREADY_ASSIGNED, result.skipped_count)
