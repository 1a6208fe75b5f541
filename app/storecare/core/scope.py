"""Row visibility and mutation eligibility for every entity.

Every service entry point asks this module two questions: may this caller
perform ``entity.verb`` at all (``authorize``), and may it touch this specific
row (``enforce_resource_scope``).  List operations receive a ``ScopeDecision``
that narrows the query instead of failing.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from app.storecare.core.context import ANONYMOUS, CUSTOMER, STOREADMIN, SUPERADMIN, Principal, role_of
from app.storecare.core.error_catalog import AppError, ErrorCatalog, ErrorDefinition
from app.storecare.core.lookups import STATUS_ACTIVE
from app.storecare.core.metrics import metrics

logger = logging.getLogger(__name__)

EVERYONE = frozenset({SUPERADMIN, STOREADMIN, CUSTOMER, ANONYMOUS})
ADMINS = frozenset({SUPERADMIN, STOREADMIN})
SUPERADMIN_ONLY = frozenset({SUPERADMIN})

POLICY_TABLE: dict[tuple[str, str], frozenset[str]] = {
    ("category", "read"): EVERYONE,
    ("category", "write"): SUPERADMIN_ONLY,
    ("product", "read"): EVERYONE,
    ("product", "write"): SUPERADMIN_ONLY,
    ("assignment", "read"): ADMINS,
    ("assignment", "write"): SUPERADMIN_ONLY,
    ("assignment", "unassign"): ADMINS,
    ("assignment", "statistics"): SUPERADMIN_ONLY,
    ("store", "read"): ADMINS,
    ("store", "update"): ADMINS,
    ("store", "write"): SUPERADMIN_ONLY,
    ("store", "statistics"): SUPERADMIN_ONLY,
    ("user", "read"): ADMINS,
    ("user", "write"): ADMINS,
    ("user", "create_store_admin"): SUPERADMIN_ONLY,
}


class Effect(str, Enum):
    ALLOW = "allow"
    FILTER = "filter"


@dataclass(frozen=True)
class ScopeDecision:
    entity: str
    verb: str
    effect: Effect
    store_id: str | None = None
    status_filter: str | None = None

    @property
    def unrestricted(self) -> bool:
        return self.effect is Effect.ALLOW


def _log_denial(principal: Principal | None, *, entity: str, verb: str, target_id, reason: str) -> None:
    metrics.increment_rbac_denied(entity)
    logger.warning(
        "Scope denied: caller=%s role=%s entity=%s verb=%s target=%s reason=%s",
        principal.user_id if principal else None,
        role_of(principal),
        entity,
        verb,
        target_id,
        reason,
    )


def visible_status_filter(principal: Principal | None) -> str | None:
    if role_of(principal) in (CUSTOMER, ANONYMOUS):
        return STATUS_ACTIVE
    return None


def authorize(principal: Principal | None, entity: str, verb: str) -> ScopeDecision:
    allowed_roles = POLICY_TABLE.get((entity, verb))
    if allowed_roles is None:
        raise KeyError(f"No scope policy registered for {entity}.{verb}")

    role = role_of(principal)
    if role not in allowed_roles:
        if principal is None:
            raise AppError(ErrorCatalog.INVALID_TOKEN)
        _log_denial(principal, entity=entity, verb=verb, target_id=None, reason="role")
        raise AppError(ErrorCatalog.PERMISSION_DENIED)

    if role == STOREADMIN:
        if not principal.store_id:
            _log_denial(principal, entity=entity, verb=verb, target_id=None, reason="missing_store")
            raise AppError(ErrorCatalog.STORE_SCOPE_REQUIRED)
        return ScopeDecision(entity=entity, verb=verb, effect=Effect.FILTER, store_id=principal.store_id)
    if role in (CUSTOMER, ANONYMOUS):
        return ScopeDecision(
            entity=entity, verb=verb, effect=Effect.FILTER, status_filter=visible_status_filter(principal)
        )
    return ScopeDecision(entity=entity, verb=verb, effect=Effect.ALLOW)


def enforce_resource_scope(
    principal: Principal | None,
    *,
    entity: str,
    verb: str,
    target_id,
    owner_store_id,
    not_found: ErrorDefinition,
    owner_role_tag: str | None = None,
) -> None:
    """Reject a StoreAdmin touching a row outside its store, or a non-Customer user row.

    The rejection is the entity's not-found error so that probing another
    store's ids reveals nothing about their existence.
    """
    if principal is None or not principal.is_store_admin:
        return
    owner = str(owner_store_id) if owner_store_id else None
    if owner != principal.store_id:
        _log_denial(principal, entity=entity, verb=verb, target_id=target_id, reason="store_mismatch")
        raise AppError(not_found)
    if owner_role_tag is not None and owner_role_tag != CUSTOMER:
        _log_denial(principal, entity=entity, verb=verb, target_id=target_id, reason="role_tag")
        raise AppError(not_found)


def ensure_not_self(principal: Principal, target_user_id, *, verb: str) -> None:
    if str(target_user_id) == principal.user_id:
        _log_denial(principal, entity="user", verb=verb, target_id=target_user_id, reason="self_lockout")
        raise AppError(ErrorCatalog.SELF_LOCKOUT_DENIED)


def deny(principal: Principal, *, entity: str, verb: str, target_id, reason: str) -> None:
    _log_denial(principal, entity=entity, verb=verb, target_id=target_id, reason=reason)
    raise AppError(ErrorCatalog.PERMISSION_DENIED)
