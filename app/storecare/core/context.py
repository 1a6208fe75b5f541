from dataclasses import dataclass

SUPERADMIN = "SuperAdmin"
STOREADMIN = "StoreAdmin"
CUSTOMER = "Customer"
ANONYMOUS = "Anonymous"

ROLES = (SUPERADMIN, STOREADMIN, CUSTOMER)
_ROLE_LOOKUP = {role.upper(): role for role in ROLES}


@dataclass(frozen=True)
class Principal:
    """The authenticated caller, resolved once per request from the token claims.

    For a StoreAdmin, ``store_id`` is the store embedded in the token at login
    and is the fixed scope of the session until the next login.
    """

    user_id: str
    role: str
    store_id: str | None = None

    @property
    def is_store_admin(self) -> bool:
        return self.role == STOREADMIN


def normalize_role(role: str | None) -> str | None:
    if not role:
        return None
    return _ROLE_LOOKUP.get(role.strip().upper())


def build_principal(*, user_id: str | None, role: str | None, store_id: str | None) -> Principal:
    canonical_role = normalize_role(role)
    if not user_id or canonical_role is None:
        raise ValueError("principal requires a user id and a known role")
    if canonical_role != STOREADMIN:
        store_id = None
    return Principal(user_id=str(user_id), role=canonical_role, store_id=str(store_id) if store_id else None)


def role_of(principal: Principal | None) -> str:
    return principal.role if principal is not None else ANONYMOUS
