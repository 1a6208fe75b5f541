from fastapi import Depends, Request
from jose import JWTError
from pydantic import ValidationError

from app.storecare.core.context import Principal, build_principal
from app.storecare.core.error_catalog import AppError, ErrorCatalog
from app.storecare.core.security import TokenData, decode_token, oauth2_scheme
from app.storecare.db.session import get_db
from app.storecare.repos.users import UserRepository
from app.storecare.services.auth import AuthService


def _decode(token: str) -> TokenData:
    try:
        return TokenData(**decode_token(token))
    except (JWTError, ValidationError, TypeError) as exc:
        raise AppError(ErrorCatalog.INVALID_TOKEN) from exc


def get_current_token_data(token: str | None = Depends(oauth2_scheme)) -> TokenData:
    if not token:
        raise AppError(ErrorCatalog.INVALID_TOKEN)
    return _decode(token)


def get_optional_token_data(token: str | None = Depends(oauth2_scheme)) -> TokenData | None:
    if not token:
        return None
    return _decode(token)


def _principal_from(request: Request, token_data: TokenData) -> Principal:
    try:
        principal = build_principal(user_id=token_data.sub, role=token_data.role, store_id=token_data.store_id)
    except ValueError as exc:
        raise AppError(ErrorCatalog.INVALID_TOKEN) from exc
    request.state.user_id = principal.user_id
    request.state.role = principal.role
    return principal


def require_principal(request: Request, token_data: TokenData = Depends(get_current_token_data)) -> Principal:
    return _principal_from(request, token_data)


def get_optional_principal(
    request: Request,
    token_data: TokenData | None = Depends(get_optional_token_data),
) -> Principal | None:
    if token_data is None:
        return None
    return _principal_from(request, token_data)


def require_active_principal(principal: Principal = Depends(require_principal), db=Depends(get_db)) -> Principal:
    """Reject tokens whose user has since been retired or moved off the Active status.

    The store scope stays the one embedded in the token.
    """
    user = UserRepository(db).get_active(principal.user_id)
    if user is None:
        raise AppError(ErrorCatalog.INVALID_TOKEN)
    AuthService.ensure_user_active(user)
    return principal


__all__ = [
    "get_current_token_data",
    "get_optional_token_data",
    "require_principal",
    "get_optional_principal",
    "require_active_principal",
]
