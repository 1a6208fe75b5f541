from urllib.parse import parse_qs

from fastapi import APIRouter, Depends, Request

from app.storecare.core.context import Principal
from app.storecare.core.deps import require_active_principal
from app.storecare.core.error_catalog import AppError
from app.storecare.db.session import get_db
from app.storecare.repos.users import UserRepository
from app.storecare.routers.support import audit, begin_idempotent, finish_idempotent, trace_id, user_item
from app.storecare.schemas.auth import (
    ChangePasswordRequest,
    LoginRequest,
    MeResponse,
    OAuth2TokenResponse,
    ProfileUpdateRequest,
    RegisterRequest,
    StoreAdminCreateRequest,
    StoreAdminCreateResponse,
    TokenResponse,
)
from app.storecare.schemas.common import ActionResponse
from app.storecare.schemas.errors import ERROR_RESPONSES
from app.storecare.services.audit import AuditEventPayload, AuditService
from app.storecare.services.auth import AuthService, normalize_email
from app.storecare.services.directory import UserDirectory

router = APIRouter(responses=ERROR_RESPONSES)


@router.post("/register", response_model=MeResponse, status_code=201, summary="Register a customer")
def register(request: Request, payload: RegisterRequest, db=Depends(get_db)):
    replay = begin_idempotent(request, db, "anonymous", payload)
    if replay:
        return replay
    user = UserDirectory(db).register_customer(
        full_name=payload.full_name,
        email=payload.email,
        phone=payload.phone,
        password=payload.password,
        confirm_password=payload.confirm_password,
        store_id=payload.store_id,
    )
    response = MeResponse(user=user_item(user), trace_id=trace_id(request))
    audit(request, db, None, action="auth.register", entity_type="user", entity_id=user.id)
    return finish_idempotent(request, response, status_code=201)


@router.post("/login", response_model=TokenResponse, summary="Login (JSON)")
def login(request: Request, payload: LoginRequest, db=Depends(get_db)):
    try:
        user, token = AuthService(db).login(payload.email, payload.password)
    except AppError as exc:
        candidate = UserRepository(db).get_by_email(normalize_email(payload.email))
        if candidate is not None:
            AuditService(db).record_event(
                AuditEventPayload(
                    actor_id=str(candidate.id),
                    actor_role=candidate.role,
                    store_id=str(candidate.store_id) if candidate.store_id else None,
                    trace_id=trace_id(request) or None,
                    action="auth.login.failed",
                    entity_type="user",
                    entity_id=str(candidate.id),
                    metadata={"error_code": exc.error.code},
                    result="failure",
                )
            )
        raise

    request.state.user_id = str(user.id)
    AuditService(db).record_event(
        AuditEventPayload(
            actor_id=str(user.id),
            actor_role=user.role,
            store_id=str(user.store_id) if user.store_id else None,
            trace_id=trace_id(request) or None,
            action="auth.login",
            entity_type="user",
            entity_id=str(user.id),
        )
    )
    return TokenResponse(
        access_token=token,
        role=user.role,
        full_name=user.full_name,
        email=user.email,
        store_id=str(user.store_id) if user.store_id else None,
        trace_id=trace_id(request),
    )


@router.post(
    "/token",
    response_model=OAuth2TokenResponse,
    summary="OAuth2 Token",
    description="OAuth2 password flow for the interactive docs; `username` carries the email.",
)
async def oauth2_token(request: Request, db=Depends(get_db)):
    raw_body = (await request.body()).decode()
    form_data = parse_qs(raw_body)
    username = (form_data.get("username") or [""])[0]
    password = (form_data.get("password") or [""])[0]
    _, token = AuthService(db).login(username, password)
    return OAuth2TokenResponse(access_token=token)


@router.get("/me", response_model=MeResponse)
def me(request: Request, principal: Principal = Depends(require_active_principal), db=Depends(get_db)):
    user = AuthService(db).current_user(principal)
    return MeResponse(user=user_item(user), trace_id=trace_id(request))


@router.put("/me", response_model=MeResponse, summary="Update own profile")
def update_profile(
    request: Request,
    payload: ProfileUpdateRequest,
    principal: Principal = Depends(require_active_principal),
    db=Depends(get_db),
):
    user = AuthService(db).update_profile(principal, payload.model_dump(exclude_unset=True))
    audit(request, db, principal, action="auth.profile.update", entity_type="user", entity_id=user.id)
    return MeResponse(user=user_item(user), trace_id=trace_id(request))


@router.put("/change-password", response_model=ActionResponse, summary="Change own password")
def change_password(
    request: Request,
    payload: ChangePasswordRequest,
    principal: Principal = Depends(require_active_principal),
    db=Depends(get_db),
):
    user = AuthService(db).change_password(
        principal,
        current_password=payload.current_password,
        new_password=payload.new_password,
        confirm_new_password=payload.confirm_new_password,
    )
    audit(request, db, principal, action="auth.change_password", entity_type="user", entity_id=user.id)
    return ActionResponse(message="Password changed successfully", trace_id=trace_id(request))


@router.post(
    "/store-admins",
    response_model=StoreAdminCreateResponse,
    status_code=201,
    summary="Create a store together with its StoreAdmin",
)
def create_store_admin(
    request: Request,
    payload: StoreAdminCreateRequest,
    principal: Principal = Depends(require_active_principal),
    db=Depends(get_db),
):
    replay = begin_idempotent(request, db, principal.user_id, payload)
    if replay:
        return replay
    registration = UserDirectory(db).create_store_admin(
        principal,
        full_name=payload.full_name,
        email=payload.email,
        phone=payload.phone,
        password=payload.password,
        confirm_password=payload.confirm_password,
        store_name=payload.store_name,
        address=payload.address,
        contact_number=payload.contact_number,
    )
    response = StoreAdminCreateResponse(
        store_id=registration.store_id,
        store_name=registration.store_name,
        user_id=registration.user_id,
        trace_id=trace_id(request),
    )
    audit(
        request,
        db,
        principal,
        action="auth.store_admin.create",
        entity_type="user",
        entity_id=registration.user_id,
        after={"store_id": registration.store_id},
    )
    return finish_idempotent(request, response, status_code=201)
