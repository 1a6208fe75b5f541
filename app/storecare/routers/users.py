from fastapi import APIRouter, Depends, Query, Request

from app.storecare.core.context import Principal
from app.storecare.core.deps import require_active_principal
from app.storecare.db.session import get_db
from app.storecare.routers.support import audit, trace_id, user_item
from app.storecare.schemas.common import ActionResponse
from app.storecare.schemas.directory import UserActiveRequest, UserListResponse, UserResponse, UserUpdateRequest
from app.storecare.schemas.errors import ERROR_RESPONSES
from app.storecare.services.directory import UserDirectory

router = APIRouter(responses=ERROR_RESPONSES)


@router.get("", response_model=UserListResponse)
def list_users(
    request: Request,
    role: str | None = Query(default=None),
    principal: Principal = Depends(require_active_principal),
    db=Depends(get_db),
):
    items = [user_item(user) for user in UserDirectory(db).list_users(principal, role=role)]
    return UserListResponse(users=items, count=len(items), trace_id=trace_id(request))


@router.get("/{user_id}", response_model=UserResponse)
def get_user(
    request: Request,
    user_id: str,
    principal: Principal = Depends(require_active_principal),
    db=Depends(get_db),
):
    user = UserDirectory(db).get(principal, user_id)
    return UserResponse(user=user_item(user), trace_id=trace_id(request))


@router.put("/{user_id}", response_model=UserResponse)
def update_user(
    request: Request,
    user_id: str,
    payload: UserUpdateRequest,
    principal: Principal = Depends(require_active_principal),
    db=Depends(get_db),
):
    changes = payload.model_dump(exclude_unset=True)
    user = UserDirectory(db).update(principal, user_id, changes)
    audit(request, db, principal, action="user.update", entity_type="user", entity_id=user.id, after=changes)
    return UserResponse(user=user_item(user), trace_id=trace_id(request))


@router.patch("/{user_id}/active", response_model=UserResponse)
def toggle_user_active(
    request: Request,
    user_id: str,
    payload: UserActiveRequest,
    principal: Principal = Depends(require_active_principal),
    db=Depends(get_db),
):
    user = UserDirectory(db).toggle_active(principal, user_id, payload.active)
    audit(
        request,
        db,
        principal,
        action="user.toggle_active",
        entity_type="user",
        entity_id=user.id,
        after={"active": payload.active},
    )
    return UserResponse(user=user_item(user), trace_id=trace_id(request))


@router.delete("/{user_id}", response_model=ActionResponse)
def delete_user(
    request: Request,
    user_id: str,
    principal: Principal = Depends(require_active_principal),
    db=Depends(get_db),
):
    user = UserDirectory(db).soft_delete(principal, user_id)
    audit(request, db, principal, action="user.delete", entity_type="user", entity_id=user.id)
    return ActionResponse(message="User deleted", trace_id=trace_id(request))
