from fastapi import APIRouter, Depends, Request

from app.storecare.core.context import Principal
from app.storecare.core.deps import get_optional_principal, require_active_principal
from app.storecare.db.session import get_db
from app.storecare.routers.support import audit, begin_idempotent, category_item, finish_idempotent, trace_id
from app.storecare.schemas.catalog import (
    CategoryCreateRequest,
    CategoryListResponse,
    CategoryReorderRequest,
    CategoryResponse,
    CategoryUpdateRequest,
)
from app.storecare.schemas.common import ActionResponse, StatusChangeRequest
from app.storecare.schemas.errors import ERROR_RESPONSES
from app.storecare.services.catalog import CategoryService

router = APIRouter(responses=ERROR_RESPONSES)


def _list_response(request: Request, categories) -> CategoryListResponse:
    items = [category_item(category) for category in categories]
    return CategoryListResponse(categories=items, count=len(items), trace_id=trace_id(request))


@router.post("", response_model=CategoryResponse, status_code=201)
def create_category(
    request: Request,
    payload: CategoryCreateRequest,
    principal: Principal = Depends(require_active_principal),
    db=Depends(get_db),
):
    replay = begin_idempotent(request, db, principal.user_id, payload)
    if replay:
        return replay
    category = CategoryService(db).create(principal, **payload.model_dump())
    response = CategoryResponse(category=category_item(category), trace_id=trace_id(request))
    audit(
        request,
        db,
        principal,
        action="category.create",
        entity_type="category",
        entity_id=category.id,
        after={"category_name": category.category_name, "display_order": category.display_order},
    )
    return finish_idempotent(request, response, status_code=201)


@router.get("", response_model=CategoryListResponse)
def list_categories(request: Request, principal: Principal | None = Depends(get_optional_principal), db=Depends(get_db)):
    return _list_response(request, CategoryService(db).list_categories(principal))


@router.get("/popular", response_model=CategoryListResponse)
def list_popular_categories(
    request: Request,
    principal: Principal | None = Depends(get_optional_principal),
    db=Depends(get_db),
):
    return _list_response(request, CategoryService(db).list_popular(principal))


@router.post("/reorder", response_model=CategoryListResponse)
def reorder_categories(
    request: Request,
    payload: CategoryReorderRequest,
    principal: Principal = Depends(require_active_principal),
    db=Depends(get_db),
):
    orders = {item.id: item.display_order for item in payload.items}
    categories = CategoryService(db).reorder(principal, orders)
    audit(request, db, principal, action="category.reorder", entity_type="category", entity_id=None, after=orders)
    return _list_response(request, categories)


@router.get("/{category_id}", response_model=CategoryResponse)
def get_category(
    request: Request,
    category_id: str,
    principal: Principal | None = Depends(get_optional_principal),
    db=Depends(get_db),
):
    category = CategoryService(db).get(principal, category_id)
    return CategoryResponse(category=category_item(category), trace_id=trace_id(request))


@router.put("/{category_id}", response_model=CategoryResponse)
def update_category(
    request: Request,
    category_id: str,
    payload: CategoryUpdateRequest,
    principal: Principal = Depends(require_active_principal),
    db=Depends(get_db),
):
    changes = payload.model_dump(exclude_unset=True)
    category = CategoryService(db).update(principal, category_id, changes)
    audit(request, db, principal, action="category.update", entity_type="category", entity_id=category.id, after=changes)
    return CategoryResponse(category=category_item(category), trace_id=trace_id(request))


@router.patch("/{category_id}/status", response_model=CategoryResponse)
def change_category_status(
    request: Request,
    category_id: str,
    payload: StatusChangeRequest,
    principal: Principal = Depends(require_active_principal),
    db=Depends(get_db),
):
    category = CategoryService(db).change_status(principal, category_id, payload.status_id)
    audit(
        request,
        db,
        principal,
        action="category.status",
        entity_type="category",
        entity_id=category.id,
        after={"status_id": payload.status_id},
    )
    return CategoryResponse(category=category_item(category), trace_id=trace_id(request))


@router.delete("/{category_id}", response_model=ActionResponse)
def delete_category(
    request: Request,
    category_id: str,
    principal: Principal = Depends(require_active_principal),
    db=Depends(get_db),
):
    category = CategoryService(db).soft_delete(principal, category_id)
    audit(request, db, principal, action="category.delete", entity_type="category", entity_id=category.id)
    return ActionResponse(message="Category deleted", trace_id=trace_id(request))
