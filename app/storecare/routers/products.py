from fastapi import APIRouter, Depends, Query, Request

from app.storecare.core.context import Principal
from app.storecare.core.deps import get_optional_principal, require_active_principal
from app.storecare.db.session import get_db
from app.storecare.routers.support import audit, begin_idempotent, finish_idempotent, product_item, trace_id
from app.storecare.schemas.catalog import (
    ProductCreateRequest,
    ProductListResponse,
    ProductResponse,
    ProductUpdateRequest,
)
from app.storecare.schemas.common import ActionResponse, StatusChangeRequest
from app.storecare.schemas.errors import ERROR_RESPONSES
from app.storecare.services.catalog import ProductService

router = APIRouter(responses=ERROR_RESPONSES)


def _list_response(request: Request, products) -> ProductListResponse:
    items = [product_item(product) for product in products]
    return ProductListResponse(products=items, count=len(items), trace_id=trace_id(request))


@router.post("", response_model=ProductResponse, status_code=201)
def create_product(
    request: Request,
    payload: ProductCreateRequest,
    principal: Principal = Depends(require_active_principal),
    db=Depends(get_db),
):
    replay = begin_idempotent(request, db, principal.user_id, payload)
    if replay:
        return replay
    product = ProductService(db).create(principal, **payload.model_dump())
    response = ProductResponse(product=product_item(product), trace_id=trace_id(request))
    audit(
        request,
        db,
        principal,
        action="product.create",
        entity_type="product",
        entity_id=product.id,
        after={"product_name": product.product_name, "category_id": str(product.category_id)},
    )
    return finish_idempotent(request, response, status_code=201)


@router.get("", response_model=ProductListResponse)
def list_products(
    request: Request,
    category_id: str | None = Query(default=None),
    principal: Principal | None = Depends(get_optional_principal),
    db=Depends(get_db),
):
    return _list_response(request, ProductService(db).list_products(principal, category_id=category_id))


@router.get("/featured", response_model=ProductListResponse)
def list_featured_products(
    request: Request,
    principal: Principal | None = Depends(get_optional_principal),
    db=Depends(get_db),
):
    return _list_response(request, ProductService(db).list_featured(principal))


@router.get("/{product_id}", response_model=ProductResponse)
def get_product(
    request: Request,
    product_id: str,
    principal: Principal | None = Depends(get_optional_principal),
    db=Depends(get_db),
):
    product = ProductService(db).get(principal, product_id)
    return ProductResponse(product=product_item(product), trace_id=trace_id(request))


@router.put("/{product_id}", response_model=ProductResponse)
def update_product(
    request: Request,
    product_id: str,
    payload: ProductUpdateRequest,
    principal: Principal = Depends(require_active_principal),
    db=Depends(get_db),
):
    changes = payload.model_dump(exclude_unset=True)
    product = ProductService(db).update(principal, product_id, changes)
    audit(request, db, principal, action="product.update", entity_type="product", entity_id=product.id, after=changes)
    return ProductResponse(product=product_item(product), trace_id=trace_id(request))


@router.patch("/{product_id}/status", response_model=ProductResponse)
def change_product_status(
    request: Request,
    product_id: str,
    payload: StatusChangeRequest,
    principal: Principal = Depends(require_active_principal),
    db=Depends(get_db),
):
    product = ProductService(db).change_status(principal, product_id, payload.status_id)
    audit(
        request,
        db,
        principal,
        action="product.status",
        entity_type="product",
        entity_id=product.id,
        after={"status_id": payload.status_id},
    )
    return ProductResponse(product=product_item(product), trace_id=trace_id(request))


@router.delete("/{product_id}", response_model=ActionResponse)
def delete_product(
    request: Request,
    product_id: str,
    principal: Principal = Depends(require_active_principal),
    db=Depends(get_db),
):
    product = ProductService(db).soft_delete(principal, product_id)
    audit(request, db, principal, action="product.delete", entity_type="product", entity_id=product.id)
    return ActionResponse(message="Product deleted", trace_id=trace_id(request))
