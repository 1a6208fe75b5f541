from fastapi import Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from app.storecare.core.context import Principal, role_of
from app.storecare.core.error_catalog import ErrorCatalog
from app.storecare.core.metrics import metrics
from app.storecare.schemas.assignments import AssignmentItem
from app.storecare.schemas.catalog import CategoryItem, ProductItem
from app.storecare.schemas.common import audit_fields
from app.storecare.schemas.directory import StoreItem, UserItem
from app.storecare.services.audit import AuditEventPayload, AuditService
from app.storecare.services.idempotency import IdempotencyService, extract_idempotency_key


def trace_id(request: Request) -> str:
    return getattr(request.state, "trace_id", "")


def begin_idempotent(request: Request, db, scope_key: str, payload: BaseModel | dict | None) -> JSONResponse | None:
    """Start idempotency tracking when the client sent an Idempotency-Key.

    Returns the stored response when the key was already completed with the same payload.
    """
    idempotency_key = extract_idempotency_key(request.headers)
    if not idempotency_key:
        return None
    if isinstance(payload, BaseModel):
        payload = payload.model_dump(mode="json")
    context, replay = IdempotencyService(db).start(
        scope_key=scope_key,
        endpoint=str(request.url.path),
        method=request.method,
        idempotency_key=idempotency_key,
        request_hash=IdempotencyService.fingerprint(payload),
    )
    if replay:
        metrics.increment_idempotency_replay()
        return JSONResponse(
            status_code=replay.status_code,
            content=replay.response_body,
            headers={"X-Idempotency-Result": ErrorCatalog.IDEMPOTENCY_REPLAY.code},
        )
    request.state.idempotency = context
    return None


def finish_idempotent(request: Request, response: BaseModel, status_code: int = 200) -> BaseModel:
    context = getattr(request.state, "idempotency", None)
    if context is not None:
        context.record_success(status_code=status_code, response_body=response.model_dump(mode="json"))
    return response


def audit(
    request: Request,
    db,
    principal: Principal | None,
    *,
    action: str,
    entity_type: str,
    entity_id,
    after: dict | None = None,
    metadata: dict | None = None,
) -> None:
    AuditService(db).record_event(
        AuditEventPayload(
            actor_id=principal.user_id if principal else None,
            actor_role=role_of(principal),
            store_id=principal.store_id if principal else None,
            trace_id=trace_id(request) or None,
            action=action,
            entity_type=entity_type,
            entity_id=str(entity_id) if entity_id is not None else None,
            after=after,
            metadata=metadata,
        )
    )


def category_item(category) -> CategoryItem:
    return CategoryItem(
        id=str(category.id),
        category_code=category.category_code,
        category_name=category.category_name,
        description=category.description,
        display_order=category.display_order,
        is_popular=category.is_popular,
        icon_ref=category.icon_ref,
        image_ref=category.image_ref,
        **audit_fields(category),
    )


def product_item(product) -> ProductItem:
    return ProductItem(
        id=str(product.id),
        product_code=product.product_code,
        product_name=product.product_name,
        description=product.description,
        image_ref=product.image_ref,
        brand_name=product.brand_name,
        is_featured=product.is_featured,
        view_count=product.view_count,
        category_id=str(product.category_id),
        category_name=product.category.category_name if product.category is not None else None,
        **audit_fields(product),
    )


def assignment_item(assignment) -> AssignmentItem:
    product = assignment.product
    return AssignmentItem(
        id=str(assignment.id),
        store_id=str(assignment.store_id),
        store_name=assignment.store.store_name if assignment.store is not None else None,
        product_id=str(assignment.product_id),
        product_name=product.product_name if product is not None else None,
        category_name=product.category.category_name if product is not None and product.category else None,
        can_manage=assignment.can_manage,
        **audit_fields(assignment),
    )


def store_item(store, *, total_employees: int = 0, total_products: int = 0) -> StoreItem:
    return StoreItem(
        id=str(store.id),
        store_code=store.store_code,
        store_name=store.store_name,
        address=store.address,
        contact_number=store.contact_number,
        email=store.email,
        total_employees=total_employees,
        total_products=total_products,
        **audit_fields(store),
    )


def summary_item(summary) -> StoreItem:
    return store_item(
        summary.store,
        total_employees=summary.total_employees,
        total_products=summary.total_products,
    )


def user_item(user) -> UserItem:
    return UserItem(
        id=str(user.id),
        user_code=user.user_code,
        full_name=user.full_name,
        email=user.email,
        phone=user.phone,
        role=user.role,
        store_id=str(user.store_id) if user.store_id else None,
        last_login=user.last_login,
        **audit_fields(user),
    )
