from fastapi import APIRouter, Depends, Query, Request

from app.storecare.core.context import Principal
from app.storecare.core.deps import require_active_principal
from app.storecare.db.session import get_db
from app.storecare.routers.support import assignment_item, audit, begin_idempotent, finish_idempotent, trace_id
from app.storecare.schemas.assignments import (
    AssignmentCreateRequest,
    AssignmentCreateResponse,
    AssignmentListResponse,
    AssignmentResponse,
    AssignmentStatisticsResponse,
    AssignmentUpdateRequest,
    AvailableCategoryItem,
    AvailableProductItem,
    AvailableProductsResponse,
    BulkAssignmentRequest,
    BulkAssignmentResponse,
    CategoryAssignmentRequest,
    UnassignAllResponse,
)
from app.storecare.schemas.common import ActionResponse
from app.storecare.schemas.errors import ERROR_RESPONSES
from app.storecare.services.assignments import AssignmentManager, BulkAssignmentResult

router = APIRouter(responses=ERROR_RESPONSES)


def _list_response(request: Request, assignments) -> AssignmentListResponse:
    items = [assignment_item(assignment) for assignment in assignments]
    return AssignmentListResponse(assignments=items, count=len(items), trace_id=trace_id(request))


def _bulk_response(request: Request, result: BulkAssignmentResult) -> BulkAssignmentResponse:
    return BulkAssignmentResponse(
        created_count=result.created_count,
        reactivated_count=result.reactivated_count,
        skipped_count=result.skipped_count,
        assignments=[assignment_item(assignment) for assignment in result.assignments],
        trace_id=trace_id(request),
    )


def _bulk_counts(result: BulkAssignmentResult) -> dict:
    return {
        "created_count": result.created_count,
        "reactivated_count": result.reactivated_count,
        "skipped_count": result.skipped_count,
    }


@router.post("", response_model=AssignmentCreateResponse)
def create_assignment(
    request: Request,
    payload: AssignmentCreateRequest,
    principal: Principal = Depends(require_active_principal),
    db=Depends(get_db),
):
    replay = begin_idempotent(request, db, principal.user_id, payload)
    if replay:
        return replay
    result = AssignmentManager(db).create(
        principal,
        payload.store_id,
        payload.product_id,
        can_manage=payload.can_manage,
        status_id=payload.status_id,
    )
    response = AssignmentCreateResponse(
        outcome=result.outcome,
        assignment=assignment_item(result.assignment),
        trace_id=trace_id(request),
    )
    audit(
        request,
        db,
        principal,
        action="assignment.create",
        entity_type="assignment",
        entity_id=result.assignment.id,
        metadata={"outcome": result.outcome},
    )
    return finish_idempotent(request, response)


@router.post("/bulk", response_model=BulkAssignmentResponse)
def bulk_assign(
    request: Request,
    payload: BulkAssignmentRequest,
    principal: Principal = Depends(require_active_principal),
    db=Depends(get_db),
):
    replay = begin_idempotent(request, db, principal.user_id, payload)
    if replay:
        return replay
    result = AssignmentManager(db).bulk_assign(
        principal,
        payload.store_id,
        payload.product_ids,
        can_manage=payload.can_manage,
    )
    response = _bulk_response(request, result)
    audit(
        request,
        db,
        principal,
        action="assignment.bulk_assign",
        entity_type="store",
        entity_id=payload.store_id,
        metadata=_bulk_counts(result),
    )
    return finish_idempotent(request, response)


@router.post("/by-category", response_model=BulkAssignmentResponse)
def assign_by_category(
    request: Request,
    payload: CategoryAssignmentRequest,
    principal: Principal = Depends(require_active_principal),
    db=Depends(get_db),
):
    replay = begin_idempotent(request, db, principal.user_id, payload)
    if replay:
        return replay
    result = AssignmentManager(db).assign_by_category(
        principal,
        payload.store_id,
        payload.category_id,
        payload.product_ids,
        can_manage=payload.can_manage,
    )
    response = _bulk_response(request, result)
    audit(
        request,
        db,
        principal,
        action="assignment.assign_by_category",
        entity_type="store",
        entity_id=payload.store_id,
        metadata={"category_id": payload.category_id, **_bulk_counts(result)},
    )
    return finish_idempotent(request, response)


@router.get("", response_model=AssignmentListResponse)
def list_assignments(
    request: Request,
    store_id: str | None = Query(default=None),
    product_id: str | None = Query(default=None),
    principal: Principal = Depends(require_active_principal),
    db=Depends(get_db),
):
    assignments = AssignmentManager(db).list_all(principal, store_id=store_id, product_id=product_id)
    return _list_response(request, assignments)


@router.get("/statistics", response_model=AssignmentStatisticsResponse)
def assignment_statistics(
    request: Request,
    principal: Principal = Depends(require_active_principal),
    db=Depends(get_db),
):
    stats = AssignmentManager(db).statistics(principal)
    return AssignmentStatisticsResponse(**stats, trace_id=trace_id(request))


@router.get("/available-products/{store_id}", response_model=AvailableProductsResponse)
def available_products(
    request: Request,
    store_id: str,
    category_id: str | None = Query(default=None),
    principal: Principal = Depends(require_active_principal),
    db=Depends(get_db),
):
    groups = AssignmentManager(db).available_products(principal, store_id, category_id=category_id)
    return AvailableProductsResponse(
        store_id=store_id,
        categories=[
            AvailableCategoryItem(
                category_id=group.category_id,
                category_name=group.category_name,
                products=[AvailableProductItem(**vars(product)) for product in group.products],
            )
            for group in groups
        ],
        trace_id=trace_id(request),
    )


@router.get("/store/{store_id}", response_model=AssignmentListResponse)
def list_store_assignments(
    request: Request,
    store_id: str,
    principal: Principal = Depends(require_active_principal),
    db=Depends(get_db),
):
    return _list_response(request, AssignmentManager(db).list_by_store(principal, store_id))


@router.get("/product/{product_id}", response_model=AssignmentListResponse)
def list_product_assignments(
    request: Request,
    product_id: str,
    principal: Principal = Depends(require_active_principal),
    db=Depends(get_db),
):
    return _list_response(request, AssignmentManager(db).list_by_product(principal, product_id))


@router.delete("/store/{store_id}", response_model=UnassignAllResponse)
def unassign_all_for_store(
    request: Request,
    store_id: str,
    principal: Principal = Depends(require_active_principal),
    db=Depends(get_db),
):
    count = AssignmentManager(db).unassign_all_for_store(principal, store_id)
    audit(
        request,
        db,
        principal,
        action="assignment.unassign_all",
        entity_type="store",
        entity_id=store_id,
        metadata={"retired_count": count},
    )
    return UnassignAllResponse(store_id=store_id, retired_count=count, trace_id=trace_id(request))


@router.get("/{assignment_id}", response_model=AssignmentResponse)
def get_assignment(
    request: Request,
    assignment_id: str,
    principal: Principal = Depends(require_active_principal),
    db=Depends(get_db),
):
    assignment = AssignmentManager(db).get(principal, assignment_id)
    return AssignmentResponse(assignment=assignment_item(assignment), trace_id=trace_id(request))


@router.put("/{assignment_id}", response_model=AssignmentResponse)
def update_assignment(
    request: Request,
    assignment_id: str,
    payload: AssignmentUpdateRequest,
    principal: Principal = Depends(require_active_principal),
    db=Depends(get_db),
):
    assignment = AssignmentManager(db).update(
        principal,
        assignment_id,
        can_manage=payload.can_manage,
        status_id=payload.status_id,
    )
    audit(
        request,
        db,
        principal,
        action="assignment.update",
        entity_type="assignment",
        entity_id=assignment.id,
        after=payload.model_dump(exclude_unset=True),
    )
    return AssignmentResponse(assignment=assignment_item(assignment), trace_id=trace_id(request))


@router.delete("/{assignment_id}", response_model=ActionResponse)
def unassign(
    request: Request,
    assignment_id: str,
    principal: Principal = Depends(require_active_principal),
    db=Depends(get_db),
):
    assignment = AssignmentManager(db).unassign(principal, assignment_id)
    audit(request, db, principal, action="assignment.unassign", entity_type="assignment", entity_id=assignment.id)
    return ActionResponse(message="Assignment removed", trace_id=trace_id(request))
