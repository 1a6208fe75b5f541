from fastapi import APIRouter, Depends, Request

from app.storecare.core.context import Principal
from app.storecare.core.deps import require_active_principal
from app.storecare.db.session import get_db
from app.storecare.routers.support import audit, begin_idempotent, finish_idempotent, store_item, summary_item, trace_id
from app.storecare.schemas.common import StatusChangeRequest
from app.storecare.schemas.directory import (
    StoreCreateRequest,
    StoreDeleteResponse,
    StoreListResponse,
    StoreResponse,
    StoreStatisticsResponse,
    StoreUpdateRequest,
)
from app.storecare.schemas.errors import ERROR_RESPONSES
from app.storecare.services.directory import StoreDirectory

router = APIRouter(responses=ERROR_RESPONSES)


@router.post("", response_model=StoreResponse, status_code=201)
def create_store(
    request: Request,
    payload: StoreCreateRequest,
    principal: Principal = Depends(require_active_principal),
    db=Depends(get_db),
):
    replay = begin_idempotent(request, db, principal.user_id, payload)
    if replay:
        return replay
    store = StoreDirectory(db).create(principal, **payload.model_dump())
    response = StoreResponse(store=store_item(store), trace_id=trace_id(request))
    audit(
        request,
        db,
        principal,
        action="store.create",
        entity_type="store",
        entity_id=store.id,
        after={"store_name": store.store_name},
    )
    return finish_idempotent(request, response, status_code=201)


@router.get("", response_model=StoreListResponse)
def list_stores(request: Request, principal: Principal = Depends(require_active_principal), db=Depends(get_db)):
    items = [summary_item(summary) for summary in StoreDirectory(db).list_stores(principal)]
    return StoreListResponse(stores=items, count=len(items), trace_id=trace_id(request))


@router.get("/statistics", response_model=StoreStatisticsResponse)
def store_statistics(request: Request, principal: Principal = Depends(require_active_principal), db=Depends(get_db)):
    stats = StoreDirectory(db).statistics(principal)
    return StoreStatisticsResponse(
        overview=stats["overview"],
        store_performance=[summary_item(summary) for summary in stats["store_performance"]],
        trace_id=trace_id(request),
    )


@router.get("/{store_id}", response_model=StoreResponse)
def get_store(
    request: Request,
    store_id: str,
    principal: Principal = Depends(require_active_principal),
    db=Depends(get_db),
):
    summary = StoreDirectory(db).get(principal, store_id)
    return StoreResponse(store=summary_item(summary), trace_id=trace_id(request))


@router.put("/{store_id}", response_model=StoreResponse)
def update_store(
    request: Request,
    store_id: str,
    payload: StoreUpdateRequest,
    principal: Principal = Depends(require_active_principal),
    db=Depends(get_db),
):
    changes = payload.model_dump(exclude_unset=True)
    store = StoreDirectory(db).update(principal, store_id, changes)
    audit(request, db, principal, action="store.update", entity_type="store", entity_id=store.id, after=changes)
    return StoreResponse(store=store_item(store), trace_id=trace_id(request))


@router.patch("/{store_id}/status", response_model=StoreResponse)
def change_store_status(
    request: Request,
    store_id: str,
    payload: StatusChangeRequest,
    principal: Principal = Depends(require_active_principal),
    db=Depends(get_db),
):
    store = StoreDirectory(db).change_status(principal, store_id, payload.status_id)
    audit(
        request,
        db,
        principal,
        action="store.status",
        entity_type="store",
        entity_id=store.id,
        after={"status_id": payload.status_id},
    )
    return StoreResponse(store=store_item(store), trace_id=trace_id(request))


@router.delete("/{store_id}", response_model=StoreDeleteResponse)
def delete_store(
    request: Request,
    store_id: str,
    principal: Principal = Depends(require_active_principal),
    db=Depends(get_db),
):
    retired = StoreDirectory(db).soft_delete(principal, store_id)
    audit(request, db, principal, action="store.delete", entity_type="store", entity_id=store_id, metadata=retired)
    return StoreDeleteResponse(retired=retired, trace_id=trace_id(request))
