from typing import Literal

from pydantic import BaseModel, Field

from app.storecare.schemas.common import AuditedItem

AssignmentOutcome = Literal["created", "reactivated", "already_assigned"]


class AssignmentCreateRequest(BaseModel):
    store_id: str
    product_id: str
    can_manage: bool = True
    status_id: int | None = None


class BulkAssignmentRequest(BaseModel):
    store_id: str
    product_ids: list[str] = Field(..., min_length=1)
    can_manage: bool = True

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "store_id": "5b0c6a53-1a55-4c1c-9d0b-2d3c7f7e1a10",
                    "product_ids": ["0d9b8f1e-3c0e-4d1e-8d52-8c1f1f7b2a01"],
                    "can_manage": True,
                }
            ]
        }
    }


class CategoryAssignmentRequest(BulkAssignmentRequest):
    category_id: str


class AssignmentUpdateRequest(BaseModel):
    can_manage: bool | None = None
    status_id: int | None = None


class AssignmentItem(AuditedItem):
    id: str
    store_id: str
    store_name: str | None = None
    product_id: str
    product_name: str | None = None
    category_name: str | None = None
    can_manage: bool


class AssignmentResponse(BaseModel):
    assignment: AssignmentItem
    trace_id: str


class AssignmentCreateResponse(AssignmentResponse):
    outcome: AssignmentOutcome


class AssignmentListResponse(BaseModel):
    assignments: list[AssignmentItem]
    count: int
    trace_id: str


class BulkAssignmentResponse(BaseModel):
    created_count: int
    reactivated_count: int
    skipped_count: int
    assignments: list[AssignmentItem]
    trace_id: str


class UnassignAllResponse(BaseModel):
    store_id: str
    retired_count: int
    trace_id: str


class AvailableProductItem(BaseModel):
    product_id: str
    product_code: str
    product_name: str
    brand_name: str | None = None
    is_assigned: bool


class AvailableCategoryItem(BaseModel):
    category_id: str
    category_name: str
    products: list[AvailableProductItem]


class AvailableProductsResponse(BaseModel):
    store_id: str
    categories: list[AvailableCategoryItem]
    trace_id: str


class RankedItem(BaseModel):
    id: str
    name: str
    count: int


class AssignmentStatisticsResponse(BaseModel):
    total_active_assignments: int
    top_stores: list[RankedItem]
    top_categories: list[RankedItem]
    top_products: list[RankedItem]
    trace_id: str
