from datetime import datetime

from pydantic import BaseModel, Field

from app.storecare.core.lookups import NOT_MODIFIED, status_color


class AuditedItem(BaseModel):
    status_id: int | None = None
    status: str | None = None
    status_color: str | None = None
    active: bool
    created_by: str
    created_date: datetime
    modified_by: str = NOT_MODIFIED
    modified_date: datetime | None = None


class StatusChangeRequest(BaseModel):
    status_id: int = Field(..., ge=1)


class ActionResponse(BaseModel):
    ok: bool = True
    message: str
    trace_id: str


def audit_fields(row) -> dict:
    status = row.status.table_value if getattr(row, "status", None) is not None else None
    return {
        "status_id": getattr(row, "status_id", None),
        "status": status,
        "status_color": status_color(status) if status else None,
        "active": row.active,
        "created_by": row.created_by,
        "created_date": row.created_date,
        "modified_by": row.modified_by or NOT_MODIFIED,
        "modified_date": row.modified_date,
    }
