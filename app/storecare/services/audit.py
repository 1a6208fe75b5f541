import logging
from dataclasses import dataclass

from app.storecare.core.clock import utcnow
from app.storecare.db.models import AuditEvent
from app.storecare.repos.audit import AuditRepository

logger = logging.getLogger(__name__)


@dataclass
class AuditEventPayload:
    actor_id: str | None
    actor_role: str | None
    store_id: str | None
    trace_id: str | None
    action: str
    entity_type: str
    entity_id: str | None
    before: dict | None = None
    after: dict | None = None
    metadata: dict | None = None
    result: str = "success"


class AuditService:
    """Best-effort audit trail.

    Failures are logged and swallowed; the audited mutation is already committed.
    """

    def __init__(self, db):
        self.repo = AuditRepository(db)

    def record_event(self, payload: AuditEventPayload) -> None:
        try:
            event = AuditEvent(
                actor_id=payload.actor_id,
                actor_role=payload.actor_role,
                store_id=payload.store_id,
                trace_id=payload.trace_id,
                action=payload.action,
                entity_type=payload.entity_type,
                entity_id=payload.entity_id,
                before_payload=payload.before,
                after_payload=payload.after,
                event_metadata=payload.metadata,
                result=payload.result,
                created_at=utcnow(),
            )
            self.repo.create(event)
        except Exception:
            self.repo.db.rollback()
            logger.exception(
                "Failed to write audit event",
                extra={"action": payload.action, "trace_id": payload.trace_id, "entity_id": payload.entity_id},
            )
