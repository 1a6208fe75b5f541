import logging

from app.storecare.core.error_catalog import AppError, ErrorCatalog
from app.storecare.core.lookups import STATUS_ACTIVE
from app.storecare.db.models import LookupValue
from app.storecare.repos.lookups import LookupRepository

logger = logging.getLogger(__name__)


class StatusService:
    def __init__(self, db):
        self.repo = LookupRepository(db)

    def require(self, value: str) -> LookupValue:
        status = self.repo.get_status(value)
        if status is None:
            logger.error("Status lookup %r is not configured", value)
            raise AppError(ErrorCatalog.STATUS_NOT_CONFIGURED, details={"status": value})
        return status

    def active(self) -> LookupValue:
        return self.require(STATUS_ACTIVE)

    def validate_id(self, status_id: int | None) -> LookupValue:
        status = self.repo.get_status_by_id(status_id) if status_id is not None else None
        if status is None:
            raise AppError(ErrorCatalog.INVALID_STATUS, details={"status_id": status_id})
        return status

    def resolve(self, status_id: int | None) -> LookupValue:
        """Status for a new record: the given id when supplied, otherwise Active."""
        if status_id is None:
            return self.active()
        return self.validate_id(status_id)
