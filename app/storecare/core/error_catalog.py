from dataclasses import dataclass
from fastapi import status


@dataclass(frozen=True)
class ErrorDefinition:
    code: str
    message: str
    status_code: int


class ErrorCatalog:
    INVALID_TOKEN = ErrorDefinition("INVALID_TOKEN", "Invalid token", status.HTTP_401_UNAUTHORIZED)
    INVALID_CREDENTIALS = ErrorDefinition(
        "INVALID_CREDENTIALS",
        "Invalid email or password",
        status.HTTP_401_UNAUTHORIZED,
    )
    USER_INACTIVE = ErrorDefinition(
        "USER_INACTIVE",
        "User is inactive or suspended",
        status.HTTP_403_FORBIDDEN,
    )
    PERMISSION_DENIED = ErrorDefinition(
        "PERMISSION_DENIED",
        "Permission denied",
        status.HTTP_403_FORBIDDEN,
    )
    SELF_LOCKOUT_DENIED = ErrorDefinition(
        "SELF_LOCKOUT_DENIED",
        "You cannot deactivate or delete your own account",
        status.HTTP_403_FORBIDDEN,
    )
    STORE_SCOPE_REQUIRED = ErrorDefinition(
        "STORE_SCOPE_REQUIRED",
        "StoreAdmin is not associated with any store",
        status.HTTP_403_FORBIDDEN,
    )
    CATEGORY_NOT_FOUND = ErrorDefinition("CATEGORY_NOT_FOUND", "Category not found", status.HTTP_404_NOT_FOUND)
    PRODUCT_NOT_FOUND = ErrorDefinition("PRODUCT_NOT_FOUND", "Product not found", status.HTTP_404_NOT_FOUND)
    ASSIGNMENT_NOT_FOUND = ErrorDefinition(
        "ASSIGNMENT_NOT_FOUND",
        "Assignment not found",
        status.HTTP_404_NOT_FOUND,
    )
    STORE_NOT_FOUND = ErrorDefinition("STORE_NOT_FOUND", "Store not found", status.HTTP_404_NOT_FOUND)
    USER_NOT_FOUND = ErrorDefinition("USER_NOT_FOUND", "User not found", status.HTTP_404_NOT_FOUND)
    VALIDATION_ERROR = ErrorDefinition(
        "VALIDATION_ERROR",
        "Validation error",
        status.HTTP_422_UNPROCESSABLE_ENTITY,
    )
    DUPLICATE_NAME = ErrorDefinition(
        "DUPLICATE_NAME",
        "An active record with this name already exists",
        status.HTTP_422_UNPROCESSABLE_ENTITY,
    )
    INVALID_REFERENCE = ErrorDefinition(
        "INVALID_REFERENCE",
        "Referenced record is invalid or inactive",
        status.HTTP_422_UNPROCESSABLE_ENTITY,
    )
    INVALID_STATUS = ErrorDefinition(
        "INVALID_STATUS",
        "Invalid status selected",
        status.HTTP_422_UNPROCESSABLE_ENTITY,
    )
    PASSWORD_TOO_SHORT = ErrorDefinition(
        "PASSWORD_TOO_SHORT",
        "Password too short",
        status.HTTP_422_UNPROCESSABLE_ENTITY,
    )
    PASSWORD_MISMATCH = ErrorDefinition(
        "PASSWORD_MISMATCH",
        "Passwords do not match",
        status.HTTP_422_UNPROCESSABLE_ENTITY,
    )
    CURRENT_PASSWORD_INCORRECT = ErrorDefinition(
        "CURRENT_PASSWORD_INCORRECT",
        "Current password is incorrect",
        status.HTTP_422_UNPROCESSABLE_ENTITY,
    )
    EMAIL_ALREADY_REGISTERED = ErrorDefinition(
        "EMAIL_ALREADY_REGISTERED",
        "Email is already registered",
        status.HTTP_409_CONFLICT,
    )
    HAS_ACTIVE_DEPENDENCIES = ErrorDefinition(
        "HAS_ACTIVE_DEPENDENCIES",
        "Cannot delete a record with active dependents",
        status.HTTP_409_CONFLICT,
    )
    BATCH_REFERENCES_INVALID = ErrorDefinition(
        "BATCH_REFERENCES_INVALID",
        "Some products are invalid or inactive",
        status.HTTP_409_CONFLICT,
    )
    STATUS_NOT_CONFIGURED = ErrorDefinition(
        "STATUS_NOT_CONFIGURED",
        "Required status lookup is not configured",
        status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
    DB_UNAVAILABLE = ErrorDefinition(
        "DB_UNAVAILABLE",
        "Database unavailable",
        status.HTTP_503_SERVICE_UNAVAILABLE,
    )
    LOCK_TIMEOUT = ErrorDefinition(
        "LOCK_TIMEOUT",
        "Lock wait timeout",
        status.HTTP_409_CONFLICT,
    )
    INTERNAL_ERROR = ErrorDefinition(
        "INTERNAL_ERROR",
        "Internal server error",
        status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
    IDEMPOTENCY_KEY_REUSED_WITH_DIFFERENT_PAYLOAD = ErrorDefinition(
        "IDEMPOTENCY_KEY_REUSED_WITH_DIFFERENT_PAYLOAD",
        "Idempotency key reused with different payload",
        status.HTTP_409_CONFLICT,
    )
    IDEMPOTENCY_REQUEST_IN_PROGRESS = ErrorDefinition(
        "IDEMPOTENCY_REQUEST_IN_PROGRESS",
        "Idempotency request already in progress",
        status.HTTP_409_CONFLICT,
    )
    IDEMPOTENCY_REPLAY = ErrorDefinition(
        "IDEMPOTENCY_REPLAY",
        "Idempotent replay",
        status.HTTP_200_OK,
    )


class AppError(Exception):
    def __init__(self, error: ErrorDefinition, details: object | None = None):
        self.error = error
        self.details = details
        super().__init__(error.message)
