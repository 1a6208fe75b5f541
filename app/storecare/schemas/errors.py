from pydantic import BaseModel


class ApiErrorResponse(BaseModel):
    code: str
    message: str
    details: dict | list | None = None
    trace_id: str | None = None


class ApiValidationErrorItem(BaseModel):
    field: str | None = None
    message: str
    type: str


class ApiValidationErrorDetails(BaseModel):
    errors: list[ApiValidationErrorItem]


class ApiValidationErrorResponse(ApiErrorResponse):
    details: ApiValidationErrorDetails | dict | None = None


ERROR_RESPONSES = {
    401: {"model": ApiErrorResponse, "description": "Missing or invalid token"},
    403: {"model": ApiErrorResponse, "description": "Caller may not perform this operation"},
    404: {"model": ApiErrorResponse, "description": "Not found or not visible to the caller"},
    409: {"model": ApiErrorResponse, "description": "Conflict"},
    422: {"model": ApiValidationErrorResponse, "description": "Validation error"},
}
