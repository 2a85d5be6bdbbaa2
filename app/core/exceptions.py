# ============================================================================
# Custom Exceptions
# ============================================================================
from typing import Any, Dict, List, Optional

class APIException(Exception):
    """Base exception for the Exam Prep API.

    Every error that reaches the client carries an HTTP status and a stable
    machine-readable code; ``errors`` holds field-level violations when there
    are any.
    """
    def __init__(
        self,
        detail: str,
        status_code: int = 400,
        error_code: Optional[str] = None,
        errors: Optional[List[Dict[str, Any]]] = None
    ):
        self.detail = detail
        self.status_code = status_code
        self.error_code = error_code or "API_ERROR"
        self.errors = errors
        super().__init__(self.detail)

class ValidationFailed(APIException):
    def __init__(self, errors: List[Dict[str, Any]], message: str = "Validation failed"):
        super().__init__(
            detail=message,
            status_code=400,
            error_code="VALIDATION_ERROR",
            errors=errors
        )

class BadRequestError(APIException):
    def __init__(self, message: str = "Bad request"):
        super().__init__(detail=message, status_code=400, error_code="BAD_REQUEST")

class UnauthorizedError(APIException):
    def __init__(self, message: str = "Not authenticated"):
        super().__init__(detail=message, status_code=401, error_code="UNAUTHORIZED")

class ForbiddenError(APIException):
    def __init__(self, message: str = "Access forbidden"):
        super().__init__(detail=message, status_code=403, error_code="FORBIDDEN")

class NotFoundError(APIException):
    def __init__(self, message: str = "Resource not found"):
        super().__init__(detail=message, status_code=404, error_code="NOT_FOUND")

class ConflictError(APIException):
    def __init__(self, message: str = "Resource already exists"):
        super().__init__(detail=message, status_code=409, error_code="CONFLICT")

class RateLimitExceeded(APIException):
    def __init__(self, retry_after: int = 0):
        super().__init__(
            detail="Too many requests, please try again later",
            status_code=429,
            error_code="RATE_LIMIT_EXCEEDED"
        )
        self.retry_after = retry_after

class InternalError(APIException):
    """Unexpected failure. ``cause`` is for logs only and never sent to clients."""
    def __init__(self, message: str = "Internal server error", cause: Optional[str] = None):
        super().__init__(detail=message, status_code=500, error_code="INTERNAL_ERROR")
        self.cause = cause


def format_validation_errors(errors) -> List[Dict[str, Any]]:
    """Flatten pydantic error dicts into ``{field, message}`` pairs."""
    formatted = []
    for error in errors:
        loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        formatted.append({
            "field": ".".join(loc) or "__root__",
            "message": error.get("msg", "Invalid value")
        })
    return formatted
