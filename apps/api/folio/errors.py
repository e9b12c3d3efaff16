"""Application exception types."""

from folio.schemas.error import ErrorResponse


class ApiError(Exception):
    """Structured API error that maps directly to contract error payloads."""

    status_code = 500
    code = "INTERNAL_ERROR"

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        code: str | None = None,
        details: dict | None = None,
    ) -> None:
        if status_code is not None:
            self.status_code = status_code
        if code is not None:
            self.code = code
        self.payload = ErrorResponse(code=self.code, message=message, details=details)
        super().__init__(message)


class UnauthenticatedError(ApiError):
    """Missing, malformed or rejected bearer credential."""

    status_code = 401
    code = "UNAUTHORIZED"


class InsufficientPermissionError(ApiError):
    status_code = 403
    code = "INSUFFICIENT_PERMISSION"


class ProfileNotFoundError(ApiError):
    """The credential was valid but no local member profile exists for it."""

    status_code = 404
    code = "PROFILE_NOT_FOUND"


class NotFoundError(ApiError):
    status_code = 404
    code = "RESOURCE_NOT_FOUND"

    def __init__(self, message: str = "Resource not found", **kwargs) -> None:
        super().__init__(message, **kwargs)


class ForbiddenError(ApiError):
    status_code = 403
    code = "FORBIDDEN"


class ConflictError(ApiError):
    status_code = 409
    code = "CONFLICT"


class ValidationError(ApiError):
    status_code = 400
    code = "VALIDATION_ERROR"


class DatabaseError(ApiError):
    """Store failure; not recoverable within the current request."""

    status_code = 500
    code = "DATABASE_ERROR"


__all__ = [
    "ApiError",
    "ConflictError",
    "DatabaseError",
    "ForbiddenError",
    "InsufficientPermissionError",
    "NotFoundError",
    "ProfileNotFoundError",
    "UnauthenticatedError",
    "ValidationError",
]
