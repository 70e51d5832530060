"""Custom exception classes for the API."""

from typing import Any


class APIError(Exception):
    """Base exception for API errors."""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class AuthenticationError(APIError):
    """Raised when a mutation is attempted without a valid session."""

    def __init__(
        self,
        message: str = "Unauthorized",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message=message, status_code=401, details=details)


class NotFoundError(APIError):
    """Raised when a resource is not found."""

    def __init__(
        self,
        message: str = "Resource not found",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message=message, status_code=404, details=details)


class ConflictError(APIError):
    """Raised when a value collides with an existing one."""

    def __init__(
        self,
        message: str = "Conflict",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message=message, status_code=409, details=details)


class ValidationError(APIError):
    """Raised when validation fails."""

    def __init__(
        self,
        message: str = "Validation failed",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message=message, status_code=422, details=details)


class StoreError(APIError):
    """Raised when a remote store read or write fails."""

    def __init__(
        self,
        message: str = "Remote store operation failed",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message=message, status_code=500, details=details)


class UpstreamServiceError(APIError):
    """Raised when the image service rejects or fails a request."""

    def __init__(
        self,
        message: str = "Image service request failed",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message=message, status_code=502, details=details)
