"""Core utilities and middleware."""

from collectibles.core.exceptions import (
    APIError,
    AuthenticationError,
    ConflictError,
    NotFoundError,
    StoreError,
    UpstreamServiceError,
    ValidationError,
)
from collectibles.core.middleware import correlation_id_var
from collectibles.core.notifications import Notification, OperationResult

__all__ = [
    "APIError",
    "AuthenticationError",
    "ConflictError",
    "Notification",
    "NotFoundError",
    "OperationResult",
    "StoreError",
    "UpstreamServiceError",
    "ValidationError",
    "correlation_id_var",
]
