"""User-facing notifications and operation results.

Collection operations never raise past their own boundary. Instead they
return an ``OperationResult`` carrying the notification that a client shows
to the user ("Item created successfully", "Failed to delete category", ...)
together with the error, if any, so the HTTP layer can pick a status code.
"""

import logging
from dataclasses import dataclass
from enum import StrEnum
from typing import Generic, TypeVar

from collectibles.core.exceptions import APIError, StoreError

T = TypeVar("T")

logger = logging.getLogger(__name__)


class NotificationVariant(StrEnum):
    DEFAULT = "default"
    DESTRUCTIVE = "destructive"


@dataclass(frozen=True)
class Notification:
    title: str
    description: str
    variant: NotificationVariant = NotificationVariant.DEFAULT

    @classmethod
    def success(cls, description: str) -> "Notification":
        return cls(title="Success", description=description)

    @classmethod
    def failure(cls, description: str) -> "Notification":
        return cls(
            title="Error",
            description=description,
            variant=NotificationVariant.DESTRUCTIVE,
        )


@dataclass
class OperationResult(Generic[T]):
    """Outcome of a collection operation."""

    ok: bool
    notification: Notification
    value: T | None = None
    error: APIError | None = None

    @classmethod
    def succeeded(cls, value: T | None, message: str) -> "OperationResult[T]":
        return cls(ok=True, value=value, notification=Notification.success(message))

    @classmethod
    def failed(cls, error: APIError, message: str) -> "OperationResult[T]":
        logger.warning(
            "Collection operation failed",
            extra={"notification": message, "error": error.message},
        )
        return cls(ok=False, error=error, notification=Notification.failure(message))

    def unwrap(self) -> T:
        """Return the value or raise the recorded error.

        Used at the HTTP boundary, where a failed operation becomes an error
        response whose detail is the user-facing message.
        """
        if self.ok:
            return self.value  # type: ignore[return-value]
        error = self.error or StoreError()
        raise type(error)(
            message=self.notification.description,
            details={"reason": error.message, **error.details},
        )
