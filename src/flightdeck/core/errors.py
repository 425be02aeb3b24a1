"""Domain errors raised by services and rendered by the API layer.

Each error carries the HTTP status it maps to, an operator/user facing
message and optional extra body fields or response headers. Nothing in here
ever includes stack traces or internal identifiers.
"""

from __future__ import annotations

from typing import Any

from fastapi import status


class SiteError(Exception):
    """Base exception for every failure surfaced to API callers."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal error."

    def __init__(
        self,
        message: str | None = None,
        *,
        extra: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        self.message = message or self.default_message
        self.extra = dict(extra or {})
        self.headers = dict(headers or {})
        super().__init__(self.message)

    def to_body(self) -> dict[str, Any]:
        """Return the JSON body describing this error."""
        return {"error": self.message, **self.extra}


class ValidationError(SiteError):
    """Client supplied data that fails a field constraint."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request."


class UnauthorizedError(SiteError):
    """Credentials were missing or wrong."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Unauthorized"

    def __init__(self, message: str | None = None, *, realm: str = "Admin") -> None:
        super().__init__(message, headers={"WWW-Authenticate": f'Basic realm="{realm}"'})


class RateLimitedError(SiteError):
    """Caller must wait before trying again."""

    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    default_message = "Too many requests. Please wait before trying again."

    def __init__(self, retry_after_seconds: int, message: str | None = None) -> None:
        self.retry_after_seconds = max(1, int(retry_after_seconds))
        super().__init__(
            message,
            extra={"retryAfterSeconds": self.retry_after_seconds},
            headers={"Retry-After": str(self.retry_after_seconds)},
        )


class NotConfiguredError(SiteError):
    """A secret, binding or collaborator required by the operation is missing."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Server not configured."


class UpstreamDeliveryError(SiteError):
    """An outbound call that the operation depends on failed."""

    status_code = status.HTTP_502_BAD_GATEWAY
    default_message = "Upstream delivery failed."


class NotFoundOrExpiredError(SiteError):
    """The referenced token or record does not exist (any more)."""

    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found or expired."


class StoreError(RuntimeError):
    """Raised when the key-value backend cannot be reached or misbehaves."""
