"""Exception hierarchy for monitor-web.

Two failure kinds leave the alert pipeline:

- ``AlertValidationError``: the caller sent malformed or incomplete input.
  Surfaced as a 4xx and never retried.
- ``AlertPersistenceError``: the storage backend failed. Surfaced as a 5xx,
  logged with context; the transaction has already been rolled back.

Error codes follow pattern: ALR[NUMBER]
- ALR001-099: input errors
- ALR500-599: storage errors
"""

from __future__ import annotations

from typing import Any


class MonitorWebException(Exception):
    """Base exception for all monitor-web application errors.

    The HTTP layer catches this base class and renders ``message`` with
    ``status_code``; nothing below the API layer knows about HTTP.
    """

    def __init__(
        self,
        message: str,
        code: str,
        status_code: int = 400,
        details: dict[str, Any] | None = None,
    ):
        """Initialize exception with a client-facing message and metadata.

        Args:
            message: Client-facing error message
            code: Unique error code (e.g., "ALR001")
            status_code: HTTP status code (default: 400 Bad Request)
            details: Optional additional context (logged, not returned)
        """
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to API response format."""
        return {"error": self.message}


class AlertValidationError(MonitorWebException):
    """Caller supplied malformed or incomplete input."""

    def __init__(self, message: str = "Missing required fields", details: dict[str, Any] | None = None):
        super().__init__(
            message=message,
            code="ALR001",
            status_code=400,
            details=details,
        )


class InvalidModuleError(AlertValidationError):
    """Dashboard query for a module this service does not serve."""

    def __init__(self, module: str):
        super().__init__(message="Invalid module", details={"module": module})
        self.code = "ALR002"


class AlertPersistenceError(MonitorWebException):
    """Storage layer failed; the transaction was rolled back."""

    def __init__(self, message: str = "Failed to store alert", cause: BaseException | None = None, **context: Any):
        details = dict(context)
        if cause is not None:
            details["cause"] = repr(cause)
        super().__init__(
            message=message,
            code="ALR500",
            status_code=500,
            details=details,
        )
