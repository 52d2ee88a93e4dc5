"""
Console exception hierarchy.

Every error carries a machine-readable error_code and the HTTP status the
middleware answers with when the error escapes a view. Errors caught by the
page services never reach the middleware; they end up in the error modal.
"""

from typing import Any, Optional

from apps.core.monitoring import add_breadcrumb, capture_exception


class BaseAPIError(Exception):
    """
    Base for console errors.

    message is shown to the user as is, so subclasses raised with a Korean
    message keep it; details are logged and sent to Sentry only.
    """
    error_code = "ERROR"
    http_status = 500

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    """
    GOAL: Report the error to Sentry with its code attached.

    PARAMETERS:
      level: str - Sentry level - "error", "warning" or "info"
      extra: Optional[dict[str, Any]] - Request context (path, method, ip)
      tags: Optional[dict[str, str]] - Grouping tags

    RETURNS:
      Optional[str] - Sentry event id, None when monitoring is off

    GUARANTEES:
      - A breadcrumb precedes the event
      - error_code and exception_type are always tagged
    """
    def capture_to_sentry(
        self,
        level: str = "error",
        extra: Optional[dict[str, Any]] = None,
        tags: Optional[dict[str, str]] = None,
    ) -> Optional[str]:
        add_breadcrumb(
            message=f"{type(self).__name__}: {self.error_code}",
            category="exception",
            level=level,
            data={"error_code": self.error_code, "message": self.message},
        )

        event_extra = {**(extra or {}), "error_code": self.error_code, "message": self.message}
        if self.details:
            event_extra["details"] = self.details

        return capture_exception(
            self,
            level=level,
            extra=event_extra,
            tags={**(tags or {}), "error_code": self.error_code, "exception_type": type(self).__name__},
        )


class ValidationError(BaseAPIError):
    """Form or query data rejected locally; the backend is never called."""
    error_code = "VALIDATION_ERROR"
    http_status = 400


class ExternalServiceError(BaseAPIError):
    """The dispatch backend is unreachable or answered with an error."""
    error_code = "EXTERNAL_SERVICE_ERROR"
    http_status = 502


class BusinessLogicError(BaseAPIError):
    """
    A well-formed request the console refuses to send,
    e.g. assigning a delivery that has no recommended driver.
    """
    error_code = "BUSINESS_LOGIC_ERROR"
    http_status = 422
