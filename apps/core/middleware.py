"""
Exception handling middleware for unified error responses.

JSON paths (/api/, /health, /healthz) get the standardized JSON error body.
Console pages get the layout rendered with the error modal open, and HTMX
requests get only the modal fragment.
Also integrates with Sentry for monitoring and error tracking.
"""

import logging
import traceback
from typing import Any

from django.conf import settings
from django.core.exceptions import ValidationError as DjangoValidationError, PermissionDenied
from django.http import Http404, HttpRequest, HttpResponse, JsonResponse
from django.shortcuts import render

from apps.core.exceptions import BaseAPIError, ValidationError
from apps.core.monitoring import add_breadcrumb, set_transaction, capture_exception

logger = logging.getLogger(__name__)

JSON_PATH_PREFIXES = ("/api/", "/health", "/healthz")
ERROR_TEMPLATE = "errors/error.html"
ERROR_MODAL_TEMPLATE = "components/error_modal.html"
DEFAULT_ERROR_TITLE = "오류"
UNEXPECTED_ERROR_MESSAGE = "예기치 않은 오류가 발생했습니다. 잠시 후 다시 시도해주세요."
BACKEND_ERROR_MESSAGE = "서버와 통신 중 오류가 발생했습니다."


"""
GOAL: Wrap request processing with monitoring and convert escaped exceptions to responses.

PARAMETERS:
  get_response: Callable - Django middleware get_response callable - Not None

RETURNS:
  Callable - Middleware function with a process_exception hook - Not None

RAISES:
  None

GUARANTEES:
  - BaseAPIError and unexpected exceptions raised by views never produce Django's bare 500 page
  - Http404 and PermissionDenied are left to Django
  - Production mode hides exception details
"""
def ExceptionHandlingMiddleware(get_response: Any) -> Any:

    def middleware(request: HttpRequest) -> HttpResponse:
        add_breadcrumb(
            message=f"Request: {request.method} {request.path}",
            category="http",
            level="info",
            data={
                "method": request.method,
                "path": request.path,
                "ip": _get_client_ip(request),
            }
        )

        transaction = set_transaction(
            name=f"{request.method} {request.path}",
            op="http.request",
            tags={"method": request.method},
        )

        if transaction:
            with transaction:
                response = get_response(request)
        else:
            response = get_response(request)

        add_breadcrumb(
            message=f"Response: {response.status_code}",
            category="http",
            level="info",
            data={"status_code": response.status_code},
        )
        return response

    def process_exception(request: HttpRequest, exc: Exception) -> HttpResponse | None:
        if isinstance(exc, (Http404, PermissionDenied)):
            return None
        if isinstance(exc, BaseAPIError):
            return _handle_api_error(exc, request)
        if isinstance(exc, DjangoValidationError):
            validation_error = ValidationError(
                message="; ".join(exc.messages),
                details={"django_validation": exc.messages},
            )
            return _handle_api_error(validation_error, request)
        return _handle_unexpected_error(exc, request)

    middleware.process_exception = process_exception
    return middleware


def _wants_json(request: HttpRequest) -> bool:
    return request.path.startswith(JSON_PATH_PREFIXES)


def _is_htmx(request: HttpRequest) -> bool:
    return request.headers.get("HX-Request") == "true"


"""
GOAL: Render the console error page (or the HTMX modal fragment) for a failed request.

PARAMETERS:
  request: HttpRequest - Current request - Not None
  title: str - Modal title - Non-empty
  message: str - Modal message - Non-empty
  status: int - HTTP status code

RETURNS:
  HttpResponse - Rendered template - Never None
"""
def _render_error_page(request: HttpRequest, title: str, message: str, status: int) -> HttpResponse:
    context = {"error_modal": {"title": title, "message": message}}
    template = ERROR_MODAL_TEMPLATE if _is_htmx(request) else ERROR_TEMPLATE
    return render(request, template, context, status=status)


"""
GOAL: Generate a response for custom API exceptions.

PARAMETERS:
  exc: BaseAPIError - Custom exception - Not None
  request: HttpRequest - Current request for logging - Not None

RETURNS:
  HttpResponse - JSON error body or rendered error page, with exc.http_status

GUARANTEES:
  - Details only included in DEBUG mode
  - Exception is sent to Sentry if monitoring is enabled
"""
def _handle_api_error(exc: BaseAPIError, request: HttpRequest) -> HttpResponse:
    add_breadcrumb(
        message=f"API Error: {exc.error_code}",
        category="error",
        level="warning",
        data={
            "error_code": exc.error_code,
            "path": request.path,
            "method": request.method,
        }
    )

    exc.capture_to_sentry(
        level="warning",
        extra={"path": request.path, "method": request.method, "ip": _get_client_ip(request)},
        tags={"path": request.path},
    )

    logger.warning(
        "API Error: %s - %s - Path: %s",
        exc.error_code,
        exc.message,
        request.path,
    )

    if not _wants_json(request):
        message = exc.message
        user_message = getattr(exc, "user_message", None)
        if callable(user_message):
            message = user_message(BACKEND_ERROR_MESSAGE)
        return _render_error_page(request, DEFAULT_ERROR_TITLE, message, exc.http_status)

    response_data: dict[str, Any] = {
        "error": {
            "code": exc.error_code,
            "message": exc.message,
        }
    }
    if settings.DEBUG and exc.details:
        response_data["error"]["details"] = exc.details

    return JsonResponse(response_data, status=exc.http_status, json_dumps_params={"ensure_ascii": False})


"""
GOAL: Generate a 500 response for unexpected exceptions.

PARAMETERS:
  exc: Exception - Unexpected exception - Not None
  request: HttpRequest - Current request for logging - Not None

RETURNS:
  HttpResponse - JSON error body or rendered error page with 500 status

GUARANTEES:
  - Logged with full traceback and sent to Sentry
  - Traceback is exposed only in DEBUG mode and only on JSON paths
"""
def _handle_unexpected_error(exc: Exception, request: HttpRequest) -> HttpResponse:
    add_breadcrumb(
        message=f"Unexpected error: {type(exc).__name__}",
        category="error",
        level="error",
        data={
            "exception_type": type(exc).__name__,
            "path": request.path,
            "method": request.method,
        }
    )

    capture_exception(
        exc,
        level="error",
        extra={
            "path": request.path,
            "method": request.method,
            "ip": _get_client_ip(request),
        },
        tags={
            "exception_type": type(exc).__name__,
            "path": request.path,
        }
    )

    logger.error(
        "Unexpected error: %s - Path: %s",
        str(exc),
        request.path,
        exc_info=exc,
    )

    if not _wants_json(request):
        return _render_error_page(request, DEFAULT_ERROR_TITLE, UNEXPECTED_ERROR_MESSAGE, 500)

    response_data: dict[str, Any] = {
        "error": {
            "code": "INTERNAL_SERVER_ERROR",
            "message": "An unexpected error occurred. Please try again later.",
        }
    }
    if settings.DEBUG:
        response_data["error"]["details"] = {
            "exception_type": type(exc).__name__,
            "exception_message": str(exc),
            "traceback": "".join(traceback.format_exception(exc)),
        }

    return JsonResponse(response_data, status=500)


"""
GOAL: Extract client IP address from request.

RETURNS:
  str - X-Forwarded-For first hop, else REMOTE_ADDR, else "unknown"
"""
def _get_client_ip(request: HttpRequest) -> str:
    x_forwarded_for = request.META.get("HTTP_X_FORWARDED_FOR")
    if x_forwarded_for:
        return x_forwarded_for.split(",")[0].strip()
    return request.META.get("REMOTE_ADDR", "unknown")
