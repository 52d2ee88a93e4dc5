"""
Health check endpoints for monitoring application status.

The console has no database or cache; readiness depends only on the
dispatch backend being reachable.
"""

import logging
from typing import Any

from django.conf import settings
from django.http import HttpRequest, JsonResponse
from django.utils import timezone
from drf_spectacular.utils import extend_schema, OpenApiResponse
from drf_spectacular.types import OpenApiTypes

from apps.integrations.monitoring import DispatchBackendMonitor

logger = logging.getLogger(__name__)


"""
GOAL: Check basic application health.

PARAMETERS:
  request: HttpRequest - Incoming HTTP request - Not None

RETURNS:
  JsonResponse - {"status": "ok", "timestamp": ...} - HTTP 200

RAISES:
  None

GUARANTEES:
  - Performs no outbound calls
"""
@extend_schema(
    tags=["health"],
    summary="Basic health check",
    responses={200: OpenApiResponse(response=OpenApiTypes.OBJECT, description="Application is running")},
)
def health_check(request: HttpRequest) -> JsonResponse:
    return JsonResponse({
        "status": "ok",
        "timestamp": timezone.now().isoformat(),
    })


"""
GOAL: Check application readiness (dispatch backend reachable, config sane).

PARAMETERS:
  request: HttpRequest - Incoming HTTP request - Not None

RETURNS:
  JsonResponse - Readiness payload with per-check status - Never None

RAISES:
  None - Never raises exceptions (returns 503 if not ready)

GUARANTEES:
  - Returns 200 OK if the backend answered
  - Returns 503 Service Unavailable otherwise
"""
@extend_schema(
    tags=["health"],
    summary="Readiness check",
    responses={
        200: OpenApiResponse(response=OpenApiTypes.OBJECT, description="Ready"),
        503: OpenApiResponse(response=OpenApiTypes.OBJECT, description="Dispatch backend unreachable"),
    },
)
def readiness_check(request: HttpRequest) -> JsonResponse:
    checks: dict[str, Any] = {
        "status": "ok",
        "timestamp": timezone.now().isoformat(),
        "checks": {},
    }

    overall_status = "ok"

    backend_status = _check_dispatch_backend()
    checks["checks"]["dispatch_backend"] = backend_status
    if backend_status["status"] != "ok":
        overall_status = "not_ready"

    checks["checks"]["configuration"] = _check_configuration()

    checks["status"] = overall_status
    status_code = 200 if overall_status == "ok" else 503
    return JsonResponse(checks, status=status_code)


"""
GOAL: Check application liveness (basic process health).

RETURNS:
  JsonResponse - {"status": "alive", "timestamp": ...} - HTTP 200
"""
@extend_schema(
    tags=["health"],
    summary="Liveness check",
    responses={200: OpenApiResponse(response=OpenApiTypes.OBJECT, description="Process is alive")},
)
def liveness_check(request: HttpRequest) -> JsonResponse:
    return JsonResponse({
        "status": "alive",
        "timestamp": timezone.now().isoformat(),
    })


def _check_dispatch_backend() -> dict[str, Any]:
    result = DispatchBackendMonitor.check_backend_health()
    if result["ok"]:
        return {"status": "ok", "base_url": result["base_url"]}
    logger.error("Dispatch backend not ready: %s", result["error"])
    return {
        "status": "error",
        "base_url": result["base_url"],
        "status_code": result["status_code"],
        "error": result["error"],
    }


"""
GOAL: Report which optional integrations are configured.

RETURNS:
  dict[str, Any] - {"status": "ok" | "warning", "services": {...}} - Never None

GUARANTEES:
  - Does not connect to anything; only inspects settings
  - Missing explicit backend URL is a warning (localhost default is used)
"""
def _check_configuration() -> dict[str, Any]:
    services: dict[str, Any] = {
        "status": "ok",
        "services": {},
    }

    backend_configured = bool(
        getattr(settings, "DISPATCH_API_URL", "") or getattr(settings, "NEXT_PUBLIC_API_URL", "")
    )
    services["services"]["dispatch_backend"] = {"configured": backend_configured}
    services["services"]["sentry"] = {"configured": bool(getattr(settings, "SENTRY_DSN", ""))}

    if not backend_configured:
        services["status"] = "warning"

    return services
