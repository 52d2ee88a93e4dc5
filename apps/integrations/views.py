from __future__ import annotations

from django.http import JsonResponse
from drf_spectacular.utils import extend_schema, OpenApiParameter, OpenApiResponse
from drf_spectacular.types import OpenApiTypes

from apps.integrations.monitoring import DispatchBackendMonitor


"""
GOAL: Provide a lightweight health endpoint for deployment smoke tests.

PARAMETERS:
  request: HttpRequest - Django request - GET, optional ?deep=1

RETURNS:
  JsonResponse - {"status": "ok", "dispatch": {...}} - HTTP 200

RAISES:
  None

GUARANTEES:
  - Always returns JSON
  - deep check does not raise (returns ok=false on failures)
"""
@extend_schema(
    tags=["health"],
    summary="Smoke-test health endpoint",
    parameters=[
        OpenApiParameter("deep", OpenApiTypes.STR, description="Set to 1 to probe the dispatch backend"),
    ],
    responses={200: OpenApiResponse(response=OpenApiTypes.OBJECT, description="Status payload")},
)
def healthz(request):
    deep = str(request.GET.get("deep") or "") == "1"
    payload = {"status": "ok"}
    if deep:
        payload["dispatch"] = DispatchBackendMonitor.check_backend_health()
    return JsonResponse(payload)
