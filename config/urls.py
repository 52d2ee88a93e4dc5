from __future__ import annotations

from django.conf import settings
from django.urls import path, include

from apps.core.health_views import health_check, readiness_check, liveness_check
from apps.integrations import views as integrations_views

urlpatterns = [
    # Health checks
    path("health/", health_check, name="health_check"),
    path("health/ready/", readiness_check, name="health_ready"),
    path("health/live/", liveness_check, name="health_live"),
    path("healthz", integrations_views.healthz, name="healthz"),
    # Console pages
    path("", include("apps.console.urls")),
]

# OpenAPI/Swagger documentation (conditional based on OPENAPI_ENABLED)
if getattr(settings, "OPENAPI_ENABLED", True):
    from drf_spectacular.views import SpectacularAPIView, SpectacularRedocView, SpectacularSwaggerView

    urlpatterns += [
        path("api/schema/", SpectacularAPIView.as_view(), name="schema"),
        path("api/docs/", SpectacularSwaggerView.as_view(url_name="schema"), name="swagger-ui"),
        path("api/redoc/", SpectacularRedocView.as_view(url_name="schema"), name="redoc"),
    ]
