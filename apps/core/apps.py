"""
Core app configuration for Django.

Shared exceptions, middleware, validation, DTOs and monitoring for the console.
"""

import logging

from django.apps import AppConfig
from django.conf import settings

logger = logging.getLogger(__name__)


class CoreConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.core"
    verbose_name = "Core"

    def ready(self) -> None:
        """
        Initialize Sentry once the environment-specific settings are final.
        """
        from apps.core.monitoring import init_sentry

        init_sentry(
            dsn=getattr(settings, "SENTRY_DSN", ""),
            environment=getattr(settings, "SENTRY_ENVIRONMENT", "development"),
            traces_sample_rate=getattr(settings, "SENTRY_TRACES_SAMPLE_RATE", 0.1),
            profiles_sample_rate=getattr(settings, "SENTRY_PROFILES_SAMPLE_RATE", 0.1),
            release=getattr(settings, "SENTRY_RELEASE", None),
        )
