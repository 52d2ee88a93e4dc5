from __future__ import annotations

from .base import *

"""
GOAL: Configure staging environment settings with debug disabled and production-like configuration.

PARAMETERS:
  None

RETURNS:
  None - Module-level configuration

RAISES:
  None

GUARANTEES:
  - DEBUG mode is disabled
  - Production-like security settings
  - Log files written under LOG_DIR (created on import)
  - Moderate logging level
"""

# Debug mode
DEBUG = False

# Staging hosts (should be configured via ALLOWED_HOSTS env var)
if not ALLOWED_HOSTS:
    ALLOWED_HOSTS = ["staging.dispatch.example.com"]

# Static files storage (compressed with manifest)
STORAGES = {
    "staticfiles": {
        "BACKEND": "whitenoise.storage.CompressedManifestStaticFilesStorage"
    }
}

LOG_DIR.mkdir(parents=True, exist_ok=True)

# Staging logging configuration
LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "default": {
            "format": "%(asctime)s %(levelname)s %(name)s %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "default",
        },
        "dispatch_api_file": {
            "class": "logging.FileHandler",
            "filename": str(LOG_DIR / "dispatch_api.log"),
            "formatter": "default",
        },
        "console_pages_file": {
            "class": "logging.FileHandler",
            "filename": str(LOG_DIR / "console.log"),
            "formatter": "default",
        },
        "error_file": {
            "class": "logging.FileHandler",
            "filename": str(LOG_DIR / "error.log"),
            "formatter": "default",
        },
    },
    "loggers": {
        "django": {
            "handlers": ["console"],
            "level": "INFO",
        },
        "django.request": {
            "handlers": ["console", "error_file"],
            "level": "WARNING",
            "propagate": False,
        },
        "apps.integrations.dispatch_client": {
            "handlers": ["console", "dispatch_api_file"],
            "level": "DEBUG",
        },
        "apps.console.services": {
            "handlers": ["console", "console_pages_file"],
            "level": "INFO",
        },
        "apps.core": {
            "handlers": ["console", "error_file"],
            "level": "INFO",
        },
    },
}

# Sentry environment override
SENTRY_ENVIRONMENT = "staging"
SENTRY_TRACES_SAMPLE_RATE = 0.5  # Sample half of traces in staging
SENTRY_PROFILES_SAMPLE_RATE = 0.5

# Security settings for staging
SECURE_PROXY_SSL_HEADER = ("HTTP_X_FORWARDED_PROTO", "https")
CSRF_COOKIE_SECURE = True
SECURE_CONTENT_TYPE_NOSNIFF = True
X_FRAME_OPTIONS = "DENY"
CSRF_COOKIE_SAMESITE = "Lax"
# Django applies the SESSION_COOKIE_* flags to the messages cookie
SESSION_COOKIE_SECURE = True
