from __future__ import annotations

from .base import *

"""
GOAL: Configure production environment settings with maximum security and performance.

PARAMETERS:
  None

RETURNS:
  None - Module-level configuration

RAISES:
  None

GUARANTEES:
  - DEBUG mode is disabled
  - Maximum security settings enabled
  - Log files written under LOG_DIR (created on import)
  - Minimal logging level
"""

# Debug mode
DEBUG = False

# Production hosts (should be configured via ALLOWED_HOSTS env var)
if not ALLOWED_HOSTS:
    ALLOWED_HOSTS = ["dispatch.example.com"]

# Static files storage (compressed with manifest)
STORAGES = {
    "staticfiles": {
        "BACKEND": "whitenoise.storage.CompressedManifestStaticFilesStorage"
    }
}

LOG_DIR.mkdir(parents=True, exist_ok=True)

# Production logging configuration
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
            "level": "WARNING",
        },
        "django.request": {
            "handlers": ["console", "error_file"],
            "level": "ERROR",
            "propagate": False,
        },
        "apps.integrations.dispatch_client": {
            "handlers": ["console", "dispatch_api_file"],
            "level": "INFO",
        },
        "apps.console.services": {
            "handlers": ["console", "console_pages_file"],
            "level": "WARNING",
        },
        "apps.core": {
            "handlers": ["console", "error_file"],
            "level": "WARNING",
        },
    },
}

# Sentry environment override
SENTRY_ENVIRONMENT = "production"
SENTRY_TRACES_SAMPLE_RATE = 0.1  # Sample 10% of traces in production
SENTRY_PROFILES_SAMPLE_RATE = 0.1  # Profile 10% of requests in production

# Security settings for production
SECURE_SSL_REDIRECT = True
SECURE_PROXY_SSL_HEADER = ("HTTP_X_FORWARDED_PROTO", "https")
CSRF_COOKIE_SECURE = True
SECURE_CONTENT_TYPE_NOSNIFF = True
X_FRAME_OPTIONS = "DENY"

# Cookie settings
CSRF_COOKIE_HTTPONLY = True
CSRF_COOKIE_SAMESITE = "Lax"
# Django applies the SESSION_COOKIE_* flags to the messages cookie
SESSION_COOKIE_SECURE = True
SESSION_COOKIE_HTTPONLY = True
SESSION_COOKIE_SAMESITE = "Lax"

# Additional production security
SECURE_HSTS_SECONDS = 31536000  # 1 year
SECURE_HSTS_INCLUDE_SUBDOMAINS = True
SECURE_HSTS_PRELOAD = True
