from __future__ import annotations

from .base import *

"""
GOAL: Configure development environment settings with debug enabled and verbose logging.

PARAMETERS:
  None

RETURNS:
  None - Module-level configuration

RAISES:
  None

GUARANTEES:
  - DEBUG mode is enabled
  - Verbose console-only logging (no log directory required)
  - Local development hosts are allowed
  - Static files served locally
"""

# Debug mode
DEBUG = True

# Allow local development hosts
if not ALLOWED_HOSTS:
    ALLOWED_HOSTS = ["localhost", "127.0.0.1", "0.0.0.0", "testserver"]

# Static files storage (local)
STORAGES = {
    "staticfiles": {
        "BACKEND": "django.contrib.staticfiles.storage.StaticFilesStorage"
    }
}

# Verbose logging configuration
LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "verbose": {
            "format": "%(asctime)s %(levelname)s %(name)s %(module)s %(funcName)s:%(lineno)d %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "verbose",
        },
    },
    "loggers": {
        "django": {
            "handlers": ["console"],
            "level": "INFO",
        },
        "django.request": {
            "handlers": ["console"],
            "level": "DEBUG",
            "propagate": False,
        },
        "apps.integrations.dispatch_client": {
            "handlers": ["console"],
            "level": "DEBUG",
        },
        "apps.console.services": {
            "handlers": ["console"],
            "level": "DEBUG",
        },
        "apps.core": {
            "handlers": ["console"],
            "level": "DEBUG",
        },
    },
}

# Sentry environment override
SENTRY_ENVIRONMENT = "development"
SENTRY_TRACES_SAMPLE_RATE = 1.0  # Sample all traces in development
SENTRY_PROFILES_SAMPLE_RATE = 1.0  # Profile all requests in development
