from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent.parent.parent


"""
GOAL: Read an environment variable with optional default.

PARAMETERS:
  name: str - Environment variable name - Must be non-empty
  default: str | None - Fallback value - Optional

RETURNS:
  str | None - Environment value or default - Never raises on missing var

RAISES:
  None

GUARANTEES:
  - Does not strip or coerce the value
"""
def _env(name: str, default: str | None = None) -> str | None:
    return os.getenv(name, default)


def _env_bool(name: str, default: str) -> bool:
    return (_env(name, default) or "").lower() in {"1", "true", "yes", "on"}


load_dotenv(BASE_DIR / ".env")


SECRET_KEY = _env("SECRET_KEY", "dev-secret-key-change-me")

ALLOWED_HOSTS = [h.strip() for h in (_env("ALLOWED_HOSTS", "") or "").split(",") if h.strip()]

INSTALLED_APPS = [
    "django.contrib.contenttypes",
    "django.contrib.auth",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    "rest_framework",
    "drf_spectacular",
    "apps.core.apps.CoreConfig",
    "apps.integrations.apps.IntegrationsConfig",
    "apps.console.apps.ConsoleConfig",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "apps.core.middleware.ExceptionHandlingMiddleware",
    "whitenoise.middleware.WhiteNoiseMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

ROOT_URLCONF = "config.urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [BASE_DIR / "templates"],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.debug",
                "django.template.context_processors.request",
                "django.contrib.messages.context_processors.messages",
                "apps.console.context_processors.navigation",
            ],
        },
    },
]

WSGI_APPLICATION = "config.wsgi.application"

# All persistent state lives in the dispatch backend
DATABASES: dict[str, Any] = {}

MESSAGE_STORAGE = "django.contrib.messages.storage.cookie.CookieStorage"

AUTH_PASSWORD_VALIDATORS: list[dict[str, str]] = []

LANGUAGE_CODE = "ko-kr"
TIME_ZONE = "Asia/Seoul"
USE_I18N = True
USE_TZ = True

STATIC_URL = "static/"
STATIC_ROOT = BASE_DIR / "staticfiles"
STATICFILES_DIRS = [BASE_DIR / "static"]

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# Dispatch backend
DISPATCH_API_URL = (_env("DISPATCH_API_URL", "") or "").strip()
NEXT_PUBLIC_API_URL = (_env("NEXT_PUBLIC_API_URL", "") or "").strip()
DISPATCH_API_TIMEOUT = float(_env("DISPATCH_API_TIMEOUT", "0") or "0") or None

# Console UI
CONSOLE_TITLE = _env("CONSOLE_TITLE", "🚛 물류 배차 시스템") or "🚛 물류 배차 시스템"
CONSOLE_RECENT_DELIVERIES = int(_env("CONSOLE_RECENT_DELIVERIES", "5") or "5")
HTMX_SCRIPT_URL = _env("HTMX_SCRIPT_URL", "https://unpkg.com/htmx.org@1.9.12") or "https://unpkg.com/htmx.org@1.9.12"

# Sentry monitoring settings
SENTRY_DSN = _env("SENTRY_DSN", "") or ""
SENTRY_ENVIRONMENT = _env("SENTRY_ENVIRONMENT", "development") or "development"
SENTRY_TRACES_SAMPLE_RATE = float(_env("SENTRY_TRACES_SAMPLE_RATE", "0.1") or "0.1")
SENTRY_PROFILES_SAMPLE_RATE = float(_env("SENTRY_PROFILES_SAMPLE_RATE", "0.1") or "0.1")
SENTRY_RELEASE = _env("SENTRY_RELEASE", "") or None

LOG_DIR = BASE_DIR / "logs"

# Django REST Framework: only serves the OpenAPI schema views
REST_FRAMEWORK: dict[str, Any] = {
    "DEFAULT_SCHEMA_CLASS": "drf_spectacular.openapi.AutoSchema",
    "DEFAULT_AUTHENTICATION_CLASSES": [],
    "UNAUTHENTICATED_USER": None,
}

# OpenAPI/Spectacular settings
OPENAPI_ENABLED = _env_bool("OPENAPI_ENABLED", "True")

SPECTACULAR_SETTINGS: dict[str, Any] = {
    "TITLE": "Dispatch Console",
    "DESCRIPTION": "물류 배차 관리자 콘솔 (server-rendered pages and health endpoints)",
    "VERSION": "1.0.0",
    "SERVE_INCLUDE_SCHEMA": False,
    "SERVERS": [
        {"url": "/", "description": "Current host"},
        {"url": "http://localhost:8000", "description": "Local development"},
    ],
    "TAGS": [
        {"name": "dashboard", "description": "대시보드"},
        {"name": "drivers", "description": "기사 관리"},
        {"name": "deliveries", "description": "배송 관리"},
        {"name": "assignments", "description": "배차 관리"},
        {"name": "history", "description": "과거 데이터"},
        {"name": "vacations", "description": "휴가 관리"},
        {"name": "health", "description": "Health checks"},
    ],
}
