"""
Sentry integration for error and performance monitoring.

Every helper degrades to local logging when SENTRY_DSN is empty, so callers
never need to check whether monitoring is enabled.
"""

from typing import Optional, Dict, Any
from sentry_sdk import init as sentry_init, capture_exception as sentry_capture_exception
from sentry_sdk import add_breadcrumb as sentry_add_breadcrumb, start_transaction as sentry_start_transaction
from sentry_sdk import new_scope as sentry_new_scope
from sentry_sdk.integrations.django import DjangoIntegration
from sentry_sdk.integrations.logging import LoggingIntegration
import logging

logger = logging.getLogger(__name__)

# Flipped by init_sentry(); stays False in tests and local runs without a DSN
_sentry_enabled: bool = False


"""
GOAL: Initialize the Sentry SDK for error and performance monitoring.

PARAMETERS:
  dsn: str - Sentry DSN - Empty string disables monitoring
  environment: str - development, staging or production - Non-empty
  traces_sample_rate: float - Trace sampling rate - 0.0 <= value <= 1.0
  profiles_sample_rate: float - Profiling sampling rate - 0.0 <= value <= 1.0
  release: Optional[str] - Release version - May be None

RETURNS:
  bool - True if Sentry was initialized, False otherwise - Never raises

RAISES:
  None

GUARANTEES:
  - Empty DSN returns False without touching the SDK
  - _sentry_enabled reflects the actual state after the call
"""
def init_sentry(
    dsn: str,
    environment: str = "development",
    traces_sample_rate: float = 0.1,
    profiles_sample_rate: float = 0.1,
    release: Optional[str] = None,
) -> bool:
    """
    Initialize Sentry with the Django and logging integrations.
    """
    global _sentry_enabled

    if not dsn or dsn.strip() == "":
        logger.info("Sentry monitoring disabled: SENTRY_DSN is empty")
        _sentry_enabled = False
        return False

    try:
        sentry_init(
            dsn=dsn,
            environment=environment,
            traces_sample_rate=traces_sample_rate,
            profiles_sample_rate=profiles_sample_rate,
            release=release,
            integrations=[
                DjangoIntegration(),
                LoggingIntegration(
                    level=logging.INFO,
                    event_level=logging.ERROR,
                ),
            ],
            ignore_errors=[
                KeyboardInterrupt,
                SystemExit,
            ],
        )

        _sentry_enabled = True
        logger.info("Sentry monitoring initialized: environment=%s", environment)
        return True

    except Exception as e:
        logger.error("Failed to initialize Sentry: %s", e, exc_info=True)
        _sentry_enabled = False
        return False


"""
GOAL: Send an exception to Sentry with extra context and tags.

PARAMETERS:
  exception: Exception - Exception to report - Not None
  level: Optional[str] - 'error', 'warning' or 'info'
  extra: Optional[Dict[str, Any]] - Additional context - May be None
  tags: Optional[Dict[str, str]] - Grouping tags - May be None

RETURNS:
  Optional[str] - Sentry event id, or None when monitoring is disabled

RAISES:
  None

GUARANTEES:
  - With Sentry disabled the exception is logged locally and None is returned
"""
def capture_exception(
    exception: Exception,
    level: Optional[str] = None,
    extra: Optional[Dict[str, Any]] = None,
    tags: Optional[Dict[str, str]] = None
) -> Optional[str]:
    if not _sentry_enabled:
        logger.error("Exception (Sentry disabled): %s: %s", type(exception).__name__, exception)
        return None

    try:
        with sentry_new_scope() as scope:
            if extra:
                scope.set_context("extra", extra)
            if tags:
                for key, value in tags.items():
                    scope.set_tag(key, value)
            if level:
                scope.set_level(level)

            event_id = sentry_capture_exception(exception)
        logger.info("Exception sent to Sentry: %s", event_id)
        return event_id

    except Exception as e:
        logger.error("Failed to send exception to Sentry: %s", e, exc_info=True)
        return None


"""
GOAL: Start a Sentry transaction for performance tracking.

PARAMETERS:
  name: str - Transaction name - Non-empty
  op: str - Operation type - Non-empty
  tags: Optional[Dict[str, str]] - Tags - May be None

RETURNS:
  Any - Transaction usable as a context manager, or None when disabled

RAISES:
  None
"""
def set_transaction(
    name: str,
    op: str,
    tags: Optional[Dict[str, str]] = None
) -> Any:
    if not _sentry_enabled:
        return None

    try:
        transaction = sentry_start_transaction(name=name, op=op)

        if tags:
            for key, value in tags.items():
                transaction.set_tag(key, value)

        return transaction

    except Exception as e:
        logger.error("Failed to start transaction: %s", e, exc_info=True)
        return None


"""
GOAL: Record a breadcrumb that will be attached to subsequent events.

PARAMETERS:
  message: str - Breadcrumb message - Non-empty
  category: str - Breadcrumb category - Non-empty
  level: str - 'debug', 'info', 'warning' or 'error'
  data: Optional[Dict[str, Any]] - Additional data - May be None

RETURNS:
  None

RAISES:
  None
"""
def add_breadcrumb(
    message: str,
    category: str = "default",
    level: str = "info",
    data: Optional[Dict[str, Any]] = None,
) -> None:
    if not _sentry_enabled:
        return

    try:
        breadcrumb_data: Dict[str, Any] = {
            "message": message,
            "category": category,
            "level": level,
        }
        if data:
            breadcrumb_data["data"] = data

        sentry_add_breadcrumb(breadcrumb_data)

    except Exception as e:
        logger.error("Failed to add breadcrumb: %s", e, exc_info=True)
