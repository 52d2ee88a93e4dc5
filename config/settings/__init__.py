from __future__ import annotations

import os

"""
GOAL: Select the Django settings module for the current environment (DJANGO_ENV).

RAISES:
  ImportError: If the environment-specific settings module cannot be imported
  ValueError: If DJANGO_ENV has an invalid value

GUARANTEES:
  - Always imports exactly one of development, staging or production
  - Falls back to development if DJANGO_ENV is not set
"""

VALID_ENVIRONMENTS = {"development", "staging", "production"}


"""
GOAL: Get the current environment name from the DJANGO_ENV environment variable.

RETURNS:
  str - development, staging or production

RAISES:
  ValueError: If DJANGO_ENV is set but not in VALID_ENVIRONMENTS
"""
def get_environment() -> str:
    env = os.getenv("DJANGO_ENV", "development").lower().strip()

    if env not in VALID_ENVIRONMENTS:
        raise ValueError(
            f"Invalid DJANGO_ENV value: '{env}'. "
            f"Must be one of: {', '.join(sorted(VALID_ENVIRONMENTS))}"
        )

    return env


environment = get_environment()

try:
    if environment == "development":
        from .development import *  # noqa: F401, F403
    elif environment == "staging":
        from .staging import *  # noqa: F401, F403
    elif environment == "production":
        from .production import *  # noqa: F401, F403
except ImportError as e:
    raise ImportError(
        f"Failed to import settings for environment '{environment}': {e}"
    ) from e

DJANGO_ENV = environment
