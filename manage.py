#!/usr/bin/env python
import os
import sys


"""
GOAL: Execute Django management commands for the dispatch console.

RAISES:
  ImportError: If Django is not installed/available

GUARANTEES:
  - Uses DJANGO_SETTINGS_MODULE=config.settings by default
  - The concrete settings module is picked by DJANGO_ENV (development, staging, production)
"""
def main() -> None:
    os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")
    try:
        from django.core.management import execute_from_command_line
    except ImportError as exc:
        raise ImportError(
            "Couldn't import Django. Install the project with `pip install -e .` "
            "and activate its virtual environment."
        ) from exc
    execute_from_command_line(sys.argv)


if __name__ == "__main__":
    main()
