from __future__ import annotations

import logging
from typing import Any

import requests

from apps.integrations.dispatch_client import DispatchAPIClient

logger = logging.getLogger(__name__)


class DispatchBackendMonitor:
    """
    Reachability checks for the dispatch backend.
    """

    """
    GOAL: Verify that the dispatch backend answers GET /api/drivers/active.

    PARAMETERS:
      timeout: float - Seconds to wait - Must be > 0, default 5

    RETURNS:
      dict[str, Any] - {"ok": bool, "status_code": int | None, "error": str | None, "base_url": str}

    RAISES:
      None (errors are captured and returned)

    GUARANTEES:
      - Does not raise; safe for health endpoints
      - Bypasses DispatchAPIClient error reporting so probes never reach Sentry
    """
    @staticmethod
    def check_backend_health(timeout: float = 5.0) -> dict[str, Any]:
        base_url = DispatchAPIClient.base_url()
        try:
            resp = requests.get(f"{base_url}/api/drivers/active", timeout=timeout)
            ok = resp.status_code == 200
            return {
                "ok": ok,
                "status_code": resp.status_code,
                "error": None if ok else resp.text[:200],
                "base_url": base_url,
            }
        except requests.RequestException as exc:
            logger.warning("Dispatch backend health check failed: %s", exc)
            return {"ok": False, "status_code": None, "error": str(exc), "base_url": base_url}
