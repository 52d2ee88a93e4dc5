from __future__ import annotations

import logging
from typing import Any, Mapping

import requests
from django.conf import settings

from apps.core.exceptions import ExternalServiceError
from apps.core.monitoring import capture_exception, add_breadcrumb, set_transaction

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:8080"


class DispatchAPIError(ExternalServiceError):
    """
    Failure talking to the dispatch backend.

    status_code is None for transport failures (connection refused, DNS, timeout).
    backend_message is the "message" field of a JSON error body, when present.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        backend_message: str | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.status_code = status_code
        self.backend_message = backend_message

    def user_message(self, default: str) -> str:
        return self.backend_message or default


"""
GOAL: Extract the backend's human-readable error message from an error response.

PARAMETERS:
  response: requests.Response - Non-2xx response - Not None

RETURNS:
  str | None - Non-empty "message" field of a JSON object body, else None

RAISES:
  None
"""
def _backend_message(response: requests.Response) -> str | None:
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        message = body.get("message")
        if isinstance(message, str) and message.strip():
            return message
    return None


def _id(value: Any, name: str) -> int:
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        raise ValueError(f"{name} must be an integer, got {value!r}")
    if parsed <= 0:
        raise ValueError(f"{name} must be > 0, got {parsed}")
    return parsed


class DispatchAPIClient:
    """
    Thin REST client for the dispatch backend. One method per backend route.

    No retries, no caching, no auth headers. Every method returns the decoded
    JSON body (None for an empty body) or raises DispatchAPIError.
    """

    @staticmethod
    def base_url() -> str:
        url = (
            getattr(settings, "DISPATCH_API_URL", "")
            or getattr(settings, "NEXT_PUBLIC_API_URL", "")
            or DEFAULT_BASE_URL
        )
        return str(url).rstrip("/")

    @staticmethod
    def timeout() -> float | None:
        value = getattr(settings, "DISPATCH_API_TIMEOUT", None)
        return float(value) if value else None

    """
    GOAL: Perform a dispatch backend request and decode the JSON body.

    PARAMETERS:
      method: str - HTTP method - One of GET/POST/PUT/DELETE
      path: str - API path starting with "/" - Must be non-empty
      params: Mapping[str, Any] | None - Query params - Optional
      json: Any | None - JSON body - Optional

    RETURNS:
      Any - Decoded JSON body, or None when the body is empty

    RAISES:
      ValueError: If path does not start with "/"
      DispatchAPIError: On transport failure (status_code None) or non-2xx response

    GUARANTEES:
      - Sends Content-Type: application/json
      - Exactly one HTTP call per invocation
      - Failures are recorded as Sentry breadcrumbs and captured exceptions
    """
    @classmethod
    def request(
        cls,
        method: str,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        json: Any | None = None,
    ) -> Any:
        if not path.startswith("/"):
            raise ValueError("path must start with '/'")

        url = f"{cls.base_url()}{path}"

        add_breadcrumb(
            message=f"Dispatch API request: {method} {path}",
            category="api",
            level="info",
            data={"service": "dispatch", "method": method, "path": path},
        )

        transaction = set_transaction(
            name=f"Dispatch {method} {path}",
            op="http.client",
            tags={"service": "dispatch", "method": method},
        )

        try:
            if transaction:
                with transaction:
                    response = cls._send(method, url, params=params, json=json)
            else:
                response = cls._send(method, url, params=params, json=json)
        except requests.RequestException as exc:
            logger.error("Dispatch API transport error: %s %s: %s", method, path, exc)
            error = DispatchAPIError(
                f"Dispatch backend unreachable: {exc}",
                details={"method": method, "path": path},
            )
            cls._report(error, method, path, params)
            raise error from exc

        if not response.ok:
            backend_message = _backend_message(response)
            logger.warning(
                "Dispatch API error: %s %s -> %s %s",
                method, path, response.status_code, backend_message or "",
            )
            error = DispatchAPIError(
                f"Dispatch backend returned HTTP {response.status_code}",
                status_code=response.status_code,
                backend_message=backend_message,
                details={"method": method, "path": path, "status_code": response.status_code},
            )
            cls._report(error, method, path, params)
            raise error

        add_breadcrumb(
            message=f"Dispatch API success: {method} {path}",
            category="api",
            level="info",
            data={"service": "dispatch", "status_code": response.status_code},
        )

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            logger.warning("Dispatch API returned a non-JSON body: %s %s", method, path)
            return None

    @classmethod
    def _send(
        cls,
        method: str,
        url: str,
        *,
        params: Mapping[str, Any] | None,
        json: Any | None,
    ) -> requests.Response:
        return requests.request(
            method,
            url,
            headers={"Content-Type": "application/json", "Accept": "application/json"},
            params=params,
            json=json,
            timeout=cls.timeout(),
        )

    @staticmethod
    def _report(error: DispatchAPIError, method: str, path: str, params: Mapping[str, Any] | None) -> None:
        add_breadcrumb(
            message=f"Dispatch API error: {method} {path}",
            category="api",
            level="error",
            data={"service": "dispatch", "status_code": error.status_code},
        )
        capture_exception(
            error,
            level="error",
            extra={"service": "dispatch", "method": method, "path": path, "params": dict(params or {})},
            tags={"service": "dispatch", "method": method},
        )

    # ------------------------------------------------------------------
    # Drivers
    # ------------------------------------------------------------------

    @classmethod
    def get_drivers(cls) -> Any:
        return cls.request("GET", "/api/drivers")

    @classmethod
    def get_driver(cls, driver_id: int) -> Any:
        return cls.request("GET", f"/api/drivers/{_id(driver_id, 'driver_id')}")

    @classmethod
    def create_driver(cls, payload: Mapping[str, Any]) -> Any:
        return cls.request("POST", "/api/drivers", json=dict(payload))

    @classmethod
    def update_driver(cls, driver_id: int, payload: Mapping[str, Any]) -> Any:
        return cls.request("PUT", f"/api/drivers/{_id(driver_id, 'driver_id')}", json=dict(payload))

    @classmethod
    def delete_driver(cls, driver_id: int) -> Any:
        return cls.request("DELETE", f"/api/drivers/{_id(driver_id, 'driver_id')}")

    @classmethod
    def get_active_drivers(cls) -> Any:
        return cls.request("GET", "/api/drivers/active")

    @classmethod
    def get_available_drivers(cls, on_date: str) -> Any:
        if not on_date:
            raise ValueError("on_date is required")
        return cls.request("GET", "/api/drivers/available", params={"date": on_date})

    """
    GOAL: Fetch a driver's daily revenue rows for one month.

    PARAMETERS:
      driver_id: int - Driver id - > 0
      year: int - Four-digit year
      month: int - 1..12

    RETURNS:
      Any - JSON list of {date, amount} rows (may be empty)

    RAISES:
      ValueError: If month is outside 1..12
      DispatchAPIError: On backend failure
    """
    @classmethod
    def get_driver_revenue(cls, driver_id: int, year: int, month: int) -> Any:
        if not 1 <= int(month) <= 12:
            raise ValueError(f"month must be within [1, 12], got {month}")
        return cls.request(
            "GET",
            f"/api/drivers/{_id(driver_id, 'driver_id')}/revenue",
            params={"year": int(year), "month": int(month)},
        )

    # ------------------------------------------------------------------
    # Deliveries
    # ------------------------------------------------------------------

    @classmethod
    def get_deliveries(cls) -> Any:
        return cls.request("GET", "/api/deliveries")

    @classmethod
    def get_delivery(cls, delivery_id: int) -> Any:
        return cls.request("GET", f"/api/deliveries/{_id(delivery_id, 'delivery_id')}")

    @classmethod
    def create_delivery(cls, payload: Mapping[str, Any]) -> Any:
        return cls.request("POST", "/api/deliveries", json=dict(payload))

    @classmethod
    def create_historical_delivery(cls, payload: Mapping[str, Any]) -> Any:
        return cls.request("POST", "/api/deliveries/history", json=dict(payload))

    @classmethod
    def update_delivery(cls, delivery_id: int, payload: Mapping[str, Any]) -> Any:
        return cls.request("PUT", f"/api/deliveries/{_id(delivery_id, 'delivery_id')}", json=dict(payload))

    @classmethod
    def delete_delivery(cls, delivery_id: int) -> Any:
        return cls.request("DELETE", f"/api/deliveries/{_id(delivery_id, 'delivery_id')}")

    @classmethod
    def get_pending_deliveries(cls) -> Any:
        return cls.request("GET", "/api/deliveries/pending")

    @classmethod
    def get_assigned_deliveries(cls) -> Any:
        return cls.request("GET", "/api/deliveries/assigned")

    @classmethod
    def recommend_driver(cls, delivery_id: int) -> Any:
        return cls.request("POST", f"/api/deliveries/{_id(delivery_id, 'delivery_id')}/recommend-driver")

    @classmethod
    def assign(cls, delivery_id: int, driver_id: int) -> Any:
        return cls.request(
            "POST",
            f"/api/deliveries/{_id(delivery_id, 'delivery_id')}/assign/{_id(driver_id, 'driver_id')}",
        )

    @classmethod
    def complete(cls, delivery_id: int) -> Any:
        return cls.request("POST", f"/api/deliveries/{_id(delivery_id, 'delivery_id')}/complete")

    @classmethod
    def cancel_assignment(cls, delivery_id: int) -> Any:
        return cls.request("POST", f"/api/deliveries/{_id(delivery_id, 'delivery_id')}/cancel-assignment")

    # ------------------------------------------------------------------
    # Vacations
    # ------------------------------------------------------------------

    @classmethod
    def get_vacations(cls) -> Any:
        return cls.request("GET", "/api/vacations")

    @classmethod
    def get_vacation(cls, vacation_id: int) -> Any:
        return cls.request("GET", f"/api/vacations/{_id(vacation_id, 'vacation_id')}")

    @classmethod
    def create_vacation(cls, payload: Mapping[str, Any]) -> Any:
        return cls.request("POST", "/api/vacations", json=dict(payload))

    @classmethod
    def update_vacation(cls, vacation_id: int, payload: Mapping[str, Any]) -> Any:
        return cls.request("PUT", f"/api/vacations/{_id(vacation_id, 'vacation_id')}", json=dict(payload))

    @classmethod
    def delete_vacation(cls, vacation_id: int) -> Any:
        return cls.request("DELETE", f"/api/vacations/{_id(vacation_id, 'vacation_id')}")

    @classmethod
    def get_driver_vacations(cls, driver_id: int) -> Any:
        return cls.request("GET", f"/api/vacations/driver/{_id(driver_id, 'driver_id')}")

    @classmethod
    def approve_vacation(cls, vacation_id: int) -> Any:
        return cls.request("POST", f"/api/vacations/{_id(vacation_id, 'vacation_id')}/approve")

    @classmethod
    def reject_vacation(cls, vacation_id: int) -> Any:
        return cls.request("POST", f"/api/vacations/{_id(vacation_id, 'vacation_id')}/reject")
