"""
Unit tests for apps/integrations/.

This module contains tests for the dispatch backend REST client, the backend
reachability monitor and the /healthz endpoint.
"""

from __future__ import annotations

import json
from unittest.mock import Mock, patch

import requests
from django.test import SimpleTestCase, override_settings

from apps.integrations.dispatch_client import DispatchAPIClient, DispatchAPIError
from apps.integrations.monitoring import DispatchBackendMonitor

BACKEND = "http://dispatch.test"


def _response(status_code=200, body=None, content=None):
    response = Mock()
    response.status_code = status_code
    response.ok = 200 <= status_code < 300
    if content is None:
        content = b"" if body is None else json.dumps(body).encode()
    response.content = content
    response.text = content.decode()
    response.json.side_effect = lambda: json.loads(content.decode() or "")
    return response


@override_settings(DISPATCH_API_URL=BACKEND, NEXT_PUBLIC_API_URL="", DISPATCH_API_TIMEOUT=None)
class DispatchAPIClientRouteTests(SimpleTestCase):
    """Every client method maps to exactly one backend route."""

    def assertRequested(self, mock_request, method, path, **kwargs):
        mock_request.assert_called_once()
        args, called = mock_request.call_args
        self.assertEqual(args[0], method)
        self.assertEqual(args[1], f"{BACKEND}{path}")
        self.assertEqual(called["headers"]["Content-Type"], "application/json")
        self.assertEqual(called.get("params"), kwargs.get("params"))
        self.assertEqual(called.get("json"), kwargs.get("json"))

    @patch("apps.integrations.dispatch_client.requests.request")
    def test_get_drivers(self, mock_request):
        mock_request.return_value = _response(body=[{"id": 1, "name": "김철수"}])

        result = DispatchAPIClient.get_drivers()

        self.assertEqual(result, [{"id": 1, "name": "김철수"}])
        self.assertRequested(mock_request, "GET", "/api/drivers")

    @patch("apps.integrations.dispatch_client.requests.request")
    def test_driver_routes(self, mock_request):
        payload = {"name": "김철수", "tonnage": 5.0}
        cases = [
            (lambda: DispatchAPIClient.get_driver(3), "GET", "/api/drivers/3", {}),
            (lambda: DispatchAPIClient.create_driver(payload), "POST", "/api/drivers", {"json": payload}),
            (lambda: DispatchAPIClient.update_driver(3, payload), "PUT", "/api/drivers/3", {"json": payload}),
            (lambda: DispatchAPIClient.delete_driver(3), "DELETE", "/api/drivers/3", {}),
            (lambda: DispatchAPIClient.get_active_drivers(), "GET", "/api/drivers/active", {}),
            (
                lambda: DispatchAPIClient.get_available_drivers("2024-05-01"),
                "GET",
                "/api/drivers/available",
                {"params": {"date": "2024-05-01"}},
            ),
            (
                lambda: DispatchAPIClient.get_driver_revenue(3, 2024, 5),
                "GET",
                "/api/drivers/3/revenue",
                {"params": {"year": 2024, "month": 5}},
            ),
        ]
        for call, method, path, kwargs in cases:
            with self.subTest(path=path, method=method):
                mock_request.reset_mock()
                mock_request.return_value = _response(body={})
                call()
                self.assertRequested(mock_request, method, path, **kwargs)

    @patch("apps.integrations.dispatch_client.requests.request")
    def test_delivery_routes(self, mock_request):
        payload = {"destination": "화성 농장", "price": 1000}
        cases = [
            (lambda: DispatchAPIClient.get_deliveries(), "GET", "/api/deliveries", {}),
            (lambda: DispatchAPIClient.get_delivery(5), "GET", "/api/deliveries/5", {}),
            (lambda: DispatchAPIClient.create_delivery(payload), "POST", "/api/deliveries", {"json": payload}),
            (
                lambda: DispatchAPIClient.create_historical_delivery(payload),
                "POST",
                "/api/deliveries/history",
                {"json": payload},
            ),
            (lambda: DispatchAPIClient.update_delivery(5, payload), "PUT", "/api/deliveries/5", {"json": payload}),
            (lambda: DispatchAPIClient.delete_delivery(5), "DELETE", "/api/deliveries/5", {}),
            (lambda: DispatchAPIClient.get_pending_deliveries(), "GET", "/api/deliveries/pending", {}),
            (lambda: DispatchAPIClient.get_assigned_deliveries(), "GET", "/api/deliveries/assigned", {}),
            (lambda: DispatchAPIClient.recommend_driver(5), "POST", "/api/deliveries/5/recommend-driver", {}),
            (lambda: DispatchAPIClient.assign(5, 3), "POST", "/api/deliveries/5/assign/3", {}),
            (lambda: DispatchAPIClient.complete(5), "POST", "/api/deliveries/5/complete", {}),
            (lambda: DispatchAPIClient.cancel_assignment(5), "POST", "/api/deliveries/5/cancel-assignment", {}),
        ]
        for call, method, path, kwargs in cases:
            with self.subTest(path=path, method=method):
                mock_request.reset_mock()
                mock_request.return_value = _response(body={})
                call()
                self.assertRequested(mock_request, method, path, **kwargs)

    @patch("apps.integrations.dispatch_client.requests.request")
    def test_vacation_routes(self, mock_request):
        payload = {"driver": {"id": 3}, "startDate": "2024-06-01", "endDate": "2024-06-03"}
        cases = [
            (lambda: DispatchAPIClient.get_vacations(), "GET", "/api/vacations", {}),
            (lambda: DispatchAPIClient.get_vacation(7), "GET", "/api/vacations/7", {}),
            (lambda: DispatchAPIClient.create_vacation(payload), "POST", "/api/vacations", {"json": payload}),
            (lambda: DispatchAPIClient.update_vacation(7, payload), "PUT", "/api/vacations/7", {"json": payload}),
            (lambda: DispatchAPIClient.delete_vacation(7), "DELETE", "/api/vacations/7", {}),
            (lambda: DispatchAPIClient.get_driver_vacations(3), "GET", "/api/vacations/driver/3", {}),
            (lambda: DispatchAPIClient.approve_vacation(7), "POST", "/api/vacations/7/approve", {}),
            (lambda: DispatchAPIClient.reject_vacation(7), "POST", "/api/vacations/7/reject", {}),
        ]
        for call, method, path, kwargs in cases:
            with self.subTest(path=path, method=method):
                mock_request.reset_mock()
                mock_request.return_value = _response(body={})
                call()
                self.assertRequested(mock_request, method, path, **kwargs)


@override_settings(DISPATCH_API_URL=BACKEND, NEXT_PUBLIC_API_URL="", DISPATCH_API_TIMEOUT=None)
class DispatchAPIClientErrorTests(SimpleTestCase):
    """Test response decoding and error mapping."""

    @patch("apps.integrations.dispatch_client.requests.request")
    def test_empty_body_returns_none(self, mock_request):
        mock_request.return_value = _response(status_code=204)

        self.assertIsNone(DispatchAPIClient.delete_driver(1))

    @patch("apps.integrations.dispatch_client.requests.request")
    def test_non_json_success_body_returns_none(self, mock_request):
        mock_request.return_value = _response(content=b"OK")

        self.assertIsNone(DispatchAPIClient.complete(1))

    @patch("apps.integrations.dispatch_client.requests.request")
    def test_error_status_carries_backend_message(self, mock_request):
        mock_request.return_value = _response(status_code=409, body={"message": "이미 배정된 배송입니다."})

        with self.assertRaises(DispatchAPIError) as ctx:
            DispatchAPIClient.assign(1, 2)

        self.assertEqual(ctx.exception.status_code, 409)
        self.assertEqual(ctx.exception.backend_message, "이미 배정된 배송입니다.")
        self.assertEqual(ctx.exception.user_message("배차에 실패했습니다."), "이미 배정된 배송입니다.")
        self.assertEqual(ctx.exception.http_status, 502)

    @patch("apps.integrations.dispatch_client.requests.request")
    def test_error_without_message_uses_default(self, mock_request):
        mock_request.return_value = _response(status_code=500, content=b"<html>boom</html>")

        with self.assertRaises(DispatchAPIError) as ctx:
            DispatchAPIClient.get_drivers()

        self.assertEqual(ctx.exception.status_code, 500)
        self.assertIsNone(ctx.exception.backend_message)
        self.assertEqual(ctx.exception.user_message("기본 메시지"), "기본 메시지")

    @patch("apps.integrations.dispatch_client.requests.request")
    def test_blank_backend_message_is_ignored(self, mock_request):
        mock_request.return_value = _response(status_code=400, body={"message": "   "})

        with self.assertRaises(DispatchAPIError) as ctx:
            DispatchAPIClient.get_drivers()

        self.assertIsNone(ctx.exception.backend_message)

    @patch("apps.integrations.dispatch_client.requests.request")
    def test_transport_failure_has_no_status(self, mock_request):
        mock_request.side_effect = requests.ConnectionError("connection refused")

        with self.assertRaises(DispatchAPIError) as ctx:
            DispatchAPIClient.get_drivers()

        self.assertIsNone(ctx.exception.status_code)
        self.assertIsInstance(ctx.exception.__cause__, requests.ConnectionError)

    @patch("apps.integrations.dispatch_client.requests.request")
    def test_invalid_ids_never_reach_backend(self, mock_request):
        for bad in (0, -1, "abc", None):
            with self.subTest(bad=bad):
                with self.assertRaises(ValueError):
                    DispatchAPIClient.get_driver(bad)
        mock_request.assert_not_called()

    @patch("apps.integrations.dispatch_client.requests.request")
    def test_revenue_month_out_of_range(self, mock_request):
        with self.assertRaises(ValueError):
            DispatchAPIClient.get_driver_revenue(1, 2024, 13)
        mock_request.assert_not_called()

    @patch("apps.integrations.dispatch_client.requests.request")
    def test_available_drivers_requires_date(self, mock_request):
        with self.assertRaises(ValueError):
            DispatchAPIClient.get_available_drivers("")
        mock_request.assert_not_called()

    def test_path_must_start_with_slash(self):
        with self.assertRaises(ValueError):
            DispatchAPIClient.request("GET", "api/drivers")


class DispatchAPIClientConfigTests(SimpleTestCase):
    """Test base URL and timeout resolution."""

    @override_settings(DISPATCH_API_URL="http://primary.test/", NEXT_PUBLIC_API_URL="http://public.test")
    def test_dispatch_api_url_wins(self):
        self.assertEqual(DispatchAPIClient.base_url(), "http://primary.test")

    @override_settings(DISPATCH_API_URL="", NEXT_PUBLIC_API_URL="http://public.test")
    def test_falls_back_to_public_url(self):
        self.assertEqual(DispatchAPIClient.base_url(), "http://public.test")

    @override_settings(DISPATCH_API_URL="", NEXT_PUBLIC_API_URL="")
    def test_defaults_to_localhost(self):
        self.assertEqual(DispatchAPIClient.base_url(), "http://localhost:8080")

    @override_settings(DISPATCH_API_TIMEOUT=None)
    def test_no_timeout_by_default(self):
        self.assertIsNone(DispatchAPIClient.timeout())

    @override_settings(DISPATCH_API_URL=BACKEND, DISPATCH_API_TIMEOUT=2.5)
    @patch("apps.integrations.dispatch_client.requests.request")
    def test_configured_timeout_is_sent(self, mock_request):
        mock_request.return_value = _response(body=[])

        DispatchAPIClient.get_drivers()

        self.assertEqual(mock_request.call_args.kwargs["timeout"], 2.5)


@override_settings(DISPATCH_API_URL=BACKEND)
class DispatchBackendMonitorTests(SimpleTestCase):
    """Test backend reachability probe."""

    @patch("apps.integrations.monitoring.requests.get")
    def test_healthy_backend(self, mock_get):
        mock_get.return_value = _response(body=[])

        result = DispatchBackendMonitor.check_backend_health()

        self.assertTrue(result["ok"])
        self.assertEqual(result["status_code"], 200)
        self.assertEqual(result["base_url"], BACKEND)
        mock_get.assert_called_once_with(f"{BACKEND}/api/drivers/active", timeout=5.0)

    @patch("apps.integrations.monitoring.requests.get")
    def test_unhealthy_status(self, mock_get):
        mock_get.return_value = _response(status_code=503, content=b"maintenance")

        result = DispatchBackendMonitor.check_backend_health()

        self.assertFalse(result["ok"])
        self.assertEqual(result["status_code"], 503)
        self.assertEqual(result["error"], "maintenance")

    @patch("apps.integrations.monitoring.requests.get")
    def test_unreachable_backend_does_not_raise(self, mock_get):
        mock_get.side_effect = requests.Timeout("timed out")

        result = DispatchBackendMonitor.check_backend_health()

        self.assertFalse(result["ok"])
        self.assertIsNone(result["status_code"])
        self.assertIn("timed out", result["error"])


@override_settings(DISPATCH_API_URL=BACKEND)
class HealthzViewTests(SimpleTestCase):
    """Test /healthz smoke endpoint."""

    def test_shallow(self):
        response = self.client.get("/healthz")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"status": "ok"})

    @patch("apps.integrations.views.DispatchBackendMonitor.check_backend_health")
    def test_deep(self, mock_check):
        mock_check.return_value = {"ok": True, "status_code": 200, "error": None, "base_url": BACKEND}

        response = self.client.get("/healthz?deep=1")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["dispatch"]["ok"], True)
        mock_check.assert_called_once()
