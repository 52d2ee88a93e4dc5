"""
Tests for Pydantic schemas, DTOs, validation helpers, error handling and health checks.

This module contains unit tests for apps/core/schemas.py, apps/core/dtos.py,
apps/core/validation.py, apps/core/exceptions.py, apps/core/middleware.py,
apps/core/monitoring.py and apps/core/health_views.py.
"""

from __future__ import annotations

import pytest
from datetime import date
from unittest.mock import patch
from pydantic import ValidationError as PydanticValidationError

from apps.core.dtos import (
    DeliveryDTO,
    DeliveryRecommendationDTO,
    DeliveryStatus,
    DriverDTO,
    DriverStatus,
    RevenueRowDTO,
    VacationDTO,
    VacationStatus,
    dto_to_dict,
    parse_list,
    parse_one,
)
from apps.core.exceptions import (
    BusinessLogicError,
    ExternalServiceError,
    ValidationError as AppValidationError,
)
from apps.core.schemas import (
    AssignmentForm,
    DeliveryForm,
    DriverForm,
    HistoricalDeliveryForm,
    ManualSelectionQuery,
    RevenueQuery,
    VacationForm,
)
from apps.core.validation import validate_form, validate_query_params


def _driver_form(**overrides):
    data = {
        "name": "김철수",
        "phoneNumber": "010-1234-5678",
        "vehicleNumber": "12가3456",
        "vehicleType": "트럭",
        "tonnage": "5.0",
        "status": "ACTIVE",
    }
    data.update(overrides)
    return data


def _delivery_form(**overrides):
    data = {
        "destination": "화성 농장",
        "address": "경기도 화성시 1",
        "price": "350000",
        "feedTonnage": "12.5",
        "deliveryDate": "2024-05-01",
        "notes": "",
    }
    data.update(overrides)
    return data


class TestDriverForm:
    """
    Tests for DriverForm schema.
    """

    def test_valid_payload_is_camel_case(self):
        form = validate_form(DriverForm, _driver_form())

        assert form.to_payload() == {
            "name": "김철수",
            "phoneNumber": "010-1234-5678",
            "vehicleNumber": "12가3456",
            "vehicleType": "트럭",
            "tonnage": 5.0,
            "status": "ACTIVE",
        }

    def test_status_defaults_to_active(self):
        form = validate_form(DriverForm, _driver_form(status=""))
        assert form.status is DriverStatus.ACTIVE

    @pytest.mark.parametrize("tonnage", ["0", "-1"])
    def test_tonnage_must_be_positive(self, tonnage):
        with pytest.raises(AppValidationError) as exc_info:
            validate_form(DriverForm, _driver_form(tonnage=tonnage))
        assert exc_info.value.message == "톤수는 0보다 커야 합니다."

    def test_tonnage_must_be_number(self):
        with pytest.raises(AppValidationError) as exc_info:
            validate_form(DriverForm, _driver_form(tonnage="다섯"))
        assert exc_info.value.message == "톤수는 숫자여야 합니다."

    @pytest.mark.parametrize("tonnage", ["nan", "NaN", "inf", "-inf", "1e400"])
    def test_tonnage_rejects_non_finite(self, tonnage):
        with pytest.raises(AppValidationError) as exc_info:
            validate_form(DriverForm, _driver_form(tonnage=tonnage))
        assert exc_info.value.message == "톤수는 숫자여야 합니다."

    def test_blank_name_is_required(self):
        with pytest.raises(AppValidationError) as exc_info:
            validate_form(DriverForm, _driver_form(name="   "))
        assert exc_info.value.message == "이름은 필수 입력 항목입니다."

    def test_missing_fields_report_every_error(self):
        with pytest.raises(AppValidationError) as exc_info:
            validate_form(DriverForm, {})
        assert len(exc_info.value.details["validation_errors"]) == 5


class TestDeliveryForm:
    """
    Tests for DeliveryForm and HistoricalDeliveryForm schemas.
    """

    def test_valid_payload(self):
        form = validate_form(DeliveryForm, _delivery_form(notes="오전 도착"))

        payload = form.to_payload()
        assert payload["price"] == 350000
        assert payload["feedTonnage"] == 12.5
        assert payload["deliveryDate"] == "2024-05-01"
        assert payload["notes"] == "오전 도착"

    def test_price_must_be_positive(self):
        with pytest.raises(AppValidationError) as exc_info:
            validate_form(DeliveryForm, _delivery_form(price="0"))
        assert exc_info.value.message == "가격은 0보다 커야 합니다."

    def test_feed_tonnage_must_be_positive(self):
        with pytest.raises(AppValidationError) as exc_info:
            validate_form(DeliveryForm, _delivery_form(feedTonnage="-3"))
        assert exc_info.value.message == "사료(톤)는 0보다 커야 합니다."

    @pytest.mark.parametrize("feed_tonnage", ["nan", "inf"])
    def test_feed_tonnage_rejects_non_finite(self, feed_tonnage):
        with pytest.raises(AppValidationError) as exc_info:
            validate_form(DeliveryForm, _delivery_form(feedTonnage=feed_tonnage))
        assert exc_info.value.message == "사료(톤)는 숫자여야 합니다."

    @pytest.mark.parametrize("price", ["0.5", "1.9", "350000.5"])
    def test_price_rejects_fractions(self, price):
        with pytest.raises(AppValidationError) as exc_info:
            validate_form(DeliveryForm, _delivery_form(price=price))
        assert exc_info.value.message == "가격은 정수여야 합니다."

    def test_price_accepts_integral_decimal(self):
        assert validate_form(DeliveryForm, _delivery_form(price="350000.0")).price == 350000

    def test_price_rejects_nan(self):
        with pytest.raises(AppValidationError) as exc_info:
            validate_form(DeliveryForm, _delivery_form(price="nan"))
        assert exc_info.value.message == "가격은 숫자여야 합니다."

    @pytest.mark.parametrize("field,message", [
        ("destination", "목적지는 필수 입력 항목입니다."),
        ("address", "주소는 필수 입력 항목입니다."),
        ("feedTonnage", "사료(톤)는 필수 입력 항목입니다."),
        ("deliveryDate", "배송일은 필수 입력 항목입니다."),
    ])
    def test_required_messages_pick_particle(self, field, message):
        with pytest.raises(AppValidationError) as exc_info:
            validate_form(DeliveryForm, _delivery_form(**{field: ""}))
        assert exc_info.value.message == message

    def test_invalid_date(self):
        with pytest.raises(AppValidationError) as exc_info:
            validate_form(DeliveryForm, _delivery_form(deliveryDate="2024-13-45"))
        assert exc_info.value.message == "배송일의 날짜 형식이 올바르지 않습니다."

    def test_history_requires_driver(self):
        with pytest.raises(AppValidationError) as exc_info:
            validate_form(HistoricalDeliveryForm, _delivery_form(driverId=""))
        assert exc_info.value.message == "기사를 선택해주세요."

    def test_history_payload_nests_driver(self):
        form = validate_form(HistoricalDeliveryForm, _delivery_form(driverId="3", status=""))

        payload = form.to_payload()
        assert payload["driver"] == {"id": 3}
        assert "driverId" not in payload
        assert payload["status"] == "COMPLETED"

    def test_history_status_limited_to_terminal(self):
        with pytest.raises(AppValidationError):
            validate_form(HistoricalDeliveryForm, _delivery_form(driverId="3", status="PENDING"))


class TestVacationAndAssignmentForms:
    """
    Tests for VacationForm and AssignmentForm schemas.
    """

    def test_vacation_payload(self):
        form = validate_form(VacationForm, {
            "driverId": "3",
            "startDate": "2024-06-01",
            "endDate": "2024-06-03",
            "reason": "",
        })

        assert form.to_payload() == {
            "driver": {"id": 3},
            "startDate": "2024-06-01",
            "endDate": "2024-06-03",
            "reason": "",
            "status": "PENDING",
        }

    def test_vacation_requires_driver(self):
        with pytest.raises(AppValidationError) as exc_info:
            validate_form(VacationForm, {"startDate": "2024-06-01", "endDate": "2024-06-03"})
        assert exc_info.value.message == "기사를 선택해주세요."

    def test_vacation_does_not_check_ordering(self):
        form = validate_form(VacationForm, {"driverId": "3", "startDate": "2024-06-03", "endDate": "2024-06-01"})
        assert form.start_date > form.end_date

    @pytest.mark.parametrize("data", [{}, {"delivery": "1"}, {"delivery": "1", "driver": "0"}])
    def test_assignment_requires_both(self, data):
        with pytest.raises(AppValidationError) as exc_info:
            validate_form(AssignmentForm, data)
        assert exc_info.value.message == "배차할 배송과 기사를 선택하세요."

    def test_assignment_valid(self):
        form = validate_form(AssignmentForm, {"delivery": "4", "driver": 2})
        assert (form.delivery, form.driver) == (4, 2)


class TestQuerySchemas:
    """
    Tests for RevenueQuery and ManualSelectionQuery.
    """

    def test_revenue_defaults_to_today(self):
        query = validate_query_params(RevenueQuery, {"year": "", "month": ""})
        assert query.resolved(date(2024, 5, 20)) == (2024, 5)

    def test_revenue_explicit(self):
        query = validate_query_params(RevenueQuery, {"year": "2023", "month": "12"})
        assert query.resolved(date(2024, 5, 20)) == (2023, 12)

    @pytest.mark.parametrize("month", ["0", "13"])
    def test_revenue_month_out_of_range(self, month):
        with pytest.raises(AppValidationError):
            validate_query_params(RevenueQuery, {"month": month})

    @pytest.mark.parametrize("raw,expected", [("5", 5), ("", None), ("abc", None), ("-1", None)])
    def test_manual_selection(self, raw, expected):
        assert validate_query_params(ManualSelectionQuery, {"delivery": raw}).delivery == expected


class TestDTOs:
    """
    Tests for backend DTO parsing and status enums.
    """

    def test_parse_driver(self, sample_driver_data):
        driver = parse_one(DriverDTO, sample_driver_data)

        assert driver.phone_number == "010-1234-5678"
        assert driver.status is DriverStatus.ACTIVE
        assert driver.status.label == "활성"
        assert driver.status.badge == "green"

    def test_parse_delivery_with_driver(self, sample_delivery_data):
        delivery = parse_one(DeliveryDTO, sample_delivery_data)

        assert delivery.feed_tonnage == 12.5
        assert delivery.driver.name == "김철수"
        assert delivery.status is DeliveryStatus.ASSIGNED

    def test_unknown_fields_are_ignored(self, sample_driver_data):
        driver = parse_one(DriverDTO, {**sample_driver_data, "rating": 4.5})
        assert not hasattr(driver, "rating")

    def test_parse_list_non_list_is_empty(self):
        assert parse_list(DriverDTO, None) == []
        assert parse_list(DriverDTO, {"id": 1}) == []

    def test_parse_list_rejects_bad_items(self):
        with pytest.raises(PydanticValidationError):
            parse_list(DriverDTO, [{"name": "id 없음"}])

    def test_recommendation_without_driver(self):
        rec = parse_one(DeliveryRecommendationDTO, {"message": "사용 가능한 기사가 없습니다."})
        assert rec.recommended_driver is None

    def test_vacation_and_revenue(self, sample_vacation_data):
        vacation = parse_one(VacationDTO, sample_vacation_data)
        row = parse_one(RevenueRowDTO, {"date": "2024-05-01", "amount": 120000})

        assert vacation.status.can_review is True
        assert row.amount == 120000

    def test_dto_to_dict_round_trips_names(self, sample_driver_data):
        assert dto_to_dict(parse_one(DriverDTO, sample_driver_data)) == sample_driver_data

    def test_delivery_lifecycle_predicates(self):
        assert DeliveryStatus.PENDING.can_assign
        assert not DeliveryStatus.ASSIGNED.can_assign
        assert DeliveryStatus.ASSIGNED.can_complete and DeliveryStatus.IN_PROGRESS.can_complete
        assert DeliveryStatus.IN_PROGRESS.can_cancel_assignment
        assert not DeliveryStatus.COMPLETED.can_cancel_assignment
        assert DeliveryStatus.CANCELLED.is_terminal
        assert not VacationStatus.APPROVED.can_review


class TestErrorCodes:
    """
    Tests for the console exception hierarchy.
    """

    @pytest.mark.parametrize(
        "exc,status,code",
        [
            (AppValidationError("bad"), 400, "VALIDATION_ERROR"),
            (ExternalServiceError("down"), 502, "EXTERNAL_SERVICE_ERROR"),
            (BusinessLogicError("nope"), 422, "BUSINESS_LOGIC_ERROR"),
        ],
    )
    def test_codes_and_statuses(self, exc, status, code):
        assert exc.http_status == status
        assert exc.error_code == code
        assert exc.details == {}

    def test_capture_to_sentry_tags_error_code(self):
        exc = BusinessLogicError("추천 기사가 없습니다.", details={"delivery": 5})

        with patch("apps.core.exceptions.capture_exception", return_value=None) as capture:
            exc.capture_to_sentry(level="warning", tags={"path": "/assignments/"})

        kwargs = capture.call_args.kwargs
        assert kwargs["level"] == "warning"
        assert kwargs["tags"] == {
            "path": "/assignments/",
            "error_code": "BUSINESS_LOGIC_ERROR",
            "exception_type": "BusinessLogicError",
        }
        assert kwargs["extra"]["details"] == {"delivery": 5}


class TestExceptionHandlingMiddleware:
    """
    Tests for ExceptionHandlingMiddleware.process_exception.
    """

    def _middleware(self):
        from django.http import HttpResponse
        from apps.core.middleware import ExceptionHandlingMiddleware

        return ExceptionHandlingMiddleware(lambda request: HttpResponse("ok"))

    def test_passes_through_successful_response(self, rf):
        response = self._middleware()(rf.get("/"))
        assert response.status_code == 200

    def test_json_path_gets_json_error(self, rf, settings):
        settings.DEBUG = False
        response = self._middleware().process_exception(rf.get("/health/"), AppValidationError("bad"))

        assert response.status_code == 400
        assert response["Content-Type"].startswith("application/json")
        assert b"VALIDATION_ERROR" in response.content

    def test_page_gets_error_page(self, rf):
        from apps.integrations.dispatch_client import DispatchAPIError

        exc = DispatchAPIError("HTTP 500", status_code=500, backend_message="서버 점검 중입니다.")
        response = self._middleware().process_exception(rf.get("/drivers/"), exc)

        assert response.status_code == 502
        assert "서버 점검 중입니다." in response.content.decode()

    def test_htmx_gets_modal_fragment(self, rf):
        request = rf.get("/drivers/1/revenue/", HTTP_HX_REQUEST="true")
        response = self._middleware().process_exception(request, RuntimeError("boom"))

        body = response.content.decode()
        assert response.status_code == 500
        assert "<dialog" in body
        assert "<html" not in body
        assert "예기치 않은 오류가 발생했습니다." in body

    def test_http404_left_to_django(self, rf):
        from django.http import Http404

        assert self._middleware().process_exception(rf.get("/drivers/"), Http404()) is None


class TestSentryMonitoring:
    """
    Tests for Sentry monitoring integration.
    """

    def test_init_sentry_with_valid_dsn(self, monkeypatch):
        from apps.core import monitoring

        monkeypatch.setattr("apps.core.monitoring.sentry_init", lambda *args, **kwargs: None)
        monkeypatch.setattr(monitoring, "_sentry_enabled", False)

        assert monitoring.init_sentry(dsn="https://test@sentry.io/123", environment="test") is True
        assert monitoring._sentry_enabled is True

    def test_init_sentry_with_empty_dsn(self):
        from apps.core import monitoring

        assert monitoring.init_sentry(dsn="") is False
        assert monitoring._sentry_enabled is False

    def test_helpers_are_noops_when_disabled(self):
        from apps.core.monitoring import add_breadcrumb, capture_exception, set_transaction

        assert capture_exception(ValueError("Test exception")) is None
        assert set_transaction(name="test_transaction", op="test.op") is None
        add_breadcrumb(message="Test breadcrumb", category="test", level="info")


class TestHealthCheckEndpoints:
    """
    Tests for health check endpoints.
    """

    def test_health_check_endpoint(self, client):
        response = client.get("/health/")

        assert response.status_code == 200
        assert response.json()["status"] == "ok"
        assert "timestamp" in response.json()

    def test_liveness_check_endpoint(self, client):
        response = client.get("/health/live/")

        assert response.status_code == 200
        assert response.json()["status"] == "alive"

    @patch("apps.integrations.monitoring.DispatchBackendMonitor.check_backend_health")
    def test_readiness_ok(self, mock_check, client):
        mock_check.return_value = {"ok": True, "status_code": 200, "error": None, "base_url": "http://dispatch.test"}

        response = client.get("/health/ready/")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["checks"]["dispatch_backend"]["status"] == "ok"

    @patch("apps.integrations.monitoring.DispatchBackendMonitor.check_backend_health")
    def test_readiness_backend_down(self, mock_check, client):
        mock_check.return_value = {
            "ok": False,
            "status_code": None,
            "error": "connection refused",
            "base_url": "http://dispatch.test",
        }

        response = client.get("/health/ready/")

        assert response.status_code == 503
        assert response.json()["status"] == "not_ready"
