"""
Pytest configuration and fixtures for Django tests.

Nothing here touches a database: the console keeps no local state and every
backend call is patched at DispatchAPIClient or requests level.
"""

import json
from typing import Any, Callable
from unittest.mock import MagicMock

import pytest
from django.test import RequestFactory as DjangoRequestFactory

TEST_BACKEND_URL = "http://dispatch.test"


@pytest.fixture
def rf():
    """
    GOAL: Provide a Django RequestFactory for creating test requests.

    RETURNS:
      RequestFactory - Django request factory instance
    """
    return DjangoRequestFactory()


@pytest.fixture
def settings(settings):
    """
    GOAL: Provide Django settings pointed at a fake dispatch backend.

    GUARANTEES:
      - DISPATCH_API_URL is TEST_BACKEND_URL, no timeout, Sentry off
      - Changes are isolated per test
    """
    settings.DISPATCH_API_URL = TEST_BACKEND_URL
    settings.NEXT_PUBLIC_API_URL = ""
    settings.DISPATCH_API_TIMEOUT = None
    settings.SENTRY_DSN = ""
    return settings


@pytest.fixture
def client(settings):
    """
    GOAL: Provide a Django test client for making HTTP requests.

    GUARANTEES:
      - Backend URL settings are applied before the first request
    """
    from django.test import Client
    return Client()


@pytest.fixture
def make_response() -> Callable[..., MagicMock]:
    """
    GOAL: Build fake requests.Response objects.

    RETURNS:
      Callable - make_response(status_code=200, json_body=..., content=None)

    GUARANTEES:
      - ok mirrors 2xx; json() raises ValueError when the body is not JSON
    """
    def _make(status_code: int = 200, json_body: Any = None, content: bytes | None = None) -> MagicMock:
        response = MagicMock()
        response.status_code = status_code
        response.ok = 200 <= status_code < 300
        if content is None:
            content = b"" if json_body is None else json.dumps(json_body).encode()
        response.content = content

        def _json_body() -> Any:
            return json.loads(content.decode() or "")

        response.json.side_effect = _json_body
        return response

    return _make


@pytest.fixture
def sample_driver_data():
    """
    GOAL: Provide a backend driver payload (camelCase JSON).
    """
    return {
        "id": 1,
        "name": "김철수",
        "phoneNumber": "010-1234-5678",
        "vehicleNumber": "12가3456",
        "vehicleType": "트럭",
        "tonnage": 5.0,
        "status": "ACTIVE",
        "joinDate": "2023-03-02",
    }


@pytest.fixture
def sample_delivery_data(sample_driver_data):
    """
    GOAL: Provide a backend delivery payload assigned to sample_driver_data.
    """
    return {
        "id": 10,
        "destination": "화성 농장",
        "address": "경기도 화성시 팔탄면 1",
        "price": 350000,
        "feedTonnage": 12.5,
        "deliveryDate": "2024-05-01",
        "driver": sample_driver_data,
        "status": "ASSIGNED",
        "notes": "오전 도착",
        "createdAt": "2024-04-28T09:00:00",
        "completedAt": None,
    }


@pytest.fixture
def sample_pending_delivery_data():
    return {
        "id": 11,
        "destination": "평택 농장",
        "address": "경기도 평택시 2",
        "price": 200000,
        "feedTonnage": 8,
        "deliveryDate": "2024-05-02",
        "driver": None,
        "status": "PENDING",
    }


@pytest.fixture
def sample_vacation_data(sample_driver_data):
    """
    GOAL: Provide a backend vacation payload in PENDING state.
    """
    return {
        "id": 7,
        "driver": sample_driver_data,
        "startDate": "2024-06-01",
        "endDate": "2024-06-03",
        "reason": "가족 행사",
        "status": "PENDING",
        "requestDate": "2024-05-20",
    }
