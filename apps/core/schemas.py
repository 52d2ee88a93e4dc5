"""
Pydantic schemas for console form drafts and query parameters.

Every schema validates with validate_default=True so that missing fields run
through the same validators as blank ones and always produce the Korean
message shown in the error modal. Form field names are the backend's
camelCase names; to_payload() returns the JSON body for the backend.
"""

from __future__ import annotations

import math
import re
from datetime import date
from typing import Any, Optional, Literal
from pydantic import BaseModel, ConfigDict, Field, field_validator, ValidationInfo
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticCustomError

from apps.core.dtos import DriverStatus

REQUIRED_SUFFIX = "필수 입력 항목입니다."
NUMBER_SUFFIX = "숫자여야 합니다."
INTEGER_SUFFIX = "정수여야 합니다."
POSITIVE_SUFFIX = "0보다 커야 합니다."
DATE_TEMPLATE = "{label}의 날짜 형식이 올바르지 않습니다."
SELECT_DRIVER_MESSAGE = "기사를 선택해주세요."
SELECT_ASSIGNMENT_MESSAGE = "배차할 배송과 기사를 선택하세요."

FIELD_LABELS = {
    "name": "이름",
    "phone_number": "전화번호",
    "vehicle_number": "차량번호",
    "vehicle_type": "차량종류",
    "tonnage": "톤수",
    "destination": "목적지",
    "address": "주소",
    "price": "가격",
    "feed_tonnage": "사료(톤)",
    "delivery_date": "배송일",
    "start_date": "시작일",
    "end_date": "종료일",
    "year": "연도",
    "month": "월",
}

HANGUL_FIRST, HANGUL_LAST = 0xAC00, 0xD7A3


def _label(info: ValidationInfo) -> str:
    return FIELD_LABELS.get(info.field_name or "", info.field_name or "")


def _with_topic(label: str) -> str:
    """
    Attach 은/는 to a label: "가격" -> "가격은", "톤수" -> "톤수는".

    A trailing parenthetical is not read aloud, so "사료(톤)" -> "사료(톤)는".
    """
    for char in reversed(re.sub(r"\([^)]*\)$", "", label)):
        code = ord(char)
        if HANGUL_FIRST <= code <= HANGUL_LAST:
            has_final_consonant = (code - HANGUL_FIRST) % 28 != 0
            return f"{label}{'은' if has_final_consonant else '는'}"
    return f"{label}은(는)"


def _field_error(error_type: str, info: ValidationInfo, suffix: str) -> PydanticCustomError:
    return PydanticCustomError(error_type, f"{_with_topic(_label(info))} {suffix}")


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value.strip() == "")


"""
GOAL: Coerce a raw form value to a strictly positive, finite number.

PARAMETERS:
  value: Any - Raw form value - May be None, blank, str or number
  info: ValidationInfo - Field info used for the Korean label
  cast: type - int or float

RETURNS:
  int | float - Parsed value > 0

RAISES:
  PydanticCustomError: "required", "number", "integer" or "positive" with a Korean message

GUARANTEES:
  - nan and inf are rejected as non-numbers
  - int fields reject fractional input instead of truncating it
"""
def _positive_number(value: Any, info: ValidationInfo, cast: type) -> Any:
    if _is_blank(value):
        raise _field_error("required", info, REQUIRED_SUFFIX)
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise _field_error("number", info, NUMBER_SUFFIX)
    if not math.isfinite(number):
        raise _field_error("number", info, NUMBER_SUFFIX)
    if cast is int:
        if not number.is_integer():
            raise _field_error("integer", info, INTEGER_SUFFIX)
        number = int(number)
    if number <= 0:
        raise _field_error("positive", info, POSITIVE_SUFFIX)
    return number


def _required_text(value: Any, info: ValidationInfo) -> str:
    if _is_blank(value):
        raise _field_error("required", info, REQUIRED_SUFFIX)
    return str(value).strip()


def _required_date(value: Any, info: ValidationInfo) -> date:
    if _is_blank(value):
        raise _field_error("required", info, REQUIRED_SUFFIX)
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip()[:10])
    except ValueError:
        raise PydanticCustomError("date", DATE_TEMPLATE, {"label": _label(info)})


def _optional_id(value: Any) -> Optional[int]:
    if _is_blank(value):
        return None
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        return None
    return parsed if parsed > 0 else None


class FormSchema(BaseModel):
    """
    Base for console forms: camelCase input names, defaults validated.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        validate_default=True,
        extra="ignore",
    )

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


class DriverForm(FormSchema):
    """
    GOAL: Validate the driver add/edit form.

    PARAMETERS:
      name, phoneNumber, vehicleNumber, vehicleType: str - Required, non-blank
      tonnage: float - Required, > 0 ("톤수는 0보다 커야 합니다.")
      status: DriverStatus - Defaults to ACTIVE

    GUARANTEES:
      - to_payload() matches the backend Driver body
    """
    name: str = ""
    phone_number: str = ""
    vehicle_number: str = ""
    vehicle_type: str = ""
    tonnage: Optional[float] = None
    status: DriverStatus = DriverStatus.ACTIVE

    @field_validator("name", "phone_number", "vehicle_number", "vehicle_type", mode="before")
    @classmethod
    def validate_required_text(cls, v: Any, info: ValidationInfo) -> str:
        return _required_text(v, info)

    @field_validator("tonnage", mode="before")
    @classmethod
    def validate_tonnage(cls, v: Any, info: ValidationInfo) -> float:
        return _positive_number(v, info, float)

    @field_validator("status", mode="before")
    @classmethod
    def default_status(cls, v: Any) -> Any:
        return DriverStatus.ACTIVE if _is_blank(v) else v


class DeliveryForm(FormSchema):
    """
    GOAL: Validate the delivery add/edit form.

    PARAMETERS:
      destination, address: str - Required, non-blank
      price: int - Required, > 0 ("가격은 0보다 커야 합니다.")
      feedTonnage: float - Required, > 0 ("사료(톤)는 0보다 커야 합니다.")
      deliveryDate: date - Required, ISO date
      notes: Optional[str] - Free text

    GUARANTEES:
      - Invalid drafts never reach the backend
    """
    destination: str = ""
    address: str = ""
    price: Optional[int] = None
    feed_tonnage: Optional[float] = None
    delivery_date: Optional[date] = None
    notes: Optional[str] = None

    @field_validator("destination", "address", mode="before")
    @classmethod
    def validate_required_text(cls, v: Any, info: ValidationInfo) -> str:
        return _required_text(v, info)

    @field_validator("price", mode="before")
    @classmethod
    def validate_price(cls, v: Any, info: ValidationInfo) -> int:
        return _positive_number(v, info, int)

    @field_validator("feed_tonnage", mode="before")
    @classmethod
    def validate_feed_tonnage(cls, v: Any, info: ValidationInfo) -> float:
        return _positive_number(v, info, float)

    @field_validator("delivery_date", mode="before")
    @classmethod
    def validate_delivery_date(cls, v: Any, info: ValidationInfo) -> date:
        return _required_date(v, info)


class HistoricalDeliveryForm(DeliveryForm):
    """
    GOAL: Validate a backdated delivery record for /api/deliveries/history.

    PARAMETERS:
      driverId: int - Required ("기사를 선택해주세요.")
      status: "COMPLETED" | "CANCELLED" - Defaults to COMPLETED

    GUARANTEES:
      - to_payload() carries driver as {"id": driverId}, not a bare driverId
    """
    driver_id: Optional[int] = None
    status: Literal["COMPLETED", "CANCELLED"] = "COMPLETED"

    @field_validator("driver_id", mode="before")
    @classmethod
    def validate_driver(cls, v: Any) -> int:
        driver_id = _optional_id(v)
        if driver_id is None:
            raise PydanticCustomError("driver_required", SELECT_DRIVER_MESSAGE)
        return driver_id

    @field_validator("status", mode="before")
    @classmethod
    def default_status(cls, v: Any) -> Any:
        return "COMPLETED" if _is_blank(v) else v

    def to_payload(self) -> dict[str, Any]:
        payload = super().to_payload()
        payload.pop("driverId", None)
        payload["driver"] = {"id": self.driver_id}
        return payload


class VacationForm(FormSchema):
    """
    GOAL: Validate a vacation request.

    PARAMETERS:
      driverId: int - Required ("기사를 선택해주세요.")
      startDate, endDate: date - Required
      reason: Optional[str]

    GUARANTEES:
      - No ordering or overlap checks; the backend decides
    """
    driver_id: Optional[int] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    reason: Optional[str] = None

    @field_validator("driver_id", mode="before")
    @classmethod
    def validate_driver(cls, v: Any) -> int:
        driver_id = _optional_id(v)
        if driver_id is None:
            raise PydanticCustomError("driver_required", SELECT_DRIVER_MESSAGE)
        return driver_id

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def validate_dates(cls, v: Any, info: ValidationInfo) -> date:
        return _required_date(v, info)

    def to_payload(self) -> dict[str, Any]:
        return {
            "driver": {"id": self.driver_id},
            "startDate": self.start_date.isoformat() if self.start_date else None,
            "endDate": self.end_date.isoformat() if self.end_date else None,
            "reason": self.reason or "",
            "status": "PENDING",
        }


class AssignmentForm(FormSchema):
    """
    GOAL: Validate a delivery/driver pair for the assign action.

    GUARANTEES:
      - Both identifiers are positive ints, else "배차할 배송과 기사를 선택하세요."
    """
    delivery: Optional[int] = None
    driver: Optional[int] = None

    @field_validator("delivery", "driver", mode="before")
    @classmethod
    def validate_selected(cls, v: Any) -> int:
        selected = _optional_id(v)
        if selected is None:
            raise PydanticCustomError("selection_required", SELECT_ASSIGNMENT_MESSAGE)
        return selected


class RevenueQuery(BaseModel):
    """
    GOAL: Validate the revenue panel query (?year=&month=).

    GUARANTEES:
      - Missing values default to the current year/month (filled by the caller)
      - month is within [1, 12]
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    year: Optional[int] = Field(default=None, ge=2000, le=2100)
    month: Optional[int] = Field(default=None, ge=1, le=12)

    def resolved(self, today: date) -> tuple[int, int]:
        return (self.year or today.year, self.month or today.month)


class ManualSelectionQuery(BaseModel):
    """
    Selected delivery on the manual assignment page (?delivery=<id>).
    """
    delivery: Optional[int] = None

    @field_validator("delivery", mode="before")
    @classmethod
    def parse_delivery(cls, v: Any) -> Optional[int]:
        return _optional_id(v)
