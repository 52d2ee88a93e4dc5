"""
Data Transfer Objects (DTOs) for the dispatch console.

Pydantic v2 models mirroring the backend's camelCase JSON. Unknown fields are
ignored and optional fields may be missing. Status enums carry the Korean
labels and badge colours used by the templates, plus the lifecycle
predicates that decide which action buttons are shown.
"""

from enum import Enum
from typing import Optional, List, Dict, Any, Type, TypeVar
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

T = TypeVar("T", bound=BaseModel)


# ============================================================================
# Status enums
# ============================================================================

class DriverStatus(str, Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    ON_VACATION = "ON_VACATION"

    @property
    def label(self) -> str:
        return _DRIVER_LABELS[self]

    @property
    def badge(self) -> str:
        return _DRIVER_BADGES[self]


class DeliveryStatus(str, Enum):
    """
    Delivery lifecycle: PENDING -> ASSIGNED -> IN_PROGRESS -> COMPLETED,
    with CANCELLED reachable from any non-terminal state. The backend is
    authoritative; these predicates only gate which buttons are rendered.
    """
    PENDING = "PENDING"
    ASSIGNED = "ASSIGNED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"

    @property
    def label(self) -> str:
        return _DELIVERY_LABELS[self]

    @property
    def badge(self) -> str:
        return _DELIVERY_BADGES[self]

    @property
    def can_assign(self) -> bool:
        return self is DeliveryStatus.PENDING

    @property
    def can_cancel_assignment(self) -> bool:
        return self in (DeliveryStatus.ASSIGNED, DeliveryStatus.IN_PROGRESS)

    @property
    def can_complete(self) -> bool:
        return self in (DeliveryStatus.ASSIGNED, DeliveryStatus.IN_PROGRESS)

    @property
    def is_terminal(self) -> bool:
        return self in (DeliveryStatus.COMPLETED, DeliveryStatus.CANCELLED)


class VacationStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"

    @property
    def label(self) -> str:
        return _VACATION_LABELS[self]

    @property
    def badge(self) -> str:
        return _VACATION_BADGES[self]

    @property
    def can_review(self) -> bool:
        return self is VacationStatus.PENDING


_DRIVER_LABELS = {
    DriverStatus.ACTIVE: "활성",
    DriverStatus.INACTIVE: "비활성",
    DriverStatus.ON_VACATION: "휴가",
}
_DRIVER_BADGES = {
    DriverStatus.ACTIVE: "green",
    DriverStatus.INACTIVE: "red",
    DriverStatus.ON_VACATION: "yellow",
}
_DELIVERY_LABELS = {
    DeliveryStatus.PENDING: "대기",
    DeliveryStatus.ASSIGNED: "배정됨",
    DeliveryStatus.IN_PROGRESS: "진행중",
    DeliveryStatus.COMPLETED: "완료",
    DeliveryStatus.CANCELLED: "취소",
}
_DELIVERY_BADGES = {
    DeliveryStatus.PENDING: "yellow",
    DeliveryStatus.ASSIGNED: "blue",
    DeliveryStatus.IN_PROGRESS: "purple",
    DeliveryStatus.COMPLETED: "green",
    DeliveryStatus.CANCELLED: "red",
}
_VACATION_LABELS = {
    VacationStatus.PENDING: "대기",
    VacationStatus.APPROVED: "승인",
    VacationStatus.REJECTED: "반려",
}
_VACATION_BADGES = {
    VacationStatus.PENDING: "yellow",
    VacationStatus.APPROVED: "green",
    VacationStatus.REJECTED: "red",
}


# ============================================================================
# Backend payload DTOs
# ============================================================================

class BackendDTO(BaseModel):
    """
    Base for DTOs parsed from backend JSON (camelCase on the wire).
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class DriverDTO(BackendDTO):
    id: int
    name: str
    phone_number: Optional[str] = None
    vehicle_number: Optional[str] = None
    vehicle_type: Optional[str] = None
    tonnage: Optional[float] = None
    status: DriverStatus = DriverStatus.ACTIVE
    join_date: Optional[str] = None


class DeliveryDTO(BackendDTO):
    id: int
    destination: str = ""
    address: str = ""
    price: Optional[float] = None
    feed_tonnage: Optional[float] = None
    delivery_date: Optional[str] = None
    driver: Optional[DriverDTO] = None
    status: DeliveryStatus = DeliveryStatus.PENDING
    notes: Optional[str] = None
    created_at: Optional[str] = None
    completed_at: Optional[str] = None


class VacationDTO(BackendDTO):
    id: int
    driver: Optional[DriverDTO] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    reason: Optional[str] = None
    status: VacationStatus = VacationStatus.PENDING
    request_date: Optional[str] = None


class DeliveryRecommendationDTO(BackendDTO):
    """
    Transient, produced per request and never cached.
    """
    delivery: Optional[DeliveryDTO] = None
    recommended_driver: Optional[DriverDTO] = None
    message: Optional[str] = None


class RevenueRowDTO(BackendDTO):
    date: str
    amount: float = 0


"""
GOAL: Parse a backend JSON array into a list of DTOs.

PARAMETERS:
  dto_class: Type[T] - DTO class - Must be a BackendDTO subclass
  payload: Any - Decoded JSON body - Non-list values are treated as empty

RETURNS:
  List[T] - Parsed DTOs in backend order - Never None

RAISES:
  pydantic.ValidationError: If an element does not match the DTO
"""
def parse_list(dto_class: Type[T], payload: Any) -> List[T]:
    if not isinstance(payload, list):
        return []
    return [dto_class.model_validate(item) for item in payload]


def parse_one(dto_class: Type[T], payload: Any) -> T:
    return dto_class.model_validate(payload or {})


"""
GOAL: Serialize a DTO back to backend JSON (camelCase, JSON-safe values).

PARAMETERS:
  dto: BaseModel - DTO instance - Not None

RETURNS:
  Dict[str, Any] - Dictionary with camelCase keys, None values dropped
"""
def dto_to_dict(dto: BaseModel) -> Dict[str, Any]:
    return dto.model_dump(by_alias=True, mode="json", exclude_none=True)
