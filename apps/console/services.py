from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from functools import partial
from typing import Any, Callable, Mapping, NamedTuple, Optional, Sequence, TypeVar

from asgiref.sync import async_to_sync, sync_to_async
from django.conf import settings
from pydantic import BaseModel, ValidationError as PydanticValidationError

from apps.core.dtos import (
    DeliveryDTO,
    DeliveryRecommendationDTO,
    DeliveryStatus,
    DriverDTO,
    RevenueRowDTO,
    VacationDTO,
    dto_to_dict,
    parse_list,
    parse_one,
)
from apps.core.exceptions import BaseAPIError, BusinessLogicError, ValidationError as AppValidationError
from apps.core.schemas import (
    AssignmentForm,
    DeliveryForm,
    DriverForm,
    HistoricalDeliveryForm,
    VacationForm,
)
from apps.core.validation import validate_form
from apps.integrations.dispatch_client import DispatchAPIClient, DispatchAPIError

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)


class Failure(NamedTuple):
    title: str
    default_message: str


VALIDATION_TITLE = "입력 오류"

DASHBOARD_LOAD = Failure("데이터 로딩 실패", "데이터를 불러오는데 실패했습니다.")
DRIVERS_LOAD = Failure("기사 목록 로딩 실패", "기사 목록을 불러오는데 실패했습니다.")
DRIVER_FETCH = Failure("기사 조회 실패", "기사 정보를 불러오는데 실패했습니다.")
DRIVER_SAVE = Failure("기사 저장 실패", "기사 정보 저장에 실패했습니다.")
DRIVER_DELETE = Failure("기사 삭제 실패", "기사 삭제에 실패했습니다.")
REVENUE_LOAD = Failure("매출 조회 실패", "매출 데이터 조회에 실패했습니다.")
DELIVERIES_LOAD = Failure("배송 목록 로딩 실패", "배송 목록을 불러오는데 실패했습니다.")
DELIVERY_FETCH = Failure("배송 조회 실패", "배송 정보를 불러오는데 실패했습니다.")
DELIVERY_SAVE = Failure("배송 저장 실패", "배송 정보 저장에 실패했습니다.")
DELIVERY_DELETE = Failure("배송 삭제 실패", "배송 삭제에 실패했습니다.")
DELIVERY_COMPLETE = Failure("배송 완료 실패", "배송 완료 처리 중 오류가 발생했습니다.")
ASSIGNMENT_CANCEL = Failure("배차 취소 실패", "배차 취소 중 오류가 발생했습니다.")
ASSIGNMENTS_LOAD = Failure("데이터 로딩 실패", "데이터를 불러오는데 실패했습니다.")
ASSIGN = Failure("배차 실패", "배차에 실패했습니다.")
RECOMMEND = Failure("추천 실패", "추천 기사 조회 중 오류가 발생했습니다.")
ASSIGNED_LOAD = Failure("배차된 배송 목록 로딩 실패", "배차된 배송 목록을 불러오는데 실패했습니다.")
HISTORY_DRIVERS_LOAD = Failure("기사 목록 로딩 실패", "기사 목록을 불러오는데 실패했습니다.")
HISTORY_SUBMIT = Failure("등록 실패", "등록 중 오류가 발생했습니다.")
VACATIONS_LOAD = Failure("데이터 로딩 실패", "데이터를 불러오는데 실패했습니다.")
VACATION_CREATE = Failure("휴가 신청 실패", "휴가 신청에 실패했습니다.")
VACATION_APPROVE = Failure("휴가 승인 실패", "휴가 승인에 실패했습니다.")
VACATION_REJECT = Failure("휴가 반려 실패", "휴가 반려에 실패했습니다.")
VACATION_DELETE = Failure("휴가 삭제 실패", "휴가 삭제에 실패했습니다.")

NO_RECOMMENDED_DRIVER = "추천 기사가 없습니다."
NO_AVAILABLE_DRIVER = "사용 가능한 기사가 없습니다."
NO_RECOMMENDATION = "추천할 수 있는 기사가 없습니다."
SELECT_DELIVERY_MESSAGE = "추천받을 배송을 선택하세요."

ASSIGN_SUCCESS = "배차가 성공적으로 완료되었습니다."
CANCEL_SUCCESS = "배차가 성공적으로 취소되었습니다."
COMPLETE_SUCCESS = "배송이 완료 처리되었습니다."
HISTORY_SUCCESS = "과거 배송 데이터가 성공적으로 등록되었습니다."

# Failures that end up in the error modal; anything else is a bug and propagates
CONSOLE_ERRORS = (BaseAPIError, PydanticValidationError, ValueError)


@dataclass
class ErrorModal:
    title: str
    message: str


@dataclass
class PageState:
    """
    Per-request view-model of a console page.

    data holds fetched collections; draft holds form values as typed by the
    user and survives a failed submit; error_modal keeps the first failure.
    """
    data: dict[str, Any] = field(default_factory=dict)
    flash: Optional[str] = None
    error_modal: Optional[ErrorModal] = None
    draft: dict[str, Any] = field(default_factory=dict)
    form_open: bool = False

    def fail(self, title: str, message: str) -> None:
        if self.error_modal is None:
            self.error_modal = ErrorModal(title=title, message=message)

    @property
    def ok(self) -> bool:
        return self.error_modal is None

    def context(self, **extra: Any) -> dict[str, Any]:
        return {
            **self.data,
            "flash": self.flash,
            "error_modal": self.error_modal,
            "draft": self.draft,
            "form_open": self.form_open,
            **extra,
        }


"""
GOAL: Run independent blocking calls concurrently and return their results in order.

PARAMETERS:
  calls: Sequence[Callable[[], Any]] - Zero-argument callables (e.g. client methods bound with partial)
  return_exceptions: bool - When True, failures are returned in place of results

RETURNS:
  list[Any] - One entry per call, same order as calls

RAISES:
  Exception: The first failure when return_exceptions is False

GUARANTEES:
  - Every call runs on its own worker thread; calls overlap in time
  - Driven from synchronous views through async_to_sync
"""
def run_concurrently(calls: Sequence[Callable[[], Any]], *, return_exceptions: bool = False) -> list[Any]:
    if not calls:
        return []

    async def _gather() -> list[Any]:
        return await asyncio.gather(
            *(sync_to_async(call, thread_sensitive=False)() for call in calls),
            return_exceptions=return_exceptions,
        )

    return list(async_to_sync(_gather)())


"""
GOAL: Turn a caught failure into the error modal and a log record.

PARAMETERS:
  state: PageState - Page being built
  exc: Exception - One of CONSOLE_ERRORS
  title: str - Modal title for the failed operation
  default_message: str - Korean fallback when the backend sent no message

GUARANTEES:
  - Backend "message" wins over default_message
  - Local validation and business errors show their own message
"""
def _record_failure(state: PageState, exc: Exception, title: str, default_message: str) -> None:
    if isinstance(exc, DispatchAPIError):
        message = exc.user_message(default_message)
        logger.error("%s: %s (status=%s)", title, exc.message, exc.status_code)
    elif isinstance(exc, BaseAPIError):
        message = exc.message
        logger.info("%s: %s", title, exc.message)
    else:
        message = default_message
        logger.error("%s: %s", title, exc, exc_info=exc)
    state.fail(title, message)


"""
GOAL: Run one fetch and store its parsed result under state.data[key].

PARAMETERS:
  state: PageState - Page being built
  key: str - Context key for the result
  fetch: Callable[[], Any] - Client call plus parsing
  title, default_message: str - Error modal text for this page
  empty: Any - Value stored on failure

RETURNS:
  bool - True on success

GUARANTEES:
  - On failure state.data[key] is empty and the error modal is set
"""
def load(
    state: PageState,
    key: str,
    fetch: Callable[[], Any],
    *,
    title: str,
    default_message: str,
    empty: Any = None,
) -> bool:
    try:
        state.data[key] = fetch()
        return True
    except CONSOLE_ERRORS as exc:
        state.data[key] = [] if empty is None else empty
        _record_failure(state, exc, title, default_message)
        return False


"""
GOAL: Run several independent fetches concurrently, all-or-nothing.

PARAMETERS:
  state: PageState - Page being built
  fetches: Mapping[str, Callable[[], Any]] - Context key -> fetch
  title, default_message: str - Error modal text for this page

RETURNS:
  bool - True when every fetch succeeded

GUARANTEES:
  - On any failure every key is stored as an empty list and the first failure
    (in mapping order) drives the error modal
  - Unexpected exception types propagate
"""
def load_all(
    state: PageState,
    fetches: Mapping[str, Callable[[], Any]],
    *,
    title: str,
    default_message: str,
) -> bool:
    keys = list(fetches)
    results = run_concurrently([fetches[key] for key in keys], return_exceptions=True)

    failures = [result for result in results if isinstance(result, BaseException)]
    for failure in failures:
        if not isinstance(failure, CONSOLE_ERRORS):
            raise failure

    if failures:
        for key in keys:
            state.data[key] = []
        _record_failure(state, failures[0], title, default_message)
        return False

    state.data.update(zip(keys, results))
    return True


"""
GOAL: Run one mutation and report success.

PARAMETERS:
  state: PageState - Page being built
  action: Callable[[], Any] - Client call
  title, default_message: str - Error modal text for this action

RETURNS:
  bool - True on success; on failure the modal is set and state.data is untouched
"""
def mutate(state: PageState, action: Callable[[], Any], *, title: str, default_message: str) -> bool:
    try:
        action()
        return True
    except CONSOLE_ERRORS as exc:
        _record_failure(state, exc, title, default_message)
        return False


def validate_draft(state: PageState, schema_class: type[T]) -> Optional[T]:
    """
    Validate state.draft; on failure open the "입력 오류" modal and return None.
    """
    try:
        return validate_form(schema_class, state.draft)
    except AppValidationError as exc:
        logger.info("Form validation failed for %s: %s", schema_class.__name__, exc.details)
        state.fail(VALIDATION_TITLE, exc.message)
        return None


def _drivers() -> list[DriverDTO]:
    return parse_list(DriverDTO, DispatchAPIClient.get_drivers())


def _active_drivers() -> list[DriverDTO]:
    return parse_list(DriverDTO, DispatchAPIClient.get_active_drivers())


def _deliveries() -> list[DeliveryDTO]:
    return parse_list(DeliveryDTO, DispatchAPIClient.get_deliveries())


def _pending_deliveries() -> list[DeliveryDTO]:
    return parse_list(DeliveryDTO, DispatchAPIClient.get_pending_deliveries())


def _form_draft(dto: BaseModel, fields: Sequence[str]) -> dict[str, Any]:
    values = dto_to_dict(dto)
    draft = {name: values.get(name, "") for name in fields}
    for name in fields:
        if name.endswith("Date") and isinstance(draft[name], str):
            draft[name] = draft[name][:10]
    return draft


class DashboardService:

    """
    GOAL: Build the dashboard: totals plus the most recent deliveries.

    GUARANTEES:
      - Four fetches issued concurrently; any failure empties all of them
      - completed_deliveries counts COMPLETED among all deliveries
    """
    @staticmethod
    def build(state: PageState) -> None:
        load_all(
            state,
            {
                "drivers": _drivers,
                "active_drivers": _active_drivers,
                "deliveries": _deliveries,
                "pending_deliveries": _pending_deliveries,
            },
            **DASHBOARD_LOAD._asdict(),
        )
        deliveries = state.data["deliveries"]
        state.data["stats"] = {
            "total_drivers": len(state.data["drivers"]),
            "active_drivers": len(state.data["active_drivers"]),
            "pending_deliveries": len(state.data["pending_deliveries"]),
            "completed_deliveries": sum(1 for d in deliveries if d.status is DeliveryStatus.COMPLETED),
        }
        state.data["recent_deliveries"] = deliveries[: settings.CONSOLE_RECENT_DELIVERIES]


class DriverService:
    FORM_FIELDS = ("name", "phoneNumber", "vehicleNumber", "vehicleType", "tonnage", "status")

    @staticmethod
    def list(state: PageState) -> bool:
        return load(state, "drivers", _drivers, **DRIVERS_LOAD._asdict(), empty=[])

    @classmethod
    def edit(cls, state: PageState, driver_id: int) -> bool:
        """
        Prefill the draft from GET /api/drivers/{id} and open the form.
        """
        ok = load(
            state,
            "editing",
            lambda: parse_one(DriverDTO, DispatchAPIClient.get_driver(driver_id)),
            **DRIVER_FETCH._asdict(),
            empty=None,
        )
        if ok:
            state.draft = _form_draft(state.data["editing"], cls.FORM_FIELDS)
            state.form_open = True
        else:
            state.data["editing"] = None
        return ok

    @staticmethod
    def save(state: PageState, driver_id: Optional[int] = None) -> bool:
        state.form_open = True
        form = validate_draft(state, DriverForm)
        if form is None:
            return False
        payload = form.to_payload()
        if driver_id is None:
            action = partial(DispatchAPIClient.create_driver, payload)
        else:
            action = partial(DispatchAPIClient.update_driver, driver_id, payload)
        return mutate(state, action, **DRIVER_SAVE._asdict())

    @staticmethod
    def delete(state: PageState, driver_id: int) -> bool:
        return mutate(state, partial(DispatchAPIClient.delete_driver, driver_id), **DRIVER_DELETE._asdict())

    """
    GOAL: Load one month of revenue rows for the revenue panel.

    PARAMETERS:
      state: PageState - Panel state
      driver_id: int - Driver id
      year, month: int - Selected period

    RETURNS:
      bool - True on success

    GUARANTEES:
      - Exactly one backend call
      - On failure rows are empty and the error modal is set
    """
    @staticmethod
    def revenue(state: PageState, driver_id: int, year: int, month: int) -> bool:
        state.data.update({"driver_id": driver_id, "year": year, "month": month})
        return load(
            state,
            "rows",
            lambda: parse_list(RevenueRowDTO, DispatchAPIClient.get_driver_revenue(driver_id, year, month)),
            **REVENUE_LOAD._asdict(),
            empty=[],
        )


class DeliveryService:
    FORM_FIELDS = ("destination", "address", "price", "feedTonnage", "deliveryDate", "notes")

    @staticmethod
    def list(state: PageState) -> bool:
        return load(state, "deliveries", _deliveries, **DELIVERIES_LOAD._asdict(), empty=[])

    @classmethod
    def edit(cls, state: PageState, delivery_id: int) -> bool:
        ok = load(
            state,
            "editing",
            lambda: parse_one(DeliveryDTO, DispatchAPIClient.get_delivery(delivery_id)),
            **DELIVERY_FETCH._asdict(),
            empty=None,
        )
        if ok:
            state.draft = _form_draft(state.data["editing"], cls.FORM_FIELDS)
            state.form_open = True
        else:
            state.data["editing"] = None
        return ok

    @staticmethod
    def save(state: PageState, delivery_id: Optional[int] = None) -> bool:
        state.form_open = True
        form = validate_draft(state, DeliveryForm)
        if form is None:
            return False
        payload = form.to_payload()
        if delivery_id is None:
            action = partial(DispatchAPIClient.create_delivery, payload)
        else:
            action = partial(DispatchAPIClient.update_delivery, delivery_id, payload)
        return mutate(state, action, **DELIVERY_SAVE._asdict())

    @staticmethod
    def delete(state: PageState, delivery_id: int) -> bool:
        return mutate(state, partial(DispatchAPIClient.delete_delivery, delivery_id), **DELIVERY_DELETE._asdict())

    @staticmethod
    def complete(state: PageState, delivery_id: int) -> bool:
        return mutate(state, partial(DispatchAPIClient.complete, delivery_id), **DELIVERY_COMPLETE._asdict())

    @staticmethod
    def cancel_assignment(state: PageState, delivery_id: int) -> bool:
        return mutate(
            state,
            partial(DispatchAPIClient.cancel_assignment, delivery_id),
            **ASSIGNMENT_CANCEL._asdict(),
        )


class AssignedDeliveryService:

    @staticmethod
    def list(state: PageState) -> bool:
        return load(
            state,
            "deliveries",
            lambda: parse_list(DeliveryDTO, DispatchAPIClient.get_assigned_deliveries()),
            **ASSIGNED_LOAD._asdict(),
            empty=[],
        )


@dataclass
class AssignmentRow:
    delivery: DeliveryDTO
    recommendation: Optional[DeliveryRecommendationDTO] = None

    @property
    def recommended_driver(self) -> Optional[DriverDTO]:
        return self.recommendation.recommended_driver if self.recommendation else None

    @property
    def no_recommendation_text(self) -> str:
        if self.recommendation and self.recommendation.message:
            return self.recommendation.message
        return NO_AVAILABLE_DRIVER


class AssignmentService:

    """
    GOAL: Build the assignments page: pending deliveries, active drivers and one
    recommendation per pending delivery.

    GUARANTEES:
      - Pending deliveries and active drivers are fetched concurrently (all-or-nothing)
      - Exactly one recommend-driver call per pending delivery, all concurrent
      - A failed recommendation only blanks its own row
    """
    @staticmethod
    def page(state: PageState) -> None:
        ok = load_all(
            state,
            {"pending_deliveries": _pending_deliveries, "drivers": _active_drivers},
            **ASSIGNMENTS_LOAD._asdict(),
        )
        pending: list[DeliveryDTO] = state.data["pending_deliveries"]
        if not ok or not pending:
            state.data["rows"] = [AssignmentRow(delivery=d) for d in pending]
            return

        results = run_concurrently(
            [partial(DispatchAPIClient.recommend_driver, d.id) for d in pending],
            return_exceptions=True,
        )

        rows = []
        for delivery, result in zip(pending, results):
            if isinstance(result, BaseException):
                if not isinstance(result, CONSOLE_ERRORS):
                    raise result
                logger.warning("배송 %s 추천 실패: %s", delivery.id, result)
                rows.append(AssignmentRow(delivery=delivery))
                continue
            try:
                recommendation = parse_one(DeliveryRecommendationDTO, result)
            except PydanticValidationError as exc:
                logger.warning("배송 %s 추천 응답 파싱 실패: %s", delivery.id, exc)
                recommendation = None
            rows.append(AssignmentRow(delivery=delivery, recommendation=recommendation))
        state.data["rows"] = rows

    @staticmethod
    def assign(state: PageState, delivery_id: Any, driver_id: Any) -> bool:
        state.draft = {"delivery": delivery_id, "driver": driver_id}
        form = validate_draft(state, AssignmentForm)
        if form is None:
            return False
        return mutate(state, partial(DispatchAPIClient.assign, form.delivery, form.driver), **ASSIGN._asdict())

    @classmethod
    def assign_recommended(cls, state: PageState, delivery_id: Any, recommended_driver_id: Any) -> bool:
        """
        Assign the driver recommended when the page was rendered.
        """
        if not str(recommended_driver_id or "").strip():
            _record_failure(state, BusinessLogicError(NO_RECOMMENDED_DRIVER), ASSIGN.title, ASSIGN.default_message)
            return False
        return cls.assign(state, delivery_id, recommended_driver_id)


class ManualAssignmentService:

    """
    GOAL: Build the manual assignment page with the request-local selection.

    PARAMETERS:
      state: PageState - Page being built
      selected_delivery_id: Optional[int] - From ?delivery= or the posted form

    GUARANTEES:
      - Pending deliveries and active drivers are fetched concurrently
      - A selection that is no longer pending is dropped
    """
    @staticmethod
    def page(state: PageState, selected_delivery_id: Optional[int] = None) -> None:
        load_all(
            state,
            {"pending_deliveries": _pending_deliveries, "drivers": _active_drivers},
            **ASSIGNMENTS_LOAD._asdict(),
        )
        selected = None
        if selected_delivery_id is not None:
            selected = next((d for d in state.data["pending_deliveries"] if d.id == selected_delivery_id), None)
        state.data["selected_delivery"] = selected
        if selected is None:
            state.draft.pop("delivery", None)

    """
    GOAL: Ask the backend for a recommended driver and pre-select it.

    RETURNS:
      bool - True when the call succeeded (even with no recommended driver)

    GUARANTEES:
      - With a recommended driver: draft["driver"] is set and flash is
        "추천 기사: {name} ({message})"
      - Without one: flash is the backend message or "추천할 수 있는 기사가 없습니다."
    """
    @staticmethod
    def recommend(state: PageState, delivery_id: Optional[int]) -> bool:
        if delivery_id is None:
            state.fail(VALIDATION_TITLE, SELECT_DELIVERY_MESSAGE)
            return False

        ok = load(
            state,
            "recommendation",
            lambda: parse_one(DeliveryRecommendationDTO, DispatchAPIClient.recommend_driver(delivery_id)),
            **RECOMMEND._asdict(),
            empty=None,
        )
        if not ok:
            state.data["recommendation"] = None
            return False

        recommendation: DeliveryRecommendationDTO = state.data["recommendation"]
        driver = recommendation.recommended_driver
        if driver is not None:
            state.draft["driver"] = str(driver.id)
            state.flash = f"추천 기사: {driver.name} ({recommendation.message or ''})"
        else:
            state.flash = recommendation.message or NO_RECOMMENDATION
        return True

    @staticmethod
    def assign(state: PageState) -> bool:
        form = validate_draft(state, AssignmentForm)
        if form is None:
            return False
        return mutate(state, partial(DispatchAPIClient.assign, form.delivery, form.driver), **ASSIGN._asdict())


class HistoryService:

    @staticmethod
    def page(state: PageState) -> bool:
        return load(state, "drivers", _drivers, **HISTORY_DRIVERS_LOAD._asdict(), empty=[])

    """
    GOAL: Submit a backdated delivery to /api/deliveries/history.

    GUARANTEES:
      - Invalid drafts never reach the backend
      - driver is sent as {"id": driverId}
    """
    @staticmethod
    def submit(state: PageState) -> bool:
        form = validate_draft(state, HistoricalDeliveryForm)
        if form is None:
            return False
        payload = form.to_payload()
        return mutate(
            state,
            partial(DispatchAPIClient.create_historical_delivery, payload),
            **HISTORY_SUBMIT._asdict(),
        )


class VacationService:

    @staticmethod
    def page(state: PageState) -> None:
        load_all(
            state,
            {
                "vacations": lambda: parse_list(VacationDTO, DispatchAPIClient.get_vacations()),
                "drivers": _drivers,
            },
            **VACATIONS_LOAD._asdict(),
        )

    @staticmethod
    def create(state: PageState) -> bool:
        """
        Request a vacation; the backend stores it as PENDING.
        """
        state.form_open = True
        form = validate_draft(state, VacationForm)
        if form is None:
            return False
        return mutate(
            state,
            partial(DispatchAPIClient.create_vacation, form.to_payload()),
            **VACATION_CREATE._asdict(),
        )

    @staticmethod
    def approve(state: PageState, vacation_id: int) -> bool:
        return mutate(state, partial(DispatchAPIClient.approve_vacation, vacation_id), **VACATION_APPROVE._asdict())

    @staticmethod
    def reject(state: PageState, vacation_id: int) -> bool:
        return mutate(state, partial(DispatchAPIClient.reject_vacation, vacation_id), **VACATION_REJECT._asdict())

    @staticmethod
    def delete(state: PageState, vacation_id: int) -> bool:
        return mutate(state, partial(DispatchAPIClient.delete_vacation, vacation_id), **VACATION_DELETE._asdict())
