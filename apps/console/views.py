from __future__ import annotations

from typing import Any, Callable

from django.contrib import messages
from django.http import HttpRequest, HttpResponse
from django.shortcuts import redirect, render
from django.urls import reverse
from django.utils import timezone
from django.views.decorators.http import require_GET, require_POST, require_http_methods
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema

from apps.console.services import (
    ASSIGN_SUCCESS,
    CANCEL_SUCCESS,
    COMPLETE_SUCCESS,
    HISTORY_SUCCESS,
    AssignedDeliveryService,
    AssignmentService,
    DashboardService,
    DeliveryService,
    DriverService,
    HistoryService,
    ManualAssignmentService,
    PageState,
    VacationService,
)
from apps.core.schemas import ManualSelectionQuery, RevenueQuery
from apps.core.validation import validate_query_params

CONFIRM_DELETE_TEMPLATE = "console/confirm_delete.html"
DELETE_CONFIRM_MESSAGE = "정말 삭제하시겠습니까?"
FIRST_REVENUE_YEAR = 2023

HTML_PAGE = OpenApiResponse(response=OpenApiTypes.STR, description="HTML 페이지")
HTML_REDIRECT = OpenApiResponse(description="성공 시 목록 페이지로 리다이렉트 (Post/Redirect/Get)")


def _is_htmx(request: HttpRequest) -> bool:
    return request.headers.get("HX-Request") == "true"


def _posted_draft(request: HttpRequest) -> dict[str, Any]:
    return {key: value for key, value in request.POST.items() if key != "csrfmiddlewaretoken"}


def _render_page(request: HttpRequest, template: str, state: PageState, **extra: Any) -> HttpResponse:
    return render(request, template, state.context(**extra))


"""
GOAL: Shared confirm-then-delete flow for drivers, deliveries and vacations.

PARAMETERS:
  request: HttpRequest - GET renders the confirmation, POST performs
  heading: str - Confirmation heading
  list_url_name: str - Where to return on success or decline
  perform: Callable[[PageState], bool] - Service delete call
  reload: Callable[[PageState], Any] - Reloads the list page after a failure
  template: str - List page template for the failure re-render

RETURNS:
  HttpResponse - Confirmation page, redirect, or list page with the error modal

GUARANTEES:
  - The backend is called only for a POST with confirm=yes
"""
def _confirm_delete(
    request: HttpRequest,
    *,
    heading: str,
    list_url_name: str,
    perform: Callable[[PageState], bool],
    reload: Callable[[PageState], Any],
    template: str,
) -> HttpResponse:
    if request.method != "POST":
        return render(
            request,
            CONFIRM_DELETE_TEMPLATE,
            {"heading": heading, "message": DELETE_CONFIRM_MESSAGE, "cancel_url": reverse(list_url_name)},
        )

    if request.POST.get("confirm") != "yes":
        return redirect(list_url_name)

    state = PageState()
    if perform(state):
        return redirect(list_url_name)
    reload(state)
    return _render_page(request, template, state)


# ============================================================================
# Dashboard
# ============================================================================

@require_GET
@extend_schema(
    tags=["dashboard"],
    summary="대시보드",
    description="전체 기사, 활성 기사, 대기 배송, 완료 배송 통계와 최근 배송 현황을 표시합니다.",
    responses={200: HTML_PAGE},
)
def dashboard(request):
    state = PageState()
    DashboardService.build(state)
    return _render_page(request, "console/dashboard.html", state)


# ============================================================================
# Drivers
# ============================================================================

@require_GET
@extend_schema(tags=["drivers"], summary="기사 목록", responses={200: HTML_PAGE})
def driver_list(request):
    state = PageState()
    DriverService.list(state)
    return _render_page(request, "console/drivers.html", state, editing_id=None)


@require_http_methods(["GET", "POST"])
@extend_schema(
    tags=["drivers"],
    summary="기사 추가",
    description="GET은 빈 입력 폼을 열고, POST는 입력값을 검증한 뒤 POST /api/drivers 로 전송합니다.",
    responses={200: HTML_PAGE, 302: HTML_REDIRECT},
)
def driver_create(request):
    state = PageState(form_open=True)
    if request.method == "POST":
        state.draft = _posted_draft(request)
        if DriverService.save(state):
            return redirect("console:driver_list")
    DriverService.list(state)
    return _render_page(request, "console/drivers.html", state, editing_id=None)


@require_http_methods(["GET", "POST"])
@extend_schema(
    tags=["drivers"],
    summary="기사 수정",
    description="GET은 GET /api/drivers/{id} 값으로 폼을 채우고, POST는 PUT /api/drivers/{id} 로 전송합니다.",
    responses={200: HTML_PAGE, 302: HTML_REDIRECT},
)
def driver_edit(request, driver_id: int):
    state = PageState()
    if request.method == "POST":
        state.draft = _posted_draft(request)
        if DriverService.save(state, driver_id):
            return redirect("console:driver_list")
    else:
        DriverService.edit(state, driver_id)
    DriverService.list(state)
    return _render_page(request, "console/drivers.html", state, editing_id=driver_id)


@require_http_methods(["GET", "POST"])
@extend_schema(tags=["drivers"], summary="기사 삭제 (확인 후)", responses={200: HTML_PAGE, 302: HTML_REDIRECT})
def driver_delete(request, driver_id: int):
    return _confirm_delete(
        request,
        heading="기사 삭제",
        list_url_name="console:driver_list",
        perform=lambda state: DriverService.delete(state, driver_id),
        reload=DriverService.list,
        template="console/drivers.html",
    )


"""
GOAL: Render the monthly revenue panel of one driver.

PARAMETERS:
  request: HttpRequest - Query params year, month (default: current), driver_name (display only)
  driver_id: int - Driver id

RETURNS:
  HttpResponse - HTMX fragment for HX-Request, full page otherwise

RAISES:
  ValidationError: Out-of-range year/month (rendered by the middleware)

GUARANTEES:
  - Exactly one backend call per render
"""
@require_GET
@extend_schema(
    tags=["drivers"],
    summary="기사 월별 매출",
    description="GET /api/drivers/{id}/revenue?year=&month= 결과를 날짜별 표로 렌더링합니다.",
    parameters=[
        OpenApiParameter("year", int, description="연도 (기본: 올해)", required=False),
        OpenApiParameter("month", int, description="월 1-12 (기본: 이번 달)", required=False),
        OpenApiParameter("driver_name", str, description="표시용 기사 이름", required=False),
    ],
    responses={200: HTML_PAGE, 400: OpenApiResponse(response=OpenApiTypes.OBJECT, description="잘못된 연도/월")},
)
def driver_revenue(request, driver_id: int):
    query = validate_query_params(RevenueQuery, {
        "year": request.GET.get("year"),
        "month": request.GET.get("month"),
    })
    today = timezone.localdate()
    year, month = query.resolved(today)

    state = PageState()
    DriverService.revenue(state, driver_id, year, month)

    years = sorted(set(range(FIRST_REVENUE_YEAR, today.year + 1)) | {year}, reverse=True)
    template = "console/partials/driver_revenue.html" if _is_htmx(request) else "console/driver_revenue.html"
    return _render_page(
        request,
        template,
        state,
        driver_name=request.GET.get("driver_name", ""),
        years=years,
        months=range(1, 13),
    )


# ============================================================================
# Deliveries
# ============================================================================

@require_GET
@extend_schema(tags=["deliveries"], summary="배송 목록", responses={200: HTML_PAGE})
def delivery_list(request):
    state = PageState()
    DeliveryService.list(state)
    return _render_page(request, "console/deliveries.html", state, editing_id=None)


@require_http_methods(["GET", "POST"])
@extend_schema(tags=["deliveries"], summary="배송 추가", responses={200: HTML_PAGE, 302: HTML_REDIRECT})
def delivery_create(request):
    state = PageState(form_open=True)
    if request.method == "POST":
        state.draft = _posted_draft(request)
        if DeliveryService.save(state):
            return redirect("console:delivery_list")
    DeliveryService.list(state)
    return _render_page(request, "console/deliveries.html", state, editing_id=None)


@require_http_methods(["GET", "POST"])
@extend_schema(tags=["deliveries"], summary="배송 수정", responses={200: HTML_PAGE, 302: HTML_REDIRECT})
def delivery_edit(request, delivery_id: int):
    state = PageState()
    if request.method == "POST":
        state.draft = _posted_draft(request)
        if DeliveryService.save(state, delivery_id):
            return redirect("console:delivery_list")
    else:
        DeliveryService.edit(state, delivery_id)
    DeliveryService.list(state)
    return _render_page(request, "console/deliveries.html", state, editing_id=delivery_id)


@require_http_methods(["GET", "POST"])
@extend_schema(tags=["deliveries"], summary="배송 삭제 (확인 후)", responses={200: HTML_PAGE, 302: HTML_REDIRECT})
def delivery_delete(request, delivery_id: int):
    return _confirm_delete(
        request,
        heading="배송 삭제",
        list_url_name="console:delivery_list",
        perform=lambda state: DeliveryService.delete(state, delivery_id),
        reload=DeliveryService.list,
        template="console/deliveries.html",
    )


def _delivery_transition(
    request: HttpRequest,
    action: Callable[[PageState], bool],
    success_message: str,
    list_url_name: str,
    reload: Callable[[PageState], Any],
    template: str,
) -> HttpResponse:
    state = PageState()
    if action(state):
        messages.success(request, success_message)
        return redirect(list_url_name)
    reload(state)
    return _render_page(request, template, state, editing_id=None)


@require_POST
@extend_schema(tags=["deliveries"], summary="배송 완료 처리", responses={200: HTML_PAGE, 302: HTML_REDIRECT})
def delivery_complete(request, delivery_id: int):
    return _delivery_transition(
        request,
        lambda state: DeliveryService.complete(state, delivery_id),
        COMPLETE_SUCCESS,
        "console:delivery_list",
        DeliveryService.list,
        "console/deliveries.html",
    )


@require_POST
@extend_schema(tags=["deliveries"], summary="배차 취소", responses={200: HTML_PAGE, 302: HTML_REDIRECT})
def delivery_cancel_assignment(request, delivery_id: int):
    return _delivery_transition(
        request,
        lambda state: DeliveryService.cancel_assignment(state, delivery_id),
        CANCEL_SUCCESS,
        "console:delivery_list",
        DeliveryService.list,
        "console/deliveries.html",
    )


# ============================================================================
# Assignments
# ============================================================================

@require_GET
@extend_schema(
    tags=["assignments"],
    summary="배차 관리",
    description="대기 배송마다 추천 기사를 동시에 조회하여 표시합니다. 추천 실패는 해당 배송에만 영향을 줍니다.",
    responses={200: HTML_PAGE},
)
def assignment_list(request):
    state = PageState()
    AssignmentService.page(state)
    return _render_page(request, "console/assignments.html", state)


@require_POST
@extend_schema(
    tags=["assignments"],
    summary="배차",
    description="mode=recommended 이면 recommended_driver, 아니면 driver 필드의 기사로 배차합니다.",
    responses={200: HTML_PAGE, 302: HTML_REDIRECT},
)
def assignment_assign(request, delivery_id: int):
    state = PageState()
    if request.POST.get("mode") == "recommended":
        ok = AssignmentService.assign_recommended(state, delivery_id, request.POST.get("recommended_driver"))
    else:
        ok = AssignmentService.assign(state, delivery_id, request.POST.get("driver"))
    if ok:
        messages.success(request, ASSIGN_SUCCESS)
        return redirect("console:assignment_list")
    AssignmentService.page(state)
    return _render_page(request, "console/assignments.html", state)


@require_GET
@extend_schema(tags=["assignments"], summary="배차된 배송 목록", responses={200: HTML_PAGE})
def assigned_delivery_list(request):
    state = PageState()
    AssignedDeliveryService.list(state)
    return _render_page(request, "console/assigned_deliveries.html", state)


@require_POST
@extend_schema(tags=["assignments"], summary="배차된 배송 완료 처리", responses={200: HTML_PAGE, 302: HTML_REDIRECT})
def assigned_delivery_complete(request, delivery_id: int):
    return _delivery_transition(
        request,
        lambda state: DeliveryService.complete(state, delivery_id),
        COMPLETE_SUCCESS,
        "console:assigned_delivery_list",
        AssignedDeliveryService.list,
        "console/assigned_deliveries.html",
    )


@require_POST
@extend_schema(tags=["assignments"], summary="배차된 배송 배차 취소", responses={200: HTML_PAGE, 302: HTML_REDIRECT})
def assigned_delivery_cancel(request, delivery_id: int):
    return _delivery_transition(
        request,
        lambda state: DeliveryService.cancel_assignment(state, delivery_id),
        CANCEL_SUCCESS,
        "console:assigned_delivery_list",
        AssignedDeliveryService.list,
        "console/assigned_deliveries.html",
    )


"""
GOAL: Render the manual assignment page with the selection from ?delivery=<id>.

GUARANTEES:
  - Selection lives only in the request; an unknown or non-pending id selects nothing
"""
@require_GET
@extend_schema(
    tags=["assignments"],
    summary="수동 배차",
    parameters=[OpenApiParameter("delivery", int, description="선택한 배송 ID", required=False)],
    responses={200: HTML_PAGE},
)
def manual_assignment(request):
    selection = validate_query_params(ManualSelectionQuery, {"delivery": request.GET.get("delivery")})
    state = PageState()
    if selection.delivery is not None:
        state.draft["delivery"] = str(selection.delivery)
    ManualAssignmentService.page(state, selection.delivery)
    return _render_page(request, "console/manual_assignment.html", state)


@require_POST
@extend_schema(
    tags=["assignments"],
    summary="수동 배차: 추천 기사 조회",
    description="선택한 배송의 추천 기사를 조회해 기사 선택란에 미리 채웁니다.",
    responses={200: HTML_PAGE},
)
def manual_recommend(request):
    state = PageState(draft=_posted_draft(request))
    selection = ManualSelectionQuery.model_validate({"delivery": request.POST.get("delivery")})
    ManualAssignmentService.recommend(state, selection.delivery)
    ManualAssignmentService.page(state, selection.delivery)
    return _render_page(request, "console/manual_assignment.html", state)


@require_POST
@extend_schema(tags=["assignments"], summary="수동 배차: 배차", responses={200: HTML_PAGE, 302: HTML_REDIRECT})
def manual_assign(request):
    state = PageState(draft=_posted_draft(request))
    if ManualAssignmentService.assign(state):
        messages.success(request, ASSIGN_SUCCESS)
        return redirect("console:manual_assignment")
    selection = ManualSelectionQuery.model_validate({"delivery": request.POST.get("delivery")})
    ManualAssignmentService.page(state, selection.delivery)
    return _render_page(request, "console/manual_assignment.html", state)


# ============================================================================
# History
# ============================================================================

@require_http_methods(["GET", "POST"])
@extend_schema(
    tags=["history"],
    summary="과거 배송 데이터 입력",
    description="완료 또는 취소된 과거 배송을 POST /api/deliveries/history 로 등록합니다.",
    responses={200: HTML_PAGE, 302: HTML_REDIRECT},
)
def history(request):
    state = PageState()
    if request.method == "POST":
        state.draft = _posted_draft(request)
        if HistoryService.submit(state):
            messages.success(request, HISTORY_SUCCESS)
            return redirect("console:history")
    HistoryService.page(state)
    return _render_page(request, "console/history.html", state)


# ============================================================================
# Vacations
# ============================================================================

@require_GET
@extend_schema(tags=["vacations"], summary="휴가 목록", responses={200: HTML_PAGE})
def vacation_list(request):
    state = PageState()
    VacationService.page(state)
    return _render_page(request, "console/vacations.html", state)


@require_http_methods(["GET", "POST"])
@extend_schema(tags=["vacations"], summary="휴가 신청", responses={200: HTML_PAGE, 302: HTML_REDIRECT})
def vacation_create(request):
    state = PageState(form_open=True)
    if request.method == "POST":
        state.draft = _posted_draft(request)
        if VacationService.create(state):
            return redirect("console:vacation_list")
    VacationService.page(state)
    return _render_page(request, "console/vacations.html", state)


def _vacation_review(request: HttpRequest, action: Callable[[PageState], bool]) -> HttpResponse:
    state = PageState()
    if action(state):
        return redirect("console:vacation_list")
    VacationService.page(state)
    return _render_page(request, "console/vacations.html", state)


@require_POST
@extend_schema(tags=["vacations"], summary="휴가 승인", responses={200: HTML_PAGE, 302: HTML_REDIRECT})
def vacation_approve(request, vacation_id: int):
    return _vacation_review(request, lambda state: VacationService.approve(state, vacation_id))


@require_POST
@extend_schema(tags=["vacations"], summary="휴가 반려", responses={200: HTML_PAGE, 302: HTML_REDIRECT})
def vacation_reject(request, vacation_id: int):
    return _vacation_review(request, lambda state: VacationService.reject(state, vacation_id))


@require_http_methods(["GET", "POST"])
@extend_schema(tags=["vacations"], summary="휴가 삭제 (확인 후)", responses={200: HTML_PAGE, 302: HTML_REDIRECT})
def vacation_delete(request, vacation_id: int):
    return _confirm_delete(
        request,
        heading="휴가 삭제",
        list_url_name="console:vacation_list",
        perform=lambda state: VacationService.delete(state, vacation_id),
        reload=VacationService.page,
        template="console/vacations.html",
    )
