"""
Tests for the dispatch console pages.

Backend calls are patched on DispatchAPIClient; nothing here needs a database
or a running backend.
"""

from __future__ import annotations

import threading
from datetime import date
from unittest.mock import patch

from django.test import SimpleTestCase

from apps.console.services import (
    PageState,
    load,
    load_all,
    mutate,
    run_concurrently,
)
from apps.console.templatetags.console_tags import ko_date, tons, won
from apps.integrations.dispatch_client import DispatchAPIError

CLIENT = "apps.console.services.DispatchAPIClient"


def backend_error(status_code=500, message=None):
    return DispatchAPIError(
        f"Dispatch backend returned HTTP {status_code}",
        status_code=status_code,
        backend_message=message,
    )


def driver(driver_id=1, name="김철수", status="ACTIVE"):
    return {
        "id": driver_id,
        "name": name,
        "phoneNumber": "010-1234-5678",
        "vehicleNumber": f"{driver_id}2가3456",
        "vehicleType": "트럭",
        "tonnage": 5.0,
        "status": status,
        "joinDate": "2023-03-02",
    }


def delivery(delivery_id=10, status="PENDING", assigned=None, destination=None):
    return {
        "id": delivery_id,
        "destination": destination or f"농장 {delivery_id}",
        "address": "경기도 화성시 1",
        "price": 350000,
        "feedTonnage": 12.5,
        "deliveryDate": "2024-05-01",
        "driver": assigned,
        "status": status,
    }


def vacation(vacation_id=7, status="PENDING"):
    return {
        "id": vacation_id,
        "driver": driver(),
        "startDate": "2024-06-01",
        "endDate": "2024-06-03",
        "reason": "가족 행사",
        "status": status,
        "requestDate": "2024-05-20",
    }


class PageStateHelperTests(SimpleTestCase):
    """Test the generic load / mutate helpers."""

    def test_first_error_wins(self):
        state = PageState()
        state.fail("첫 번째", "a")
        state.fail("두 번째", "b")

        self.assertEqual(state.error_modal.title, "첫 번째")

    def test_load_failure_uses_backend_message(self):
        state = PageState()

        def fetch():
            raise backend_error(500, "DB down")

        ok = load(state, "drivers", fetch, title="기사 목록 로딩 실패", default_message="기본", empty=[])

        self.assertFalse(ok)
        self.assertEqual(state.data["drivers"], [])
        self.assertEqual(state.error_modal.message, "DB down")

    def test_load_failure_without_message_uses_default(self):
        state = PageState()

        def fetch():
            raise backend_error(503)

        load(state, "drivers", fetch, title="t", default_message="기본 메시지", empty=[])

        self.assertEqual(state.error_modal.message, "기본 메시지")

    def test_mutate_leaves_data_untouched(self):
        state = PageState(data={"drivers": ["kept"]})

        def action():
            raise backend_error(409, "이미 삭제됨")

        self.assertFalse(mutate(state, action, title="기사 삭제 실패", default_message="기본"))
        self.assertEqual(state.data["drivers"], ["kept"])
        self.assertEqual(state.error_modal.title, "기사 삭제 실패")

    def test_unexpected_errors_propagate(self):
        def fetch():
            raise TypeError("bug")

        with self.assertRaises(TypeError):
            load(PageState(), "x", fetch, title="t", default_message="d")

    def test_load_all_is_all_or_nothing(self):
        state = PageState()

        def broken():
            raise backend_error(500, "second failed")

        ok = load_all(state, {"a": lambda: [1], "b": broken}, title="데이터 로딩 실패", default_message="d")

        self.assertFalse(ok)
        self.assertEqual(state.data, {"a": [], "b": []})
        self.assertEqual(state.error_modal.message, "second failed")

    def test_run_concurrently_keeps_order(self):
        self.assertEqual(run_concurrently([lambda: 1, lambda: 2, lambda: 3]), [1, 2, 3])
        self.assertEqual(run_concurrently([]), [])


class DashboardTests(SimpleTestCase):

    @patch(f"{CLIENT}.get_pending_deliveries")
    @patch(f"{CLIENT}.get_deliveries")
    @patch(f"{CLIENT}.get_active_drivers")
    @patch(f"{CLIENT}.get_drivers")
    def test_stats(self, get_drivers, get_active, get_deliveries, get_pending):
        get_drivers.return_value = [driver(1), driver(2, status="INACTIVE")]
        get_active.return_value = [driver(1)]
        get_deliveries.return_value = [delivery(i, status="COMPLETED" if i % 2 else "PENDING") for i in range(1, 8)]
        get_pending.return_value = [delivery(2)]

        response = self.client.get("/")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.context["stats"], {
            "total_drivers": 2,
            "active_drivers": 1,
            "pending_deliveries": 1,
            "completed_deliveries": 4,
        })
        self.assertEqual(len(response.context["recent_deliveries"]), 5)
        self.assertContains(response, "최근 배송 현황")

    @patch(f"{CLIENT}.get_pending_deliveries")
    @patch(f"{CLIENT}.get_deliveries")
    @patch(f"{CLIENT}.get_active_drivers")
    @patch(f"{CLIENT}.get_drivers")
    def test_any_failure_empties_everything(self, get_drivers, get_active, get_deliveries, get_pending):
        get_drivers.return_value = [driver(1)]
        get_active.return_value = [driver(1)]
        get_deliveries.side_effect = backend_error(500)
        get_pending.return_value = [delivery(2)]

        response = self.client.get("/")

        self.assertEqual(response.context["stats"]["total_drivers"], 0)
        self.assertEqual(response.context["stats"]["pending_deliveries"], 0)
        self.assertContains(response, "데이터 로딩 실패")
        self.assertContains(response, "데이터를 불러오는데 실패했습니다.")


class DriverPageTests(SimpleTestCase):

    @patch(f"{CLIENT}.get_drivers")
    def test_failed_list_fetch_shows_modal(self, get_drivers):
        get_drivers.side_effect = backend_error(500, "DB down")

        response = self.client.get("/drivers/")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.context["drivers"], [])
        self.assertContains(response, "기사 목록 로딩 실패")
        self.assertContains(response, "DB down")

    @patch(f"{CLIENT}.get_drivers")
    def test_navigation_marks_active_entry(self, get_drivers):
        get_drivers.return_value = []

        response = self.client.get("/drivers/")

        active = [item["label"] for item in response.context["nav_items"] if item["active"]]
        self.assertEqual(active, ["기사 관리"])
        self.assertContains(response, "관리자")

    @patch(f"{CLIENT}.get_drivers")
    @patch(f"{CLIENT}.get_driver")
    def test_edit_prefills_form(self, get_driver, get_drivers):
        get_driver.return_value = driver(3, name="박영희")
        get_drivers.return_value = [driver(3, name="박영희")]

        response = self.client.get("/drivers/3/edit/")

        get_driver.assert_called_once_with(3)
        self.assertTrue(response.context["form_open"])
        self.assertEqual(response.context["draft"]["vehicleNumber"], "32가3456")
        self.assertContains(response, 'value="박영희"')

    @patch(f"{CLIENT}.get_drivers")
    @patch(f"{CLIENT}.create_driver")
    def test_create_redirects(self, create_driver, get_drivers):
        create_driver.return_value = driver(9)

        response = self.client.post("/drivers/new/", {
            "name": "이민수",
            "phoneNumber": "010-0000-0000",
            "vehicleNumber": "99가9999",
            "vehicleType": "트럭",
            "tonnage": "3.5",
            "status": "ACTIVE",
        })

        self.assertRedirects(response, "/drivers/", fetch_redirect_response=False)
        payload = create_driver.call_args.args[0]
        self.assertEqual(payload["tonnage"], 3.5)
        self.assertEqual(payload["vehicleNumber"], "99가9999")

    @patch(f"{CLIENT}.get_drivers")
    @patch(f"{CLIENT}.create_driver")
    def test_invalid_tonnage_keeps_draft(self, create_driver, get_drivers):
        get_drivers.return_value = []

        response = self.client.post("/drivers/new/", {
            "name": "이민수",
            "phoneNumber": "010-0000-0000",
            "vehicleNumber": "99가9999",
            "vehicleType": "트럭",
            "tonnage": "0",
        })

        create_driver.assert_not_called()
        self.assertContains(response, "입력 오류")
        self.assertContains(response, "톤수는 0보다 커야 합니다.")
        self.assertContains(response, 'value="99가9999"')

    @patch(f"{CLIENT}.delete_driver")
    def test_delete_requires_confirmation(self, delete_driver):
        response = self.client.get("/drivers/1/delete/")
        self.assertContains(response, "정말 삭제하시겠습니까?")
        delete_driver.assert_not_called()

        response = self.client.post("/drivers/1/delete/", {})
        self.assertRedirects(response, "/drivers/", fetch_redirect_response=False)
        delete_driver.assert_not_called()

        response = self.client.post("/drivers/1/delete/", {"confirm": "yes"})
        self.assertRedirects(response, "/drivers/", fetch_redirect_response=False)
        delete_driver.assert_called_once_with(1)

    @patch(f"{CLIENT}.get_drivers")
    @patch(f"{CLIENT}.delete_driver")
    def test_delete_failure_shows_modal(self, delete_driver, get_drivers):
        delete_driver.side_effect = backend_error(409, "배송이 남아 있는 기사입니다.")
        get_drivers.return_value = [driver(1)]

        response = self.client.post("/drivers/1/delete/", {"confirm": "yes"})

        self.assertContains(response, "기사 삭제 실패")
        self.assertContains(response, "배송이 남아 있는 기사입니다.")


class RevenuePanelTests(SimpleTestCase):

    @patch(f"{CLIENT}.get_drivers")
    @patch(f"{CLIENT}.get_driver_revenue")
    def test_empty_month(self, get_revenue, get_drivers):
        get_revenue.return_value = []

        response = self.client.get(
            "/drivers/1/revenue/?year=2024&month=5&driver_name=김철수",
            HTTP_HX_REQUEST="true",
        )

        self.assertContains(response, "매출 데이터가 없습니다.")
        self.assertContains(response, "김철수 기사 월별 매출")
        self.assertNotContains(response, "<html")
        get_revenue.assert_called_once_with(1, 2024, 5)
        get_drivers.assert_not_called()

        response = self.client.get("/drivers/1/revenue/?year=2024&month=6", HTTP_HX_REQUEST="true")

        self.assertEqual(get_revenue.call_count, 2)
        get_revenue.assert_called_with(1, 2024, 6)

    @patch(f"{CLIENT}.get_driver_revenue")
    def test_rows(self, get_revenue):
        get_revenue.return_value = [{"date": "2024-05-01", "amount": 120000}, {"date": "2024-05-03", "amount": 80000}]

        response = self.client.get("/drivers/1/revenue/?year=2024&month=5")

        self.assertContains(response, "120,000원")
        self.assertContains(response, "<html")

    @patch(f"{CLIENT}.get_driver_revenue")
    def test_failure(self, get_revenue):
        get_revenue.side_effect = backend_error(500)

        response = self.client.get("/drivers/1/revenue/?year=2024&month=5", HTTP_HX_REQUEST="true")

        self.assertEqual(response.context["rows"], [])
        self.assertContains(response, "매출 조회 실패")
        self.assertContains(response, "매출 데이터 조회에 실패했습니다.")

    @patch(f"{CLIENT}.get_driver_revenue")
    def test_invalid_month_rejected(self, get_revenue):
        response = self.client.get("/drivers/1/revenue/?year=2024&month=13")

        self.assertEqual(response.status_code, 400)
        get_revenue.assert_not_called()


class DeliveryPageTests(SimpleTestCase):

    @patch(f"{CLIENT}.get_deliveries")
    @patch(f"{CLIENT}.create_delivery")
    def test_zero_feed_tonnage_never_reaches_backend(self, create_delivery, get_deliveries):
        get_deliveries.return_value = []

        response = self.client.post("/deliveries/new/", {
            "destination": "화성 농장",
            "address": "경기도 화성시 1",
            "price": "350000",
            "feedTonnage": "0",
            "deliveryDate": "2024-05-01",
        })

        create_delivery.assert_not_called()
        self.assertContains(response, "사료(톤)는 0보다 커야 합니다.")
        self.assertTrue(response.context["form_open"])

    @patch(f"{CLIENT}.get_deliveries")
    @patch(f"{CLIENT}.create_delivery")
    def test_non_finite_feed_tonnage_never_reaches_backend(self, create_delivery, get_deliveries):
        get_deliveries.return_value = []

        for feed_tonnage in ("nan", "inf"):
            response = self.client.post("/deliveries/new/", {
                "destination": "화성 농장",
                "address": "경기도 화성시 1",
                "price": "350000",
                "feedTonnage": feed_tonnage,
                "deliveryDate": "2024-05-01",
            })

            self.assertContains(response, "사료(톤)는 숫자여야 합니다.")
        create_delivery.assert_not_called()

    @patch(f"{CLIENT}.get_deliveries")
    def test_action_buttons_follow_status(self, get_deliveries):
        get_deliveries.return_value = [
            delivery(1, status="PENDING"),
            delivery(2, status="ASSIGNED", assigned=driver()),
            delivery(3, status="COMPLETED", assigned=driver()),
        ]

        response = self.client.get("/deliveries/")

        self.assertContains(response, "/deliveries/2/complete/")
        self.assertContains(response, "/deliveries/2/cancel-assignment/")
        self.assertNotContains(response, "/deliveries/1/complete/")
        self.assertNotContains(response, "/deliveries/3/cancel-assignment/")
        self.assertContains(response, "미배정")

    @patch(f"{CLIENT}.get_deliveries")
    @patch(f"{CLIENT}.update_delivery")
    def test_update(self, update_delivery, get_deliveries):
        response = self.client.post("/deliveries/4/edit/", {
            "destination": "평택 농장",
            "address": "경기도 평택시 2",
            "price": "200000",
            "feedTonnage": "8",
            "deliveryDate": "2024-05-02",
            "notes": "",
        })

        self.assertRedirects(response, "/deliveries/", fetch_redirect_response=False)
        delivery_id, payload = update_delivery.call_args.args
        self.assertEqual(delivery_id, 4)
        self.assertEqual(payload["deliveryDate"], "2024-05-02")


class AssignmentPageTests(SimpleTestCase):

    @patch(f"{CLIENT}.recommend_driver")
    @patch(f"{CLIENT}.get_active_drivers")
    @patch(f"{CLIENT}.get_pending_deliveries")
    def test_recommendations_are_concurrent_and_isolated(self, get_pending, get_active, recommend):
        pending = [delivery(11), delivery(12), delivery(13)]
        get_pending.return_value = pending
        get_active.return_value = [driver(1), driver(2)]
        barrier = threading.Barrier(len(pending), timeout=5)

        def recommend_driver(delivery_id):
            # Only passes when all calls are in flight at the same time
            barrier.wait()
            if delivery_id == 12:
                raise backend_error(500)
            return {"delivery": delivery(delivery_id), "recommendedDriver": driver(1), "message": "최적 기사"}

        recommend.side_effect = recommend_driver

        response = self.client.get("/assignments/")

        self.assertEqual(recommend.call_count, 3)
        rows = {row.delivery.id: row for row in response.context["rows"]}
        self.assertEqual(rows[11].recommended_driver.id, 1)
        self.assertIsNone(rows[12].recommended_driver)
        self.assertEqual(rows[13].recommended_driver.id, 1)
        self.assertContains(response, "추천 기사 배정", count=2)
        self.assertContains(response, "사용 가능한 기사가 없습니다.")

    @patch(f"{CLIENT}.recommend_driver")
    @patch(f"{CLIENT}.get_active_drivers")
    @patch(f"{CLIENT}.get_pending_deliveries")
    def test_empty_pending(self, get_pending, get_active, recommend):
        get_pending.return_value = []
        get_active.return_value = []

        response = self.client.get("/assignments/")

        self.assertContains(response, "배정 대기 중인 배송이 없습니다.")
        recommend.assert_not_called()

    @patch(f"{CLIENT}.recommend_driver")
    @patch(f"{CLIENT}.get_active_drivers")
    @patch(f"{CLIENT}.get_pending_deliveries")
    @patch(f"{CLIENT}.assign")
    def test_assign_refetches_pending(self, assign, get_pending, get_active, recommend):
        get_pending.return_value = [delivery(6)]
        get_active.return_value = [driver(3)]
        recommend.return_value = {"recommendedDriver": None, "message": None}

        response = self.client.post("/assignments/5/assign/", {"mode": "manual", "driver": "3"}, follow=True)

        assign.assert_called_once_with(5, 3)
        get_pending.assert_called_once()
        ids = [row.delivery.id for row in response.context["rows"]]
        self.assertNotIn(5, ids)
        self.assertContains(response, "배차가 성공적으로 완료되었습니다.")

    @patch(f"{CLIENT}.recommend_driver")
    @patch(f"{CLIENT}.get_active_drivers")
    @patch(f"{CLIENT}.get_pending_deliveries")
    @patch(f"{CLIENT}.assign")
    def test_recommended_assign_without_driver(self, assign, get_pending, get_active, recommend):
        get_pending.return_value = []
        get_active.return_value = []

        response = self.client.post("/assignments/5/assign/", {"mode": "recommended", "recommended_driver": ""})

        assign.assert_not_called()
        self.assertContains(response, "배차 실패")
        self.assertContains(response, "추천 기사가 없습니다.")


class AssignedDeliveryPageTests(SimpleTestCase):

    @patch(f"{CLIENT}.get_assigned_deliveries")
    @patch(f"{CLIENT}.cancel_assignment")
    def test_cancel_flashes(self, cancel_assignment, get_assigned):
        get_assigned.return_value = []

        response = self.client.post("/assigned-deliveries/2/cancel-assignment/", follow=True)

        cancel_assignment.assert_called_once_with(2)
        self.assertContains(response, "배차가 성공적으로 취소되었습니다.")
        self.assertContains(response, "배차된 배송이 없습니다.")

    @patch(f"{CLIENT}.get_assigned_deliveries")
    @patch(f"{CLIENT}.complete")
    def test_complete_failure(self, complete, get_assigned):
        complete.side_effect = backend_error(400, "진행 중인 배송만 완료할 수 있습니다.")
        get_assigned.return_value = [delivery(2, status="ASSIGNED", assigned=driver())]

        response = self.client.post("/assigned-deliveries/2/complete/")

        self.assertContains(response, "배송 완료 실패")
        self.assertContains(response, "진행 중인 배송만 완료할 수 있습니다.")


class ManualAssignmentPageTests(SimpleTestCase):

    def setUp(self):
        patcher_pending = patch(f"{CLIENT}.get_pending_deliveries", return_value=[delivery(4), delivery(5)])
        patcher_active = patch(f"{CLIENT}.get_active_drivers", return_value=[driver(1), driver(2, name="박영희")])
        self.get_pending = patcher_pending.start()
        self.get_active = patcher_active.start()
        self.addCleanup(patcher_pending.stop)
        self.addCleanup(patcher_active.stop)

    def test_selection_from_query(self):
        response = self.client.get("/manual-assignment/?delivery=5")

        self.assertEqual(response.context["selected_delivery"].id, 5)
        self.assertContains(response, "배차 확정")

    def test_unknown_selection_is_dropped(self):
        response = self.client.get("/manual-assignment/?delivery=99")

        self.assertIsNone(response.context["selected_delivery"])
        self.assertContains(response, "배차할 배송을 선택하세요")

    @patch(f"{CLIENT}.recommend_driver")
    def test_recommend_preselects_driver(self, recommend):
        recommend.return_value = {"recommendedDriver": driver(2, name="박영희"), "message": "가장 가까운 기사"}

        response = self.client.post("/manual-assignment/recommend/", {"delivery": "4"})

        recommend.assert_called_once_with(4)
        self.assertEqual(response.context["draft"]["driver"], "2")
        self.assertContains(response, "추천 기사: 박영희 (가장 가까운 기사)")

    @patch(f"{CLIENT}.recommend_driver")
    def test_recommend_without_driver(self, recommend):
        recommend.return_value = {"recommendedDriver": None, "message": None}

        response = self.client.post("/manual-assignment/recommend/", {"delivery": "4"})

        self.assertContains(response, "추천할 수 있는 기사가 없습니다.")

    @patch(f"{CLIENT}.recommend_driver")
    def test_recommend_failure(self, recommend):
        recommend.side_effect = backend_error(500)

        response = self.client.post("/manual-assignment/recommend/", {"delivery": "4"})

        self.assertContains(response, "추천 실패")
        self.assertContains(response, "추천 기사 조회 중 오류가 발생했습니다.")

    @patch(f"{CLIENT}.assign")
    def test_assign_requires_driver(self, assign):
        response = self.client.post("/manual-assignment/assign/", {"delivery": "4", "driver": ""})

        assign.assert_not_called()
        self.assertContains(response, "배차할 배송과 기사를 선택하세요.")
        self.assertEqual(response.context["selected_delivery"].id, 4)

    @patch(f"{CLIENT}.assign")
    def test_assign_clears_selection(self, assign):
        response = self.client.post("/manual-assignment/assign/", {"delivery": "4", "driver": "2"}, follow=True)

        assign.assert_called_once_with(4, 2)
        self.assertIsNone(response.context["selected_delivery"])
        self.assertContains(response, "배차가 성공적으로 완료되었습니다.")


class HistoryPageTests(SimpleTestCase):

    @patch(f"{CLIENT}.get_drivers")
    @patch(f"{CLIENT}.create_historical_delivery")
    def test_submit(self, create_historical, get_drivers):
        get_drivers.return_value = [driver(3)]

        response = self.client.post("/history/", {
            "destination": "화성 농장",
            "deliveryDate": "2023-11-02",
            "address": "경기도 화성시 1",
            "feedTonnage": "10",
            "price": "300000",
            "driverId": "3",
            "status": "CANCELLED",
            "notes": "",
        }, follow=True)

        payload = create_historical.call_args.args[0]
        self.assertEqual(payload["driver"], {"id": 3})
        self.assertEqual(payload["status"], "CANCELLED")
        self.assertContains(response, "과거 배송 데이터가 성공적으로 등록되었습니다.")
        self.assertEqual(response.context["draft"], {})

    @patch(f"{CLIENT}.get_drivers")
    @patch(f"{CLIENT}.create_historical_delivery")
    def test_missing_driver(self, create_historical, get_drivers):
        get_drivers.return_value = [driver(3)]

        response = self.client.post("/history/", {
            "destination": "화성 농장",
            "deliveryDate": "2023-11-02",
            "address": "경기도 화성시 1",
            "feedTonnage": "10",
            "price": "300000",
            "driverId": "",
        })

        create_historical.assert_not_called()
        self.assertContains(response, "기사를 선택해주세요.")
        self.assertEqual(response.context["draft"]["destination"], "화성 농장")

    @patch(f"{CLIENT}.get_drivers")
    @patch(f"{CLIENT}.create_historical_delivery")
    def test_backend_failure(self, create_historical, get_drivers):
        create_historical.side_effect = backend_error(500)
        get_drivers.return_value = [driver(3)]

        response = self.client.post("/history/", {
            "destination": "화성 농장",
            "deliveryDate": "2023-11-02",
            "address": "경기도 화성시 1",
            "feedTonnage": "10",
            "price": "300000",
            "driverId": "3",
        })

        self.assertContains(response, "등록 실패")
        self.assertContains(response, "등록 중 오류가 발생했습니다.")


class VacationPageTests(SimpleTestCase):

    def setUp(self):
        patcher_vacations = patch(f"{CLIENT}.get_vacations", return_value=[vacation(7), vacation(8, "APPROVED")])
        patcher_drivers = patch(f"{CLIENT}.get_drivers", return_value=[driver(1)])
        self.get_vacations = patcher_vacations.start()
        self.get_drivers = patcher_drivers.start()
        self.addCleanup(patcher_vacations.stop)
        self.addCleanup(patcher_drivers.stop)

    def test_review_buttons_only_for_pending(self):
        response = self.client.get("/vacations/")

        self.assertContains(response, "/vacations/7/approve/")
        self.assertNotContains(response, "/vacations/8/approve/")

    def test_unknown_driver_name(self):
        self.get_vacations.return_value = [{**vacation(9), "driver": None}]

        response = self.client.get("/vacations/")

        self.assertContains(response, "알 수 없음")

    @patch(f"{CLIENT}.create_vacation")
    def test_create(self, create_vacation):
        response = self.client.post("/vacations/new/", {
            "driverId": "1",
            "startDate": "2024-06-01",
            "endDate": "2024-06-03",
            "reason": "",
        })

        self.assertRedirects(response, "/vacations/", fetch_redirect_response=False)
        create_vacation.assert_called_once_with({
            "driver": {"id": 1},
            "startDate": "2024-06-01",
            "endDate": "2024-06-03",
            "reason": "",
            "status": "PENDING",
        })

    @patch(f"{CLIENT}.create_vacation")
    def test_create_requires_driver(self, create_vacation):
        response = self.client.post("/vacations/new/", {"startDate": "2024-06-01", "endDate": "2024-06-03"})

        create_vacation.assert_not_called()
        self.assertContains(response, "기사를 선택해주세요.")

    @patch(f"{CLIENT}.approve_vacation")
    def test_approve_failure(self, approve):
        approve.side_effect = backend_error(400, "이미 처리된 휴가입니다.")

        response = self.client.post("/vacations/7/approve/")

        self.assertContains(response, "휴가 승인 실패")
        self.assertContains(response, "이미 처리된 휴가입니다.")

    @patch(f"{CLIENT}.reject_vacation")
    def test_reject(self, reject):
        response = self.client.post("/vacations/7/reject/")

        self.assertRedirects(response, "/vacations/", fetch_redirect_response=False)
        reject.assert_called_once_with(7)

    @patch(f"{CLIENT}.delete_vacation")
    def test_delete_with_confirmation(self, delete_vacation):
        self.client.post("/vacations/7/delete/", {"confirm": "no"})
        delete_vacation.assert_not_called()

        self.client.post("/vacations/7/delete/", {"confirm": "yes"})
        delete_vacation.assert_called_once_with(7)


class UnexpectedErrorTests(SimpleTestCase):

    @patch(f"{CLIENT}.get_drivers")
    def test_bug_renders_error_page(self, get_drivers):
        get_drivers.side_effect = RuntimeError("bug")

        response = self.client.get("/drivers/")

        self.assertEqual(response.status_code, 500)
        self.assertContains(response, "예기치 않은 오류가 발생했습니다.", status_code=500)


class ConsoleTagTests(SimpleTestCase):

    def test_won(self):
        self.assertEqual(won(350000), "350,000원")
        self.assertEqual(won(None), "-")

    def test_ko_date(self):
        self.assertEqual(ko_date("2024-05-01"), "2024. 5. 1.")
        self.assertEqual(ko_date("2024-05-01T10:00:00"), "2024. 5. 1.")
        self.assertEqual(ko_date(date(2023, 12, 25)), "2023. 12. 25.")
        self.assertEqual(ko_date(None), "-")

    def test_tons(self):
        self.assertEqual(tons(12.5), "12.5톤")
        self.assertEqual(tons(8.0), "8톤")
