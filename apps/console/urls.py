from __future__ import annotations

from django.urls import path

from apps.console import views

app_name = "console"

urlpatterns = [
    path("", views.dashboard, name="dashboard"),
    # Drivers
    path("drivers/", views.driver_list, name="driver_list"),
    path("drivers/new/", views.driver_create, name="driver_create"),
    path("drivers/<int:driver_id>/edit/", views.driver_edit, name="driver_edit"),
    path("drivers/<int:driver_id>/delete/", views.driver_delete, name="driver_delete"),
    path("drivers/<int:driver_id>/revenue/", views.driver_revenue, name="driver_revenue"),
    # Deliveries
    path("deliveries/", views.delivery_list, name="delivery_list"),
    path("deliveries/new/", views.delivery_create, name="delivery_create"),
    path("deliveries/<int:delivery_id>/edit/", views.delivery_edit, name="delivery_edit"),
    path("deliveries/<int:delivery_id>/delete/", views.delivery_delete, name="delivery_delete"),
    path("deliveries/<int:delivery_id>/complete/", views.delivery_complete, name="delivery_complete"),
    path(
        "deliveries/<int:delivery_id>/cancel-assignment/",
        views.delivery_cancel_assignment,
        name="delivery_cancel_assignment",
    ),
    # Assignments
    path("assignments/", views.assignment_list, name="assignment_list"),
    path("assignments/<int:delivery_id>/assign/", views.assignment_assign, name="assignment_assign"),
    path("assigned-deliveries/", views.assigned_delivery_list, name="assigned_delivery_list"),
    path(
        "assigned-deliveries/<int:delivery_id>/complete/",
        views.assigned_delivery_complete,
        name="assigned_delivery_complete",
    ),
    path(
        "assigned-deliveries/<int:delivery_id>/cancel-assignment/",
        views.assigned_delivery_cancel,
        name="assigned_delivery_cancel",
    ),
    path("manual-assignment/", views.manual_assignment, name="manual_assignment"),
    path("manual-assignment/recommend/", views.manual_recommend, name="manual_recommend"),
    path("manual-assignment/assign/", views.manual_assign, name="manual_assign"),
    # History
    path("history/", views.history, name="history"),
    # Vacations
    path("vacations/", views.vacation_list, name="vacation_list"),
    path("vacations/new/", views.vacation_create, name="vacation_create"),
    path("vacations/<int:vacation_id>/approve/", views.vacation_approve, name="vacation_approve"),
    path("vacations/<int:vacation_id>/reject/", views.vacation_reject, name="vacation_reject"),
    path("vacations/<int:vacation_id>/delete/", views.vacation_delete, name="vacation_delete"),
]
