from __future__ import annotations

from typing import Any

from django.conf import settings
from django.http import HttpRequest
from django.urls import reverse

NAVIGATION = (
    ("대시보드", "console:dashboard", "📊"),
    ("기사 관리", "console:driver_list", "👨‍💼"),
    ("배송 관리", "console:delivery_list", "📦"),
    ("배차 관리", "console:assignment_list", "🚛"),
    ("배차된 배송", "console:assigned_delivery_list", "🚚"),
    ("직접 배차", "console:manual_assignment", "🎯"),
    ("과거 데이터", "console:history", "📋"),
    ("휴가 관리", "console:vacation_list", "🏖️"),
)


"""
GOAL: Provide the sidebar entries and layout strings to every template.

PARAMETERS:
  request: HttpRequest - Current request - Used to mark the active entry

RETURNS:
  dict[str, Any] - nav_items, console_title, htmx_script_url

GUARANTEES:
  - Exactly one entry is active on console pages; the dashboard only matches "/"
"""
def navigation(request: HttpRequest) -> dict[str, Any]:
    items = []
    for label, url_name, icon in NAVIGATION:
        url = reverse(url_name)
        active = request.path == url if url == "/" else request.path.startswith(url)
        items.append({"label": label, "url": url, "icon": icon, "active": active})

    return {
        "nav_items": items,
        "console_title": settings.CONSOLE_TITLE,
        "htmx_script_url": settings.HTMX_SCRIPT_URL,
    }
