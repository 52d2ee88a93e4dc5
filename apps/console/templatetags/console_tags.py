from __future__ import annotations

from datetime import date, datetime
from typing import Any

from django import template
from django.utils.html import format_html

register = template.Library()


@register.filter
def won(value: Any) -> str:
    """
    12000 -> "12,000원"; missing values render as "-".
    """
    if value is None or value == "":
        return "-"
    try:
        amount = float(value)
    except (TypeError, ValueError):
        return str(value)
    return f"{amount:,.0f}원"


@register.filter
def ko_date(value: Any) -> str:
    """
    ISO date or datetime -> "2024. 5. 1."
    """
    if not value:
        return "-"
    if isinstance(value, (date, datetime)):
        parsed = value
    else:
        try:
            parsed = date.fromisoformat(str(value)[:10])
        except ValueError:
            return str(value)
    return f"{parsed.year}. {parsed.month}. {parsed.day}."


@register.filter
def tons(value: Any) -> str:
    if value is None or value == "":
        return "-"
    try:
        return f"{float(value):g}톤"
    except (TypeError, ValueError):
        return str(value)


@register.simple_tag
def status_badge(status: Any) -> str:
    label = getattr(status, "label", status)
    colour = getattr(status, "badge", "gray")
    return format_html('<span class="badge badge-{}">{}</span>', colour, label)


@register.filter
def as_str(value: Any) -> str:
    """Stringify ids so they compare with posted form values in templates."""
    return "" if value is None else str(value)
