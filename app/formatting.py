"""Display formatting for list cells."""

from __future__ import annotations

from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from module_config import FieldSpec


EMPTY = "—"

_STATUS_CLASSES = (
    (
        "bg-green-100 text-green-800",
        {
            "approved", "closed", "complete", "completed", "passed", "pass", "executed", "paid",
            "cleared", "received", "resolved", "installed", "unconditional",
        },
    ),
    (
        "bg-amber-100 text-amber-800",
        {
            "open", "in progress", "active", "pending", "submitted", "scheduled", "mobilizing",
            "ordered", "in transit", "conditional",
        },
    ),
    ("bg-gray-100 text-gray-600", {"draft", "not started", "inactive", "idle", "not required"}),
    (
        "bg-red-100 text-red-800",
        {"rejected", "overdue", "failed", "fail", "void", "cancelled", "critical", "expired", "demobilized"},
    ),
    (
        "bg-orange-100 text-orange-800",
        {"reported", "investigating", "corrective action", "requires action", "on hold", "maintenance", "due"},
    ),
)
_STATUS_EMPTY = "bg-gray-100 text-gray-700"
_STATUS_OTHER = "bg-blue-100 text-blue-800"


def format_currency(amount: Any) -> str:
    if amount is None or amount == "":
        return EMPTY
    try:
        value = Decimal(str(amount)).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    except InvalidOperation:
        return str(amount)
    sign = "-" if value < 0 else ""
    return f"{sign}${abs(int(value)):,}"


def _parse_date(value: Any) -> date | None:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None
    text = value.strip()
    try:
        if len(text) > 10:
            return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
        return date.fromisoformat(text)
    except ValueError:
        return None


def format_date(value: Any) -> str:
    if not value:
        return EMPTY
    parsed = _parse_date(value)
    if parsed is None:
        return str(value)
    return f"{parsed.strftime('%b')} {parsed.day}, {parsed.year}"


def status_color(status: Any) -> str:
    if not status:
        return _STATUS_EMPTY
    normalized = str(status).lower().replace("_", " ")
    for css, values in _STATUS_CLASSES:
        if normalized in values:
            return css
    return _STATUS_OTHER


def format_cell(field_spec: FieldSpec, value: Any) -> tuple[str, str | None]:
    """Return ``(text, css_class)`` for one list cell."""
    if field_spec.display == "status":
        if value is None or value == "":
            return EMPTY, status_color(value)
        label = field_spec.option_label(value) or str(value).replace("_", " ")
        return label, status_color(value)
    if value is None or value == "":
        return EMPTY, None
    if field_spec.display == "badge":
        return str(value).replace("_", " "), "badge"
    if field_spec.type == "date":
        return format_date(value), None
    if field_spec.type == "currency":
        return format_currency(value), None
    if field_spec.type == "boolean" or isinstance(value, bool):
        return ("Yes" if value else "No"), None
    if field_spec.type == "select":
        return field_spec.option_label(value) or str(value), None
    return str(value), None
