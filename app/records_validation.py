"""Record validation helpers for drafts and API payloads."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Any

from app.errors import ValidationError
from module_config import FieldSpec, ModuleConfig


SYSTEM_COLUMNS = ("id", "project_id", "created_at", "updated_at")


def is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str) and not value.strip():
        return True
    return False


def _coerce_number(value: Any) -> Any:
    if isinstance(value, bool):
        raise ValueError("boolean is not a number")
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, Decimal):
        if not value.is_finite():
            raise ValueError("not a finite number")
        return int(value) if value == value.to_integral_value() else float(value)
    if isinstance(value, str):
        text = value.strip().replace(",", "")
        if text.startswith("$"):
            text = text[1:]
        try:
            return int(text)
        except ValueError:
            return float(text)
    raise ValueError("not a number")


def _coerce_boolean(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ("true", "on", "yes", "1"):
        return True
    if isinstance(value, str) and value.strip().lower() in ("false", "off", "no", "0"):
        return False
    raise ValueError("not a boolean")


def _check_date(value: Any) -> str:
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if not isinstance(value, str):
        raise TypeError("not a date string")
    text = value.strip()
    if len(text) > 10 and text[10] in ("T", " "):
        datetime.fromisoformat(text.replace("Z", "+00:00"))
        return text
    date.fromisoformat(text)
    return text


def _check_value(field_spec: FieldSpec, value: Any, add_error) -> Any:
    ftype = field_spec.type
    if ftype in ("number", "currency"):
        try:
            return _coerce_number(value)
        except ValueError:
            add_error("TYPE_MISMATCH", f"{field_spec.label} must be a number", field_spec.name)
    elif ftype == "boolean":
        try:
            return _coerce_boolean(value)
        except ValueError:
            add_error("TYPE_MISMATCH", f"{field_spec.label} must be true or false", field_spec.name)
    elif ftype == "date":
        try:
            return _check_date(value)
        except TypeError:
            add_error("TYPE_MISMATCH", f"{field_spec.label} must be a date string", field_spec.name)
        except ValueError:
            add_error("INVALID_DATE", f"{field_spec.label} must be YYYY-MM-DD", field_spec.name)
    elif ftype == "select":
        allowed = field_spec.option_values()
        if allowed and value not in allowed:
            add_error("INVALID_OPTION", f"{field_spec.label} must be one of {allowed}", field_spec.name, {"allowed": allowed})
        return value
    elif ftype in ("text", "textarea"):
        if not isinstance(value, str):
            add_error("TYPE_MISMATCH", f"{field_spec.label} must be a string", field_spec.name)
        return value
    elif ftype == "relation":
        if isinstance(value, bool) or not isinstance(value, (str, int)):
            add_error("TYPE_MISMATCH", f"{field_spec.label} must reference a record id", field_spec.name)
        return value
    return value


def validate_draft(config: ModuleConfig, data: dict, for_create: bool, allow_system: bool = True) -> tuple[list[dict], dict]:
    """Check ``data`` against the field schema of ``config``.

    Returns ``(issues, clean)``. ``clean`` carries numeric strings converted to
    numbers and blank optional values left as given; callers decide whether to
    drop them. On update only the fields present in ``data`` are checked.
    """
    errors: list[dict] = []
    if not isinstance(data, dict):
        return [
            {
                "code": "INVALID_PAYLOAD",
                "message": "Record data must be an object",
                "path": None,
                "detail": None,
            }
        ], {}

    def _add_error(code: str, message: str, path: str | None = None, detail: dict | None = None):
        errors.append({"code": code, "message": message, "path": path, "detail": detail})

    field_by_name = {f.name: f for f in config.fields}
    system = set(SYSTEM_COLUMNS) if allow_system else set()
    if config.created_by_column and allow_system:
        system.add(config.created_by_column)

    for key in data.keys():
        if key not in field_by_name and key not in system:
            _add_error("UNKNOWN_FIELD", f"Unknown field: {key}", path=key)

    clean = dict(data)
    for field_spec in config.fields:
        present = field_spec.name in data
        value = data.get(field_spec.name)
        if field_spec.required and (for_create or present) and is_blank(value):
            _add_error("REQUIRED_FIELD", f"{field_spec.label} is required", path=field_spec.name)
            continue
        if not present or is_blank(value):
            continue
        clean[field_spec.name] = _check_value(field_spec, value, _add_error)

    return errors, clean


def ensure_valid(config: ModuleConfig, data: dict, for_create: bool, allow_system: bool = True) -> dict:
    issues, clean = validate_draft(config, data, for_create, allow_system=allow_system)
    if issues:
        raise ValidationError("Record failed validation", path=config.key, issues=issues)
    return clean


def coerce_filters(config: ModuleConfig, filters: dict) -> dict:
    """Convert query-string filter values to the stored type of each field."""
    errors: list[dict] = []

    def _add_error(code: str, message: str, path: str | None = None, detail: dict | None = None):
        errors.append({"code": code, "message": message, "path": path, "detail": detail})

    field_by_name = {f.name: f for f in config.fields}
    out = {}
    for name, value in filters.items():
        field_spec = field_by_name.get(name)
        if field_spec is None or is_blank(value):
            out[name] = value
            continue
        out[name] = _check_value(field_spec, value, _add_error)
    if errors:
        raise ValidationError("Invalid filter", path=config.key, issues=errors)
    return out
