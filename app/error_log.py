"""Best-effort sink for client-side error reports."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from app.errors import ValidationError


logger = logging.getLogger("sitecrud.errors")

ERROR_TABLE = "error_log"
RECENT_LIMIT = 100

_LIMITS = {
    "error_message": 2000,
    "stack_trace": 5000,
    "component_stack": 5000,
    "page_url": 500,
    "user_agent": 500,
}


def _clip(value, limit: int) -> str:
    return str(value or "")[:limit]


def build_entry(payload: dict) -> dict:
    if not isinstance(payload, dict) or not payload.get("error_message"):
        raise ValidationError(
            "error_message is required",
            path="error_message",
            issues=[{"code": "REQUIRED_FIELD", "message": "error_message is required", "path": "error_message", "detail": None}],
        )
    entry = {key: _clip(payload.get(key), limit) for key, limit in _LIMITS.items()}
    entry["fixed"] = False
    entry["timestamp"] = datetime.now(timezone.utc).isoformat()
    return entry


def log_client_error(store, payload: dict) -> dict:
    entry = build_entry(payload)
    try:
        store.insert(ERROR_TABLE, entry)
    except Exception as exc:
        logger.warning("client_error_not_logged error=%s", exc)
        return {"success": True, "logged": False}
    logger.info("client_error_logged url=%s", entry["page_url"])
    return {"success": True}


def recent_errors(store, limit: int = RECENT_LIMIT) -> list[dict]:
    try:
        return store.select(ERROR_TABLE, None, "timestamp", False, limit)
    except Exception as exc:
        logger.info("client_error_list_unavailable error=%s", exc)
        return []
