"""Current-user lookup used to stamp attribution columns on insert."""

from __future__ import annotations

from contextvars import ContextVar
from typing import Callable


DEFAULT_USER = "System User"

_CURRENT_USER: ContextVar[str | None] = ContextVar("sitecrud_current_user", default=None)

UserProvider = Callable[[], str]


def get_current_user() -> str:
    name = _CURRENT_USER.get()
    if isinstance(name, str) and name.strip():
        return name.strip()
    return DEFAULT_USER


def set_current_user(name: str | None):
    return _CURRENT_USER.set(name)


def reset_current_user(token) -> None:
    _CURRENT_USER.reset(token)


def static_user(name: str) -> UserProvider:
    def _provider() -> str:
        return name or DEFAULT_USER

    return _provider


def display_name_from_claims(claims: dict | None) -> str | None:
    if not isinstance(claims, dict):
        return None
    meta = claims.get("user_metadata")
    if isinstance(meta, dict):
        for key in ("full_name", "name"):
            value = meta.get(key)
            if isinstance(value, str) and value.strip():
                return value.strip()
    for key in ("email", "sub"):
        value = claims.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None
