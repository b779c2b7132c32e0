"""Scoped query/mutation adapter between module configurations and a table store."""

from __future__ import annotations

import asyncio
import logging
import os
import uuid
from datetime import datetime, timezone
from functools import partial
from typing import Any, Callable, Dict

import anyio

from app.errors import NotFound, SchemaMismatchError, ScopeRequiredError, StoreError, TransportError
from app.user_context import UserProvider, get_current_user
from module_config import ModuleConfig


logger = logging.getLogger("sitecrud.adapter")

DEFAULT_TIMEOUT_S = float(os.getenv("SITECRUD_STORE_TIMEOUT_S", "15"))

_IMMUTABLE_COLUMNS = ("id", "created_at")


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _present(value: Any) -> bool:
    return value is not None and value != ""


def require_scope(config: ModuleConfig, scope: str | None) -> str | None:
    if not config.project_scoped:
        return None
    if not isinstance(scope, str) or not scope.strip():
        raise ScopeRequiredError(f"{config.plural} are project scoped; a project id is required", path=config.key)
    return scope


class CrudAdapter:
    """Translate configuration-level CRUD into store calls.

    Every store call runs in a worker thread and is bounded by ``timeout_s``;
    a timeout surfaces as ``TransportError``. Nothing is retried here.
    """

    def __init__(self, store, user_provider: UserProvider | None = None, timeout_s: float | None = None) -> None:
        self.store = store
        self.user_provider = user_provider or get_current_user
        self.timeout_s = DEFAULT_TIMEOUT_S if timeout_s is None else float(timeout_s)

    async def _call(self, op: str, config: ModuleConfig, fn: Callable, *args, **kwargs):
        try:
            return await asyncio.wait_for(
                anyio.to_thread.run_sync(partial(fn, *args, **kwargs), abandon_on_cancel=True),
                timeout=self.timeout_s,
            )
        except asyncio.TimeoutError as exc:
            logger.warning("adapter_timeout op=%s module=%s table=%s timeout_s=%s", op, config.key, config.table, self.timeout_s)
            raise TransportError(
                f"{config.plural} request timed out",
                code="STORE_TIMEOUT",
                path=config.key,
                detail={"op": op, "timeout_s": self.timeout_s},
            ) from exc
        except SchemaMismatchError as exc:
            logger.error(
                "adapter_schema_mismatch op=%s module=%s table=%s column=%s message=%s",
                op,
                config.key,
                exc.table or config.table,
                exc.column,
                exc.message,
            )
            raise
        except TransportError as exc:
            logger.warning("adapter_transport_error op=%s module=%s error=%s", op, config.key, exc.message)
            raise
        except StoreError as exc:
            logger.warning("adapter_store_error op=%s module=%s code=%s error=%s", op, config.key, exc.code, exc.message)
            raise

    def _filters(self, config: ModuleConfig, scope: str | None, filters: Dict[str, Any] | None) -> dict:
        merged = {k: v for k, v in (filters or {}).items() if _present(v)}
        scope = require_scope(config, scope)
        if scope is not None:
            merged["project_id"] = scope
        return merged

    async def list(
        self,
        config: ModuleConfig,
        scope: str | None = None,
        filters: Dict[str, Any] | None = None,
        limit: int | None = None,
    ) -> list[dict]:
        where = self._filters(config, scope, filters)
        order_by, ascending = config.default_sort or (None, True)
        return await self._call("list", config, self.store.select, config.table, where, order_by, ascending, limit)

    async def count(self, config: ModuleConfig, scope: str | None = None, filters: Dict[str, Any] | None = None) -> int:
        where = self._filters(config, scope, filters)
        return await self._call("count", config, self.store.count, config.table, where)

    async def get(self, config: ModuleConfig, record_id: str) -> dict:
        row = await self._call("get", config, self.store.get, config.table, str(record_id))
        if row is None:
            raise NotFound(f"{config.singular} not found", path=config.key, detail={"id": str(record_id)})
        return row

    async def create(self, config: ModuleConfig, scope: str | None = None, record: dict | None = None) -> dict:
        scope = require_scope(config, scope)
        values = {k: v for k, v in (record or {}).items() if _present(v)}
        if not _present(values.get("id")):
            values["id"] = str(uuid.uuid4())
        if scope is not None:
            values["project_id"] = scope
        column = config.created_by_column
        if column and not _present(values.get(column)):
            values[column] = self.user_provider()
        row = await self._call("create", config, self.store.insert, config.table, values)
        logger.info("record_created module=%s id=%s scope=%s", config.key, row.get("id"), scope)
        return row

    async def update(self, config: ModuleConfig, record_id: str, record: dict) -> dict:
        values = {k: (None if v == "" else v) for k, v in (record or {}).items() if k not in _IMMUTABLE_COLUMNS}
        values["updated_at"] = _now()
        row = await self._call("update", config, self.store.update, config.table, str(record_id), values)
        if row is None:
            raise NotFound(f"{config.singular} not found", path=config.key, detail={"id": str(record_id)})
        return row

    async def delete(self, config: ModuleConfig, record_id: str) -> None:
        removed = await self._call("delete", config, self.store.delete, config.table, str(record_id))
        if not removed:
            raise NotFound(f"{config.singular} not found", path=config.key, detail={"id": str(record_id)})
        logger.info("record_deleted module=%s id=%s", config.key, record_id)
