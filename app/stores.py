"""In-memory tabular store for dev servers and tests."""

from __future__ import annotations

import copy
import threading
import time
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List

from app.errors import SchemaMismatchError, StoreError, TransportError


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _sort_key(column: str):
    def _key(row: dict):
        value = row.get(column)
        return (value is None, "" if value is None else value)

    return _key


class MemoryTableStore:
    """Tables of rows keyed by ``id``; rows keep insertion order.

    ``strict`` makes unknown tables a schema mismatch instead of creating them
    on first use. Tables declared with columns reject unknown columns.
    """

    key_column = "id"

    def __init__(self, tables: Dict[str, Iterable[str] | None] | None = None, strict: bool = False) -> None:
        self._tables: Dict[str, Dict[str, dict]] = {}
        self._columns: Dict[str, set | None] = {}
        self._buckets: Dict[str, dict] = {}
        self._failures: Dict[str, List[Exception]] = {}
        self._lock = threading.RLock()
        self.strict = strict
        self.offline = False
        self.delay_s = 0.0
        self.calls: List[tuple] = []
        for name, columns in (tables or {}).items():
            self.create_table(name, columns)

    def create_table(self, table: str, columns: Iterable[str] | None = None) -> None:
        with self._lock:
            self._tables.setdefault(table, {})
            if columns is None:
                self._columns[table] = None
            else:
                self._columns[table] = {self.key_column, "created_at", "updated_at", *columns}

    def drop_table(self, table: str) -> None:
        with self._lock:
            self._tables.pop(table, None)
            self._columns.pop(table, None)

    def seed(self, table: str, rows: Iterable[dict]) -> list[dict]:
        return [self.insert(table, row) for row in rows]

    def inject_failure(self, op: str, exc: Exception) -> None:
        self._failures.setdefault(op, []).append(exc)

    def calls_for(self, op: str) -> list[tuple]:
        return [call for call in self.calls if call[0] == op]

    def _enter(self, op: str, table: str | None) -> None:
        self.calls.append((op, table))
        if self.delay_s:
            time.sleep(self.delay_s)
        if self.offline:
            raise TransportError("store unreachable", detail={"op": op})
        pending = self._failures.get(op)
        if pending:
            raise pending.pop(0)

    def _table(self, table: str, columns: Iterable[str] = ()) -> Dict[str, dict]:
        # caller holds self._lock
        if table not in self._tables:
            if self.strict:
                raise SchemaMismatchError(f'relation "{table}" does not exist', table=table)
            self.create_table(table)
        known = self._columns.get(table)
        if known is not None:
            for column in columns:
                if column not in known:
                    raise SchemaMismatchError(f'column "{column}" of relation "{table}" does not exist', table=table, column=column)
        return self._tables[table]

    def select(
        self,
        table: str,
        filters: Dict[str, Any] | None = None,
        order_by: str | None = None,
        ascending: bool = True,
        limit: int | None = None,
    ) -> list[dict]:
        filters = filters or {}
        self._enter("select", table)
        with self._lock:
            rows = self._table(table, list(filters.keys()) + ([order_by] if order_by else []))
            items = [copy.deepcopy(r) for r in rows.values() if all(r.get(k) == v for k, v in filters.items())]
        if order_by:
            items = sorted(items, key=_sort_key(order_by), reverse=not ascending)
        if limit is not None:
            items = items[:limit]
        return items

    def get(self, table: str, key: str) -> dict | None:
        self._enter("get", table)
        with self._lock:
            row = self._table(table).get(str(key))
            return copy.deepcopy(row) if row else None

    def insert(self, table: str, values: dict) -> dict:
        self._enter("insert", table)
        record = copy.deepcopy(values)
        with self._lock:
            rows = self._table(table, values.keys())
            record_id = str(record.get(self.key_column) or uuid.uuid4())
            if record_id in rows:
                raise StoreError("duplicate key value violates unique constraint", code="STORE_CONFLICT", detail={"id": record_id})
            record[self.key_column] = record_id
            record.setdefault("created_at", _now())
            record.setdefault("updated_at", record["created_at"])
            rows[record_id] = record
            return copy.deepcopy(record)

    def update(self, table: str, key: str, values: dict) -> dict | None:
        self._enter("update", table)
        with self._lock:
            record = self._table(table, values.keys()).get(str(key))
            if record is None:
                return None
            record.update(copy.deepcopy(values))
            record[self.key_column] = str(key)
            return copy.deepcopy(record)

    def delete(self, table: str, key: str) -> bool:
        self._enter("delete", table)
        with self._lock:
            return self._table(table).pop(str(key), None) is not None

    def count(self, table: str, filters: Dict[str, Any] | None = None) -> int:
        filters = filters or {}
        self._enter("count", table)
        with self._lock:
            rows = self._table(table, filters.keys())
            return sum(1 for r in rows.values() if all(r.get(k) == v for k, v in filters.items()))

    def ping(self) -> None:
        self._enter("ping", None)

    def list_buckets(self) -> list[dict]:
        self._enter("list_buckets", None)
        with self._lock:
            return [copy.deepcopy(b) for b in self._buckets.values()]

    def create_bucket(self, name: str, public: bool = False) -> dict:
        self._enter("create_bucket", None)
        with self._lock:
            if name in self._buckets:
                raise StoreError(f"bucket already exists: {name}", code="BUCKET_EXISTS")
            bucket = {"id": name, "name": name, "public": bool(public), "created_at": _now()}
            self._buckets[name] = bucket
            return copy.deepcopy(bucket)
