"""Tabular store backed by the Supabase REST (PostgREST) and Storage APIs."""

from __future__ import annotations

import logging
import os
from typing import Any, Dict

import httpx

from app.errors import SchemaMismatchError, StoreError, TransportError


logger = logging.getLogger("sitecrud.store.rest")

_MISSING_TABLE_CODES = {"42P01", "PGRST205"}
_MISSING_COLUMN_CODES = {"42703", "PGRST204"}
_CONFLICT_CODES = {"23505", "23503"}


def supabase_url() -> str:
    return (os.getenv("SUPABASE_URL") or "").strip().rstrip("/")


def supabase_key() -> str:
    return (os.getenv("SUPABASE_SERVICE_ROLE_KEY") or os.getenv("SUPABASE_KEY") or "").strip()


def supabase_enabled() -> bool:
    return bool(supabase_url() and supabase_key())


def _literal(value: Any) -> str:
    if value is None:
        return "is.null"
    if isinstance(value, bool):
        return "eq." + ("true" if value else "false")
    return f"eq.{value}"


def _error_body(res: httpx.Response) -> dict:
    try:
        body = res.json()
    except ValueError:
        return {"message": res.text}
    return body if isinstance(body, dict) else {"message": str(body)}


class SupabaseRestStore:
    key_column = "id"

    def __init__(
        self,
        url: str | None = None,
        key: str | None = None,
        timeout_s: float = 15.0,
        health_table: str | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        url = (url or supabase_url()).rstrip("/")
        key = key or supabase_key()
        if not url or not key:
            raise RuntimeError("SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY are required for the REST store")
        self._health_table = health_table or os.getenv("SITECRUD_HEALTH_TABLE", "projects")
        self._client = httpx.Client(
            base_url=url,
            headers={"apikey": key, "Authorization": f"Bearer {key}"},
            timeout=timeout_s,
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def _request(self, method: str, path: str, table: str | None = None, **kwargs) -> httpx.Response:
        try:
            res = self._client.request(method, path, **kwargs)
        except httpx.TimeoutException as exc:
            logger.warning("store_timeout method=%s path=%s", method, path)
            raise TransportError("store request timed out", code="STORE_TIMEOUT", detail={"table": table}) from exc
        except httpx.TransportError as exc:
            logger.warning("store_unreachable method=%s path=%s error=%s", method, path, exc)
            raise TransportError(str(exc) or "store unreachable", detail={"table": table}) from exc
        if res.status_code >= 400:
            self._raise_for(res, table)
        return res

    def _raise_for(self, res: httpx.Response, table: str | None) -> None:
        body = _error_body(res)
        code = str(body.get("code") or "")
        message = str(body.get("message") or f"store error {res.status_code}")
        detail = {"status": res.status_code, "code": code or None, "table": table}
        if code in _MISSING_TABLE_CODES:
            logger.error("store_schema_mismatch table=%s code=%s message=%s", table, code, message)
            raise SchemaMismatchError(message, table=table, detail=detail)
        if code in _MISSING_COLUMN_CODES:
            logger.error("store_schema_mismatch table=%s code=%s message=%s", table, code, message)
            raise SchemaMismatchError(message, table=table, detail=detail)
        if res.status_code >= 500:
            raise TransportError(message, detail=detail)
        if code in _CONFLICT_CODES or res.status_code == 409:
            raise StoreError(message, code="STORE_CONFLICT", detail=detail)
        raise StoreError(message, detail=detail)

    def select(
        self,
        table: str,
        filters: Dict[str, Any] | None = None,
        order_by: str | None = None,
        ascending: bool = True,
        limit: int | None = None,
    ) -> list[dict]:
        params: list[tuple[str, str]] = [("select", "*")]
        for column, value in (filters or {}).items():
            params.append((column, _literal(value)))
        if order_by:
            params.append(("order", f"{order_by}.{'asc' if ascending else 'desc'}"))
        if limit is not None:
            params.append(("limit", str(int(limit))))
        res = self._request("GET", f"/rest/v1/{table}", table, params=params)
        data = res.json()
        return data if isinstance(data, list) else []

    def get(self, table: str, key: str) -> dict | None:
        rows = self.select(table, {self.key_column: key}, limit=1)
        return rows[0] if rows else None

    def insert(self, table: str, values: dict) -> dict:
        res = self._request(
            "POST",
            f"/rest/v1/{table}",
            table,
            json=values,
            headers={"Prefer": "return=representation"},
        )
        rows = res.json()
        return rows[0] if isinstance(rows, list) and rows else dict(values)

    def update(self, table: str, key: str, values: dict) -> dict | None:
        res = self._request(
            "PATCH",
            f"/rest/v1/{table}",
            table,
            params=[(self.key_column, _literal(key))],
            json=values,
            headers={"Prefer": "return=representation"},
        )
        rows = res.json()
        return rows[0] if isinstance(rows, list) and rows else None

    def delete(self, table: str, key: str) -> bool:
        res = self._request(
            "DELETE",
            f"/rest/v1/{table}",
            table,
            params=[(self.key_column, _literal(key))],
            headers={"Prefer": "return=representation"},
        )
        rows = res.json()
        return isinstance(rows, list) and len(rows) > 0

    def count(self, table: str, filters: Dict[str, Any] | None = None) -> int:
        params: list[tuple[str, str]] = [("select", self.key_column), ("limit", "0")]
        for column, value in (filters or {}).items():
            params.append((column, _literal(value)))
        res = self._request("GET", f"/rest/v1/{table}", table, params=params, headers={"Prefer": "count=exact"})
        content_range = res.headers.get("content-range") or ""
        total = content_range.rsplit("/", 1)[-1] if "/" in content_range else ""
        return int(total) if total.isdigit() else 0

    def ping(self) -> None:
        self._request("GET", f"/rest/v1/{self._health_table}", self._health_table, params=[("select", "id"), ("limit", "1")])

    def list_buckets(self) -> list[dict]:
        res = self._request("GET", "/storage/v1/bucket")
        data = res.json()
        return data if isinstance(data, list) else []

    def create_bucket(self, name: str, public: bool = False) -> dict:
        self._request("POST", "/storage/v1/bucket", json={"id": name, "name": name, "public": bool(public)})
        return {"id": name, "name": name, "public": bool(public)}
