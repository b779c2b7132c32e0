"""Postgres-backed tabular store."""

from __future__ import annotations

import logging
import uuid
from decimal import Decimal
from contextlib import contextmanager
from typing import Any, Dict

import psycopg2
from psycopg2 import errors as pg_errors
from psycopg2 import sql
from psycopg2.extras import Json
from psycopg2.pool import PoolError

from app.db import execute, fetch_all, fetch_one, get_conn
from app.errors import SchemaMismatchError, StoreError, TransportError


logger = logging.getLogger("sitecrud.store")


def _adapt(value: Any) -> Any:
    if isinstance(value, (dict, list)):
        return Json(value)
    return value


def _where(filters: Dict[str, Any]) -> tuple[sql.Composable, list]:
    if not filters:
        return sql.SQL(""), []
    clauses = []
    params: list = []
    for column, value in filters.items():
        if value is None:
            clauses.append(sql.SQL("{} is null").format(sql.Identifier(column)))
        else:
            clauses.append(sql.SQL("{} = %s").format(sql.Identifier(column)))
            params.append(_adapt(value))
    return sql.SQL(" where ") + sql.SQL(" and ").join(clauses), params


def _serialize(row: dict | None) -> dict | None:
    if row is None:
        return None
    out = {}
    for key, value in row.items():
        if hasattr(value, "isoformat"):
            out[key] = value.isoformat()
        elif isinstance(value, Decimal):
            # numeric columns come back as Decimal
            out[key] = int(value) if value.is_finite() and value == value.to_integral_value() else float(value)
        else:
            out[key] = value
    return out


@contextmanager
def _translate_errors(table: str | None):
    try:
        yield
    except (pg_errors.UndefinedTable, pg_errors.UndefinedColumn) as exc:
        logger.error("store_schema_mismatch table=%s error=%s", table, exc)
        column = None
        diag = getattr(exc, "diag", None)
        if isinstance(exc, pg_errors.UndefinedColumn) and diag is not None:
            column = getattr(diag, "column_name", None)
        raise SchemaMismatchError(str(exc).strip(), table=table, column=column) from exc
    except PoolError as exc:
        logger.warning("store_pool_exhausted table=%s error=%s", table, exc)
        raise TransportError(str(exc).strip() or "connection pool exhausted", detail={"table": table}) from exc
    except (psycopg2.OperationalError, psycopg2.InterfaceError) as exc:
        logger.warning("store_unreachable table=%s error=%s", table, exc)
        raise TransportError(str(exc).strip() or "database unreachable", detail={"table": table}) from exc
    except psycopg2.IntegrityError as exc:
        raise StoreError(str(exc).strip(), code="STORE_CONFLICT", detail={"table": table}) from exc
    except psycopg2.DataError as exc:
        raise StoreError(str(exc).strip(), code="STORE_REJECTED", detail={"table": table}) from exc
    except psycopg2.Error as exc:
        logger.warning("store_rejected table=%s pgcode=%s error=%s", table, getattr(exc, "pgcode", None), exc)
        raise StoreError(str(exc).strip() or "database error", detail={"table": table, "pgcode": getattr(exc, "pgcode", None)}) from exc


class DbTableStore:
    key_column = "id"

    def select(
        self,
        table: str,
        filters: Dict[str, Any] | None = None,
        order_by: str | None = None,
        ascending: bool = True,
        limit: int | None = None,
    ) -> list[dict]:
        where, params = _where(filters or {})
        query = sql.SQL("select * from {}").format(sql.Identifier(table)) + where
        if order_by:
            direction = sql.SQL("asc") if ascending else sql.SQL("desc")
            query += sql.SQL(" order by {} {}").format(sql.Identifier(order_by), direction)
        if limit is not None:
            query += sql.SQL(" limit %s")
            params.append(int(limit))
        with _translate_errors(table):
            with get_conn() as conn:
                rows = fetch_all(conn, query, params, query_name=f"{table}.select")
        return [_serialize(r) for r in rows]

    def get(self, table: str, key: str) -> dict | None:
        query = sql.SQL("select * from {} where {} = %s").format(sql.Identifier(table), sql.Identifier(self.key_column))
        with _translate_errors(table):
            with get_conn() as conn:
                row = fetch_one(conn, query, [key], query_name=f"{table}.get")
        return _serialize(row)

    def insert(self, table: str, values: dict) -> dict:
        values = dict(values)
        values.setdefault(self.key_column, str(uuid.uuid4()))
        columns = list(values.keys())
        query = sql.SQL("insert into {} ({}) values ({}) returning *").format(
            sql.Identifier(table),
            sql.SQL(", ").join(sql.Identifier(c) for c in columns),
            sql.SQL(", ").join(sql.Placeholder() for _ in columns),
        )
        with _translate_errors(table):
            with get_conn() as conn:
                row = fetch_one(conn, query, [_adapt(values[c]) for c in columns], query_name=f"{table}.insert")
        return _serialize(row)

    def update(self, table: str, key: str, values: dict) -> dict | None:
        if not values:
            return self.get(table, key)
        columns = list(values.keys())
        assignments = sql.SQL(", ").join(sql.SQL("{} = %s").format(sql.Identifier(c)) for c in columns)
        query = sql.SQL("update {} set {} where {} = %s returning *").format(
            sql.Identifier(table), assignments, sql.Identifier(self.key_column)
        )
        params = [_adapt(values[c]) for c in columns] + [key]
        with _translate_errors(table):
            with get_conn() as conn:
                row = fetch_one(conn, query, params, query_name=f"{table}.update")
        return _serialize(row)

    def delete(self, table: str, key: str) -> bool:
        query = sql.SQL("delete from {} where {} = %s").format(sql.Identifier(table), sql.Identifier(self.key_column))
        with _translate_errors(table):
            with get_conn() as conn:
                rowcount = execute(conn, query, [key], query_name=f"{table}.delete")
        return rowcount > 0

    def count(self, table: str, filters: Dict[str, Any] | None = None) -> int:
        where, params = _where(filters or {})
        query = sql.SQL("select count(*) as n from {}").format(sql.Identifier(table)) + where
        with _translate_errors(table):
            with get_conn() as conn:
                row = fetch_one(conn, query, params, query_name=f"{table}.count")
        return int((row or {}).get("n") or 0)

    def ping(self) -> None:
        with _translate_errors(None):
            with get_conn() as conn:
                fetch_one(conn, "select 1 as ok", query_name="ops.ping")

    def list_buckets(self) -> list[dict]:
        with _translate_errors("storage.buckets"):
            with get_conn() as conn:
                rows = fetch_all(conn, "select id, name, public, created_at from storage.buckets order by name", query_name="storage.list_buckets")
        return [_serialize(r) for r in rows]

    def create_bucket(self, name: str, public: bool = False) -> dict:
        with _translate_errors("storage.buckets"):
            with get_conn() as conn:
                row = fetch_one(
                    conn,
                    "insert into storage.buckets (id, name, public) values (%s, %s, %s) returning id, name, public, created_at",
                    [name, name, bool(public)],
                    query_name="storage.create_bucket",
                )
        return _serialize(row)
