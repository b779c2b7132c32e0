"""Postgres connection pool used by the database-backed record store."""

from __future__ import annotations

import logging
import os
import threading
import time
from contextlib import contextmanager
from typing import Any, Iterable

import psycopg2.extras
from psycopg2.pool import ThreadedConnectionPool


logger = logging.getLogger("sitecrud.db")

SLOW_QUERY_MS = float(os.getenv("SITECRUD_QUERY_SLOW_MS", "200"))
LOG_ALL_QUERIES = os.getenv("SITECRUD_QUERY_LOG", "").strip() == "1"

_pool: ThreadedConnectionPool | None = None
_pool_lock = threading.Lock()


def database_url() -> str:
    url = os.getenv("SUPABASE_DB_URL") or os.getenv("DATABASE_URL")
    if not url:
        raise RuntimeError("SUPABASE_DB_URL or DATABASE_URL is required when USE_DB=1")
    return url


def open_pool() -> ThreadedConnectionPool:
    global _pool
    with _pool_lock:
        if _pool is None:
            low = int(os.getenv("SITECRUD_DB_POOL_MIN", "1"))
            high = int(os.getenv("SITECRUD_DB_POOL_MAX", "10"))
            timeout = int(os.getenv("SITECRUD_DB_CONNECT_TIMEOUT_S", "5"))
            _pool = ThreadedConnectionPool(low, high, dsn=database_url(), connect_timeout=timeout)
            logger.info("db_pool_opened min=%s max=%s", low, high)
        return _pool


def close_pool() -> None:
    global _pool
    with _pool_lock:
        if _pool is not None:
            _pool.closeall()
            _pool = None
            logger.info("db_pool_closed")


@contextmanager
def get_conn():
    """Borrow a pooled connection; commit on success, roll back on error."""
    pool = open_pool()
    conn = pool.getconn()
    try:
        yield conn
        conn.commit()
    except Exception:
        if not conn.closed:
            conn.rollback()
        raise
    finally:
        pool.putconn(conn, close=bool(conn.closed))


def _short(value: Any) -> Any:
    if isinstance(value, str) and len(value) > 60:
        return value[:57] + "..."
    return value


def _run(conn, name: str, query, params: Iterable[Any] | None, fetch: str | None):
    started = time.perf_counter()
    factory = psycopg2.extras.RealDictCursor if fetch else None
    with conn.cursor(cursor_factory=factory) as cur:
        cur.execute(query, list(params or []))
        if fetch == "one":
            row = cur.fetchone()
            result = dict(row) if row else None
        elif fetch == "all":
            result = [dict(r) for r in cur.fetchall()]
        else:
            result = cur.rowcount
    elapsed = (time.perf_counter() - started) * 1000
    if elapsed >= SLOW_QUERY_MS:
        logger.warning("db_slow_query name=%s ms=%.1f params=%s", name, elapsed, [_short(p) for p in params or []])
    elif LOG_ALL_QUERIES:
        logger.info("db_query name=%s ms=%.1f", name, elapsed)
    return result


def fetch_one(conn, query, params: Iterable[Any] | None = None, query_name: str = "query") -> dict | None:
    return _run(conn, query_name, query, params, "one")


def fetch_all(conn, query, params: Iterable[Any] | None = None, query_name: str = "query") -> list[dict]:
    return _run(conn, query_name, query, params, "all")


def execute(conn, query, params: Iterable[Any] | None = None, query_name: str = "query") -> int:
    return _run(conn, query_name, query, params, None)
