"""Liveness report for the system health endpoint."""

from __future__ import annotations

import asyncio
import logging
import os
import time
from datetime import datetime, timezone

import anyio

from app.errors import StoreError, TransportError


logger = logging.getLogger("sitecrud.health")

_STARTED = time.monotonic()
PROBE_TIMEOUT_S = 5.0


def app_version() -> str:
    return os.getenv("APP_VERSION", "1.0.0")


async def check_store_health(store, timeout_s: float = PROBE_TIMEOUT_S) -> dict:
    start = time.perf_counter()
    db_status = "unknown"
    db_latency = 0
    if store is not None:
        db_start = time.perf_counter()
        try:
            await asyncio.wait_for(anyio.to_thread.run_sync(store.ping, abandon_on_cancel=True), timeout=timeout_s)
            db_status = "connected"
        except asyncio.TimeoutError:
            db_status = "unreachable"
        except TransportError as exc:
            logger.warning("health_store_unreachable error=%s", exc.message)
            db_status = "unreachable"
        except StoreError as exc:
            logger.warning("health_store_error code=%s error=%s", exc.code, exc.message)
            db_status = "error"
        db_latency = int((time.perf_counter() - db_start) * 1000)
    return {
        "status": "healthy" if db_status == "connected" else "degraded",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": app_version(),
        "uptime": round(time.monotonic() - _STARTED, 3),
        "database": {"status": db_status, "latency_ms": db_latency},
        "response_ms": int((time.perf_counter() - start) * 1000),
    }
