"""FastAPI app for the SiteCRUD project-management engine."""

from __future__ import annotations

import os
import re
import sys
from pathlib import Path
from typing import Any, Dict

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


def _load_env_file(path: Path) -> None:
    if not path.exists():
        return
    for line in path.read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip().strip('"').strip("'")
        if key and key not in os.environ:
            os.environ[key] = value


_load_env_file(ROOT / "app" / ".env")

import logging

import anyio

from app.auth import SupabaseAuthMiddleware, auth_disabled
from app.error_log import log_client_error, recent_errors
from app.errors import (
    ConfigurationError,
    CrudError,
    NotFound,
    SchemaMismatchError,
    ScopeRequiredError,
    StoreError,
    TransportError,
    UnknownModuleError,
    ValidationError,
)
from app.health import check_store_health
from app.page_render import render_page
from app.records_validation import coerce_filters, ensure_valid
from app.stores import MemoryTableStore
from crud_adapter import CrudAdapter
from crud_page import CrudPage
from module_catalog import build_registry
from module_config import ModuleConfig
from route_bindings import resolve


app = FastAPI(title="SiteCRUD")
logger = logging.getLogger("sitecrud")
logging.basicConfig(level=logging.INFO)
_LOCAL_CORS_ORIGINS = {
    "http://localhost:3000",
    "http://127.0.0.1:3000",
    "http://localhost:5173",
    "http://127.0.0.1:5173",
}
_LOCAL_CORS_REGEX = re.compile(r"^http://(localhost|127\.0\.0\.1):\d+$")
_EXTRA_CORS_ORIGINS = {
    origin.strip().rstrip("/")
    for origin in os.getenv("SITECRUD_CORS_ORIGINS", "").split(",")
    if origin.strip()
}
_CORS_ORIGINS = _LOCAL_CORS_ORIGINS | _EXTRA_CORS_ORIGINS

USE_DB = os.getenv("USE_DB", "").strip() == "1"
STORE_KIND = os.getenv("SITECRUD_STORE", "").strip().lower()
STORE_TIMEOUT_S = float(os.getenv("SITECRUD_STORE_TIMEOUT_S", "15"))
SUPABASE_URL = os.getenv("SUPABASE_URL", "").strip()
SUPABASE_AUD = os.getenv("SUPABASE_JWT_AUD", "").strip() or None
DISABLE_AUTH = auth_disabled()
logger.info("auth_disabled=%s supabase_url=%s use_db=%s store=%s", DISABLE_AUTH, SUPABASE_URL, USE_DB, STORE_KIND or "memory")

_RESERVED_QUERY = {"project_id", "project_scoped", "limit"}


def build_store():
    if USE_DB:
        from app.stores_db import DbTableStore

        return DbTableStore()
    if STORE_KIND == "rest":
        from app.supabase_rest import SupabaseRestStore

        return SupabaseRestStore(timeout_s=STORE_TIMEOUT_S)
    return MemoryTableStore()


store = build_store()
registry = build_registry()
adapter = CrudAdapter(store, timeout_s=STORE_TIMEOUT_S)


app.add_middleware(
    CORSMiddleware,
    allow_origins=sorted(_CORS_ORIGINS),
    allow_origin_regex=r"http://localhost:\d+|http://127\.0\.0\.1:\d+",
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
if not DISABLE_AUTH:
    if not SUPABASE_URL:
        raise RuntimeError("SUPABASE_URL is required for auth")
    app.add_middleware(SupabaseAuthMiddleware, supabase_url=SUPABASE_URL, audience=SUPABASE_AUD)


def _error_response(code: str, message: str, path: str | None = None, detail: dict | None = None, status: int = 400) -> JSONResponse:
    body = {
        "ok": False,
        "errors": [{"code": code, "message": message, "path": path, "detail": detail}],
        "warnings": [],
    }
    return JSONResponse(jsonable_encoder(body), status_code=status)


def _ok_response(payload: dict, warnings: list | None = None, status: int = 200) -> JSONResponse:
    body = {"ok": True, **payload, "errors": [], "warnings": warnings or []}
    return JSONResponse(jsonable_encoder(body), status_code=status)


def _status_for(exc: CrudError) -> int:
    if isinstance(exc, (ValidationError, ScopeRequiredError)):
        return 400
    if isinstance(exc, (UnknownModuleError, NotFound)):
        return 404
    if isinstance(exc, ConfigurationError):
        return 400
    if isinstance(exc, SchemaMismatchError):
        return 500
    if isinstance(exc, TransportError):
        return 503
    if isinstance(exc, StoreError):
        return 422
    return 400


@app.exception_handler(CrudError)
async def crud_error_handler(request: Request, exc: CrudError):
    errors = exc.issues if isinstance(exc, ValidationError) and exc.issues else [exc.to_issue()]
    body = {"ok": False, "errors": errors, "warnings": []}
    return JSONResponse(jsonable_encoder(body), status_code=_status_for(exc))


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("unhandled_error path=%s", request.url.path)
    return _error_response("INTERNAL_ERROR", "Unexpected server error", detail={"error": str(exc)}, status=500)


async def _safe_json(request: Request) -> dict:
    try:
        return await request.json()
    except Exception:
        return {}


def _truthy(value: str | None) -> bool:
    return (value or "").strip().lower() in ("1", "true", "yes")


def _config_for(request: Request, key: str) -> ModuleConfig:
    config = registry.get(key)
    raw = request.query_params.get("project_scoped")
    if raw is not None:
        config = registry.derive(key, {"project_scoped": _truthy(raw)})
    return config


def _filters_from_query(request: Request, config: ModuleConfig) -> Dict[str, Any]:
    allowed = set(config.field_names()) | {"id"}
    filters = {}
    for name, value in request.query_params.items():
        if name in _RESERVED_QUERY:
            continue
        if name not in allowed:
            raise ValidationError(
                "Unknown filter",
                path=name,
                issues=[{"code": "UNKNOWN_FIELD", "message": f"Unknown field: {name}", "path": name, "detail": None}],
            )
        filters[name] = value
    return coerce_filters(config, filters)


def _limit_from_query(request: Request) -> int | None:
    raw = request.query_params.get("limit")
    if raw is None or raw == "":
        return None
    try:
        limit = int(raw)
    except ValueError:
        raise ValidationError(
            "limit must be an integer",
            path="limit",
            issues=[{"code": "TYPE_MISMATCH", "message": "limit must be an integer", "path": "limit", "detail": None}],
        )
    return max(limit, 0)


def _record_body(body: Any) -> Any:
    if isinstance(body, dict) and isinstance(body.get("record"), dict):
        return body["record"]
    return body


@app.get("/health")
async def health() -> dict:
    return {"ok": True}


@app.get("/api/system/health")
async def system_health() -> JSONResponse:
    return JSONResponse(await check_store_health(store))


@app.post("/api/errors")
async def report_client_error(request: Request) -> JSONResponse:
    body = await _safe_json(request)
    try:
        result = await anyio.to_thread.run_sync(log_client_error, store, body)
    except ValidationError as exc:
        return JSONResponse({"error": exc.message}, status_code=400)
    return JSONResponse(result)


@app.get("/api/errors")
async def list_client_errors() -> JSONResponse:
    rows = await anyio.to_thread.run_sync(recent_errors, store)
    return JSONResponse(jsonable_encoder(rows))


@app.get("/modules")
async def list_modules() -> JSONResponse:
    return _ok_response({"modules": [registry.describe(config) for config in registry.list()]})


@app.get("/modules/{key}")
async def get_module(key: str) -> JSONResponse:
    return _ok_response({"module": registry.describe(key)})


@app.get("/modules/{key}/records")
async def list_module_records(request: Request, key: str) -> JSONResponse:
    config = _config_for(request, key)
    filters = _filters_from_query(request, config)
    limit = _limit_from_query(request)
    scope = request.query_params.get("project_id")
    rows = await adapter.list(config, scope, filters=filters, limit=limit)
    return _ok_response(
        {
            "module": config.key,
            "config_hash": registry.fingerprint(config),
            "records": rows,
            "count": len(rows),
        }
    )


@app.post("/modules/{key}/records")
async def create_module_record(request: Request, key: str) -> JSONResponse:
    config = _config_for(request, key)
    data = _record_body(await _safe_json(request))
    clean = ensure_valid(config, data, for_create=True)
    record = await adapter.create(config, request.query_params.get("project_id"), clean)
    return _ok_response({"record_id": record.get("id"), "record": record})


@app.get("/modules/{key}/records/{record_id}")
async def get_module_record(request: Request, key: str, record_id: str) -> JSONResponse:
    config = _config_for(request, key)
    record = await adapter.get(config, record_id)
    return _ok_response({"record_id": record_id, "record": record})


@app.patch("/modules/{key}/records/{record_id}")
async def update_module_record(request: Request, key: str, record_id: str) -> JSONResponse:
    config = _config_for(request, key)
    data = _record_body(await _safe_json(request))
    clean = ensure_valid(config, data, for_create=False)
    record = await adapter.update(config, record_id, clean)
    return _ok_response({"record_id": record_id, "record": record})


@app.delete("/modules/{key}/records/{record_id}")
async def delete_module_record(request: Request, key: str, record_id: str) -> JSONResponse:
    config = _config_for(request, key)
    await adapter.delete(config, record_id)
    return _ok_response({"record_id": record_id, "deleted": True})


@app.get("/pages/{path:path}")
async def render_bound_page(request: Request, path: str):
    try:
        config, scope = resolve(path, registry)
    except LookupError:
        return _error_response("PAGE_NOT_FOUND", "No page is bound to this path", "path", {"path": path}, status=404)
    page = CrudPage(config, adapter, scope)
    await page.mount()
    params = request.query_params
    if params.get("search"):
        page.set_search(params["search"])
    if params.get("sort"):
        page.sort_by(params["sort"], ascending=params.get("dir", "asc") != "desc")
    if params.get("edit"):
        page.open_edit(params["edit"])
    elif _truthy(params.get("new")):
        page.open_new()
    view = page.view()
    if params.get("format") == "json":
        return _ok_response({"view": view, "config_hash": registry.fingerprint(config)})
    return HTMLResponse(render_page(view))
