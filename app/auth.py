"""Supabase JWT auth middleware."""

from __future__ import annotations

import logging
import os
import re
import time
from typing import Optional

import httpx
from jose import jwt
from jose.exceptions import JWTError
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

from app.user_context import display_name_from_claims, reset_current_user, set_current_user


logger = logging.getLogger("sitecrud.auth")

JWKS_TTL_S = float(os.getenv("SITECRUD_JWKS_TTL_S", "600"))
_LOCAL_ORIGIN_RE = re.compile(r"^http://(localhost|127\.0\.0\.1):\d+$")

PUBLIC_PATHS = {"/health", "/api/system/health"}
PUBLIC_ROUTES = {("POST", "/api/errors")}


def auth_disabled() -> bool:
    return os.getenv("SITECRUD_DISABLE_AUTH", "").strip().lower() in ("1", "true", "yes")


def _auth_error(request: Request, code: str, message: str, detail: dict | None = None) -> JSONResponse:
    body = {
        "ok": False,
        "errors": [{"code": code, "message": message, "path": "Authorization", "detail": detail}],
        "warnings": [],
    }
    response = JSONResponse(body, status_code=401)
    # local dev origins get CORS headers on 401s too
    origin = request.headers.get("origin")
    if origin and _LOCAL_ORIGIN_RE.match(origin):
        response.headers.update(
            {
                "Access-Control-Allow-Origin": origin,
                "Access-Control-Allow-Credentials": "true",
                "Vary": "Origin",
            }
        )
    return response


class JwksCache:
    """Signing keys for one Supabase project, refetched after ``ttl_s``."""

    def __init__(self, url: str, ttl_s: float = JWKS_TTL_S) -> None:
        self.url = url
        self.ttl_s = ttl_s
        self._keys: list[dict] = []
        self._fetched_at = 0.0

    def _refresh(self) -> None:
        resp = httpx.get(self.url, timeout=10.0)
        resp.raise_for_status()
        self._keys = list(resp.json().get("keys") or [])
        self._fetched_at = time.monotonic()
        logger.info("auth_jwks_refreshed keys=%s", len(self._keys))

    def _lookup(self, kid: str | None) -> dict | None:
        return next((jwk for jwk in self._keys if jwk.get("kid") == kid), None)

    def key_for(self, kid: str | None) -> dict | None:
        if not self._keys or time.monotonic() - self._fetched_at >= self.ttl_s:
            self._refresh()
        key = self._lookup(kid)
        if key is None:
            self._refresh()
            key = self._lookup(kid)
        return key


def _get_bearer_token(request: Request) -> Optional[str]:
    auth = request.headers.get("Authorization", "")
    if not auth.startswith("Bearer "):
        return None
    return auth.split(" ", 1)[1].strip() or None


def _verify_jwt(token: str, jwks: JwksCache, issuer: str, audience: Optional[str]) -> dict:
    headers = jwt.get_unverified_header(token)
    key = jwks.key_for(headers.get("kid"))
    if key is None:
        raise JWTError("Unknown kid")
    options = {"verify_aud": audience is not None}
    return jwt.decode(token, key, algorithms=[headers.get("alg", "RS256")], issuer=issuer, audience=audience, options=options)


def is_public(request: Request) -> bool:
    if request.method == "OPTIONS":
        return True
    path = request.url.path
    return path in PUBLIC_PATHS or (request.method, path) in PUBLIC_ROUTES


class SupabaseAuthMiddleware(BaseHTTPMiddleware):
    """Verify Supabase bearer tokens and expose the caller as the current user."""

    def __init__(self, app, supabase_url: str, audience: Optional[str] = None) -> None:
        super().__init__(app)
        self._supabase_url = supabase_url.rstrip("/")
        self._audience = audience
        self._jwks = JwksCache(f"{self._supabase_url}/auth/v1/.well-known/jwks.json")
        self._issuer = f"{self._supabase_url}/auth/v1"

    async def dispatch(self, request: Request, call_next):
        start = time.perf_counter()
        if auth_disabled() or is_public(request):
            return await call_next(request)

        token = _get_bearer_token(request)
        if not token:
            logger.warning("auth_missing_token path=%s", request.url.path)
            return _auth_error(request, "AUTH_MISSING_TOKEN", "Missing bearer token")

        try:
            claims = _verify_jwt(token, self._jwks, self._issuer, self._audience)
        except (JWTError, httpx.HTTPError) as exc:
            logger.warning(
                "auth_invalid_token path=%s issuer=%s audience=%s error=%s",
                request.url.path,
                self._issuer,
                self._audience,
                exc,
            )
            return _auth_error(request, "AUTH_INVALID_TOKEN", "Invalid bearer token", {"error": str(exc)})

        request.state.user = {
            "id": claims.get("sub"),
            "email": claims.get("email"),
            "name": display_name_from_claims(claims),
            "claims": claims,
        }
        request.state.auth_ms = (time.perf_counter() - start) * 1000
        token_ref = set_current_user(request.state.user["name"])
        try:
            return await call_next(request)
        finally:
            reset_current_user(token_ref)
