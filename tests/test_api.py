import os
import sys
import unittest
from unittest import mock

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

import httpx
from fastapi import FastAPI
from fastapi.testclient import TestClient

os.environ["USE_DB"] = "0"
os.environ["SITECRUD_STORE"] = "memory"
os.environ["SITECRUD_DISABLE_AUTH"] = "1"
os.environ["SUPABASE_URL"] = "http://localhost"

import app.auth as auth
import app.main as main
from app.stores import MemoryTableStore
from app.user_context import get_current_user
from crud_adapter import CrudAdapter


class TestModuleApi(unittest.TestCase):
    def setUp(self) -> None:
        self.store = MemoryTableStore()
        adapter = CrudAdapter(self.store, timeout_s=2.0)
        patchers = [mock.patch.object(main, "store", self.store), mock.patch.object(main, "adapter", adapter)]
        for patcher in patchers:
            patcher.start()
            self.addCleanup(patcher.stop)
        self.client = TestClient(main.app)

    def test_health(self) -> None:
        self.assertEqual(self.client.get("/health").json(), {"ok": True})
        body = self.client.get("/api/system/health").json()
        self.assertEqual(body["status"], "healthy")
        self.assertEqual(body["database"]["status"], "connected")

    def test_modules_are_described(self) -> None:
        body = self.client.get("/modules").json()
        self.assertTrue(body["ok"])
        keys = [m["key"] for m in body["modules"]]
        self.assertIn("rfis", keys)
        rfis = self.client.get("/modules/rfis").json()["module"]
        self.assertTrue(rfis["config_hash"].startswith("sha256:"))
        missing = self.client.get("/modules/nope")
        self.assertEqual(missing.status_code, 404)
        self.assertEqual(missing.json()["errors"][0]["code"], "UNKNOWN_MODULE")

    def test_scoped_create_requires_project(self) -> None:
        res = self.client.post("/modules/rfis/records", json={"record": {"subject": "Clarify beam spec"}})
        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.json()["errors"][0]["code"], "SCOPE_REQUIRED")
        self.assertEqual(self.store.calls, [])

    def test_create_validation_errors(self) -> None:
        res = self.client.post("/modules/rfis/records?project_id=p1", json={"record": {"subject": " ", "status": "bogus"}})
        self.assertEqual(res.status_code, 400)
        codes = {issue["path"]: issue["code"] for issue in res.json()["errors"]}
        self.assertEqual(codes, {"subject": "REQUIRED_FIELD", "status": "INVALID_OPTION"})

    def test_record_lifecycle(self) -> None:
        res = self.client.post("/modules/rfis/records?project_id=p1", json={"record": {"subject": "Clarify beam spec"}})
        body = res.json()
        self.assertTrue(body["ok"], body)
        record_id = body["record_id"]
        self.assertEqual(body["record"]["project_id"], "p1")
        self.assertEqual(body["record"]["created_by"], "System User")

        listed = self.client.get("/modules/rfis/records?project_id=p1").json()
        self.assertEqual(listed["count"], 1)
        self.assertTrue(listed["config_hash"].startswith("sha256:"))
        self.assertEqual(self.client.get("/modules/rfis/records?project_id=p2").json()["count"], 0)

        patched = self.client.patch(f"/modules/rfis/records/{record_id}", json={"status": "answered"}).json()
        self.assertEqual(patched["record"]["status"], "answered")
        self.assertEqual(self.client.get(f"/modules/rfis/records/{record_id}").json()["record"]["subject"], "Clarify beam spec")

        deleted = self.client.delete(f"/modules/rfis/records/{record_id}").json()
        self.assertTrue(deleted["deleted"])
        missing = self.client.get(f"/modules/rfis/records/{record_id}")
        self.assertEqual(missing.status_code, 404)
        self.assertEqual(missing.json()["errors"][0]["code"], "RECORD_NOT_FOUND")

    def test_company_wide_override(self) -> None:
        self.store.seed("rfis", [{"subject": "A", "project_id": "p1"}, {"subject": "B", "project_id": "p2"}])
        body = self.client.get("/modules/rfis/records?project_scoped=false").json()
        self.assertEqual(body["count"], 2)

    def test_unknown_filter_rejected(self) -> None:
        res = self.client.get("/modules/directory/records?colour=red")
        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.json()["errors"][0]["code"], "UNKNOWN_FIELD")

    def test_filters_match_typed_columns(self) -> None:
        self.store.seed(
            "directory_contacts",
            [
                {"company_name": "Acme Steel", "contact_type": "supplier", "prequalified": True},
                {"company_name": "Bolt Co", "contact_type": "supplier", "prequalified": False},
            ],
        )
        body = self.client.get("/modules/directory/records?prequalified=true").json()
        self.assertEqual([r["company_name"] for r in body["records"]], ["Acme Steel"])

        self.store.seed("budgets", [{"code": "03-100", "description": "Concrete", "original_amount": 12500, "project_id": "p1"}])
        body = self.client.get("/modules/budget/records?project_id=p1&original_amount=12500").json()
        self.assertEqual(body["count"], 1)

    def test_badly_typed_filter_rejected(self) -> None:
        res = self.client.get("/modules/directory/records?prequalified=maybe")
        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.json()["errors"][0]["code"], "TYPE_MISMATCH")

    def test_store_failures_map_to_status(self) -> None:
        self.store.offline = True
        res = self.client.get("/modules/directory/records")
        self.assertEqual(res.status_code, 503)
        self.assertEqual(res.json()["errors"][0]["code"], "STORE_UNREACHABLE")

    def test_client_error_sink(self) -> None:
        res = self.client.post("/api/errors", json={"stack_trace": "x"})
        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.json(), {"error": "error_message is required"})
        res = self.client.post("/api/errors", json={"error_message": "TypeError: x is undefined", "page_url": "/projects/p1/rfis"})
        self.assertEqual(res.json(), {"success": True})
        rows = self.client.get("/api/errors").json()
        self.assertEqual(rows[0]["error_message"], "TypeError: x is undefined")

    def test_bound_page_renders(self) -> None:
        self.store.seed("rfis", [{"id": "r1", "subject": "Beam size", "project_id": "p1"}])
        res = self.client.get("/pages/projects/p1/rfis")
        self.assertEqual(res.status_code, 200)
        self.assertIn("Beam size", res.text)
        view = self.client.get("/pages/projects/p1/rfis?format=json&new=1").json()["view"]
        self.assertEqual(view["scope"], "p1")
        self.assertEqual(view["form"]["title"], "New RFI")
        company = self.client.get("/pages/rfis?format=json").json()["view"]
        self.assertIsNone(company["scope"])

    def test_unbound_page_is_404(self) -> None:
        res = self.client.get("/pages/projects/p1/nowhere")
        self.assertEqual(res.status_code, 404)
        self.assertEqual(res.json()["errors"][0]["code"], "PAGE_NOT_FOUND")


class TestAuthMiddleware(unittest.TestCase):
    def setUp(self) -> None:
        api = FastAPI()
        api.add_middleware(auth.SupabaseAuthMiddleware, supabase_url="http://localhost")

        @api.get("/whoami")
        async def whoami() -> dict:
            return {"user": get_current_user()}

        @api.get("/health")
        async def health() -> dict:
            return {"ok": True}

        env = mock.patch.dict(os.environ, {"SITECRUD_DISABLE_AUTH": ""})
        env.start()
        self.addCleanup(env.stop)
        self.client = TestClient(api)

    def test_missing_token_rejected(self) -> None:
        res = self.client.get("/whoami")
        self.assertEqual(res.status_code, 401)
        self.assertEqual(res.json()["errors"][0]["code"], "AUTH_MISSING_TOKEN")

    def test_public_path_skips_auth(self) -> None:
        self.assertEqual(self.client.get("/health").status_code, 200)

    def test_verified_token_sets_current_user(self) -> None:
        claims = {"sub": "u1", "email": "ada@example.com", "user_metadata": {"full_name": "Ada Lovelace"}}
        with mock.patch.object(auth, "_verify_jwt", return_value=claims):
            res = self.client.get("/whoami", headers={"Authorization": "Bearer token"})
        self.assertEqual(res.json(), {"user": "Ada Lovelace"})

    def test_invalid_token_rejected(self) -> None:
        with mock.patch.object(auth, "_verify_jwt", side_effect=auth.JWTError("bad signature")):
            res = self.client.get("/whoami", headers={"Authorization": "Bearer token"})
        self.assertEqual(res.status_code, 401)
        self.assertEqual(res.json()["errors"][0]["code"], "AUTH_INVALID_TOKEN")

    def test_jwks_cache_refetches_for_unknown_kid(self) -> None:
        url = "http://localhost/auth/v1/.well-known/jwks.json"
        response = httpx.Response(200, json={"keys": [{"kid": "k1", "kty": "RSA"}]}, request=httpx.Request("GET", url))
        cache = auth.JwksCache(url)
        with mock.patch.object(auth.httpx, "get", return_value=response) as fetch:
            self.assertEqual(cache.key_for("k1")["kty"], "RSA")
            self.assertEqual(cache.key_for("k1")["kid"], "k1")
            self.assertEqual(fetch.call_count, 1)
            self.assertIsNone(cache.key_for("k2"))
            self.assertEqual(fetch.call_count, 2)


if __name__ == "__main__":
    unittest.main()
