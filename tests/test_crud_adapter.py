import os
import sys
import unittest


ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
SRC = os.path.join(ROOT, "src")
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)
if SRC not in sys.path:
    sys.path.insert(0, SRC)

from app.errors import NotFound, SchemaMismatchError, ScopeRequiredError, StoreError, TransportError
from app.stores import MemoryTableStore
from app.user_context import reset_current_user, set_current_user, static_user
from crud_adapter import CrudAdapter
from module_catalog import build_registry


class TestCrudAdapter(unittest.IsolatedAsyncioTestCase):
    def setUp(self) -> None:
        self.registry = build_registry()
        self.rfis = self.registry.get("rfis")
        self.directory = self.registry.get("directory")
        self.store = MemoryTableStore()
        self.adapter = CrudAdapter(self.store, user_provider=static_user("Ada Lovelace"), timeout_s=2.0)

    async def test_scoped_list_without_scope_never_reaches_store(self) -> None:
        for scope in (None, "", "  "):
            with self.assertRaises(ScopeRequiredError):
                await self.adapter.list(self.rfis, scope)
        self.assertEqual(self.store.calls, [])

    async def test_scoped_create_without_scope_never_reaches_store(self) -> None:
        with self.assertRaises(ScopeRequiredError):
            await self.adapter.create(self.rfis, None, {"subject": "Beam"})
        self.assertEqual(self.store.calls, [])

    async def test_list_filters_by_scope(self) -> None:
        self.store.seed("rfis", [{"subject": "A", "project_id": "proj-1"}, {"subject": "B", "project_id": "proj-2"}])
        rows = await self.adapter.list(self.rfis, "proj-1")
        self.assertEqual([r["subject"] for r in rows], ["A"])

    async def test_list_skips_empty_filters_and_scope_wins(self) -> None:
        self.store.seed("rfis", [{"subject": "A", "project_id": "proj-1", "status": "open"}])
        rows = await self.adapter.list(self.rfis, "proj-1", filters={"status": "", "priority": None, "project_id": "proj-2"})
        self.assertEqual(len(rows), 1)

    async def test_company_wide_list_ignores_scope(self) -> None:
        company_rfis = self.registry.derive("rfis", {"project_scoped": False})
        self.store.seed("rfis", [{"subject": "A", "project_id": "proj-1"}, {"subject": "B", "project_id": "proj-2"}])
        rows = await self.adapter.list(company_rfis)
        self.assertEqual(len(rows), 2)

    async def test_list_uses_default_sort(self) -> None:
        meetings = self.registry.get("meetings")
        self.store.seed(
            meetings.table,
            [
                {"title": "Kickoff", "meeting_date": "2024-01-05", "project_id": "p"},
                {"title": "OAC 2", "meeting_date": "2024-02-05", "project_id": "p"},
            ],
        )
        rows = await self.adapter.list(meetings, "p")
        self.assertEqual([r["title"] for r in rows], ["OAC 2", "Kickoff"])

    async def test_create_stamps_scope_attribution_and_id(self) -> None:
        row = await self.adapter.create(self.rfis, "proj-1", {"subject": "Clarify beam spec", "answer": "", "due_date": None, "project_id": "other"})
        self.assertEqual(row["project_id"], "proj-1")
        self.assertEqual(row["created_by"], "Ada Lovelace")
        self.assertTrue(row["id"])
        self.assertNotIn("answer", row)
        self.assertNotIn("due_date", row)

    async def test_create_keeps_supplied_attribution(self) -> None:
        row = await self.adapter.create(self.rfis, "proj-1", {"subject": "X", "created_by": "Grace"})
        self.assertEqual(row["created_by"], "Grace")

    async def test_create_without_attribution_column(self) -> None:
        budget = self.registry.get("budget")
        row = await self.adapter.create(budget, "proj-1", {"description": "Concrete"})
        self.assertNotIn("created_by", row)

    async def test_default_user_provider_reads_request_user(self) -> None:
        adapter = CrudAdapter(self.store)
        company_rfis = self.registry.derive("rfis", {"project_scoped": False})
        token = set_current_user("Site Super")
        try:
            row = await adapter.create(company_rfis, None, {"subject": "ACME"})
        finally:
            reset_current_user(token)
        self.assertEqual(row["created_by"], "Site Super")
        row = await adapter.create(company_rfis, None, {"subject": "Beta"})
        self.assertEqual(row["created_by"], "System User")

    async def test_update_normalizes_and_stamps(self) -> None:
        row = self.store.insert("rfis", {"id": "r1", "subject": "A", "answer": "old", "created_at": "2024-01-01T00:00:00+00:00"})
        updated = await self.adapter.update(self.rfis, "r1", {"id": "zzz", "created_at": "never", "answer": "", "subject": "B"})
        self.assertEqual(updated["id"], "r1")
        self.assertEqual(updated["created_at"], row["created_at"])
        self.assertIsNone(updated["answer"])
        self.assertEqual(updated["subject"], "B")
        self.assertNotEqual(updated["updated_at"], row["updated_at"])

    async def test_missing_rows_raise_not_found(self) -> None:
        with self.assertRaises(NotFound):
            await self.adapter.get(self.rfis, "missing")
        with self.assertRaises(NotFound):
            await self.adapter.update(self.rfis, "missing", {"subject": "X"})
        with self.assertRaises(NotFound):
            await self.adapter.delete(self.rfis, "missing")

    async def test_delete_and_count(self) -> None:
        self.store.seed("rfis", [{"id": "r1", "project_id": "p"}, {"id": "r2", "project_id": "p"}])
        self.assertEqual(await self.adapter.count(self.rfis, "p"), 2)
        await self.adapter.delete(self.rfis, "r1")
        self.assertEqual(await self.adapter.count(self.rfis, "p"), 1)

    async def test_schema_mismatch_is_logged_and_raised(self) -> None:
        store = MemoryTableStore(strict=True)
        adapter = CrudAdapter(store)
        with self.assertLogs("sitecrud.adapter", level="ERROR") as logs:
            with self.assertRaises(SchemaMismatchError) as ctx:
                await adapter.list(self.rfis, "proj-1")
        self.assertFalse(ctx.exception.retryable)
        self.assertIn("adapter_schema_mismatch", logs.output[0])

    async def test_store_rejection_passes_through(self) -> None:
        self.store.inject_failure("insert", StoreError("check constraint violated"))
        with self.assertRaises(StoreError) as ctx:
            await self.adapter.create(self.directory, None, {"company_name": "ACME"})
        self.assertEqual(ctx.exception.code, "STORE_REJECTED")

    async def test_offline_store_is_transport_error(self) -> None:
        self.store.offline = True
        with self.assertRaises(TransportError):
            await self.adapter.list(self.directory)

    async def test_slow_store_times_out(self) -> None:
        self.store.delay_s = 0.5
        adapter = CrudAdapter(self.store, timeout_s=0.05)
        with self.assertRaises(TransportError) as ctx:
            await adapter.list(self.directory)
        self.assertEqual(ctx.exception.code, "STORE_TIMEOUT")
        self.assertTrue(ctx.exception.retryable)


if __name__ == "__main__":
    unittest.main()
