import os
import sys
import unittest


ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
SRC = os.path.join(ROOT, "src")
if SRC not in sys.path:
    sys.path.insert(0, SRC)

from sitecrud.config_hash import CanonicalJsonTypeError, canonical_dumps, config_hash


class TestCanonicalDumps(unittest.TestCase):
    def test_nested_key_ordering(self) -> None:
        obj = {"table": "rfis", "fields": [{"name": "subject", "label": "Subject"}]}
        expected = '{"fields":[{"label":"Subject","name":"subject"}],"table":"rfis"}'
        self.assertEqual(canonical_dumps(obj), expected)

    def test_tuples_serialize_as_lists(self) -> None:
        self.assertEqual(canonical_dumps({"sort": ("due_date", False)}), '{"sort":["due_date",false]}')

    def test_unsupported_type_raises(self) -> None:
        with self.assertRaises(CanonicalJsonTypeError):
            canonical_dumps({"options": {"open", "closed"}})

    def test_non_string_keys_raise(self) -> None:
        with self.assertRaises(CanonicalJsonTypeError) as ctx:
            canonical_dumps({"widths": {1: "wide"}})
        self.assertIn("$.widths", str(ctx.exception))

    def test_reject_nan(self) -> None:
        with self.assertRaises(ValueError):
            canonical_dumps({"amount": float("nan")})


class TestConfigHash(unittest.TestCase):
    def test_hash_ignores_key_order(self) -> None:
        a = {"key": "rfis", "project_scoped": True}
        b = {"project_scoped": True, "key": "rfis"}
        self.assertEqual(config_hash(a), config_hash(b))

    def test_hash_differs_for_scope_override(self) -> None:
        a = {"key": "rfis", "project_scoped": True}
        b = {"key": "rfis", "project_scoped": False}
        self.assertNotEqual(config_hash(a), config_hash(b))

    def test_hash_format(self) -> None:
        h = config_hash({"key": "rfis"})
        self.assertTrue(h.startswith("sha256:"))
        self.assertEqual(len(h), len("sha256:") + 64)


if __name__ == "__main__":
    unittest.main()
