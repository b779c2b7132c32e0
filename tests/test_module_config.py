import os
import sys
import unittest


ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
SRC = os.path.join(ROOT, "src")
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)
if SRC not in sys.path:
    sys.path.insert(0, SRC)

from app.errors import ConfigurationError
from module_config import (
    FieldSpec,
    ModuleConfig,
    config_from_dict,
    config_to_dict,
    default_value,
    derive_config,
    draft_from_record,
    empty_draft,
)


def _rfis() -> ModuleConfig:
    return ModuleConfig(
        key="rfis",
        table="rfis",
        singular="RFI",
        plural="RFIs",
        project_scoped=True,
        search_field="subject",
        fields=(
            FieldSpec("subject", "Subject", required=True),
            FieldSpec("status", "Status", "select", options=("open", "closed"), default="open"),
            FieldSpec("cost_impact", "Cost Impact", "currency"),
            FieldSpec("due_date", "Due Date", "date"),
            FieldSpec("urgent", "Urgent", "boolean"),
        ),
    )


class TestFieldSpec(unittest.TestCase):
    def test_unsupported_type_rejected(self) -> None:
        with self.assertRaises(ConfigurationError):
            FieldSpec("photo", "Photo", "image")

    def test_plain_options_get_titled_labels(self) -> None:
        field_spec = FieldSpec("status", "Status", "select", options=("in_progress", ("done", "Done!")))
        self.assertEqual(field_spec.options, (("in_progress", "In Progress"), ("done", "Done!")))
        self.assertEqual(field_spec.option_label("done"), "Done!")
        self.assertIsNone(field_spec.option_label("missing"))

    def test_unknown_display_hint_rejected(self) -> None:
        with self.assertRaises(ConfigurationError):
            FieldSpec("status", "Status", display="chip")


class TestModuleConfig(unittest.TestCase):
    def test_fields_coerced_from_mappings(self) -> None:
        config = ModuleConfig(key="tasks", table="tasks", singular="Task", plural="Tasks", fields=[{"name": "title", "required": True}])
        self.assertIsInstance(config.fields, tuple)
        self.assertEqual(config.field("title").label, "Title")

    def test_duplicate_field_names_rejected(self) -> None:
        with self.assertRaises(ConfigurationError):
            ModuleConfig(key="t", table="t", singular="T", plural="Ts", fields=(FieldSpec("a", "A"), FieldSpec("a", "A2")))

    def test_search_field_must_be_declared(self) -> None:
        with self.assertRaises(ConfigurationError):
            ModuleConfig(key="t", table="t", singular="T", plural="Ts", fields=(FieldSpec("a", "A"),), search_field="b")

    def test_unknown_field_lookup_raises(self) -> None:
        with self.assertRaises(ConfigurationError):
            _rfis().field("nope")

    def test_configs_are_immutable(self) -> None:
        config = _rfis()
        with self.assertRaises(Exception):
            config.project_scoped = False


class TestDeriveConfig(unittest.TestCase):
    def test_override_never_alters_base(self) -> None:
        base = _rfis()
        before = config_to_dict(base)
        derived = derive_config(base, {"project_scoped": False})
        self.assertFalse(derived.project_scoped)
        self.assertTrue(base.project_scoped)
        self.assertEqual(config_to_dict(base), before)
        self.assertEqual(derived.fields, base.fields)

    def test_fields_replaced_wholesale(self) -> None:
        base = _rfis()
        derived = derive_config(base, {"fields": [FieldSpec("subject", "Topic", required=True)]})
        self.assertEqual(derived.field_names(), ["subject"])
        self.assertEqual(len(base.fields), 5)

    def test_unknown_override_key_rejected(self) -> None:
        with self.assertRaises(ConfigurationError):
            derive_config(_rfis(), {"projectScoped": False})

    def test_empty_overrides_return_base(self) -> None:
        base = _rfis()
        self.assertIs(derive_config(base, {}), base)


class TestDefaults(unittest.TestCase):
    def test_type_defaults(self) -> None:
        config = _rfis()
        self.assertEqual(default_value(config.field("subject")), "")
        self.assertEqual(default_value(config.field("status")), "open")
        self.assertIsNone(default_value(config.field("cost_impact")))
        self.assertIsNone(default_value(config.field("due_date")))
        self.assertIs(default_value(config.field("urgent")), False)

    def test_empty_draft_covers_every_field(self) -> None:
        draft = empty_draft(_rfis())
        self.assertEqual(list(draft.keys()), ["subject", "status", "cost_impact", "due_date", "urgent"])

    def test_draft_from_record_fills_missing_values(self) -> None:
        draft = draft_from_record(_rfis(), {"id": "r1", "subject": "Beam", "status": None})
        self.assertEqual(draft["subject"], "Beam")
        self.assertEqual(draft["status"], "open")
        self.assertNotIn("id", draft)


class TestConfigDict(unittest.TestCase):
    def test_dict_round_trip(self) -> None:
        config = _rfis()
        restored = config_from_dict(config_to_dict(config))
        self.assertEqual(restored, config)

    def test_from_dict_rejects_unknown_keys(self) -> None:
        data = config_to_dict(_rfis())
        data["columns"] = []
        with self.assertRaises(ConfigurationError):
            config_from_dict(data)


if __name__ == "__main__":
    unittest.main()
