import os
import sys
import unittest
from decimal import Decimal


ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
SRC = os.path.join(ROOT, "src")
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)
if SRC not in sys.path:
    sys.path.insert(0, SRC)

from app.errors import ValidationError
from app.records_validation import coerce_filters, ensure_valid, validate_draft
from module_config import FieldSpec, ModuleConfig


CONFIG = ModuleConfig(
    key="commitments",
    table="commitments",
    singular="Commitment",
    plural="Commitments",
    project_scoped=True,
    fields=(
        FieldSpec("title", "Title", required=True),
        FieldSpec("status", "Status", "select", options=("draft", "approved")),
        FieldSpec("amount", "Amount", "currency"),
        FieldSpec("start_date", "Start Date", "date"),
        FieldSpec("retainage", "Retainage", "boolean"),
        FieldSpec("vendor_id", "Vendor", "relation"),
        FieldSpec("notes", "Notes", "textarea"),
    ),
)


def _codes(issues: list[dict]) -> dict:
    return {issue["path"]: issue["code"] for issue in issues}


class TestValidateDraft(unittest.TestCase):
    def test_required_empty_and_whitespace(self) -> None:
        for value in ("", "   ", None):
            issues, _ = validate_draft(CONFIG, {"title": value}, for_create=True)
            self.assertEqual(_codes(issues), {"title": "REQUIRED_FIELD"}, value)

    def test_required_missing_on_create(self) -> None:
        issues, _ = validate_draft(CONFIG, {}, for_create=True)
        self.assertEqual(issues[0]["message"], "Title is required")

    def test_update_only_checks_present_fields(self) -> None:
        issues, _ = validate_draft(CONFIG, {"status": "approved"}, for_create=False)
        self.assertEqual(issues, [])
        issues, _ = validate_draft(CONFIG, {"title": ""}, for_create=False)
        self.assertEqual(_codes(issues), {"title": "REQUIRED_FIELD"})

    def test_numeric_strings_coerced(self) -> None:
        issues, clean = validate_draft(CONFIG, {"title": "Steel", "amount": "$12,500"}, for_create=True)
        self.assertEqual(issues, [])
        self.assertEqual(clean["amount"], 12500)
        _, clean = validate_draft(CONFIG, {"title": "Steel", "amount": "99.5"}, for_create=True)
        self.assertEqual(clean["amount"], 99.5)

    def test_type_errors(self) -> None:
        data = {"title": "Steel", "amount": "lots", "start_date": "2024-13-40", "retainage": "maybe", "vendor_id": 3.5, "notes": 7}
        issues, _ = validate_draft(CONFIG, data, for_create=True)
        self.assertEqual(
            _codes(issues),
            {
                "amount": "TYPE_MISMATCH",
                "start_date": "INVALID_DATE",
                "retainage": "TYPE_MISMATCH",
                "vendor_id": "TYPE_MISMATCH",
                "notes": "TYPE_MISMATCH",
            },
        )

    def test_boolean_strings_coerced(self) -> None:
        _, clean = validate_draft(CONFIG, {"title": "Steel", "retainage": "true"}, for_create=True)
        self.assertIs(clean["retainage"], True)

    def test_select_must_match_option(self) -> None:
        issues, _ = validate_draft(CONFIG, {"title": "Steel", "status": "void"}, for_create=True)
        self.assertEqual(_codes(issues), {"status": "INVALID_OPTION"})

    def test_blank_optional_values_pass(self) -> None:
        issues, clean = validate_draft(CONFIG, {"title": "Steel", "status": "", "amount": None}, for_create=True)
        self.assertEqual(issues, [])
        self.assertEqual(clean["status"], "")

    def test_unknown_fields_rejected_but_system_columns_allowed(self) -> None:
        issues, _ = validate_draft(CONFIG, {"title": "Steel", "project_id": "p1", "created_by": "Ada", "colour": "red"}, for_create=True)
        self.assertEqual(_codes(issues), {"colour": "UNKNOWN_FIELD"})
        issues, _ = validate_draft(CONFIG, {"title": "Steel", "project_id": "p1"}, for_create=True, allow_system=False)
        self.assertEqual(_codes(issues), {"project_id": "UNKNOWN_FIELD"})

    def test_payload_must_be_object(self) -> None:
        issues, clean = validate_draft(CONFIG, ["title"], for_create=True)
        self.assertEqual(issues[0]["code"], "INVALID_PAYLOAD")
        self.assertEqual(clean, {})

    def test_ensure_valid_raises_with_field_errors(self) -> None:
        with self.assertRaises(ValidationError) as ctx:
            ensure_valid(CONFIG, {"title": "", "amount": "x"}, for_create=True)
        self.assertEqual(set(ctx.exception.field_errors()), {"title", "amount"})

    def test_decimal_amounts_accepted(self) -> None:
        issues, clean = validate_draft(CONFIG, {"title": "Steel", "amount": Decimal("12500.00")}, for_create=True)
        self.assertEqual(issues, [])
        self.assertEqual(clean["amount"], 12500)
        issues, clean = validate_draft(CONFIG, {"amount": Decimal("99.5")}, for_create=False)
        self.assertEqual(clean["amount"], 99.5)
        issues, _ = validate_draft(CONFIG, {"amount": Decimal("NaN")}, for_create=False)
        self.assertEqual(_codes(issues), {"amount": "TYPE_MISMATCH"})


class TestCoerceFilters(unittest.TestCase):
    def test_values_take_field_types(self) -> None:
        out = coerce_filters(CONFIG, {"retainage": "true", "amount": "5", "title": "Steel", "id": "c1"})
        self.assertEqual(out, {"retainage": True, "amount": 5, "title": "Steel", "id": "c1"})

    def test_bad_values_raise(self) -> None:
        with self.assertRaises(ValidationError) as ctx:
            coerce_filters(CONFIG, {"retainage": "maybe", "start_date": "13/45"})
        self.assertEqual(set(ctx.exception.field_errors()), {"retainage", "start_date"})


if __name__ == "__main__":
    unittest.main()
