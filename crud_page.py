"""Generic list/form page driven by a module configuration."""

from __future__ import annotations

import copy
import logging
from typing import Any

from app.errors import ConfigurationError, CrudError, NotFound, ValidationError
from app.formatting import format_cell
from app.records_validation import validate_draft
from crud_adapter import CrudAdapter, require_scope
from module_config import ModuleConfig, draft_from_record, empty_draft, field_to_dict


logger = logging.getLogger("sitecrud.page")

LOADING = "loading"
LISTING = "listing"
LISTING_ERROR = "listing_error"
EDITING = "editing"
SUBMITTING = "submitting"
SUBMIT_ERROR = "submit_error"

PAGE_STATES = (LOADING, LISTING, LISTING_ERROR, EDITING, SUBMITTING, SUBMIT_ERROR)
_FORM_STATES = (EDITING, SUBMITTING, SUBMIT_ERROR)


def _record_id(record: dict) -> str | None:
    value = record.get("id")
    return None if value is None else str(value)


def _sort_rows(rows: list[dict], column: str, ascending: bool) -> list[dict]:
    present = [r for r in rows if r.get(column) not in (None, "")]
    missing = [r for r in rows if r.get(column) in (None, "")]

    def _key(row: dict):
        value = row.get(column)
        return (0, value) if isinstance(value, (int, float)) and not isinstance(value, bool) else (1, str(value).lower())

    return sorted(present, key=_key, reverse=not ascending) + missing


class CrudPage:
    """State machine for one mounted CRUD page.

    The list cache holds rows in the order the store returned them. Search and
    sort only affect :meth:`visible_records`. ``generation`` counts list
    responses that landed; a response from an older request is dropped.
    """

    def __init__(self, config: ModuleConfig, adapter: CrudAdapter, scope: str | None = None) -> None:
        self.scope = require_scope(config, scope)
        self.config = config
        self.adapter = adapter
        self.state = LOADING
        self.records: list[dict] = []
        self.generation = 0
        self.error: dict | None = None
        self.draft: dict | None = None
        self.editing_id: str | None = None
        self.field_errors: dict[str, str] = {}
        self.pending_delete: str | None = None
        self.search = ""
        self.sort: tuple[str, bool] | None = None
        self._list_seq = 0
        self._list_error: dict | None = None
        self._in_flight: set[str] = set()

    # list

    async def _fetch(self) -> bool:
        self._list_seq += 1
        seq = self._list_seq
        try:
            rows = await self.adapter.list(self.config, self.scope)
        except CrudError:
            if seq != self._list_seq:
                logger.info("page_stale_list_error module=%s seq=%s", self.config.key, seq)
                return False
            raise
        if seq != self._list_seq:
            logger.info("page_stale_list_dropped module=%s seq=%s latest=%s", self.config.key, seq, self._list_seq)
            return False
        self.records = list(rows)
        self.generation += 1
        self._list_error = None
        return True

    async def mount(self) -> str:
        return await self.reload()

    async def reload(self) -> str:
        form_open = self.state in _FORM_STATES
        if not form_open:
            self.state = LOADING
            self.error = None
        try:
            landed = await self._fetch()
        except CrudError as exc:
            logger.warning("page_list_failed module=%s code=%s", self.config.key, exc.code)
            self.records = []
            self.error = self._list_error = exc.to_issue()
            if not form_open:
                self.state = LISTING_ERROR
            return self.state
        if landed and not form_open:
            self.state = LISTING
        return self.state

    async def retry(self) -> str:
        if self.state != LISTING_ERROR:
            return self.state
        return await self.reload()

    def visible_records(self) -> list[dict]:
        rows = self.records
        field = self.config.search_field
        needle = self.search.strip().lower()
        if field and needle:
            rows = [r for r in rows if r.get(field) not in (None, "") and needle in str(r.get(field)).lower()]
        if self.sort:
            rows = _sort_rows(rows, *self.sort)
        return list(rows)

    def set_search(self, text: str | None) -> None:
        self.search = text or ""

    def sort_by(self, name: str, ascending: bool = True) -> None:
        field_spec = self.config.field(name)
        if not field_spec.sortable:
            raise ConfigurationError(f"field is not sortable: {name}", path=name)
        self.sort = (name, bool(ascending))

    def clear_sort(self) -> None:
        self.sort = None

    # form

    def open_new(self) -> bool:
        if self.state == SUBMITTING:
            return False
        self.draft = empty_draft(self.config)
        self.editing_id = None
        self.field_errors = {}
        self.error = None
        self.state = EDITING
        return True

    def open_edit(self, record_id: str) -> bool:
        if self.state == SUBMITTING:
            return False
        record = self._find(record_id)
        if record is None:
            raise NotFound(f"{self.config.singular} not found", path=self.config.key, detail={"id": str(record_id)})
        self.draft = draft_from_record(self.config, record)
        self.editing_id = str(record_id)
        self.field_errors = {}
        self.error = None
        self.state = EDITING
        return True

    def set_field(self, name: str, value: Any) -> None:
        self.config.field(name)
        if self.state not in _FORM_STATES or self.draft is None:
            raise ConfigurationError("no form is open", path=name)
        if self.state == SUBMITTING:
            return
        self.draft[name] = value
        self.field_errors.pop(name, None)
        if self.state == SUBMIT_ERROR:
            self.state = EDITING

    def cancel(self) -> None:
        if self.state == SUBMITTING:
            return
        self.draft = None
        self.editing_id = None
        self.field_errors = {}
        if self.state in _FORM_STATES:
            # a list fetch that failed behind the form still needs a retry
            self.error = self._list_error
            self.state = LISTING_ERROR if self._list_error else LISTING

    async def submit(self) -> bool:
        if self.state == SUBMITTING:
            logger.info("page_duplicate_submit_ignored module=%s", self.config.key)
            return False
        if self.state not in (EDITING, SUBMIT_ERROR) or self.draft is None:
            raise ConfigurationError("no form is open", path=self.config.key)
        creating = self.editing_id is None
        if not creating and self.editing_id in self._in_flight:
            logger.info("page_submit_blocked module=%s id=%s", self.config.key, self.editing_id)
            return False
        issues, clean = validate_draft(self.config, self.draft, for_create=creating, allow_system=False)
        if issues:
            self.field_errors = ValidationError("Record failed validation", issues=issues).field_errors()
            self.state = EDITING
            return False
        self.field_errors = {}
        self.error = None
        self.state = SUBMITTING
        record_id = self.editing_id
        try:
            if creating:
                await self.adapter.create(self.config, self.scope, clean)
            else:
                self._in_flight.add(record_id)
                await self.adapter.update(self.config, record_id, clean)
        except CrudError as exc:
            logger.warning("page_submit_failed module=%s code=%s", self.config.key, exc.code)
            self.error = exc.to_issue()
            self.state = SUBMIT_ERROR
            return False
        finally:
            self._in_flight.discard(record_id)
        self.draft = None
        self.editing_id = None
        try:
            await self._fetch()
        except CrudError as exc:
            self.records = []
            self.error = self._list_error = exc.to_issue()
            self.state = LISTING_ERROR
            return True
        self.state = LISTING
        return True

    # delete

    def _find(self, record_id: str) -> dict | None:
        for record in self.records:
            if _record_id(record) == str(record_id):
                return record
        return None

    def _busy(self, record_id: str) -> bool:
        if record_id in self._in_flight:
            return True
        return self.state == SUBMITTING and self.editing_id == record_id

    def request_delete(self, record_id: str) -> bool:
        """Ask for confirmation; refused while the record has a write in flight."""
        if self._find(record_id) is None:
            raise NotFound(f"{self.config.singular} not found", path=self.config.key, detail={"id": str(record_id)})
        if self._busy(str(record_id)):
            logger.info("page_delete_blocked module=%s id=%s", self.config.key, record_id)
            return False
        self.pending_delete = str(record_id)
        return True

    def cancel_delete(self) -> None:
        self.pending_delete = None

    async def confirm_delete(self) -> bool:
        record_id = self.pending_delete
        self.pending_delete = None
        if record_id is None or self._busy(record_id):
            return False
        index = next((i for i, r in enumerate(self.records) if _record_id(r) == record_id), None)
        if index is None:
            return False
        record = self.records[index]
        generation = self.generation
        self.records = self.records[:index] + self.records[index + 1 :]
        self._in_flight.add(record_id)
        try:
            await self.adapter.delete(self.config, record_id)
        except CrudError as exc:
            logger.warning("page_delete_failed module=%s id=%s code=%s", self.config.key, record_id, exc.code)
            self.error = exc.to_issue()
            if self.generation == generation and self._find(record_id) is None:
                self.records.insert(min(index, len(self.records)), record)
            else:
                logger.info("page_delete_restore_skipped module=%s id=%s", self.config.key, record_id)
            return False
        finally:
            self._in_flight.discard(record_id)
        return True

    def dismiss_error(self) -> None:
        self.error = None
        if self.state == LISTING_ERROR:
            self._list_error = None
            self.state = LISTING
        elif self.state == SUBMIT_ERROR:
            self.state = EDITING

    # view model

    def _columns(self) -> list[dict]:
        columns = []
        for field_spec in self.config.list_fields():
            sorted_dir = None
            if self.sort and self.sort[0] == field_spec.name:
                sorted_dir = "asc" if self.sort[1] else "desc"
            columns.append({"name": field_spec.name, "label": field_spec.label, "type": field_spec.type, "sortable": field_spec.sortable, "sorted": sorted_dir})
        return columns

    def _rows(self, visible: list[dict]) -> list[dict]:
        rows = []
        specs = self.config.list_fields()
        for record in visible:
            cells = []
            for field_spec in specs:
                text, css = format_cell(field_spec, record.get(field_spec.name))
                cells.append({"name": field_spec.name, "text": text, "css": css})
            rows.append({"id": _record_id(record), "cells": cells})
        return rows

    def _form(self) -> dict | None:
        if self.state not in _FORM_STATES or self.draft is None:
            return None
        editing = self.editing_id is not None
        if self.state == SUBMITTING:
            submit_label = "Saving..."
        else:
            submit_label = "Update" if editing else "Create"
        fields = []
        for field_spec in self.config.fields:
            item = field_to_dict(field_spec)
            item["value"] = copy.deepcopy(self.draft.get(field_spec.name))
            item["error"] = self.field_errors.get(field_spec.name)
            fields.append(item)
        return {
            "title": f"Edit {self.config.singular}" if editing else f"New {self.config.singular}",
            "record_id": self.editing_id,
            "fields": fields,
            "submit_label": submit_label,
            "submitting": self.state == SUBMITTING,
        }

    def view(self) -> dict:
        config = self.config
        visible = self.visible_records()
        listing = self.state not in (LOADING, LISTING_ERROR)
        confirm = None
        if self.pending_delete is not None:
            confirm = {
                "record_id": self.pending_delete,
                "title": f"Delete {config.singular}",
                "message": f"Are you sure you want to delete this {config.singular.lower()}? This action cannot be undone.",
            }
        return {
            "module": config.key,
            "title": config.plural,
            "icon": config.icon,
            "scope": self.scope,
            "state": self.state,
            "loading": self.state == LOADING,
            "generation": self.generation,
            "new_label": f"New {config.singular}",
            "search": {
                "enabled": bool(config.search_field),
                "field": config.search_field,
                "placeholder": f"Search {config.plural.lower()}...",
                "value": self.search,
            },
            "columns": self._columns(),
            "rows": self._rows(visible),
            "count_label": f"{len(visible)} of {len(self.records)} records",
            "empty_message": f"No {config.plural.lower()} found." if listing and not visible else None,
            "error": self.error,
            "form": self._form(),
            "confirm_delete": confirm,
        }
