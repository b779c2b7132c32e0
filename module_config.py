"""Declarative module configuration: field schema, scoping and derivation."""

from __future__ import annotations

import copy
import dataclasses
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Tuple

from app.errors import ConfigurationError


FIELD_TYPES = ("text", "number", "currency", "date", "select", "textarea", "boolean", "relation")
DISPLAY_HINTS = (None, "status", "badge")

class _Unset:
    def __repr__(self) -> str:
        return "<unset>"

    def __copy__(self):
        return self

    def __deepcopy__(self, memo):
        return self


_UNSET = _Unset()


def _title(value: str) -> str:
    return value.replace("_", " ").title()


def _normalize_options(options: Iterable[Any] | None) -> Tuple[Tuple[str, str], ...]:
    normalized = []
    for opt in options or ():
        if isinstance(opt, dict):
            value = opt.get("value")
            normalized.append((value, opt.get("label") or _title(str(value))))
        elif isinstance(opt, (list, tuple)) and len(opt) == 2:
            normalized.append((opt[0], opt[1]))
        else:
            normalized.append((opt, _title(str(opt))))
    return tuple(normalized)


@dataclass(frozen=True)
class FieldSpec:
    name: str
    label: str
    type: str = "text"
    required: bool = False
    options: Tuple[Tuple[str, str], ...] = ()
    default: Any = _UNSET
    placeholder: str | None = None
    sortable: bool = False
    in_list: bool = True
    display: str | None = None
    span: int = 1

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name:
            raise ConfigurationError("field name must be a non-empty string", path="name")
        if self.type not in FIELD_TYPES:
            raise ConfigurationError(f"unsupported field type: {self.type}", path=f"{self.name}.type")
        if self.display not in DISPLAY_HINTS:
            raise ConfigurationError(f"unsupported display hint: {self.display}", path=f"{self.name}.display")
        object.__setattr__(self, "options", _normalize_options(self.options))

    @property
    def has_default(self) -> bool:
        return self.default is not _UNSET

    def option_values(self) -> list:
        return [value for value, _ in self.options]

    def option_label(self, value: Any) -> str | None:
        for opt_value, label in self.options:
            if opt_value == value:
                return label
        return None


@dataclass(frozen=True)
class ModuleConfig:
    key: str
    table: str
    singular: str
    plural: str
    project_scoped: bool = False
    fields: Tuple[FieldSpec, ...] = ()
    icon: str | None = None
    search_field: str | None = None
    default_sort: Tuple[str, bool] | None = None
    created_by_column: str | None = "created_by"

    def __post_init__(self) -> None:
        if not isinstance(self.table, str) or not self.table:
            raise ConfigurationError("table must name exactly one collection", path=f"{self.key}.table")
        fields = tuple(_coerce_field(f) for f in self.fields)
        names = [f.name for f in fields]
        if len(names) != len(set(names)):
            raise ConfigurationError("duplicate field names", path=f"{self.key}.fields")
        object.__setattr__(self, "fields", fields)
        if self.search_field is not None and self.search_field not in names:
            raise ConfigurationError("search_field must name a declared field", path=f"{self.key}.search_field")
        if self.default_sort is not None:
            column, ascending = self.default_sort
            object.__setattr__(self, "default_sort", (str(column), bool(ascending)))

    def field(self, name: str) -> FieldSpec:
        for field_spec in self.fields:
            if field_spec.name == name:
                return field_spec
        raise ConfigurationError(f"unknown field: {name}", path=name)

    def field_names(self) -> list[str]:
        return [f.name for f in self.fields]

    def list_fields(self) -> list[FieldSpec]:
        return [f for f in self.fields if f.in_list]


def _coerce_field(value: Any) -> FieldSpec:
    if isinstance(value, FieldSpec):
        return value
    if isinstance(value, dict):
        data = dict(value)
        if "label" not in data and isinstance(data.get("name"), str):
            data["label"] = _title(data["name"])
        allowed = {f.name for f in dataclasses.fields(FieldSpec)}
        unknown = sorted(set(data) - allowed)
        if unknown:
            raise ConfigurationError(f"unknown field attributes: {unknown}", path=str(data.get("name")))
        return FieldSpec(**data)
    raise ConfigurationError("field must be a FieldSpec or mapping", path="fields")


_OVERRIDABLE = {f.name for f in dataclasses.fields(ModuleConfig)}


def derive_config(base: ModuleConfig, overrides: Dict[str, Any] | None = None) -> ModuleConfig:
    """Return a new configuration with ``overrides`` replacing base keys.

    ``fields`` is replaced wholesale when present; there is no per-field merge.
    The base configuration is never touched.
    """
    if not overrides:
        return base
    unknown = sorted(set(overrides) - _OVERRIDABLE)
    if unknown:
        raise ConfigurationError(f"unknown configuration keys: {unknown}", path=base.key)
    changes = copy.deepcopy(dict(overrides))
    if "fields" in changes:
        changes["fields"] = tuple(changes["fields"] or ())
    if isinstance(changes.get("default_sort"), list):
        changes["default_sort"] = tuple(changes["default_sort"])
    return dataclasses.replace(base, **changes)


def default_value(field_spec: FieldSpec) -> Any:
    if field_spec.has_default:
        return copy.deepcopy(field_spec.default)
    if field_spec.type in ("text", "textarea", "select"):
        return ""
    if field_spec.type == "boolean":
        return False
    return None


def empty_draft(config: ModuleConfig) -> dict:
    return {field_spec.name: default_value(field_spec) for field_spec in config.fields}


def draft_from_record(config: ModuleConfig, record: dict) -> dict:
    draft = {}
    for field_spec in config.fields:
        value = record.get(field_spec.name)
        draft[field_spec.name] = default_value(field_spec) if value is None else copy.deepcopy(value)
    return draft


def field_to_dict(field_spec: FieldSpec) -> dict:
    data = {
        "name": field_spec.name,
        "label": field_spec.label,
        "type": field_spec.type,
        "required": field_spec.required,
        "options": [{"value": value, "label": label} for value, label in field_spec.options],
        "placeholder": field_spec.placeholder,
        "sortable": field_spec.sortable,
        "in_list": field_spec.in_list,
        "display": field_spec.display,
        "span": field_spec.span,
    }
    if field_spec.has_default:
        data["default"] = field_spec.default
    return data


def config_to_dict(config: ModuleConfig) -> dict:
    return {
        "key": config.key,
        "table": config.table,
        "singular": config.singular,
        "plural": config.plural,
        "project_scoped": config.project_scoped,
        "fields": [field_to_dict(f) for f in config.fields],
        "icon": config.icon,
        "search_field": config.search_field,
        "default_sort": list(config.default_sort) if config.default_sort else None,
        "created_by_column": config.created_by_column,
    }


def config_from_dict(data: dict) -> ModuleConfig:
    if not isinstance(data, dict):
        raise ConfigurationError("configuration must be an object")
    unknown = sorted(set(data) - _OVERRIDABLE)
    if unknown:
        raise ConfigurationError(f"unknown configuration keys: {unknown}", path=str(data.get("key")))
    values = dict(data)
    values["fields"] = tuple(values.get("fields") or ())
    if isinstance(values.get("default_sort"), list):
        values["default_sort"] = tuple(values["default_sort"])
    return ModuleConfig(**values)
