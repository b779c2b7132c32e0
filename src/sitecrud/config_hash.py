"""Canonical JSON and fingerprints for module configurations."""

from __future__ import annotations

import hashlib
import json
from typing import Any


class CanonicalJsonTypeError(TypeError):
    """Raised when a configuration value has no canonical JSON form."""


_SCALARS = (str, bool, int, float, type(None))


def _plain(obj: Any, path: str = "$") -> Any:
    """Copy ``obj`` into JSON-ready data; tuples become lists."""
    if isinstance(obj, _SCALARS):
        return obj
    if isinstance(obj, (list, tuple)):
        return [_plain(item, f"{path}[{idx}]") for idx, item in enumerate(obj)]
    if isinstance(obj, dict):
        bad = next((k for k in obj if not isinstance(k, str)), None)
        if bad is not None:
            raise CanonicalJsonTypeError(f"{path}: configuration keys must be strings, got {type(bad).__name__}")
        return {key: _plain(value, f"{path}.{key}") for key, value in obj.items()}
    raise CanonicalJsonTypeError(f"{path}: {type(obj).__name__} has no canonical form")


def canonical_dumps(obj: Any) -> str:
    # allow_nan=False turns NaN and infinities into ValueError
    return json.dumps(_plain(obj), sort_keys=True, ensure_ascii=False, separators=(",", ":"), allow_nan=False)


def config_hash(config_obj: Any) -> str:
    """Return ``sha256:<hex>`` for a plain-data module configuration."""
    digest = hashlib.sha256(canonical_dumps(config_obj).encode("utf-8")).hexdigest()
    return f"sha256:{digest}"
