"""sitecrud kernel utilities."""

from .config_hash import CanonicalJsonTypeError, canonical_dumps, config_hash

__all__ = [
    "CanonicalJsonTypeError",
    "canonical_dumps",
    "config_hash",
]
