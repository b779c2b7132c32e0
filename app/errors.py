"""Error taxonomy for the CRUD engine and its stores."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List


Issue = Dict[str, Any]


@dataclass(eq=False)
class CrudError(Exception):
    message: str
    code: str = "CRUD_ERROR"
    path: str | None = None
    detail: dict | None = None

    def __str__(self) -> str:  # pragma: no cover - simple formatting
        return f"{self.code}: {self.message}"

    def to_issue(self) -> Issue:
        return {"code": self.code, "message": self.message, "path": self.path, "detail": self.detail}


@dataclass(eq=False)
class ValidationError(CrudError):
    code: str = "VALIDATION_FAILED"
    issues: List[Issue] = field(default_factory=list)

    def field_errors(self) -> dict[str, str]:
        errors: dict[str, str] = {}
        for issue in self.issues:
            path = issue.get("path")
            if path and path not in errors:
                errors[path] = issue.get("message") or "Invalid value"
        return errors


@dataclass(eq=False)
class ConfigurationError(CrudError):
    code: str = "CONFIGURATION_ERROR"


@dataclass(eq=False)
class UnknownModuleError(ConfigurationError):
    code: str = "UNKNOWN_MODULE"


@dataclass(eq=False)
class ScopeRequiredError(ConfigurationError):
    code: str = "SCOPE_REQUIRED"


@dataclass(eq=False)
class StoreError(CrudError):
    code: str = "STORE_REJECTED"
    retryable: bool = False


@dataclass(eq=False)
class TransportError(StoreError):
    code: str = "STORE_UNREACHABLE"
    retryable: bool = True


@dataclass(eq=False)
class SchemaMismatchError(StoreError):
    code: str = "SCHEMA_MISMATCH"
    table: str | None = None
    column: str | None = None


@dataclass(eq=False)
class NotFound(StoreError):
    code: str = "RECORD_NOT_FOUND"
    retryable: bool = True
