"""Route table binding page paths to module configurations."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any, Dict


_COMPANY_WIDE = {"project_scoped": False}


@dataclass(frozen=True)
class RouteBinding:
    path: str
    key: str
    overrides: Dict[str, Any] = field(default_factory=dict)

    @property
    def pattern(self) -> re.Pattern:
        return _compile(self.path)


@lru_cache(maxsize=None)
def _compile(template: str) -> re.Pattern:
    parts = []
    for segment in template.strip("/").split("/"):
        if segment.startswith("{") and segment.endswith("}"):
            parts.append(f"(?P<{segment[1:-1]}>[^/]+)")
        else:
            parts.append(re.escape(segment))
    return re.compile("^/" + "/".join(parts) + "/?$")


def _project(slug: str, key: str) -> RouteBinding:
    return RouteBinding(f"/projects/{{project_id}}/{slug}", key)


ROUTES = (
    # company level
    RouteBinding("/rfis", "rfis", _COMPANY_WIDE),
    RouteBinding("/submittals", "submittals", _COMPANY_WIDE),
    RouteBinding("/budgets", "budget", _COMPANY_WIDE),
    RouteBinding("/payments", "payments", _COMPANY_WIDE),
    RouteBinding("/meeting-minutes", "meetings", _COMPANY_WIDE),
    RouteBinding("/action-plans", "action_plans", _COMPANY_WIDE),
    RouteBinding("/incidents", "incidents", _COMPANY_WIDE),
    RouteBinding("/inspections", "inspections", _COMPANY_WIDE),
    RouteBinding("/observations", "observations", _COMPANY_WIDE),
    RouteBinding("/correspondence", "correspondence", _COMPANY_WIDE),
    RouteBinding("/company-schedule", "company_schedule", _COMPANY_WIDE),
    RouteBinding("/conversations", "conversations", _COMPANY_WIDE),
    RouteBinding("/timecards", "timecards", _COMPANY_WIDE),
    RouteBinding("/resource-planning", "crews", {"project_scoped": False, "plural": "Resources"}),
    RouteBinding("/company-documents", "company_documents"),
    RouteBinding("/directory", "directory"),
    RouteBinding("/cost-catalog", "cost_catalog"),
    RouteBinding("/workflows", "workflows"),
    # project level
    _project("rfis", "rfis"),
    _project("submittals", "submittals"),
    _project("budget", "budget"),
    _project("commitments", "commitments"),
    _project("commitment-cos", "commitment_cos"),
    _project("contract-cos", "contract_cos"),
    _project("change-events", "change_events"),
    _project("prime-contracts", "prime_contracts"),
    _project("direct-costs", "direct_costs"),
    _project("owner-invoices", "owner_invoices"),
    _project("sub-invoices", "sub_invoices"),
    _project("payments", "payments"),
    _project("funding", "funding"),
    _project("estimating", "estimating"),
    _project("bidding", "project_bidding"),
    _project("meetings", "meetings"),
    _project("daily-logs", "daily_logs"),
    _project("punch-list", "punch_list"),
    _project("inspections", "inspections"),
    _project("observations", "observations"),
    _project("incidents", "incidents"),
    _project("action-plans", "action_plans"),
    _project("coordination-issues", "coordination_issues"),
    _project("correspondence", "correspondence"),
    _project("emails", "emails"),
    _project("transmittals", "transmittals"),
    _project("documents", "documents"),
    _project("drawings", "drawings"),
    _project("specifications", "specifications"),
    _project("models", "models"),
    _project("photos", "photos"),
    _project("forms", "forms"),
    _project("instructions", "instructions"),
    _project("materials", "materials"),
    _project("equipment", "equipment"),
    _project("schedule", "schedule"),
    _project("tasks", "tasks"),
    _project("timesheets", "timesheets"),
    _project("tm-tickets", "tm_tickets"),
    _project("warranties", "warranties"),
    _project("directory", "project_directory"),
    _project("workflows", "project_workflows"),
)


def match(path: str, routes=ROUTES) -> tuple[RouteBinding, dict] | None:
    path = "/" + (path or "").strip("/")
    for binding in routes:
        found = binding.pattern.match(path)
        if found:
            return binding, found.groupdict()
    return None


def resolve(path: str, registry, routes=ROUTES):
    """Return ``(config, scope)`` for a concrete page path.

    Raises ``LookupError`` when no route matches.
    """
    found = match(path, routes)
    if found is None:
        raise LookupError(f"no page bound to {path}")
    binding, params = found
    config = registry.derive(binding.key, binding.overrides)
    scope = params.get("project_id") if config.project_scoped else None
    return config, scope
