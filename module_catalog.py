"""Built-in module configurations for the construction project manager."""

from __future__ import annotations

from module_config import FieldSpec, ModuleConfig
from module_registry import ModuleRegistry


def _f(name: str, label: str, type: str = "text", **kwargs) -> FieldSpec:
    return FieldSpec(name=name, label=label, type=type, **kwargs)


def _status(*values: str, default: str | None = None) -> FieldSpec:
    kwargs = {"default": default} if default is not None else {}
    return FieldSpec(name="status", label="Status", type="select", options=values, display="status", **kwargs)


def _notes(name: str = "notes", label: str = "Notes") -> FieldSpec:
    return FieldSpec(name=name, label=label, type="textarea", in_list=False, span=2)


_PRIORITY = _f("priority", "Priority", "select", options=("low", "medium", "high", "critical"), display="badge")


RFIS = ModuleConfig(
    key="rfis",
    table="rfis",
    singular="RFI",
    plural="RFIs",
    project_scoped=True,
    icon="help-circle",
    search_field="subject",
    fields=(
        _f("number", "Number", sortable=True),
        _f("subject", "Subject", required=True, span=2),
        _f("question", "Question", "textarea", in_list=False, span=2),
        _f("answer", "Answer", "textarea", in_list=False, span=2),
        _status("draft", "open", "answered", "closed", default="open"),
        _PRIORITY,
        _f("assigned_to", "Assigned To"),
        _f("ball_in_court", "Ball In Court"),
        _f("due_date", "Due Date", "date", sortable=True),
    ),
)

SUBMITTALS = ModuleConfig(
    key="submittals",
    table="submittals",
    singular="Submittal",
    plural="Submittals",
    project_scoped=True,
    icon="file-check",
    search_field="title",
    fields=(
        _f("number", "Number", sortable=True),
        _f("title", "Title", required=True, span=2),
        _f("spec_section", "Spec Section"),
        _status("draft", "submitted", "approved", "rejected", "resubmit", default="draft"),
        _f("submitted_by", "Submitted By"),
        _f("assigned_to", "Assigned To"),
        _f("due_date", "Due Date", "date", sortable=True),
        _f("approved_date", "Approved Date", "date", in_list=False),
        _notes("description", "Description"),
    ),
)

BUDGET = ModuleConfig(
    key="budget",
    table="budgets",
    singular="Budget Line",
    plural="Budget",
    project_scoped=True,
    icon="wallet",
    search_field="description",
    created_by_column=None,
    fields=(
        _f("code", "Cost Code", required=True, sortable=True),
        _f("description", "Description", required=True),
        _f("category", "Category", "select", options=("labor", "material", "equipment", "subcontract", "other")),
        _f("original_amount", "Original", "currency", sortable=True),
        _f("revised_amount", "Revised", "currency"),
        _f("committed_amount", "Committed", "currency"),
        _f("actual_amount", "Actual", "currency"),
    ),
)

COMMITMENTS = ModuleConfig(
    key="commitments",
    table="commitments",
    singular="Commitment",
    plural="Commitments",
    project_scoped=True,
    icon="handshake",
    search_field="title",
    fields=(
        _f("number", "Number"),
        _f("title", "Title", required=True),
        _f("vendor", "Vendor", required=True),
        _f("contract_type", "Type", "select", options=("subcontract", "purchase_order")),
        _status("draft", "out for signature", "executed", "void", default="draft"),
        _f("original_amount", "Amount", "currency", sortable=True),
        _f("executed_date", "Executed", "date"),
    ),
)

COMMITMENT_COS = ModuleConfig(
    key="commitment_cos",
    table="commitment_change_orders",
    singular="Commitment Change Order",
    plural="Commitment Change Orders",
    project_scoped=True,
    icon="git-pull-request",
    search_field="title",
    fields=(
        _f("number", "Number"),
        _f("title", "Title", required=True),
        _f("vendor", "Vendor"),
        _f("commitment_id", "Commitment", "relation"),
        _status("draft", "pending", "approved", "rejected", "void", default="draft"),
        _f("amount", "Amount", "currency", sortable=True),
        _f("approved_date", "Approved", "date"),
        _notes("reason", "Reason"),
    ),
)

CONTRACT_COS = ModuleConfig(
    key="contract_cos",
    table="contract_change_orders",
    singular="Contract Change Order",
    plural="Contract Change Orders",
    project_scoped=True,
    icon="file-diff",
    search_field="title",
    fields=(
        _f("number", "Number"),
        _f("title", "Title", required=True),
        _f("contract_id", "Prime Contract", "relation"),
        _status("draft", "pending", "approved", "rejected", "void", default="draft"),
        _f("amount", "Amount", "currency", sortable=True),
        _f("approved_date", "Approved", "date"),
        _notes("reason", "Reason"),
    ),
)

CHANGE_EVENTS = ModuleConfig(
    key="change_events",
    table="change_events",
    singular="Change Event",
    plural="Change Events",
    project_scoped=True,
    icon="zap",
    search_field="title",
    fields=(
        _f("number", "Number"),
        _f("title", "Title", required=True),
        _f("scope", "Scope", "select", options=("in scope", "out of scope", "tbd")),
        _status("open", "pending", "closed", "void", default="open"),
        _f("estimated_cost", "Estimated Cost", "currency"),
        _notes("description", "Description"),
    ),
)

PRIME_CONTRACTS = ModuleConfig(
    key="prime_contracts",
    table="prime_contracts",
    singular="Prime Contract",
    plural="Prime Contracts",
    project_scoped=True,
    icon="file-signature",
    search_field="title",
    fields=(
        _f("number", "Number"),
        _f("title", "Title", required=True),
        _f("owner_name", "Owner"),
        _status("draft", "out for signature", "executed", "terminated", default="draft"),
        _f("original_value", "Original Value", "currency"),
        _f("executed_date", "Executed", "date"),
    ),
)

DIRECT_COSTS = ModuleConfig(
    key="direct_costs",
    table="direct_costs",
    singular="Direct Cost",
    plural="Direct Costs",
    project_scoped=True,
    icon="receipt",
    search_field="description",
    fields=(
        _f("cost_date", "Date", "date", required=True, sortable=True),
        _f("vendor", "Vendor"),
        _f("description", "Description", required=True),
        _f("cost_code", "Cost Code"),
        _f("cost_type", "Type", "select", options=("invoice", "expense", "payroll")),
        _f("amount", "Amount", "currency", required=True),
    ),
)

OWNER_INVOICES = ModuleConfig(
    key="owner_invoices",
    table="owner_invoices",
    singular="Owner Invoice",
    plural="Owner Invoices",
    project_scoped=True,
    icon="file-text",
    fields=(
        _f("number", "Number", required=True),
        _f("period_end", "Period End", "date", sortable=True),
        _status("draft", "submitted", "approved", "paid", default="draft"),
        _f("amount", "Amount", "currency"),
        _f("retainage", "Retainage", "currency"),
    ),
)

SUB_INVOICES = ModuleConfig(
    key="sub_invoices",
    table="subcontractor_invoices",
    singular="Subcontractor Invoice",
    plural="Subcontractor Invoices",
    project_scoped=True,
    icon="file-input",
    search_field="vendor",
    fields=(
        _f("number", "Number", required=True),
        _f("vendor", "Vendor", required=True),
        _f("commitment_id", "Commitment", "relation"),
        _f("period_end", "Period End", "date"),
        _status("received", "under review", "approved", "paid", "rejected", default="received"),
        _f("amount", "Amount", "currency"),
    ),
)

PAYMENTS = ModuleConfig(
    key="payments",
    table="payments",
    singular="Payment",
    plural="Payments",
    project_scoped=True,
    icon="credit-card",
    search_field="payee",
    fields=(
        _f("payment_date", "Date", "date", required=True, sortable=True),
        _f("payee", "Payee", required=True),
        _f("method", "Method", "select", options=("check", "ach", "wire", "card")),
        _f("reference", "Reference"),
        _status("pending", "cleared", "void", default="pending"),
        _f("amount", "Amount", "currency", required=True),
    ),
)

FUNDING = ModuleConfig(
    key="funding",
    table="funding_sources",
    singular="Funding Source",
    plural="Funding",
    project_scoped=True,
    icon="landmark",
    fields=(
        _f("source", "Source", required=True),
        _f("funding_type", "Type", "select", options=("equity", "loan", "grant", "owner")),
        _f("amount", "Amount", "currency"),
        _f("drawn_to_date", "Drawn", "currency"),
        _status("committed", "active", "exhausted", default="committed"),
    ),
)

ESTIMATING = ModuleConfig(
    key="estimating",
    table="estimates",
    singular="Estimate",
    plural="Estimates",
    project_scoped=True,
    icon="calculator",
    search_field="name",
    fields=(
        _f("name", "Name", required=True),
        _f("revision", "Revision", "number"),
        _status("draft", "in review", "approved", default="draft"),
        _f("total", "Total", "currency"),
        _f("due_date", "Due", "date"),
    ),
)

PROJECT_BIDDING = ModuleConfig(
    key="project_bidding",
    table="bid_packages",
    singular="Bid Package",
    plural="Bidding",
    project_scoped=True,
    icon="gavel",
    search_field="name",
    fields=(
        _f("name", "Package", required=True),
        _f("trade", "Trade"),
        _f("bid_due", "Bid Due", "date", sortable=True),
        _status("draft", "out to bid", "leveling", "awarded", default="draft"),
        _f("awarded_to", "Awarded To"),
        _f("awarded_amount", "Awarded Amount", "currency"),
    ),
)

MEETINGS = ModuleConfig(
    key="meetings",
    table="meeting_minutes",
    singular="Meeting",
    plural="Meetings",
    project_scoped=True,
    icon="users",
    search_field="title",
    default_sort=("meeting_date", False),
    fields=(
        _f("number", "Number"),
        _f("title", "Title", required=True),
        _f("meeting_date", "Date", "date", required=True, sortable=True),
        _f("location", "Location"),
        _status("scheduled", "held", "minutes issued", "cancelled", default="scheduled"),
        _notes("agenda", "Agenda"),
        _notes(),
    ),
)

DAILY_LOGS = ModuleConfig(
    key="daily_logs",
    table="daily_logs",
    singular="Daily Log",
    plural="Daily Logs",
    project_scoped=True,
    icon="notebook",
    default_sort=("log_date", False),
    fields=(
        _f("log_date", "Date", "date", required=True, sortable=True),
        _f("weather", "Weather", "select", options=("clear", "cloudy", "rain", "snow", "wind")),
        _f("manpower", "Manpower", "number"),
        _f("delays", "Delays", "boolean"),
        _notes("work_performed", "Work Performed"),
    ),
)

PUNCH_LIST = ModuleConfig(
    key="punch_list",
    table="punch_list_items",
    singular="Punch Item",
    plural="Punch List",
    project_scoped=True,
    icon="list-checks",
    search_field="title",
    fields=(
        _f("number", "Number"),
        _f("title", "Title", required=True),
        _f("location", "Location"),
        _f("assigned_to", "Assigned To"),
        _status("open", "ready for review", "closed", default="open"),
        _PRIORITY,
        _f("due_date", "Due", "date", sortable=True),
    ),
)

INSPECTIONS = ModuleConfig(
    key="inspections",
    table="inspections",
    singular="Inspection",
    plural="Inspections",
    project_scoped=True,
    icon="clipboard-check",
    search_field="title",
    fields=(
        _f("title", "Title", required=True),
        _f("inspection_type", "Type", "select", options=("safety", "quality", "municipal", "owner")),
        _f("inspector", "Inspector"),
        _f("inspection_date", "Date", "date", sortable=True),
        _f("result", "Result", "select", options=("pass", "fail", "conditional"), display="status"),
        _status("scheduled", "in progress", "completed", default="scheduled"),
    ),
)

OBSERVATIONS = ModuleConfig(
    key="observations",
    table="observations",
    singular="Observation",
    plural="Observations",
    project_scoped=True,
    icon="eye",
    search_field="title",
    fields=(
        _f("title", "Title", required=True),
        _f("observation_type", "Type", "select", options=("safety", "quality", "commissioning", "environmental")),
        _f("location", "Location"),
        _f("assigned_to", "Assigned To"),
        _status("open", "requires action", "closed", default="open"),
        _f("due_date", "Due", "date"),
        _notes("description", "Description"),
    ),
)

INCIDENTS = ModuleConfig(
    key="incidents",
    table="incidents",
    singular="Incident",
    plural="Incidents",
    project_scoped=True,
    icon="alert-triangle",
    search_field="title",
    fields=(
        _f("title", "Title", required=True),
        _f("incident_date", "Date", "date", required=True, sortable=True),
        _f("severity", "Severity", "select", options=("minor", "moderate", "serious", "critical"), display="badge"),
        _f("recordable", "OSHA Recordable", "boolean"),
        _status("reported", "investigating", "corrective action", "closed", default="reported"),
        _notes("description", "Description"),
    ),
)

ACTION_PLANS = ModuleConfig(
    key="action_plans",
    table="action_plans",
    singular="Action Plan",
    plural="Action Plans",
    project_scoped=True,
    icon="target",
    search_field="title",
    fields=(
        _f("title", "Title", required=True),
        _f("owner", "Owner"),
        _status("not started", "in progress", "completed", "on hold", default="not started"),
        _f("target_date", "Target Date", "date", sortable=True),
        _notes("description", "Description"),
    ),
)

COORDINATION_ISSUES = ModuleConfig(
    key="coordination_issues",
    table="coordination_issues",
    singular="Coordination Issue",
    plural="Coordination Issues",
    project_scoped=True,
    icon="layers",
    search_field="title",
    fields=(
        _f("title", "Title", required=True),
        _f("discipline", "Discipline", "select", options=("architectural", "structural", "mep", "civil")),
        _f("assigned_to", "Assigned To"),
        _status("open", "in progress", "resolved", "closed", default="open"),
        _PRIORITY,
        _f("due_date", "Due", "date"),
    ),
)

CORRESPONDENCE = ModuleConfig(
    key="correspondence",
    table="correspondence",
    singular="Correspondence",
    plural="Correspondence",
    project_scoped=True,
    icon="mail",
    search_field="subject",
    fields=(
        _f("subject", "Subject", required=True),
        _f("correspondence_type", "Type", "select", options=("letter", "notice", "memo", "transmittal")),
        _f("from_party", "From"),
        _f("to_party", "To"),
        _f("sent_date", "Sent", "date", sortable=True),
        _status("draft", "sent", "received", "closed", default="draft"),
        _notes("body", "Body"),
    ),
)

EMAILS = ModuleConfig(
    key="emails",
    table="project_emails",
    singular="Email",
    plural="Emails",
    project_scoped=True,
    icon="at-sign",
    search_field="subject",
    fields=(
        _f("subject", "Subject", required=True),
        _f("sender", "From"),
        _f("recipients", "To"),
        _f("sent_at", "Sent", "date", sortable=True),
        _notes("body", "Body"),
    ),
)

TRANSMITTALS = ModuleConfig(
    key="transmittals",
    table="transmittals",
    singular="Transmittal",
    plural="Transmittals",
    project_scoped=True,
    icon="send",
    search_field="subject",
    fields=(
        _f("number", "Number"),
        _f("subject", "Subject", required=True),
        _f("sent_to", "Sent To"),
        _f("sent_date", "Sent", "date"),
        _f("purpose", "Purpose", "select", options=("for approval", "for review", "for record", "for construction")),
        _status("draft", "sent", "acknowledged", default="draft"),
    ),
)

DOCUMENTS = ModuleConfig(
    key="documents",
    table="documents",
    singular="Document",
    plural="Documents",
    project_scoped=True,
    icon="folder",
    search_field="name",
    created_by_column="uploaded_by",
    fields=(
        _f("name", "Name", required=True),
        _f("category", "Category", "select", options=("contract", "permit", "report", "photo", "other")),
        _f("file_url", "File URL", in_list=False),
        _f("version", "Version"),
        _notes("description", "Description"),
    ),
)

COMPANY_DOCUMENTS = ModuleConfig(
    key="company_documents",
    table="company_documents",
    singular="Company Document",
    plural="Company Documents",
    project_scoped=False,
    icon="archive",
    search_field="name",
    created_by_column="uploaded_by",
    fields=(
        _f("name", "Name", required=True),
        _f("category", "Category", "select", options=("policy", "template", "insurance", "license", "other")),
        _f("file_url", "File URL", in_list=False),
        _f("expires_on", "Expires", "date"),
    ),
)

DRAWINGS = ModuleConfig(
    key="drawings",
    table="drawings",
    singular="Drawing",
    plural="Drawings",
    project_scoped=True,
    icon="pen-tool",
    search_field="title",
    fields=(
        _f("number", "Number", required=True, sortable=True),
        _f("title", "Title", required=True),
        _f("discipline", "Discipline", "select", options=("architectural", "structural", "mechanical", "electrical", "plumbing", "civil")),
        _f("revision", "Revision"),
        _f("issued_date", "Issued", "date"),
        _f("drawing_set_id", "Drawing Set", "relation"),
    ),
)

SPECIFICATIONS = ModuleConfig(
    key="specifications",
    table="specifications",
    singular="Specification",
    plural="Specifications",
    project_scoped=True,
    icon="book-open",
    search_field="title",
    fields=(
        _f("section_number", "Section", required=True, sortable=True),
        _f("title", "Title", required=True),
        _f("division", "Division"),
        _f("revision", "Revision"),
        _f("issued_date", "Issued", "date"),
    ),
)

MODELS = ModuleConfig(
    key="models",
    table="bim_models",
    singular="Model",
    plural="Models",
    project_scoped=True,
    icon="box",
    search_field="name",
    created_by_column="uploaded_by",
    fields=(
        _f("name", "Name", required=True),
        _f("discipline", "Discipline"),
        _f("version", "Version"),
        _f("file_url", "File URL", in_list=False),
    ),
)

PHOTOS = ModuleConfig(
    key="photos",
    table="photos",
    singular="Photo",
    plural="Photos",
    project_scoped=True,
    icon="camera",
    search_field="caption",
    created_by_column="uploaded_by",
    fields=(
        _f("caption", "Caption", required=True),
        _f("album", "Album"),
        _f("taken_on", "Taken", "date", sortable=True),
        _f("location", "Location"),
        _f("file_url", "File URL", in_list=False),
    ),
)

FORMS = ModuleConfig(
    key="forms",
    table="project_forms",
    singular="Form",
    plural="Forms",
    project_scoped=True,
    icon="clipboard",
    search_field="name",
    fields=(
        _f("name", "Name", required=True),
        _f("form_type", "Type", "select", options=("safety", "quality", "checklist", "permit")),
        _f("submitted_on", "Submitted", "date"),
        _status("draft", "submitted", "approved", default="draft"),
    ),
)

INSTRUCTIONS = ModuleConfig(
    key="instructions",
    table="site_instructions",
    singular="Instruction",
    plural="Instructions",
    project_scoped=True,
    icon="message-square",
    search_field="subject",
    fields=(
        _f("number", "Number"),
        _f("subject", "Subject", required=True),
        _f("issued_to", "Issued To"),
        _f("issued_date", "Issued", "date"),
        _status("issued", "acknowledged", "closed", default="issued"),
        _notes("instruction", "Instruction"),
    ),
)

MATERIALS = ModuleConfig(
    key="materials",
    table="materials",
    singular="Material",
    plural="Materials",
    project_scoped=True,
    icon="package",
    search_field="name",
    fields=(
        _f("name", "Material", required=True),
        _f("supplier", "Supplier"),
        _f("quantity", "Quantity", "number"),
        _f("unit", "Unit", "select", options=("ea", "lf", "sf", "cy", "ton")),
        _f("unit_cost", "Unit Cost", "currency"),
        _status("ordered", "in transit", "received", "installed", default="ordered"),
        _f("delivery_date", "Delivery", "date"),
    ),
)

EQUIPMENT = ModuleConfig(
    key="equipment",
    table="equipment",
    singular="Equipment",
    plural="Equipment",
    project_scoped=True,
    icon="truck",
    search_field="name",
    fields=(
        _f("name", "Equipment", required=True),
        _f("equipment_type", "Type"),
        _f("owned", "Owned", "boolean"),
        _f("daily_rate", "Daily Rate", "currency"),
        _status("mobilizing", "active", "idle", "maintenance", "demobilized", default="mobilizing"),
        _f("on_site_date", "On Site", "date"),
    ),
)

SCHEDULE = ModuleConfig(
    key="schedule",
    table="schedule_tasks",
    singular="Schedule Activity",
    plural="Schedule",
    project_scoped=True,
    icon="calendar",
    search_field="name",
    default_sort=("start_date", True),
    fields=(
        _f("name", "Activity", required=True),
        _f("start_date", "Start", "date", required=True, sortable=True),
        _f("end_date", "Finish", "date", sortable=True),
        _f("percent_complete", "% Complete", "number"),
        _f("milestone", "Milestone", "boolean"),
        _f("predecessor_id", "Predecessor", "relation", in_list=False),
    ),
)

COMPANY_SCHEDULE = ModuleConfig(
    key="company_schedule",
    table="schedule_tasks",
    singular="Schedule Activity",
    plural="Company Schedule",
    project_scoped=True,
    icon="calendar-range",
    search_field="name",
    default_sort=("start_date", True),
    fields=(
        _f("name", "Activity", required=True),
        _f("project_id", "Project", "relation"),
        _f("start_date", "Start", "date", sortable=True),
        _f("end_date", "Finish", "date", sortable=True),
        _f("percent_complete", "% Complete", "number"),
    ),
)

TASKS = ModuleConfig(
    key="tasks",
    table="tasks",
    singular="Task",
    plural="Tasks",
    project_scoped=True,
    icon="check-square",
    search_field="title",
    fields=(
        _f("title", "Title", required=True),
        _f("assigned_to", "Assigned To"),
        _status("open", "in progress", "completed", default="open"),
        _PRIORITY,
        _f("due_date", "Due", "date", sortable=True),
        _notes("description", "Description"),
    ),
)

TIMESHEETS = ModuleConfig(
    key="timesheets",
    table="timesheets",
    singular="Timesheet",
    plural="Timesheets",
    project_scoped=True,
    icon="clock",
    search_field="worker",
    fields=(
        _f("worker", "Worker", required=True),
        _f("work_date", "Date", "date", required=True, sortable=True),
        _f("hours", "Hours", "number", required=True),
        _f("cost_code", "Cost Code"),
        _status("draft", "submitted", "approved", default="draft"),
    ),
)

TIMECARDS = ModuleConfig(
    key="timecards",
    table="timecards",
    singular="Timecard",
    plural="Timecards",
    project_scoped=True,
    icon="id-card",
    search_field="employee",
    fields=(
        _f("employee", "Employee", required=True),
        _f("project_id", "Project", "relation"),
        _f("week_ending", "Week Ending", "date", required=True, sortable=True),
        _f("regular_hours", "Regular", "number"),
        _f("overtime_hours", "Overtime", "number"),
        _status("draft", "submitted", "approved", default="draft"),
    ),
)

TM_TICKETS = ModuleConfig(
    key="tm_tickets",
    table="tm_tickets",
    singular="T&M Ticket",
    plural="T&M Tickets",
    project_scoped=True,
    icon="ticket",
    search_field="description",
    fields=(
        _f("number", "Number"),
        _f("ticket_date", "Date", "date", required=True),
        _f("subcontractor", "Subcontractor"),
        _f("description", "Description", required=True),
        _f("amount", "Amount", "currency"),
        _status("draft", "signed", "billed", default="draft"),
    ),
)

WARRANTIES = ModuleConfig(
    key="warranties",
    table="warranties",
    singular="Warranty",
    plural="Warranties",
    project_scoped=True,
    icon="shield-check",
    search_field="item",
    fields=(
        _f("item", "Item", required=True),
        _f("vendor", "Vendor"),
        _f("start_date", "Start", "date"),
        _f("end_date", "Expires", "date", sortable=True),
        _status("active", "expired", "claimed", default="active"),
    ),
)

PROJECT_DIRECTORY = ModuleConfig(
    key="project_directory",
    table="project_directory",
    singular="Project Contact",
    plural="Project Directory",
    project_scoped=True,
    icon="contact",
    search_field="company_name",
    created_by_column=None,
    fields=(
        _f("company_name", "Company", required=True),
        _f("contact_name", "Contact"),
        _f("role", "Role", "select", options=("owner", "architect", "engineer", "subcontractor", "supplier")),
        _f("email", "Email"),
        _f("phone", "Phone"),
    ),
)

DIRECTORY = ModuleConfig(
    key="directory",
    table="directory_contacts",
    singular="Contact",
    plural="Directory",
    project_scoped=False,
    icon="book-user",
    search_field="company_name",
    created_by_column=None,
    fields=(
        _f("company_name", "Company", required=True),
        _f("contact_type", "Type", "select", required=True, options=("subcontractor", "supplier", "owner", "architect", "consultant")),
        _f("first_name", "First Name"),
        _f("last_name", "Last Name"),
        _f("email", "Email"),
        _f("phone", "Phone"),
        _f("insurance_expiry", "Insurance Expiry", "date"),
        _f("prequalified", "Prequalified", "boolean"),
        _status("active", "inactive", default="active"),
    ),
)

COST_CATALOG = ModuleConfig(
    key="cost_catalog",
    table="cost_catalog",
    singular="Catalog Item",
    plural="Cost Catalog",
    project_scoped=False,
    icon="tags",
    search_field="description",
    created_by_column=None,
    fields=(
        _f("code", "Code", required=True, sortable=True),
        _f("description", "Description", required=True),
        _f("unit", "Unit", "select", options=("ea", "lf", "sf", "cy", "hr", "ls")),
        _f("unit_cost", "Unit Cost", "currency"),
        _f("division", "Division"),
    ),
)

CONVERSATIONS = ModuleConfig(
    key="conversations",
    table="conversations",
    singular="Conversation",
    plural="Conversations",
    project_scoped=True,
    icon="messages-square",
    search_field="topic",
    fields=(
        _f("topic", "Topic", required=True),
        _f("participants", "Participants"),
        _f("last_message_at", "Last Message", "date", sortable=True),
        _status("open", "closed", default="open"),
    ),
)

CREWS = ModuleConfig(
    key="crews",
    table="crews",
    singular="Crew",
    plural="Crews",
    project_scoped=True,
    icon="hard-hat",
    search_field="name",
    fields=(
        _f("name", "Crew", required=True),
        _f("foreman", "Foreman"),
        _f("trade", "Trade"),
        _f("headcount", "Headcount", "number"),
        _f("project_id", "Assigned Project", "relation"),
        _status("available", "assigned", "off", default="available"),
    ),
)

WORKFLOWS = ModuleConfig(
    key="workflows",
    table="workflow_templates",
    singular="Workflow",
    plural="Workflows",
    project_scoped=False,
    icon="workflow",
    search_field="name",
    fields=(
        _f("name", "Name", required=True),
        _f("applies_to", "Applies To", "select", options=("rfis", "submittals", "change_orders", "invoices")),
        _f("active", "Active", "boolean", default=True),
        _notes("description", "Description"),
    ),
)

PROJECT_WORKFLOWS = ModuleConfig(
    key="project_workflows",
    table="project_workflows",
    singular="Project Workflow",
    plural="Workflows",
    project_scoped=True,
    icon="workflow",
    search_field="name",
    fields=(
        _f("name", "Name", required=True),
        _f("template_id", "Template", "relation"),
        _f("active", "Active", "boolean", default=True),
    ),
)


BUILTIN_MODULES = (
    ACTION_PLANS,
    BUDGET,
    CHANGE_EVENTS,
    COMMITMENT_COS,
    COMMITMENTS,
    COMPANY_DOCUMENTS,
    COMPANY_SCHEDULE,
    CONTRACT_COS,
    CONVERSATIONS,
    COORDINATION_ISSUES,
    CORRESPONDENCE,
    COST_CATALOG,
    CREWS,
    DAILY_LOGS,
    DIRECT_COSTS,
    DIRECTORY,
    DOCUMENTS,
    DRAWINGS,
    EMAILS,
    EQUIPMENT,
    ESTIMATING,
    FORMS,
    FUNDING,
    INCIDENTS,
    INSPECTIONS,
    INSTRUCTIONS,
    MATERIALS,
    MEETINGS,
    MODELS,
    OBSERVATIONS,
    OWNER_INVOICES,
    PAYMENTS,
    PHOTOS,
    PRIME_CONTRACTS,
    PROJECT_BIDDING,
    PROJECT_DIRECTORY,
    PROJECT_WORKFLOWS,
    PUNCH_LIST,
    RFIS,
    SCHEDULE,
    SPECIFICATIONS,
    SUB_INVOICES,
    SUBMITTALS,
    TASKS,
    TIMECARDS,
    TIMESHEETS,
    TM_TICKETS,
    TRANSMITTALS,
    WARRANTIES,
    WORKFLOWS,
)


def build_registry() -> ModuleRegistry:
    return ModuleRegistry(BUILTIN_MODULES)
