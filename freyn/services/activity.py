"""Project activity log: status changes and per-field edit details."""

import re
from datetime import datetime

from freyn.models.project import STATUS_LABELS, Project, ProjectStatus

# snake_case attribute -> (wire name, label, value type)
TRACKED_FIELDS = {
    "project_name": ("projectName", "Project name", "text"),
    "brief": ("brief", "Project brief", "richtext"),
    "client_name": ("clientName", "Client name", "text"),
    "client_phone": ("clientPhone", "Client phone", "text"),
    "deadline": ("deadline", "Due date", "datetime"),
    "price": ("price", "Price", "currency"),
    "quantity": ("quantity", "Quantity", "number"),
    "discount": ("discount", "Discount", "currency"),
    "total_price": ("totalPrice", "Total price", "currency"),
    "deliverables": ("deliverables", "Deliverables link", "text"),
    "invoice": ("invoice", "Invoice", "text"),
    "service_id": ("serviceId", "Service", "text"),
    "number_order": ("numberOrder", "Order number", "text"),
}

NUMERIC_TYPES = ("currency", "number")

_TAG = re.compile(r"<[^>]+>")
_SPACE = re.compile(r"\s+")


def strip_html(value) -> str:
    if not value:
        return ""
    return _SPACE.sub(" ", _TAG.sub(" ", str(value))).strip()


def _comparable(value_type: str, value):
    if value is None:
        return ""
    if value_type == "datetime":
        return value if isinstance(value, datetime) else str(value)
    if value_type in NUMERIC_TYPES:
        return float(value)
    return str(value).strip()


def _display(field: str, value_type: str, value, service_names: dict[str, str]):
    if value is None:
        return ""
    if field == "service_id":
        key = str(value).strip()
        return service_names.get(key, key) if key else ""
    if value_type == "datetime":
        return value.isoformat() if isinstance(value, datetime) else str(value)
    if value_type in NUMERIC_TYPES:
        return float(value)
    if value_type == "richtext":
        return strip_html(value)
    return str(value).strip()


def diff_fields(
    project: Project, changes: dict, service_names: dict[str, str] | None = None
) -> list[dict]:
    """Detail entries for every tracked field whose value actually changes."""
    service_names = service_names or {}
    details = []
    for field, (wire_name, label, value_type) in TRACKED_FIELDS.items():
        if field not in changes:
            continue
        current = getattr(project, field)
        proposed = changes[field]
        if _comparable(value_type, current) == _comparable(value_type, proposed):
            continue
        details.append({
            "field": wire_name,
            "label": label,
            "value_type": value_type,
            "previous_value": _display(field, value_type, current, service_names),
            "new_value": _display(field, value_type, proposed, service_names),
        })
    return details


def build_activity_logs(
    project: Project,
    changes: dict,
    *,
    actor_id: str,
    actor_name: str,
    actor_email: str,
    now: datetime,
    service_names: dict[str, str] | None = None,
) -> list[dict]:
    """New log entries for an update, in the order they should be prepended."""
    actor = {"actor_id": actor_id, "actor_name": actor_name, "actor_email": actor_email}
    stamp = now.isoformat()
    logs = []

    new_status = changes.get("status")
    if new_status is not None and str(new_status).lower() != str(project.status or "").lower():
        status = ProjectStatus(new_status)
        logs.append({
            "type": "status_change",
            "message": f"Status change to {STATUS_LABELS.get(status, status.value)}",
            "status": status.value,
            "details": [],
            **actor,
            "created_at": stamp,
        })

    details = diff_fields(project, changes, service_names)
    if details:
        logs.append({
            "type": "project_edit",
            "message": "Project Edited",
            "status": None,
            "details": details,
            **actor,
            "created_at": stamp,
        })
    return logs
