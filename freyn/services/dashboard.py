"""Dashboard aggregation over a workspace's projects.

Pure read/derive: no queries here. Callers pass the projects newest first.
"""

from collections.abc import Sequence
from datetime import datetime

from freyn.models.project import Project, ProjectStatus

MONTH_WINDOW = 6
TOP_CLIENTS = 5
RECENT_PROJECTS = 5


def _price(project: Project) -> float:
    return project.total_price or 0


def _month_key(year: int, month: int) -> str:
    return f"{year:04d}-{month:02d}"


def _last_months(now: datetime, count: int) -> list[tuple[int, int]]:
    """(year, month) pairs for the current month and ``count - 1`` before it, oldest first."""
    months = []
    year, month = now.year, now.month
    for _ in range(count):
        months.append((year, month))
        month -= 1
        if month == 0:
            year, month = year - 1, 12
    return list(reversed(months))


def build_dashboard(projects: Sequence[Project], now: datetime) -> dict:
    done = [p for p in projects if p.status == ProjectStatus.DONE]
    ongoing = [p for p in projects if p.status != ProjectStatus.DONE]

    stats = {
        "total": len(projects),
        "ongoing": len(ongoing),
        "completed": len(done),
        "ongoingRevenue": sum(_price(p) for p in ongoing),
        "completedRevenue": sum(_price(p) for p in done),
        "totalRevenue": sum(_price(p) for p in projects),
    }

    status_distribution: dict[str, int] = {}
    for project in projects:
        status = str(project.status or ProjectStatus.TODO)
        status_distribution[status] = status_distribution.get(status, 0) + 1

    revenue_by_month: dict[str, float] = {}
    count_by_month: dict[str, int] = {}
    for project in projects:
        key = _month_key(project.created_at.year, project.created_at.month)
        revenue_by_month[key] = revenue_by_month.get(key, 0) + _price(project)
        count_by_month[key] = count_by_month.get(key, 0) + 1

    monthly = []
    for year, month in _last_months(now, MONTH_WINDOW):
        key = _month_key(year, month)
        monthly.append({
            "key": key,
            "label": datetime(year, month, 1).strftime("%b %Y"),
            "revenue": revenue_by_month.get(key, 0),
            "projects": count_by_month.get(key, 0),
        })

    # dicts keep first-seen order, and sorted() is stable, so ties stay in
    # encounter order.
    clients: dict[str, dict] = {}
    for project in projects:
        name = project.client_name or "Unknown"
        entry = clients.setdefault(name, {"name": name, "count": 0, "revenue": 0})
        entry["count"] += 1
        entry["revenue"] += _price(project)
    top_clients = sorted(clients.values(), key=lambda c: c["count"], reverse=True)[:TOP_CLIENTS]

    recent = [
        {
            "id": str(p.id),
            "numberOrder": p.number_order,
            "projectName": p.project_name,
            "clientName": p.client_name,
            "status": str(p.status),
            "totalPrice": p.total_price,
            "deadline": p.deadline,
        }
        for p in projects[:RECENT_PROJECTS]
    ]

    return {
        "stats": stats,
        "statusDistribution": status_distribution,
        "monthlyData": monthly,
        "topClients": top_clients,
        "recentProjects": recent,
    }
