"""Unit tests for the dashboard aggregation."""

from datetime import datetime

from freyn.models.project import Project, ProjectStatus
from freyn.services.dashboard import build_dashboard

NOW = datetime(2026, 6, 15, 12, 0)


def _project(name: str, client: str, total: float, status: ProjectStatus, created: datetime) -> Project:
    return Project(
        number_order=f"FM-{name}",
        project_name=name,
        client_name=client,
        deadline=NOW,
        total_price=total,
        status=status,
        created_at=created,
        updated_at=created,
    )


def test_empty_workspace():
    result = build_dashboard([], NOW)
    assert result["stats"] == {
        "total": 0,
        "ongoing": 0,
        "completed": 0,
        "ongoingRevenue": 0,
        "completedRevenue": 0,
        "totalRevenue": 0,
    }
    assert len(result["monthlyData"]) == 6
    assert result["topClients"] == []
    assert result["recentProjects"] == []


def test_revenue_split_by_status():
    projects = [
        _project("a", "Acme", 100, ProjectStatus.DONE, datetime(2026, 6, 1)),
        _project("b", "Acme", 200, ProjectStatus.DONE, datetime(2026, 5, 2)),
        _project("c", "Globex", 50, ProjectStatus.IN_PROGRESS, datetime(2026, 5, 3)),
    ]
    result = build_dashboard(projects, NOW)
    stats = result["stats"]
    assert stats["completed"] == 2
    assert stats["ongoing"] == 1
    assert stats["completedRevenue"] == 300
    assert stats["ongoingRevenue"] == 50
    assert stats["totalRevenue"] == 350
    assert result["statusDistribution"] == {"done": 2, "in progress": 1}


def test_monthly_window_is_oldest_first_and_ignores_older_months():
    projects = [
        _project("a", "Acme", 100, ProjectStatus.TODO, datetime(2026, 6, 1)),
        _project("b", "Acme", 40, ProjectStatus.TODO, datetime(2026, 1, 20)),
        _project("c", "Acme", 999, ProjectStatus.TODO, datetime(2025, 12, 31)),
    ]
    monthly = build_dashboard(projects, NOW)["monthlyData"]
    assert [m["key"] for m in monthly] == [
        "2026-01", "2026-02", "2026-03", "2026-04", "2026-05", "2026-06",
    ]
    assert monthly[0] == {"key": "2026-01", "label": "Jan 2026", "revenue": 40, "projects": 1}
    assert monthly[-1]["revenue"] == 100
    assert sum(m["revenue"] for m in monthly) == 140


def test_monthly_window_crosses_year_boundary():
    monthly = build_dashboard([], datetime(2026, 2, 10))["monthlyData"]
    assert monthly[0]["key"] == "2025-09"
    assert monthly[-1]["key"] == "2026-02"


def test_top_clients_ranked_by_count_ties_in_encounter_order():
    projects = [
        _project("a", "Globex", 10, ProjectStatus.TODO, NOW),
        _project("b", "Acme", 10, ProjectStatus.TODO, NOW),
        _project("c", "Acme", 10, ProjectStatus.TODO, NOW),
        _project("d", "Initech", 10, ProjectStatus.TODO, NOW),
        _project("e", "", 10, ProjectStatus.TODO, NOW),
    ]
    top = build_dashboard(projects, NOW)["topClients"]
    assert [c["name"] for c in top] == ["Acme", "Globex", "Initech", "Unknown"]
    assert top[0] == {"name": "Acme", "count": 2, "revenue": 20}


def test_recent_projects_keeps_first_five():
    projects = [
        _project(str(i), "Acme", i, ProjectStatus.TODO, NOW) for i in range(7)
    ]
    recent = build_dashboard(projects, NOW)["recentProjects"]
    assert [r["projectName"] for r in recent] == ["0", "1", "2", "3", "4"]
    assert recent[0]["numberOrder"] == "FM-0"
    assert recent[0]["status"] == "to do"


def test_missing_total_price_counts_as_zero():
    unpriced = _project("c", "Acme", 0, ProjectStatus.IN_PROGRESS, NOW)
    unpriced.total_price = None
    projects = [
        _project("a", "Acme", 100, ProjectStatus.DONE, NOW),
        _project("b", "Acme", 200, ProjectStatus.DONE, NOW),
        unpriced,
    ]
    stats = build_dashboard(projects, NOW)["stats"]
    assert stats["completedRevenue"] == 300
    assert stats["ongoingRevenue"] == 0
    assert stats["totalRevenue"] == 300
