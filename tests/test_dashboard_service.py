from __future__ import annotations

from datetime import date

import pytest
from sqlalchemy.orm import Session

from crewboard.core.errors import ValidationError
from crewboard.models.entities import Assignment, User, utcnow
from crewboard.services.assignment_service import AssignmentCreateData, AssignmentService
from crewboard.services.dashboard_service import DashboardService


@pytest.fixture()
def dashboard(service: AssignmentService) -> DashboardService:
    return DashboardService(service)


def test_summary_counts_by_day_project_and_position(
    service: AssignmentService, dashboard: DashboardService, manager: User
) -> None:
    service.create(AssignmentCreateData("E001", "P1", date(2025, 6, 9)), manager.id)
    service.create(AssignmentCreateData("E002", "P1", date(2025, 6, 9)), manager.id)
    service.create(AssignmentCreateData("E003", "P2", date(2025, 6, 11)), manager.id)
    service.create(AssignmentCreateData("E001", "P2", date(2025, 6, 16)), manager.id)

    summary = dashboard.summary(date(2025, 6, 9), date(2025, 6, 13))

    assert summary.total_assignments == 3
    assert summary.unique_employees == 3
    assert summary.unique_projects == 2
    assert summary.by_day == {"2025-06-09": 2, "2025-06-11": 1}
    assert summary.by_project == {
        "P1": {"project_name": "Airport Terminal", "count": 2},
        "P2": {"project_name": "Bridge Retrofit", "count": 1},
    }
    assert summary.by_position == {
        "Foreman": {"position_code": "FM", "position_color": "#1F77B4", "count": 1},
        "Electrician": {"position_code": "EL", "position_color": "#FF7F0E", "count": 2},
    }
    assert summary.employees == {"Active": 2, "PTO": 1, "Terminated": 1}
    assert summary.projects == {"Active": 2, "Completed": 1, "Cancelled": 1}
    assert summary.conflicts == []

    payload = summary.to_dict()
    assert payload["date_range"] == {"start_date": "2025-06-09", "end_date": "2025-06-13"}
    assert payload["assignments"]["by_day"]["2025-06-09"] == 2


def test_summary_reports_double_bookings(
    db_session: Session, dashboard: DashboardService, manager: User, unconstrained_assignments
) -> None:
    now = utcnow()
    for project_id in ("P1", "P2"):
        db_session.add(
            Assignment(employee_id="E002", project_id=project_id, assignment_date=date(2025, 6, 12),
                       created_by=manager.id, created_at=now, updated_at=now)
        )
    db_session.commit()

    payload = dashboard.summary("2025-06-09", "2025-06-13").to_dict()

    assert payload["conflicts"] == [
        {
            "employee_id": "E002",
            "assignment_date": "2025-06-12",
            "conflict_count": 2,
            "conflicting_projects": ["P1", "P2"],
        }
    ]


def test_summary_validates_range(dashboard: DashboardService) -> None:
    with pytest.raises(ValidationError):
        dashboard.summary(date(2025, 6, 13), date(2025, 6, 9))


def test_recent_activity_is_newest_first_within_last_week(
    service: AssignmentService, dashboard: DashboardService, manager: User
) -> None:
    service.create(AssignmentCreateData("E001", "P1", date(2025, 6, 5)), manager.id)
    service.create(AssignmentCreateData("E002", "P1", date(2025, 6, 3)), manager.id)
    service.create(AssignmentCreateData("E003", "P2", date(2025, 6, 9)), manager.id)
    service.create(AssignmentCreateData("E001", "P2", date(2025, 6, 10)), manager.id)
    service.create(AssignmentCreateData("E002", "P2", date(2025, 5, 30)), manager.id)

    start, end, records = dashboard.recent_activity()

    assert (start, end) == (date(2025, 6, 2), date(2025, 6, 9))
    assert [record.assignment_date for record in records] == [
        date(2025, 6, 9),
        date(2025, 6, 3),
        date(2025, 6, 5),
    ]

    _, _, limited = dashboard.recent_activity(limit=2)
    assert len(limited) == 2


@pytest.mark.parametrize("limit", [0, 51])
def test_recent_activity_limit_is_bounded(dashboard: DashboardService, limit: int) -> None:
    with pytest.raises(ValidationError):
        dashboard.recent_activity(limit=limit)
