"""Read-only dashboard statistics over a date range."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, timedelta

from crewboard.core.errors import ValidationError
from crewboard.services.assignment_service import AssignmentRecord, AssignmentService, ConflictGroup
from crewboard.services.calendar import parse_date_range

UNASSIGNED_POSITION = "Unassigned"
RECENT_ACTIVITY_DAYS = 7
RECENT_ACTIVITY_MAX = 50


@dataclass(slots=True)
class DashboardSummary:
    start_date: date
    end_date: date
    total_assignments: int = 0
    unique_employees: int = 0
    unique_projects: int = 0
    by_day: dict[str, int] = field(default_factory=dict)
    by_project: dict[str, dict[str, object]] = field(default_factory=dict)
    by_position: dict[str, dict[str, object]] = field(default_factory=dict)
    employees: dict[str, int] = field(default_factory=dict)
    projects: dict[str, int] = field(default_factory=dict)
    conflicts: list[ConflictGroup] = field(default_factory=list)

    def to_dict(self) -> dict[str, object]:
        return {
            "date_range": {"start_date": self.start_date.isoformat(), "end_date": self.end_date.isoformat()},
            "assignments": {
                "total_assignments": self.total_assignments,
                "unique_employees": self.unique_employees,
                "unique_projects": self.unique_projects,
                "by_day": self.by_day,
                "by_project": self.by_project,
                "by_position": self.by_position,
            },
            "employees": self.employees,
            "projects": self.projects,
            "conflicts": [group.to_dict() for group in self.conflicts],
        }


def summarize(start_date: date, end_date: date, records: list[AssignmentRecord]) -> DashboardSummary:
    summary = DashboardSummary(start_date=start_date, end_date=end_date, total_assignments=len(records))
    summary.unique_employees = len({record.employee_id for record in records})
    summary.unique_projects = len({record.project_id for record in records})

    for record in records:
        day = record.assignment_date.isoformat()
        summary.by_day[day] = summary.by_day.get(day, 0) + 1

        project = summary.by_project.setdefault(
            record.project_id, {"project_name": record.project_name, "count": 0}
        )
        project["count"] += 1

        position = summary.by_position.setdefault(
            record.position_name or UNASSIGNED_POSITION,
            {"position_code": record.position_code, "position_color": record.position_color, "count": 0},
        )
        position["count"] += 1

    return summary


class DashboardService:
    def __init__(self, assignments: AssignmentService) -> None:
        self.assignments = assignments

    def summary(self, start_date: date | str, end_date: date | str) -> DashboardSummary:
        start, end = parse_date_range(start_date, end_date)
        result = summarize(start, end, self.assignments.get_by_date_range(start, end))
        result.employees = self.assignments.repo.employee_status_counts()
        result.projects = self.assignments.repo.project_status_counts()
        result.conflicts = self.assignments.get_conflicts(start, end)
        return result

    def recent_activity(self, *, limit: int = 10) -> tuple[date, date, list[AssignmentRecord]]:
        """Newest-created assignments dated within the last week."""

        if not 1 <= limit <= RECENT_ACTIVITY_MAX:
            raise ValidationError(f"limit must be between 1 and {RECENT_ACTIVITY_MAX}.")

        end = self.assignments.clock()
        start = end - timedelta(days=RECENT_ACTIVITY_DAYS)
        records = self.assignments.get_by_date_range(start, end)
        records.sort(key=lambda record: (record.created_at, record.assignment_id), reverse=True)
        return start, end, records[:limit]
