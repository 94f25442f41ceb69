"""Monday-to-Friday grid of assignments used by the dashboard."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date

from crewboard.services.assignment_service import AssignmentRecord, AssignmentService
from crewboard.services.calendar import WORKDAYS, ensure_week_start, week_end_for, workday_name

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class WeekSummary:
    total_assignments: int = 0
    unique_employees: int = 0
    unique_projects: int = 0


@dataclass(slots=True)
class WeekGrid:
    week_start: date
    week_end: date
    # weekday name -> project_id -> assignments, in date/project/employee order
    days: dict[str, dict[str, list[AssignmentRecord]]] = field(default_factory=dict)
    projects: dict[str, dict[str, object]] = field(default_factory=dict)
    employees: dict[str, dict[str, object]] = field(default_factory=dict)
    summary: WeekSummary = field(default_factory=WeekSummary)

    def to_dict(self) -> dict[str, object]:
        return {
            "week_start": self.week_start.isoformat(),
            "week_end": self.week_end.isoformat(),
            "days": {
                day: {
                    project_id: [record.to_dict() for record in records]
                    for project_id, records in projects.items()
                }
                for day, projects in self.days.items()
            },
            "projects": self.projects,
            "employees": self.employees,
            "summary": {
                "total_assignments": self.summary.total_assignments,
                "unique_employees": self.summary.unique_employees,
                "unique_projects": self.summary.unique_projects,
            },
        }


def build_week_grid(week_start: date, records: list[AssignmentRecord]) -> WeekGrid:
    """Bucket ``records`` by weekday, then by project.

    Records dated on a weekend cannot belong to a work week and are left out
    of both the grid and the counts.
    """

    grid = WeekGrid(
        week_start=week_start,
        week_end=week_end_for(week_start),
        days={day: {} for day in WORKDAYS},
    )
    employee_ids: set[str] = set()
    project_ids: set[str] = set()
    total = 0

    for record in records:
        day_name = workday_name(record.assignment_date)
        if day_name is None or not grid.week_start <= record.assignment_date <= grid.week_end:
            logger.warning(
                "Assignment %s dated %s falls outside work week %s",
                record.assignment_id,
                record.assignment_date,
                week_start,
            )
            continue

        grid.days[day_name].setdefault(record.project_id, []).append(record)
        total += 1

        if record.project_id not in grid.projects:
            grid.projects[record.project_id] = {
                "project_id": record.project_id,
                "name": record.project_name,
                "number": record.project_number,
            }
        if record.employee_id not in grid.employees:
            grid.employees[record.employee_id] = {
                "employee_id": record.employee_id,
                "name": record.employee_name,
                "employee_number": record.employee_number,
                "position_name": record.position_name,
                "position_code": record.position_code,
                "position_color": record.position_color,
            }
        employee_ids.add(record.employee_id)
        project_ids.add(record.project_id)

    grid.summary = WeekSummary(
        total_assignments=total,
        unique_employees=len(employee_ids),
        unique_projects=len(project_ids),
    )
    return grid


class WeekAggregator:
    """Reads one work week through the assignment service and grids it."""

    def __init__(self, assignments: AssignmentService) -> None:
        self.assignments = assignments

    def get_week_assignments(self, week_start: date | str) -> WeekGrid:
        start = ensure_week_start(week_start, "week_start")
        records = self.assignments.get_by_date_range(start, week_end_for(start))
        return build_week_grid(start, records)
