"""Repository helpers for assignments, their history and referenced entities."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from sqlalchemy import and_, func, select
from sqlalchemy.engine import Row
from sqlalchemy.orm import Session

from crewboard.models.entities import (
    Assignment,
    AssignmentHistory,
    Employee,
    Position,
    Project,
)


@dataclass(slots=True, frozen=True)
class AssignmentFilters:
    """Optional, composable narrowing of a date-range read."""

    project_id: str | None = None
    employee_id: str | None = None
    position_id: int | None = None

    def conditions(self) -> list:
        conditions = []
        if self.project_id is not None:
            conditions.append(Assignment.project_id == self.project_id)
        if self.employee_id is not None:
            conditions.append(Assignment.employee_id == self.employee_id)
        if self.position_id is not None:
            conditions.append(Employee.position_id == self.position_id)
        return conditions


class AssignmentRepository:
    """Persistence operations used by the assignment and week services."""

    def __init__(self, db: Session) -> None:
        self.db = db

    # ---------- Referenced entities ----------
    def get_employee(self, employee_id: str, *, lock: bool = False) -> Employee | None:
        stmt = select(Employee).where(Employee.employee_id == employee_id)
        if lock:
            # Serializes writers for the same employee; ignored by SQLite.
            stmt = stmt.with_for_update()
        return self.db.scalar(stmt)

    def get_project(self, project_id: str) -> Project | None:
        return self.db.scalar(select(Project).where(Project.project_id == project_id))

    def employee_status_counts(self) -> dict[str, int]:
        rows = self.db.execute(
            select(Employee.status, func.count(Employee.employee_id)).group_by(Employee.status)
        ).all()
        return {status.value: count for status, count in rows}

    def project_status_counts(self) -> dict[str, int]:
        rows = self.db.execute(
            select(Project.status, func.count(Project.project_id)).group_by(Project.status)
        ).all()
        return {status.value: count for status, count in rows}

    # ---------- Assignments ----------
    def get_assignment(self, assignment_id: int) -> Assignment | None:
        return self.db.scalar(select(Assignment).where(Assignment.assignment_id == assignment_id))

    def find_assignment_on_date(
        self,
        employee_id: str,
        assignment_date: date,
        *,
        exclude_assignment_id: int | None = None,
    ) -> int | None:
        conditions = [
            Assignment.employee_id == employee_id,
            Assignment.assignment_date == assignment_date,
        ]
        if exclude_assignment_id is not None:
            conditions.append(Assignment.assignment_id != exclude_assignment_id)

        return self.db.scalar(select(Assignment.assignment_id).where(and_(*conditions)).limit(1))

    def add_assignment(self, assignment: Assignment) -> Assignment:
        self.db.add(assignment)
        self.db.flush()
        return assignment

    def delete_assignment(self, assignment: Assignment) -> None:
        self.db.delete(assignment)
        self.db.flush()

    def _detail_query(self):
        return (
            select(Assignment, Employee, Project, Position)
            .join(Employee, Employee.employee_id == Assignment.employee_id)
            .join(Project, Project.project_id == Assignment.project_id)
            .outerjoin(Position, Position.position_id == Employee.position_id)
        )

    def get_assignment_detail(self, assignment_id: int) -> Row | None:
        return self.db.execute(
            self._detail_query().where(Assignment.assignment_id == assignment_id)
        ).first()

    def list_assignment_details(
        self,
        *,
        start_date: date,
        end_date: date,
        filters: AssignmentFilters | None = None,
    ) -> list[Row]:
        conditions = [
            Assignment.assignment_date >= start_date,
            Assignment.assignment_date <= end_date,
        ]
        if filters is not None:
            conditions.extend(filters.conditions())

        return self.db.execute(
            self._detail_query()
            .where(and_(*conditions))
            .order_by(
                Assignment.assignment_date.asc(),
                Project.name.asc(),
                Employee.name.asc(),
                Assignment.assignment_id.asc(),
            )
        ).all()

    def list_double_bookings(self, *, start_date: date, end_date: date) -> list[tuple[str, date, int]]:
        rows = self.db.execute(
            select(
                Assignment.employee_id,
                Assignment.assignment_date,
                func.count(Assignment.assignment_id),
            )
            .where(
                and_(
                    Assignment.assignment_date >= start_date,
                    Assignment.assignment_date <= end_date,
                )
            )
            .group_by(Assignment.employee_id, Assignment.assignment_date)
            .having(func.count(Assignment.assignment_id) > 1)
            .order_by(Assignment.assignment_date.asc(), Assignment.employee_id.asc())
        ).all()
        return [(employee_id, day, count) for employee_id, day, count in rows]

    def list_project_ids_for_employee_date(self, employee_id: str, assignment_date: date) -> list[str]:
        return self.db.scalars(
            select(Assignment.project_id)
            .where(
                and_(
                    Assignment.employee_id == employee_id,
                    Assignment.assignment_date == assignment_date,
                )
            )
            .order_by(Assignment.assignment_id.asc())
        ).all()

    # ---------- History ----------
    def add_history(self, entry: AssignmentHistory) -> AssignmentHistory:
        self.db.add(entry)
        self.db.flush()
        return entry

    def list_history(
        self,
        *,
        assignment_id: int | None = None,
        employee_id: str | None = None,
        limit: int | None = None,
    ) -> list[AssignmentHistory]:
        conditions = []
        if assignment_id is not None:
            conditions.append(AssignmentHistory.assignment_id == assignment_id)
        if employee_id is not None:
            conditions.append(AssignmentHistory.employee_id == employee_id)

        stmt = select(AssignmentHistory).order_by(
            AssignmentHistory.created_at.asc(),
            AssignmentHistory.history_id.asc(),
        )
        if conditions:
            stmt = stmt.where(and_(*conditions))
        if limit is not None:
            stmt = stmt.limit(limit)
        return self.db.scalars(stmt).all()
