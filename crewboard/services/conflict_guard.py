"""One-assignment-per-employee-per-day guard."""

from __future__ import annotations

from datetime import date

from sqlalchemy.orm import Session

from crewboard.core.errors import ConflictError
from crewboard.repositories.assignment_repository import AssignmentRepository


class ConflictGuard:
    """Checks the booking invariant on the caller's session.

    The check must run in the same transaction as the write that follows it.
    The ``uq_assignments_employee_date`` constraint still has the final word
    under concurrent writers; this guard only produces the precise error.
    """

    def __init__(self, db: Session, repo: AssignmentRepository | None = None) -> None:
        self.repo = repo or AssignmentRepository(db)

    def check_conflict(
        self,
        employee_id: str,
        assignment_date: date,
        exclude_assignment_id: int | None = None,
    ) -> bool:
        existing = self.repo.find_assignment_on_date(
            employee_id,
            assignment_date,
            exclude_assignment_id=exclude_assignment_id,
        )
        return existing is not None

    def ensure_available(
        self,
        employee_id: str,
        assignment_date: date,
        exclude_assignment_id: int | None = None,
    ) -> None:
        existing = self.repo.find_assignment_on_date(
            employee_id,
            assignment_date,
            exclude_assignment_id=exclude_assignment_id,
        )
        if existing is not None:
            raise ConflictError(
                f"Employee {employee_id} is already assigned on {assignment_date.isoformat()}.",
                existing_id=existing,
            )
