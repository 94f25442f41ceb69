"""Append-only audit trail of assignment mutations."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy.orm import Session

from crewboard.models.entities import Assignment, AssignmentHistory, ChangeReason, utcnow
from crewboard.repositories.assignment_repository import AssignmentRepository


class HistoryLog:
    """Writes history rows inside the caller's transaction.

    Entries are only appended and read back; there is no update or delete.
    """

    def __init__(self, db: Session, repo: AssignmentRepository | None = None) -> None:
        self.repo = repo or AssignmentRepository(db)

    def append(
        self,
        *,
        assignment: Assignment,
        reason: ChangeReason,
        changed_by: UUID,
        previous_project_id: str | None = None,
        new_project_id: str | None = None,
    ) -> AssignmentHistory:
        return self.repo.add_history(
            AssignmentHistory(
                assignment_id=assignment.assignment_id,
                employee_id=assignment.employee_id,
                previous_project_id=previous_project_id,
                new_project_id=new_project_id,
                assignment_date=assignment.assignment_date,
                change_reason=reason.value,
                changed_by=changed_by,
                created_at=utcnow(),
            )
        )

    def entries_for_assignment(self, assignment_id: int) -> list[AssignmentHistory]:
        return self.repo.list_history(assignment_id=assignment_id)

    def entries_for_employee(self, employee_id: str, *, limit: int | None = None) -> list[AssignmentHistory]:
        return self.repo.list_history(employee_id=employee_id, limit=limit)

    @staticmethod
    def serialize(entry: AssignmentHistory) -> dict[str, object]:
        return {
            "history_id": entry.history_id,
            "assignment_id": entry.assignment_id,
            "employee_id": entry.employee_id,
            "previous_project_id": entry.previous_project_id,
            "new_project_id": entry.new_project_id,
            "assignment_date": entry.assignment_date.isoformat(),
            "change_reason": entry.change_reason,
            "changed_by": str(entry.changed_by),
            "created_at": entry.created_at.isoformat(),
        }
