"""Application service for day-level assignment scheduling."""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass, field, fields
from datetime import date, datetime
from uuid import UUID

from sqlalchemy.orm import Session

from crewboard.core.config import get_settings
from crewboard.core.errors import ConflictError, NotFoundError, ValidationError
from crewboard.db.transactions import transaction_scope
from crewboard.models.entities import (
    TERMINAL_PROJECT_STATUSES,
    Assignment,
    AssignmentHistory,
    ChangeReason,
    Employee,
    EmployeeStatus,
    Project,
    utcnow,
)
from crewboard.repositories.assignment_repository import AssignmentFilters, AssignmentRepository
from crewboard.services import events as ev
from crewboard.services.calendar import parse_date, parse_date_range, shift_years, utc_today
from crewboard.services.conflict_guard import ConflictGuard
from crewboard.services.history_log import HistoryLog

logger = logging.getLogger(__name__)

IDENTIFIER_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")
EMPLOYEE_ID_MAX_LENGTH = 10
PROJECT_ID_MAX_LENGTH = 20
LOCATION_MAX_LENGTH = 255
LONG_TEXT_MAX_LENGTH = 1000

DOUBLE_BOOKING_DETAIL = "Employee is already assigned on that date."
CLEARABLE_FIELDS = ("notes", "location", "task_description")


@dataclass(slots=True)
class AssignmentCreateData:
    employee_id: str
    project_id: str
    assignment_date: date | str
    notes: str | None = None
    location: str | None = None
    task_description: str | None = None


@dataclass(slots=True)
class AssignmentUpdateData:
    employee_id: str | None = None
    project_id: str | None = None
    assignment_date: date | str | None = None
    notes: str | None = None
    location: str | None = None
    task_description: str | None = None
    # Optional text fields explicitly set to null.
    cleared: tuple[str, ...] = ()

    def provided(self) -> dict[str, object]:
        return {
            name: getattr(self, name)
            for name in (item.name for item in fields(self) if item.name != "cleared")
            if getattr(self, name) is not None
        }


@dataclass(slots=True)
class AssignmentRecord:
    """Read-side view of an assignment joined with its employee and project."""

    assignment_id: int
    employee_id: str
    project_id: str
    assignment_date: date
    notes: str | None
    location: str | None
    task_description: str | None
    employee_name: str
    employee_number: str | None
    position_id: int | None
    position_name: str | None
    position_code: str | None
    position_color: str | None
    project_name: str
    project_number: str
    created_by: UUID
    updated_by: UUID | None
    created_at: datetime
    updated_at: datetime

    def to_dict(self) -> dict[str, object]:
        return {
            "assignment_id": self.assignment_id,
            "employee_id": self.employee_id,
            "employee_name": self.employee_name,
            "employee_number": self.employee_number,
            "position_id": self.position_id,
            "position_name": self.position_name,
            "position_code": self.position_code,
            "position_color": self.position_color,
            "project_id": self.project_id,
            "project_name": self.project_name,
            "project_number": self.project_number,
            "assignment_date": self.assignment_date.isoformat(),
            "notes": self.notes,
            "location": self.location,
            "task_description": self.task_description,
            "created_by": str(self.created_by),
            "updated_by": str(self.updated_by) if self.updated_by is not None else None,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }


@dataclass(slots=True)
class ConflictGroup:
    employee_id: str
    assignment_date: date
    conflict_count: int
    conflicting_projects: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, object]:
        return {
            "employee_id": self.employee_id,
            "assignment_date": self.assignment_date.isoformat(),
            "conflict_count": self.conflict_count,
            "conflicting_projects": list(self.conflicting_projects),
        }


class AssignmentService:
    """Conflict-safe create/update/delete of assignments plus range reads."""

    def __init__(
        self,
        db: Session,
        *,
        events: ev.EventSink | None = None,
        clock: Callable[[], date] | None = None,
    ) -> None:
        self.db = db
        self.repo = AssignmentRepository(db)
        self.guard = ConflictGuard(db, self.repo)
        self.history = HistoryLog(db, self.repo)
        self.events = events or ev.LoggingEventSink()
        self.clock = clock or utc_today
        self.settings = get_settings()

    # ---------- Validation ----------
    def _validate_identifier(self, value: object, label: str, max_length: int, errors: list[str]) -> str | None:
        if value is None or (isinstance(value, str) and not value.strip()):
            errors.append(f"{label} is required")
            return None
        if not isinstance(value, str):
            errors.append(f"{label} must be a string")
            return None
        normalized = value.strip()
        if len(normalized) > max_length:
            errors.append(f"{label} must be at most {max_length} characters")
        elif not IDENTIFIER_PATTERN.match(normalized):
            errors.append(f"{label} may contain only letters, digits, '-' and '_'")
        return normalized

    def _validate_assignment_date(self, value: object, errors: list[str]) -> date | None:
        if value is None or value == "":
            errors.append("Assignment date is required")
            return None
        try:
            assignment_date = parse_date(value, "Assignment date")
        except ValidationError:
            errors.append("Invalid assignment date format")
            return None

        today = self.clock()
        window = self.settings.assignment_window_years
        if assignment_date < shift_years(today, -window):
            errors.append(f"Assignment date cannot be more than {window} year(s) in the past")
        if assignment_date > shift_years(today, window):
            errors.append(f"Assignment date cannot be more than {window} year(s) in the future")
        return assignment_date

    @staticmethod
    def _validate_text(value: object, label: str, max_length: int, errors: list[str]) -> str | None:
        if value is None:
            return None
        if not isinstance(value, str):
            errors.append(f"{label} must be a string")
            return None
        if len(value) > max_length:
            errors.append(f"{label} must be at most {max_length} characters")
        stripped = value.strip()
        return stripped or None

    def _validate_fields(self, values: dict[str, object], *, partial: bool) -> tuple[dict[str, object], list[str]]:
        errors: list[str] = []
        normalized: dict[str, object] = {}

        if not partial or "employee_id" in values:
            normalized["employee_id"] = self._validate_identifier(
                values.get("employee_id"), "Employee ID", EMPLOYEE_ID_MAX_LENGTH, errors
            )
        if not partial or "project_id" in values:
            normalized["project_id"] = self._validate_identifier(
                values.get("project_id"), "Project ID", PROJECT_ID_MAX_LENGTH, errors
            )
        if not partial or "assignment_date" in values:
            normalized["assignment_date"] = self._validate_assignment_date(values.get("assignment_date"), errors)

        if "location" in values:
            normalized["location"] = self._validate_text(values["location"], "Location", LOCATION_MAX_LENGTH, errors)
        if "task_description" in values:
            normalized["task_description"] = self._validate_text(
                values["task_description"], "Task description", LONG_TEXT_MAX_LENGTH, errors
            )
        if "notes" in values:
            normalized["notes"] = self._validate_text(values["notes"], "Notes", LONG_TEXT_MAX_LENGTH, errors)

        return normalized, errors

    def _validated_create(self, data: AssignmentCreateData) -> dict[str, object]:
        normalized, errors = self._validate_fields(
            {
                "employee_id": data.employee_id,
                "project_id": data.project_id,
                "assignment_date": data.assignment_date,
                "notes": data.notes,
                "location": data.location,
                "task_description": data.task_description,
            },
            partial=False,
        )
        if errors:
            raise ValidationError("Validation error: " + ", ".join(errors), errors)
        return normalized

    # ---------- Referenced entities ----------
    def _ensure_employee_assignable(self, employee_id: str) -> Employee:
        employee = self.repo.get_employee(employee_id, lock=True)
        if employee is None:
            raise NotFoundError(f"Employee with ID {employee_id} not found.")
        if employee.status is EmployeeStatus.TERMINATED:
            raise ConflictError(f"Cannot assign terminated employee (ID: {employee_id}).")
        return employee

    def _ensure_project_assignable(self, project_id: str) -> Project:
        project = self.repo.get_project(project_id)
        if project is None:
            raise NotFoundError(f"Project with ID {project_id} not found.")
        if project.status in TERMINAL_PROJECT_STATUSES:
            raise ConflictError(f"Cannot assign to completed or cancelled project (ID: {project_id}).")
        return project

    # ---------- Serialization ----------
    @staticmethod
    def serialize_assignment(assignment: Assignment) -> dict[str, object]:
        return {
            "assignment_id": assignment.assignment_id,
            "employee_id": assignment.employee_id,
            "project_id": assignment.project_id,
            "assignment_date": assignment.assignment_date.isoformat(),
            "notes": assignment.notes,
            "location": assignment.location,
            "task_description": assignment.task_description,
            "created_by": str(assignment.created_by),
            "updated_by": str(assignment.updated_by) if assignment.updated_by is not None else None,
            "created_at": assignment.created_at.isoformat(),
            "updated_at": assignment.updated_at.isoformat(),
        }

    @staticmethod
    def _record_from_row(row) -> AssignmentRecord:
        assignment, employee, project, position = row
        return AssignmentRecord(
            assignment_id=assignment.assignment_id,
            employee_id=assignment.employee_id,
            project_id=assignment.project_id,
            assignment_date=assignment.assignment_date,
            notes=assignment.notes,
            location=assignment.location,
            task_description=assignment.task_description,
            employee_name=employee.name,
            employee_number=employee.employee_number,
            position_id=employee.position_id,
            position_name=position.name if position else None,
            position_code=position.code if position else None,
            position_color=position.color_code if position else None,
            project_name=project.name,
            project_number=project.number,
            created_by=assignment.created_by,
            updated_by=assignment.updated_by,
            created_at=assignment.created_at,
            updated_at=assignment.updated_at,
        )

    @staticmethod
    def _event_payload(assignment: Assignment, actor_id: UUID) -> dict[str, object]:
        return {
            "assignment_id": assignment.assignment_id,
            "employee_id": assignment.employee_id,
            "project_id": assignment.project_id,
            "assignment_date": assignment.assignment_date.isoformat(),
            "actor_id": str(actor_id),
        }

    # ---------- Writes ----------
    def _insert(self, values: dict[str, object], *, actor_id: UUID, reason: ChangeReason) -> Assignment:
        employee_id = values["employee_id"]
        project_id = values["project_id"]
        assignment_date = values["assignment_date"]

        self._ensure_employee_assignable(employee_id)
        self._ensure_project_assignable(project_id)
        self.guard.ensure_available(employee_id, assignment_date)

        now = utcnow()
        assignment = self.repo.add_assignment(
            Assignment(
                employee_id=employee_id,
                project_id=project_id,
                assignment_date=assignment_date,
                notes=values.get("notes"),
                location=values.get("location"),
                task_description=values.get("task_description"),
                created_by=actor_id,
                created_at=now,
                updated_at=now,
            )
        )
        self.history.append(
            assignment=assignment,
            reason=reason,
            changed_by=actor_id,
            new_project_id=assignment.project_id,
        )
        return assignment

    def create(self, data: AssignmentCreateData, actor_id: UUID) -> Assignment:
        values = self._validated_create(data)

        with transaction_scope(self.db, action="Assignment create", conflict_detail=DOUBLE_BOOKING_DETAIL):
            assignment = self._insert(values, actor_id=actor_id, reason=ChangeReason.CREATED)
            pending = [ev.SchedulingEvent(ev.ASSIGNMENT_CREATED, self._event_payload(assignment, actor_id))]

        self.db.refresh(assignment)
        ev.publish(self.events, pending)
        return assignment

    def update(self, assignment_id: int, data: AssignmentUpdateData, actor_id: UUID) -> Assignment:
        provided = data.provided()
        if not provided and not data.cleared:
            raise ValidationError("No valid fields to update.")
        values, errors = self._validate_fields(provided, partial=True)
        for name in data.cleared:
            if name not in CLEARABLE_FIELDS:
                errors.append(f"{name} cannot be cleared")
            elif name in provided:
                errors.append(f"{name} cannot be both set and cleared")
            else:
                values[name] = None
        if errors:
            raise ValidationError("Validation error: " + ", ".join(errors), errors)

        with transaction_scope(self.db, action="Assignment update", conflict_detail=DOUBLE_BOOKING_DETAIL):
            assignment = self.repo.get_assignment(assignment_id)
            if assignment is None:
                raise NotFoundError(f"Assignment with ID {assignment_id} not found.")

            previous_project_id = assignment.project_id
            target_employee_id = values.get("employee_id", assignment.employee_id)
            target_project_id = values.get("project_id", assignment.project_id)
            target_date = values.get("assignment_date", assignment.assignment_date)

            employee_changed = target_employee_id != assignment.employee_id
            project_changed = target_project_id != assignment.project_id
            date_changed = target_date != assignment.assignment_date

            # A new employee or day is a new booking: every reference must still be assignable.
            if employee_changed or date_changed:
                self._ensure_employee_assignable(target_employee_id)
                self._ensure_project_assignable(target_project_id)
                self.guard.ensure_available(
                    target_employee_id,
                    target_date,
                    exclude_assignment_id=assignment.assignment_id,
                )
            elif project_changed:
                self._ensure_project_assignable(target_project_id)

            assignment.employee_id = target_employee_id
            assignment.project_id = target_project_id
            assignment.assignment_date = target_date
            for name in CLEARABLE_FIELDS:
                if name in values:
                    setattr(assignment, name, values[name])
            assignment.updated_by = actor_id
            assignment.updated_at = utcnow()
            self.db.flush()

            self.history.append(
                assignment=assignment,
                reason=ChangeReason.UPDATED,
                changed_by=actor_id,
                previous_project_id=previous_project_id,
                new_project_id=assignment.project_id,
            )

            payload = self._event_payload(assignment, actor_id)
            payload["previous_project_id"] = previous_project_id
            name = ev.ASSIGNMENT_MOVED if (project_changed or date_changed) else ev.ASSIGNMENT_UPDATED
            pending = [ev.SchedulingEvent(name, payload)]

        self.db.refresh(assignment)
        ev.publish(self.events, pending)
        return assignment

    def delete(self, assignment_id: int, actor_id: UUID) -> None:
        with transaction_scope(self.db, action="Assignment delete", conflict_detail="Assignment could not be deleted."):
            assignment = self.repo.get_assignment(assignment_id)
            if assignment is None:
                raise NotFoundError(f"Assignment with ID {assignment_id} not found.")

            self.history.append(
                assignment=assignment,
                reason=ChangeReason.DELETED,
                changed_by=actor_id,
                previous_project_id=assignment.project_id,
            )
            pending = [ev.SchedulingEvent(ev.ASSIGNMENT_DELETED, self._event_payload(assignment, actor_id))]
            self.repo.delete_assignment(assignment)

        ev.publish(self.events, pending)

    def bulk_create(self, items: list[AssignmentCreateData], actor_id: UUID) -> list[Assignment]:
        """Create every item or none of them."""

        if not items:
            raise ValidationError("At least one assignment is required.")

        batch: list[dict[str, object]] = []
        errors: list[str] = []
        for index, item in enumerate(items):
            try:
                batch.append(self._validated_create(item))
            except ValidationError as exc:
                errors.extend(f"Item {index}: {message}" for message in exc.errors)
        if errors:
            raise ValidationError("Validation error: " + ", ".join(errors), errors)

        created: list[Assignment] = []
        with transaction_scope(self.db, action="Bulk assignment create", conflict_detail=DOUBLE_BOOKING_DETAIL):
            for values in batch:
                created.append(self._insert(values, actor_id=actor_id, reason=ChangeReason.BULK_CREATED))
            pending = [
                ev.SchedulingEvent(ev.ASSIGNMENT_CREATED, self._event_payload(assignment, actor_id))
                for assignment in created
            ]

        logger.info("Bulk created %d assignments", len(created))
        ev.publish(self.events, pending)
        return created

    # ---------- Reads ----------
    def get(self, assignment_id: int) -> AssignmentRecord:
        row = self.repo.get_assignment_detail(assignment_id)
        if row is None:
            raise NotFoundError(f"Assignment with ID {assignment_id} not found.")
        return self._record_from_row(row)

    def get_by_date_range(
        self,
        start_date: date | str,
        end_date: date | str,
        filters: AssignmentFilters | None = None,
    ) -> list[AssignmentRecord]:
        start, end = parse_date_range(start_date, end_date)
        rows = self.repo.list_assignment_details(start_date=start, end_date=end, filters=filters)
        return [self._record_from_row(row) for row in rows]

    def get_conflicts(self, start_date: date | str, end_date: date | str) -> list[ConflictGroup]:
        start, end = parse_date_range(start_date, end_date)
        groups = [
            ConflictGroup(
                employee_id=employee_id,
                assignment_date=day,
                conflict_count=count,
                conflicting_projects=self.repo.list_project_ids_for_employee_date(employee_id, day),
            )
            for employee_id, day, count in self.repo.list_double_bookings(start_date=start, end_date=end)
        ]
        if groups:
            logger.warning("Found %d double-booked employee days between %s and %s", len(groups), start, end)
        return groups

    def get_history(self, assignment_id: int) -> list[AssignmentHistory]:
        entries = self.history.entries_for_assignment(assignment_id)
        if not entries and self.repo.get_assignment(assignment_id) is None:
            raise NotFoundError(f"Assignment with ID {assignment_id} not found.")
        return entries

    def get_employee_history(self, employee_id: str, *, limit: int | None = None) -> list[AssignmentHistory]:
        """Every recorded change for one employee, oldest first."""

        if limit is not None and limit < 1:
            raise ValidationError("limit must be a positive integer.")
        if self.repo.get_employee(employee_id) is None:
            raise NotFoundError(f"Employee with ID {employee_id} not found.")
        return self.history.entries_for_employee(employee_id, limit=limit)
