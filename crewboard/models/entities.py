"""ORM entities for the crew assignment schema."""

from __future__ import annotations

import enum
import uuid
from datetime import date, datetime, timezone

from sqlalchemy import (
    JSON,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column

from crewboard.db.base import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class EmployeeStatus(str, enum.Enum):
    ACTIVE = "Active"
    PTO = "PTO"
    LEAVE = "Leave"
    MILITARY = "Military"
    TERMINATED = "Terminated"


class ProjectStatus(str, enum.Enum):
    ACTIVE = "Active"
    PLANNED = "Planned"
    ON_HOLD = "On Hold"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"


class UserRole(str, enum.Enum):
    ADMIN = "Admin"
    PROJECT_MANAGER = "Project Manager"
    BRANCH_MANAGER = "Branch Manager"
    HR = "HR"
    VIEW_ONLY = "View Only"


class ChangeReason(str, enum.Enum):
    CREATED = "Assignment created"
    UPDATED = "Assignment updated"
    DELETED = "Assignment deleted"
    BULK_CREATED = "Bulk assignment created"


TERMINAL_PROJECT_STATUSES = frozenset({ProjectStatus.COMPLETED, ProjectStatus.CANCELLED})


def _enum_column(enum_cls: type[enum.Enum], name: str) -> SQLEnum:
    return SQLEnum(
        enum_cls,
        name=name,
        values_callable=lambda members: [member.value for member in members],
    )


class User(Base):
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    email: Mapped[str] = mapped_column(String(320), unique=True, nullable=False)
    display_name: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[UserRole] = mapped_column(
        _enum_column(UserRole, "user_role"), nullable=False, default=UserRole.VIEW_ONLY
    )
    last_login_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)


class Position(Base):
    __tablename__ = "positions"

    position_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    code: Mapped[str] = mapped_column(String(10), unique=True, nullable=False)
    color_code: Mapped[str] = mapped_column(String(7), nullable=False, default="#000000")


class Employee(Base):
    __tablename__ = "employees"
    __table_args__ = (Index("ix_employees_position_id", "position_id"),)

    employee_id: Mapped[str] = mapped_column(String(10), primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    position_id: Mapped[int | None] = mapped_column(ForeignKey("positions.position_id"), nullable=True)
    status: Mapped[EmployeeStatus] = mapped_column(
        _enum_column(EmployeeStatus, "employee_status"), nullable=False, default=EmployeeStatus.ACTIVE
    )
    employee_number: Mapped[str | None] = mapped_column(String(20), nullable=True)


class Project(Base):
    __tablename__ = "projects"

    project_id: Mapped[str] = mapped_column(String(20), primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    number: Mapped[str] = mapped_column(String(20), unique=True, nullable=False)
    status: Mapped[ProjectStatus] = mapped_column(
        _enum_column(ProjectStatus, "project_status"), nullable=False, default=ProjectStatus.ACTIVE
    )


class Assignment(Base):
    __tablename__ = "assignments"
    __table_args__ = (
        # One employee per day. The service checks first; this is the backstop.
        UniqueConstraint("employee_id", "assignment_date", name="uq_assignments_employee_date"),
        Index("ix_assignments_assignment_date", "assignment_date"),
        Index("ix_assignments_project_date", "project_id", "assignment_date"),
    )

    assignment_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    employee_id: Mapped[str] = mapped_column(String(10), ForeignKey("employees.employee_id"), nullable=False)
    project_id: Mapped[str] = mapped_column(String(20), ForeignKey("projects.project_id"), nullable=False)
    assignment_date: Mapped[date] = mapped_column(Date, nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    location: Mapped[str | None] = mapped_column(String(255), nullable=True)
    task_description: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_by: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=False)
    updated_by: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)


class AssignmentHistory(Base):
    __tablename__ = "assignment_history"
    __table_args__ = (
        Index("ix_assignment_history_assignment_id", "assignment_id"),
        Index("ix_assignment_history_employee_date", "employee_id", "assignment_date"),
        Index("ix_assignment_history_created_at", "created_at"),
    )

    history_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # Not a foreign key: entries outlive the assignment they describe.
    assignment_id: Mapped[int] = mapped_column(Integer, nullable=False)
    employee_id: Mapped[str] = mapped_column(String(10), nullable=False)
    previous_project_id: Mapped[str | None] = mapped_column(String(20), nullable=True)
    new_project_id: Mapped[str | None] = mapped_column(String(20), nullable=True)
    assignment_date: Mapped[date] = mapped_column(Date, nullable=False)
    change_reason: Mapped[str] = mapped_column(String(64), nullable=False)
    changed_by: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)


class WeeklyArchive(Base):
    __tablename__ = "weekly_archives"
    __table_args__ = (
        UniqueConstraint("week_start_date", "week_end_date", name="uq_weekly_archives_week"),
    )

    archive_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    week_start_date: Mapped[date] = mapped_column(Date, nullable=False)
    week_end_date: Mapped[date] = mapped_column(Date, nullable=False)
    archive_data: Mapped[dict] = mapped_column(JSON().with_variant(JSONB(), "postgresql"), nullable=False)
    created_by: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
