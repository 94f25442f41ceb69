"""ORM model package."""

from crewboard.models.entities import (
    Assignment,
    AssignmentHistory,
    ChangeReason,
    Employee,
    EmployeeStatus,
    Position,
    Project,
    ProjectStatus,
    User,
    UserRole,
    WeeklyArchive,
)

__all__ = [
    "Assignment",
    "AssignmentHistory",
    "ChangeReason",
    "Employee",
    "EmployeeStatus",
    "Position",
    "Project",
    "ProjectStatus",
    "User",
    "UserRole",
    "WeeklyArchive",
]
