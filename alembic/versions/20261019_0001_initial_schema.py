"""initial assignment scheduling schema

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None


user_role = postgresql.ENUM(
    "Admin", "Project Manager", "Branch Manager", "HR", "View Only", name="user_role", create_type=False
)
employee_status = postgresql.ENUM(
    "Active", "PTO", "Leave", "Military", "Terminated", name="employee_status", create_type=False
)
project_status = postgresql.ENUM(
    "Active", "Planned", "On Hold", "Completed", "Cancelled", name="project_status", create_type=False
)


def upgrade() -> None:
    user_role.create(op.get_bind(), checkfirst=True)
    employee_status.create(op.get_bind(), checkfirst=True)
    project_status.create(op.get_bind(), checkfirst=True)

    op.create_table(
        "users",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("email", sa.String(length=320), nullable=False, unique=True),
        sa.Column("display_name", sa.String(length=255), nullable=False),
        sa.Column("role", user_role, nullable=False),
        sa.Column("last_login_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )

    op.create_table(
        "positions",
        sa.Column("position_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(length=50), nullable=False, unique=True),
        sa.Column("code", sa.String(length=10), nullable=False, unique=True),
        sa.Column("color_code", sa.String(length=7), nullable=False, server_default="#000000"),
    )

    op.create_table(
        "employees",
        sa.Column("employee_id", sa.String(length=10), primary_key=True),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("position_id", sa.Integer(), sa.ForeignKey("positions.position_id"), nullable=True),
        sa.Column("status", employee_status, nullable=False, server_default="Active"),
        sa.Column("employee_number", sa.String(length=20), nullable=True),
    )
    op.create_index("ix_employees_position_id", "employees", ["position_id"])

    op.create_table(
        "projects",
        sa.Column("project_id", sa.String(length=20), primary_key=True),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("number", sa.String(length=20), nullable=False, unique=True),
        sa.Column("status", project_status, nullable=False, server_default="Active"),
    )

    op.create_table(
        "assignments",
        sa.Column("assignment_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("employee_id", sa.String(length=10), sa.ForeignKey("employees.employee_id"), nullable=False),
        sa.Column("project_id", sa.String(length=20), sa.ForeignKey("projects.project_id"), nullable=False),
        sa.Column("assignment_date", sa.Date(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("location", sa.String(length=255), nullable=True),
        sa.Column("task_description", sa.Text(), nullable=True),
        sa.Column("created_by", postgresql.UUID(as_uuid=True), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("updated_by", postgresql.UUID(as_uuid=True), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_unique_constraint(
        "uq_assignments_employee_date", "assignments", ["employee_id", "assignment_date"]
    )
    op.create_index("ix_assignments_assignment_date", "assignments", ["assignment_date"])
    op.create_index("ix_assignments_project_date", "assignments", ["project_id", "assignment_date"])

    op.create_table(
        "assignment_history",
        sa.Column("history_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("assignment_id", sa.Integer(), nullable=False),
        sa.Column("employee_id", sa.String(length=10), nullable=False),
        sa.Column("previous_project_id", sa.String(length=20), nullable=True),
        sa.Column("new_project_id", sa.String(length=20), nullable=True),
        sa.Column("assignment_date", sa.Date(), nullable=False),
        sa.Column("change_reason", sa.String(length=64), nullable=False),
        sa.Column("changed_by", postgresql.UUID(as_uuid=True), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_assignment_history_assignment_id", "assignment_history", ["assignment_id"])
    op.create_index(
        "ix_assignment_history_employee_date", "assignment_history", ["employee_id", "assignment_date"]
    )
    op.create_index("ix_assignment_history_created_at", "assignment_history", ["created_at"])

    op.create_table(
        "weekly_archives",
        sa.Column("archive_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("week_start_date", sa.Date(), nullable=False),
        sa.Column("week_end_date", sa.Date(), nullable=False),
        sa.Column("archive_data", postgresql.JSONB(), nullable=False),
        sa.Column("created_by", postgresql.UUID(as_uuid=True), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_unique_constraint(
        "uq_weekly_archives_week", "weekly_archives", ["week_start_date", "week_end_date"]
    )


def downgrade() -> None:
    op.drop_constraint("uq_weekly_archives_week", "weekly_archives", type_="unique")
    op.drop_table("weekly_archives")

    op.drop_index("ix_assignment_history_created_at", table_name="assignment_history")
    op.drop_index("ix_assignment_history_employee_date", table_name="assignment_history")
    op.drop_index("ix_assignment_history_assignment_id", table_name="assignment_history")
    op.drop_table("assignment_history")

    op.drop_index("ix_assignments_project_date", table_name="assignments")
    op.drop_index("ix_assignments_assignment_date", table_name="assignments")
    op.drop_constraint("uq_assignments_employee_date", "assignments", type_="unique")
    op.drop_table("assignments")

    op.drop_table("projects")
    op.drop_index("ix_employees_position_id", table_name="employees")
    op.drop_table("employees")
    op.drop_table("positions")
    op.drop_table("users")

    project_status.drop(op.get_bind(), checkfirst=True)
    employee_status.drop(op.get_bind(), checkfirst=True)
    user_role.drop(op.get_bind(), checkfirst=True)
