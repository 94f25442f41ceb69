from __future__ import annotations

from collections.abc import Generator
from datetime import date

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, text
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from crewboard.core.auth import ensure_user_principal
from crewboard.db.base import Base
from crewboard.db.dependencies import get_db_session
import crewboard.models.entities  # noqa: F401
from crewboard.main import create_app
from crewboard.models.entities import (
    Employee,
    EmployeeStatus,
    Position,
    Project,
    ProjectStatus,
    User,
    UserRole,
)
from crewboard.services.archive_service import ArchiveService
from crewboard.services.assignment_service import AssignmentService
from crewboard.services.events import SchedulingEvent
from crewboard.services.week_aggregator import WeekAggregator

# Fixed "today" for service tests; 2025-06-09 is a Monday.
TODAY = date(2025, 6, 9)


class RecordingSink:
    def __init__(self) -> None:
        self.events: list[SchedulingEvent] = []

    def emit(self, event: SchedulingEvent) -> None:
        self.events.append(event)

    @property
    def names(self) -> list[str]:
        return [event.name for event in self.events]


@pytest.fixture()
def db_session() -> Generator[Session, None, None]:
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(bind=engine)
    TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)

    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture()
def client(db_session: Session, sink: RecordingSink) -> Generator[TestClient, None, None]:
    app = create_app(event_sink=sink)

    def override_db() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[get_db_session] = override_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture()
def crew(db_session: Session) -> dict[str, object]:
    """Two positions, four employees and four projects in assorted states."""

    foreman = Position(name="Foreman", code="FM", color_code="#1F77B4")
    electrician = Position(name="Electrician", code="EL", color_code="#FF7F0E")
    db_session.add_all([foreman, electrician])
    db_session.flush()

    db_session.add_all(
        [
            Employee(employee_id="E001", name="Alice Moreno", position_id=foreman.position_id,
                     status=EmployeeStatus.ACTIVE, employee_number="1001"),
            Employee(employee_id="E002", name="Ben Carter", position_id=electrician.position_id,
                     status=EmployeeStatus.ACTIVE, employee_number="1002"),
            Employee(employee_id="E003", name="Cara Diaz", position_id=electrician.position_id,
                     status=EmployeeStatus.PTO, employee_number="1003"),
            Employee(employee_id="E900", name="Former Hand", position_id=None,
                     status=EmployeeStatus.TERMINATED, employee_number="1900"),
            Project(project_id="P1", name="Airport Terminal", number="24-001", status=ProjectStatus.ACTIVE),
            Project(project_id="P2", name="Bridge Retrofit", number="24-002", status=ProjectStatus.ACTIVE),
            Project(project_id="P8", name="Old Depot", number="22-008", status=ProjectStatus.COMPLETED),
            Project(project_id="P9", name="Stalled Mall", number="23-009", status=ProjectStatus.CANCELLED),
        ]
    )
    db_session.commit()
    return {"foreman_id": foreman.position_id, "electrician_id": electrician.position_id}


@pytest.fixture()
def manager(db_session: Session) -> User:
    return ensure_user_principal(
        db_session,
        email="pm@test.local",
        display_name="Project Manager",
        role=UserRole.PROJECT_MANAGER,
    )


@pytest.fixture()
def admin(db_session: Session) -> User:
    return ensure_user_principal(db_session, email="admin@test.local", display_name="Admin", role=UserRole.ADMIN)


@pytest.fixture()
def service(db_session: Session, sink: RecordingSink, crew: dict[str, object]) -> AssignmentService:
    return AssignmentService(db_session, events=sink, clock=lambda: TODAY)


@pytest.fixture()
def aggregator(service: AssignmentService) -> WeekAggregator:
    return WeekAggregator(service)


@pytest.fixture()
def archives(db_session: Session, aggregator: WeekAggregator, sink: RecordingSink) -> ArchiveService:
    return ArchiveService(db_session, aggregator, events=sink)


@pytest.fixture()
def unconstrained_assignments(db_session: Session, crew: dict[str, object]) -> None:
    """Recreate ``assignments`` without the one-booking-per-day constraint, as legacy data may be."""

    db_session.execute(text("DROP TABLE assignments"))
    db_session.execute(
        text(
            "CREATE TABLE assignments ("
            "assignment_id INTEGER PRIMARY KEY, "
            "employee_id VARCHAR(10) NOT NULL, "
            "project_id VARCHAR(20) NOT NULL, "
            "assignment_date DATE NOT NULL, "
            "notes TEXT, "
            "location VARCHAR(255), "
            "task_description TEXT, "
            "created_by CHAR(32) NOT NULL, "
            "updated_by CHAR(32), "
            "created_at DATETIME NOT NULL, "
            "updated_at DATETIME NOT NULL)"
        )
    )
    db_session.commit()
