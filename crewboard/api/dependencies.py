"""Service factories shared by the route modules."""

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from crewboard.db.dependencies import get_db_session
from crewboard.services.archive_service import ArchiveService
from crewboard.services.assignment_service import AssignmentService
from crewboard.services.dashboard_service import DashboardService
from crewboard.services.events import EventSink, LoggingEventSink
from crewboard.services.week_aggregator import WeekAggregator


def get_event_sink(request: Request) -> EventSink:
    """Sink configured on the application at startup."""

    return getattr(request.app.state, "event_sink", None) or LoggingEventSink()


def get_assignment_service(
    db: Session = Depends(get_db_session),
    events: EventSink = Depends(get_event_sink),
) -> AssignmentService:
    return AssignmentService(db, events=events)


def get_week_aggregator(
    assignments: AssignmentService = Depends(get_assignment_service),
) -> WeekAggregator:
    return WeekAggregator(assignments)


def get_dashboard_service(
    assignments: AssignmentService = Depends(get_assignment_service),
) -> DashboardService:
    return DashboardService(assignments)


def get_archive_service(
    db: Session = Depends(get_db_session),
    aggregator: WeekAggregator = Depends(get_week_aggregator),
    events: EventSink = Depends(get_event_sink),
) -> ArchiveService:
    return ArchiveService(db, aggregator, events=events)
