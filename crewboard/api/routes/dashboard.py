"""Week grid, statistics and integrity endpoints for the dashboard."""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, Query

from crewboard.api.dependencies import get_assignment_service, get_dashboard_service, get_week_aggregator
from crewboard.core.auth import RequestUserContext, get_current_user_context
from crewboard.services.assignment_service import AssignmentService
from crewboard.services.calendar import range_or_current_week, utc_today, week_start_for
from crewboard.services.dashboard_service import DashboardService
from crewboard.services.week_aggregator import WeekAggregator

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("/current")
def get_current_week(
    _: RequestUserContext = Depends(get_current_user_context),
    aggregator: WeekAggregator = Depends(get_week_aggregator),
) -> dict[str, object]:
    return aggregator.get_week_assignments(week_start_for(utc_today())).to_dict()


@router.get("/week/{day}")
def get_week(
    day: date,
    _: RequestUserContext = Depends(get_current_user_context),
    aggregator: WeekAggregator = Depends(get_week_aggregator),
) -> dict[str, object]:
    """Grid for the work week containing ``day``."""

    return aggregator.get_week_assignments(week_start_for(day)).to_dict()


@router.get("/summary")
def get_summary(
    start_date: date | None = None,
    end_date: date | None = None,
    _: RequestUserContext = Depends(get_current_user_context),
    dashboard: DashboardService = Depends(get_dashboard_service),
) -> dict[str, object]:
    start, end = range_or_current_week(start_date, end_date, utc_today())
    return dashboard.summary(start, end).to_dict()


@router.get("/recent-activity")
def get_recent_activity(
    limit: int = Query(default=10),
    _: RequestUserContext = Depends(get_current_user_context),
    dashboard: DashboardService = Depends(get_dashboard_service),
) -> dict[str, object]:
    start, end, records = dashboard.recent_activity(limit=limit)
    return {
        "activities": [
            {
                "type": "assignment",
                "assignment_id": record.assignment_id,
                "employee_name": record.employee_name,
                "project_name": record.project_name,
                "assignment_date": record.assignment_date.isoformat(),
                "created_at": record.created_at.isoformat(),
                "created_by": str(record.created_by),
            }
            for record in records
        ],
        "date_range": {"start_date": start.isoformat(), "end_date": end.isoformat()},
        "count": len(records),
    }


def _conflict_response(service: AssignmentService, start: date, end: date) -> dict[str, object]:
    conflicts = service.get_conflicts(start, end)
    return {
        "conflicts": [group.to_dict() for group in conflicts],
        "date_range": {"start_date": start.isoformat(), "end_date": end.isoformat()},
        "count": len(conflicts),
    }


@router.get("/conflicts")
def get_conflicts(
    start_date: date | None = None,
    end_date: date | None = None,
    _: RequestUserContext = Depends(get_current_user_context),
    service: AssignmentService = Depends(get_assignment_service),
) -> dict[str, object]:
    start, end = range_or_current_week(start_date, end_date, utc_today())
    return _conflict_response(service, start, end)


@router.get("/conflicts/{day}")
def get_conflicts_on_day(
    day: date,
    _: RequestUserContext = Depends(get_current_user_context),
    service: AssignmentService = Depends(get_assignment_service),
) -> dict[str, object]:
    return _conflict_response(service, day, day)
