"""Assignment CRUD endpoints."""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel, Field

from crewboard.api.dependencies import get_assignment_service
from crewboard.core.auth import RequestUserContext, get_current_user_context, require_manager
from crewboard.repositories.assignment_repository import AssignmentFilters
from crewboard.services.assignment_service import (
    AssignmentCreateData,
    AssignmentService,
    AssignmentUpdateData,
)
from crewboard.services.calendar import range_or_current_week, utc_today
from crewboard.services.history_log import HistoryLog

router = APIRouter(prefix="/assignments", tags=["assignments"])


class AssignmentCreatePayload(BaseModel):
    employee_id: str = Field(min_length=1, max_length=10)
    project_id: str = Field(min_length=1, max_length=20)
    assignment_date: date
    notes: str | None = Field(default=None, max_length=1000)
    location: str | None = Field(default=None, max_length=255)
    task_description: str | None = Field(default=None, max_length=1000)

    def to_data(self) -> AssignmentCreateData:
        return AssignmentCreateData(
            employee_id=self.employee_id,
            project_id=self.project_id,
            assignment_date=self.assignment_date,
            notes=self.notes,
            location=self.location,
            task_description=self.task_description,
        )


class AssignmentUpdatePayload(BaseModel):
    employee_id: str | None = Field(default=None, min_length=1, max_length=10)
    project_id: str | None = Field(default=None, min_length=1, max_length=20)
    assignment_date: date | None = None
    notes: str | None = Field(default=None, max_length=1000)
    location: str | None = Field(default=None, max_length=255)
    task_description: str | None = Field(default=None, max_length=1000)

    def to_data(self) -> AssignmentUpdateData:
        """Omitted fields stay unchanged; an explicit ``null`` clears the field."""

        sent = self.model_dump(exclude_unset=True)
        values = {name: value for name, value in sent.items() if value is not None}
        cleared = tuple(name for name, value in sent.items() if value is None)
        return AssignmentUpdateData(**values, cleared=cleared)


class AssignmentBulkPayload(BaseModel):
    assignments: list[AssignmentCreatePayload] = Field(min_length=1)


@router.get("")
def list_assignments(
    start_date: date | None = None,
    end_date: date | None = None,
    project_id: str | None = None,
    employee_id: str | None = None,
    position_id: int | None = None,
    _: RequestUserContext = Depends(get_current_user_context),
    service: AssignmentService = Depends(get_assignment_service),
) -> dict[str, object]:
    start, end = range_or_current_week(start_date, end_date, utc_today())

    records = service.get_by_date_range(
        start,
        end,
        AssignmentFilters(project_id=project_id, employee_id=employee_id, position_id=position_id),
    )
    return {
        "items": [record.to_dict() for record in records],
        "date_range": {"start_date": start.isoformat(), "end_date": end.isoformat()},
    }


@router.post("", status_code=status.HTTP_201_CREATED)
def create_assignment(
    payload: AssignmentCreatePayload,
    context: RequestUserContext = Depends(require_manager),
    service: AssignmentService = Depends(get_assignment_service),
) -> dict[str, object]:
    assignment = service.create(payload.to_data(), context.user_id)
    return service.serialize_assignment(assignment)


@router.post("/bulk", status_code=status.HTTP_201_CREATED)
def bulk_create_assignments(
    payload: AssignmentBulkPayload,
    context: RequestUserContext = Depends(require_manager),
    service: AssignmentService = Depends(get_assignment_service),
) -> dict[str, object]:
    created = service.bulk_create([item.to_data() for item in payload.assignments], context.user_id)
    return {
        "items": [service.serialize_assignment(assignment) for assignment in created],
        "count": len(created),
    }


@router.get("/history")
def get_employee_history(
    employee_id: str,
    limit: int | None = None,
    _: RequestUserContext = Depends(get_current_user_context),
    service: AssignmentService = Depends(get_assignment_service),
) -> dict[str, list[object]]:
    entries = service.get_employee_history(employee_id, limit=limit)
    return {"items": [HistoryLog.serialize(entry) for entry in entries]}


@router.get("/{assignment_id}")
def get_assignment(
    assignment_id: int,
    _: RequestUserContext = Depends(get_current_user_context),
    service: AssignmentService = Depends(get_assignment_service),
) -> dict[str, object]:
    return service.get(assignment_id).to_dict()


@router.get("/{assignment_id}/history")
def get_assignment_history(
    assignment_id: int,
    _: RequestUserContext = Depends(get_current_user_context),
    service: AssignmentService = Depends(get_assignment_service),
) -> dict[str, list[object]]:
    return {"items": [HistoryLog.serialize(entry) for entry in service.get_history(assignment_id)]}


@router.put("/{assignment_id}")
def update_assignment(
    assignment_id: int,
    payload: AssignmentUpdatePayload,
    context: RequestUserContext = Depends(require_manager),
    service: AssignmentService = Depends(get_assignment_service),
) -> dict[str, object]:
    assignment = service.update(
        assignment_id,
        payload.to_data(),
        context.user_id,
    )
    return service.serialize_assignment(assignment)


@router.delete("/{assignment_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_assignment(
    assignment_id: int,
    context: RequestUserContext = Depends(require_manager),
    service: AssignmentService = Depends(get_assignment_service),
) -> Response:
    service.delete(assignment_id, context.user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
