"""Weekly archive endpoints."""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, Query, Response, status
from pydantic import BaseModel

from crewboard.api.dependencies import get_archive_service
from crewboard.core.auth import RequestUserContext, get_current_user_context, require_manager
from crewboard.services.archive_service import ArchiveService

router = APIRouter(prefix="/archives", tags=["archives"])


class ArchiveCreatePayload(BaseModel):
    week_start_date: date


@router.get("")
def list_archives(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1),
    _: RequestUserContext = Depends(get_current_user_context),
    service: ArchiveService = Depends(get_archive_service),
) -> dict[str, object]:
    result = service.list_archives(page=page, limit=limit)
    return {
        "items": [service.serialize_archive(archive, include_data=False) for archive in result.items],
        "pagination": result.pagination(),
    }


@router.post("", status_code=status.HTTP_201_CREATED)
def create_archive(
    payload: ArchiveCreatePayload,
    context: RequestUserContext = Depends(require_manager),
    service: ArchiveService = Depends(get_archive_service),
) -> dict[str, object]:
    archive = service.create(payload.week_start_date, context.user_id)
    return service.serialize_archive(archive)


@router.get("/week/{day}")
def get_archive_for_week(
    day: date,
    _: RequestUserContext = Depends(get_current_user_context),
    service: ArchiveService = Depends(get_archive_service),
) -> dict[str, object]:
    return service.serialize_archive(service.get_by_week(day))


@router.get("/{archive_id}")
def get_archive(
    archive_id: int,
    _: RequestUserContext = Depends(get_current_user_context),
    service: ArchiveService = Depends(get_archive_service),
) -> dict[str, object]:
    return service.serialize_archive(service.get(archive_id))


@router.delete("/{archive_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_archive(
    archive_id: int,
    context: RequestUserContext = Depends(get_current_user_context),
    service: ArchiveService = Depends(get_archive_service),
) -> Response:
    service.delete(archive_id, actor_id=context.user_id, actor_role=context.role)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
