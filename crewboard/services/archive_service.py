"""Immutable weekly snapshots of the assignment grid."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from uuid import UUID

from sqlalchemy.orm import Session

from crewboard.core.config import get_settings
from crewboard.core.errors import ConflictError, NotFoundError, PermissionDeniedError, ValidationError
from crewboard.db.transactions import transaction_scope
from crewboard.models.entities import UserRole, WeeklyArchive, utcnow
from crewboard.repositories.archive_repository import ArchiveRepository
from crewboard.services import events as ev
from crewboard.services.calendar import ensure_week_start, parse_date, week_end_for, week_start_for
from crewboard.services.week_aggregator import WeekAggregator

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ArchivePage:
    items: list[WeeklyArchive]
    page: int
    limit: int
    total: int

    @property
    def total_pages(self) -> int:
        return (self.total + self.limit - 1) // self.limit

    def pagination(self) -> dict[str, object]:
        return {
            "page": self.page,
            "limit": self.limit,
            "total": self.total,
            "total_pages": self.total_pages,
            "has_next": self.page < self.total_pages,
            "has_prev": self.page > 1,
        }


class ArchiveService:
    """Creates and reads weekly archives; deletion is admin only."""

    def __init__(
        self,
        db: Session,
        aggregator: WeekAggregator,
        *,
        events: ev.EventSink | None = None,
    ) -> None:
        self.db = db
        self.repo = ArchiveRepository(db)
        self.aggregator = aggregator
        self.events = events or ev.LoggingEventSink()
        self.settings = get_settings()

    @staticmethod
    def serialize_archive(archive: WeeklyArchive, *, include_data: bool = True) -> dict[str, object]:
        payload: dict[str, object] = {
            "archive_id": archive.archive_id,
            "week_start_date": archive.week_start_date.isoformat(),
            "week_end_date": archive.week_end_date.isoformat(),
            "created_by": str(archive.created_by),
            "created_at": archive.created_at.isoformat(),
        }
        if include_data:
            payload["archive_data"] = archive.archive_data
        return payload

    def create(self, week_start_date: date | str, actor_id: UUID) -> WeeklyArchive:
        week_start = ensure_week_start(week_start_date)
        week_end = week_end_for(week_start)

        existing = self.repo.get_archive_for_week(week_start_date=week_start, week_end_date=week_end)
        if existing is not None:
            raise ConflictError(
                f"Archive for week {week_start.isoformat()} to {week_end.isoformat()} already exists.",
                existing_id=existing.archive_id,
            )

        grid = self.aggregator.get_week_assignments(week_start)
        try:
            with transaction_scope(
                self.db,
                action="Week archive",
                conflict_detail=f"Archive for week {week_start.isoformat()} to {week_end.isoformat()} already exists.",
            ):
                archive = self.repo.add_archive(
                    WeeklyArchive(
                        week_start_date=week_start,
                        week_end_date=week_end,
                        archive_data=grid.to_dict(),
                        created_by=actor_id,
                        created_at=utcnow(),
                    )
                )
        except ConflictError as exc:
            # Another writer archived the same week between the check and the insert.
            existing = self.repo.get_archive_for_week(week_start_date=week_start, week_end_date=week_end)
            if existing is None:
                raise
            raise ConflictError(exc.detail, existing_id=existing.archive_id) from exc

        self.db.refresh(archive)
        ev.publish(
            self.events,
            [
                ev.SchedulingEvent(
                    ev.WEEK_ARCHIVED,
                    {
                        "archive_id": archive.archive_id,
                        "week_start": week_start.isoformat(),
                        "week_end": week_end.isoformat(),
                        "assignment_count": grid.summary.total_assignments,
                        "actor_id": str(actor_id),
                    },
                )
            ],
        )
        return archive

    def get(self, archive_id: int) -> WeeklyArchive:
        archive = self.repo.get_archive(archive_id)
        if archive is None:
            raise NotFoundError(f"Archive with ID {archive_id} not found.")
        return archive

    def get_by_week(self, day: date | str) -> WeeklyArchive:
        week_start = week_start_for(parse_date(day, "date"))
        week_end = week_end_for(week_start)
        archive = self.repo.get_archive_for_week(week_start_date=week_start, week_end_date=week_end)
        if archive is None:
            raise NotFoundError(f"No archive found for week {week_start.isoformat()} to {week_end.isoformat()}.")
        return archive

    def list_archives(self, *, page: int = 1, limit: int = 20) -> ArchivePage:
        if page < 1:
            raise ValidationError("page must be a positive integer.")
        if not 1 <= limit <= self.settings.archive_page_size_max:
            raise ValidationError(f"limit must be between 1 and {self.settings.archive_page_size_max}.")

        return ArchivePage(
            items=self.repo.list_archives(offset=(page - 1) * limit, limit=limit),
            page=page,
            limit=limit,
            total=self.repo.archive_count(),
        )

    def delete(self, archive_id: int, *, actor_id: UUID, actor_role: UserRole) -> None:
        """Administrative removal of a snapshot."""

        if actor_role is not UserRole.ADMIN:
            raise PermissionDeniedError("Only administrators can delete archives.")

        with transaction_scope(self.db, action="Archive delete", conflict_detail="Archive could not be deleted."):
            archive = self.get(archive_id)
            payload = {
                "archive_id": archive.archive_id,
                "week_start": archive.week_start_date.isoformat(),
                "week_end": archive.week_end_date.isoformat(),
                "actor_id": str(actor_id),
            }
            self.repo.delete_archive(archive)

        logger.info("Archive %s deleted by %s", archive_id, actor_id)
        ev.publish(self.events, [ev.SchedulingEvent(ev.ARCHIVE_DELETED, payload)])
