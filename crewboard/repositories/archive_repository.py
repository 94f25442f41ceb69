"""Repository helpers for weekly archive snapshots."""

from __future__ import annotations

from datetime import date

from sqlalchemy import and_, func, select
from sqlalchemy.orm import Session

from crewboard.models.entities import WeeklyArchive


class ArchiveRepository:
    """Persistence operations used by the archive service."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def get_archive(self, archive_id: int) -> WeeklyArchive | None:
        return self.db.scalar(select(WeeklyArchive).where(WeeklyArchive.archive_id == archive_id))

    def get_archive_for_week(self, *, week_start_date: date, week_end_date: date) -> WeeklyArchive | None:
        return self.db.scalar(
            select(WeeklyArchive).where(
                and_(
                    WeeklyArchive.week_start_date == week_start_date,
                    WeeklyArchive.week_end_date == week_end_date,
                )
            )
        )

    def list_archives(self, *, offset: int, limit: int) -> list[WeeklyArchive]:
        return self.db.scalars(
            select(WeeklyArchive)
            .order_by(WeeklyArchive.week_start_date.desc())
            .offset(offset)
            .limit(limit)
        ).all()

    def archive_count(self) -> int:
        return self.db.scalar(select(func.count()).select_from(WeeklyArchive)) or 0

    def add_archive(self, archive: WeeklyArchive) -> WeeklyArchive:
        self.db.add(archive)
        self.db.flush()
        return archive

    def delete_archive(self, archive: WeeklyArchive) -> None:
        self.db.delete(archive)
        self.db.flush()
