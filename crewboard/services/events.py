"""Domain events emitted by the scheduling services after commit."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Protocol

ASSIGNMENT_CREATED = "assignment_created"
ASSIGNMENT_UPDATED = "assignment_updated"
ASSIGNMENT_MOVED = "assignment_moved"
ASSIGNMENT_DELETED = "assignment_deleted"
WEEK_ARCHIVED = "week_archived"
ARCHIVE_DELETED = "archive_deleted"


@dataclass(slots=True, frozen=True)
class SchedulingEvent:
    name: str
    payload: dict[str, object] = field(default_factory=dict)


class EventSink(Protocol):
    """Fire-and-forget receiver of committed scheduling events."""

    def emit(self, event: SchedulingEvent) -> None: ...


class NullEventSink:
    def emit(self, event: SchedulingEvent) -> None:
        return None


class LoggingEventSink:
    """Writes every event to the ``crewboard.events`` logger at INFO."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self.logger = logger or logging.getLogger("crewboard.events")

    def emit(self, event: SchedulingEvent) -> None:
        self.logger.info("%s %s", event.name, event.payload)


def publish(sink: EventSink, events: list[SchedulingEvent]) -> None:
    """Deliver events without letting a failing sink affect the caller."""

    for event in events:
        try:
            sink.emit(event)
        except Exception:  # noqa: BLE001
            logging.getLogger(__name__).exception("Event sink failed for %s", event.name)
