"""Domain error taxonomy for the scheduling engine.

Services raise these instead of HTTP exceptions so the engine can be driven
outside a request. ``crewboard.main`` maps them onto HTTP responses.
"""

from __future__ import annotations


class SchedulingError(Exception):
    """Base class for errors raised by the scheduling services."""

    status_code: int = 400

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail

    def to_payload(self) -> dict[str, object]:
        return {"detail": self.detail}


class ValidationError(SchedulingError):
    """Malformed or out-of-range input."""

    status_code = 422

    def __init__(self, detail: str, errors: list[str] | None = None) -> None:
        super().__init__(detail)
        self.errors = list(errors or [])

    def to_payload(self) -> dict[str, object]:
        payload = super().to_payload()
        if self.errors:
            payload["errors"] = self.errors
        return payload


class NotFoundError(SchedulingError):
    """Referenced employee, project, assignment or archive does not exist."""

    status_code = 404


class ConflictError(SchedulingError):
    """Double-booking, terminal-state reference or duplicate archive."""

    status_code = 409

    def __init__(self, detail: str, existing_id: int | None = None) -> None:
        super().__init__(detail)
        self.existing_id = existing_id

    def to_payload(self) -> dict[str, object]:
        payload = super().to_payload()
        if self.existing_id is not None:
            payload["existing_id"] = self.existing_id
        return payload


class PermissionDeniedError(SchedulingError):
    """Actor lacks the role required for an administrative operation."""

    status_code = 403


class StorageError(SchedulingError):
    """Transaction or connection failure reported by the database."""

    status_code = 503
