"""Commit/rollback discipline shared by the mutating services."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from crewboard.core.errors import ConflictError, SchedulingError, StorageError

logger = logging.getLogger(__name__)


@contextmanager
def transaction_scope(db: Session, *, action: str, conflict_detail: str) -> Iterator[None]:
    """Run the block and commit, or roll back everything on any error.

    Integrity violations surface as ``ConflictError`` with ``conflict_detail``;
    other database failures surface as ``StorageError``. Nothing is retried.
    """

    try:
        yield
        db.commit()
    except SchedulingError:
        db.rollback()
        raise
    except IntegrityError as exc:
        db.rollback()
        logger.warning("%s rejected by database constraint: %s", action, exc.orig)
        raise ConflictError(conflict_detail) from exc
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("%s failed, transaction rolled back: %s", action, exc)
        raise StorageError(f"{action} failed due to a storage error.") from exc
    except Exception:
        db.rollback()
        raise
