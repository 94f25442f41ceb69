"""Request-scoped session for the FastAPI routes."""

import logging
from collections.abc import Iterator

from sqlalchemy.orm import Session

from crewboard.db.session import SessionLocal

logger = logging.getLogger(__name__)


def get_db_session() -> Iterator[Session]:
    """One session per request; uncommitted work is discarded when the request fails."""

    db = SessionLocal()
    try:
        yield db
    except Exception:
        logger.debug("Request failed, discarding uncommitted session state")
        db.rollback()
        raise
    finally:
        db.close()
