"""Authentication context extraction and role guard utilities."""

from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from crewboard.core.config import get_settings
from crewboard.db.dependencies import get_db_session
from crewboard.models.entities import User, UserRole, utcnow

MANAGER_ROLES = frozenset({UserRole.ADMIN, UserRole.PROJECT_MANAGER, UserRole.BRANCH_MANAGER})


@dataclass(frozen=True)
class RequestUserContext:
    """Authenticated request actor resolved from headers and DB state."""

    user_id: UUID
    email: str
    display_name: str
    role: UserRole


def _require_identity_headers(x_user_email: str | None, x_user_name: str | None) -> tuple[str, str]:
    if not x_user_email:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing identity headers. Expected X-User-Email or enable development principal fallback.",
        )

    display_name = x_user_name or x_user_email
    return x_user_email.strip().lower(), display_name.strip()


def _resolve_identity(x_user_email: str | None, x_user_name: str | None) -> tuple[str, str, UserRole]:
    settings = get_settings()
    if x_user_email:
        email, display_name = _require_identity_headers(x_user_email, x_user_name)
        return email, display_name, UserRole.VIEW_ONLY

    if settings.auth_allow_dev_principal:
        return (
            settings.auth_dev_email.strip().lower(),
            settings.auth_dev_display_name.strip(),
            UserRole(settings.auth_dev_role),
        )

    email, display_name = _require_identity_headers(x_user_email, x_user_name)
    return email, display_name, UserRole.VIEW_ONLY


def _upsert_user(db: Session, *, email: str, display_name: str, default_role: UserRole) -> User:
    user = db.scalar(select(User).where(User.email == email))
    now = utcnow()

    if user is None:
        user = User(
            email=email,
            display_name=display_name,
            role=default_role,
            last_login_at=now,
            created_at=now,
            updated_at=now,
        )
        db.add(user)
        db.flush()
        return user

    if user.display_name != display_name:
        user.display_name = display_name
        user.updated_at = now
    user.last_login_at = now
    db.flush()
    return user


def ensure_user_principal(
    db: Session,
    *,
    email: str,
    display_name: str,
    role: UserRole = UserRole.VIEW_ONLY,
) -> User:
    """Ensure user exists with ``role`` and return persisted row.

    Utility exported for tests and seed helpers.
    """

    normalized_email = email.strip().lower()
    user = _upsert_user(
        db,
        email=normalized_email,
        display_name=display_name.strip() or normalized_email,
        default_role=role,
    )
    user.role = role
    db.commit()
    db.refresh(user)
    return user


def get_current_user_context(
    x_user_email: str | None = Header(default=None, alias="X-User-Email"),
    x_user_name: str | None = Header(default=None, alias="X-User-Name"),
    db: Session = Depends(get_db_session),
) -> RequestUserContext:
    """Resolve current request user.

    Identity comes from trusted proxy headers; the role is whatever the
    ``users`` row holds. New users start as ``View Only``.
    """

    email, display_name, default_role = _resolve_identity(x_user_email, x_user_name)
    user = _upsert_user(db, email=email, display_name=display_name, default_role=default_role)
    db.commit()

    return RequestUserContext(
        user_id=user.id,
        email=user.email,
        display_name=user.display_name,
        role=user.role,
    )


def has_role(context: RequestUserContext, allowed_roles: set[UserRole] | frozenset[UserRole]) -> bool:
    """Check whether user holds one of the allowed roles."""

    return context.role in allowed_roles


def require_roles(*roles: UserRole):
    """Dependency factory requiring at least one provided role."""

    allowed = set(roles)

    def dependency(context: RequestUserContext = Depends(get_current_user_context)) -> RequestUserContext:
        if not has_role(context, allowed):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient role permissions for this operation.",
            )
        return context

    return dependency


require_manager = require_roles(*MANAGER_ROLES)
