from __future__ import annotations

import uuid

from fastapi.testclient import TestClient

from crewboard.core.auth import MANAGER_ROLES, RequestUserContext, has_role
from crewboard.models.entities import UserRole


def _context(role: UserRole) -> RequestUserContext:
    return RequestUserContext(
        user_id=uuid.uuid4(),
        email="user@test.local",
        display_name="User",
        role=role,
    )


def test_has_role_matches_manager_roles() -> None:
    assert has_role(_context(UserRole.BRANCH_MANAGER), MANAGER_ROLES) is True
    assert has_role(_context(UserRole.HR), MANAGER_ROLES) is False
    assert has_role(_context(UserRole.VIEW_ONLY), {UserRole.VIEW_ONLY}) is True


def test_dev_principal_is_used_without_headers(client: TestClient) -> None:
    response = client.get("/api/v1/archives")

    assert response.status_code == 200
