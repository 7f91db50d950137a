"""
tests/conftest.py -- Shared test fixtures for TaskTeam unit and integration tests.

This module provides:
  - jwt_settings / token_service: a TokenService with a fixed test secret
  - user_store / board_store / authz: isolated in-memory stores + service
  - make_user(): create a user with a cheap bcrypt cost
  - api_client: TestClient over the real app with seeded users, team, tasks

Design: Named shared-memory SQLite URIs (not plain :memory:) are used for the
API fixture because TestClient runs route handlers in a thread pool. Plain
:memory: DBs are per-connection and would present a blank schema to each
worker thread. Unit fixtures stay on a single thread, so plain :memory: is
enough there.

DEBUG and LOGIN_RATE_LIMIT must be set before any app import: get_settings()
is read at import time by api.limiter and api.main.
"""

from __future__ import annotations

import os
from collections.abc import Generator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field

# CRITICAL: Set before any auth/core/api import.
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("LOGIN_RATE_LIMIT", "1000/minute")

import pytest
from fastapi.testclient import TestClient

from api.main import app
from auth.models import Role, User
from auth.passwords import hash_password
from auth.service import AuthorizationService
from auth.store import UserStore
from auth.tokens import TokenService
from board.models import TaskItem, Team
from board.store import BoardStore
from core.config import JwtSettings

TEST_SECRET = "test-secret-key-that-is-at-least-32-characters-long"
TEST_ROUNDS = 4


def make_user(store: UserStore, email: str, role: Role, password: str = "Pw1!", full_name: str = "") -> User:
    """Insert a user (bcrypt cost 4 to keep tests fast) and return it as stored."""
    uid = store.create_user(
        User(
            email=email,
            full_name=full_name or email.split("@")[0].title(),
            role=role,
            hashed_password=hash_password(password, rounds=TEST_ROUNDS),
        )
    )
    return store.get_by_id(uid)


# ---------------------------------------------------------------------------
# Unit fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def jwt_settings() -> JwtSettings:
    return JwtSettings(secret_key=TEST_SECRET, issuer="TestIssuer", audience="TestAudience", expiry_minutes=60)


@pytest.fixture
def token_service(jwt_settings: JwtSettings) -> TokenService:
    return TokenService(jwt_settings)


@pytest.fixture
def user_store() -> Generator[UserStore, None, None]:
    store = UserStore("sqlite:///:memory:")
    yield store
    store.close()


@pytest.fixture
def board_store() -> Generator[BoardStore, None, None]:
    store = BoardStore("sqlite:///:memory:")
    yield store
    store.close()


@pytest.fixture
def authz(user_store: UserStore, board_store: BoardStore, token_service: TokenService) -> AuthorizationService:
    return AuthorizationService(user_store, board_store, token_service)


# ---------------------------------------------------------------------------
# Integration fixture
# ---------------------------------------------------------------------------


@dataclass
class ApiContext:
    """Everything an API test needs: the client plus the seeded fixture data.

    Seeded users (all with password "Pw1!"):
      admin, manager, employee, other  (other is a second Employee)
    Seeded tasks:
      employee_task -- assigned to employee
      other_task    -- assigned to other
    """

    client: TestClient
    tokens: TokenService
    users: dict[str, User] = field(default_factory=dict)
    team_id: int = 0
    employee_task_id: int = 0
    other_task_id: int = 0

    def headers(self, who: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.tokens.issue(self.users[who])}"}


def _patch_lifespan(user_store: UserStore, board: BoardStore, tokens: TokenService):
    """Return an async context manager that replaces the real lifespan.

    Wires pre-created test stores into app.state so TestClient routes see
    isolated test DBs rather than the configured DATABASE_URL.
    """

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.tokens = tokens
        app.state.user_store = user_store
        app.state.board = board
        app.state.authz = AuthorizationService(user_store, board, tokens)
        yield

    return test_lifespan


@pytest.fixture(scope="module")
def api_client(request) -> Generator[ApiContext, None, None]:
    """Yield an ApiContext bound to a fresh shared-memory database per test module."""
    db_url = f"sqlite:///file:test_taskteam_{request.module.__name__}?mode=memory&cache=shared&uri=true"
    user_store = UserStore(db_url)
    board = BoardStore(db_url)
    tokens = TokenService(JwtSettings(TEST_SECRET, "TaskTeamTest", "TaskTeamTestUsers", 60))

    ctx_users = {
        "admin": make_user(user_store, "admin@demo.com", Role.ADMIN, full_name="Ada Admin"),
        "manager": make_user(user_store, "manager@demo.com", Role.MANAGER, full_name="Max Manager"),
        "employee": make_user(user_store, "employee@demo.com", Role.EMPLOYEE, full_name="Eve Employee"),
        "other": make_user(user_store, "other@demo.com", Role.EMPLOYEE, full_name="Otto Other"),
    }
    team_id = board.create_team(Team(name="Development Team", description="Software development team"))
    employee_task_id = board.create_task(
        TaskItem(
            title="Implement user authentication",
            assigned_to_user_id=ctx_users["employee"].id,
            created_by_user_id=ctx_users["manager"].id,
            team_id=team_id,
        )
    )
    other_task_id = board.create_task(
        TaskItem(
            title="Write unit tests",
            assigned_to_user_id=ctx_users["other"].id,
            created_by_user_id=ctx_users["manager"].id,
            team_id=team_id,
        )
    )

    app.router.lifespan_context = _patch_lifespan(user_store, board, tokens)

    with TestClient(app, raise_server_exceptions=True) as client:
        yield ApiContext(
            client=client,
            tokens=tokens,
            users=ctx_users,
            team_id=team_id,
            employee_task_id=employee_task_id,
            other_task_id=other_task_id,
        )

    board.close()
    user_store.close()
