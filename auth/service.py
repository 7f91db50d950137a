"""
auth/service.py -- Caller resolution, access decisions and login.

AuthorizationService answers three questions for the HTTP layer:
  resolve_caller()  -- who is making this request? (User or None)
  is_authorized()   -- does that caller hold one of these roles?
  can_mutate_task() -- may that caller change this particular task?

Every answer is a value (None / bool), never an exception. The gate in
auth/filters.py maps None to 401 and False to 403 in one place.

Caller resolution order:
  1. Authorization: Bearer <jwt>. A token that validates decides the outcome
     on its own: its subject is looked up and that lookup's result is
     returned, even when it misses.
  2. X-User-Id: <int>. Legacy fallback, trusted as-is, consulted only when
     there is no usable bearer token.

Login is a module-level function pair (authenticate_user / login) so it can
run without a fully wired service, e.g. from tests or a one-off script.

Layer rule: no imports from api/ or board/. Task lookups go through the
TaskLookup protocol; board.store.BoardStore satisfies it.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Optional, Protocol

from auth.models import LoginResult, RequestCredentials, Role, User
from auth.passwords import DUMMY_HASH, verify_password
from auth.tokens import TokenService
from core.db import MAX_ROW_ID

logger = logging.getLogger("taskteam.auth")

# Roles that may change any task regardless of assignment.
TASK_SUPERVISOR_ROLES = frozenset({Role.ADMIN, Role.MANAGER})


class UserLookup(Protocol):
    def get_by_id(self, user_id: int) -> Optional[User]: ...

    def get_by_email(self, email: str) -> Optional[User]: ...


class AssignedTask(Protocol):
    assigned_to_user_id: int


class TaskLookup(Protocol):
    def get_task(self, task_id: int) -> Optional[AssignedTask]: ...


def _parse_user_id(value: str | None) -> int | None:
    # int() accepts "1_000"; header and claim values must be plain digits
    if value is None or "_" in value:
        return None
    try:
        user_id = int(value.strip())
    except ValueError:
        return None
    return user_id if _is_row_id(user_id) else None


def _is_row_id(value: int) -> bool:
    # Ids outside this range can never exist and overflow the SQLite driver.
    return 0 < value <= MAX_ROW_ID


class AuthorizationService:
    """Request-scoped access decisions over a user store and a task store.

    Holds no per-request state; one instance is shared by every request.
    """

    def __init__(self, users: UserLookup, tasks: TaskLookup, tokens: TokenService) -> None:
        self.users = users
        self.tasks = tasks
        self.tokens = tokens

    def resolve_caller(self, credentials: RequestCredentials) -> User | None:
        """Return the User behind the request's credentials, or None."""
        token = credentials.bearer_token
        if token:
            claims = self.tokens.validate(token)
            if claims is not None:
                user_id = _parse_user_id(claims.subject)
                if user_id is not None:
                    user = self.users.get_by_id(user_id)
                    if user is None:
                        logger.info("Token subject %d no longer exists", user_id)
                    return user

        user_id = _parse_user_id(credentials.user_id)
        if user_id is not None:
            return self.users.get_by_id(user_id)

        return None

    def is_authorized(self, caller: User | None, allowed_roles: Iterable[Role]) -> bool:
        """True iff caller exists and caller.role is one of allowed_roles."""
        if caller is None:
            return False
        role = Role.parse(caller.role)
        if role is None:
            return False
        return role in set(allowed_roles)

    def can_mutate_task(self, caller: User | None, task_id: int) -> bool:
        """True if caller may change task_id.

        Admin and Manager: always, even for a task id that does not exist.
        Employee: only while the task exists and is assigned to them. A
        missing task and someone else's task are the same False,
        so the answer never reveals whether a task id exists.
        """
        if caller is None:
            return False
        role = Role.parse(caller.role)
        if role in TASK_SUPERVISOR_ROLES:
            return True
        if role is Role.EMPLOYEE:
            if not _is_row_id(task_id):
                return False
            task = self.tasks.get_task(task_id)
            return task is not None and task.assigned_to_user_id == caller.id
        return False


# ---------------------------------------------------------------------------
# Login (constant-time)
# ---------------------------------------------------------------------------


def authenticate_user(users: UserLookup, email: str, password: str) -> User | None:
    """Verify an email/password pair with timing equalization.

    Always runs bcrypt whether or not the email exists:
    - Unknown email: bcrypt runs against DUMMY_HASH (same cost as a real check)
    - Wrong password: bcrypt runs against the real hash (same cost)

    Returns the User on success, None on any failure.
    """
    user = users.get_by_email(email)
    if user is None or not user.hashed_password:
        verify_password(password, DUMMY_HASH)
        return None
    if not verify_password(password, user.hashed_password):
        return None
    return user


def login(users: UserLookup, tokens: TokenService, email: str, password: str) -> LoginResult | None:
    """Authenticate and issue a token. Returns None for bad credentials."""
    user = authenticate_user(users, email, password)
    if user is None:
        logger.info("Failed login attempt")
        return None
    token = tokens.issue(user)
    logger.info("User %d logged in", user.id)
    return LoginResult(
        token=token,
        email=user.email,
        full_name=user.full_name,
        role=Role(user.role),
        user_id=user.id,
    )
