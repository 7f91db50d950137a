"""
auth/filters.py -- Request gating on top of AuthorizationService.

Two policies, one shape:
  role-gated       -- caller must hold one of a fixed set of roles
  ownership-gated  -- caller must pass can_mutate_task() for a task id

Each policy is first evaluated to an AccessOutcome (a value: AUTHORIZED,
UNAUTHENTICATED or FORBIDDEN). Only raise_for_outcome() turns that into an
HTTP error, so 401 vs 403 is decided in exactly one place:
  no resolvable caller        -> 401 {"code": "unauthorized"}
  caller resolved, not allowed -> 403 {"code": "forbidden"}

authorize() / authorize_task_mutation() are the higher-order form: they run
the protected operation with the resolved caller and pass its result through
unchanged. require_roles() / require_task_mutation are the same gates
packaged as FastAPI Depends() helpers:

    @router.post("/teams")
    async def create(user: User = Depends(require_roles(Role.ADMIN))): ...

Layer rule: may import from fastapi (this module is part of the dependency
injection system). No imports from api/ or board/.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import Enum
from typing import Annotated, TypeVar

from fastapi import HTTPException, Path, Request

from auth.models import RequestCredentials, Role, User
from auth.service import AuthorizationService
from core.db import MAX_ROW_ID

T = TypeVar("T")

ALL_ROLES: tuple[Role, ...] = tuple(Role)


class Decision(str, Enum):
    AUTHORIZED = "authorized"
    UNAUTHENTICATED = "unauthenticated"
    FORBIDDEN = "forbidden"


@dataclass(frozen=True)
class AccessOutcome:
    decision: Decision
    caller: User | None = None
    message: str = ""

    @property
    def allowed(self) -> bool:
        return self.decision is Decision.AUTHORIZED


_UNAUTHENTICATED = AccessOutcome(
    Decision.UNAUTHENTICATED,
    message="Authentication required. Provide a Bearer token or X-User-Id header.",
)


# ---------------------------------------------------------------------------
# Policy evaluation (pure decisions, no HTTP)
# ---------------------------------------------------------------------------


def check_roles(
    service: AuthorizationService,
    credentials: RequestCredentials,
    roles: Iterable[Role],
) -> AccessOutcome:
    roles = tuple(roles)
    caller = service.resolve_caller(credentials)
    if caller is None:
        return _UNAUTHENTICATED
    if not service.is_authorized(caller, roles):
        required = ", ".join(r.value for r in roles) or "none"
        return AccessOutcome(
            Decision.FORBIDDEN,
            caller,
            f"You do not have the required role(s). Required: {required}",
        )
    return AccessOutcome(Decision.AUTHORIZED, caller)


def check_task_mutation(
    service: AuthorizationService,
    credentials: RequestCredentials,
    task_id: int,
) -> AccessOutcome:
    caller = service.resolve_caller(credentials)
    if caller is None:
        return _UNAUTHENTICATED
    if not service.can_mutate_task(caller, task_id):
        return AccessOutcome(Decision.FORBIDDEN, caller, "You do not have permission to update this task.")
    return AccessOutcome(Decision.AUTHORIZED, caller)


def raise_for_outcome(outcome: AccessOutcome) -> User:
    """Return the caller for an AUTHORIZED outcome, else raise 401 / 403."""
    if outcome.decision is Decision.UNAUTHENTICATED:
        raise HTTPException(
            status_code=401,
            detail={"code": "unauthorized", "message": outcome.message},
            headers={"WWW-Authenticate": "Bearer"},
        )
    if outcome.decision is Decision.FORBIDDEN:
        raise HTTPException(
            status_code=403,
            detail={"code": "forbidden", "message": outcome.message},
        )
    return outcome.caller


# ---------------------------------------------------------------------------
# Higher-order gates
# ---------------------------------------------------------------------------


def authorize(
    credentials: RequestCredentials,
    service: AuthorizationService,
    handler: Callable[[User], T],
    *roles: Role,
) -> T:
    """Run handler(caller) if the caller holds one of roles; raise 401/403 otherwise."""
    caller = raise_for_outcome(check_roles(service, credentials, roles))
    return handler(caller)


def authorize_task_mutation(
    credentials: RequestCredentials,
    service: AuthorizationService,
    task_id: int,
    handler: Callable[[User], T],
) -> T:
    """Run handler(caller) if the caller may change task_id; raise 401/403 otherwise."""
    caller = raise_for_outcome(check_task_mutation(service, credentials, task_id))
    return handler(caller)


# ---------------------------------------------------------------------------
# FastAPI dependencies
# ---------------------------------------------------------------------------


def get_authorization_service(request: Request) -> AuthorizationService:
    return request.app.state.authz


def require_roles(*roles: Role) -> Callable[[Request], User]:
    """Build a dependency that yields the caller when they hold one of roles."""

    def dependency(request: Request) -> User:
        return authorize(
            RequestCredentials.from_headers(request.headers),
            get_authorization_service(request),
            lambda caller: caller,
            *roles,
        )

    return dependency


def require_task_mutation(request: Request, task_id: Annotated[int, Path(gt=0, le=MAX_ROW_ID)]) -> User:
    """Dependency for routes with a {task_id} path parameter."""
    return authorize_task_mutation(
        RequestCredentials.from_headers(request.headers),
        get_authorization_service(request),
        task_id,
        lambda caller: caller,
    )


# Any authenticated caller, whatever their role.
get_current_user = require_roles(*ALL_ROLES)
