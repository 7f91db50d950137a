"""
API request and response models for TaskTeam REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in auth/models.py and
board/models.py, which own the internal domain representation. Route handlers
map between the two.

No response model carries a password or password hash.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Optional

from fastapi import Path, Query
from pydantic import BaseModel, ConfigDict, Field

from auth.models import LoginResult, Role, User
from board.models import TaskItem, TaskStatus, Team
from core.db import MAX_ROW_ID

# Deliberately loose: one "@" with something on both sides and a dot in the
# domain. Deliverability is not our problem.
EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"

# Primary keys in paths and filters. Anything past MAX_ROW_ID cannot be bound
# as a SQLite INTEGER, so it is a 422 rather than a driver error.
RowId = Annotated[int, Path(gt=0, le=MAX_ROW_ID)]
RowIdFilter = Annotated[Optional[int], Query(gt=0, le=MAX_ROW_ID)]


# ---------------------------------------------------------------------------
# Errors / health
# ---------------------------------------------------------------------------


class ErrorDetail(BaseModel):
    """Structured error body used by every non-2xx response."""

    code: str
    message: str
    detail: Optional[str] = None


class ErrorResponse(BaseModel):
    error: ErrorDetail


class HealthResponse(BaseModel):
    """Response for GET /api/v1/health."""

    model_config = ConfigDict(frozen=True)

    status: str = "ok"
    version: str


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------


class LoginRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    email: str = Field(pattern=EMAIL_PATTERN, max_length=255)
    password: str = Field(min_length=1, max_length=255)


class LoginResponse(BaseModel):
    token: str
    email: str
    full_name: str
    role: Role
    user_id: int

    @classmethod
    def from_result(cls, result: LoginResult) -> LoginResponse:
        return cls(
            token=result.token,
            email=result.email,
            full_name=result.full_name,
            role=result.role,
            user_id=result.user_id,
        )


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


class UserCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    full_name: str = Field(min_length=1, max_length=255)
    email: str = Field(pattern=EMAIL_PATTERN, max_length=255)
    password: str = Field(min_length=1, max_length=255)
    role: Role


class UserUpdate(UserCreate):
    """PUT /users/{id} replaces every field, password included."""


class UserResponse(BaseModel):
    id: int
    full_name: str
    email: str
    role: Role
    created_at: str = ""

    @classmethod
    def from_user(cls, user: User) -> UserResponse:
        return cls(
            id=user.id,
            full_name=user.full_name,
            email=user.email,
            role=user.role,
            created_at=user.created_at or "",
        )


# ---------------------------------------------------------------------------
# Teams
# ---------------------------------------------------------------------------


class TeamCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=1, max_length=255)
    description: str = Field(default="", max_length=2000)


class TeamUpdate(TeamCreate):
    pass


class TeamResponse(BaseModel):
    id: int
    name: str
    description: str

    @classmethod
    def from_team(cls, team: Team) -> TeamResponse:
        return cls(id=team.id, name=team.name, description=team.description)


# ---------------------------------------------------------------------------
# Tasks
# ---------------------------------------------------------------------------


class TaskCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(min_length=1, max_length=255)
    description: str = Field(default="", max_length=5000)
    status: TaskStatus = TaskStatus.TODO
    assigned_to_user_id: int = Field(gt=0, le=MAX_ROW_ID)
    team_id: int = Field(gt=0, le=MAX_ROW_ID)
    due_date: Optional[datetime] = Field(default=None, description="ISO 8601 date or datetime")


class TaskUpdate(TaskCreate):
    pass


class TaskStatusUpdate(BaseModel):
    status: TaskStatus


class TaskResponse(BaseModel):
    id: int
    title: str
    description: str
    status: TaskStatus
    assigned_to_user_id: int
    created_by_user_id: int
    team_id: int
    due_date: Optional[datetime] = None

    @classmethod
    def from_task(cls, task: TaskItem) -> TaskResponse:
        return cls(
            id=task.id,
            title=task.title,
            description=task.description,
            status=task.status,
            assigned_to_user_id=task.assigned_to_user_id,
            created_by_user_id=task.created_by_user_id,
            team_id=task.team_id,
            due_date=task.due_date,
        )
