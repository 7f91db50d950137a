"""
board/store.py -- SQLAlchemy-backed persistence layer for teams and tasks.

Uses SQLAlchemy Core (not ORM) so the domain dataclasses in board/models.py
remain the authoritative domain representation. Swapping SQLite for
PostgreSQL is a connection string change, not a rewrite.

Pattern: Repository + Data Mapper. BoardStore is the repository (one clean
interface per entity). The _row_to_* functions are the mappers. Route
handlers never touch SQL directly.

Security: all queries use bound parameters. No f-strings in SQL.

Usage:
    store = BoardStore()                               # DATABASE_URL from settings
    store = BoardStore("postgresql://user:pw@host/db") # explicit
    team_id = store.create_team(Team(name="QA"))
    task_id = store.create_task(TaskItem(...))
    store.update_task_status(task_id, TaskStatus.DONE)
    store.close()
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import Column, Integer, MetaData, String, Table, Text
from sqlalchemy.engine import Engine

from board.models import TaskItem, TaskStatus, Team
from core.config import get_settings
from core.db import make_engine

logger = logging.getLogger("taskteam.board")

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

metadata = MetaData()

_teams = Table(
    "teams",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(255), nullable=False),
    Column("description", Text, nullable=False, server_default=""),
)

_tasks = Table(
    "tasks",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("title", String(255), nullable=False),
    Column("description", Text, nullable=False, server_default=""),
    Column("status", String(30), nullable=False, server_default=TaskStatus.TODO.value),
    Column("assigned_to_user_id", Integer, nullable=False, index=True),
    Column("created_by_user_id", Integer, nullable=False),
    Column("team_id", Integer, nullable=False),
    Column("due_date", String(32)),
)

_TEAM_FIELDS = {"name", "description"}
_TASK_FIELDS = {"title", "description", "status", "assigned_to_user_id", "created_by_user_id", "team_id", "due_date"}


class BoardStore:
    """Repository for Team and TaskItem entities."""

    def __init__(self, db_url: Optional[str] = None) -> None:
        self.engine: Engine = make_engine(db_url or get_settings().database_url)
        metadata.create_all(self.engine)

    # ------------------------------------------------------------------
    # Teams
    # ------------------------------------------------------------------

    def create_team(self, team: Team) -> int:
        with self.engine.connect() as conn:
            result = conn.execute(_teams.insert().values(name=team.name, description=team.description))
            conn.commit()
            return result.inserted_primary_key[0]

    def get_team(self, team_id: int) -> Optional[Team]:
        with self.engine.connect() as conn:
            row = conn.execute(_teams.select().where(_teams.c.id == team_id)).fetchone()
        return _row_to_team(row) if row is not None else None

    def list_teams(self) -> list[Team]:
        with self.engine.connect() as conn:
            rows = conn.execute(_teams.select().order_by(_teams.c.id)).fetchall()
        return [_row_to_team(r) for r in rows]

    def update_team(self, team_id: int, **fields) -> bool:
        """Update name and/or description. Returns False if team_id was not found."""
        _check_fields(fields, _TEAM_FIELDS)
        if not fields:
            return self.get_team(team_id) is not None
        with self.engine.connect() as conn:
            result = conn.execute(_teams.update().where(_teams.c.id == team_id).values(**fields))
            conn.commit()
        return result.rowcount > 0

    def delete_team(self, team_id: int) -> bool:
        with self.engine.connect() as conn:
            result = conn.execute(_teams.delete().where(_teams.c.id == team_id))
            conn.commit()
        return result.rowcount > 0

    # ------------------------------------------------------------------
    # Tasks
    # ------------------------------------------------------------------

    def create_task(self, task: TaskItem) -> int:
        with self.engine.connect() as conn:
            result = conn.execute(
                _tasks.insert().values(
                    title=task.title,
                    description=task.description,
                    status=TaskStatus(task.status).value,
                    assigned_to_user_id=task.assigned_to_user_id,
                    created_by_user_id=task.created_by_user_id,
                    team_id=task.team_id,
                    due_date=_to_iso(task.due_date),
                )
            )
            conn.commit()
            return result.inserted_primary_key[0]

    def get_task(self, task_id: int) -> Optional[TaskItem]:
        """Look up a task by primary key. Returns None if not found.

        This is the lookup the ownership rule relies on.
        """
        with self.engine.connect() as conn:
            row = conn.execute(_tasks.select().where(_tasks.c.id == task_id)).fetchone()
        return _row_to_task(row) if row is not None else None

    def list_tasks(
        self,
        status: Optional[TaskStatus] = None,
        assigned_to_user_id: Optional[int] = None,
        team_id: Optional[int] = None,
    ) -> list[TaskItem]:
        """Return tasks ordered by id, narrowed by whichever filters are given."""
        query = _tasks.select()
        if status is not None:
            query = query.where(_tasks.c.status == TaskStatus(status).value)
        if assigned_to_user_id is not None:
            query = query.where(_tasks.c.assigned_to_user_id == assigned_to_user_id)
        if team_id is not None:
            query = query.where(_tasks.c.team_id == team_id)
        with self.engine.connect() as conn:
            rows = conn.execute(query.order_by(_tasks.c.id)).fetchall()
        return [_row_to_task(r) for r in rows]

    def update_task(self, task_id: int, **fields) -> bool:
        """Update any subset of task fields. Returns False if task_id was not found."""
        _check_fields(fields, _TASK_FIELDS)
        if "status" in fields:
            fields["status"] = TaskStatus(fields["status"]).value
        if "due_date" in fields:
            fields["due_date"] = _to_iso(fields["due_date"])
        if not fields:
            return self.get_task(task_id) is not None
        with self.engine.connect() as conn:
            result = conn.execute(_tasks.update().where(_tasks.c.id == task_id).values(**fields))
            conn.commit()
        return result.rowcount > 0

    def update_task_status(self, task_id: int, status: TaskStatus) -> bool:
        updated = self.update_task(task_id, status=status)
        if updated:
            logger.info("Task %d status -> %s", task_id, TaskStatus(status).value)
        return updated

    def delete_task(self, task_id: int) -> bool:
        with self.engine.connect() as conn:
            result = conn.execute(_tasks.delete().where(_tasks.c.id == task_id))
            conn.commit()
        return result.rowcount > 0

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Helpers and row mappers
# ---------------------------------------------------------------------------


def _to_iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def _from_iso(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


def _check_fields(fields: dict, allowed: set[str]) -> None:
    unknown = set(fields) - allowed
    if unknown:
        raise ValueError(f"Unknown fields: {unknown!r}")


def _row_to_team(row) -> Team:
    return Team(id=row.id, name=row.name, description=row.description)


def _row_to_task(row) -> TaskItem:
    return TaskItem(
        id=row.id,
        title=row.title,
        description=row.description,
        status=TaskStatus(row.status),
        assigned_to_user_id=row.assigned_to_user_id,
        created_by_user_id=row.created_by_user_id,
        team_id=row.team_id,
        due_date=_from_iso(row.due_date),
    )
