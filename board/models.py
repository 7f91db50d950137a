"""
board/models.py -- Domain dataclasses for teams and tasks.

These are pure data containers with zero logic. Persistence lives in
board/store.py; access rules live in auth/service.py.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class TaskStatus(str, Enum):
    TODO = "Todo"
    IN_PROGRESS = "InProgress"
    DONE = "Done"


@dataclass
class Team:
    """A named group of people that tasks are filed under.

    id is None before the record is written to the database.
    """

    name: str
    description: str = ""
    id: Optional[int] = None


@dataclass
class TaskItem:
    """A unit of work assigned to exactly one user.

    assigned_to_user_id is what the ownership rule compares against the
    caller: an Employee may change the status of a task only while this
    equals their own user id.

    due_date is stored as an ISO 8601 string and read back as a datetime.
    """

    title: str
    assigned_to_user_id: int
    created_by_user_id: int
    team_id: int
    description: str = ""
    status: TaskStatus = TaskStatus.TODO
    due_date: Optional[datetime] = None
    id: Optional[int] = None
