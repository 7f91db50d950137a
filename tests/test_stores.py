"""Unit tests for auth/store.py and board/store.py.

Covers:
- UserStore: create/get, case-insensitive email, duplicate email, partial
  update, unknown update fields, delete
- BoardStore: team CRUD, task CRUD, list_tasks() filters, status updates
"""

from datetime import datetime, timezone

import pytest
from sqlalchemy.exc import IntegrityError

from auth.models import Role, User
from auth.store import UserStore, normalize_email
from board.models import TaskItem, TaskStatus, Team
from board.store import BoardStore

# ---------------------------------------------------------------------------
# UserStore
# ---------------------------------------------------------------------------


def _user(email: str = "Alice@Example.com", role: Role = Role.EMPLOYEE) -> User:
    return User(email=email, full_name="Alice", role=role, hashed_password="$2b$04$hash")


def test_normalize_email():
    assert normalize_email("  Bob@Example.COM ") == "bob@example.com"


def test_empty_store_lists_no_users(user_store: UserStore):
    assert user_store.list_users() == []


def test_create_and_get_user(user_store: UserStore):
    uid = user_store.create_user(_user())
    user = user_store.get_by_id(uid)
    assert user.id == uid
    assert user.email == "alice@example.com"
    assert user.role is Role.EMPLOYEE
    assert user.created_at


def test_get_by_email_is_case_insensitive(user_store: UserStore):
    uid = user_store.create_user(_user())
    assert user_store.get_by_email("ALICE@example.com").id == uid


def test_missing_user_returns_none(user_store: UserStore):
    assert user_store.get_by_id(404) is None
    assert user_store.get_by_email("ghost@example.com") is None


def test_duplicate_email_raises(user_store: UserStore):
    user_store.create_user(_user("alice@example.com"))
    with pytest.raises(IntegrityError):
        user_store.create_user(_user("ALICE@example.com"))


def test_update_user_partial(user_store: UserStore):
    uid = user_store.create_user(_user())
    assert user_store.update_user(uid, role=Role.MANAGER, full_name="Alice A.") is True
    user = user_store.get_by_id(uid)
    assert user.role is Role.MANAGER
    assert user.full_name == "Alice A."
    assert user.email == "alice@example.com"


def test_update_user_unknown_field_raises(user_store: UserStore):
    uid = user_store.create_user(_user())
    with pytest.raises(ValueError, match="Unknown user fields"):
        user_store.update_user(uid, id=99)


def test_update_missing_user_returns_false(user_store: UserStore):
    assert user_store.update_user(404, full_name="Nobody") is False


def test_delete_user(user_store: UserStore):
    uid = user_store.create_user(_user())
    assert user_store.delete_user(uid) is True
    assert user_store.get_by_id(uid) is None
    assert user_store.delete_user(uid) is False


# ---------------------------------------------------------------------------
# BoardStore
# ---------------------------------------------------------------------------


@pytest.fixture
def board(board_store: BoardStore):
    """BoardStore with two teams and three tasks.

    Tasks:
      - t1: team A, user 1, Todo
      - t2: team A, user 2, InProgress
      - t3: team B, user 1, Done
    """
    team_a = board_store.create_team(Team(name="Team A", description="First"))
    team_b = board_store.create_team(Team(name="Team B"))
    ids = {
        "team_a": team_a,
        "team_b": team_b,
        "t1": board_store.create_task(
            TaskItem(title="t1", assigned_to_user_id=1, created_by_user_id=9, team_id=team_a)
        ),
        "t2": board_store.create_task(
            TaskItem(
                title="t2",
                assigned_to_user_id=2,
                created_by_user_id=9,
                team_id=team_a,
                status=TaskStatus.IN_PROGRESS,
            )
        ),
        "t3": board_store.create_task(
            TaskItem(title="t3", assigned_to_user_id=1, created_by_user_id=9, team_id=team_b, status=TaskStatus.DONE)
        ),
    }
    return board_store, ids


def test_team_crud(board_store: BoardStore):
    team_id = board_store.create_team(Team(name="Ops", description="Operations"))
    assert board_store.get_team(team_id) == Team(id=team_id, name="Ops", description="Operations")
    assert board_store.update_team(team_id, description="Operations team") is True
    assert board_store.get_team(team_id).description == "Operations team"
    assert board_store.delete_team(team_id) is True
    assert board_store.get_team(team_id) is None
    assert board_store.update_team(team_id, name="Gone") is False


def test_update_team_unknown_field_raises(board_store: BoardStore):
    team_id = board_store.create_team(Team(name="Ops"))
    with pytest.raises(ValueError):
        board_store.update_team(team_id, colour="red")


def test_list_teams_ordered_by_id(board):
    store, ids = board
    assert [t.id for t in store.list_teams()] == [ids["team_a"], ids["team_b"]]


def test_get_task_defaults(board):
    store, ids = board
    task = store.get_task(ids["t1"])
    assert task.title == "t1"
    assert task.status is TaskStatus.TODO
    assert task.description == ""
    assert task.due_date is None


def test_get_missing_task_returns_none(board_store: BoardStore):
    assert board_store.get_task(404) is None


def test_list_tasks_unfiltered(board):
    store, ids = board
    assert [t.id for t in store.list_tasks()] == [ids["t1"], ids["t2"], ids["t3"]]


def test_list_tasks_by_assignee(board):
    store, ids = board
    assert [t.id for t in store.list_tasks(assigned_to_user_id=1)] == [ids["t1"], ids["t3"]]


def test_list_tasks_by_status_and_team(board):
    store, ids = board
    assert [t.id for t in store.list_tasks(status=TaskStatus.IN_PROGRESS)] == [ids["t2"]]
    assert [t.id for t in store.list_tasks(team_id=ids["team_b"])] == [ids["t3"]]
    assert store.list_tasks(status=TaskStatus.DONE, team_id=ids["team_a"]) == []


def test_update_task_status(board):
    store, ids = board
    assert store.update_task_status(ids["t1"], TaskStatus.DONE) is True
    assert store.get_task(ids["t1"]).status is TaskStatus.DONE
    assert store.update_task_status(404, TaskStatus.DONE) is False


def test_update_task_fields(board):
    store, ids = board
    due = datetime(2030, 1, 1, tzinfo=timezone.utc)
    assert store.update_task(ids["t2"], title="t2 renamed", due_date=due) is True
    task = store.get_task(ids["t2"])
    assert task.title == "t2 renamed"
    assert task.due_date == due
    assert task.status is TaskStatus.IN_PROGRESS


def test_due_date_round_trips_as_datetime(board_store: BoardStore):
    team_id = board_store.create_team(Team(name="Ops"))
    due = datetime(2031, 6, 15, 9, 30)
    task_id = board_store.create_task(
        TaskItem(title="Plan", assigned_to_user_id=1, created_by_user_id=1, team_id=team_id, due_date=due)
    )
    assert board_store.get_task(task_id).due_date == due
    assert board_store.update_task(task_id, due_date=None) is True
    assert board_store.get_task(task_id).due_date is None


def test_update_task_rejects_unknown_status(board):
    store, ids = board
    with pytest.raises(ValueError):
        store.update_task(ids["t1"], status="Blocked")


def test_delete_task(board):
    store, ids = board
    assert store.delete_task(ids["t3"]) is True
    assert store.get_task(ids["t3"]) is None
    assert store.delete_task(ids["t3"]) is False
