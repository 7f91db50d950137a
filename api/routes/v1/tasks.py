"""
api/routes/v1/tasks.py -- Task endpoints.

Auth policy:
  POST   /api/v1/tasks                 Admin, Manager (creator = caller)
  GET    /api/v1/tasks                 any role; Employees only ever see
                                       tasks assigned to them
  GET    /api/v1/tasks/{id}            any role; Employees get 403 for a
                                       task assigned to someone else
  PUT    /api/v1/tasks/{id}            Admin, Manager
  DELETE /api/v1/tasks/{id}            Admin, Manager
  PATCH  /api/v1/tasks/{id}/status     ownership gate (can_mutate_task)

The status route runs the ownership gate before the existence check, so an
Employee asking about a task id that does not exist gets the same 403 as one
asking about a colleague's task. Admins and Managers pass the gate and then
get an honest 404.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, Response

from api.models import RowId, RowIdFilter, TaskCreate, TaskResponse, TaskStatusUpdate, TaskUpdate
from auth.filters import ALL_ROLES, require_roles, require_task_mutation
from auth.models import Role, User
from board.models import TaskItem, TaskStatus
from board.store import BoardStore

router = APIRouter()

_any_role = require_roles(*ALL_ROLES)
_admin_or_manager = require_roles(Role.ADMIN, Role.MANAGER)


def _not_found() -> HTTPException:
    return HTTPException(status_code=404, detail={"code": "not_found", "message": "Task not found."})


def _require_team(board: BoardStore, team_id: int) -> None:
    if board.get_team(team_id) is None:
        raise HTTPException(
            status_code=400,
            detail={"code": "unknown_team", "message": f"Team {team_id} does not exist."},
        )


def _require_assignee(request: Request, user_id: int) -> None:
    if request.app.state.user_store.get_by_id(user_id) is None:
        raise HTTPException(
            status_code=400,
            detail={"code": "unknown_assignee", "message": f"User {user_id} does not exist."},
        )


@router.post("/tasks", response_model=TaskResponse, status_code=201)
async def create_task(
    request: Request,
    body: TaskCreate,
    current_user: User = Depends(_admin_or_manager),
) -> TaskResponse:
    board: BoardStore = request.app.state.board
    _require_team(board, body.team_id)
    _require_assignee(request, body.assigned_to_user_id)
    task_id = board.create_task(
        TaskItem(
            title=body.title,
            description=body.description,
            status=body.status,
            assigned_to_user_id=body.assigned_to_user_id,
            created_by_user_id=current_user.id,
            team_id=body.team_id,
            due_date=body.due_date,
        )
    )
    return TaskResponse.from_task(board.get_task(task_id))


@router.get("/tasks", response_model=list[TaskResponse])
async def list_tasks(
    request: Request,
    status: Optional[TaskStatus] = None,
    assigned_to_user_id: RowIdFilter = None,
    team_id: RowIdFilter = None,
    current_user: User = Depends(_any_role),
) -> list[TaskResponse]:
    if current_user.role is Role.EMPLOYEE:
        assigned_to_user_id = current_user.id
    board: BoardStore = request.app.state.board
    tasks = board.list_tasks(status=status, assigned_to_user_id=assigned_to_user_id, team_id=team_id)
    return [TaskResponse.from_task(t) for t in tasks]


@router.get("/tasks/{task_id}", response_model=TaskResponse)
async def get_task(request: Request, task_id: RowId, current_user: User = Depends(_any_role)) -> TaskResponse:
    task = request.app.state.board.get_task(task_id)
    if current_user.role is Role.EMPLOYEE and (task is None or task.assigned_to_user_id != current_user.id):
        raise HTTPException(
            status_code=403,
            detail={"code": "forbidden", "message": "Employees can only view their assigned tasks."},
        )
    if task is None:
        raise _not_found()
    return TaskResponse.from_task(task)


@router.put("/tasks/{task_id}", response_model=TaskResponse)
async def update_task(
    request: Request,
    task_id: RowId,
    body: TaskUpdate,
    current_user: User = Depends(_admin_or_manager),
) -> TaskResponse:
    board: BoardStore = request.app.state.board
    if board.get_task(task_id) is None:
        raise _not_found()
    _require_team(board, body.team_id)
    _require_assignee(request, body.assigned_to_user_id)
    board.update_task(
        task_id,
        title=body.title,
        description=body.description,
        status=body.status,
        assigned_to_user_id=body.assigned_to_user_id,
        team_id=body.team_id,
        due_date=body.due_date,
    )
    return TaskResponse.from_task(board.get_task(task_id))


@router.patch("/tasks/{task_id}/status", response_model=TaskResponse)
async def update_task_status(
    request: Request,
    task_id: RowId,
    body: TaskStatusUpdate,
    current_user: User = Depends(require_task_mutation),
) -> TaskResponse:
    board: BoardStore = request.app.state.board
    if not board.update_task_status(task_id, body.status):
        raise _not_found()
    return TaskResponse.from_task(board.get_task(task_id))


@router.delete("/tasks/{task_id}", status_code=204)
async def delete_task(request: Request, task_id: RowId, current_user: User = Depends(_admin_or_manager)) -> Response:
    if not request.app.state.board.delete_task(task_id):
        raise _not_found()
    return Response(status_code=204)
