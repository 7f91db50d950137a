"""
api/routes/v1/teams.py -- Team endpoints.

Auth policy:
  POST   /api/v1/teams        Admin
  GET    /api/v1/teams        Admin, Manager
  GET    /api/v1/teams/{id}   Admin, Manager
  PUT    /api/v1/teams/{id}   Admin
  DELETE /api/v1/teams/{id}   Admin
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request, Response

from api.models import RowId, TeamCreate, TeamResponse, TeamUpdate
from auth.filters import require_roles
from auth.models import Role, User
from board.models import Team
from board.store import BoardStore

router = APIRouter()

_admin = require_roles(Role.ADMIN)
_admin_or_manager = require_roles(Role.ADMIN, Role.MANAGER)


def _not_found() -> HTTPException:
    return HTTPException(status_code=404, detail={"code": "not_found", "message": "Team not found."})


@router.post("/teams", response_model=TeamResponse, status_code=201)
async def create_team(request: Request, body: TeamCreate, current_user: User = Depends(_admin)) -> TeamResponse:
    board: BoardStore = request.app.state.board
    team_id = board.create_team(Team(name=body.name, description=body.description))
    return TeamResponse.from_team(board.get_team(team_id))


@router.get("/teams", response_model=list[TeamResponse])
async def list_teams(request: Request, current_user: User = Depends(_admin_or_manager)) -> list[TeamResponse]:
    board: BoardStore = request.app.state.board
    return [TeamResponse.from_team(t) for t in board.list_teams()]


@router.get("/teams/{team_id}", response_model=TeamResponse)
async def get_team(
    request: Request,
    team_id: RowId,
    current_user: User = Depends(_admin_or_manager),
) -> TeamResponse:
    team = request.app.state.board.get_team(team_id)
    if team is None:
        raise _not_found()
    return TeamResponse.from_team(team)


@router.put("/teams/{team_id}", response_model=TeamResponse)
async def update_team(
    request: Request,
    team_id: RowId,
    body: TeamUpdate,
    current_user: User = Depends(_admin),
) -> TeamResponse:
    board: BoardStore = request.app.state.board
    if not board.update_team(team_id, name=body.name, description=body.description):
        raise _not_found()
    return TeamResponse.from_team(board.get_team(team_id))


@router.delete("/teams/{team_id}", status_code=204)
async def delete_team(request: Request, team_id: RowId, current_user: User = Depends(_admin)) -> Response:
    if not request.app.state.board.delete_team(team_id):
        raise _not_found()
    return Response(status_code=204)
