"""
api/routes/v1/users.py -- User management endpoints.

Auth policy:
  POST   /api/v1/users        Admin
  GET    /api/v1/users        Admin, Manager
  GET    /api/v1/users/{id}   Admin, Manager
  PUT    /api/v1/users/{id}   Admin (password is re-hashed on every update)
  DELETE /api/v1/users/{id}   Admin
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from sqlalchemy.exc import IntegrityError

from api.models import RowId, UserCreate, UserResponse, UserUpdate
from auth.filters import require_roles
from auth.models import Role, User
from auth.passwords import hash_password
from auth.store import UserStore

router = APIRouter()

_admin = require_roles(Role.ADMIN)
_admin_or_manager = require_roles(Role.ADMIN, Role.MANAGER)


def _not_found() -> HTTPException:
    return HTTPException(status_code=404, detail={"code": "not_found", "message": "User not found."})


def _conflict() -> HTTPException:
    return HTTPException(
        status_code=409,
        detail={"code": "conflict", "message": "A user with that email already exists."},
    )


@router.post("/users", response_model=UserResponse, status_code=201)
def create_user(request: Request, body: UserCreate, current_user: User = Depends(_admin)) -> UserResponse:
    user_store: UserStore = request.app.state.user_store
    new_user = User(
        email=body.email,
        full_name=body.full_name,
        role=body.role,
        hashed_password=hash_password(body.password),
    )
    try:
        user_id = user_store.create_user(new_user)
    except IntegrityError as exc:
        raise _conflict() from exc
    return UserResponse.from_user(user_store.get_by_id(user_id))


@router.get("/users", response_model=list[UserResponse])
async def list_users(request: Request, current_user: User = Depends(_admin_or_manager)) -> list[UserResponse]:
    user_store: UserStore = request.app.state.user_store
    return [UserResponse.from_user(u) for u in user_store.list_users()]


@router.get("/users/{user_id}", response_model=UserResponse)
async def get_user(
    request: Request,
    user_id: RowId,
    current_user: User = Depends(_admin_or_manager),
) -> UserResponse:
    user = request.app.state.user_store.get_by_id(user_id)
    if user is None:
        raise _not_found()
    return UserResponse.from_user(user)


@router.put("/users/{user_id}", response_model=UserResponse)
def update_user(
    request: Request,
    user_id: RowId,
    body: UserUpdate,
    current_user: User = Depends(_admin),
) -> UserResponse:
    user_store: UserStore = request.app.state.user_store
    try:
        updated = user_store.update_user(
            user_id,
            email=body.email,
            full_name=body.full_name,
            role=body.role,
            hashed_password=hash_password(body.password),
        )
    except IntegrityError as exc:
        raise _conflict() from exc
    if not updated:
        raise _not_found()
    return UserResponse.from_user(user_store.get_by_id(user_id))


@router.delete("/users/{user_id}", status_code=204)
async def delete_user(request: Request, user_id: RowId, current_user: User = Depends(_admin)) -> Response:
    if user_id == current_user.id:
        raise HTTPException(
            status_code=400,
            detail={"code": "self_deletion", "message": "You cannot delete your own account."},
        )
    if not request.app.state.user_store.delete_user(user_id):
        raise _not_found()
    return Response(status_code=204)
