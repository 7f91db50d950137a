"""
api/routes/v1/auth.py -- Login and identity endpoints.

Routes:
  POST /api/v1/auth/login  -- email/password login; returns a JWT
  GET  /api/v1/auth/me     -- current caller (any role)

Security:
  POST /login is rate-limited per client IP (LOGIN_RATE_LIMIT).
  login() provides timing equalization -- use it, never inline the lookup
    and password check.
  Cache-Control: no-store on login responses.
  Wrong email and wrong password return the same "bad_credentials" error.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from api.limiter import LOGIN_LIMIT, limiter
from api.models import LoginRequest, LoginResponse, UserResponse
from auth.filters import get_current_user
from auth.models import User
from auth.service import login as login_user

router = APIRouter()


@limiter.limit(LOGIN_LIMIT)  # must be ABOVE @router to preserve FastAPI introspection
@router.post("/auth/login", response_model=LoginResponse)
def login(request: Request, body: LoginRequest) -> JSONResponse:
    """Authenticate with email and password; return a bearer token.

    Declared as a plain def so FastAPI runs bcrypt in its worker threadpool
    instead of blocking the event loop.
    """
    result = login_user(request.app.state.user_store, request.app.state.tokens, body.email, body.password)
    if result is None:
        resp = JSONResponse(
            status_code=401,
            content={"error": {"code": "bad_credentials", "message": "Invalid email or password."}},
        )
        resp.headers["Cache-Control"] = "no-store"
        return resp

    resp = JSONResponse(status_code=200, content=LoginResponse.from_result(result).model_dump(mode="json"))
    resp.headers["Cache-Control"] = "no-store"
    return resp


@router.get("/auth/me", response_model=UserResponse)
async def me(current_user: User = Depends(get_current_user)) -> UserResponse:
    """Return identity information for the current caller."""
    return UserResponse.from_user(current_user)
