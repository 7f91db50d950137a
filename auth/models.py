"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, zero logic). Mirrors the approach
in board/models.py -- dataclasses own domain shape; stores, services and
routes do the work.

Role is the one place a string becomes a typed value: the token layer
serializes Role.value into the "role" claim and parses it back with
Role.parse(), which fails closed on anything it does not recognise.

Layer rule: no imports from api/ or board/.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class Role(str, Enum):
    """Closed set of roles. Authorization is set membership, not a hierarchy."""

    ADMIN = "Admin"
    MANAGER = "Manager"
    EMPLOYEE = "Employee"

    @classmethod
    def parse(cls, value: object) -> Role | None:
        """Return the Role whose canonical name equals value, else None."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return None


@dataclass
class User:
    """A person who can log in and be assigned tasks.

    hashed_password is the bcrypt StoredHash string. It is never returned
    over HTTP and never decoded -- only verified.

    id is None before the record is written to the database.
    """

    email: str
    full_name: str
    role: Role
    hashed_password: str = ""
    id: int | None = None
    created_at: str | None = None


@dataclass(frozen=True)
class TokenClaims:
    """The claim set carried by a validated identity token.

    role is None when the token carried a role name this build does not
    know. Such a token still identifies its subject but grants nothing on
    its own.
    """

    subject: str
    email: str
    name: str
    role: Role | None
    jti: str
    issued_at: datetime
    expires_at: datetime
    issuer: str
    audience: str


@dataclass(frozen=True)
class LoginResult:
    """Successful login outcome. Failed logins are represented by None."""

    token: str
    email: str
    full_name: str
    role: Role
    user_id: int


@dataclass(frozen=True)
class RequestCredentials:
    """The identity-bearing headers of one inbound request.

    authorization -- raw "Authorization" header value (expected "Bearer <jwt>")
    user_id       -- raw legacy "X-User-Id" header value, trusted as-is
    """

    authorization: str | None = None
    user_id: str | None = None

    @classmethod
    def from_headers(cls, headers) -> RequestCredentials:
        """Build from any case-insensitive header mapping (Starlette Headers, dict)."""
        return cls(
            authorization=headers.get("Authorization") or headers.get("authorization"),
            user_id=headers.get("X-User-Id") or headers.get("x-user-id"),
        )

    @property
    def bearer_token(self) -> str | None:
        """Return the token part of a "Bearer <token>" header, or None."""
        if not self.authorization:
            return None
        scheme, _, token = self.authorization.strip().partition(" ")
        if scheme.lower() != "bearer":
            return None
        token = token.strip()
        return token or None
