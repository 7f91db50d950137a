"""
auth/tokens.py -- JWT issuance and validation.

Security design decisions:
  JWT: python-jose with HS256. Tokens are signed with the configured secret
       and carry sub (user id), email, name, role, jti, iat, nbf, exp, iss
       and aud. Validation returns None on any failure -- the route layer
       turns that into a 401.

  Clock skew: zero. A token is accepted only while iat <= now <= exp.

  jti: a fresh uuid4 per token, so two tokens issued for the same user in
       the same second still differ. There is no revocation list; a token
       dies purely by time.

  Configuration: TokenService receives an immutable JwtSettings at
       construction. A secret shorter than 32 bytes raises ValueError there,
       which aborts startup rather than failing per request.

Layer rule: no imports from api/ or board/. Import from core/ is allowed.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING

from jose import ExpiredSignatureError, JWTError, jwt
from jose.exceptions import JWTClaimsError

from auth.models import Role, TokenClaims
from core.config import MIN_SECRET_LENGTH, JwtSettings

if TYPE_CHECKING:
    from auth.models import User

logger = logging.getLogger("taskteam.auth")

ALGORITHM = "HS256"

_DECODE_OPTIONS = {
    "leeway": 0,
    "require_exp": True,
    "require_iat": True,
    "require_sub": True,
    "require_jti": True,
}


class TokenService:
    """Issues and validates signed, time-bounded identity tokens.

    Usage:
        tokens = TokenService(get_settings().jwt)
        token = tokens.issue(user)
        claims = tokens.validate(token)   # TokenClaims or None
    """

    def __init__(self, settings: JwtSettings) -> None:
        if len(settings.secret_key.encode("utf-8")) < MIN_SECRET_LENGTH:
            raise ValueError(f"JWT secret key must be at least {MIN_SECRET_LENGTH} bytes for {ALGORITHM}.")
        if not settings.issuer or not settings.audience:
            raise ValueError("JWT issuer and audience must both be configured.")
        self._settings = settings

    @property
    def settings(self) -> JwtSettings:
        return self._settings

    def issue(self, user: User) -> str:
        """Encode a signed JWT for user, valid for the configured number of minutes."""
        now = datetime.now(timezone.utc)
        payload = {
            "sub": str(user.id),
            "email": user.email,
            "name": user.full_name,
            "role": Role(user.role).value,
            "jti": uuid.uuid4().hex,
            "iat": now,
            "nbf": now,
            "exp": now + timedelta(minutes=self._settings.expiry_minutes),
            "iss": self._settings.issuer,
            "aud": self._settings.audience,
        }
        return jwt.encode(payload, self._settings.secret_key, algorithm=ALGORITHM)

    def validate(self, token: str) -> TokenClaims | None:
        """Decode and verify a JWT. Returns the claims or None on any failure.

        The failure class is logged at DEBUG for diagnostics only; callers
        see a single "no identity" outcome.
        """
        if not token:
            return None
        try:
            payload = jwt.decode(
                token,
                self._settings.secret_key,
                algorithms=[ALGORITHM],
                audience=self._settings.audience,
                issuer=self._settings.issuer,
                options=_DECODE_OPTIONS,
            )
        except ExpiredSignatureError:
            logger.debug("Rejected token: expired")
            return None
        except JWTClaimsError as exc:
            logger.debug("Rejected token: bad claims (%s)", exc)
            return None
        except JWTError as exc:
            logger.debug("Rejected token: %s", exc)
            return None

        issued_at = _as_datetime(payload.get("iat"))
        expires_at = _as_datetime(payload.get("exp"))
        if issued_at is None or expires_at is None:
            logger.debug("Rejected token: non-numeric or out-of-range iat/exp")
            return None
        if issued_at > datetime.now(timezone.utc):
            logger.debug("Rejected token: issued in the future")
            return None

        role = Role.parse(payload.get("role"))
        if role is None:
            logger.debug("Token carries unrecognised role %r", payload.get("role"))

        return TokenClaims(
            subject=payload["sub"],
            email=payload.get("email", ""),
            name=payload.get("name", ""),
            role=role,
            jti=payload["jti"],
            issued_at=issued_at,
            expires_at=expires_at,
            issuer=payload.get("iss", ""),
            audience=payload.get("aud", ""),
        )


def _as_datetime(value) -> datetime | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    try:
        return datetime.fromtimestamp(value, tz=timezone.utc)
    except (OverflowError, ValueError, OSError):
        # Signed, but outside what datetime can represent.
        return None
