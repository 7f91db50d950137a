"""
core/config.py -- Centralized application configuration via pydantic-settings.

All environment variable reads for TaskTeam happen here. No module should
call os.getenv() or os.environ.get() directly -- import get_settings() instead.

Design patterns used:
  Singleton via lru_cache: get_settings() instantiates Settings once at first
      call and returns the cached instance on every subsequent call.

  BaseSettings (pydantic-settings): Reads values from environment variables
      and an optional .env file automatically. Field names map to env var names
      (e.g. jwt_secret_key -> JWT_SECRET_KEY).

  Value object: Settings.jwt hands out a frozen JwtSettings. TokenService only
      ever sees that object, never the mutable settings singleton.

Security notes:
  JWT_SECRET_KEY shorter than 32 chars is rejected outright. HS256 signing
  relies on key entropy -- a short key weakens every token.

  In production mode (DEBUG not set or false), a missing JWT_SECRET_KEY is a
  hard startup failure.

Layer rule: core/ is the kernel. This module may not import from api/, auth/,
or board/.
"""

import logging
import secrets
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger("taskteam.config")

MIN_SECRET_LENGTH = 32

_DEFAULT_DB_URL = f"sqlite:///{Path(__file__).resolve().parent.parent / 'taskteam.db'}"


@dataclass(frozen=True)
class JwtSettings:
    """Immutable token configuration, built once at startup.

    expiry_minutes may be negative; the resulting tokens are already expired
    when issued, which is how tests exercise the expiry path.
    """

    secret_key: str
    issuer: str
    audience: str
    expiry_minutes: int = 60


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file.

    All fields have defaults so Settings() can be instantiated in test
    environments without a real .env file. The model_validator enforces
    production-safety rules at startup.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ------------------------------------------------------------------
    # Core
    # ------------------------------------------------------------------

    debug: bool = False
    database_url: str = _DEFAULT_DB_URL

    # ------------------------------------------------------------------
    # JWT
    # ------------------------------------------------------------------

    # Empty string is the sentinel for "not configured". The model_validator
    # below either generates a dev key or raises, so callers never see "".
    jwt_secret_key: str = ""
    jwt_issuer: str = "TaskTeamManagementSystem"
    jwt_audience: str = "TaskTeamManagementSystemUsers"
    jwt_expiry_minutes: int = 60

    # ------------------------------------------------------------------
    # HTTP
    # ------------------------------------------------------------------

    login_rate_limit: str = "10/minute"
    cors_origins: list[str] = ["http://localhost", "http://localhost:3000", "http://127.0.0.1"]

    # ------------------------------------------------------------------
    # Validators
    # ------------------------------------------------------------------

    @model_validator(mode="after")
    def validate_secret_key(self) -> "Settings":
        """Enforce the JWT_SECRET_KEY policy.

        Dev mode (DEBUG=true): auto-generate a random key with a warning.
            Tokens will not survive restart -- acceptable for local dev.

        Production mode: refuse to start if JWT_SECRET_KEY is missing.

        Both modes: reject keys shorter than 32 characters.
        """
        if not self.jwt_secret_key:
            if self.debug:
                self.jwt_secret_key = secrets.token_hex(32)
                logger.warning("Using auto-generated JWT_SECRET_KEY. Tokens will not survive a restart.")
            else:
                raise ValueError(
                    "JWT_SECRET_KEY is required in production mode. "
                    "Set JWT_SECRET_KEY in your environment or .env file. "
                    "To run in development mode, set DEBUG=true."
                )
        if len(self.jwt_secret_key.encode("utf-8")) < MIN_SECRET_LENGTH:
            raise ValueError(f"JWT_SECRET_KEY must be at least {MIN_SECRET_LENGTH} characters.")
        return self

    @property
    def jwt(self) -> JwtSettings:
        return JwtSettings(
            secret_key=self.jwt_secret_key,
            issuer=self.jwt_issuer,
            audience=self.jwt_audience,
            expiry_minutes=self.jwt_expiry_minutes,
        )


@lru_cache
def get_settings() -> Settings:
    """Return the application Settings singleton.

    In tests: call get_settings.cache_clear() between test cases if you need
    to inject different environment variables.
    """
    return Settings()
