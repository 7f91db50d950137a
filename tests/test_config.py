"""
tests/test_config.py -- Tests for core/config.py Settings validation.

Settings is instantiated directly with _env_file=None so a developer's local
.env never leaks into these assertions.
"""

from __future__ import annotations

import pytest

from core.config import JwtSettings, Settings

GOOD_SECRET = "x" * 32


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("DEBUG", "JWT_SECRET_KEY", "JWT_ISSUER", "JWT_AUDIENCE", "JWT_EXPIRY_MINUTES", "LOGIN_RATE_LIMIT"):
        monkeypatch.delenv(name, raising=False)


def test_production_without_secret_refuses_to_start() -> None:
    with pytest.raises(ValueError, match="JWT_SECRET_KEY is required"):
        Settings(_env_file=None)


def test_debug_without_secret_generates_one() -> None:
    settings = Settings(_env_file=None, debug=True)
    assert len(settings.jwt_secret_key) >= 32


def test_generated_secret_differs_per_instance() -> None:
    assert Settings(_env_file=None, debug=True).jwt_secret_key != Settings(_env_file=None, debug=True).jwt_secret_key


@pytest.mark.parametrize("debug", [True, False])
def test_short_secret_rejected_in_any_mode(debug: bool) -> None:
    with pytest.raises(ValueError, match="at least 32"):
        Settings(_env_file=None, debug=debug, jwt_secret_key="x" * 31)


def test_secret_read_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("JWT_SECRET_KEY", GOOD_SECRET)
    monkeypatch.setenv("JWT_EXPIRY_MINUTES", "15")
    settings = Settings(_env_file=None)
    assert settings.jwt_secret_key == GOOD_SECRET
    assert settings.jwt_expiry_minutes == 15


def test_jwt_property_builds_frozen_value_object() -> None:
    settings = Settings(_env_file=None, jwt_secret_key=GOOD_SECRET, jwt_issuer="Iss", jwt_audience="Aud")
    jwt_settings = settings.jwt
    assert jwt_settings == JwtSettings(secret_key=GOOD_SECRET, issuer="Iss", audience="Aud", expiry_minutes=60)
    with pytest.raises(AttributeError):
        jwt_settings.issuer = "Other"  # type: ignore[misc]


def test_defaults_match_deployment_names() -> None:
    settings = Settings(_env_file=None, jwt_secret_key=GOOD_SECRET)
    assert settings.jwt_issuer == "TaskTeamManagementSystem"
    assert settings.jwt_audience == "TaskTeamManagementSystemUsers"
    assert settings.jwt_expiry_minutes == 60
    assert settings.login_rate_limit == "10/minute"
