"""
tests/test_cli.py -- Tests for the main.py bootstrap CLI.

Each test points the CLI at its own SQLite file by swapping the settings
object main.py reads.
"""

from __future__ import annotations

import pytest

import main
from core.config import Settings

SECRET = "cli-test-secret-that-is-at-least-32-characters"


@pytest.fixture
def cli_settings(tmp_path, monkeypatch: pytest.MonkeyPatch) -> Settings:
    settings = Settings(_env_file=None, debug=True, jwt_secret_key=SECRET, database_url=f"sqlite:///{tmp_path}/cli.db")
    monkeypatch.setattr(main, "get_settings", lambda: settings)
    return settings


def _create(email: str = "root@demo.com") -> int:
    return main.main(["create-user", "--email", email, "--name", "Root", "--role", "Admin", "--password", "Pw1!"])


def test_create_user_then_issue_and_check_token(cli_settings, capsys) -> None:
    assert _create() == 0
    assert "Created Admin user" in capsys.readouterr().out

    assert main.main(["issue-token", "--email", "root@demo.com"]) == 0
    token = capsys.readouterr().out.strip()
    assert token.count(".") == 2

    assert main.main(["check-token", token]) == 0
    out = capsys.readouterr().out
    assert "email=root@demo.com" in out
    assert "role=Admin" in out


def test_duplicate_user_exits_1(cli_settings, capsys) -> None:
    assert _create() == 0
    assert _create("ROOT@demo.com") == 1
    assert "already exists" in capsys.readouterr().out


def test_issue_token_unknown_email_exits_1(cli_settings) -> None:
    assert main.main(["issue-token", "--email", "nobody@demo.com"]) == 1


def test_check_token_rejects_garbage(cli_settings) -> None:
    assert main.main(["check-token", "not.a.token"]) == 1
