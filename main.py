#!/usr/bin/env python3
"""
TaskTeam -- account bootstrap and token utilities.

Every user-management route requires an Admin caller, so the first Admin
has to be created out of band. This CLI talks to the same DATABASE_URL the
API uses.

Usage:
  python main.py create-user --email admin@example.com --name "Ada Admin" --role Admin
  python main.py issue-token --email admin@example.com
  python main.py check-token <jwt>

Environment variables:
  DATABASE_URL, JWT_SECRET_KEY, JWT_ISSUER, JWT_AUDIENCE, JWT_EXPIRY_MINUTES
  (see core/config.py). DEBUG=true allows running without JWT_SECRET_KEY.
"""

import argparse
import getpass
import sys
from typing import Optional

from sqlalchemy.exc import IntegrityError

from auth.models import Role, User
from auth.passwords import hash_password
from auth.store import UserStore
from auth.tokens import TokenService
from core.config import get_settings


def _read_password(given: Optional[str]) -> str:
    """Return the --password value, or prompt twice without echo."""
    if given:
        return given
    first = getpass.getpass("Password: ")
    second = getpass.getpass("Repeat password: ")
    if first != second:
        print("  [!] Passwords do not match.")
        sys.exit(1)
    if not first:
        print("  [!] Password must not be empty.")
        sys.exit(1)
    return first


def cmd_create_user(args: argparse.Namespace, store: UserStore) -> int:
    user = User(
        email=args.email,
        full_name=args.name,
        role=Role(args.role),
        hashed_password=hash_password(_read_password(args.password)),
    )
    try:
        user_id = store.create_user(user)
    except IntegrityError:
        print(f"  [!] A user with email '{args.email}' already exists.")
        return 1
    print(f"  Created {user.role.value} user {user_id} <{args.email}>.")
    return 0


def cmd_issue_token(args: argparse.Namespace, store: UserStore) -> int:
    user = store.get_by_email(args.email)
    if user is None:
        print(f"  [!] No user with email '{args.email}'.")
        return 1
    print(TokenService(get_settings().jwt).issue(user))
    return 0


def cmd_check_token(args: argparse.Namespace, store: UserStore) -> int:
    claims = TokenService(get_settings().jwt).validate(args.token)
    if claims is None:
        print("  [!] Token is invalid or expired.")
        return 1
    role = claims.role.value if claims.role else "(unrecognised)"
    print(f"  sub={claims.subject} email={claims.email} role={role} expires={claims.expires_at.isoformat()}")
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog="taskteam",
        description="TaskTeam account bootstrap and token utilities.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    create = sub.add_parser("create-user", help="Create a user directly in the database")
    create.add_argument("--email", required=True)
    create.add_argument("--name", required=True, help="Full name")
    create.add_argument("--role", choices=[r.value for r in Role], default=Role.EMPLOYEE.value)
    create.add_argument("--password", help="Omit to be prompted (recommended)")
    create.set_defaults(func=cmd_create_user)

    issue = sub.add_parser("issue-token", help="Print a fresh JWT for an existing user")
    issue.add_argument("--email", required=True)
    issue.set_defaults(func=cmd_issue_token)

    check = sub.add_parser("check-token", help="Validate a JWT and print its claims")
    check.add_argument("token")
    check.set_defaults(func=cmd_check_token)

    args = parser.parse_args(argv)
    store = UserStore(get_settings().database_url)
    try:
        return args.func(args, store)
    finally:
        store.close()


if __name__ == "__main__":
    sys.exit(main())
