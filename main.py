#!/usr/bin/env python3
"""
Warden -- account administration from the command line.

Registration through the API always assigns the "user" role, so the first
administrator has to be created here.

Usage:
  python main.py create-user EMAIL PASSWORD FIRST_NAME LAST_NAME
  python main.py create-user admin@example.com s3cret! Ada Lovelace --role admin

Environment variables:
  DATABASE_URL  SQLAlchemy URL of the user database (default: ./warden.db)
"""

import argparse
import sys

from auth.credentials import PASSWORD_MIN_LENGTH
from auth.models import ADMIN_ROLE, USER_ROLE, User, build_display_name
from auth.passwords import hash_password
from auth.store import UserStore


def create_user(store: UserStore, email: str, password: str, first_name: str, last_name: str, role: str) -> int:
    """Create an account with the given role. Returns a process exit code."""
    email = email.strip()
    if not email or "@" not in email:
        print(f"  [!] '{email}' is not a valid email address.", file=sys.stderr)
        return 1
    if len(password) < PASSWORD_MIN_LENGTH:
        print(f"  [!] Password must be at least {PASSWORD_MIN_LENGTH} characters.", file=sys.stderr)
        return 1
    if not first_name.strip() or not last_name.strip():
        print("  [!] First and last name are required.", file=sys.stderr)
        return 1
    if store.find_user_by_email(email) is not None:
        print(f"  [!] User '{email}' already exists.", file=sys.stderr)
        return 1

    role_row = store.find_or_create_role(role)
    uid = store.create_user(
        User(
            email=email,
            password_hash=hash_password(password),
            first_name=first_name,
            last_name=last_name,
            display_name=build_display_name(first_name, last_name),
            role_id=role_row.id,
        )
    )
    print(f"Created user '{email}' (id={uid}) with role '{role}'.")
    return 0


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        prog="warden",
        description="Account administration for the Warden API.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py create-user ada@example.com s3cret! Ada Lovelace
  python main.py create-user root@example.com s3cret! Root Admin --role admin
  DATABASE_URL=sqlite:////srv/warden.db python main.py create-user ...
        """,
    )
    commands = parser.add_subparsers(dest="command", metavar="COMMAND")

    create = commands.add_parser("create-user", help="Create an account (use --role admin for administrators)")
    create.add_argument("email", help="Login email address")
    create.add_argument("password", help=f"Password ({PASSWORD_MIN_LENGTH}+ characters)")
    create.add_argument("first_name", metavar="FIRST_NAME")
    create.add_argument("last_name", metavar="LAST_NAME")
    create.add_argument(
        "--role",
        choices=[USER_ROLE, ADMIN_ROLE],
        default=USER_ROLE,
        help="Role to assign (default: user)",
    )
    args = parser.parse_args(argv)

    if args.command != "create-user":
        parser.print_help()
        return 1

    store = UserStore()
    try:
        return create_user(store, args.email, args.password, args.first_name, args.last_name, args.role)
    finally:
        store.close()


if __name__ == "__main__":
    sys.exit(main())
