"""Create a moderator account or reset its password.

Usage:
  python -m confession_board.scripts.create_admin admin@example.com 's3cret'
  python -m confession_board.scripts.create_admin someone@example.com 'pw' --role user
"""

from __future__ import annotations

import argparse
import sys

from confession_board.db.session import SessionLocal
from confession_board.models.account import ROLE_ADMIN, ROLE_USER
from confession_board.services.accounts import create_or_update_account
from confession_board.services.errors import StoreError


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Create or update a Confession Board account.")
    parser.add_argument("email", help="Login email")
    parser.add_argument("password", help="Plain-text password; stored as a bcrypt hash")
    parser.add_argument(
        "--role",
        action="append",
        choices=[ROLE_ADMIN, ROLE_USER],
        help="Role to grant; repeatable (default: admin)",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    roles = args.role or [ROLE_ADMIN]

    db = SessionLocal()
    try:
        account, created = create_or_update_account(db, args.email, args.password, roles)
        action = "Created" if created else "Updated"
        print(f"[create-admin] {action} {account.email} with roles {', '.join(account.role_names)}")
    except StoreError as exc:
        print(f"[create-admin][FAIL] {exc}", file=sys.stderr)
        return 1
    finally:
        db.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
