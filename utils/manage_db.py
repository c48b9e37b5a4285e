"""Database maintenance commands.

Usage:
    python utils/manage_db.py init-db                    # create missing tables
    python utils/manage_db.py recreate-db                # drop + recreate (prompts)
    python utils/manage_db.py recreate-db --yes          # skip confirmation
    python utils/manage_db.py rebuild-owners             # recompute the owner registry
    python utils/manage_db.py create-admin EMAIL PASSWORD

The target database is `db.engine` (`DATABASE_URL`, default `data/vehicle_registry.db`).
"""

from __future__ import annotations

import argparse
import os
import sys

# Allow running as: `python utils/manage_db.py`
sys.path.append(os.path.dirname(os.path.dirname(__file__)))

from sqlalchemy import inspect

import db
import models  # noqa: F401  (registers every table with Base.metadata)
from api.errors import Conflict
from api.services.address_registry import rebuild_owner_registry
from logging_utils import get_logger
from models.users import ROLE_ADMIN, User
from utils.security import hash_password

logger = get_logger(__name__)


def _confirm_or_exit(target: str, assume_yes: bool) -> None:
    """Prompt user for confirmation before proceeding with destructive operation."""
    if assume_yes:
        return

    resp = input(
        f"\nThis will DROP and RECREATE ALL TABLES in:\n  {target}\n\n"
        "ALL DATA WILL BE LOST!\n\n"
        "Continue? [y/N]: "
    ).strip()
    if resp.lower() not in {"y", "yes"}:
        print("Aborted.")
        raise SystemExit(1)


def _print_tables() -> None:
    tables = sorted(inspect(db.engine).get_table_names())
    print(f"Tables ({len(tables)}):")
    for table in tables:
        print(f"  - {table}")


def init_db() -> None:
    db.Base.metadata.create_all(bind=db.engine)
    logger.info("Schema initialized")
    _print_tables()


def recreate_db(assume_yes: bool) -> None:
    _confirm_or_exit(str(db.engine.url), assume_yes)
    db.Base.metadata.drop_all(bind=db.engine)
    db.Base.metadata.create_all(bind=db.engine)
    logger.info("Schema dropped and recreated")
    _print_tables()


def rebuild_owners() -> dict[str, int]:
    with db.session_scope() as session:
        result = rebuild_owner_registry(session)
    print(f"Owner registry: created={result['created']} deleted={result['deleted']} total={result['total']}")
    return result


def create_admin(email: str, password: str) -> int:
    email = email.strip().lower()
    with db.session_scope() as session:
        if session.query(User.id).filter(User.email == email).first() is not None:
            raise Conflict("User with this email already exists", field="email")
        user = User(email=email, password_hash=hash_password(password), role=ROLE_ADMIN)
        session.add(user)
        session.flush()
        user_id = user.id
    logger.info("Created admin user id=%s", user_id)
    print(f"Admin user created: id={user_id}")
    return user_id


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Vehicle registry database maintenance.")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("init-db", help="Create missing tables.")

    recreate = sub.add_parser("recreate-db", help="Drop and recreate all tables.")
    recreate.add_argument("--yes", "-y", action="store_true", help="Do not prompt for confirmation.")

    sub.add_parser("rebuild-owners", help="Recompute the owner registry from addresses in use.")

    admin = sub.add_parser("create-admin", help="Create an admin account.")
    admin.add_argument("email")
    admin.add_argument("password")

    args = parser.parse_args(argv)

    if args.command == "init-db":
        init_db()
    elif args.command == "recreate-db":
        recreate_db(args.yes)
    elif args.command == "rebuild-owners":
        rebuild_owners()
    elif args.command == "create-admin":
        try:
            create_admin(args.email, args.password)
        except Conflict as exc:
            print(exc.message)
            raise SystemExit(1) from exc


if __name__ == "__main__":
    main()
