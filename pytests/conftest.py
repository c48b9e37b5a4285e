from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass

# Keep test log files out of the project tree; must be set before app modules
# configure logging on import.
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="vehicle_registry_logs_"))

import pytest

from app import create_app
from models.users import ROLE_ADMIN, ROLE_EMPLOYEE, ROLE_OWNER
from pytests.common import (
    auth_header,
    create_empty_sqlite_db,
    make_user,
    patch_app_db,
    seed_department,
    seed_employee,
    seed_person,
)

TEST_CONFIG = {
    "TESTING": True,
    "SLOW_REQUEST_MS": 0,
    "JWT_SECRET": "test-secret",
}


@dataclass(frozen=True)
class Tokens:
    admin: dict[str, str]
    employee: dict[str, str]
    owner: dict[str, str]


@pytest.fixture()
def db_session(tmp_path, monkeypatch):
    """Temp SQLite DB wired into the app; yields a session for seeding/asserts."""

    session, engine = create_empty_sqlite_db(tmp_path / "test.sqlite")
    patch_app_db(monkeypatch, engine)
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture()
def app(db_session):
    return create_app(TEST_CONFIG)


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def tokens(app, db_session) -> Tokens:
    """Admin, employee (badge AB-12345) and owner (passport 1234 567890) accounts."""

    seed_department(db_session)
    seed_employee(db_session)
    seed_person(db_session)

    admin_id = make_user(db_session, "admin@example.com", ROLE_ADMIN)
    employee_id = make_user(db_session, "clerk@example.com", ROLE_EMPLOYEE, badge_number="AB-12345")
    owner_id = make_user(db_session, "ivanov@example.com", ROLE_OWNER, party_key="1234 567890")

    with app.app_context():
        return Tokens(
            admin=auth_header(admin_id, ROLE_ADMIN),
            employee=auth_header(employee_id, ROLE_EMPLOYEE),
            owner=auth_header(owner_id, ROLE_OWNER),
        )
