from __future__ import annotations

import pytest
from sqlalchemy import inspect

from models.owners import Owner
from models.users import User
from pytests.common import add_dicts, create_empty_sqlite_db, make_sqlite_engine, patch_app_db, seed_person
from utils import manage_db
from utils.security import verify_password


@pytest.fixture()
def session(tmp_path, monkeypatch):
    session, engine = create_empty_sqlite_db(tmp_path / "manage.sqlite")
    patch_app_db(monkeypatch, engine)
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


def test_init_db_creates_tables(tmp_path, monkeypatch, capsys):
    engine = make_sqlite_engine(tmp_path / "fresh.sqlite")
    patch_app_db(monkeypatch, engine)

    manage_db.main(["init-db"])

    tables = set(inspect(engine).get_table_names())
    assert {"owners", "natural_persons", "registration_docs", "users"} <= tables
    assert "Tables (" in capsys.readouterr().out
    engine.dispose()


def test_recreate_db_requires_confirmation(session, monkeypatch):
    monkeypatch.setattr("builtins.input", lambda _prompt: "n")

    with pytest.raises(SystemExit):
        manage_db.main(["recreate-db"])


def test_recreate_db_with_yes_wipes_data(session):
    seed_person(session)

    manage_db.main(["recreate-db", "--yes"])

    session.rollback()
    assert session.query(Owner).count() == 0


def test_rebuild_owners_fixes_drift(session):
    seed_person(session, address="Moscow, Lenina st. 1")
    add_dicts(session, Owner, [{"address": "Nowhere, Orphan st. 0"}])
    session.query(Owner).filter(Owner.address == "Moscow, Lenina st. 1").delete()
    session.commit()

    manage_db.main(["rebuild-owners"])

    session.rollback()
    assert [o.address for o in session.query(Owner).order_by(Owner.address)] == ["Moscow, Lenina st. 1"]


def test_create_admin(session):
    manage_db.main(["create-admin", "Root@Example.com", "correct-horse"])

    session.rollback()
    user = session.query(User).one()
    assert user.email == "root@example.com"
    assert user.role == "admin"
    assert verify_password("correct-horse", user.password_hash)

    with pytest.raises(SystemExit):
        manage_db.main(["create-admin", "root@example.com", "another-pass"])
