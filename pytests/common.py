"""Shared helpers for tests.

Intended usage:
- spin up a temporary SQLite database
- create all SQLAlchemy tables
- re-point the app (`db.engine` / `db.SessionLocal`) at it
- seed rows and mint access tokens

These utilities keep tests small and consistent.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date
from pathlib import Path
from typing import Any

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

import db
from models import Base
from models.departments import RegDepartment
from models.employees import Employee
from models.legal_entities import LegalEntity
from models.natural_persons import NaturalPerson
from models.owners import Owner
from models.registration_docs import RegistrationDoc
from models.transport_vehicles import TransportVehicle
from models.users import User
from utils.security import build_access_token, hash_password

__all__ = [
    "make_sqlite_engine",
    "create_empty_sqlite_db",
    "patch_app_db",
    "add_dicts",
    "auth_header",
    "make_user",
    "seed_person",
    "seed_legal_entity",
    "seed_vehicle",
    "vehicle_payload",
    "seed_document",
    "seed_department",
    "seed_employee",
    "owner_addresses",
    "VIN_A",
    "VIN_B",
]

VIN_A = "XTA21099043456789"
VIN_B = "WVWZZZ1JZXW000001"


def make_sqlite_engine(db_path: Path | str) -> Engine:
    """Create a SQLite engine suitable for tests (FKs enforced like the app DB)."""

    if isinstance(db_path, Path):
        db_path = str(db_path)
    return db.configure_engine(
        create_engine(f"sqlite:///{db_path}", connect_args={"check_same_thread": False})
    )


def create_empty_sqlite_db(db_path: Path) -> tuple[Session, Engine]:
    """Create an empty SQLite DB file and initialize all models.

    Returns (session, engine).
    """

    engine = make_sqlite_engine(db_path)
    Base.metadata.create_all(engine)
    SessionLocal = sessionmaker(bind=engine, autoflush=False)
    return SessionLocal(), engine


def patch_app_db(monkeypatch, engine: Engine) -> None:
    """Point `db.engine` and `db.SessionLocal` at a test engine."""

    monkeypatch.setattr(db, "engine", engine)
    monkeypatch.setattr(db, "SessionLocal", sessionmaker(autocommit=False, autoflush=False, bind=engine))


def add_dicts(session: Session, model, rows: Iterable[dict[str, Any]]) -> None:
    """Bulk insert a list of dicts into a SQLAlchemy model table."""

    objs = [model(**row) for row in rows]
    session.add_all(objs)
    session.commit()


# --- auth ---


def auth_header(user_id: int, role: str) -> dict[str, str]:
    """Bearer header; call inside an app context to use the app's JWT settings."""

    return {"Authorization": f"Bearer {build_access_token(user_id=user_id, role=role)}"}


def make_user(session: Session, email: str, role: str, password: str = "secret-pass", **links: Any) -> int:
    user = User(email=email.lower(), password_hash=hash_password(password), role=role, **links)
    session.add(user)
    session.commit()
    return user.id


# --- seed rows (registry kept consistent by hand) ---


def _ensure_owner_row(session: Session, address: str) -> None:
    if session.query(Owner).filter(Owner.address == address).first() is None:
        session.add(Owner(address=address))


def seed_person(
    session: Session,
    passport: str = "1234 567890",
    address: str = "Moscow, Lenina st. 1",
    last_name: str = "Ivanov",
) -> NaturalPerson:
    _ensure_owner_row(session, address)
    person = NaturalPerson(
        passport_data=passport,
        last_name=last_name,
        first_name="Ivan",
        patronymic="Ivanovich",
        address=address,
    )
    session.add(person)
    session.commit()
    return person


def seed_legal_entity(
    session: Session,
    tax_number: str = "7701234567",
    address: str = "Moscow, Tverskaya st. 7",
    company_name: str = "Romashka LLC",
) -> LegalEntity:
    _ensure_owner_row(session, address)
    entity = LegalEntity(tax_number=tax_number, company_name=company_name, address=address)
    session.add(entity)
    session.commit()
    return entity


def vehicle_payload(vin: str = VIN_A, **overrides: Any) -> dict[str, Any]:
    """JSON body for POST /vehicles."""

    body = {
        "vin": vin,
        "makeAndModel": "Lada 2109",
        "releaseYear": "2004",
        "manufacture": "AvtoVAZ",
        "typeOfDrive": "FWD",
        "power": "70 hp",
        "hasChassisNumber": True,
        "bodyNumber": "BODY12345",
        "bodyColor": "white",
        "transmissionType": "MT",
        "steeringWheel": "left",
        "engineModel": "VAZ-21083",
        "engineVolume": 1500,
    }
    body.update(overrides)
    return body


def seed_vehicle(session: Session, vin: str = VIN_A, *, chassis: bool = True, **overrides: Any) -> TransportVehicle:
    values = {
        "vin": vin,
        "make_and_model": "Lada 2109",
        "release_year": "2004",
        "manufacture": "AvtoVAZ",
        "type_of_drive": "FWD",
        "power": "70 hp",
        "chassis_number": vin if chassis else None,
        "body_number": "BODY12345",
        "body_color": "white",
        "transmission_type": "MT",
        "steering_wheel": "left",
        "engine_model": "VAZ-21083",
        "engine_volume": 1500,
    }
    values.update(overrides)
    vehicle = TransportVehicle(**values)
    session.add(vehicle)
    session.commit()
    return vehicle


def seed_document(
    session: Session,
    *,
    number: str = "A123BC77RUS",
    owner: str = "1234 567890",
    vin: str = VIN_A,
    address: str = "Moscow, Lenina st. 1",
    registered: date = date(2020, 5, 17),
) -> RegistrationDoc:
    _ensure_owner_row(session, address)
    doc = RegistrationDoc(
        registration_number=number,
        address=address,
        pts="PTS1234567",
        sts="STS1234567",
        registration_date=registered,
        vin=vin,
        document_owner=owner,
    )
    session.add(doc)
    session.commit()
    return doc


def seed_department(session: Session, unit_code: str = "MOS-01", email: str = "mos01@gibdd.example") -> RegDepartment:
    department = RegDepartment(
        unit_code=unit_code,
        name="Moscow registration unit 1",
        address="Moscow, Sadovaya st. 10",
        working_hours="Mon-Fri 9:00-18:00",
        phone_number="+74951234567",
        email=email,
    )
    session.add(department)
    session.commit()
    return department


def seed_employee(session: Session, badge: str = "AB-12345", unit_code: str = "MOS-01") -> Employee:
    employee = Employee(
        badge_number=badge,
        unit_code=unit_code,
        last_name="Petrov",
        first_name="Petr",
        patronymic="Petrovich",
        rank="Lieutenant",
    )
    session.add(employee)
    session.commit()
    return employee


def owner_addresses(session: Session) -> list[str]:
    # End any open read transaction so rows written by the app are visible.
    session.rollback()
    return sorted(a for (a,) in session.query(Owner.address).all())
