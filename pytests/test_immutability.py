from __future__ import annotations

import pytest

from api.errors import BadRequest
from api.services.immutability import (
    ALWAYS,
    DEPARTMENT,
    EMPLOYEE,
    IMMUTABLE_FIELDS,
    LEGAL_ENTITY,
    NATURAL_PERSON,
    ONCE_DOCUMENTED,
    REGISTRATION_DOC,
    VEHICLE,
    check_mutable,
    has_dependent_documents,
)
from models.legal_entities import LegalEntity
from models.natural_persons import NaturalPerson
from models.transport_vehicles import TransportVehicle
from pytests.common import (
    VIN_A,
    VIN_B,
    create_empty_sqlite_db,
    seed_document,
    seed_legal_entity,
    seed_person,
    seed_vehicle,
)


@pytest.fixture()
def session(tmp_path):
    session, engine = create_empty_sqlite_db(tmp_path / "immutability.sqlite")
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


def test_policy_table_covers_every_natural_key():
    assert IMMUTABLE_FIELDS[NATURAL_PERSON]["passport_data"] == ALWAYS
    assert IMMUTABLE_FIELDS[LEGAL_ENTITY]["tax_number"] == ALWAYS
    assert IMMUTABLE_FIELDS[VEHICLE]["vin"] == ALWAYS
    assert IMMUTABLE_FIELDS[REGISTRATION_DOC]["registration_number"] == ALWAYS
    assert IMMUTABLE_FIELDS[EMPLOYEE]["badge_number"] == ALWAYS
    assert IMMUTABLE_FIELDS[DEPARTMENT]["unit_code"] == ALWAYS
    assert IMMUTABLE_FIELDS[VEHICLE]["chassis_number"] == ONCE_DOCUMENTED


def test_key_change_is_rejected_even_without_documents(session):
    person = seed_person(session)

    with pytest.raises(BadRequest) as exc:
        check_mutable(session, NATURAL_PERSON, "1234 567890", person, {"passport_data": "1111 222222"})

    assert exc.value.field == "passportData"


def test_resending_the_same_key_is_allowed(session):
    person = seed_person(session)

    check_mutable(session, NATURAL_PERSON, "1234 567890", person, {"passport_data": "1234 567890"})


def test_chassis_number_frozen_once_documented(session):
    seed_person(session)
    vehicle = seed_vehicle(session, VIN_A)

    # No documents yet: allowed.
    check_mutable(session, VEHICLE, VIN_A, vehicle, {"chassis_number": None})

    seed_document(session, vin=VIN_A)
    vehicle = session.get(TransportVehicle, VIN_A)
    with pytest.raises(BadRequest) as exc:
        check_mutable(session, VEHICLE, VIN_A, vehicle, {"chassis_number": None})

    assert exc.value.field == "chassisNumber"
    assert "registration documents" in exc.value.message


def test_names_frozen_for_documented_person_only(session):
    seed_person(session, passport="1234 567890")
    seed_person(session, passport="4321 098765", address="Kazan, Baumana st. 5")
    seed_vehicle(session, VIN_A)
    seed_document(session, owner="1234 567890")

    documented = session.get(NaturalPerson, "1234 567890")
    undocumented = session.get(NaturalPerson, "4321 098765")

    with pytest.raises(BadRequest):
        check_mutable(session, NATURAL_PERSON, "1234 567890", documented, {"last_name": "Smirnov"})
    check_mutable(session, NATURAL_PERSON, "4321 098765", undocumented, {"last_name": "Smirnov"})


def test_address_is_never_frozen(session):
    seed_legal_entity(session)
    seed_vehicle(session, VIN_A)
    seed_document(session, owner="7701234567", address="Moscow, Tverskaya st. 7")
    entity = session.get(LegalEntity, "7701234567")

    check_mutable(session, LEGAL_ENTITY, "7701234567", entity, {"address": "Kazan, Baumana st. 5"})


def test_has_dependent_documents(session):
    seed_person(session)
    seed_vehicle(session, VIN_A)
    seed_vehicle(session, VIN_B)
    seed_document(session, vin=VIN_A)

    assert has_dependent_documents(session, VEHICLE, VIN_A) is True
    assert has_dependent_documents(session, VEHICLE, VIN_B) is False
    assert has_dependent_documents(session, NATURAL_PERSON, "1234 567890") is True
    # Types without a document link never count as documented.
    assert has_dependent_documents(session, EMPLOYEE, "AB-12345") is False
