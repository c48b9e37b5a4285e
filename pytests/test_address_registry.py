from __future__ import annotations

import pytest

from api.errors import NotFound
from api.services import address_registry, parties_service, registration_docs_service
from models.natural_persons import NaturalPerson
from models.owners import Owner
from models.registration_docs import RegistrationDoc
from pytests.common import (
    VIN_A,
    create_empty_sqlite_db,
    owner_addresses,
    seed_document,
    seed_legal_entity,
    seed_person,
    seed_vehicle,
)

ADDR_A = "Moscow, Lenina st. 1"
ADDR_B = "Kazan, Baumana st. 5"


@pytest.fixture()
def session(tmp_path):
    session, engine = create_empty_sqlite_db(tmp_path / "registry.sqlite")
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


def test_ensure_owner_is_idempotent(session):
    first = address_registry.ensure_owner(session, ADDR_A)
    second = address_registry.ensure_owner(session, ADDR_A)
    session.commit()

    assert first.id == second.id
    assert session.query(Owner).filter(Owner.address == ADDR_A).count() == 1


def test_conflicting_insert_is_ignored(session):
    # Same address inserted twice, as two racing requests would.
    address_registry._insert_ignore(session, ADDR_A)
    address_registry._insert_ignore(session, ADDR_A)
    session.commit()

    assert owner_addresses(session) == [ADDR_A]


def test_move_rewrites_own_documents_and_drops_old_owner(session):
    seed_person(session, address=ADDR_A)
    seed_vehicle(session)
    seed_document(session, address=ADDR_A)

    parties_service.update_natural_person(session, "1234 567890", {"address": ADDR_B})
    session.commit()

    person = session.get(NaturalPerson, "1234 567890")
    doc = session.get(RegistrationDoc, "A123BC77RUS")
    assert person.address == ADDR_B
    assert doc.address == ADDR_B
    assert owner_addresses(session) == [ADDR_B]


def test_move_releases_addresses_of_transferred_documents(session):
    seed_person(session, address=ADDR_A)
    seed_person(session, passport="4321 098765", address="Tver, Old st. 3", last_name="Sidorov")
    seed_vehicle(session)
    seed_document(session, owner="4321 098765", address="Tver, Old st. 3")

    # Transfer keeps the document's address.
    registration_docs_service.update_document(session, "A123BC77RUS", {"document_owner": "1234 567890"})
    session.commit()
    parties_service.update_natural_person(session, "4321 098765", {"address": "Omsk, New st. 9"})
    session.commit()
    assert "Tver, Old st. 3" in owner_addresses(session)

    parties_service.update_natural_person(session, "1234 567890", {"address": ADDR_B})
    session.commit()

    assert session.get(RegistrationDoc, "A123BC77RUS").address == ADDR_B
    assert owner_addresses(session) == sorted([ADDR_B, "Omsk, New st. 9"])


def test_shared_address_survives_when_one_party_moves(session):
    seed_person(session, passport="1234 567890", address=ADDR_A)
    seed_person(session, passport="4321 098765", address=ADDR_A, last_name="Sidorov")

    parties_service.update_natural_person(session, "1234 567890", {"address": ADDR_B})
    session.commit()

    assert owner_addresses(session) == sorted([ADDR_A, ADDR_B])


def test_documents_of_other_owners_keep_the_old_address(session):
    seed_person(session, passport="1234 567890", address=ADDR_A)
    seed_person(session, passport="4321 098765", address=ADDR_A, last_name="Sidorov")
    seed_vehicle(session)
    seed_document(session, number="A123BC77RUS", owner="1234 567890", address=ADDR_A)
    seed_document(session, number="B456CD77RUS", owner="4321 098765", address=ADDR_A)

    parties_service.update_natural_person(session, "1234 567890", {"address": ADDR_B})
    session.commit()

    assert session.get(RegistrationDoc, "A123BC77RUS").address == ADDR_B
    assert session.get(RegistrationDoc, "B456CD77RUS").address == ADDR_A
    assert owner_addresses(session) == sorted([ADDR_A, ADDR_B])


def test_old_address_kept_while_a_document_still_uses_it(session):
    # The document belongs to someone else, so it is not rewritten.
    seed_person(session, address=ADDR_A)
    seed_legal_entity(session, address="Moscow, Tverskaya st. 7")
    seed_vehicle(session)
    seed_document(session, owner="7701234567", address=ADDR_A)

    parties_service.update_natural_person(session, "1234 567890", {"address": ADDR_B})
    session.commit()

    assert ADDR_A in owner_addresses(session)


def test_repeated_move_does_not_duplicate_owner(session):
    seed_person(session, address=ADDR_A)

    parties_service.update_natural_person(session, "1234 567890", {"address": ADDR_B})
    session.commit()
    parties_service.update_natural_person(session, "1234 567890", {"address": ADDR_B})
    session.commit()

    assert session.query(Owner).filter(Owner.address == ADDR_B).count() == 1
    assert owner_addresses(session) == [ADDR_B]


def test_unchanged_or_omitted_address_skips_reconciliation(session):
    seed_person(session, address=ADDR_A)

    changed = address_registry.relocate_party(
        session,
        party=session.get(NaturalPerson, "1234 567890"),
        key="1234 567890",
        new_address=ADDR_A,
    )
    parties_service.update_natural_person(session, "1234 567890", {"first_name": "Pavel"})
    session.commit()

    assert changed is False
    assert session.get(NaturalPerson, "1234 567890").first_name == "Pavel"
    assert owner_addresses(session) == [ADDR_A]


def test_legal_entity_move_rewrites_its_documents(session):
    seed_legal_entity(session, address=ADDR_A)
    seed_vehicle(session)
    seed_document(session, owner="7701234567", address=ADDR_A)

    parties_service.update_legal_entity(session, "7701234567", {"address": ADDR_B})
    session.commit()

    assert session.get(RegistrationDoc, "A123BC77RUS").address == ADDR_B
    assert owner_addresses(session) == [ADDR_B]


def test_missing_party_raises_not_found_without_writes(session):
    with pytest.raises(NotFound):
        parties_service.update_natural_person(session, "9999 999999", {"address": ADDR_B})
    session.rollback()

    assert owner_addresses(session) == []


def test_failure_mid_move_rolls_everything_back(session, monkeypatch):
    seed_person(session, address=ADDR_A)
    seed_vehicle(session)
    seed_document(session, address=ADDR_A)

    def boom(*_args, **_kwargs):
        raise RuntimeError("storage failure")

    monkeypatch.setattr(address_registry, "release_address", boom)

    with pytest.raises(RuntimeError):
        parties_service.update_natural_person(session, "1234 567890", {"address": ADDR_B})
    session.rollback()

    assert session.get(NaturalPerson, "1234 567890").address == ADDR_A
    assert session.get(RegistrationDoc, "A123BC77RUS").address == ADDR_A
    assert owner_addresses(session) == [ADDR_A]


def test_release_address_counts_every_kind_of_reference(session):
    seed_person(session, address=ADDR_A)

    assert address_registry.count_address_references(session, ADDR_A) == 1
    assert address_registry.release_address(session, ADDR_A) is False
    assert address_registry.release_address(session, "Nowhere, unused st. 0") is False
    assert address_registry.release_address(session, None) is False


def test_rebuild_adds_missing_and_removes_orphans(session):
    seed_person(session, address=ADDR_A)
    seed_vehicle(session, VIN_A)
    seed_document(session, address=ADDR_B)
    # Corrupt the registry: drop a live row, add an orphan.
    session.query(Owner).filter(Owner.address == ADDR_B).delete()
    session.add(Owner(address="Orphan town, Empty st. 3"))
    session.commit()

    result = address_registry.rebuild_owner_registry(session)
    session.commit()

    assert result == {"created": 1, "deleted": 1, "total": 2}
    assert owner_addresses(session) == sorted([ADDR_A, ADDR_B])

    again = address_registry.rebuild_owner_registry(session)
    assert again == {"created": 0, "deleted": 0, "total": 2}
