from __future__ import annotations

from urllib.parse import quote

from models.natural_persons import NaturalPerson
from models.registration_docs import RegistrationDoc
from pytests.common import VIN_A, owner_addresses, seed_document, seed_legal_entity, seed_person, seed_vehicle

ADDR_A = "Moscow, Lenina st. 1"
ADDR_B = "Kazan, Baumana st. 5"
PASSPORT = "1234 567890"
PERSON_URL = f"/api/v1/employee/natural-persons/{quote(PASSPORT)}"


def _person_body(**overrides):
    body = {
        "passportData": "5555 666777",
        "address": "Samara, Mira st. 12",
        "lastName": "Kuznetsova",
        "firstName": "Anna",
        "patronymic": "Sergeevna",
    }
    body.update(overrides)
    return body


def test_patch_address_moves_person_and_documents(client, tokens, db_session):
    # tokens fixture seeds the person at ADDR_A.
    seed_vehicle(db_session, VIN_A)
    seed_document(db_session, owner=PASSPORT, address=ADDR_A)

    resp = client.patch(PERSON_URL, json={"address": ADDR_B}, headers=tokens.employee)

    assert resp.status_code == 200
    assert resp.get_json()["address"] == ADDR_B
    assert owner_addresses(db_session) == [ADDR_B]
    assert db_session.get(RegistrationDoc, "A123BC77RUS").address == ADDR_B
    assert db_session.get(NaturalPerson, PASSPORT).address == ADDR_B


def test_shared_address_is_kept_after_one_person_moves(client, tokens, db_session):
    seed_person(db_session, passport="4321 098765", address=ADDR_A, last_name="Sidorov")

    resp = client.patch(PERSON_URL, json={"address": ADDR_B}, headers=tokens.employee)

    assert resp.status_code == 200
    assert owner_addresses(db_session) == sorted([ADDR_A, ADDR_B])


def test_same_address_change_twice_creates_one_owner(client, tokens, db_session):
    for _ in range(2):
        resp = client.patch(PERSON_URL, json={"address": ADDR_B}, headers=tokens.employee)
        assert resp.status_code == 200

    assert owner_addresses(db_session) == [ADDR_B]


def test_put_replaces_fields_and_reconciles(client, tokens, db_session):
    body = _person_body(passportData=PASSPORT, address=ADDR_B, lastName="Ivanova")
    resp = client.put(PERSON_URL, json=body, headers=tokens.employee)

    assert resp.status_code == 200
    data = resp.get_json()
    assert data["lastName"] == "Ivanova"
    assert data["address"] == ADDR_B
    assert owner_addresses(db_session) == [ADDR_B]


def test_passport_change_is_rejected(client, tokens, db_session):
    resp = client.patch(PERSON_URL, json={"passportData": "1111 222222"}, headers=tokens.employee)

    assert resp.status_code == 400
    assert resp.get_json()["error"]["details"]["field"] == "passportData"


def test_names_frozen_after_documents_exist(client, tokens, db_session):
    seed_vehicle(db_session, VIN_A)
    seed_document(db_session, owner=PASSPORT)

    resp = client.patch(PERSON_URL, json={"lastName": "Smirnov"}, headers=tokens.employee)

    assert resp.status_code == 400
    assert resp.get_json()["error"]["details"]["field"] == "lastName"
    db_session.rollback()
    assert db_session.get(NaturalPerson, PASSPORT).last_name == "Ivanov"


def test_create_person_registers_address(client, tokens, db_session):
    resp = client.post("/api/v1/employee/natural-persons", json=_person_body(), headers=tokens.employee)

    assert resp.status_code == 201
    assert resp.get_json()["passportData"] == "5555 666777"
    assert "Samara, Mira st. 12" in owner_addresses(db_session)


def test_create_duplicate_person_conflicts(client, tokens):
    resp = client.post(
        "/api/v1/employee/natural-persons",
        json=_person_body(passportData=PASSPORT),
        headers=tokens.employee,
    )

    assert resp.status_code == 409


def test_invalid_body_is_rejected_before_any_write(client, tokens, db_session):
    resp = client.post(
        "/api/v1/employee/natural-persons",
        json=_person_body(passportData="12345"),
        headers=tokens.employee,
    )

    assert resp.status_code == 400
    assert resp.get_json()["error"]["details"]["field"] == "passportData"
    assert owner_addresses(db_session) == [ADDR_A]


def test_unknown_body_field_is_rejected(client, tokens):
    resp = client.patch(PERSON_URL, json={"nickname": "Vanya"}, headers=tokens.employee)

    assert resp.status_code == 400


def test_empty_patch_is_rejected(client, tokens):
    resp = client.patch(PERSON_URL, json={}, headers=tokens.employee)

    assert resp.status_code == 400


def test_malformed_passport_in_path_is_bad_request(client, tokens):
    resp = client.get("/api/v1/employee/natural-persons/123", headers=tokens.employee)

    assert resp.status_code == 400
    assert resp.get_json()["error"]["details"]["field"] == "passportData"


def test_missing_person_is_not_found(client, tokens):
    resp = client.patch(
        f"/api/v1/employee/natural-persons/{quote('9999 999999')}",
        json={"address": ADDR_B},
        headers=tokens.employee,
    )

    assert resp.status_code == 404


def test_get_person_lists_documents(client, tokens, db_session):
    seed_vehicle(db_session, VIN_A)
    seed_document(db_session, owner=PASSPORT)

    resp = client.get(PERSON_URL, headers=tokens.employee)

    assert resp.status_code == 200
    data = resp.get_json()
    assert data["registrationDocs"] == [{"registrationNumber": "A123BC77RUS", "registrationDate": "2020-05-17"}]


def test_list_persons_filters_and_paginates(client, tokens, db_session):
    seed_person(db_session, passport="4321 098765", address=ADDR_B, last_name="Sidorov")

    resp = client.get(
        "/api/v1/employee/natural-persons?search=sido&sortBy=lastName&sortOrder=ASC",
        headers=tokens.employee,
    )

    assert resp.status_code == 200
    data = resp.get_json()
    assert data["total"] == 1
    assert data["pages"] == 1
    assert data["currentPage"] == 1
    assert [p["passportData"] for p in data["data"]] == ["4321 098765"]


def test_delete_person_with_documents_conflicts(client, tokens, db_session):
    seed_vehicle(db_session, VIN_A)
    seed_document(db_session, owner=PASSPORT)

    resp = client.delete(PERSON_URL, headers=tokens.employee)

    assert resp.status_code == 409


def test_delete_person_releases_address(client, tokens, db_session):
    # The owner account links to the party by key only.
    resp = client.delete(PERSON_URL, headers=tokens.employee)

    assert resp.status_code == 204
    assert owner_addresses(db_session) == []


def test_legal_entity_crud_and_move(client, tokens, db_session):
    seed_legal_entity(db_session, address="Moscow, Tverskaya st. 7")
    url = "/api/v1/employee/legal-entities/7701234567"

    resp = client.patch(url, json={"address": ADDR_B, "companyName": "Vasilek LLC"}, headers=tokens.employee)
    assert resp.status_code == 200
    assert resp.get_json() == {"taxNumber": "7701234567", "companyName": "Vasilek LLC", "address": ADDR_B}
    assert "Moscow, Tverskaya st. 7" not in owner_addresses(db_session)

    resp = client.patch(url, json={"taxNumber": "7700000000"}, headers=tokens.employee)
    assert resp.status_code == 400

    resp = client.delete(url, headers=tokens.employee)
    assert resp.status_code == 204
    assert client.get(url, headers=tokens.employee).status_code == 404


def test_owner_registry_listing_and_rebuild(client, tokens, db_session):
    resp = client.get("/api/v1/employee/owners?sortBy=address", headers=tokens.employee)
    assert resp.status_code == 200
    assert [o["address"] for o in resp.get_json()["data"]] == [ADDR_A]

    resp = client.post("/api/v1/employee/owners/rebuild", headers=tokens.employee)
    assert resp.status_code == 200
    assert resp.get_json() == {"created": 0, "deleted": 0, "total": 1}


def test_search_is_case_insensitive_for_cyrillic_names(client, tokens, db_session):
    seed_person(db_session, passport="4321 098765", address=ADDR_B, last_name="Смирнов")

    resp = client.get(
        "/api/v1/employee/natural-persons",
        query_string={"search": "смирнов"},
        headers=tokens.employee,
    )

    data = resp.get_json()
    assert data["total"] == 1
    assert data["data"][0]["lastName"] == "Смирнов"
