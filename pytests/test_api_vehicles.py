from __future__ import annotations

import db
from models.transport_vehicles import TransportVehicle
from pytests.common import VIN_A, VIN_B, seed_document, seed_vehicle, vehicle_payload

BASE = "/api/v1/employee/vehicles"


def test_create_vehicle_sets_chassis_from_flag(client, tokens):
    resp = client.post(BASE, json=vehicle_payload(VIN_A), headers=tokens.employee)
    assert resp.status_code == 201
    assert resp.get_json()["chassisNumber"] == VIN_A

    resp = client.post(BASE, json=vehicle_payload(VIN_B, hasChassisNumber=False), headers=tokens.employee)
    assert resp.status_code == 201
    assert resp.get_json()["chassisNumber"] is None


def test_create_duplicate_vin_conflicts(client, tokens, db_session):
    seed_vehicle(db_session, VIN_A)

    resp = client.post(BASE, json=vehicle_payload(VIN_A), headers=tokens.employee)

    assert resp.status_code == 409
    assert resp.get_json()["error"]["details"]["field"] == "vin"


def test_create_rejects_invalid_vin(client, tokens):
    # I, O and Q never appear in a VIN.
    resp = client.post(BASE, json=vehicle_payload("XTA2109904345678O"), headers=tokens.employee)

    assert resp.status_code == 400
    assert resp.get_json()["error"]["details"]["field"] == "vin"


def test_chassis_change_rejected_once_documented(client, tokens, db_session):
    seed_vehicle(db_session, VIN_A)
    seed_document(db_session, vin=VIN_A)

    resp = client.patch(f"{BASE}/{VIN_A}", json={"hasChassisNumber": False}, headers=tokens.employee)

    assert resp.status_code == 400
    assert resp.get_json()["error"]["details"]["field"] == "chassisNumber"
    db_session.rollback()
    assert db_session.get(TransportVehicle, VIN_A).chassis_number == VIN_A


def test_chassis_change_allowed_before_documents(client, tokens, db_session):
    seed_vehicle(db_session, VIN_A)

    resp = client.patch(f"{BASE}/{VIN_A}", json={"hasChassisNumber": False}, headers=tokens.employee)
    assert resp.status_code == 200
    assert resp.get_json()["chassisNumber"] is None

    resp = client.patch(f"{BASE}/{VIN_A}", json={"chassisNumber": VIN_A}, headers=tokens.employee)
    assert resp.status_code == 200
    assert resp.get_json()["chassisNumber"] == VIN_A


def test_chassis_number_must_equal_vin(client, tokens, db_session):
    seed_vehicle(db_session, VIN_A)

    resp = client.patch(f"{BASE}/{VIN_A}", json={"chassisNumber": VIN_B}, headers=tokens.employee)

    assert resp.status_code == 400


def test_other_fields_stay_editable_after_documents(client, tokens, db_session):
    seed_vehicle(db_session, VIN_A)
    seed_document(db_session, vin=VIN_A)

    resp = client.patch(f"{BASE}/{VIN_A}", json={"bodyColor": "red"}, headers=tokens.employee)

    assert resp.status_code == 200
    assert resp.get_json()["bodyColor"] == "red"


def test_put_requires_every_field(client, tokens, db_session):
    seed_vehicle(db_session, VIN_A)
    body = vehicle_payload(VIN_A)
    del body["bodyColor"]

    resp = client.put(f"{BASE}/{VIN_A}", json=body, headers=tokens.employee)

    assert resp.status_code == 400
    assert resp.get_json()["error"]["details"]["field"] == "bodyColor"


def test_put_replaces_vehicle(client, tokens, db_session):
    seed_vehicle(db_session, VIN_A)

    resp = client.put(
        f"{BASE}/{VIN_A}",
        json=vehicle_payload(VIN_A, bodyColor="black", engineVolume=1600),
        headers=tokens.employee,
    )

    assert resp.status_code == 200
    data = resp.get_json()
    assert data["bodyColor"] == "black"
    assert data["engineVolume"] == 1600


def test_unknown_sort_field_is_rejected_without_touching_the_db(client, tokens, monkeypatch):
    opened = []
    real = db.SessionLocal

    def tracking_session(*args, **kwargs):
        opened.append(1)
        return real(*args, **kwargs)

    monkeypatch.setattr(db, "SessionLocal", tracking_session)

    resp = client.get(f"{BASE}?sortBy=unknownField", headers=tokens.employee)

    assert resp.status_code == 400
    assert resp.get_json()["error"]["details"]["field"] == "sortBy"
    # Only the bearer-token user lookup; the listing never opened a session.
    assert len(opened) == 1


def test_list_filters_sorts_and_paginates(client, tokens, db_session):
    seed_vehicle(db_session, VIN_A, make_and_model="Lada 2109", engine_volume=1500)
    seed_vehicle(db_session, VIN_B, make_and_model="Volkswagen Golf", engine_volume=1800)
    seed_vehicle(db_session, "JTDBR32E520012345", make_and_model="Toyota Corolla", engine_volume=1600)

    resp = client.get(f"{BASE}?sortBy=engineVolume&sortOrder=DESC&limit=2", headers=tokens.employee)
    data = resp.get_json()
    assert resp.status_code == 200
    assert data["total"] == 3
    assert data["pages"] == 2
    assert [v["engineVolume"] for v in data["data"]] == [1800, 1600]

    resp = client.get(f"{BASE}?makeAndModel=golf", headers=tokens.employee)
    assert [v["vin"] for v in resp.get_json()["data"]] == [VIN_B]

    resp = client.get(f"{BASE}?engineVolumeFrom=1550&engineVolumeTo=1700", headers=tokens.employee)
    assert [v["engineVolume"] for v in resp.get_json()["data"]] == [1600]


def test_limit_above_maximum_is_rejected(client, tokens):
    resp = client.get(f"{BASE}?limit=500", headers=tokens.employee)

    assert resp.status_code == 400
    assert resp.get_json()["error"]["details"]["field"] == "limit"


def test_delete_vehicle(client, tokens, db_session):
    seed_vehicle(db_session, VIN_A)
    seed_vehicle(db_session, VIN_B)
    seed_document(db_session, vin=VIN_B)

    assert client.delete(f"{BASE}/{VIN_A}", headers=tokens.employee).status_code == 204
    assert client.get(f"{BASE}/{VIN_A}", headers=tokens.employee).status_code == 404
    assert client.delete(f"{BASE}/{VIN_B}", headers=tokens.employee).status_code == 409


def test_get_vehicle_includes_documents(client, tokens, db_session):
    seed_vehicle(db_session, VIN_A)
    seed_document(db_session, vin=VIN_A)

    resp = client.get(f"{BASE}/{VIN_A}", headers=tokens.employee)

    assert resp.status_code == 200
    assert [d["registrationNumber"] for d in resp.get_json()["registrationDocs"]] == ["A123BC77RUS"]
