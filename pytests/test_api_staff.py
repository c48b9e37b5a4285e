from __future__ import annotations

from models.employees import Employee
from pytests.common import seed_department

EMPLOYEES = "/api/v1/admin/employees"
DEPARTMENTS = "/api/v1/admin/departments"


def _employee_body(**overrides):
    body = {
        "badgeNumber": "CD-67890",
        "unitCode": "MOS-01",
        "lastName": "Smirnov",
        "firstName": "Oleg",
        "patronymic": "Olegovich",
        "rank": "Captain",
    }
    body.update(overrides)
    return body


def _department_body(**overrides):
    body = {
        "unitCode": "SPB-02",
        "name": "Saint Petersburg unit 2",
        "address": "Saint Petersburg, Nevsky pr. 20",
        "workingHours": "Mon-Sat 8:00-20:00",
        "phoneNumber": "+78121234567",
        "email": "spb02@gibdd.example",
    }
    body.update(overrides)
    return body


def test_duplicate_badge_conflicts_and_writes_nothing(client, tokens, db_session):
    # AB-12345 is seeded by the tokens fixture.
    resp = client.post(
        EMPLOYEES,
        json=_employee_body(badgeNumber="AB-12345", lastName="Other"),
        headers=tokens.admin,
    )

    assert resp.status_code == 409
    assert resp.get_json()["error"]["details"]["field"] == "badgeNumber"
    db_session.rollback()
    assert db_session.query(Employee).count() == 1
    assert db_session.get(Employee, "AB-12345").last_name == "Petrov"


def test_create_employee_requires_existing_department(client, tokens):
    resp = client.post(EMPLOYEES, json=_employee_body(unitCode="NOPE-99"), headers=tokens.admin)

    assert resp.status_code == 400
    assert resp.get_json()["error"]["details"]["field"] == "unitCode"


def test_employee_crud(client, tokens):
    resp = client.post(EMPLOYEES, json=_employee_body(), headers=tokens.admin)
    assert resp.status_code == 201
    assert resp.get_json()["badgeNumber"] == "CD-67890"

    resp = client.patch(f"{EMPLOYEES}/CD-67890", json={"rank": "Major"}, headers=tokens.admin)
    assert resp.status_code == 200
    assert resp.get_json()["rank"] == "Major"

    resp = client.patch(f"{EMPLOYEES}/CD-67890", json={"badgeNumber": "EF-11111"}, headers=tokens.admin)
    assert resp.status_code == 400

    resp = client.get(f"{EMPLOYEES}?unitCode=MOS-01&sortBy=badgeNumber", headers=tokens.admin)
    assert [e["badgeNumber"] for e in resp.get_json()["data"]] == ["AB-12345", "CD-67890"]

    assert client.delete(f"{EMPLOYEES}/CD-67890", headers=tokens.admin).status_code == 204
    assert client.get(f"{EMPLOYEES}/CD-67890", headers=tokens.admin).status_code == 404


def test_employee_routes_require_admin(client, tokens):
    assert client.get(EMPLOYEES, headers=tokens.employee).status_code == 403
    assert client.get(EMPLOYEES, headers=tokens.owner).status_code == 403
    assert client.get(EMPLOYEES).status_code == 401


def test_department_crud(client, tokens):
    resp = client.post(DEPARTMENTS, json=_department_body(), headers=tokens.admin)
    assert resp.status_code == 201

    resp = client.post(DEPARTMENTS, json=_department_body(unitCode="SPB-03"), headers=tokens.admin)
    assert resp.status_code == 409
    assert resp.get_json()["error"]["details"]["field"] == "email"

    resp = client.put(
        f"{DEPARTMENTS}/SPB-02",
        json=_department_body(name="Saint Petersburg unit 2 (central)"),
        headers=tokens.admin,
    )
    assert resp.status_code == 200
    assert resp.get_json()["name"] == "Saint Petersburg unit 2 (central)"

    resp = client.get(f"{DEPARTMENTS}?search=petersburg", headers=tokens.admin)
    assert [d["unitCode"] for d in resp.get_json()["data"]] == ["SPB-02"]

    assert client.delete(f"{DEPARTMENTS}/SPB-02", headers=tokens.admin).status_code == 204


def test_department_with_employees_cannot_be_deleted(client, tokens):
    resp = client.delete(f"{DEPARTMENTS}/MOS-01", headers=tokens.admin)

    assert resp.status_code == 409


def test_department_email_change_checks_uniqueness(client, tokens, db_session):
    seed_department(db_session, unit_code="KZN-05", email="kzn05@gibdd.example")

    resp = client.patch(f"{DEPARTMENTS}/KZN-05", json={"email": "mos01@gibdd.example"}, headers=tokens.admin)

    assert resp.status_code == 409
