from __future__ import annotations

from api.services import vehicles_service


def test_health(client):
    resp = client.get("/health")

    assert resp.status_code == 200
    data = resp.get_json()
    assert data["status"] == "ok"
    assert data["tables"] >= 10


def test_unknown_route_returns_json_envelope(client):
    resp = client.get("/api/v1/nowhere", headers={"X-Request-ID": "req-42"})

    assert resp.status_code == 404
    body = resp.get_json()
    assert body["ok"] is False
    assert body["data"] is None
    assert body["error"]["code"] == "not_found"
    assert body["meta"] == {"request_id": "req-42"}


def test_validation_error_envelope(client, tokens):
    resp = client.post("/api/v1/employee/vehicles", json={"vin": "short"}, headers=tokens.employee)

    assert resp.status_code == 400
    error = resp.get_json()["error"]
    assert error["code"] == "bad_request"
    assert error["message"].startswith("Invalid value for ")
    assert error["details"]["errors"]


def test_non_object_body_is_rejected(client, tokens):
    resp = client.post("/api/v1/employee/vehicles", json=["XTA21099043456789"], headers=tokens.employee)

    assert resp.status_code == 400
    assert resp.get_json()["error"]["code"] == "bad_request"


def test_auth_errors_use_envelope(client):
    resp = client.get("/api/v1/employee/vehicles")

    assert resp.status_code == 401
    assert resp.get_json()["error"]["code"] == "unauthorized"


def test_method_not_allowed(client, tokens):
    resp = client.delete("/api/v1/employee/owners", headers=tokens.employee)

    assert resp.status_code == 405
    assert resp.get_json()["error"]["code"] == "http_error"


def test_unhandled_error_is_internal(client, tokens, monkeypatch):
    def boom(*args, **kwargs):
        raise RuntimeError("disk on fire")

    monkeypatch.setattr(vehicles_service, "filter_vehicles", boom)

    resp = client.get("/api/v1/employee/vehicles", headers=tokens.employee)

    assert resp.status_code == 500
    body = resp.get_json()
    assert body["error"] == {"code": "internal", "message": "Internal server error", "details": None}
