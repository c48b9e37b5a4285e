from __future__ import annotations

from flask import Blueprint, jsonify

import db
from api.api_v1.crud import parse_body
from api.auth import current_user, require_roles
from api.schemas.users import (
    EmployeeRegistration,
    LegalOwnerRegistration,
    LoginRequest,
    NaturalOwnerRegistration,
    TokenResponse,
    UserOut,
)
from api.services import users_service
from models.users import User
from utils.security import build_access_token

auth_v1_bp = Blueprint("auth_v1", __name__, url_prefix="/auth")


def _token_body(user: User) -> dict:
    token = build_access_token(user_id=user.id, role=user.role)
    return TokenResponse(access_token=token, user=UserOut.model_validate(user)).dump()


def _register(payload, register_fn):
    with db.session_scope() as session:
        user = register_fn(session, payload)
        body = _token_body(user)
    return jsonify(body), 201


@auth_v1_bp.post("/register/natural")
def register_natural():
    return _register(parse_body(NaturalOwnerRegistration), users_service.register_natural_owner)


@auth_v1_bp.post("/register/legal")
def register_legal():
    return _register(parse_body(LegalOwnerRegistration), users_service.register_legal_owner)


@auth_v1_bp.post("/register/employee")
def register_employee():
    return _register(parse_body(EmployeeRegistration), users_service.register_employee)


@auth_v1_bp.post("/login")
def login():
    payload = parse_body(LoginRequest)
    with db.session_scope() as session:
        user = users_service.authenticate(session, payload.email, payload.password)
        body = _token_body(user)
    return jsonify(body)


@auth_v1_bp.get("/me")
@require_roles()
def me():
    with db.session_scope() as session:
        return jsonify(users_service.get_user(session, current_user().id))
