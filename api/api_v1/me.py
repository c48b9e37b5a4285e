"""Citizen (vehicle owner) routes; everything is scoped to the caller's party."""

from __future__ import annotations

import re

from flask import Blueprint, jsonify, request

import db
from api.api_v1.crud import check_key, parse_body
from api.auth import current_user, protect_blueprint
from api.errors import NotFound
from api.schemas.common import PASSPORT_PATTERN, REG_NUMBER_PATTERN, SearchParams, VIN_PATTERN
from api.schemas.parties import LegalEntityPatch, NaturalPersonPatch
from api.schemas.registration_docs import RegistrationDocQuery
from api.schemas.staff import RegistrationOpDetail, RegistrationOpQuery, RegistrationOpRequest
from api.schemas.vehicles import VehicleCreate, VehicleOut, VehicleQuery
from api.services import (
    operations_service,
    parties_service,
    registration_docs_service,
    staff_service,
    vehicles_service,
)
from api.services.listing import parse_query, prepare_listing
from models.users import ROLE_OWNER

me_v1_bp = Blueprint("me_v1", __name__, url_prefix="/me")
protect_blueprint(me_v1_bp, ROLE_OWNER)


def _party_key() -> str:
    key = current_user().party_key
    if not key:
        raise NotFound("No party is linked to this account")
    return key


def _is_natural(key: str) -> bool:
    return re.fullmatch(PASSPORT_PATTERN, key) is not None


# --- documents ---


@me_v1_bp.get("/reg-docs")
def list_my_documents():
    params = parse_query(RegistrationDocQuery, request.args)
    listing = prepare_listing(
        params,
        sort_fields=registration_docs_service.REGISTRATION_DOC_SORT,
        default_sort=registration_docs_service.REGISTRATION_DOC_DEFAULT_SORT,
        tiebreaker=registration_docs_service.REGISTRATION_DOC_TIEBREAKER,
    )
    with db.session_scope() as session:
        return jsonify(registration_docs_service.list_documents_of_owner(session, _party_key(), params, listing))


@me_v1_bp.get("/reg-docs/<registration_number>")
def get_my_document(registration_number: str):
    check_key(registration_number, REG_NUMBER_PATTERN, "registrationNumber")
    with db.session_scope() as session:
        return jsonify(
            registration_docs_service.get_document(session, registration_number, party_key=_party_key())
        )


# --- vehicles ---


@me_v1_bp.get("/vehicles")
def list_my_vehicles():
    params = parse_query(VehicleQuery, request.args)
    listing = prepare_listing(
        params,
        sort_fields=vehicles_service.VEHICLE_SORT,
        default_sort=vehicles_service.VEHICLE_DEFAULT_SORT,
        tiebreaker=vehicles_service.VEHICLE_TIEBREAKER,
    )
    user = current_user()
    with db.session_scope() as session:
        return jsonify(
            vehicles_service.list_vehicles_of_owner(
                session,
                party_key=_party_key(),
                user_id=user.id,
                params=params,
                listing=listing,
            )
        )


@me_v1_bp.get("/vehicles/<vin>")
def get_my_vehicle(vin: str):
    check_key(vin, VIN_PATTERN, "vin")
    with db.session_scope() as session:
        return jsonify(
            vehicles_service.get_vehicle_of_owner(session, vin, party_key=_party_key(), user_id=current_user().id)
        )


@me_v1_bp.post("/vehicles")
def create_my_vehicle():
    payload = parse_body(VehicleCreate)
    with db.session_scope() as session:
        vehicle = vehicles_service.create_vehicle(session, payload)
        body = VehicleOut.serialize(vehicle)
    return jsonify(body), 201


# --- operation requests ---


@me_v1_bp.get("/reg-ops")
def list_my_operations():
    params = parse_query(RegistrationOpQuery, request.args)
    listing = prepare_listing(
        params,
        sort_fields=operations_service.REGISTRATION_OP_SORT,
        default_sort=operations_service.REGISTRATION_OP_DEFAULT_SORT,
        tiebreaker=operations_service.REGISTRATION_OP_TIEBREAKER,
    )
    with db.session_scope() as session:
        return jsonify(operations_service.list_operations_of_user(session, current_user().id, params, listing))


@me_v1_bp.post("/reg-ops")
def request_my_operation():
    payload = parse_body(RegistrationOpRequest)
    with db.session_scope() as session:
        op = operations_service.request_operation(session, payload, user_id=current_user().id)
        body = RegistrationOpDetail.serialize(op)
    return jsonify(body), 201


# --- departments (public fields) ---


@me_v1_bp.get("/departments")
def list_departments():
    params = parse_query(SearchParams, request.args)
    listing = prepare_listing(
        params,
        sort_fields=staff_service.DEPARTMENT_SORT,
        default_sort=staff_service.DEPARTMENT_DEFAULT_SORT,
    )
    with db.session_scope() as session:
        return jsonify(staff_service.list_departments(session, params, listing, public=True))


# --- profile ---


@me_v1_bp.get("/profile")
def get_profile():
    key = _party_key()
    with db.session_scope() as session:
        if _is_natural(key):
            return jsonify(parties_service.get_natural_person(session, key))
        return jsonify(parties_service.get_legal_entity(session, key))


@me_v1_bp.patch("/profile")
def patch_profile():
    """Update the caller's own party; an address change relocates their documents."""

    key = _party_key()
    if _is_natural(key):
        changes = parse_body(NaturalPersonPatch).changes()
        with db.session_scope() as session:
            parties_service.update_natural_person(session, key, changes)
            return jsonify(parties_service.get_natural_person(session, key))

    changes = parse_body(LegalEntityPatch).changes()
    with db.session_scope() as session:
        parties_service.update_legal_entity(session, key, changes)
        return jsonify(parties_service.get_legal_entity(session, key))
