from __future__ import annotations

from typing import Any, Mapping

from sqlalchemy import or_
from sqlalchemy.orm import Session

from api.errors import BadRequest, Conflict, NotFound
from api.schemas.registration_docs import (
    RegistrationDocCreate,
    RegistrationDocDetail,
    RegistrationDocOut,
    RegistrationDocQuery,
)
from api.services import address_registry
from api.services.immutability import REGISTRATION_DOC, check_mutable
from api.services.listing import Listing, contains, paginate
from api.services.parties_service import find_party
from logging_utils import get_logger
from models.registration_docs import RegistrationDoc
from models.transport_vehicles import TransportVehicle

logger = get_logger(__name__)

REGISTRATION_DOC_SORT = {
    "registrationDate": RegistrationDoc.registration_date,
    "registrationNumber": RegistrationDoc.registration_number,
    "vin": RegistrationDoc.vin,
}
REGISTRATION_DOC_DEFAULT_SORT = ("registrationDate", "DESC")
REGISTRATION_DOC_TIEBREAKER = (RegistrationDoc.registration_number.asc(),)

_PLAIN_FIELDS = ("pts", "sts", "registration_date")


def _require_vehicle(session: Session, vin: str) -> None:
    if session.get(TransportVehicle, vin) is None:
        raise BadRequest("Vehicle does not exist", field="vin")


def _require_owner(session: Session, key: str):
    party = find_party(session, key)
    if party is None:
        raise BadRequest("Document owner does not exist", field="documentOwner")
    return party


def get_document_row(session: Session, registration_number: str) -> RegistrationDoc:
    doc = session.get(RegistrationDoc, registration_number)
    if doc is None:
        raise NotFound("Registration document not found", field="registrationNumber")
    return doc


def _filtered(session: Session, params: RegistrationDocQuery):
    query = session.query(RegistrationDoc)
    if params.search:
        query = query.filter(
            or_(
                contains(RegistrationDoc.registration_number, params.search),
                contains(RegistrationDoc.address, params.search),
                contains(RegistrationDoc.pts, params.search),
                contains(RegistrationDoc.sts, params.search),
            )
        )
    if params.vin:
        query = query.filter(RegistrationDoc.vin == params.vin)
    if params.document_owner:
        query = query.filter(RegistrationDoc.document_owner == params.document_owner)
    if params.start_date:
        query = query.filter(RegistrationDoc.registration_date >= params.start_date)
    if params.end_date:
        query = query.filter(RegistrationDoc.registration_date <= params.end_date)
    return query


def list_documents(session: Session, params: RegistrationDocQuery, listing: Listing) -> dict:
    return paginate(_filtered(session, params), listing, RegistrationDocOut.serialize)


def list_documents_of_owner(
    session: Session,
    party_key: str,
    params: RegistrationDocQuery,
    listing: Listing,
) -> dict:
    query = _filtered(session, params).filter(RegistrationDoc.document_owner == party_key)
    return paginate(query, listing, RegistrationDocOut.serialize)


def get_document(session: Session, registration_number: str, *, party_key: str | None = None) -> dict:
    """Detail view; with `party_key`, documents of other owners are not found."""

    doc = get_document_row(session, registration_number)
    if party_key is not None and doc.document_owner != party_key:
        raise NotFound("Registration document not found", field="registrationNumber")
    return RegistrationDocDetail.serialize(doc)


def create_document(session: Session, payload: RegistrationDocCreate) -> RegistrationDoc:
    if session.get(RegistrationDoc, payload.registration_number) is not None:
        raise Conflict(
            "Registration document with this number already exists",
            field="registrationNumber",
        )
    _require_vehicle(session, payload.vin)
    owner = _require_owner(session, payload.document_owner)

    address = payload.address or owner.address
    address_registry.ensure_owner(session, address)

    doc = RegistrationDoc(**payload.model_dump(exclude={"address"}), address=address)
    session.add(doc)
    session.flush()
    logger.info(
        "Created registration document number=%s vin=%s owner=%s",
        doc.registration_number,
        doc.vin,
        doc.document_owner,
    )
    return doc


def update_document(session: Session, registration_number: str, changes: Mapping[str, Any]) -> RegistrationDoc:
    doc = get_document_row(session, registration_number)
    check_mutable(session, REGISTRATION_DOC, registration_number, doc, changes)

    if "vin" in changes and changes["vin"] != doc.vin:
        _require_vehicle(session, changes["vin"])
        doc.vin = changes["vin"]
    if "document_owner" in changes and changes["document_owner"] != doc.document_owner:
        _require_owner(session, changes["document_owner"])
        doc.document_owner = changes["document_owner"]

    for field in _PLAIN_FIELDS:
        if field in changes:
            setattr(doc, field, changes[field])

    if changes.get("address") is not None:
        address_registry.swap_address(session, doc, changes["address"])

    session.flush()
    logger.info("Updated registration document number=%s fields=%s", registration_number, sorted(changes))
    return doc


def delete_document(session: Session, registration_number: str) -> None:
    doc = get_document_row(session, registration_number)
    address = doc.address
    session.delete(doc)
    address_registry.release_address(session, address)
    logger.info("Deleted registration document number=%s", registration_number)
