"""Natural persons and legal entities ("parties").

Address changes go through `address_registry.relocate_party`; identity fields
go through the immutability policy.
"""

from __future__ import annotations

from typing import Any, Mapping

from sqlalchemy import or_
from sqlalchemy.orm import Session

from api.errors import Conflict, NotFound
from api.schemas.parties import (
    LegalEntityCreate,
    LegalEntityDetail,
    LegalEntityOut,
    LegalEntityQuery,
    NaturalPersonCreate,
    NaturalPersonDetail,
    NaturalPersonOut,
    NaturalPersonQuery,
    OwnerOut,
    OwnerQuery,
)
from api.services import address_registry
from api.services.immutability import (
    LEGAL_ENTITY,
    NATURAL_PERSON,
    check_mutable,
    has_dependent_documents,
)
from api.services.listing import Listing, contains, paginate
from logging_utils import get_logger
from models.legal_entities import LegalEntity
from models.natural_persons import NaturalPerson
from models.owners import Owner

logger = get_logger(__name__)

NATURAL_PERSON_SORT = {
    "lastName": NaturalPerson.last_name,
    "firstName": NaturalPerson.first_name,
    "passportData": NaturalPerson.passport_data,
    "address": NaturalPerson.address,
}
NATURAL_PERSON_DEFAULT_SORT = ("lastName", "ASC")

LEGAL_ENTITY_SORT = {
    "companyName": LegalEntity.company_name,
    "taxNumber": LegalEntity.tax_number,
    "address": LegalEntity.address,
}
LEGAL_ENTITY_DEFAULT_SORT = ("companyName", "ASC")

OWNER_SORT = {"id": Owner.id, "address": Owner.address}
OWNER_DEFAULT_SORT = ("address", "ASC")

_NATURAL_PERSON_FIELDS = ("last_name", "first_name", "patronymic")
_LEGAL_ENTITY_FIELDS = ("company_name",)


def find_party(session: Session, key: str) -> NaturalPerson | LegalEntity | None:
    """Resolve a passport or tax number to its party row."""

    return session.get(NaturalPerson, key) or session.get(LegalEntity, key)


def _update_party(
    session: Session,
    *,
    entity_type: str,
    party: NaturalPerson | LegalEntity,
    key: str,
    changes: Mapping[str, Any],
    own_fields: tuple[str, ...],
) -> None:
    check_mutable(session, entity_type, key, party, changes)
    address_registry.relocate_party(
        session,
        party=party,
        key=key,
        new_address=changes.get("address"),
    )
    for field in own_fields:
        if field in changes:
            setattr(party, field, changes[field])
    session.flush()


def _delete_party(session: Session, *, entity_type: str, party: Any, key: str, label: str) -> None:
    if has_dependent_documents(session, entity_type, key):
        raise Conflict(f"Cannot delete {label} with registration documents")
    address = party.address
    session.delete(party)
    address_registry.release_address(session, address)


# --- natural persons ---


def get_natural_person_row(session: Session, passport_data: str) -> NaturalPerson:
    person = session.get(NaturalPerson, passport_data)
    if person is None:
        raise NotFound("Natural person not found", field="passportData")
    return person


def list_natural_persons(session: Session, params: NaturalPersonQuery, listing: Listing) -> dict:
    query = session.query(NaturalPerson)
    if params.search:
        query = query.filter(
            or_(
                contains(NaturalPerson.last_name, params.search),
                contains(NaturalPerson.first_name, params.search),
                contains(NaturalPerson.patronymic, params.search),
                contains(NaturalPerson.passport_data, params.search),
            )
        )
    if params.address:
        query = query.filter(contains(NaturalPerson.address, params.address))
    return paginate(query, listing, NaturalPersonOut.serialize)


def get_natural_person(session: Session, passport_data: str) -> dict:
    return NaturalPersonDetail.serialize(get_natural_person_row(session, passport_data))


def create_natural_person(session: Session, payload: NaturalPersonCreate) -> NaturalPerson:
    if find_party(session, payload.passport_data) is not None:
        raise Conflict("Natural person with this passport already exists", field="passportData")

    address_registry.ensure_owner(session, payload.address)
    person = NaturalPerson(**payload.model_dump())
    session.add(person)
    session.flush()
    logger.info("Created natural person passport=%s", person.passport_data)
    return person


def update_natural_person(session: Session, passport_data: str, changes: Mapping[str, Any]) -> NaturalPerson:
    person = get_natural_person_row(session, passport_data)
    _update_party(
        session,
        entity_type=NATURAL_PERSON,
        party=person,
        key=passport_data,
        changes=changes,
        own_fields=_NATURAL_PERSON_FIELDS,
    )
    logger.info("Updated natural person passport=%s fields=%s", passport_data, sorted(changes))
    return person


def delete_natural_person(session: Session, passport_data: str) -> None:
    person = get_natural_person_row(session, passport_data)
    _delete_party(session, entity_type=NATURAL_PERSON, party=person, key=passport_data, label="natural person")
    logger.info("Deleted natural person passport=%s", passport_data)


# --- legal entities ---


def get_legal_entity_row(session: Session, tax_number: str) -> LegalEntity:
    entity = session.get(LegalEntity, tax_number)
    if entity is None:
        raise NotFound("Legal entity not found", field="taxNumber")
    return entity


def list_legal_entities(session: Session, params: LegalEntityQuery, listing: Listing) -> dict:
    query = session.query(LegalEntity)
    if params.search:
        query = query.filter(
            or_(
                contains(LegalEntity.company_name, params.search),
                contains(LegalEntity.tax_number, params.search),
            )
        )
    if params.address:
        query = query.filter(contains(LegalEntity.address, params.address))
    return paginate(query, listing, LegalEntityOut.serialize)


def get_legal_entity(session: Session, tax_number: str) -> dict:
    return LegalEntityDetail.serialize(get_legal_entity_row(session, tax_number))


def create_legal_entity(session: Session, payload: LegalEntityCreate) -> LegalEntity:
    if find_party(session, payload.tax_number) is not None:
        raise Conflict("Legal entity with this tax number already exists", field="taxNumber")

    address_registry.ensure_owner(session, payload.address)
    entity = LegalEntity(**payload.model_dump())
    session.add(entity)
    session.flush()
    logger.info("Created legal entity tax_number=%s", entity.tax_number)
    return entity


def update_legal_entity(session: Session, tax_number: str, changes: Mapping[str, Any]) -> LegalEntity:
    entity = get_legal_entity_row(session, tax_number)
    _update_party(
        session,
        entity_type=LEGAL_ENTITY,
        party=entity,
        key=tax_number,
        changes=changes,
        own_fields=_LEGAL_ENTITY_FIELDS,
    )
    logger.info("Updated legal entity tax_number=%s fields=%s", tax_number, sorted(changes))
    return entity


def delete_legal_entity(session: Session, tax_number: str) -> None:
    entity = get_legal_entity_row(session, tax_number)
    _delete_party(session, entity_type=LEGAL_ENTITY, party=entity, key=tax_number, label="legal entity")
    logger.info("Deleted legal entity tax_number=%s", tax_number)


# --- owner registry (read-only) ---


def list_owners(session: Session, params: OwnerQuery, listing: Listing) -> dict:
    query = session.query(Owner)
    if params.search:
        query = query.filter(contains(Owner.address, params.search))
    return paginate(query, listing, OwnerOut.serialize)
