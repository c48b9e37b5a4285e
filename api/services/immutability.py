"""Immutable-field policy.

One table for every resource: `IMMUTABLE_FIELDS[entity_type][field]` is the
condition under which `field` may not change.

- ``ALWAYS``: never (natural keys).
- ``ONCE_DOCUMENTED``: not after a registration document references the
  entity (identity data printed on issued documents).
"""

from __future__ import annotations

from typing import Any, Callable, Mapping

from pydantic.alias_generators import to_camel
from sqlalchemy import exists
from sqlalchemy.orm import Session

from api.errors import BadRequest
from models.registration_docs import RegistrationDoc

ALWAYS = "always"
ONCE_DOCUMENTED = "once_documented"

NATURAL_PERSON = "natural_person"
LEGAL_ENTITY = "legal_entity"
VEHICLE = "vehicle"
REGISTRATION_DOC = "registration_doc"
EMPLOYEE = "employee"
DEPARTMENT = "department"

IMMUTABLE_FIELDS: dict[str, dict[str, str]] = {
    NATURAL_PERSON: {
        "passport_data": ALWAYS,
        "last_name": ONCE_DOCUMENTED,
        "first_name": ONCE_DOCUMENTED,
        "patronymic": ONCE_DOCUMENTED,
    },
    LEGAL_ENTITY: {
        "tax_number": ALWAYS,
        "company_name": ONCE_DOCUMENTED,
    },
    VEHICLE: {
        "vin": ALWAYS,
        "chassis_number": ONCE_DOCUMENTED,
        "body_number": ONCE_DOCUMENTED,
    },
    REGISTRATION_DOC: {
        "registration_number": ALWAYS,
    },
    EMPLOYEE: {
        "badge_number": ALWAYS,
    },
    DEPARTMENT: {
        "unit_code": ALWAYS,
    },
}

_ENTITY_LABELS = {
    NATURAL_PERSON: "natural person",
    LEGAL_ENTITY: "legal entity",
    VEHICLE: "vehicle",
    REGISTRATION_DOC: "registration document",
    EMPLOYEE: "employee",
    DEPARTMENT: "department",
}


def _documents_for_party(key: str):
    return RegistrationDoc.document_owner == key


def _documents_for_vehicle(key: str):
    return RegistrationDoc.vin == key


# How "a dependent registration document exists" is expressed per entity type.
_DOCUMENT_LINKS: dict[str, Callable[[str], Any]] = {
    NATURAL_PERSON: _documents_for_party,
    LEGAL_ENTITY: _documents_for_party,
    VEHICLE: _documents_for_vehicle,
}


def has_dependent_documents(session: Session, entity_type: str, key: str) -> bool:
    link = _DOCUMENT_LINKS.get(entity_type)
    if link is None:
        return False
    return bool(session.query(exists().where(link(key))).scalar())


def check_mutable(
    session: Session,
    entity_type: str,
    key: str,
    current: Any,
    changes: Mapping[str, Any],
) -> None:
    """Raise BadRequest if `changes` touches a field the policy freezes.

    `current` is the ORM row; only fields whose value actually differs count.
    The document lookup runs at most once and only when needed.
    """

    policy = IMMUTABLE_FIELDS.get(entity_type, {})
    documented: bool | None = None
    label = _ENTITY_LABELS.get(entity_type, entity_type)

    for field, condition in policy.items():
        if field not in changes or changes[field] == getattr(current, field):
            continue

        public = to_camel(field)
        if condition == ALWAYS:
            raise BadRequest(f"Cannot change {public}", field=public)

        if condition == ONCE_DOCUMENTED:
            if documented is None:
                documented = has_dependent_documents(session, entity_type, key)
            if documented:
                raise BadRequest(
                    f"Cannot change {public} for {label} with registration documents",
                    field=public,
                )
