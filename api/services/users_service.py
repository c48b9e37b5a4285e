"""User accounts: admin management, self-registration and login."""

from __future__ import annotations

from typing import Any, Mapping

from sqlalchemy.orm import Session

from api.errors import BadRequest, Conflict, NotFound, Unauthorized
from api.schemas.parties import LegalEntityCreate, NaturalPersonCreate
from api.schemas.users import (
    EmployeeRegistration,
    LegalOwnerRegistration,
    NaturalOwnerRegistration,
    UserCreate,
    UserOut,
    UserQuery,
)
from api.services import parties_service
from api.services.listing import Listing, contains, paginate
from logging_utils import get_logger
from models.employees import Employee
from models.users import ROLE_EMPLOYEE, ROLE_OWNER, User
from utils.security import hash_password, verify_password

logger = get_logger(__name__)

USER_SORT = {
    "id": User.id,
    "email": User.email,
    "role": User.role,
    "createdAt": User.created_at,
}
USER_DEFAULT_SORT = ("id", "ASC")

_PLAIN_FIELDS = ("role", "is_active")


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def get_user_row(session: Session, user_id: int) -> User:
    user = session.get(User, user_id)
    if user is None:
        raise NotFound("User not found", field="id")
    return user


def find_user_by_email(session: Session, email: str) -> User | None:
    return session.query(User).filter(User.email == normalize_email(email)).first()


def _check_email_free(session: Session, email: str, *, exclude_id: int | None = None) -> None:
    query = session.query(User.id).filter(User.email == normalize_email(email))
    if exclude_id is not None:
        query = query.filter(User.id != exclude_id)
    if query.first() is not None:
        raise Conflict("User with this email already exists", field="email")


def _check_party_link(session: Session, party_key: str, *, exclude_id: int | None = None) -> None:
    if parties_service.find_party(session, party_key) is None:
        raise BadRequest("Party does not exist", field="partyKey")
    query = session.query(User.id).filter(User.party_key == party_key)
    if exclude_id is not None:
        query = query.filter(User.id != exclude_id)
    if query.first() is not None:
        raise Conflict("Party already has an account", field="partyKey")


def _check_badge_link(session: Session, badge_number: str, *, exclude_id: int | None = None) -> None:
    if session.get(Employee, badge_number) is None:
        raise BadRequest("Employee does not exist", field="badgeNumber")
    query = session.query(User.id).filter(User.badge_number == badge_number)
    if exclude_id is not None:
        query = query.filter(User.id != exclude_id)
    if query.first() is not None:
        raise Conflict("Employee already has an account", field="badgeNumber")


def _new_user(session: Session, *, email: str, password: str, role: str, **links: Any) -> User:
    user = User(
        email=normalize_email(email),
        password_hash=hash_password(password),
        role=role,
        **links,
    )
    session.add(user)
    session.flush()
    logger.info("Created user id=%s role=%s", user.id, user.role)
    return user


# --- admin management ---


def list_users(session: Session, params: UserQuery, listing: Listing) -> dict:
    query = session.query(User)
    if params.search:
        query = query.filter(contains(User.email, params.search))
    if params.role:
        query = query.filter(User.role == params.role)
    return paginate(query, listing, UserOut.serialize)


def get_user(session: Session, user_id: int) -> dict:
    return UserOut.serialize(get_user_row(session, user_id))


def create_user(session: Session, payload: UserCreate) -> User:
    _check_email_free(session, payload.email)
    links: dict[str, Any] = {"is_active": payload.is_active}
    if payload.role == ROLE_OWNER:
        _check_party_link(session, payload.party_key)
        links["party_key"] = payload.party_key
    elif payload.role == ROLE_EMPLOYEE:
        _check_badge_link(session, payload.badge_number)
        links["badge_number"] = payload.badge_number
    return _new_user(session, email=payload.email, password=payload.password, role=payload.role, **links)


def update_user(session: Session, user_id: int, changes: Mapping[str, Any]) -> User:
    user = get_user_row(session, user_id)

    if "email" in changes:
        _check_email_free(session, changes["email"], exclude_id=user_id)
        user.email = normalize_email(changes["email"])
    if "password" in changes:
        user.password_hash = hash_password(changes["password"])
    if changes.get("party_key") is not None and changes["party_key"] != user.party_key:
        _check_party_link(session, changes["party_key"], exclude_id=user_id)
        user.party_key = changes["party_key"]
    if changes.get("badge_number") is not None and changes["badge_number"] != user.badge_number:
        _check_badge_link(session, changes["badge_number"], exclude_id=user_id)
        user.badge_number = changes["badge_number"]
    for field in _PLAIN_FIELDS:
        if field in changes:
            setattr(user, field, changes[field])

    if user.role == ROLE_OWNER and not user.party_key:
        raise BadRequest("partyKey is required for owner accounts", field="partyKey")
    if user.role == ROLE_EMPLOYEE and not user.badge_number:
        raise BadRequest("badgeNumber is required for employee accounts", field="badgeNumber")

    session.flush()
    # Field names only; never the values (passwords).
    logger.info("Updated user id=%s fields=%s", user_id, sorted(changes))
    return user


def delete_user(session: Session, user_id: int) -> None:
    user = get_user_row(session, user_id)
    session.delete(user)
    session.flush()
    logger.info("Deleted user id=%s", user_id)


# --- self-registration / login ---


def _claim_or_create_party(session: Session, key: str, create) -> None:
    """Create the party, or link to an existing one nobody has claimed yet."""

    if parties_service.find_party(session, key) is None:
        create()
        return
    if session.query(User.id).filter(User.party_key == key).first() is not None:
        raise Conflict("Party already has an account", field="partyKey")
    logger.info("Registration linked to existing party key=%s", key)


def register_natural_owner(session: Session, payload: NaturalOwnerRegistration) -> User:
    _check_email_free(session, payload.email)
    person = NaturalPersonCreate.model_validate(payload.model_dump(exclude={"email", "password"}))
    _claim_or_create_party(
        session,
        person.passport_data,
        lambda: parties_service.create_natural_person(session, person),
    )
    return _new_user(
        session,
        email=payload.email,
        password=payload.password,
        role=ROLE_OWNER,
        party_key=person.passport_data,
    )


def register_legal_owner(session: Session, payload: LegalOwnerRegistration) -> User:
    _check_email_free(session, payload.email)
    entity = LegalEntityCreate.model_validate(payload.model_dump(exclude={"email", "password"}))
    _claim_or_create_party(
        session,
        entity.tax_number,
        lambda: parties_service.create_legal_entity(session, entity),
    )
    return _new_user(
        session,
        email=payload.email,
        password=payload.password,
        role=ROLE_OWNER,
        party_key=entity.tax_number,
    )


def register_employee(session: Session, payload: EmployeeRegistration) -> User:
    _check_email_free(session, payload.email)
    _check_badge_link(session, payload.badge_number)
    return _new_user(
        session,
        email=payload.email,
        password=payload.password,
        role=ROLE_EMPLOYEE,
        badge_number=payload.badge_number,
    )


def authenticate(session: Session, email: str, password: str) -> User:
    user = find_user_by_email(session, email)
    if user is None or not verify_password(password, user.password_hash):
        logger.info("Login failed")
        raise Unauthorized("Invalid email or password")
    if not user.is_active:
        raise Unauthorized("Account is disabled")
    logger.info("Login user id=%s role=%s", user.id, user.role)
    return user
