"""Registration operations and the employee work log."""

from __future__ import annotations

from datetime import date
from typing import Any, Mapping

from sqlalchemy.orm import Session

from api.errors import BadRequest, Conflict, NotFound
from api.schemas.staff import (
    RegistrationOpCreate,
    RegistrationOpDetail,
    RegistrationOpOut,
    RegistrationOpQuery,
    RegistrationOpRequest,
    WorkCreate,
    WorkOut,
    WorkQuery,
)
from api.services.listing import Listing, paginate
from logging_utils import get_logger
from models.departments import RegDepartment
from models.employees import Employee
from models.registration_docs import RegistrationDoc
from models.registration_ops import RegistrationOp
from models.transport_vehicles import TransportVehicle
from models.works import Work
from utils.time_utils import utc_today

logger = get_logger(__name__)

REGISTRATION_OP_SORT = {
    "operationDate": RegistrationOp.operation_date,
    "operationId": RegistrationOp.operation_id,
    "operationType": RegistrationOp.operation_type,
}
REGISTRATION_OP_DEFAULT_SORT = ("operationDate", "DESC")
REGISTRATION_OP_TIEBREAKER = (RegistrationOp.operation_id.desc(),)

WORK_SORT = {
    "workDate": Work.work_date,
    "badgeNumber": Work.badge_number,
    "operationId": Work.operation_id,
}
WORK_DEFAULT_SORT = ("workDate", "DESC")
WORK_TIEBREAKER = (Work.id.desc(),)

_OP_PLAIN_FIELDS = ("operation_type", "operation_base", "operation_date")

# (field, model, public name, message) for foreign references of an operation.
_OP_REFERENCES = (
    ("vin", TransportVehicle, "vin", "Vehicle does not exist"),
    ("unit_code", RegDepartment, "unitCode", "Department does not exist"),
    ("badge_number", Employee, "badgeNumber", "Employee does not exist"),
    ("registration_number", RegistrationDoc, "registrationNumber", "Registration document does not exist"),
)


def _check_references(session: Session, values: Mapping[str, Any]) -> None:
    for field, model, public, message in _OP_REFERENCES:
        value = values.get(field)
        if value is not None and session.get(model, value) is None:
            raise BadRequest(message, field=public)


# --- registration operations ---


def get_operation_row(session: Session, operation_id: int) -> RegistrationOp:
    op = session.get(RegistrationOp, operation_id)
    if op is None:
        raise NotFound("Registration operation not found", field="operationId")
    return op


def _filtered_operations(session: Session, params: RegistrationOpQuery):
    query = session.query(RegistrationOp)
    if params.vin:
        query = query.filter(RegistrationOp.vin == params.vin)
    if params.operation_type:
        query = query.filter(RegistrationOp.operation_type == params.operation_type)
    if params.badge_number:
        query = query.filter(RegistrationOp.badge_number == params.badge_number)
    if params.start_date:
        query = query.filter(RegistrationOp.operation_date >= params.start_date)
    if params.end_date:
        query = query.filter(RegistrationOp.operation_date <= params.end_date)
    return query


def list_operations(session: Session, params: RegistrationOpQuery, listing: Listing) -> dict:
    return paginate(_filtered_operations(session, params), listing, RegistrationOpOut.serialize)


def list_operations_of_user(session: Session, user_id: int, params: RegistrationOpQuery, listing: Listing) -> dict:
    query = _filtered_operations(session, params).filter(RegistrationOp.requested_by == user_id)
    return paginate(query, listing, RegistrationOpDetail.serialize)


def get_operation(session: Session, operation_id: int) -> dict:
    return RegistrationOpDetail.serialize(get_operation_row(session, operation_id))


def create_operation(session: Session, payload: RegistrationOpCreate) -> RegistrationOp:
    values = payload.model_dump()
    _check_references(session, values)

    op = RegistrationOp(**values)
    session.add(op)
    session.flush()
    logger.info(
        "Created registration operation id=%s type=%s vin=%s badge=%s",
        op.operation_id,
        op.operation_type,
        op.vin,
        op.badge_number,
    )
    return op


def request_operation(session: Session, payload: RegistrationOpRequest, *, user_id: int) -> RegistrationOp:
    """Citizen request: stored unassigned, dated today."""

    _check_references(session, {"vin": payload.vin, "unit_code": payload.unit_code})

    op = RegistrationOp(
        vin=payload.vin,
        unit_code=payload.unit_code,
        operation_type=payload.operation_type,
        operation_base=payload.purpose,
        operation_date=utc_today(),
        badge_number=None,
        requested_by=user_id,
    )
    session.add(op)
    session.flush()
    logger.info("Citizen requested operation id=%s type=%s user_id=%s", op.operation_id, op.operation_type, user_id)
    return op


def update_operation(session: Session, operation_id: int, changes: Mapping[str, Any]) -> RegistrationOp:
    op = get_operation_row(session, operation_id)
    _check_references(session, changes)

    for field in ("vin", "unit_code", "badge_number", "registration_number", *_OP_PLAIN_FIELDS):
        if field in changes:
            setattr(op, field, changes[field])

    session.flush()
    logger.info("Updated registration operation id=%s fields=%s", operation_id, sorted(changes))
    return op


def delete_operation(session: Session, operation_id: int) -> None:
    op = get_operation_row(session, operation_id)
    session.query(Work).filter(Work.operation_id == operation_id).delete(synchronize_session="fetch")
    session.delete(op)
    session.flush()
    logger.info("Deleted registration operation id=%s", operation_id)


# --- work log ---


def get_work_row(session: Session, work_id: int) -> Work:
    work = session.get(Work, work_id)
    if work is None:
        raise NotFound("Work entry not found", field="id")
    return work


def _validate_work(session: Session, badge_number: str, operation_id: int, work_date: date, *, exclude_id: int | None = None) -> None:
    if work_date > utc_today():
        raise BadRequest("workDate must not be in the future", field="workDate")
    if session.get(Employee, badge_number) is None:
        raise BadRequest("Employee does not exist", field="badgeNumber")
    if session.get(RegistrationOp, operation_id) is None:
        raise BadRequest("Registration operation does not exist", field="operationId")

    duplicate = session.query(Work.id).filter(
        Work.badge_number == badge_number,
        Work.operation_id == operation_id,
        Work.work_date == work_date,
    )
    if exclude_id is not None:
        duplicate = duplicate.filter(Work.id != exclude_id)
    if duplicate.first() is not None:
        raise Conflict("Work entry for this employee, operation and date already exists")


def list_works(session: Session, params: WorkQuery, listing: Listing) -> dict:
    query = session.query(Work)
    if params.badge_number:
        query = query.filter(Work.badge_number == params.badge_number)
    if params.operation_id is not None:
        query = query.filter(Work.operation_id == params.operation_id)
    if params.start_date:
        query = query.filter(Work.work_date >= params.start_date)
    if params.end_date:
        query = query.filter(Work.work_date <= params.end_date)
    return paginate(query, listing, WorkOut.serialize)


def get_work(session: Session, work_id: int) -> dict:
    return WorkOut.serialize(get_work_row(session, work_id))


def create_work(session: Session, payload: WorkCreate) -> Work:
    _validate_work(session, payload.badge_number, payload.operation_id, payload.work_date)

    work = Work(**payload.model_dump())
    session.add(work)
    session.flush()
    logger.info("Logged work id=%s badge=%s operation_id=%s", work.id, work.badge_number, work.operation_id)
    return work


def update_work(session: Session, work_id: int, changes: Mapping[str, Any]) -> Work:
    work = get_work_row(session, work_id)
    merged = {
        "badge_number": changes.get("badge_number", work.badge_number),
        "operation_id": changes.get("operation_id", work.operation_id),
        "work_date": changes.get("work_date", work.work_date),
    }
    _validate_work(session, exclude_id=work_id, **merged)

    for field in ("badge_number", "operation_id", "purpose", "work_date"):
        if field in changes:
            setattr(work, field, changes[field])

    session.flush()
    logger.info("Updated work id=%s fields=%s", work_id, sorted(changes))
    return work


def delete_work(session: Session, work_id: int) -> None:
    work = get_work_row(session, work_id)
    session.delete(work)
    session.flush()
    logger.info("Deleted work id=%s", work_id)
