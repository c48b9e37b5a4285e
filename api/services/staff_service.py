"""Departments and employees."""

from __future__ import annotations

from typing import Any, Mapping

from sqlalchemy import or_
from sqlalchemy.orm import Session

from api.errors import BadRequest, Conflict, NotFound
from api.schemas.staff import (
    DepartmentCreate,
    DepartmentOut,
    DepartmentPublic,
    EmployeeCreate,
    EmployeeOut,
    EmployeeQuery,
)
from api.schemas.common import SearchParams
from api.services.immutability import DEPARTMENT, EMPLOYEE, check_mutable
from api.services.listing import Listing, contains, paginate
from logging_utils import get_logger
from models.departments import RegDepartment
from models.employees import Employee
from models.registration_ops import RegistrationOp

logger = get_logger(__name__)

DEPARTMENT_SORT = {
    "unitCode": RegDepartment.unit_code,
    "name": RegDepartment.name,
}
DEPARTMENT_DEFAULT_SORT = ("name", "ASC")

EMPLOYEE_SORT = {
    "badgeNumber": Employee.badge_number,
    "lastName": Employee.last_name,
    "rank": Employee.rank,
    "unitCode": Employee.unit_code,
}
EMPLOYEE_DEFAULT_SORT = ("lastName", "ASC")
EMPLOYEE_TIEBREAKER = (Employee.badge_number.asc(),)

_DEPARTMENT_FIELDS = ("name", "address", "working_hours", "phone_number")
_EMPLOYEE_FIELDS = ("last_name", "first_name", "patronymic", "rank")


# --- departments ---


def get_department_row(session: Session, unit_code: str) -> RegDepartment:
    department = session.get(RegDepartment, unit_code)
    if department is None:
        raise NotFound("Department not found", field="unitCode")
    return department


def _check_department_email(session: Session, email: str, *, exclude: str | None = None) -> None:
    query = session.query(RegDepartment.unit_code).filter(RegDepartment.email == email)
    if exclude is not None:
        query = query.filter(RegDepartment.unit_code != exclude)
    if query.first() is not None:
        raise Conflict("Department with this email already exists", field="email")


def list_departments(session: Session, params: SearchParams, listing: Listing, *, public: bool = False) -> dict:
    query = session.query(RegDepartment)
    if params.search:
        query = query.filter(
            or_(
                contains(RegDepartment.name, params.search),
                contains(RegDepartment.address, params.search),
                contains(RegDepartment.unit_code, params.search),
            )
        )
    serialize = DepartmentPublic.serialize if public else DepartmentOut.serialize
    return paginate(query, listing, serialize)


def get_department(session: Session, unit_code: str) -> dict:
    return DepartmentOut.serialize(get_department_row(session, unit_code))


def create_department(session: Session, payload: DepartmentCreate) -> RegDepartment:
    if session.get(RegDepartment, payload.unit_code) is not None:
        raise Conflict("Department with this unit code already exists", field="unitCode")
    _check_department_email(session, payload.email)

    department = RegDepartment(**payload.model_dump())
    session.add(department)
    session.flush()
    logger.info("Created department unit_code=%s", department.unit_code)
    return department


def update_department(session: Session, unit_code: str, changes: Mapping[str, Any]) -> RegDepartment:
    department = get_department_row(session, unit_code)
    check_mutable(session, DEPARTMENT, unit_code, department, changes)

    if "email" in changes and changes["email"] != department.email:
        _check_department_email(session, changes["email"], exclude=unit_code)
        department.email = changes["email"]
    for field in _DEPARTMENT_FIELDS:
        if field in changes:
            setattr(department, field, changes[field])

    session.flush()
    logger.info("Updated department unit_code=%s fields=%s", unit_code, sorted(changes))
    return department


def delete_department(session: Session, unit_code: str) -> None:
    department = get_department_row(session, unit_code)
    if session.query(Employee.badge_number).filter(Employee.unit_code == unit_code).first() is not None:
        raise Conflict("Cannot delete department with employees")
    if session.query(RegistrationOp.operation_id).filter(RegistrationOp.unit_code == unit_code).first() is not None:
        raise Conflict("Cannot delete department with registration operations")
    session.delete(department)
    session.flush()
    logger.info("Deleted department unit_code=%s", unit_code)


# --- employees ---


def get_employee_row(session: Session, badge_number: str) -> Employee:
    employee = session.get(Employee, badge_number)
    if employee is None:
        raise NotFound("Employee not found", field="badgeNumber")
    return employee


def _require_department(session: Session, unit_code: str) -> None:
    if session.get(RegDepartment, unit_code) is None:
        raise BadRequest("Department does not exist", field="unitCode")


def list_employees(session: Session, params: EmployeeQuery, listing: Listing) -> dict:
    query = session.query(Employee)
    if params.search:
        query = query.filter(
            or_(
                contains(Employee.last_name, params.search),
                contains(Employee.first_name, params.search),
                contains(Employee.badge_number, params.search),
                contains(Employee.rank, params.search),
            )
        )
    if params.unit_code:
        query = query.filter(Employee.unit_code == params.unit_code)
    return paginate(query, listing, EmployeeOut.serialize)


def get_employee(session: Session, badge_number: str) -> dict:
    return EmployeeOut.serialize(get_employee_row(session, badge_number))


def create_employee(session: Session, payload: EmployeeCreate) -> Employee:
    # Uniqueness first: a duplicate badge is a Conflict even with other errors.
    if session.get(Employee, payload.badge_number) is not None:
        raise Conflict("Employee with this badge number already exists", field="badgeNumber")
    _require_department(session, payload.unit_code)

    employee = Employee(**payload.model_dump())
    session.add(employee)
    session.flush()
    logger.info("Created employee badge=%s unit_code=%s", employee.badge_number, employee.unit_code)
    return employee


def update_employee(session: Session, badge_number: str, changes: Mapping[str, Any]) -> Employee:
    employee = get_employee_row(session, badge_number)
    check_mutable(session, EMPLOYEE, badge_number, employee, changes)

    if "unit_code" in changes and changes["unit_code"] != employee.unit_code:
        _require_department(session, changes["unit_code"])
        employee.unit_code = changes["unit_code"]
    for field in _EMPLOYEE_FIELDS:
        if field in changes:
            setattr(employee, field, changes[field])

    session.flush()
    logger.info("Updated employee badge=%s fields=%s", badge_number, sorted(changes))
    return employee


def delete_employee(session: Session, badge_number: str) -> None:
    employee = get_employee_row(session, badge_number)
    if session.query(RegistrationOp.operation_id).filter(RegistrationOp.badge_number == badge_number).first() is not None:
        raise Conflict("Cannot delete employee with registration operations")
    session.delete(employee)
    session.flush()
    logger.info("Deleted employee badge=%s", badge_number)
