"""Schemas for departments, employees, registration operations and work log."""

from __future__ import annotations

from datetime import date
from typing import ClassVar, Literal, Optional

from pydantic import Field, model_validator

from api.schemas.common import (
    BADGE_PATTERN,
    EMAIL_PATTERN,
    PERSON_NAME_PATTERN,
    PHONE_PATTERN,
    REG_NUMBER_PATTERN,
    VIN_PATTERN,
    CamelModel,
    ListParams,
    OutModel,
    PatchModel,
    SearchParams,
)

OperationType = Literal["registration", "deregistration", "change"]


# --- departments ---


class DepartmentCreate(CamelModel):
    unit_code: str = Field(min_length=3, max_length=50)
    name: str = Field(min_length=3, max_length=100)
    address: str = Field(min_length=5, max_length=255)
    working_hours: str = Field(min_length=5, max_length=100)
    phone_number: str = Field(pattern=PHONE_PATTERN)
    email: str = Field(pattern=EMAIL_PATTERN, max_length=320)


class DepartmentPut(CamelModel):
    unit_code: Optional[str] = Field(default=None, min_length=3, max_length=50)
    name: str = Field(min_length=3, max_length=100)
    address: str = Field(min_length=5, max_length=255)
    working_hours: str = Field(min_length=5, max_length=100)
    phone_number: str = Field(pattern=PHONE_PATTERN)
    email: str = Field(pattern=EMAIL_PATTERN, max_length=320)


class DepartmentPatch(PatchModel):
    unit_code: Optional[str] = Field(default=None, min_length=3, max_length=50)
    name: Optional[str] = Field(default=None, min_length=3, max_length=100)
    address: Optional[str] = Field(default=None, min_length=5, max_length=255)
    working_hours: Optional[str] = Field(default=None, min_length=5, max_length=100)
    phone_number: Optional[str] = Field(default=None, pattern=PHONE_PATTERN)
    email: Optional[str] = Field(default=None, pattern=EMAIL_PATTERN, max_length=320)


class DepartmentOut(OutModel):
    unit_code: str
    name: str
    address: str
    working_hours: str
    phone_number: str
    email: str


class DepartmentPublic(OutModel):
    unit_code: str
    name: str
    address: str
    working_hours: str


# --- employees ---


class EmployeeCreate(CamelModel):
    badge_number: str = Field(pattern=BADGE_PATTERN)
    unit_code: str = Field(min_length=3, max_length=50)
    last_name: str = Field(min_length=2, max_length=50, pattern=PERSON_NAME_PATTERN)
    first_name: str = Field(min_length=2, max_length=50, pattern=PERSON_NAME_PATTERN)
    patronymic: str = Field(min_length=2, max_length=50, pattern=PERSON_NAME_PATTERN)
    rank: str = Field(min_length=2, max_length=50)


class EmployeePut(CamelModel):
    badge_number: Optional[str] = Field(default=None, pattern=BADGE_PATTERN)
    unit_code: str = Field(min_length=3, max_length=50)
    last_name: str = Field(min_length=2, max_length=50, pattern=PERSON_NAME_PATTERN)
    first_name: str = Field(min_length=2, max_length=50, pattern=PERSON_NAME_PATTERN)
    patronymic: str = Field(min_length=2, max_length=50, pattern=PERSON_NAME_PATTERN)
    rank: str = Field(min_length=2, max_length=50)


class EmployeePatch(PatchModel):
    badge_number: Optional[str] = Field(default=None, pattern=BADGE_PATTERN)
    unit_code: Optional[str] = Field(default=None, min_length=3, max_length=50)
    last_name: Optional[str] = Field(default=None, min_length=2, max_length=50, pattern=PERSON_NAME_PATTERN)
    first_name: Optional[str] = Field(default=None, min_length=2, max_length=50, pattern=PERSON_NAME_PATTERN)
    patronymic: Optional[str] = Field(default=None, min_length=2, max_length=50, pattern=PERSON_NAME_PATTERN)
    rank: Optional[str] = Field(default=None, min_length=2, max_length=50)


class EmployeeQuery(SearchParams):
    unit_code: Optional[str] = Field(default=None, max_length=50)


class EmployeeOut(OutModel):
    badge_number: str
    unit_code: str
    last_name: str
    first_name: str
    patronymic: str
    rank: str


class EmployeeSummary(OutModel):
    badge_number: str
    last_name: str
    first_name: str


# --- registration operations ---


class RegistrationOpCreate(CamelModel):
    vin: str = Field(pattern=VIN_PATTERN)
    registration_number: Optional[str] = Field(default=None, pattern=REG_NUMBER_PATTERN)
    unit_code: str = Field(min_length=3, max_length=50)
    operation_type: OperationType
    operation_base: str = Field(min_length=5, max_length=255)
    operation_date: date
    badge_number: str = Field(pattern=BADGE_PATTERN)


class RegistrationOpPatch(PatchModel):
    NULLABLE: ClassVar[frozenset[str]] = frozenset({"registration_number"})

    vin: Optional[str] = Field(default=None, pattern=VIN_PATTERN)
    registration_number: Optional[str] = Field(default=None, pattern=REG_NUMBER_PATTERN)
    unit_code: Optional[str] = Field(default=None, min_length=3, max_length=50)
    operation_type: Optional[OperationType] = None
    operation_base: Optional[str] = Field(default=None, min_length=5, max_length=255)
    operation_date: Optional[date] = None
    badge_number: Optional[str] = Field(default=None, pattern=BADGE_PATTERN)


class RegistrationOpRequest(CamelModel):
    """Citizen's request for an operation on one of their vehicles."""

    vin: str = Field(pattern=VIN_PATTERN)
    unit_code: str = Field(min_length=3, max_length=50)
    operation_type: OperationType
    purpose: str = Field(min_length=5, max_length=255)


class RegistrationOpQuery(ListParams):
    vin: Optional[str] = Field(default=None, pattern=VIN_PATTERN)
    operation_type: Optional[OperationType] = None
    badge_number: Optional[str] = Field(default=None, pattern=BADGE_PATTERN)
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    @model_validator(mode="after")
    def _date_range(self):
        if self.start_date and self.end_date and self.start_date > self.end_date:
            raise ValueError("startDate must not be after endDate")
        return self


class RegistrationOpOut(OutModel):
    operation_id: int
    vin: str
    registration_number: Optional[str] = None
    unit_code: str
    operation_type: str
    operation_base: str
    operation_date: date
    badge_number: Optional[str] = None
    requested_by: Optional[int] = None


class RegistrationOpDetail(RegistrationOpOut):
    employee: Optional[EmployeeSummary] = None
    department: Optional[DepartmentPublic] = None


# --- work log ---


class WorkCreate(CamelModel):
    badge_number: str = Field(pattern=BADGE_PATTERN)
    operation_id: int = Field(ge=1)
    purpose: str = Field(min_length=5, max_length=255)
    work_date: date


class WorkPatch(PatchModel):
    badge_number: Optional[str] = Field(default=None, pattern=BADGE_PATTERN)
    operation_id: Optional[int] = Field(default=None, ge=1)
    purpose: Optional[str] = Field(default=None, min_length=5, max_length=255)
    work_date: Optional[date] = None


class WorkQuery(ListParams):
    badge_number: Optional[str] = Field(default=None, pattern=BADGE_PATTERN)
    operation_id: Optional[int] = Field(default=None, ge=1)
    start_date: Optional[date] = None
    end_date: Optional[date] = None


class WorkOut(OutModel):
    id: int
    badge_number: str
    operation_id: int
    purpose: str
    work_date: date
