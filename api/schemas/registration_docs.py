"""Schemas for registration documents."""

from __future__ import annotations

from datetime import date
from typing import Optional

from pydantic import Field, model_validator

from api.schemas.common import (
    PARTY_KEY_PATTERN,
    PTS_STS_PATTERN,
    REG_NUMBER_PATTERN,
    VIN_PATTERN,
    CamelModel,
    ListParams,
    OutModel,
    PatchModel,
)
from api.schemas.vehicles import VehicleSummary


class RegistrationDocCreate(CamelModel):
    registration_number: str = Field(pattern=REG_NUMBER_PATTERN)
    # Defaults to the owner's current address when omitted.
    address: Optional[str] = Field(default=None, min_length=8, max_length=255)
    pts: str = Field(pattern=PTS_STS_PATTERN)
    sts: str = Field(pattern=PTS_STS_PATTERN)
    registration_date: date
    vin: str = Field(pattern=VIN_PATTERN)
    document_owner: str = Field(pattern=PARTY_KEY_PATTERN)


class RegistrationDocPut(CamelModel):
    registration_number: Optional[str] = Field(default=None, pattern=REG_NUMBER_PATTERN)
    address: str = Field(min_length=8, max_length=255)
    pts: str = Field(pattern=PTS_STS_PATTERN)
    sts: str = Field(pattern=PTS_STS_PATTERN)
    registration_date: date
    vin: str = Field(pattern=VIN_PATTERN)
    document_owner: str = Field(pattern=PARTY_KEY_PATTERN)


class RegistrationDocPatch(PatchModel):
    registration_number: Optional[str] = Field(default=None, pattern=REG_NUMBER_PATTERN)
    address: Optional[str] = Field(default=None, min_length=8, max_length=255)
    pts: Optional[str] = Field(default=None, pattern=PTS_STS_PATTERN)
    sts: Optional[str] = Field(default=None, pattern=PTS_STS_PATTERN)
    registration_date: Optional[date] = None
    vin: Optional[str] = Field(default=None, pattern=VIN_PATTERN)
    document_owner: Optional[str] = Field(default=None, pattern=PARTY_KEY_PATTERN)


class RegistrationDocQuery(ListParams):
    search: Optional[str] = Field(default=None, max_length=100)
    vin: Optional[str] = Field(default=None, pattern=VIN_PATTERN)
    document_owner: Optional[str] = Field(default=None, pattern=PARTY_KEY_PATTERN)
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    @model_validator(mode="after")
    def _date_range(self):
        if self.start_date and self.end_date and self.start_date > self.end_date:
            raise ValueError("startDate must not be after endDate")
        return self


class RegistrationDocOut(OutModel):
    registration_number: str
    address: str
    pts: str
    sts: str
    registration_date: date
    vin: str
    document_owner: str


class RegistrationDocDetail(RegistrationDocOut):
    vehicle: Optional[VehicleSummary] = None
