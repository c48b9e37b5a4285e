"""Schemas for transport vehicles."""

from __future__ import annotations

from datetime import datetime
from typing import ClassVar, List, Literal, Optional

from pydantic import Field, model_validator

from api.schemas.common import (
    POWER_PATTERN,
    RELEASE_YEAR_PATTERN,
    VIN_PATTERN,
    CamelModel,
    ListParams,
    OutModel,
    PatchModel,
)
from api.schemas.parties import DocumentRef

DriveType = Literal["FWD", "RWD", "AWD", "4WD"]
TransmissionType = Literal["MT", "AT", "AMT", "CVT", "DCT"]
SteeringWheel = Literal["left", "right"]


class VehicleCreate(CamelModel):
    vin: str = Field(pattern=VIN_PATTERN)
    make_and_model: str = Field(min_length=2, max_length=100)
    release_year: str = Field(pattern=RELEASE_YEAR_PATTERN)
    manufacture: str = Field(min_length=2, max_length=100)
    type_of_drive: DriveType
    power: str = Field(pattern=POWER_PATTERN, max_length=20)
    has_chassis_number: bool = True
    body_number: str = Field(min_length=5, max_length=50)
    body_color: str = Field(min_length=2, max_length=50)
    transmission_type: TransmissionType
    steering_wheel: SteeringWheel
    engine_model: str = Field(min_length=2, max_length=50)
    engine_volume: int = Field(ge=500, le=10000)


class VehiclePut(CamelModel):
    vin: Optional[str] = Field(default=None, pattern=VIN_PATTERN)
    make_and_model: str = Field(min_length=2, max_length=100)
    release_year: str = Field(pattern=RELEASE_YEAR_PATTERN)
    manufacture: str = Field(min_length=2, max_length=100)
    type_of_drive: DriveType
    power: str = Field(pattern=POWER_PATTERN, max_length=20)
    has_chassis_number: bool
    body_number: str = Field(min_length=5, max_length=50)
    body_color: str = Field(min_length=2, max_length=50)
    transmission_type: TransmissionType
    steering_wheel: SteeringWheel
    engine_model: str = Field(min_length=2, max_length=50)
    engine_volume: int = Field(ge=500, le=10000)


class VehiclePatch(PatchModel):
    NULLABLE: ClassVar[frozenset[str]] = frozenset({"chassis_number"})

    vin: Optional[str] = Field(default=None, pattern=VIN_PATTERN)
    make_and_model: Optional[str] = Field(default=None, min_length=2, max_length=100)
    release_year: Optional[str] = Field(default=None, pattern=RELEASE_YEAR_PATTERN)
    manufacture: Optional[str] = Field(default=None, min_length=2, max_length=100)
    type_of_drive: Optional[DriveType] = None
    power: Optional[str] = Field(default=None, pattern=POWER_PATTERN, max_length=20)
    has_chassis_number: Optional[bool] = None
    # Explicit form of `hasChassisNumber`: the VIN, or null to clear.
    chassis_number: Optional[str] = Field(default=None, pattern=VIN_PATTERN)
    body_number: Optional[str] = Field(default=None, min_length=5, max_length=50)
    body_color: Optional[str] = Field(default=None, min_length=2, max_length=50)
    transmission_type: Optional[TransmissionType] = None
    steering_wheel: Optional[SteeringWheel] = None
    engine_model: Optional[str] = Field(default=None, min_length=2, max_length=50)
    engine_volume: Optional[int] = Field(default=None, ge=500, le=10000)

    @model_validator(mode="after")
    def _one_chassis_form(self):
        if {"has_chassis_number", "chassis_number"} <= self.model_fields_set:
            raise ValueError("Send either hasChassisNumber or chassisNumber, not both")
        return self


class VehicleQuery(ListParams):
    vin: Optional[str] = Field(default=None, pattern=VIN_PATTERN)
    make_and_model: Optional[str] = Field(default=None, min_length=2, max_length=100)
    release_year: Optional[str] = Field(default=None, pattern=RELEASE_YEAR_PATTERN)
    manufacture: Optional[str] = Field(default=None, min_length=2, max_length=100)
    type_of_drive: Optional[DriveType] = None
    body_color: Optional[str] = Field(default=None, min_length=2, max_length=50)
    transmission_type: Optional[TransmissionType] = None
    steering_wheel: Optional[SteeringWheel] = None
    engine_model: Optional[str] = Field(default=None, max_length=50)
    engine_volume_from: Optional[int] = Field(default=None, ge=500, le=10000)
    engine_volume_to: Optional[int] = Field(default=None, ge=500, le=10000)


class VehicleOut(OutModel):
    vin: str
    make_and_model: str
    release_year: str
    manufacture: str
    type_of_drive: str
    power: str
    chassis_number: Optional[str] = None
    body_number: str
    body_color: str
    transmission_type: str
    steering_wheel: str
    engine_model: str
    engine_volume: int
    created_at: Optional[datetime] = None


class VehicleSummary(OutModel):
    vin: str
    make_and_model: str
    release_year: str


class VehicleWithDocs(VehicleOut):
    registration_docs: List[DocumentRef] = []
