"""Shared pydantic building blocks for request/response schemas.

JSON uses camelCase (`passportData`), Python uses snake_case
(`passport_data`); `CamelModel` maps between the two.
"""

from __future__ import annotations

from typing import Any, ClassVar, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

# Identifier formats.
PASSPORT_PATTERN = r"^\d{4} \d{6}$"
TAX_NUMBER_PATTERN = r"^\d{10}$"
VIN_PATTERN = r"^[A-HJ-NPR-Z0-9]{17}$"
REG_NUMBER_PATTERN = r"^[A-Z0-9]{8,20}$"
PTS_STS_PATTERN = r"^[A-Z0-9]{10,20}$"
BADGE_PATTERN = r"^[A-Z0-9-]{5,10}$"
PHONE_PATTERN = r"^\+?[0-9]{10,15}$"
EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"
PERSON_NAME_PATTERN = r"^[A-Za-zА-Яа-яЁё\s\-]+$"
RELEASE_YEAR_PATTERN = r"^(19|20)\d{2}$"
POWER_PATTERN = r"^\d+\s*(hp|kW)$"

# Party keys are either a passport or a tax number.
PARTY_KEY_PATTERN = r"^(\d{4} \d{6}|\d{10})$"


class CamelModel(BaseModel):
    """Request body: camelCase in, unknown fields rejected."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
        str_strip_whitespace=True,
    )

    def changes(self) -> Dict[str, Any]:
        """Fields the client actually sent."""
        return self.model_dump(exclude_unset=True)


class PatchModel(CamelModel):
    """Partial-update body: every field optional, at least one required.

    Fields listed in `NULLABLE` may be sent as null; any other explicit null
    is rejected.
    """

    NULLABLE: ClassVar[frozenset[str]] = frozenset()

    @model_validator(mode="after")
    def _at_least_one_field(self):
        if not self.model_fields_set:
            raise ValueError("At least one field must be provided")
        for name in self.model_fields_set:
            if getattr(self, name) is None and name not in self.NULLABLE:
                raise ValueError(f"{to_camel(name)} must not be null")
        return self


class QueryModel(BaseModel):
    """Query-string model: camelCase in, unknown params ignored."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        str_strip_whitespace=True,
    )


class ListParams(QueryModel):
    page: int = Field(default=1, ge=1)
    limit: Optional[int] = Field(default=None, ge=1)
    sort_by: Optional[str] = None
    sort_order: Optional[str] = None


class SearchParams(ListParams):
    search: Optional[str] = Field(default=None, max_length=100)


class OutModel(BaseModel):
    """Response body built from ORM rows."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

    def dump(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)

    @classmethod
    def serialize(cls, row: Any) -> Dict[str, Any]:
        return cls.model_validate(row).dump()
