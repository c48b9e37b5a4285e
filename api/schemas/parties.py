"""Schemas for natural persons and legal entities."""

from __future__ import annotations

from datetime import date
from typing import List, Optional

from pydantic import Field

from api.schemas.common import (
    PASSPORT_PATTERN,
    PERSON_NAME_PATTERN,
    TAX_NUMBER_PATTERN,
    CamelModel,
    OutModel,
    PatchModel,
    SearchParams,
)


class NaturalPersonCreate(CamelModel):
    passport_data: str = Field(pattern=PASSPORT_PATTERN)
    address: str = Field(min_length=8, max_length=255)
    last_name: str = Field(min_length=2, max_length=50, pattern=PERSON_NAME_PATTERN)
    first_name: str = Field(min_length=2, max_length=50, pattern=PERSON_NAME_PATTERN)
    patronymic: str = Field(min_length=2, max_length=50, pattern=PERSON_NAME_PATTERN)


class NaturalPersonPut(CamelModel):
    # Accepted so that an attempt to change it is reported, not silently dropped.
    passport_data: Optional[str] = Field(default=None, pattern=PASSPORT_PATTERN)
    address: str = Field(min_length=8, max_length=255)
    last_name: str = Field(min_length=2, max_length=50, pattern=PERSON_NAME_PATTERN)
    first_name: str = Field(min_length=2, max_length=50, pattern=PERSON_NAME_PATTERN)
    patronymic: str = Field(min_length=2, max_length=50, pattern=PERSON_NAME_PATTERN)


class NaturalPersonPatch(PatchModel):
    passport_data: Optional[str] = Field(default=None, pattern=PASSPORT_PATTERN)
    address: Optional[str] = Field(default=None, min_length=8, max_length=255)
    last_name: Optional[str] = Field(default=None, min_length=2, max_length=50, pattern=PERSON_NAME_PATTERN)
    first_name: Optional[str] = Field(default=None, min_length=2, max_length=50, pattern=PERSON_NAME_PATTERN)
    patronymic: Optional[str] = Field(default=None, min_length=2, max_length=50, pattern=PERSON_NAME_PATTERN)


class LegalEntityCreate(CamelModel):
    tax_number: str = Field(pattern=TAX_NUMBER_PATTERN)
    address: str = Field(min_length=8, max_length=255)
    company_name: str = Field(min_length=3, max_length=100)


class LegalEntityPut(CamelModel):
    tax_number: Optional[str] = Field(default=None, pattern=TAX_NUMBER_PATTERN)
    address: str = Field(min_length=8, max_length=255)
    company_name: str = Field(min_length=3, max_length=100)


class LegalEntityPatch(PatchModel):
    tax_number: Optional[str] = Field(default=None, pattern=TAX_NUMBER_PATTERN)
    address: Optional[str] = Field(default=None, min_length=8, max_length=255)
    company_name: Optional[str] = Field(default=None, min_length=3, max_length=100)


class NaturalPersonQuery(SearchParams):
    address: Optional[str] = Field(default=None, max_length=255)


class LegalEntityQuery(SearchParams):
    address: Optional[str] = Field(default=None, max_length=255)


class DocumentRef(OutModel):
    registration_number: str
    registration_date: date


class NaturalPersonOut(OutModel):
    passport_data: str
    last_name: str
    first_name: str
    patronymic: str
    address: str


class NaturalPersonDetail(NaturalPersonOut):
    registration_docs: List[DocumentRef] = []


class LegalEntityOut(OutModel):
    tax_number: str
    company_name: str
    address: str


class LegalEntityDetail(LegalEntityOut):
    registration_docs: List[DocumentRef] = []


class OwnerOut(OutModel):
    id: int
    address: str


class OwnerQuery(SearchParams):
    pass
