"""User-management and auth schemas (request/response models)."""

from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import Field, model_validator

from api.schemas.common import (
    BADGE_PATTERN,
    EMAIL_PATTERN,
    PARTY_KEY_PATTERN,
    CamelModel,
    OutModel,
    PatchModel,
    SearchParams,
)
from api.schemas.parties import LegalEntityCreate, NaturalPersonCreate

Role = Literal["owner", "employee", "admin"]


class UserCreate(CamelModel):
    email: str = Field(pattern=EMAIL_PATTERN, max_length=320)
    password: str = Field(min_length=8, max_length=128)
    role: Role
    is_active: bool = True
    party_key: Optional[str] = Field(default=None, pattern=PARTY_KEY_PATTERN)
    badge_number: Optional[str] = Field(default=None, pattern=BADGE_PATTERN)

    @model_validator(mode="after")
    def _role_links(self):
        if self.role == "owner" and not self.party_key:
            raise ValueError("partyKey is required for owner accounts")
        if self.role == "employee" and not self.badge_number:
            raise ValueError("badgeNumber is required for employee accounts")
        return self


class UserPatch(PatchModel):
    email: Optional[str] = Field(default=None, pattern=EMAIL_PATTERN, max_length=320)
    password: Optional[str] = Field(default=None, min_length=8, max_length=128)
    role: Optional[Role] = None
    is_active: Optional[bool] = None
    party_key: Optional[str] = Field(default=None, pattern=PARTY_KEY_PATTERN)
    badge_number: Optional[str] = Field(default=None, pattern=BADGE_PATTERN)


class UserQuery(SearchParams):
    role: Optional[Role] = None


class UserOut(OutModel):
    id: int
    email: str
    role: str
    is_active: bool
    party_key: Optional[str] = None
    badge_number: Optional[str] = None
    created_at: Optional[datetime] = None


class LoginRequest(CamelModel):
    email: str = Field(min_length=3, max_length=320)
    password: str = Field(min_length=1, max_length=128)


class NaturalOwnerRegistration(NaturalPersonCreate):
    email: str = Field(pattern=EMAIL_PATTERN, max_length=320)
    password: str = Field(min_length=8, max_length=128)


class LegalOwnerRegistration(LegalEntityCreate):
    email: str = Field(pattern=EMAIL_PATTERN, max_length=320)
    password: str = Field(min_length=8, max_length=128)


class EmployeeRegistration(CamelModel):
    badge_number: str = Field(pattern=BADGE_PATTERN)
    email: str = Field(pattern=EMAIL_PATTERN, max_length=320)
    password: str = Field(min_length=8, max_length=128)


class TokenResponse(OutModel):
    access_token: str
    token_type: str = "bearer"
    user: UserOut
