from __future__ import annotations

import re
from datetime import datetime
from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict, EmailStr, Field

from estatehub.models.enums import Role

_PHONE_DIGITS_MIN = 10
_PHONE_DIGITS_MAX = 15


def _normalize_email(value: str) -> str:
    return value.strip().lower()


def _check_phone(value: str) -> str:
    digits = re.sub(r"\D", "", value)
    if not _PHONE_DIGITS_MIN <= len(digits) <= _PHONE_DIGITS_MAX:
        raise ValueError(f"phone must contain {_PHONE_DIGITS_MIN}-{_PHONE_DIGITS_MAX} digits")
    return value.strip()


# Case-folded so uniqueness and login lookups agree.
Email = Annotated[EmailStr, AfterValidator(_normalize_email)]
Phone = Annotated[str, Field(max_length=20), AfterValidator(_check_phone)]


class UserOut(BaseModel):
    """Public view of an identity. Has no credential field by construction."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    email: str
    phone: str | None
    role: Role
    is_active: bool
    created_at: datetime


class UserCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str = Field(min_length=1, max_length=100)
    email: Email
    phone: Phone | None = None
    role: Role
    password: str = Field(min_length=1, max_length=128)


class UserUpdate(BaseModel):
    """Role is immutable; it is not accepted here at all."""

    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(default=None, min_length=1, max_length=100)
    email: Email | None = None
    phone: Phone | None = None


class LoginRequest(BaseModel):
    email: Email
    password: str = Field(min_length=1, max_length=128)


class LoginResponse(BaseModel):
    token: str
    token_type: str = "bearer"
    user_id: str
    name: str
    email: str
    role: Role
    expires_at: datetime
