"""Auth schemas."""
import re
from typing import Literal

from pydantic import BaseModel, EmailStr, Field, field_validator

from cleanops.models.user import UserType

PHONE_PATTERN = re.compile(r"^\+?[1-9]\d{1,14}$")


class LoginRequest(BaseModel):
    email: EmailStr
    password: str

    @field_validator("password")
    @classmethod
    def password_not_blank(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Password is required.")
        return v


class WorkerRegister(BaseModel):
    name: str = Field(min_length=2, max_length=255)
    email: EmailStr
    phone: str
    password: str = Field(min_length=6)
    language: Literal["ar", "en"] = "ar"

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        v = v.strip()
        if len(v) < 2:
            raise ValueError("Name must have at least 2 characters.")
        return v

    @field_validator("phone")
    @classmethod
    def phone_valid(cls, v: str) -> str:
        # E.164: optional +, up to 15 digits, no leading zero
        v = re.sub(r"[\s\-()]", "", v or "")
        if not PHONE_PATTERN.match(v):
            raise ValueError("Phone number must be in international format, e.g. +962791234567.")
        return v


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user_id: int
    user_type: UserType
    name: str
    role: str | None = None
