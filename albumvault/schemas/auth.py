from datetime import datetime
from uuid import UUID

from pydantic import EmailStr, Field, field_validator

from .base import CamelModel


class RegisterPayload(CamelModel):
    name: str = Field(min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(min_length=6, max_length=255)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name is required")
        return v

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: str) -> str:
        return v.lower()


class LoginPayload(CamelModel):
    email: EmailStr
    password: str

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: str) -> str:
        return v.lower()


class UserOut(CamelModel):
    id: UUID
    name: str
    email: str
    created_at: datetime


class AuthOut(CamelModel):
    message: str
    token: str
    token_type: str = "bearer"
    user: UserOut

