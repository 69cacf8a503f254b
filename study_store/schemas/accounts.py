from datetime import datetime
from decimal import Decimal
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator


def _normalize_email(value: str) -> str:
    cleaned = value.strip().lower()
    if "@" not in cleaned:
        raise ValueError("A valid email is required")
    return cleaned


class SignupRequest(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    email: str = Field(min_length=3, max_length=255)
    password: str = Field(min_length=1, max_length=255)

    @field_validator("name")
    @classmethod
    def normalize_name(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("This field is required")
        return cleaned

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return _normalize_email(value)


class LoginRequest(BaseModel):
    email: str = Field(min_length=3, max_length=255)
    password: str = Field(min_length=1, max_length=255)
    role: Literal["buyer", "admin"] = "buyer"

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return _normalize_email(value)


class ChangePasswordRequest(BaseModel):
    email: str = Field(min_length=3, max_length=255)
    current_password: str = Field(min_length=1, max_length=255)
    new_password: str = Field(min_length=1, max_length=255)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return _normalize_email(value)


class PurchaseResponse(BaseModel):
    title: str
    price: Decimal
    quantity: int
    invoice: Optional[str] = None
    created_at: datetime


class AccountResponse(BaseModel):
    id: int
    name: str
    email: str
    role: str
    created_at: datetime
    purchases: list[PurchaseResponse] = Field(default_factory=list)


class LoginResponse(BaseModel):
    message: str
    user: AccountResponse
    access_token: Optional[str] = None
    token_type: Optional[str] = None
    expires_in_seconds: Optional[int] = None


class MessageResponse(BaseModel):
    message: str
