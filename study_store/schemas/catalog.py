from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class ItemResponse(BaseModel):
    id: int
    title: str
    desc: Optional[str] = None
    price: Decimal
    subject: Optional[str] = None
    filename: Optional[str] = None
    created_at: datetime


class ItemListResponse(BaseModel):
    items: list[ItemResponse]


class ItemRemovedResponse(BaseModel):
    message: str
    file_deleted: bool


class SubjectCreate(BaseModel):
    code: str = Field(min_length=1, max_length=50)
    name: str = Field(min_length=1, max_length=200)

    @field_validator("code", "name")
    @classmethod
    def normalize_required_text(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("This field is required")
        return cleaned


class SubjectsResponse(BaseModel):
    subjects: dict[str, str]
