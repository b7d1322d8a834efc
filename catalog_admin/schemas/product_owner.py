from __future__ import annotations

import re
import uuid
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from catalog_admin.core.config import settings

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

OwnerSortBy = Literal["name", "email", "phone"]
SortOrder = Literal["asc", "desc"]


def _normalize_email(value: str) -> str:
    text = str(value or "").strip()
    if not _EMAIL_RE.fullmatch(text):
        raise ValueError("must be a valid email")
    return text


def _normalize_phone(value: Optional[str]) -> Optional[str]:
    text = str(value or "").strip()
    return text or None


class ProductOwnerCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    email: str = Field(max_length=255)
    phone: Optional[str] = Field(default=None, max_length=20)

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        text = value.strip()
        if not text:
            raise ValueError("must not be empty")
        return text

    @field_validator("email")
    @classmethod
    def validate_email(cls, value: str) -> str:
        return _normalize_email(value)

    @field_validator("phone")
    @classmethod
    def normalize_phone(cls, value: Optional[str]) -> Optional[str]:
        return _normalize_phone(value)


class ProductOwnerUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    email: Optional[str] = Field(default=None, max_length=255)
    phone: Optional[str] = Field(default=None, max_length=20)

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            raise ValueError("must not be null")
        text = value.strip()
        if not text:
            raise ValueError("must not be empty")
        return text

    @field_validator("email")
    @classmethod
    def validate_email(cls, value: Optional[str]) -> str:
        if value is None:
            raise ValueError("must not be null")
        return _normalize_email(value)

    @field_validator("phone")
    @classmethod
    def normalize_phone(cls, value: Optional[str]) -> Optional[str]:
        return _normalize_phone(value)

    @model_validator(mode="after")
    def require_some_field(self):
        if not self.model_fields_set:
            raise ValueError("at least one field must be provided")
        return self


class ProductOwnerListQuery(BaseModel):
    name: Optional[str] = Field(default=None, max_length=255)
    email: Optional[str] = Field(default=None, max_length=255)
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE)
    sortBy: OwnerSortBy = "name"
    sortOrder: SortOrder = "asc"


class OwnerSummary(BaseModel):
    id: uuid.UUID
    name: str
    email: str
    phone: Optional[str] = None


class OwnedProductBrief(BaseModel):
    id: uuid.UUID
    name: str
    sku: str
    price: float
    inventory: int
    status: str


class ProductOwnerOut(OwnerSummary):
    products: Optional[List[OwnedProductBrief]] = None
