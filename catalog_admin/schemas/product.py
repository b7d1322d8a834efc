from __future__ import annotations

import uuid
from decimal import Decimal
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from catalog_admin.core.config import settings
from catalog_admin.schemas.product_owner import OwnerSummary

ProductStatus = Literal["ACTIVE", "INACTIVE"]
ProductSortBy = Literal["name", "sku", "price", "inventory", "status"]
SortOrder = Literal["asc", "desc"]

# Base64 text of a 5 MB image; the decoded size is checked again after decoding.
MAX_IMAGE_TEXT_LENGTH = 7 * 1024 * 1024
IMAGE_MIME_PATTERN = r"^image/[a-zA-Z0-9.+-]+$"


def _strip_required(value: Optional[str]) -> str:
    if value is None:
        raise ValueError("must not be null")
    text = value.strip()
    if not text:
        raise ValueError("must not be empty")
    return text


class ProductCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(max_length=255)
    sku: str = Field(max_length=100)
    price: Decimal = Field(ge=0, max_digits=12, decimal_places=2)
    inventory: int = Field(default=0, ge=0)
    status: ProductStatus = "ACTIVE"
    owner_id: uuid.UUID = Field(alias="ownerId")
    image: Optional[str] = Field(default=None, max_length=MAX_IMAGE_TEXT_LENGTH)
    image_mime_type: Optional[str] = Field(
        default=None, alias="imageMimeType", max_length=100, pattern=IMAGE_MIME_PATTERN
    )

    @field_validator("name", "sku")
    @classmethod
    def strip_text(cls, value: str) -> str:
        return _strip_required(value)

    @model_validator(mode="after")
    def image_fields_together(self):
        if (self.image is None) != (self.image_mime_type is None):
            raise ValueError('"image" and "imageMimeType" must be provided together')
        return self


class ProductUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = Field(default=None, max_length=255)
    sku: Optional[str] = Field(default=None, max_length=100)
    price: Optional[Decimal] = Field(default=None, ge=0, max_digits=12, decimal_places=2)
    inventory: Optional[int] = Field(default=None, ge=0)
    status: Optional[ProductStatus] = None
    owner_id: Optional[uuid.UUID] = Field(default=None, alias="ownerId")
    image: Optional[str] = Field(default=None, max_length=MAX_IMAGE_TEXT_LENGTH)
    image_mime_type: Optional[str] = Field(
        default=None, alias="imageMimeType", max_length=100, pattern=IMAGE_MIME_PATTERN
    )

    @field_validator("name", "sku")
    @classmethod
    def strip_text(cls, value: Optional[str]) -> str:
        return _strip_required(value)

    @field_validator("price", "inventory", "status", "owner_id")
    @classmethod
    def not_null(cls, value):
        if value is None:
            raise ValueError("must not be null")
        return value

    @model_validator(mode="after")
    def image_fields_together(self):
        fields = self.model_fields_set
        if not fields:
            raise ValueError("at least one field must be provided")
        if ("image" in fields) != ("image_mime_type" in fields):
            raise ValueError('"image" and "imageMimeType" must be provided together')
        if (self.image is None) != (self.image_mime_type is None):
            raise ValueError('"image" and "imageMimeType" must both be set or both be null')
        return self

    @property
    def touches_image(self) -> bool:
        return "image" in self.model_fields_set

    @property
    def removes_image(self) -> bool:
        return self.touches_image and self.image is None


class ProductListQuery(BaseModel):
    name: Optional[str] = Field(default=None, max_length=255)
    sku: Optional[str] = Field(default=None, max_length=100)
    ownerName: Optional[str] = Field(default=None, max_length=255)
    status: Optional[ProductStatus] = None
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE)
    sortBy: ProductSortBy = "name"
    sortOrder: SortOrder = "asc"


class ProductOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: uuid.UUID
    name: str
    sku: str
    price: float
    inventory: int
    status: ProductStatus
    owner_id: uuid.UUID = Field(alias="ownerId")
    image: Optional[str] = None
    image_mime_type: Optional[str] = Field(default=None, alias="imageMimeType")
    owner: Optional[OwnerSummary] = None
