from __future__ import annotations

import uuid
from decimal import Decimal

from sqlalchemy import CheckConstraint, ForeignKey, Integer, LargeBinary, Numeric, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from catalog_admin.db.session import Base
from catalog_admin.models.common import CatalogRecordMixin
from catalog_admin.models.product_owner import ProductOwner

PRODUCT_STATUS_ACTIVE = "ACTIVE"
PRODUCT_STATUS_INACTIVE = "INACTIVE"
PRODUCT_STATUSES = (PRODUCT_STATUS_ACTIVE, PRODUCT_STATUS_INACTIVE)


class Product(Base, CatalogRecordMixin):
    __tablename__ = "products"
    __table_args__ = (
        CheckConstraint("price >= 0", name="ck_products_price_nonneg"),
        CheckConstraint("inventory >= 0", name="ck_products_inventory_nonneg"),
        CheckConstraint(
            "(image IS NULL AND image_mime_type IS NULL) OR (image IS NOT NULL AND image_mime_type IS NOT NULL)",
            name="ck_products_image_pair",
        ),
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    sku: Mapped[str] = mapped_column(String(100), nullable=False, unique=True, index=True)
    price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0"))
    inventory: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default=PRODUCT_STATUS_ACTIVE, index=True)
    image: Mapped[bytes | None] = mapped_column(LargeBinary, nullable=True)
    image_mime_type: Mapped[str | None] = mapped_column(String(100), nullable=True)
    owner_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("product_owners.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )

    owner: Mapped[ProductOwner] = relationship(back_populates="products", lazy="raise_on_sql")
