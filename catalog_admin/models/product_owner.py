from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from catalog_admin.db.session import Base
from catalog_admin.models.common import CatalogRecordMixin

if TYPE_CHECKING:
    from catalog_admin.models.product import Product


class ProductOwner(Base, CatalogRecordMixin):
    __tablename__ = "product_owners"

    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    phone: Mapped[str | None] = mapped_column(String(20), nullable=True)

    # Owners are never deleted out from under their products; the FK is RESTRICT.
    products: Mapped[list["Product"]] = relationship(back_populates="owner", lazy="raise_on_sql", passive_deletes="all")
