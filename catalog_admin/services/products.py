from __future__ import annotations

import logging
import uuid
from typing import Any, Mapping

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from catalog_admin.core.errors import CatalogError, ConflictError, InternalError, NotFoundError, ValidationError
from catalog_admin.models.product import Product
from catalog_admin.models.product_owner import ProductOwner
from catalog_admin.schemas.product import ProductCreate, ProductUpdate
from catalog_admin.services.image_validation import decode_image_or_400
from catalog_admin.services.list_query import PRODUCT_LIST, build_query
from catalog_admin.services.repository import (
    CHECK_VIOLATION,
    FOREIGN_KEY_VIOLATION,
    UNIQUE_VIOLATION,
    Page,
    Repository,
    violated_constraint,
)

logger = logging.getLogger(__name__)


def _products(db: Session) -> Repository[Product]:
    return Repository(db, Product, sortable=PRODUCT_LIST.sort_fields)


def _sku_conflict(sku: str) -> ConflictError:
    return ConflictError(f"Product with SKU '{sku}' already exists")


def _resolve_owner_or_404(db: Session, owner_id: uuid.UUID) -> ProductOwner:
    owner = Repository(db, ProductOwner).find_one(id=owner_id)
    if owner is None:
        logger.info("product owner %s does not exist", owner_id)
        raise NotFoundError(f"Product owner with id '{owner_id}' not found")
    return owner


def _rejected_write(exc: IntegrityError, sku: str, owner_id: uuid.UUID) -> CatalogError:
    """Map a failed product commit to the error the pre-checks would have raised."""
    kind = violated_constraint(exc)
    if kind == FOREIGN_KEY_VIOLATION:
        logger.info("product write rejected: owner %s disappeared before commit", owner_id)
        return NotFoundError(f"Product owner with id '{owner_id}' not found")
    if kind == UNIQUE_VIOLATION:
        logger.info("product write rejected: duplicate sku %s at commit", sku)
        return _sku_conflict(sku)
    if kind == CHECK_VIOLATION:
        return ValidationError("Product fields violate a storage constraint")
    logger.warning("product write rejected by the database: %s", exc.orig)
    return ValidationError("Product violates a data constraint")


def find_all_products(db: Session, filters: Mapping[str, Any]) -> Page[Product]:
    descriptor = build_query(filters, PRODUCT_LIST)
    logger.debug("listing products where=%s skip=%s take=%s", descriptor.where, descriptor.skip, descriptor.take)
    try:
        return _products(db).find_and_count(descriptor)
    except SQLAlchemyError:
        logger.exception("product listing failed")
        raise InternalError("Failed to fetch products")


def find_product_or_404(db: Session, product_id: uuid.UUID) -> Product:
    product = _products(db).find_one(with_=("owner",), id=product_id)
    if product is None:
        raise NotFoundError(f"Product with id '{product_id}' not found")
    return product


def find_products_by_owner(db: Session, owner_id: uuid.UUID) -> list[Product]:
    _resolve_owner_or_404(db, owner_id)
    return _products(db).find_by(with_=("owner",), order_by="name", owner_id=owner_id)


def create_product(db: Session, payload: ProductCreate) -> Product:
    repo = _products(db)
    if repo.exists(sku=payload.sku):
        logger.info("product create rejected: duplicate sku %s", payload.sku)
        raise _sku_conflict(payload.sku)
    owner = _resolve_owner_or_404(db, payload.owner_id)

    image, image_mime_type = None, None
    if payload.image is not None:
        image, image_mime_type = decode_image_or_400(payload.image, payload.image_mime_type)

    product = Product(
        name=payload.name,
        sku=payload.sku,
        price=payload.price,
        inventory=payload.inventory,
        status=payload.status,
        owner_id=owner.id,
        image=image,
        image_mime_type=image_mime_type,
    )
    try:
        repo.save(product)
    except IntegrityError as exc:
        # Constraints back the pre-checks when a concurrent write slips between them and the commit.
        raise _rejected_write(exc, payload.sku, payload.owner_id)
    return find_product_or_404(db, product.id)


def update_product(db: Session, product_id: uuid.UUID, payload: ProductUpdate) -> Product:
    repo = _products(db)
    product = find_product_or_404(db, product_id)
    changes = payload.model_dump(exclude_unset=True, exclude={"image", "image_mime_type"})

    new_sku = changes.get("sku")
    if new_sku and new_sku != product.sku and repo.exists(sku=new_sku):
        logger.info("product update rejected: duplicate sku %s", new_sku)
        raise _sku_conflict(new_sku)
    if "owner_id" in changes:
        changes["owner_id"] = _resolve_owner_or_404(db, changes["owner_id"]).id

    if payload.removes_image:
        changes["image"] = None
        changes["image_mime_type"] = None
    elif payload.touches_image:
        changes["image"], changes["image_mime_type"] = decode_image_or_400(payload.image, payload.image_mime_type)

    target_sku = str(changes.get("sku") or product.sku)
    target_owner_id = changes.get("owner_id", product.owner_id)
    owner_changed = "owner_id" in changes and changes["owner_id"] != product.owner_id
    for key, value in changes.items():
        setattr(product, key, value)
    if owner_changed:
        # Drop the stale eager-loaded owner; it is reloaded below.
        db.expire(product, ["owner"])
    try:
        repo.save(product)
    except IntegrityError as exc:
        raise _rejected_write(exc, target_sku, target_owner_id)
    return find_product_or_404(db, product.id)


def delete_product(db: Session, product_id: uuid.UUID) -> None:
    product = find_product_or_404(db, product_id)
    _products(db).delete(product)
