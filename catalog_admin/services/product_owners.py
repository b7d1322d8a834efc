from __future__ import annotations

import logging
import uuid
from typing import Any, Mapping

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from catalog_admin.core.errors import (
    CatalogError,
    ConflictError,
    InternalError,
    NotFoundError,
    ReferentialIntegrityError,
    ValidationError,
)
from catalog_admin.models.product import Product
from catalog_admin.models.product_owner import ProductOwner
from catalog_admin.schemas.product_owner import ProductOwnerCreate, ProductOwnerUpdate
from catalog_admin.services.list_query import PRODUCT_OWNER_LIST, build_query
from catalog_admin.services.repository import (
    FOREIGN_KEY_VIOLATION,
    UNIQUE_VIOLATION,
    Page,
    Repository,
    violated_constraint,
)

logger = logging.getLogger(__name__)


def _owners(db: Session) -> Repository[ProductOwner]:
    return Repository(db, ProductOwner, sortable=PRODUCT_OWNER_LIST.sort_fields)


def _email_conflict(email: str) -> ConflictError:
    return ConflictError(f"Product owner with email '{email}' already exists")


def _rejected_owner_write(exc: IntegrityError, email: str) -> CatalogError:
    if violated_constraint(exc) == UNIQUE_VIOLATION:
        logger.info("product owner write rejected: duplicate email %s at commit", email)
        return _email_conflict(email)
    logger.warning("product owner write rejected by the database: %s", exc.orig)
    return ValidationError("Product owner violates a data constraint")


def find_all_owners(db: Session, filters: Mapping[str, Any]) -> Page[ProductOwner]:
    descriptor = build_query(filters, PRODUCT_OWNER_LIST)
    logger.debug("listing product owners where=%s skip=%s take=%s", descriptor.where, descriptor.skip, descriptor.take)
    try:
        return _owners(db).find_and_count(descriptor)
    except SQLAlchemyError:
        logger.exception("product owner listing failed")
        raise InternalError("Failed to fetch product owners")


def find_owner_or_404(db: Session, owner_id: uuid.UUID, *, with_products: bool = True) -> ProductOwner:
    relations = ("products",) if with_products else ()
    owner = _owners(db).find_one(with_=relations, id=owner_id)
    if owner is None:
        raise NotFoundError(f"Product owner with id '{owner_id}' not found")
    return owner


def create_owner(db: Session, payload: ProductOwnerCreate) -> ProductOwner:
    repo = _owners(db)
    if repo.exists(email=payload.email):
        logger.info("product owner create rejected: duplicate email %s", payload.email)
        raise _email_conflict(payload.email)
    owner = ProductOwner(name=payload.name, email=payload.email, phone=payload.phone)
    try:
        repo.save(owner)
    except IntegrityError as exc:
        # Concurrent insert with the same email got past the pre-check.
        raise _rejected_owner_write(exc, payload.email)
    return find_owner_or_404(db, owner.id)


def update_owner(db: Session, owner_id: uuid.UUID, payload: ProductOwnerUpdate) -> ProductOwner:
    repo = _owners(db)
    owner = find_owner_or_404(db, owner_id, with_products=False)
    changes = payload.model_dump(exclude_unset=True)
    new_email = changes.get("email")
    if new_email and new_email != owner.email and repo.exists(email=new_email):
        logger.info("product owner update rejected: duplicate email %s", new_email)
        raise _email_conflict(new_email)
    target_email = str(new_email or owner.email)
    for key, value in changes.items():
        setattr(owner, key, value)
    try:
        repo.save(owner)
    except IntegrityError as exc:
        raise _rejected_owner_write(exc, target_email)
    return find_owner_or_404(db, owner.id)


def delete_owner(db: Session, owner_id: uuid.UUID) -> None:
    repo = _owners(db)
    owner = find_owner_or_404(db, owner_id, with_products=False)
    referencing = Repository(db, Product).count_by(owner_id=owner.id)
    if referencing:
        logger.info("product owner delete rejected: %s products still reference %s", referencing, owner_id)
        raise ReferentialIntegrityError(
            f"Product owner with id '{owner_id}' still has {referencing} product(s) and cannot be deleted"
        )
    try:
        repo.delete(owner)
    except IntegrityError as exc:
        if violated_constraint(exc) != FOREIGN_KEY_VIOLATION:
            raise
        raise ReferentialIntegrityError(f"Product owner with id '{owner_id}' is still referenced by products")
