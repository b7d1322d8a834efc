from __future__ import annotations

import logging
import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from catalog_admin.api.serializers import page_out, product_out
from catalog_admin.db.session import get_db
from catalog_admin.schemas.common import envelope
from catalog_admin.schemas.product import ProductCreate, ProductListQuery, ProductUpdate
from catalog_admin.services import products as service

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("")
def list_products(query: Annotated[ProductListQuery, Query()], db: Session = Depends(get_db)):
    logger.debug("fetching products with query %s", query.model_dump(exclude_none=True))
    page = service.find_all_products(db, query.model_dump(exclude_none=True))
    return envelope(page_out(page, product_out))


@router.get("/owner/{owner_id}")
def list_products_by_owner(owner_id: uuid.UUID, db: Session = Depends(get_db)):
    products = service.find_products_by_owner(db, owner_id)
    return envelope([product_out(p) for p in products])


@router.get("/{product_id}")
def get_product(product_id: uuid.UUID, db: Session = Depends(get_db)):
    return envelope(product_out(service.find_product_or_404(db, product_id)))


@router.post("", status_code=201)
def create_product(payload: ProductCreate, db: Session = Depends(get_db)):
    product = service.create_product(db, payload)
    return envelope(product_out(product), status_code=201, message="Created successfully")


@router.put("/{product_id}")
def update_product(product_id: uuid.UUID, payload: ProductUpdate, db: Session = Depends(get_db)):
    product = service.update_product(db, product_id, payload)
    return envelope(product_out(product), message="Updated successfully")


@router.delete("/{product_id}")
def delete_product(product_id: uuid.UUID, db: Session = Depends(get_db)):
    service.delete_product(db, product_id)
    return envelope(message="Deleted successfully")
