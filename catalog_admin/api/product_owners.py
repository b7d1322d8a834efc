from __future__ import annotations

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from catalog_admin.api.serializers import owner_out, page_out
from catalog_admin.db.session import get_db
from catalog_admin.schemas.common import envelope
from catalog_admin.schemas.product_owner import ProductOwnerCreate, ProductOwnerListQuery, ProductOwnerUpdate
from catalog_admin.services import product_owners as service

router = APIRouter()


@router.get("")
def list_product_owners(query: Annotated[ProductOwnerListQuery, Query()], db: Session = Depends(get_db)):
    page = service.find_all_owners(db, query.model_dump(exclude_none=True))
    return envelope(page_out(page, owner_out))


@router.get("/{owner_id}")
def get_product_owner(owner_id: uuid.UUID, db: Session = Depends(get_db)):
    return envelope(owner_out(service.find_owner_or_404(db, owner_id)))


@router.post("", status_code=201)
def create_product_owner(payload: ProductOwnerCreate, db: Session = Depends(get_db)):
    owner = service.create_owner(db, payload)
    return envelope(owner_out(owner), status_code=201, message="Created successfully")


@router.put("/{owner_id}")
def update_product_owner(owner_id: uuid.UUID, payload: ProductOwnerUpdate, db: Session = Depends(get_db)):
    owner = service.update_owner(db, owner_id, payload)
    return envelope(owner_out(owner), message="Updated successfully")


@router.delete("/{owner_id}")
def delete_product_owner(owner_id: uuid.UUID, db: Session = Depends(get_db)):
    service.delete_owner(db, owner_id)
    return envelope(message="Deleted successfully")
