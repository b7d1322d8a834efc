from __future__ import annotations

from typing import Any

from sqlalchemy import inspect as sa_inspect

from catalog_admin.models.product import Product
from catalog_admin.models.product_owner import ProductOwner
from catalog_admin.schemas.product import ProductOut
from catalog_admin.schemas.product_owner import OwnedProductBrief, OwnerSummary, ProductOwnerOut
from catalog_admin.services.image_validation import encode_image
from catalog_admin.services.repository import Page


def _is_loaded(row: Any, attr: str) -> bool:
    return attr not in sa_inspect(row).unloaded


def owner_summary(owner: ProductOwner) -> OwnerSummary:
    return OwnerSummary(id=owner.id, name=owner.name, email=owner.email, phone=owner.phone)


def product_out(product: Product) -> dict[str, Any]:
    owner = owner_summary(product.owner) if _is_loaded(product, "owner") and product.owner is not None else None
    return ProductOut(
        id=product.id,
        name=product.name,
        sku=product.sku,
        price=float(product.price),
        inventory=product.inventory,
        status=product.status,
        owner_id=product.owner_id,
        image=encode_image(product.image),
        image_mime_type=product.image_mime_type,
        owner=owner,
    ).model_dump(mode="json", by_alias=True)


def owner_out(owner: ProductOwner) -> dict[str, Any]:
    products = None
    if _is_loaded(owner, "products"):
        products = [
            OwnedProductBrief(
                id=p.id,
                name=p.name,
                sku=p.sku,
                price=float(p.price),
                inventory=p.inventory,
                status=p.status,
            )
            for p in sorted(owner.products, key=lambda p: (p.name, str(p.id)))
        ]
    out = ProductOwnerOut(id=owner.id, name=owner.name, email=owner.email, phone=owner.phone, products=products)
    return out.model_dump(mode="json", exclude={"products"} if products is None else None)


def page_out(page: Page, serialize) -> dict[str, Any]:
    return {"items": [serialize(row) for row in page.items], "total": page.total}
