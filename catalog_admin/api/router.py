from fastapi import APIRouter
from catalog_admin.api import product_owners, products

router = APIRouter()
router.include_router(products.router, prefix="/products", tags=["Products"])
router.include_router(product_owners.router, prefix="/product-owners", tags=["ProductOwners"])
