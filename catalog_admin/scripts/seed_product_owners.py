"""Idempotent seed of the demo product owners, keyed by email.

Run with ``python -m catalog_admin.scripts.seed_product_owners`` against the
database named by ``DATABASE_URL``.
"""

from __future__ import annotations

from sqlalchemy.orm import Session

from catalog_admin.core.config import settings
from catalog_admin.core.logging_setup import configure_logging
from catalog_admin.data.product_owners_seed import PRODUCT_OWNERS
from catalog_admin.db.session import dispose_store, get_store, init_store
from catalog_admin.models.common import utcnow
from catalog_admin.models.product_owner import ProductOwner


def upsert_product_owners(db: Session, owners: list[dict]) -> tuple[int, int]:
    created = 0
    updated = 0

    for item in owners:
        email = str(item["email"]).strip().lower()
        name = str(item["name"]).strip()
        phone = str(item.get("phone") or "").strip() or None

        row = db.query(ProductOwner).filter(ProductOwner.email == email).first()
        if row is None:
            db.add(ProductOwner(name=name, email=email, phone=phone))
            created += 1
            continue

        changed = False
        if row.name != name:
            row.name = name
            changed = True
        if row.phone != phone:
            row.phone = phone
            changed = True

        # Unchanged rows keep their updated_at.
        if changed:
            row.updated_at = utcnow()
            updated += 1

    db.commit()
    return created, updated


def main() -> None:
    configure_logging(settings)
    init_store()
    try:
        with get_store().session() as db:
            created, updated = upsert_product_owners(db, PRODUCT_OWNERS)
            total = db.query(ProductOwner).count()
    finally:
        dispose_store()
    print(f"product owners seed done: created={created}, updated={updated}, total={total}")


if __name__ == "__main__":
    main()
