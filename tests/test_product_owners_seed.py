import os
import unittest

from sqlalchemy import delete

os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")

from tests.base import make_test_store

from catalog_admin.data.product_owners_seed import PRODUCT_OWNERS
from catalog_admin.models.product import Product
from catalog_admin.models.product_owner import ProductOwner
from catalog_admin.scripts.seed_product_owners import upsert_product_owners


class ProductOwnersSeedTests(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        cls.store = make_test_store()

    @classmethod
    def tearDownClass(cls):
        cls.store.dispose()

    def setUp(self):
        self.db = self.store.session()
        self.db.execute(delete(Product))
        self.db.execute(delete(ProductOwner))
        self.db.commit()

    def tearDown(self):
        self.db.close()

    def test_seed_creates_five_owners_and_is_idempotent(self):
        created, updated = upsert_product_owners(self.db, PRODUCT_OWNERS)
        self.assertEqual((created, updated), (5, 0))
        self.assertEqual(self.db.query(ProductOwner).count(), 5)
        stamps = {o.email: o.updated_at for o in self.db.query(ProductOwner).all()}

        created2, updated2 = upsert_product_owners(self.db, PRODUCT_OWNERS)
        self.assertEqual((created2, updated2), (0, 0))
        self.assertEqual(self.db.query(ProductOwner).count(), 5)
        self.assertEqual({o.email: o.updated_at for o in self.db.query(ProductOwner).all()}, stamps)

    def test_seed_rows_match_the_demo_owners(self):
        upsert_product_owners(self.db, PRODUCT_OWNERS)
        alice = self.db.query(ProductOwner).filter(ProductOwner.email == "alice.johnson@example.com").one()
        self.assertEqual(alice.name, "Alice Johnson")
        self.assertEqual(alice.phone, "+1-555-0101")

    def test_seed_updates_changed_owner_by_email(self):
        self.db.add(ProductOwner(name="Bob S.", email="bob.smith@example.com", phone=None))
        self.db.commit()

        created, updated = upsert_product_owners(self.db, PRODUCT_OWNERS)
        self.assertEqual((created, updated), (4, 1))
        bob = self.db.query(ProductOwner).filter(ProductOwner.email == "bob.smith@example.com").one()
        self.assertEqual(bob.name, "Bob Smith")
        self.assertEqual(bob.phone, "+1-555-0102")
        self.assertEqual(self.db.query(ProductOwner).count(), 5)

    def test_seed_email_match_ignores_case(self):
        owners = [{"name": "Eva Martinez", "email": "Eva.Martinez@Example.com", "phone": "+1-555-0105"}]
        upsert_product_owners(self.db, owners)
        created, updated = upsert_product_owners(self.db, PRODUCT_OWNERS[-1:])
        self.assertEqual((created, updated), (0, 0))
        self.assertEqual(self.db.query(ProductOwner).count(), 1)


if __name__ == "__main__":
    unittest.main()
