import base64
import os
import unittest

from fastapi.testclient import TestClient
from sqlalchemy import delete
from sqlalchemy.pool import StaticPool

# Ensure settings can be initialized in test environments
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")

from catalog_admin.db.session import StoreHandle, create_store_engine, get_db
from catalog_admin.main import app
from catalog_admin.models.product import Product
from catalog_admin.models.product_owner import ProductOwner

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00\x00\x00\rIHDR" + b"\x00" * 16
JPEG_BYTES = b"\xff\xd8\xff\xe0" + b"\x00\x10JFIF" + b"\x00" * 16
PNG_B64 = base64.b64encode(PNG_BYTES).decode("ascii")
JPEG_B64 = base64.b64encode(JPEG_BYTES).decode("ascii")


def make_test_store() -> StoreHandle:
    engine = create_store_engine(
        "sqlite+pysqlite:///:memory:",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    ProductOwner.__table__.create(bind=engine)
    Product.__table__.create(bind=engine)
    return StoreHandle(engine)


class CatalogApiTestBase(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        cls.store = make_test_store()
        cls.SessionLocal = cls.store.session_factory

    @classmethod
    def tearDownClass(cls):
        Product.__table__.drop(bind=cls.store.engine)
        ProductOwner.__table__.drop(bind=cls.store.engine)
        cls.store.dispose()

    def setUp(self):
        with self.SessionLocal() as db:
            db.execute(delete(Product))
            db.execute(delete(ProductOwner))
            db.commit()

        def override_get_db():
            db = self.SessionLocal()
            try:
                yield db
            finally:
                db.close()

        app.dependency_overrides[get_db] = override_get_db
        self.client = TestClient(app)

    def tearDown(self):
        self.client.close()
        app.dependency_overrides.clear()

    def create_owner(self, name="Acme", email=None, phone=None) -> dict:
        response = self.client.post(
            "/api/product-owners",
            json={"name": name, "email": email or f"{name.lower().replace(' ', '.')}@example.com", "phone": phone},
        )
        self.assertEqual(response.status_code, 201, response.text)
        return response.json()["data"]

    def create_product(self, owner_id, name="Widget", sku=None, **extra) -> dict:
        payload = {
            "name": name,
            "sku": sku or name.upper().replace(" ", "-"),
            "price": 10,
            "inventory": 1,
            "ownerId": owner_id,
        }
        payload.update(extra)
        response = self.client.post("/api/products", json=payload)
        self.assertEqual(response.status_code, 201, response.text)
        return response.json()["data"]

    def product_count(self) -> int:
        with self.SessionLocal() as db:
            return db.query(Product).count()

    def owner_count(self) -> int:
        with self.SessionLocal() as db:
            return db.query(ProductOwner).count()
