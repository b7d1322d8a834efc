import os
import subprocess
import sys
import tempfile
import unittest
from pathlib import Path

from sqlalchemy import create_engine, inspect


class MigrationTests(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        cls.project_root = Path(__file__).resolve().parents[1]
        cls.tmpdir = tempfile.TemporaryDirectory()
        cls.db_url = f"sqlite+pysqlite:///{Path(cls.tmpdir.name) / 'migration_test.db'}"
        cls._run_alembic("upgrade", "head")
        cls.engine = create_engine(cls.db_url)
        cls.inspector = inspect(cls.engine)

    @classmethod
    def tearDownClass(cls):
        if hasattr(cls, "engine"):
            cls.engine.dispose()
        cls.tmpdir.cleanup()

    @classmethod
    def _run_alembic(cls, *args):
        env = os.environ.copy()
        env["DATABASE_URL"] = cls.db_url
        env["PYTHONPATH"] = str(cls.project_root)
        return subprocess.run(
            [sys.executable, "-m", "alembic", *args],
            cwd=cls.project_root,
            env=env,
            check=True,
            capture_output=True,
            text=True,
        )

    def test_upgrade_head_creates_expected_tables(self):
        tables = set(self.inspector.get_table_names())
        self.assertIn("product_owners", tables)
        self.assertIn("products", tables)
        self.assertIn("alembic_version", tables)

    def test_products_table_shape(self):
        columns = {col["name"]: col for col in self.inspector.get_columns("products")}
        for name in ("id", "name", "sku", "price", "inventory", "status", "image", "image_mime_type", "owner_id"):
            self.assertIn(name, columns)
        self.assertTrue(columns["image"]["nullable"])
        self.assertFalse(columns["sku"]["nullable"])

        foreign_keys = self.inspector.get_foreign_keys("products")
        self.assertEqual(len(foreign_keys), 1)
        self.assertEqual(foreign_keys[0]["referred_table"], "product_owners")
        self.assertEqual((foreign_keys[0].get("options") or {}).get("ondelete"), "RESTRICT")

        unique_indexes = {ix["name"] for ix in self.inspector.get_indexes("products") if ix.get("unique")}
        self.assertIn("ix_products_sku", unique_indexes)

    def test_owner_email_is_unique(self):
        unique_indexes = {ix["name"] for ix in self.inspector.get_indexes("product_owners") if ix.get("unique")}
        self.assertIn("ix_product_owners_email", unique_indexes)


if __name__ == "__main__":
    unittest.main()
