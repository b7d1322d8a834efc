import os
import unittest

from fastapi.testclient import TestClient

os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")

from catalog_admin.core.http_hardening import request_id_from_header
from catalog_admin.db.session import get_db
from catalog_admin.main import app

REQUEST_ID_PATTERN = r"^[A-Za-z0-9._-]{1,128}$"


def _idle_db():
    yield None


def _unavailable_db():
    raise RuntimeError("database unavailable")


class CatalogResponseHeaderTests(unittest.TestCase):
    def setUp(self):
        self.client = TestClient(app, raise_server_exceptions=False)

    def tearDown(self):
        self.client.close()
        app.dependency_overrides.clear()

    def assertCatalogHeaders(self, response, request_id=None):
        self.assertEqual(response.headers.get("x-content-type-options"), "nosniff")
        self.assertEqual(response.headers.get("x-frame-options"), "DENY")
        self.assertEqual(response.headers.get("referrer-policy"), "no-referrer")
        self.assertEqual(response.headers.get("cache-control"), "no-store")
        if request_id is None:
            self.assertRegex(str(response.headers.get("x-request-id")), REQUEST_ID_PATTERN)
        else:
            self.assertEqual(response.headers.get("x-request-id"), request_id)

    def test_health_carries_catalog_headers(self):
        response = self.client.get("/health")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"status": "ok"})
        self.assertCatalogHeaders(response)

    def test_invalid_request_id_is_replaced(self):
        response = self.client.get("/health", headers={"X-Request-ID": "bad id with spaces"})
        self.assertNotEqual(response.headers.get("x-request-id"), "bad id with spaces")
        self.assertCatalogHeaders(response)

    def test_not_found_envelope_echoes_request_id(self):
        response = self.client.get("/api/unknown", headers={"X-Request-ID": "catalog-404"})
        self.assertEqual(response.status_code, 404)
        body = response.json()
        self.assertFalse(body["success"])
        self.assertEqual(body["statusCode"], 404)
        self.assertEqual(body["requestId"], "catalog-404")
        self.assertCatalogHeaders(response, "catalog-404")

    def test_validation_envelope_carries_generated_request_id(self):
        app.dependency_overrides[get_db] = _idle_db
        response = self.client.get("/api/products", params={"limit": 0})
        self.assertEqual(response.status_code, 400)
        body = response.json()
        self.assertIn("limit", body["message"])
        self.assertEqual(body["requestId"], response.headers.get("x-request-id"))
        self.assertCatalogHeaders(response)

    def test_unhandled_error_keeps_headers_and_request_id(self):
        app.dependency_overrides[get_db] = _unavailable_db
        with self.assertLogs("catalog_admin.errors", level="ERROR"):
            response = self.client.get("/api/products", headers={"X-Request-ID": "catalog-500"})
        self.assertEqual(response.status_code, 500)
        self.assertEqual(
            response.json(),
            {
                "success": False,
                "statusCode": 500,
                "message": "Internal server error",
                "requestId": "catalog-500",
            },
        )
        self.assertCatalogHeaders(response, "catalog-500")

    def test_server_errors_are_logged_as_warnings(self):
        app.dependency_overrides[get_db] = _unavailable_db
        with self.assertLogs("catalog_admin.http", level="WARNING") as logs:
            self.client.get("/api/product-owners", headers={"X-Request-ID": "catalog-owners"})
        self.assertRegex(
            logs.output[-1],
            r"GET /api/product-owners status=500 duration_ms=\d+\.\d+ request_id=catalog-owners",
        )

    def test_access_log_line(self):
        with self.assertLogs("catalog_admin.http", level="INFO") as logs:
            self.client.get("/health", headers={"X-Request-ID": "trace-1"})
        self.assertRegex(logs.output[-1], r"INFO:.*GET /health status=200 duration_ms=\d+\.\d+ request_id=trace-1")

    def test_request_id_from_header(self):
        self.assertEqual(request_id_from_header(" abc-1 "), "abc-1")
        self.assertRegex(request_id_from_header(None), r"^[0-9a-f]{32}$")
        self.assertRegex(request_id_from_header("x" * 129), r"^[0-9a-f]{32}$")


if __name__ == "__main__":
    unittest.main()
