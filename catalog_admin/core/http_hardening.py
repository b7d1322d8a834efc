"""Request tracing and response headers for the catalog API.

Every response, including error envelopes built by the exception handlers,
carries the same request id and security headers. The 500 handler runs outside
the HTTP middleware, so headers are applied by `error_response` as well.
"""

from __future__ import annotations

import logging
import re
from time import perf_counter
from typing import Any, Mapping
from uuid import uuid4

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.responses import Response

from catalog_admin.schemas.common import envelope

REQUEST_ID_HEADER = "X-Request-ID"
_REQUEST_ID_RE = re.compile(r"^[A-Za-z0-9._-]{1,128}$")
_LOG = logging.getLogger("catalog_admin.http")

CATALOG_RESPONSE_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "no-referrer",
    "Cross-Origin-Resource-Policy": "same-origin",
    # List and detail payloads are cached by the admin client, never by intermediaries.
    "Cache-Control": "no-store",
}


def request_id_from_header(raw: str | None) -> str:
    value = str(raw or "").strip()
    if not value or not _REQUEST_ID_RE.fullmatch(value):
        return uuid4().hex
    return value


def request_id_of(request: Request) -> str:
    """Id assigned by the middleware, or a fresh one for requests it never saw."""
    request_id = getattr(request.state, "request_id", None)
    if request_id is None:
        request_id = request_id_from_header(request.headers.get(REQUEST_ID_HEADER))
        request.state.request_id = request_id
    return request_id


def apply_catalog_headers(response: Response, request_id: str) -> Response:
    for key, value in CATALOG_RESPONSE_HEADERS.items():
        response.headers[key] = value
    response.headers[REQUEST_ID_HEADER] = request_id
    return response


def error_response(
    request: Request,
    status_code: int,
    message: str,
    headers: Mapping[str, str] | None = None,
) -> JSONResponse:
    request_id = request_id_of(request)
    content: dict[str, Any] = envelope(status_code=status_code, message=message)
    content["requestId"] = request_id
    response = JSONResponse(status_code=status_code, content=content, headers=dict(headers) if headers else None)
    return apply_catalog_headers(response, request_id)


def install_http_hardening(app: FastAPI) -> None:
    @app.middleware("http")
    async def _catalog_request_middleware(request: Request, call_next):
        request_id = request_id_of(request)
        started_at = perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
        finally:
            duration_ms = (perf_counter() - started_at) * 1000.0
            log = _LOG.warning if status_code >= 500 else _LOG.info
            log(
                "%s %s status=%s duration_ms=%.2f request_id=%s",
                request.method,
                request.url.path,
                status_code,
                duration_ms,
                request_id,
            )
        return apply_catalog_headers(response, request_id)
