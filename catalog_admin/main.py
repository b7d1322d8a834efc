import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
from catalog_admin.core.config import settings
from catalog_admin.core.http_hardening import error_response, install_http_hardening
from catalog_admin.core.logging_setup import configure_logging
from catalog_admin.db.session import dispose_store, init_store
from catalog_admin.api.router import router as api_router

logger = logging.getLogger("catalog_admin.errors")


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(settings)
    init_store()
    try:
        yield
    finally:
        dispose_store()


app = FastAPI(title=settings.APP_NAME, version="0.1.0", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
install_http_hardening(app)

app.include_router(api_router, prefix="/api")


def _validation_message(exc: RequestValidationError) -> str:
    details = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path"))
        message = str(error.get("msg") or "invalid value")
        details.append(f"{location}: {message}" if location else message)
    return "Validation failed: " + ", ".join(details)


@app.exception_handler(RequestValidationError)
async def _request_validation_handler(request: Request, exc: RequestValidationError):
    return error_response(request, 400, _validation_message(exc))


@app.exception_handler(StarletteHTTPException)
async def _http_exception_handler(request: Request, exc: StarletteHTTPException):
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    return error_response(request, exc.status_code, message, headers=getattr(exc, "headers", None))


@app.exception_handler(Exception)
async def _unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("unhandled error on %s %s", request.method, request.url.path)
    return error_response(request, 500, "Internal server error")


@app.get("/health")
def health():
    return {"status": "ok"}
