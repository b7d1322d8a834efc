from __future__ import annotations

from fastapi import HTTPException


class CatalogError(HTTPException):
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str | None = None):
        super().__init__(status_code=type(self).status_code, detail=message or type(self).default_message)

    @property
    def message(self) -> str:
        return str(self.detail)


class ValidationError(CatalogError):
    status_code = 400
    default_message = "Bad request"

    def __init__(self, message: str | None = None, *, reason: str | None = None):
        super().__init__(message)
        self.reason = reason


class NotFoundError(CatalogError):
    status_code = 404
    default_message = "Not found"


class ConflictError(CatalogError):
    status_code = 409
    default_message = "Conflict"


class ReferentialIntegrityError(CatalogError):
    """Delete blocked because other rows still reference the target."""

    status_code = 409
    default_message = "Record is still referenced by other records"


class InternalError(CatalogError):
    status_code = 500
    default_message = "Internal server error"
