from __future__ import annotations

from typing import Any, Generic, List, Optional, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class PageOut(BaseModel, Generic[T]):
    items: List[T] = []
    total: int = 0


class ApiEnvelope(BaseModel):
    success: bool
    statusCode: int
    message: str
    data: Optional[Any] = None
    requestId: Optional[str] = None


def envelope(data: Any = None, *, status_code: int = 200, message: str = "Retrieved successfully") -> dict[str, Any]:
    payload: dict[str, Any] = {"success": 200 <= status_code < 400, "statusCode": status_code, "message": message}
    if data is not None:
        payload["data"] = data
    return payload
