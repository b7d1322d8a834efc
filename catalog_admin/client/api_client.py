"""Async HTTP client for the catalog admin API.

Reads are cached per request and tagged with the resources they contain;
mutations invalidate the tags they make stale, so the next read of an
affected list or detail goes back to the server. Requests and responses
are the same pydantic models the API validates with.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping

import httpx
from pydantic import BaseModel, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from catalog_admin.client.config import ClientConfig
from catalog_admin.schemas.common import ApiEnvelope, PageOut
from catalog_admin.schemas.product import ProductCreate, ProductOut, ProductUpdate
from catalog_admin.schemas.product_owner import ProductOwnerCreate, ProductOwnerOut, ProductOwnerUpdate

logger = logging.getLogger(__name__)

CacheTag = tuple[str, str]

PRODUCT = "Product"
PRODUCT_OWNER = "ProductOwner"
LIST_ID = "LIST"
OWNER_PREFIX = "OWNER-"


def owner_tag(owner_id: Any) -> CacheTag:
    return (PRODUCT, f"{OWNER_PREFIX}{owner_id}")


_PRODUCT_PAGE = TypeAdapter(PageOut[ProductOut])
_PRODUCT_ROWS = TypeAdapter(list[ProductOut])
_PRODUCT_DETAIL = TypeAdapter(ProductOut)
_OWNER_PAGE = TypeAdapter(PageOut[ProductOwnerOut])
_OWNER_DETAIL = TypeAdapter(ProductOwnerOut)


def _wire(payload: BaseModel) -> dict[str, Any]:
    """Only the fields the caller set, so explicit nulls (image removal) survive."""
    return payload.model_dump(mode="json", by_alias=True, exclude_unset=True)


class ApiError(Exception):
    def __init__(self, status_code: int, message: str, request_id: str | None = None):
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message
        self.request_id = request_id


class QueryCache:
    def __init__(self):
        self._entries: dict[str, tuple[frozenset[CacheTag], Any]] = {}

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, key: str) -> Any:
        entry = self._entries.get(key)
        return None if entry is None else entry[1]

    def put(self, key: str, value: Any, tags: Iterable[CacheTag]) -> None:
        self._entries[key] = (frozenset(tags), value)

    def tags(self) -> set[CacheTag]:
        out: set[CacheTag] = set()
        for tags, _ in self._entries.values():
            out |= tags
        return out

    def invalidate(self, tags: Iterable[CacheTag]) -> int:
        stale = set(tags)
        keys = [key for key, (entry_tags, _) in self._entries.items() if entry_tags & stale]
        for key in keys:
            del self._entries[key]
        return len(keys)

    def invalidate_prefix(self, type_: str, prefix: str) -> int:
        keys = [
            key
            for key, (entry_tags, _) in self._entries.items()
            if any(t == type_ and i != LIST_ID and str(i).startswith(prefix) for t, i in entry_tags)
        ]
        for key in keys:
            del self._entries[key]
        return len(keys)

    def clear(self) -> None:
        self._entries.clear()


def _cache_key(path: str, params: Mapping[str, Any] | None) -> str:
    if not params:
        return path
    query = "&".join(f"{k}={params[k]}" for k in sorted(params))
    return f"{path}?{query}"


class CatalogApiClient:
    def __init__(
        self,
        config: ClientConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        self.config = config
        self.cache = QueryCache()
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=config.api_base_url,
            timeout=config.timeout_seconds,
            transport=transport,
        )

    async def __aenter__(self) -> "CatalogApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        json: Any = None,
    ) -> Any:
        response = await self._client.request(method, path, params=params, json=json)
        try:
            body = ApiEnvelope.model_validate(response.json())
        except (ValueError, PydanticValidationError):
            logger.warning("%s %s returned a non-envelope body (status=%s)", method, path, response.status_code)
            raise ApiError(response.status_code, response.reason_phrase or "Unexpected response")
        if response.status_code >= 400 or not body.success:
            raise ApiError(body.statusCode or response.status_code, body.message, body.requestId)
        return body.data

    async def _cached_get(
        self,
        path: str,
        tags: Iterable[CacheTag],
        adapter: TypeAdapter,
        *,
        params: Mapping[str, Any] | None = None,
        force: bool = False,
    ) -> Any:
        key = _cache_key(path, params)
        if not force and key in self.cache:
            return self.cache.get(key)
        data = adapter.validate_python(await self._request("GET", path, params=params))
        self.cache.put(key, data, tags)
        return data

    def _known_owner_of(self, product_id: Any) -> str | None:
        cached = self.cache.get(_cache_key(f"/products/{product_id}", None))
        if isinstance(cached, ProductOut):
            return str(cached.owner_id)
        return None

    def _invalidate_product(self, product_id: str | None, owner_ids: list[Any]) -> None:
        tags: set[CacheTag] = {(PRODUCT, LIST_ID)}
        if product_id is not None:
            tags.add((PRODUCT, str(product_id)))
        known = [str(o) for o in owner_ids if o]
        for owner_id in known:
            tags.add(owner_tag(owner_id))
            tags.add((PRODUCT_OWNER, owner_id))
        self.cache.invalidate(tags)
        if None in owner_ids or not known:
            # Owner not known locally: every per-owner list may be stale.
            self.cache.invalidate_prefix(PRODUCT, OWNER_PREFIX)
            self.cache.invalidate_prefix(PRODUCT_OWNER, "")

    def _invalidate_owner(self, owner_id: str | None) -> None:
        tags: set[CacheTag] = {(PRODUCT_OWNER, LIST_ID), (PRODUCT, LIST_ID)}
        if owner_id is not None:
            tags.add((PRODUCT_OWNER, str(owner_id)))
            tags.add(owner_tag(owner_id))
        self.cache.invalidate(tags)

    # products

    async def list_products(self, params: Mapping[str, Any], *, force: bool = False) -> PageOut[ProductOut]:
        return await self._cached_get(
            "/products", [(PRODUCT, LIST_ID)], _PRODUCT_PAGE, params=params, force=force
        )

    async def get_product(self, product_id: Any, *, force: bool = False) -> ProductOut:
        return await self._cached_get(
            f"/products/{product_id}", [(PRODUCT, str(product_id))], _PRODUCT_DETAIL, force=force
        )

    async def get_products_by_owner(self, owner_id: Any, *, force: bool = False) -> list[ProductOut]:
        return await self._cached_get(
            f"/products/owner/{owner_id}", [owner_tag(owner_id)], _PRODUCT_ROWS, force=force
        )

    async def create_product(self, payload: ProductCreate) -> ProductOut:
        data = await self._request("POST", "/products", json=_wire(payload))
        product = ProductOut.model_validate(data)
        self._invalidate_product(None, [product.owner_id])
        return product

    async def update_product(self, product_id: Any, payload: ProductUpdate) -> ProductOut:
        previous_owner = self._known_owner_of(product_id)
        data = await self._request("PUT", f"/products/{product_id}", json=_wire(payload))
        product = ProductOut.model_validate(data)
        self._invalidate_product(product_id, [previous_owner, product.owner_id])
        return product

    async def delete_product(self, product_id: Any) -> None:
        previous_owner = self._known_owner_of(product_id)
        await self._request("DELETE", f"/products/{product_id}")
        self._invalidate_product(product_id, [previous_owner])

    # product owners

    async def list_product_owners(
        self, params: Mapping[str, Any], *, force: bool = False
    ) -> PageOut[ProductOwnerOut]:
        return await self._cached_get(
            "/product-owners", [(PRODUCT_OWNER, LIST_ID)], _OWNER_PAGE, params=params, force=force
        )

    async def get_product_owner(self, owner_id: Any, *, force: bool = False) -> ProductOwnerOut:
        return await self._cached_get(
            f"/product-owners/{owner_id}", [(PRODUCT_OWNER, str(owner_id))], _OWNER_DETAIL, force=force
        )

    async def create_product_owner(self, payload: ProductOwnerCreate) -> ProductOwnerOut:
        data = await self._request("POST", "/product-owners", json=_wire(payload))
        self._invalidate_owner(None)
        return ProductOwnerOut.model_validate(data)

    async def update_product_owner(self, owner_id: Any, payload: ProductOwnerUpdate) -> ProductOwnerOut:
        data = await self._request("PUT", f"/product-owners/{owner_id}", json=_wire(payload))
        self._invalidate_owner(owner_id)
        return ProductOwnerOut.model_validate(data)

    async def delete_product_owner(self, owner_id: Any) -> None:
        await self._request("DELETE", f"/product-owners/{owner_id}")
        self._invalidate_owner(owner_id)
