"""List Query Builder.

Turns a flat list-parameter mapping (filters plus page/limit/sortBy/sortOrder)
into a QueryDescriptor for the resource services, and into the minimal wire
query the admin client sends to a list endpoint. Both paths share the same
rule: an empty filter is omitted, never evaluated.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal, Mapping

MatchKind = Literal["eq", "contains"]
SortOrder = Literal["asc", "desc"]

SORT_ORDERS: tuple[str, ...] = ("asc", "desc")

PAGE_KEY = "page"
LIMIT_KEY = "limit"
SORT_BY_KEY = "sortBy"
SORT_ORDER_KEY = "sortOrder"


@dataclass(frozen=True)
class MatchExpression:
    kind: MatchKind
    value: str

    @classmethod
    def eq(cls, value: str) -> "MatchExpression":
        return cls(kind="eq", value=value)

    @classmethod
    def contains(cls, value: str) -> "MatchExpression":
        return cls(kind="contains", value=value)


@dataclass(frozen=True)
class FilterField:
    param: str
    column: str
    match: MatchKind

    @property
    def relation(self) -> str | None:
        # "owner.name" filters through the "owner" relation.
        if "." not in self.column:
            return None
        return self.column.split(".", 1)[0]


@dataclass(frozen=True)
class ListResource:
    name: str
    filters: tuple[FilterField, ...]
    sort_fields: tuple[str, ...]
    relations: frozenset[str] = frozenset()
    default_sort_by: str = "name"
    default_sort_order: SortOrder = "asc"
    default_page: int = 1
    default_limit: int = 10

    @property
    def filter_params(self) -> tuple[str, ...]:
        return tuple(f.param for f in self.filters)

    def defaults(self) -> dict[str, Any]:
        values: dict[str, Any] = {f.param: "" for f in self.filters}
        values[PAGE_KEY] = self.default_page
        values[LIMIT_KEY] = self.default_limit
        values[SORT_BY_KEY] = self.default_sort_by
        values[SORT_ORDER_KEY] = self.default_sort_order
        return values


@dataclass
class QueryDescriptor:
    where: dict[str, MatchExpression] = field(default_factory=dict)
    relations: set[str] = field(default_factory=set)
    skip: int = 0
    take: int = 10
    order: dict[str, str] = field(default_factory=dict)


PRODUCT_LIST = ListResource(
    name="products",
    filters=(
        FilterField(param="name", column="name", match="contains"),
        FilterField(param="sku", column="sku", match="contains"),
        FilterField(param="ownerName", column="owner.name", match="contains"),
        FilterField(param="status", column="status", match="eq"),
    ),
    sort_fields=("name", "sku", "price", "inventory", "status"),
    relations=frozenset({"owner"}),
)

PRODUCT_OWNER_LIST = ListResource(
    name="product-owners",
    filters=(
        FilterField(param="name", column="name", match="contains"),
        FilterField(param="email", column="email", match="eq"),
    ),
    sort_fields=("name", "email", "phone"),
)


def _filter_value(raw: Any) -> str:
    if raw is None:
        return ""
    return str(raw).strip()


def _positive_int(raw: Any, default: int) -> int:
    if isinstance(raw, bool):
        return default
    try:
        value = int(str(raw).strip()) if not isinstance(raw, int) else raw
    except (TypeError, ValueError):
        return default
    return value if value >= 1 else default


def build_query(params: Mapping[str, Any], resource: ListResource = PRODUCT_LIST) -> QueryDescriptor:
    where: dict[str, MatchExpression] = {}
    relations = set(resource.relations)
    for f in resource.filters:
        value = _filter_value(params.get(f.param))
        if not value:
            continue
        where[f.column] = MatchExpression(kind=f.match, value=value)
        if f.relation:
            relations.add(f.relation)

    page = _positive_int(params.get(PAGE_KEY), resource.default_page)
    limit = _positive_int(params.get(LIMIT_KEY), resource.default_limit)
    # Enum membership is checked at the request boundary; pass values through as given.
    sort_by = str(params.get(SORT_BY_KEY) or resource.default_sort_by)
    sort_order = str(params.get(SORT_ORDER_KEY) or resource.default_sort_order)

    return QueryDescriptor(
        where=where,
        relations=relations,
        skip=(page - 1) * limit,
        take=limit,
        order={sort_by: sort_order},
    )


def build_request_params(params: Mapping[str, Any], resource: ListResource = PRODUCT_LIST) -> dict[str, Any]:
    request: dict[str, Any] = {}
    for f in resource.filters:
        value = _filter_value(params.get(f.param))
        if value:
            request[f.param] = value
    request[PAGE_KEY] = _positive_int(params.get(PAGE_KEY), resource.default_page)
    request[LIMIT_KEY] = _positive_int(params.get(LIMIT_KEY), resource.default_limit)
    request[SORT_BY_KEY] = str(params.get(SORT_BY_KEY) or resource.default_sort_by)
    request[SORT_ORDER_KEY] = str(params.get(SORT_ORDER_KEY) or resource.default_sort_order)
    return request
