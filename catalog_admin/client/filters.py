from __future__ import annotations

from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter

from catalog_admin.services.list_query import PRODUCT_LIST, PRODUCT_OWNER_LIST, ListResource


class FilterOption(BaseModel):
    label: str
    value: str


class TextFilter(BaseModel):
    kind: Literal["text"] = "text"
    key: str
    label: str
    placeholder: Optional[str] = None


class SelectFilter(BaseModel):
    kind: Literal["select"] = "select"
    key: str
    label: str
    options: List[FilterOption] = []


class AutocompleteFilter(BaseModel):
    kind: Literal["autocomplete"] = "autocomplete"
    key: str
    label: str
    options: List[FilterOption] = []
    placeholder: Optional[str] = None


FilterConfig = Annotated[Union[TextFilter, SelectFilter, AutocompleteFilter], Field(discriminator="kind")]
filter_config_adapter = TypeAdapter(FilterConfig)


def is_debounced(config: FilterConfig) -> bool:
    """Free-text inputs settle through a debounce; option pickers apply at once."""
    if isinstance(config, TextFilter):
        return True
    if isinstance(config, (SelectFilter, AutocompleteFilter)):
        return False
    raise TypeError(f"Unknown filter config: {config!r}")


def normalize_filter_value(config: FilterConfig, value: str | None) -> str:
    """Value to store for ``config``; an option outside the list clears the filter."""
    if isinstance(config, TextFilter):
        return str(value or "")
    if isinstance(config, (SelectFilter, AutocompleteFilter)):
        text = str(value or "").strip()
        allowed = {option.value for option in config.options}
        return text if text in allowed else ""
    raise TypeError(f"Unknown filter config: {config!r}")


def suggest_options(config: AutocompleteFilter, typed: str, limit: int = 10) -> list[FilterOption]:
    needle = str(typed or "").strip().lower()
    if not needle:
        return list(config.options[:limit])
    return [option for option in config.options if needle in option.label.lower()][:limit]


STATUS_OPTIONS = [FilterOption(label="Active", value="ACTIVE"), FilterOption(label="Inactive", value="INACTIVE")]

PRODUCT_FILTERS: list[FilterConfig] = [
    TextFilter(key="name", label="Name", placeholder="Search products..."),
    TextFilter(key="sku", label="SKU", placeholder="Filter by SKU..."),
    TextFilter(key="ownerName", label="Owner", placeholder="Filter by owner..."),
    SelectFilter(key="status", label="Status", options=STATUS_OPTIONS),
]

PRODUCT_OWNER_FILTERS: list[FilterConfig] = [
    TextFilter(key="name", label="Name", placeholder="Search owners..."),
    TextFilter(key="email", label="Email", placeholder="Filter by email..."),
]


def filters_for(resource: ListResource) -> list[FilterConfig]:
    if resource is PRODUCT_LIST:
        return list(PRODUCT_FILTERS)
    if resource is PRODUCT_OWNER_LIST:
        return list(PRODUCT_OWNER_FILTERS)
    return [TextFilter(key=param, label=param) for param in resource.filter_params]
