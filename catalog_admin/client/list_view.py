"""List view controller for the admin list screens.

The URL query string is the source of truth for filters, paging and sorting.
Text filters settle through a DebouncedValue before they reach the URL; every
URL change schedules a refresh, and only the newest refresh may publish its
result.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Mapping, Optional, Union

import httpx

from catalog_admin.client.api_client import ApiError
from catalog_admin.client.config import ClientConfig
from catalog_admin.client.debounce import DebouncedValue, Scheduler
from catalog_admin.client.filters import FilterConfig, filters_for, is_debounced, normalize_filter_value
from catalog_admin.client.url_state import UrlQueryState
from catalog_admin.schemas.common import PageOut
from catalog_admin.services.list_query import (
    LIMIT_KEY,
    PAGE_KEY,
    SORT_BY_KEY,
    SORT_ORDER_KEY,
    SORT_ORDERS,
    ListResource,
    build_request_params,
)

logger = logging.getLogger(__name__)

Fetch = Callable[[Mapping[str, Any]], Awaitable[Union[PageOut, Mapping[str, Any]]]]


@dataclass
class ListViewState:
    items: list[Any] = field(default_factory=list)
    total: int = 0
    loading: bool = False
    error: Optional[str] = None
    params: dict[str, Any] = field(default_factory=dict)


class ListViewController:
    def __init__(
        self,
        resource: ListResource,
        url_state: UrlQueryState,
        fetch: Fetch,
        config: ClientConfig,
        *,
        filters: list[FilterConfig] | None = None,
        scheduler: Scheduler | None = None,
    ):
        self.resource = resource
        self.url_state = url_state
        self.config = config
        self.filters = {f.key: f for f in (filters if filters is not None else filters_for(resource))}
        self.state = ListViewState(params=self.params)
        self._fetch = fetch
        self._scheduler = scheduler
        self._inputs: dict[str, DebouncedValue] = {}
        self._sequence = 0
        self._tasks: set[asyncio.Task] = set()

    @property
    def params(self) -> dict[str, Any]:
        raw = self.url_state.read()
        out = dict(raw)
        if out.get(LIMIT_KEY) not in self.config.page_size_options:
            out[LIMIT_KEY] = self.resource.default_limit
        if not isinstance(out.get(PAGE_KEY), int) or out[PAGE_KEY] < 1:
            out[PAGE_KEY] = self.resource.default_page
        if out.get(SORT_BY_KEY) not in self.resource.sort_fields:
            out[SORT_BY_KEY] = self.resource.default_sort_by
        if out.get(SORT_ORDER_KEY) not in SORT_ORDERS:
            out[SORT_ORDER_KEY] = self.resource.default_sort_order
        for key, config in self.filters.items():
            if not is_debounced(config):
                out[key] = normalize_filter_value(config, out.get(key))
        return out

    def input_value(self, key: str) -> str:
        """What the filter control should display right now."""
        if key in self._inputs:
            return self._inputs[key].value
        return str(self.params.get(key) or "")

    def _input(self, key: str) -> DebouncedValue:
        if key not in self._inputs:
            self._inputs[key] = DebouncedValue(
                str(self.params.get(key) or ""),
                lambda value, key=key: self.set_filter(key, value),
                delay=self.config.debounce_seconds,
                scheduler=self._scheduler,
            )
        return self._inputs[key]

    def input(self, key: str, value: str) -> None:
        config = self.filters.get(key)
        if config is None:
            raise KeyError(f"Unknown filter: {key}")
        if is_debounced(config):
            self._input(key).edit(value)
        else:
            self.set_filter(key, normalize_filter_value(config, value))

    def set_filter(self, key: str, value: str) -> None:
        self.url_state.write({key: value, PAGE_KEY: self.resource.default_page})
        self.schedule_refresh()

    def set_page(self, page: int) -> None:
        self.url_state.write({PAGE_KEY: max(1, int(page))})
        self.schedule_refresh()

    def set_limit(self, limit: int) -> None:
        if limit not in self.config.page_size_options:
            logger.debug("ignoring page size %s outside %s", limit, self.config.page_size_options)
            return
        self.url_state.write({LIMIT_KEY: limit, PAGE_KEY: self.resource.default_page})
        self.schedule_refresh()

    def set_sort(self, sort_by: str) -> None:
        if sort_by not in self.resource.sort_fields:
            return
        current = self.params
        if current[SORT_BY_KEY] == sort_by and current[SORT_ORDER_KEY] == "asc":
            order = "desc"
        else:
            order = "asc"
        self.url_state.write({SORT_BY_KEY: sort_by, SORT_ORDER_KEY: order, PAGE_KEY: self.resource.default_page})
        self.schedule_refresh()

    def clear_filters(self) -> None:
        patch: dict[str, Any] = {key: "" for key in self.filters}
        patch[PAGE_KEY] = self.resource.default_page
        self.url_state.write(patch)
        self.sync_from_url()

    def sync_from_url(self) -> None:
        """Pick up a URL changed from outside (navigation, back button)."""
        current = self.params
        for key, debounced in self._inputs.items():
            debounced.sync(str(current.get(key) or ""))
        self.schedule_refresh()

    def schedule_refresh(self) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(self.refresh())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def refresh(self) -> ListViewState:
        self._sequence += 1
        token = self._sequence
        params = self.params
        self.state.loading = True
        self.state.params = params
        try:
            data = await self._fetch(build_request_params(params, self.resource))
            page = data if isinstance(data, PageOut) else PageOut.model_validate(data)
        except (ApiError, httpx.HTTPError) as exc:
            if token != self._sequence:
                return self.state
            logger.warning("%s list fetch failed: %s", self.resource.name, exc)
            self.state = ListViewState(error=str(getattr(exc, "message", None) or exc), params=params)
            return self.state
        except Exception:
            if token != self._sequence:
                return self.state
            # Refresh tasks never finish with an exception.
            logger.exception("%s list refresh crashed for %s", self.resource.name, params)
            self.state = ListViewState(error=f"Failed to load {self.resource.name} list", params=params)
            return self.state
        if token != self._sequence:
            logger.debug("discarding stale %s page for %s", self.resource.name, params)
            return self.state
        self.state = ListViewState(items=list(page.items), total=page.total, params=params)
        return self.state

    async def wait_idle(self) -> None:
        while self._tasks:
            await asyncio.gather(*list(self._tasks))

    def close(self) -> None:
        for debounced in self._inputs.values():
            debounced.cancel()
        for task in list(self._tasks):
            task.cancel()
