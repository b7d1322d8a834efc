from __future__ import annotations

from typing import Any, Mapping, Protocol
from urllib.parse import parse_qsl, urlencode

ParamValue = str | int


class History(Protocol):
    @property
    def query(self) -> str:
        ...

    def replace(self, query: str) -> None:
        ...


class MemoryHistory:
    """Address-bar stand-in: one path, a query string and a replace() log."""

    def __init__(self, url: str = "/"):
        path, _, query = url.partition("?")
        self.path = path or "/"
        self._query = query
        self.replacements = 0

    @property
    def query(self) -> str:
        return self._query

    @property
    def url(self) -> str:
        return f"{self.path}?{self._query}" if self._query else self.path

    def replace(self, query: str) -> None:
        self._query = query
        self.replacements += 1

    def navigate(self, url: str) -> None:
        path, _, query = url.partition("?")
        self.path = path or self.path
        self._query = query


def _is_numeric_default(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


class UrlQueryState:
    """Typed list parameters persisted as a diff against their defaults."""

    def __init__(self, defaults: Mapping[str, ParamValue], history: History):
        self.defaults = dict(defaults)
        self.history = history

    def _pairs(self) -> list[tuple[str, str]]:
        return parse_qsl(self.history.query, keep_blank_values=True)

    def read(self) -> dict[str, ParamValue]:
        present: dict[str, str] = {}
        for key, value in self._pairs():
            present.setdefault(key, value)

        result: dict[str, ParamValue] = dict(self.defaults)
        for key, default in self.defaults.items():
            if key not in present:
                continue
            raw = present[key]
            if _is_numeric_default(default):
                try:
                    result[key] = int(raw.strip())
                except ValueError:
                    result[key] = default
            else:
                result[key] = raw
        return result

    def _is_default(self, key: str, value: Any) -> bool:
        if value is None or value == "":
            return True
        return key in self.defaults and str(value) == str(self.defaults[key])

    def write(self, patch: Mapping[str, Any]) -> None:
        current: dict[str, str] = {}
        for key, value in self._pairs():
            current.setdefault(key, value)

        for key, value in patch.items():
            if self._is_default(key, value):
                current.pop(key, None)
            else:
                current[key] = str(value)

        query = urlencode(list(current.items()))
        if query == self.history.query:
            return
        self.history.replace(query)
