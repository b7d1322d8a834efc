"""Debounced synchronisation of a locally edited text value.

The local value follows every keystroke. The owner is told about it through
``on_change`` only once the value has been stable for ``delay`` seconds. When
the owner pushes a new value back (``sync``), it replaces the local value
unless it is just the echo of what this object emitted last, so an echo can
never clobber keystrokes typed after the emission.
"""

from __future__ import annotations

import asyncio
from typing import Callable, Protocol


class TimerHandle(Protocol):
    def cancel(self) -> None:
        ...


class Scheduler(Protocol):
    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        ...


class DebouncedValue:
    def __init__(
        self,
        value: str,
        on_change: Callable[[str], None],
        *,
        delay: float = 0.3,
        scheduler: Scheduler | None = None,
    ):
        self._local = value
        self._last_emitted = value
        self._on_change = on_change
        self._delay = max(0.0, float(delay))
        self._scheduler = scheduler
        self._timer: TimerHandle | None = None

    @property
    def value(self) -> str:
        return self._local

    @property
    def last_emitted(self) -> str:
        return self._last_emitted

    @property
    def pending(self) -> bool:
        return self._timer is not None

    def _get_scheduler(self) -> Scheduler:
        if self._scheduler is None:
            self._scheduler = asyncio.get_running_loop()
        return self._scheduler

    def set_on_change(self, on_change: Callable[[str], None]) -> None:
        self._on_change = on_change

    def edit(self, value: str) -> None:
        self._local = value
        self._cancel_timer()
        self._timer = self._get_scheduler().call_later(self._delay, self._fire)

    def sync(self, external: str) -> None:
        if external == self._last_emitted:
            # Echo of our own emission (or no change): keep whatever was typed since.
            return
        self._cancel_timer()
        self._local = external
        self._last_emitted = external

    def flush(self) -> None:
        if self._timer is None:
            return
        self._cancel_timer()
        self._emit_if_changed()

    def cancel(self) -> None:
        self._cancel_timer()

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _fire(self) -> None:
        self._timer = None
        self._emit_if_changed()

    def _emit_if_changed(self) -> None:
        if self._local == self._last_emitted:
            return
        self._last_emitted = self._local
        self._on_change(self._local)
