# src/app/services/debounce.py
"""
Per-channel debouncing for search input.

Free-text query changes are delayed until a quiet period has passed; facet
selections use their own (by default zero) delay. Timers come from a
``Scheduler`` so callers can run on an asyncio loop or drive time manually.
"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Callable, Optional, Protocol


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def __call__(self, delay: float, callback: Callable[[], None]) -> TimerHandle: ...


def asyncio_scheduler(delay: float, callback: Callable[[], None]) -> TimerHandle:
    """Schedule on the running event loop (cooperative, non-blocking)."""
    return asyncio.get_running_loop().call_later(delay, callback)


@dataclass(frozen=True)
class DebouncePolicy:
    """Delay in seconds per input channel. Zero means immediate."""
    query_delay: float = 0.3
    facet_delay: float = 0.0

    @classmethod
    def from_milliseconds(cls, query_ms: int, facet_ms: int = 0) -> "DebouncePolicy":
        return cls(query_delay=max(query_ms, 0) / 1000.0, facet_delay=max(facet_ms, 0) / 1000.0)


class Debouncer:
    """Runs ``callback`` once, ``delay`` seconds after the last ``trigger``."""

    def __init__(self, callback: Callable[[], None], scheduler: Scheduler = asyncio_scheduler):
        self._callback = callback
        self._scheduler = scheduler
        self._pending: Optional[TimerHandle] = None

    @property
    def pending(self) -> bool:
        return self._pending is not None

    def trigger(self, delay: float) -> None:
        self.cancel()
        if delay <= 0:
            self._callback()
            return
        self._pending = self._scheduler(delay, self._fire)

    def flush(self) -> None:
        """Fire a pending callback now."""
        if self._pending is None:
            return
        self.cancel()
        self._callback()

    def cancel(self) -> None:
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    def _fire(self) -> None:
        self._pending = None
        self._callback()
