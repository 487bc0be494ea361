"""Observable state holder used by the view models."""

import asyncio
from contextlib import aclosing
from typing import AsyncIterator, Callable, Generic, Optional, TypeVar

T = TypeVar("T")


class StateFlow(Generic[T]):
    """A single current value plus async subscription to its changes.

    Emitting a value equal to the current one is a no-op. Subscribers are
    conflated: a slow subscriber skips intermediate values and always
    receives the latest one. ``on_start`` runs once, on the first
    subscription or an explicit ``start()``.
    """

    def __init__(self, initial: T, on_start: Optional[Callable[[], None]] = None):
        self._value = initial
        self._version = 0
        self._changed = asyncio.Event()
        self._on_start = on_start
        self._started = False

    @property
    def value(self) -> T:
        return self._value

    @property
    def started(self) -> bool:
        return self._started

    def start(self) -> bool:
        """Run ``on_start`` if it has not run yet. Returns True if it ran now."""
        if self._started:
            return False
        self._started = True
        if self._on_start is not None:
            self._on_start()
        return True

    def emit(self, value: T) -> None:
        if value == self._value:
            return
        self._value = value
        self._version += 1
        changed, self._changed = self._changed, asyncio.Event()
        changed.set()

    async def subscribe(self) -> AsyncIterator[T]:
        """Yield the current value, then every later change."""
        self.start()
        seen = -1
        while True:
            if seen != self._version:
                seen = self._version
                yield self._value
                continue
            await self._changed.wait()

    async def wait_for(
        self, predicate: Callable[[T], bool], timeout: float | None = None
    ) -> T:
        """Return the first value (current or future) matching ``predicate``."""

        async def first_match() -> T:
            async with aclosing(self.subscribe()) as states:
                async for state in states:
                    if predicate(state):
                        return state
            raise RuntimeError("State subscription ended unexpectedly")

        return await asyncio.wait_for(first_match(), timeout)
