"""
Ordered listener multicast and single-resolution wait primitives.

Listeners are called in registration order from a snapshot taken when
``fire()`` starts, so a listener may remove itself (or any other listener)
while the event is being delivered. Removal takes effect for the next
``fire()``; additions made during delivery are not called until then.
"""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Generic, TypeVar


T = TypeVar("T")

Listener = Callable[..., Any]


class Multicast:
    __slots__ = ("_listeners",)

    def __init__(self) -> None:
        self._listeners: list[Listener] = []

    def __len__(self) -> int:
        return len(self._listeners)

    def __contains__(self, listener: Listener) -> bool:
        return listener in self._listeners

    def add(self, listener: Listener) -> Listener:
        self._listeners.append(listener)
        return listener

    def remove(self, listener: Listener) -> bool:
        """Remove the first registration of ``listener``. Unknown listeners are ignored."""
        try:
            self._listeners.remove(listener)
            return True

        except ValueError:
            return False

    def clear(self):
        self._listeners.clear()

    def fire(self, *args: Any) -> None:
        """
        Call every listener registered when the fire started.

        Every listener is called even if an earlier one raises. The first
        exception raised by a listener is re-raised once delivery has
        finished.
        """
        error: Exception | None = None

        for listener in tuple(self._listeners):
            try:
                listener(*args)

            except Exception as err:
                if error is None:
                    error = err

        if error is not None:
            raise error


class OneShot(Generic[T]):
    """
    Channel that resolves exactly once.

    Several producers may race to ``resolve()``; only the first wins and
    every later call is a no-op returning ``False``.
    """

    __slots__ = ("_future",)

    def __init__(self) -> None:
        self._future: asyncio.Future[T] = asyncio.get_running_loop().create_future()

    @property
    def resolved(self) -> bool:
        return self._future.done()

    def resolve(self, value: T) -> bool:
        if self._future.done():
            return False

        self._future.set_result(value)
        return True

    def result(self) -> T:
        return self._future.result()

    async def wait(self, timeout: float | None = None) -> T:
        if timeout is None:
            return await asyncio.shield(self._future)

        return await asyncio.wait_for(
            asyncio.shield(self._future),
            timeout=timeout,
        )
