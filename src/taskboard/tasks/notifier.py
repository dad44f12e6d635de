# src/taskboard/tasks/notifier.py

"""
Per-table publish/subscribe channel.

Every published value is enqueued on each open subscriber queue, in publish
order, without conflation: a subscriber that reads slowly still sees every
intermediate snapshot. Queues are unbounded.

Subscriptions are owned by whoever created them and can be closed at any time.
Closing is idempotent and only affects that one subscriber.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable
from typing import Any, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")
U = TypeVar("U")

_CLOSED: Any = object()
_NO_VALUE: Any = object()


class SubscriptionClosed(Exception):
    """Raised by Subscription.get() once the subscription is closed."""


class _Channel:
    """One subscriber queue plus its close bookkeeping."""

    __slots__ = ("queue", "closed", "_owner", "_callbacks")

    def __init__(self, owner: ChangeNotifier[Any]) -> None:
        self.queue: asyncio.Queue[Any] = asyncio.Queue()
        self.closed = False
        self._owner = owner
        self._callbacks: list[Callable[[], None]] = []

    def put(self, value: Any) -> None:
        if not self.closed:
            self.queue.put_nowait(value)

    def add_callback(self, cb: Callable[[], None]) -> None:
        if self.closed:
            cb()
            return
        self._callbacks.append(cb)

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        self._owner._discard(self)

        # Drop undelivered values, then wake any pending reader.
        while not self.queue.empty():
            self.queue.get_nowait()
        self.queue.put_nowait(_CLOSED)

        callbacks, self._callbacks = self._callbacks, []
        for cb in callbacks:
            try:
                cb()
            except Exception:
                logger.exception("Subscription close callback failed")


class Subscription(Generic[T]):
    """
    Live stream of values from a ChangeNotifier.

    Usage:
        async with notifier.subscribe() as sub:
            async for value in sub:
                ...

    Leaving the `async with` block (or calling close()) releases the queue.
    """

    def __init__(self, channel: _Channel, transform: Callable[[Any], T] | None = None) -> None:
        self._channel = channel
        self._transform = transform

    @property
    def closed(self) -> bool:
        return self._channel.closed

    def map(self, fn: Callable[[T], U]) -> Subscription[U]:
        """
        Return a view of this subscription that applies `fn` to each value.

        Both objects share one queue: closing either closes both.
        """
        prev = self._transform

        def composed(value: Any) -> U:
            return fn(prev(value) if prev is not None else value)

        return Subscription(self._channel, composed)

    def add_close_callback(self, cb: Callable[[], None]) -> None:
        """Run `cb` once when the subscription closes (immediately if already closed)."""
        self._channel.add_callback(cb)

    async def get(self, timeout: float | None = None) -> T:
        queue = self._channel.queue
        if timeout is None:
            item = await queue.get()
        else:
            item = await asyncio.wait_for(queue.get(), timeout)

        if item is _CLOSED:
            # Leave the marker in place for any other view sharing the queue.
            queue.put_nowait(_CLOSED)
            raise SubscriptionClosed()
        if self._transform is not None:
            return self._transform(item)
        return item

    def close(self) -> None:
        self._channel.close()

    def __aiter__(self) -> Subscription[T]:
        return self

    async def __anext__(self) -> T:
        try:
            return await self.get()
        except SubscriptionClosed:
            raise StopAsyncIteration from None

    async def __aenter__(self) -> Subscription[T]:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        self.close()


class ChangeNotifier(Generic[T]):
    """Fan-out of published values to every open subscription."""

    def __init__(self, name: str = "notifier") -> None:
        self._name = name
        self._channels: list[_Channel] = []

    @property
    def subscriber_count(self) -> int:
        return len(self._channels)

    def subscribe(self, initial: Any = _NO_VALUE) -> Subscription[T]:
        """
        Register a new subscriber.

        If `initial` is given it is the first value the subscriber reads,
        ahead of anything published afterwards.
        """
        channel = _Channel(self)
        if initial is not _NO_VALUE:
            channel.put(initial)
        self._channels.append(channel)
        logger.debug("%s: subscriber added (total=%d)", self._name, len(self._channels))
        return Subscription(channel)

    def publish(self, value: T) -> int:
        """
        Enqueue `value` for every subscriber. Returns how many received it.

        The same object goes to every queue; publish immutable values.
        """
        channels = list(self._channels)
        for channel in channels:
            channel.put(value)
        return len(channels)

    def close_all(self) -> None:
        for channel in list(self._channels):
            channel.close()

    def _discard(self, channel: _Channel) -> None:
        with contextlib.suppress(ValueError):
            self._channels.remove(channel)
            logger.debug("%s: subscriber removed (total=%d)", self._name, len(self._channels))
