# src/taskboard/presentation/state.py

from __future__ import annotations

import asyncio
from dataclasses import replace
from typing import Any, Generic, TypeVar

from ..tasks.notifier import ChangeNotifier, Subscription

T = TypeVar("T")
S = TypeVar("S")


class MutableState(Generic[T]):
    """
    Observable value cell.

    - watch() replays the current value first, then every change
    - assigning an equal value publishes nothing
    """

    def __init__(self, initial: T, *, name: str = "state") -> None:
        self._value = initial
        self._notifier: ChangeNotifier[T] = ChangeNotifier(name)

    @property
    def value(self) -> T:
        return self._value

    @value.setter
    def value(self, new_value: T) -> None:
        if new_value == self._value:
            return
        self._value = new_value
        self._notifier.publish(new_value)

    @property
    def watcher_count(self) -> int:
        return self._notifier.subscriber_count

    def watch(self) -> Subscription[T]:
        return self._notifier.subscribe(initial=self._value)

    def close(self) -> None:
        self._notifier.close_all()


class StateHolder(Generic[S]):
    """
    Shared plumbing for screen holders.

    S must be a frozen dataclass with an `error: str | None` field.
    Errors are shown through that field; with `error_timeout` set they also
    clear themselves unless a newer error replaced them meanwhile.
    """

    def __init__(self, initial: S, *, error_timeout: float | None = None, name: str = "holder") -> None:
        self._state: MutableState[S] = MutableState(initial, name=name)
        self._error_timeout = float(error_timeout) if error_timeout and error_timeout > 0 else None
        self._error_clear: asyncio.TimerHandle | None = None

    @property
    def state(self) -> S:
        return self._state.value

    def watch(self) -> Subscription[S]:
        return self._state.watch()

    def clear_error(self) -> None:
        self._cancel_error_clear()
        self._set_state(error=None)

    def _set_state(self, **changes: Any) -> None:
        self._state.value = replace(self._state.value, **changes)

    def _report_error(self, exc: BaseException, default: str, **changes: Any) -> None:
        message = str(exc) or default
        self._set_state(error=message, **changes)
        self._schedule_error_clear(message)

    def _schedule_error_clear(self, message: str) -> None:
        self._cancel_error_clear()
        if self._error_timeout is None:
            return
        loop = asyncio.get_running_loop()
        self._error_clear = loop.call_later(self._error_timeout, self._clear_error_if, message)

    def _clear_error_if(self, message: str) -> None:
        self._error_clear = None
        if getattr(self._state.value, "error", None) == message:
            self._set_state(error=None)

    def _cancel_error_clear(self) -> None:
        if self._error_clear is not None:
            self._error_clear.cancel()
            self._error_clear = None

    def _close_state(self) -> None:
        self._cancel_error_clear()
        self._state.close()
