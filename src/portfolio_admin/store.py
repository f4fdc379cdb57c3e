"""Observable state container shared by controllers and sessions."""

import logging
from typing import Callable, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Store(Generic[T]):
    """Plain owned state with change subscriptions.

    Subscribers run synchronously after every ``set``/``mutate``, in
    subscription order.
    """

    def __init__(self, initial: T):
        self._value = initial
        self._subscribers: list[Callable[[T], None]] = []

    def get(self) -> T:
        return self._value

    def set(self, value: T) -> None:
        self._value = value
        self._emit()

    def mutate(self, fn: Callable[[T], T]) -> T:
        """Replace the value with ``fn(current)`` and notify."""
        self.set(fn(self._value))
        return self._value

    def subscribe(self, callback: Callable[[T], None]) -> Callable[[], None]:
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _emit(self) -> None:
        for callback in list(self._subscribers):
            try:
                callback(self._value)
            except Exception:  # noqa: BLE001
                logger.exception("Store subscriber %r failed", callback)
