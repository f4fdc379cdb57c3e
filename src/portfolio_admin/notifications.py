"""Dismissible operator notifications."""

import itertools
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable

from .models import AuthError, NotFoundError, PortfolioError, TransportError, ValidationError
from .store import Store

logger = logging.getLogger(__name__)

NOT_FOUND_MESSAGE = "This item no longer exists"


@dataclass(frozen=True)
class Notification:
    id: int
    level: str  # "error" | "success" | "info"
    message: str
    created_at: datetime = field(default_factory=datetime.now)


def describe_error(exc: BaseException) -> str:
    """One human-readable line for a failure."""
    if isinstance(exc, NotFoundError):
        return NOT_FOUND_MESSAGE
    if isinstance(exc, ValidationError) and exc.field_errors:
        details = "; ".join(
            f"{fe.get('field')}: {fe.get('message')}" for fe in exc.field_errors if isinstance(fe, dict)
        )
        return f"{exc.message} ({details})" if details else exc.message
    if isinstance(exc, TransportError):
        return f"Network problem: {exc.message}"
    if isinstance(exc, PortfolioError):
        return exc.message
    return "An unexpected error occurred"


class Notifier:
    """Collects notifications; every failure produces exactly one."""

    def __init__(self, on_auth_lost: Callable[[], None] | None = None):
        self.store: Store[tuple[Notification, ...]] = Store(())
        self.on_auth_lost = on_auth_lost
        self._ids = itertools.count(1)

    @property
    def notifications(self) -> tuple[Notification, ...]:
        return self.store.get()

    def _push(self, level: str, message: str) -> Notification:
        note = Notification(id=next(self._ids), level=level, message=message)
        self.store.mutate(lambda notes: notes + (note,))
        return note

    def error(self, message: str) -> Notification:
        return self._push("error", message)

    def success(self, message: str) -> Notification:
        return self._push("success", message)

    def info(self, message: str) -> Notification:
        return self._push("info", message)

    def notify_error(self, exc: BaseException, context: str | None = None) -> Notification:
        """Report a failure; an auth failure also invalidates the session."""
        message = describe_error(exc)
        if context:
            message = f"{context}: {message}"
        logger.warning(message)
        note = self.error(message)
        if isinstance(exc, AuthError) and self.on_auth_lost is not None:
            self.on_auth_lost()
        return note

    def dismiss(self, notification_id: int) -> bool:
        before = self.notifications
        self.store.set(tuple(n for n in before if n.id != notification_id))
        return len(self.notifications) != len(before)

    def clear(self) -> None:
        self.store.set(())
