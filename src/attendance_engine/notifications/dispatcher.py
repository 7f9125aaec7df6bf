from __future__ import annotations

import logging
from concurrent.futures import Executor, Future
from typing import Any, Mapping, Optional, Protocol

from ..core.enums import NotificationKind

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    """Delivery collaborator (email, push, in-app). Fire-and-forget."""

    def notify(self, user_id: int, kind: NotificationKind, details: Mapping[str, Any]) -> None:
        raise NotImplementedError


class LoggingNotifier(Notifier):
    def notify(self, user_id: int, kind: NotificationKind, details: Mapping[str, Any]) -> None:
        logger.info("Notification %s for user %s: %s", kind.value, user_id, dict(details))


class NotificationDispatcher:
    """Emits events after the state change has committed.

    Delivery failures are logged and never reach the caller; the attendance
    transition has already happened.
    """

    def __init__(self, notifier: Notifier, executor: Optional[Executor] = None):
        self._notifier = notifier
        self._executor = executor

    def emit(self, user_id: int, kind: NotificationKind, **details: Any) -> None:
        if self._executor is None:
            self._deliver(user_id, kind, details)
            return
        try:
            future = self._executor.submit(self._deliver, user_id, kind, details)
        except RuntimeError:
            logger.warning("Notification executor unavailable, delivering %s inline", kind.value)
            self._deliver(user_id, kind, details)
            return
        future.add_done_callback(self._log_unexpected)

    def _deliver(self, user_id: int, kind: NotificationKind, details: Mapping[str, Any]) -> None:
        try:
            self._notifier.notify(user_id, kind, details)
        except Exception:
            logger.exception("Notification %s for user %s failed", kind.value, user_id)

    @staticmethod
    def _log_unexpected(future: Future) -> None:
        if future.cancelled():
            return
        exc = future.exception()
        if exc is not None:
            logger.error("Notification task crashed: %s", exc)
