from __future__ import annotations

from typing import Protocol

import structlog

from packages.shared.schemas.notification_v1 import NotificationKindV1, NotificationV1

logger = structlog.get_logger(__name__)


class Notifier(Protocol):
    def success(self, message: str, *, key: str | None = None) -> None: ...

    def error(self, message: str, *, key: str | None = None) -> None: ...

    def loading(self, message: str, *, key: str | None = None) -> None: ...


class RecordingNotifier:
    """Queues notifications until a renderer drains them.

    A message with a key replaces any pending message with the same key, so a LOADING
    toast is superseded by its outcome. At most `max_pending` messages are kept; the
    oldest are dropped first.
    """

    def __init__(self, max_pending: int = 50) -> None:
        self._pending: list[NotificationV1] = []
        self._max_pending = max_pending

    def success(self, message: str, *, key: str | None = None) -> None:
        self._push(NotificationKindV1.SUCCESS, message, key)

    def error(self, message: str, *, key: str | None = None) -> None:
        self._push(NotificationKindV1.ERROR, message, key)

    def loading(self, message: str, *, key: str | None = None) -> None:
        self._push(NotificationKindV1.LOADING, message, key)

    @property
    def pending(self) -> list[NotificationV1]:
        return list(self._pending)

    def drain(self) -> list[NotificationV1]:
        out, self._pending = self._pending, []
        return out

    def _push(self, kind: NotificationKindV1, message: str, key: str | None) -> None:
        if key is not None:
            self._pending = [n for n in self._pending if n.key != key]
        self._pending.append(NotificationV1(kind=kind, message=message, key=key))
        if len(self._pending) > self._max_pending:
            del self._pending[: len(self._pending) - self._max_pending]
        logger.debug("Notification queued", kind=kind.value, message=message, key=key)
