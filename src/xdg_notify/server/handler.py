from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from collections.abc import Callable

    from xdg_notify.protocol.models import ReceivedNotification


class NotificationHandler(Protocol):
    def handle(self, notification: ReceivedNotification) -> None: ...


@dataclass(frozen=True, slots=True)
class FunctionHandler:
    func: Callable[[ReceivedNotification], None]

    def handle(self, notification: ReceivedNotification) -> None:
        self.func(notification)


def as_handler(handler: NotificationHandler | Callable[[ReceivedNotification], None]) -> NotificationHandler:
    """Accept either an object with ``handle`` or a plain callable."""
    if hasattr(handler, "handle"):
        return handler
    if callable(handler):
        return FunctionHandler(handler)
    msg = "handler must define handle or be callable"
    raise TypeError(msg)
