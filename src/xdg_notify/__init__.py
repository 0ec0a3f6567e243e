"""Desktop notifications over D-Bus, client and server."""

from xdg_notify._version import __version__
from xdg_notify.client import ActionInvoked, Closed, NotificationHandle, NotificationSession, open_session
from xdg_notify.errors import (
    HandleConsumedError,
    HintDecodeError,
    HintEncodeError,
    MessageBuildError,
    NotifyError,
    ProtocolDecodeError,
    ServerStoppedError,
    TransportError,
)
from xdg_notify.protocol import (
    Action,
    CloseReason,
    Hint,
    Notification,
    NotificationBus,
    ReceivedNotification,
    ServerInformation,
    Urgency,
)
from xdg_notify.server import NotificationServer, NotificationService, blocking_serve, serve

__all__ = [
    "Action",
    "ActionInvoked",
    "CloseReason",
    "Closed",
    "HandleConsumedError",
    "Hint",
    "HintDecodeError",
    "HintEncodeError",
    "MessageBuildError",
    "Notification",
    "NotificationBus",
    "NotificationHandle",
    "NotificationServer",
    "NotificationService",
    "NotificationSession",
    "NotifyError",
    "ProtocolDecodeError",
    "ReceivedNotification",
    "ServerInformation",
    "ServerStoppedError",
    "TransportError",
    "Urgency",
    "__version__",
    "blocking_serve",
    "open_session",
    "serve",
]
