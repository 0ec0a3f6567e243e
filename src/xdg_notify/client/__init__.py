from xdg_notify.client.dbus import DbusSignalSubscription, DbusTransport
from xdg_notify.client.session import (
    ActionInvoked,
    Closed,
    NotificationHandle,
    NotificationSession,
    Outcome,
    correlate,
    open_session,
)
from xdg_notify.client.transport import MethodRequest, SignalMessage, SignalSubscription, Transport

__all__ = [
    "ActionInvoked",
    "Closed",
    "DbusSignalSubscription",
    "DbusTransport",
    "MethodRequest",
    "NotificationHandle",
    "NotificationSession",
    "Outcome",
    "SignalMessage",
    "SignalSubscription",
    "Transport",
    "correlate",
    "open_session",
]
