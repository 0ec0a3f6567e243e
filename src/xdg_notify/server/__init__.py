from xdg_notify.server.dbus import NotificationService, blocking_serve, serve
from xdg_notify.server.handler import FunctionHandler, NotificationHandler, as_handler
from xdg_notify.server.server import MethodCall, NotificationServer, SignalEmitter
from xdg_notify.server.sync import CloseSynchronizer, Signaler, Waiter

__all__ = [
    "CloseSynchronizer",
    "FunctionHandler",
    "MethodCall",
    "NotificationHandler",
    "NotificationServer",
    "NotificationService",
    "SignalEmitter",
    "Signaler",
    "Waiter",
    "as_handler",
    "blocking_serve",
    "serve",
]
