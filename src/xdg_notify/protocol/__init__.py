from xdg_notify.protocol.codec import decode_actions, decode_hint, decode_hints, encode_actions, encode_hint, encode_hints
from xdg_notify.protocol.constants import (
    CLOSED_ACTION,
    DEFAULT_TIMEOUT,
    NEVER_EXPIRE,
    NOTIFICATION_INTERFACE,
    NOTIFICATION_NAMESPACE,
    NOTIFICATION_OBJECTPATH,
)
from xdg_notify.protocol.hints import (
    BoolValue,
    ByteArrayValue,
    ByteValue,
    Hint,
    HintValue,
    Int32Value,
    RawValue,
    StringValue,
    Urgency,
)
from xdg_notify.protocol.models import (
    Action,
    CloseReason,
    Notification,
    NotificationBus,
    NotifyRequest,
    ReceivedNotification,
    ServerInformation,
)
from xdg_notify.protocol.timeout import TimeoutPolicy

__all__ = [
    "CLOSED_ACTION",
    "DEFAULT_TIMEOUT",
    "NEVER_EXPIRE",
    "NOTIFICATION_INTERFACE",
    "NOTIFICATION_NAMESPACE",
    "NOTIFICATION_OBJECTPATH",
    "Action",
    "BoolValue",
    "ByteArrayValue",
    "ByteValue",
    "CloseReason",
    "Hint",
    "HintValue",
    "Int32Value",
    "Notification",
    "NotificationBus",
    "NotifyRequest",
    "RawValue",
    "ReceivedNotification",
    "ServerInformation",
    "StringValue",
    "TimeoutPolicy",
    "Urgency",
    "decode_actions",
    "decode_hint",
    "decode_hints",
    "encode_actions",
    "encode_hint",
    "encode_hints",
]
