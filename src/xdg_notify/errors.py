"""Error taxonomy shared by the client and the server."""

from __future__ import annotations


class NotifyError(Exception):
    """Base class for every error raised by xdg_notify."""


class TransportError(NotifyError):
    """Raised when the bus connection fails or a call is answered with an error."""

    def __init__(self, message: str, *, error_name: str | None = None) -> None:
        self.error_name = error_name
        super().__init__(message)


class ProtocolDecodeError(NotifyError):
    """Raised when a message body does not have the shape the protocol prescribes."""


class HintDecodeError(ProtocolDecodeError):
    """Raised for a single hint that cannot be converted into a typed value."""

    def __init__(self, key: str, reason: str) -> None:
        self.key = key
        super().__init__(f"hint {key!r}: {reason}")


class HintEncodeError(NotifyError):
    """Raised for a single hint whose value cannot be represented on the wire."""

    def __init__(self, key: str, reason: str) -> None:
        self.key = key
        super().__init__(f"hint {key!r}: {reason}")


class MessageBuildError(NotifyError):
    """Raised when an outgoing message cannot be built from the given names or body."""


class HandleConsumedError(NotifyError):
    """Raised when an outcome is awaited on a handle that already claimed or resolved one."""

    def __init__(self, notification_id: int) -> None:
        self.notification_id = notification_id
        super().__init__(f"notification {notification_id} outcome already claimed")


class ServerStoppedError(NotifyError):
    """Raised when a request reaches a server whose stop-gate has been flipped."""
