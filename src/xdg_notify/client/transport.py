"""What the client needs from a bus: request/reply calls and a signal stream."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol

from dbus_next.validators import is_bus_name_valid, is_interface_name_valid, is_member_name_valid, is_object_path_valid

from xdg_notify.errors import MessageBuildError

if TYPE_CHECKING:
    from collections.abc import Sequence


@dataclass(frozen=True, slots=True)
class MethodRequest:
    destination: str
    path: str
    interface: str
    member: str
    signature: str = ""
    body: list[Any] = field(default_factory=list)

    def __post_init__(self) -> None:
        checks = (
            (is_bus_name_valid, self.destination, "bus name"),
            (is_object_path_valid, self.path, "object path"),
            (is_interface_name_valid, self.interface, "interface name"),
            (is_member_name_valid, self.member, "member name"),
        )
        for is_valid, value, what in checks:
            if not is_valid(value):
                msg = f"invalid {what}: {value!r}"
                raise MessageBuildError(msg)


@dataclass(frozen=True, slots=True)
class SignalMessage:
    path: str
    interface: str
    member: str
    body: list[Any]


def concerns(signal: SignalMessage, notification_id: int | None) -> bool:
    """Whether ``signal`` is about ``notification_id``; every signal is when it is ``None``."""
    if notification_id is None:
        return True
    return bool(signal.body) and signal.body[0] == notification_id


class SignalSubscription(Protocol):
    async def next(self, timeout: float) -> SignalMessage | None:
        """Return the next buffered signal, or ``None`` if none arrived within ``timeout`` seconds."""
        ...

    def follow(self, notification_id: int | None) -> None:
        """Keep only signals about ``notification_id`` from now on, dropping any already buffered for other ids.

        ``None`` keeps every signal again.
        """
        ...

    async def close(self) -> None: ...


class Transport(Protocol):
    async def call(self, request: MethodRequest, *, timeout: float) -> list[Any]: ...

    async def subscribe(self, interface: str, members: Sequence[str]) -> SignalSubscription: ...
