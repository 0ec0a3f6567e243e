from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, replace
from enum import IntEnum
from typing import Any

from xdg_notify.errors import ProtocolDecodeError
from xdg_notify.protocol.constants import (
    DEFAULT_TIMEOUT,
    NEW_NOTIFICATION_ID,
    NOTIFICATION_NAMESPACE,
)
from xdg_notify.protocol.hints import Hint


class CloseReason(IntEnum):
    EXPIRED = 1
    DISMISSED = 2
    CLOSED_BY_REQUEST = 3
    UNDEFINED = 4

    @classmethod
    def _missing_(cls, value: object) -> CloseReason:
        return cls.UNDEFINED


@dataclass(frozen=True, slots=True)
class Action:
    tag: str
    label: str


@dataclass(frozen=True, slots=True)
class NotificationBus:
    """Well-known bus name a notification is sent to."""

    name: str = NOTIFICATION_NAMESPACE

    @classmethod
    def custom(cls, suffix: str) -> NotificationBus:
        return cls(f"{NOTIFICATION_NAMESPACE}.{suffix}")


@dataclass(frozen=True, slots=True)
class Notification:
    summary: str
    body: str = ""
    icon: str = ""
    appname: str = "xdg-notify"
    actions: tuple[Action, ...] = ()
    hints: tuple[Hint, ...] = ()
    timeout: int = DEFAULT_TIMEOUT
    id: int | None = None
    bus: NotificationBus | None = None

    def __post_init__(self) -> None:
        keys = [hint.key for hint in self.hints]
        if len(keys) != len(set(keys)):
            msg = "hint keys must be unique"
            raise ValueError(msg)
        if self.id is not None and self.id < 0:
            msg = "id cannot be negative"
            raise ValueError(msg)

    @property
    def replaces_id(self) -> int:
        return self.id if self.id is not None else NEW_NOTIFICATION_ID

    def with_hint(self, hint: Hint) -> Notification:
        hints = tuple(existing for existing in self.hints if existing.key != hint.key)
        return replace(self, hints=(*hints, hint))

    def with_action(self, tag: str, label: str) -> Notification:
        return replace(self, actions=(*self.actions, Action(tag, label)))


@dataclass(frozen=True, slots=True)
class ServerInformation:
    name: str
    vendor: str
    version: str
    spec_version: str

    def to_body(self) -> list[str]:
        return [self.name, self.vendor, self.version, self.spec_version]

    @classmethod
    def from_body(cls, body: Sequence[object]) -> ServerInformation:
        """Build from a reply body, degrading missing or non-string fields to ``""``."""

        def field_at(index: int) -> str:
            value = body[index] if index < len(body) else None
            return value if isinstance(value, str) else ""

        return cls(name=field_at(0), vendor=field_at(1), version=field_at(2), spec_version=field_at(3))


@dataclass(frozen=True, slots=True)
class ReceivedNotification:
    appname: str
    id: int
    replaces_id: int
    icon: str
    summary: str
    body: str
    actions: tuple[Action, ...]
    hints: tuple[Hint, ...]
    timeout: int


@dataclass(frozen=True, slots=True)
class NotifyRequest:
    """Positional ``Notify`` arguments as they arrive on the wire, hints and actions still encoded."""

    appname: str
    replaces_id: int
    icon: str
    summary: str
    body: str
    actions: Sequence[str]
    hints: Mapping[str, Any]
    timeout: int

    @classmethod
    def from_body(cls, body: Sequence[object]) -> NotifyRequest:
        if len(body) != 8:
            msg = f"Notify expects 8 arguments, got {len(body)}"
            raise ProtocolDecodeError(msg)
        appname, replaces_id, icon, summary, text, actions, hints, timeout = body
        for name, value in (("appname", appname), ("icon", icon), ("summary", summary), ("body", text)):
            if not isinstance(value, str):
                msg = f"{name} must be a string"
                raise ProtocolDecodeError(msg)
        if not isinstance(replaces_id, int) or isinstance(replaces_id, bool):
            msg = "replaces_id must be an unsigned integer"
            raise ProtocolDecodeError(msg)
        if not isinstance(timeout, int) or isinstance(timeout, bool):
            msg = "timeout must be an integer"
            raise ProtocolDecodeError(msg)
        if not isinstance(actions, list):
            msg = "actions must be an array"
            raise ProtocolDecodeError(msg)
        if not isinstance(hints, dict):
            msg = "hints must be a dictionary"
            raise ProtocolDecodeError(msg)
        return cls(
            appname=appname,
            replaces_id=replaces_id,
            icon=icon,
            summary=summary,
            body=text,
            actions=actions,
            hints=hints,
            timeout=timeout,
        )
