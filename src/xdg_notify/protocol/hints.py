"""Typed notification hints.

A hint value is one of a closed set of wire kinds. Every kind carries the
D-Bus signature it is sent with; values received with a signature outside
the set are kept verbatim as :class:`RawValue`.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import ClassVar, TypeAlias


class Urgency(IntEnum):
    LOW = 0
    NORMAL = 1
    CRITICAL = 2

    @classmethod
    def parse(cls, value: str) -> Urgency:
        try:
            return cls[value.strip().upper()]
        except KeyError as exc:
            msg = f"unknown urgency: {value!r}"
            raise ValueError(msg) from exc


@dataclass(frozen=True, slots=True)
class StringValue:
    signature: ClassVar[str] = "s"
    value: str


@dataclass(frozen=True, slots=True)
class Int32Value:
    signature: ClassVar[str] = "i"
    value: int


@dataclass(frozen=True, slots=True)
class ByteValue:
    signature: ClassVar[str] = "y"
    value: int


@dataclass(frozen=True, slots=True)
class BoolValue:
    signature: ClassVar[str] = "b"
    value: bool


@dataclass(frozen=True, slots=True)
class ByteArrayValue:
    signature: ClassVar[str] = "ay"
    value: bytes


@dataclass(frozen=True, slots=True)
class RawValue:
    signature: str
    value: object


HintValue: TypeAlias = StringValue | Int32Value | ByteValue | BoolValue | ByteArrayValue | RawValue

TYPED_KINDS: dict[str, type[StringValue | Int32Value | ByteValue | BoolValue | ByteArrayValue]] = {
    kind.signature: kind for kind in (StringValue, Int32Value, ByteValue, BoolValue, ByteArrayValue)
}

# Standard freedesktop hint keys and the wire kind each one must carry
WELL_KNOWN_HINTS: dict[str, type[HintValue]] = {
    "action-icons": BoolValue,
    "category": StringValue,
    "desktop-entry": StringValue,
    "image-path": StringValue,
    "resident": BoolValue,
    "sound-file": StringValue,
    "sound-name": StringValue,
    "suppress-sound": BoolValue,
    "transient": BoolValue,
    "x": Int32Value,
    "y": Int32Value,
    "urgency": ByteValue,
}


@dataclass(frozen=True, slots=True)
class Hint:
    key: str
    value: HintValue

    def __post_init__(self) -> None:
        if not self.key:
            msg = "hint key cannot be empty"
            raise ValueError(msg)

    @classmethod
    def urgency(cls, level: Urgency) -> Hint:
        return cls("urgency", ByteValue(int(level)))

    @classmethod
    def category(cls, category: str) -> Hint:
        return cls("category", StringValue(category))

    @classmethod
    def desktop_entry(cls, name: str) -> Hint:
        return cls("desktop-entry", StringValue(name))

    @classmethod
    def image_path(cls, path: str) -> Hint:
        return cls("image-path", StringValue(path))

    @classmethod
    def sound_file(cls, path: str) -> Hint:
        return cls("sound-file", StringValue(path))

    @classmethod
    def sound_name(cls, name: str) -> Hint:
        return cls("sound-name", StringValue(name))

    @classmethod
    def suppress_sound(cls, *, enabled: bool = True) -> Hint:
        return cls("suppress-sound", BoolValue(enabled))

    @classmethod
    def transient(cls, *, enabled: bool = True) -> Hint:
        return cls("transient", BoolValue(enabled))

    @classmethod
    def resident(cls, *, enabled: bool = True) -> Hint:
        return cls("resident", BoolValue(enabled))

    @classmethod
    def action_icons(cls, *, enabled: bool = True) -> Hint:
        return cls("action-icons", BoolValue(enabled))

    @classmethod
    def position(cls, x: int, y: int) -> tuple[Hint, Hint]:
        return cls("x", Int32Value(x)), cls("y", Int32Value(y))

    @classmethod
    def custom(cls, key: str, value: str) -> Hint:
        return cls(key, StringValue(value))

    @classmethod
    def custom_int(cls, key: str, value: int) -> Hint:
        return cls(key, Int32Value(value))
