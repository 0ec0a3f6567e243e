"""Wire encoding of notification hints and actions.

Hints travel as ``a{sv}`` and actions as a flat ``as`` of alternating
tag/label entries. Both fields are always present on the wire, so empty
input encodes to an empty container rather than being omitted.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence

from dbus_next import Variant

from xdg_notify.errors import HintDecodeError, HintEncodeError
from xdg_notify.observability import get_logger
from xdg_notify.protocol.hints import (
    TYPED_KINDS,
    WELL_KNOWN_HINTS,
    ByteValue,
    Hint,
    HintValue,
    RawValue,
    Urgency,
)
from xdg_notify.protocol.models import Action

logger = get_logger(__name__)


def encode_hint(hint: Hint) -> Variant:
    value = hint.value
    try:
        return Variant(value.signature, value.value)
    except (TypeError, ValueError) as exc:
        raise HintEncodeError(hint.key, str(exc)) from exc


def encode_hints(hints: Iterable[Hint]) -> dict[str, Variant]:
    encoded: dict[str, Variant] = {}
    for hint in hints:
        try:
            encoded[hint.key] = encode_hint(hint)
        except HintEncodeError as exc:
            logger.warning("hint_encode_failed", key=hint.key, error=str(exc))
    return encoded


def encode_actions(actions: Iterable[Action]) -> list[str]:
    flat: list[str] = []
    for action in actions:
        flat.extend((action.tag, action.label))
    return flat


def decode_hint(key: str, variant: object) -> Hint:
    if not isinstance(variant, Variant):
        raise HintDecodeError(key, f"expected a variant, got {type(variant).__name__}")

    kind = TYPED_KINDS.get(variant.signature)
    value: HintValue = kind(variant.value) if kind is not None else RawValue(variant.signature, variant.value)

    expected = WELL_KNOWN_HINTS.get(key)
    if expected is not None and not isinstance(value, expected):
        raise HintDecodeError(key, f"unexpected wire type {variant.signature!r}")
    if isinstance(value, ByteValue) and key == "urgency" and value.value not in tuple(Urgency):
        raise HintDecodeError(key, f"urgency out of range: {value.value}")
    return Hint(key, value)


def decode_hints(raw: Mapping[str, object]) -> tuple[Hint, ...]:
    """Decode every hint that can be decoded; the rest are logged and dropped."""
    hints: list[Hint] = []
    for key, variant in raw.items():
        try:
            hints.append(decode_hint(key, variant))
        except (HintDecodeError, ValueError) as exc:
            logger.warning("hint_decode_failed", key=key, error=str(exc))
    return tuple(hints)


def decode_actions(raw: Sequence[str]) -> tuple[Action, ...]:
    """Pair consecutive entries into actions. A trailing unpaired tag is dropped."""
    return tuple(Action(tag=tag, label=label) for tag, label in zip(raw[::2], raw[1::2], strict=False))
