from __future__ import annotations

from tests.test_utils.strategies.protocol import actions, custom_hints, custom_keys, hint_values, timeouts

__all__ = [
    "actions",
    "custom_hints",
    "custom_keys",
    "hint_values",
    "timeouts",
]
