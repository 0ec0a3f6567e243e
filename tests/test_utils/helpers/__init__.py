"""Test helpers."""

from tests.test_utils.helpers.fixture import fixture_path, read_fixture
from tests.test_utils.helpers.loop import settle

__all__ = [
    "fixture_path",
    "read_fixture",
    "settle",
]
