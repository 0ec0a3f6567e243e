"""One-shot gate ordering the auto-close of a notification after its ``Notify`` reply."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from xdg_notify.observability import get_logger

if TYPE_CHECKING:
    from types import TracebackType

logger = get_logger(__name__)


class Waiter:
    def __init__(self, event: asyncio.Event) -> None:
        self._event = event

    @property
    def fired(self) -> bool:
        return self._event.is_set()

    async def wait(self) -> None:
        await self._event.wait()


class Signaler:
    """Fires its waiter exactly once, when the ``with`` block it guards exits."""

    def __init__(self, event: asyncio.Event) -> None:
        self._event = event
        self._entered = False

    def __enter__(self) -> Signaler:
        if self._entered:
            msg = "signaler can only guard one scope"
            raise RuntimeError(msg)
        self._entered = True
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        logger.debug("close_gate_released", error=exc_type.__name__ if exc_type else None)
        self._event.set()


class CloseSynchronizer:
    @staticmethod
    def create() -> tuple[Signaler, Waiter]:
        event = asyncio.Event()
        return Signaler(event), Waiter(event)
