"""Connection and write bookkeeping shared by the D-Bus client and server."""

from __future__ import annotations

import asyncio
from functools import partial

from dbus_next import BusType
from dbus_next.aio import MessageBus
from dbus_next.errors import DBusError
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from xdg_notify.errors import TransportError
from xdg_notify.observability import get_logger

logger = get_logger(__name__)

_BACKOFF_MULTIPLIER = 0.1
_BACKOFF_MAX = 2


async def connect_bus(bus_address: str | None = None, *, attempts: int = 3) -> MessageBus:
    """Connect to the session bus, or to ``bus_address`` when given.

    Socket-level failures are retried with exponential backoff. A missing or
    malformed address and a rejected handshake are not.
    """
    try:
        async for attempt in AsyncRetrying(
            retry=retry_if_exception_type(OSError),
            wait=wait_exponential(multiplier=_BACKOFF_MULTIPLIER, max=_BACKOFF_MAX),
            stop=stop_after_attempt(attempts),
            reraise=True,
        ):
            with attempt:
                bus = await MessageBus(bus_address=bus_address, bus_type=BusType.SESSION).connect()
    except (OSError, ValueError, DBusError) as exc:
        msg = f"could not connect to the session bus: {exc}"
        raise TransportError(msg) from exc

    logger.info("bus_connected", unique_name=bus.unique_name)
    return bus


class PendingWrites:
    """Tracks queued outgoing messages so they can be flushed before disconnecting."""

    def __init__(self) -> None:
        self._futures: set[asyncio.Future[None]] = set()

    def __len__(self) -> int:
        return len(self._futures)

    def track(self, future: asyncio.Future[None], *, description: str) -> None:
        self._futures.add(future)
        future.add_done_callback(partial(self._done, description))

    def _done(self, description: str, future: asyncio.Future[None]) -> None:
        self._futures.discard(future)
        if future.cancelled():
            return
        error = future.exception()
        if error is not None:
            logger.error("bus_write_failed", message=description, error=str(error))

    async def flush(self) -> None:
        if self._futures:
            await asyncio.gather(*self._futures, return_exceptions=True)
