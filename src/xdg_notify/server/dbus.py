"""D-Bus binding of :class:`~xdg_notify.server.server.NotificationServer`.

Method calls arriving at the notification object path are routed into the
server from the bus's message handler. Replies and signals are queued on the
bus's single writer in the order they are produced, which keeps every
``Notify`` reply ahead of the ``NotificationClosed`` signal for its id.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any

from dbus_next import Message, MessageFlag, MessageType, NameFlag, RequestNameReply
from dbus_next.errors import DBusError

from xdg_notify.bus import PendingWrites, connect_bus
from xdg_notify.config import ServerConfig
from xdg_notify.errors import TransportError
from xdg_notify.observability import get_logger
from xdg_notify.protocol.constants import NOTIFICATION_OBJECTPATH
from xdg_notify.server.server import NotificationServer

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from dbus_next.aio import MessageBus

    from xdg_notify.protocol.models import ReceivedNotification
    from xdg_notify.server.handler import NotificationHandler

logger = get_logger(__name__)


class DbusSignalEmitter:
    def __init__(self, bus: MessageBus, *, interface: str, writes: PendingWrites) -> None:
        self._bus = bus
        self._interface = interface
        self._writes = writes

    def emit(self, member: str, signature: str, body: Sequence[object]) -> None:
        try:
            message = Message.new_signal(NOTIFICATION_OBJECTPATH, self._interface, member, signature, list(body))
            future = self._bus.send(message)
        except (TypeError, ValueError, OSError) as exc:
            msg = f"failed to emit {member}: {exc}"
            raise TransportError(msg) from exc
        self._writes.track(future, description=member)


class DbusMethodCall:
    def __init__(self, bus: MessageBus, message: Message, writes: PendingWrites) -> None:
        self._bus = bus
        self._message = message
        self._writes = writes

    @property
    def member(self) -> str:
        return self._message.member

    @property
    def body(self) -> Sequence[Any]:
        return self._message.body

    def reply(self, signature: str, body: Sequence[object]) -> None:
        self._send(Message.new_method_return(self._message, signature, list(body)))

    def fail(self, error_name: str, message: str) -> None:
        self._send(Message.new_error(self._message, error_name, message))

    def _send(self, reply: Message) -> None:
        if self._message.flags & MessageFlag.NO_REPLY_EXPECTED:
            return
        self._writes.track(self._bus.send(reply), description=f"reply to {self.member}")


class DbusMethodRouter:
    def __init__(self, server: NotificationServer, bus: MessageBus, *, interface: str, writes: PendingWrites) -> None:
        self._server = server
        self._bus = bus
        self._interface = interface
        self._writes = writes

    def __call__(self, message: Message) -> bool:
        if message.message_type is not MessageType.METHOD_CALL:
            return False
        if message.path != NOTIFICATION_OBJECTPATH or message.interface not in (None, self._interface):
            return False
        logger.debug("method_call_received", member=message.member, sender=message.sender)
        self._server.dispatch(DbusMethodCall(self._bus, message, self._writes))
        return True


class NotificationService:
    """A :class:`NotificationServer` exported on a bus under its well-known name."""

    def __init__(self, bus: MessageBus, server: NotificationServer, writes: PendingWrites) -> None:
        self._bus = bus
        self._server = server
        self._writes = writes
        self._closed = False

    @property
    def server(self) -> NotificationServer:
        return self._server

    @classmethod
    async def start(
        cls,
        handler: NotificationHandler | Callable[[ReceivedNotification], None],
        *,
        config: ServerConfig | None = None,
        bus_address: str | None = None,
    ) -> NotificationService:
        config = config or ServerConfig()
        bus = await connect_bus(bus_address)
        writes = PendingWrites()
        server = NotificationServer(
            handler,
            DbusSignalEmitter(bus, interface=config.interface, writes=writes),
            config=config,
        )
        bus.add_message_handler(DbusMethodRouter(server, bus, interface=config.interface, writes=writes))

        try:
            reply = await bus.request_name(config.bus_name, NameFlag.DO_NOT_QUEUE)
        except DBusError as exc:
            bus.disconnect()
            msg = f"could not request bus name {config.bus_name}: {exc}"
            raise TransportError(msg) from exc
        if reply not in (RequestNameReply.PRIMARY_OWNER, RequestNameReply.ALREADY_OWNER):
            bus.disconnect()
            msg = f"bus name {config.bus_name} is already owned"
            raise TransportError(msg)

        logger.info(
            "server_started",
            bus_name=config.bus_name,
            interface=config.interface,
            path=NOTIFICATION_OBJECTPATH,
        )
        return cls(bus, server, writes)

    async def run_until_stopped(self) -> None:
        try:
            await self._server.wait_stopped()
        finally:
            await self.close()

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        await self._server.shutdown()
        # the reply to Stop is usually still queued at this point
        await self._writes.flush()
        self._bus.disconnect()
        logger.info("server_stopped")


async def serve(
    handler: NotificationHandler | Callable[[ReceivedNotification], None],
    *,
    config: ServerConfig | None = None,
    bus_address: str | None = None,
) -> None:
    service = await NotificationService.start(handler, config=config, bus_address=bus_address)
    await service.run_until_stopped()


def blocking_serve(
    handler: NotificationHandler | Callable[[ReceivedNotification], None],
    *,
    config: ServerConfig | None = None,
    bus_address: str | None = None,
) -> None:
    logger.info("start_blocking")
    asyncio.run(serve(handler, config=config, bus_address=bus_address))
