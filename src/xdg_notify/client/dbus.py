from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any

from dbus_next import Message, MessageType
from dbus_next.errors import DBusError

from xdg_notify.bus import connect_bus
from xdg_notify.client.transport import MethodRequest, SignalMessage, concerns
from xdg_notify.errors import MessageBuildError, TransportError
from xdg_notify.observability import get_logger
from xdg_notify.protocol.constants import NOTIFICATION_OBJECTPATH

if TYPE_CHECKING:
    from collections.abc import Sequence

    from dbus_next.aio import MessageBus

logger = get_logger(__name__)

_DBUS_NAME = "org.freedesktop.DBus"
_DBUS_PATH = "/org/freedesktop/DBus"


def _match_rule(interface: str, member: str) -> str:
    return f"type='signal',path='{NOTIFICATION_OBJECTPATH}',interface='{interface}',member='{member}'"


def _error_text(reply: Message) -> str:
    if reply.body and isinstance(reply.body[0], str):
        return f"{reply.error_name}: {reply.body[0]}"
    return str(reply.error_name)


class DbusSignalSubscription:
    def __init__(self, transport: DbusTransport, interface: str, members: Sequence[str]) -> None:
        self._transport = transport
        self._interface = interface
        self._members = frozenset(members)
        self._queue: asyncio.Queue[SignalMessage] = asyncio.Queue()
        self._notification_id: int | None = None
        self._closed = False

    @property
    def rules(self) -> list[str]:
        return [_match_rule(self._interface, member) for member in sorted(self._members)]

    def on_message(self, message: Message) -> bool:
        if message.message_type is not MessageType.SIGNAL:
            return False
        if message.interface != self._interface or message.member not in self._members:
            return False
        signal = SignalMessage(path=message.path, interface=message.interface, member=message.member, body=list(message.body))
        if concerns(signal, self._notification_id):
            self._queue.put_nowait(signal)
        # other subscriptions on the same connection must see it too
        return False

    async def next(self, timeout: float) -> SignalMessage | None:
        try:
            return await asyncio.wait_for(self._queue.get(), timeout)
        except TimeoutError:
            return None

    def follow(self, notification_id: int | None) -> None:
        self._notification_id = notification_id
        buffered: list[SignalMessage] = []
        while not self._queue.empty():
            buffered.append(self._queue.get_nowait())
        for signal in buffered:
            if concerns(signal, notification_id):
                self._queue.put_nowait(signal)

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        await self._transport.unsubscribe(self)


class DbusTransport:
    def __init__(self, bus: MessageBus) -> None:
        self._bus = bus

    @classmethod
    async def connect(cls, bus_address: str | None = None, *, attempts: int = 3) -> DbusTransport:
        return cls(await connect_bus(bus_address, attempts=attempts))

    async def call(self, request: MethodRequest, *, timeout: float) -> list[Any]:
        try:
            message = Message(
                destination=request.destination,
                path=request.path,
                interface=request.interface,
                member=request.member,
                signature=request.signature,
                body=request.body,
            )
        except (TypeError, ValueError) as exc:
            msg = f"could not build {request.member} call: {exc}"
            raise MessageBuildError(msg) from exc

        try:
            reply = await asyncio.wait_for(self._bus.call(message), timeout)
        except TimeoutError as exc:
            msg = f"{request.member} got no reply within {timeout}s"
            raise TransportError(msg) from exc
        except (TypeError, ValueError) as exc:
            # body and signature are only checked when the message is marshalled
            msg = f"could not build {request.member} call: {exc}"
            raise MessageBuildError(msg) from exc
        except (OSError, EOFError, DBusError) as exc:
            msg = f"{request.member} failed: {exc}"
            raise TransportError(msg) from exc

        if reply is None:
            return []
        if reply.message_type is MessageType.ERROR:
            raise TransportError(_error_text(reply), error_name=reply.error_name)
        return list(reply.body)

    async def subscribe(self, interface: str, members: Sequence[str]) -> DbusSignalSubscription:
        subscription = DbusSignalSubscription(self, interface, members)
        # install the handler first so nothing emitted after AddMatch is lost
        self._bus.add_message_handler(subscription.on_message)
        try:
            for rule in subscription.rules:
                await self._bus_call("AddMatch", rule)
        except TransportError:
            self._bus.remove_message_handler(subscription.on_message)
            raise
        return subscription

    async def unsubscribe(self, subscription: DbusSignalSubscription) -> None:
        self._bus.remove_message_handler(subscription.on_message)
        for rule in subscription.rules:
            try:
                await self._bus_call("RemoveMatch", rule)
            except TransportError as exc:
                logger.warning("remove_match_failed", rule=rule, error=str(exc))

    def close(self) -> None:
        self._bus.disconnect()

    async def _bus_call(self, member: str, rule: str) -> None:
        request = MethodRequest(
            destination=_DBUS_NAME,
            path=_DBUS_PATH,
            interface=_DBUS_NAME,
            member=member,
            signature="s",
            body=[rule],
        )
        await self.call(request, timeout=5.0)
