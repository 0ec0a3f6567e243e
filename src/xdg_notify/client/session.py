"""Client side of the notification protocol.

:meth:`NotificationSession.send` subscribes to the outcome signals, sends the
``Notify`` call and returns a :class:`NotificationHandle` bound to the id the
server assigned. The handle resolves at most one outcome: the first
``ActionInvoked`` or ``NotificationClosed`` signal carrying its id. Signals
for other ids, other members or other objects are skipped.
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, TypeAlias

from xdg_notify.client.dbus import DbusTransport
from xdg_notify.client.transport import MethodRequest, SignalMessage, SignalSubscription, Transport
from xdg_notify.config import ClientConfig
from xdg_notify.errors import HandleConsumedError
from xdg_notify.observability import get_logger
from xdg_notify.protocol.codec import encode_actions, encode_hints
from xdg_notify.protocol.constants import (
    ACTION_INVOKED,
    CLOSE_NOTIFICATION,
    CLOSED_ACTION,
    GET_CAPABILITIES,
    GET_SERVER_INFORMATION,
    NOTIFICATION_CLOSED,
    NOTIFICATION_OBJECTPATH,
    NOTIFY,
    NOTIFY_SIGNATURE,
    STOP,
)
from xdg_notify.protocol.models import CloseReason, Notification, ServerInformation

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Callable, Sequence
    from types import TracebackType

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class ActionInvoked:
    notification_id: int
    tag: str


@dataclass(frozen=True, slots=True)
class Closed:
    notification_id: int
    reason: CloseReason
    code: int


Outcome: TypeAlias = ActionInvoked | Closed


def _is_uint(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


def correlate(signal: SignalMessage, notification_id: int, *, interface: str) -> Outcome | None:
    """Return the outcome ``signal`` carries for ``notification_id``, if any."""
    if signal.path != NOTIFICATION_OBJECTPATH or signal.interface != interface:
        return None
    body = signal.body
    if len(body) != 2 or not _is_uint(body[0]) or body[0] != notification_id:
        return None
    if signal.member == ACTION_INVOKED and isinstance(body[1], str):
        return ActionInvoked(notification_id=notification_id, tag=body[1])
    if signal.member == NOTIFICATION_CLOSED and _is_uint(body[1]):
        return Closed(notification_id=notification_id, reason=CloseReason(body[1]), code=body[1])
    return None


class NotificationHandle:
    def __init__(
        self,
        session: NotificationSession,
        notification_id: int,
        notification: Notification,
        subscription: SignalSubscription,
    ) -> None:
        self._session = session
        self._id = notification_id
        self._notification = notification
        self._subscription = subscription
        self._claimed = False
        self._outcome: Outcome | None = None

    @property
    def id(self) -> int:
        return self._id

    @property
    def notification(self) -> Notification:
        return self._notification

    @property
    def outcome(self) -> Outcome | None:
        return self._outcome

    async def __aenter__(self) -> NotificationHandle:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        await self.release()

    async def release(self) -> None:
        """Stop listening for outcome signals."""
        await self._subscription.close()

    async def wait_for_outcome(
        self,
        on_action: Callable[[str], object] | None = None,
        on_close: Callable[[CloseReason], object] | None = None,
        *,
        poll_interval: float | None = None,
        timeout: float | None = None,
    ) -> Outcome:
        """Wait for the first outcome for this notification and dispatch it.

        Exactly one of ``on_action`` and ``on_close`` is called, at most once
        over the lifetime of the handle. ``poll_interval`` bounds how long a
        single wait for the next signal blocks; ``timeout`` bounds the whole
        wait and raises :class:`TimeoutError`, after which the handle can be
        waited on again.
        """
        if self._claimed or self._outcome is not None:
            raise HandleConsumedError(self._id)
        self._claimed = True

        interval = poll_interval if poll_interval is not None else self._session.config.poll_interval
        loop = asyncio.get_running_loop()
        deadline = None if timeout is None else loop.time() + timeout
        try:
            outcome = await self._correlate(interval, deadline)
        finally:
            self._claimed = False

        self._outcome = outcome
        await self.release()
        logger.debug("outcome_resolved", id=self._id, outcome=type(outcome).__name__)

        if isinstance(outcome, ActionInvoked):
            if on_action is not None:
                on_action(outcome.tag)
        elif on_close is not None:
            on_close(outcome.reason)
        return outcome

    async def wait_for_action(self, callback: Callable[[str], object], **kwargs: Any) -> Outcome:
        """Like :meth:`wait_for_outcome`, passing ``"__closed"`` to ``callback`` on close."""
        return await self.wait_for_outcome(callback, lambda _reason: callback(CLOSED_ACTION), **kwargs)

    async def on_close(self, callback: Callable[[CloseReason], object], **kwargs: Any) -> Outcome:
        return await self.wait_for_outcome(on_close=callback, **kwargs)

    async def update(self, notification: Notification | None = None) -> None:
        """Re-send ``notification`` (or the original one) in place of this one."""
        if notification is not None:
            self._notification = notification
        # the server may hand out a new id, so nothing can be filtered until the reply arrives
        self._subscription.follow(None)
        try:
            self._id = await self._session.notify(self._notification, replaces_id=self._id)
        finally:
            self._subscription.follow(self._id)

    async def close(self) -> None:
        await self._session.close_notification(self._id, bus=self._session.destination(self._notification))

    async def _correlate(self, interval: float, deadline: float | None) -> Outcome:
        loop = asyncio.get_running_loop()
        interface = self._session.config.interface
        while True:
            wait = interval if deadline is None else min(interval, max(deadline - loop.time(), 0))
            signal = await self._subscription.next(wait)
            if signal is not None:
                outcome = correlate(signal, self._id, interface=interface)
                if outcome is not None:
                    return outcome
                logger.debug("signal_skipped", id=self._id, member=signal.member)
            if deadline is not None and loop.time() >= deadline:
                msg = f"no outcome for notification {self._id}"
                raise TimeoutError(msg)


class NotificationSession:
    def __init__(self, transport: Transport, *, config: ClientConfig | None = None) -> None:
        self._transport = transport
        self._config = config or ClientConfig()

    @property
    def config(self) -> ClientConfig:
        return self._config

    def destination(self, notification: Notification) -> str:
        return notification.bus.name if notification.bus is not None else self._config.bus_name

    async def send(self, notification: Notification) -> NotificationHandle:
        subscription = await self._transport.subscribe(self._config.interface, (ACTION_INVOKED, NOTIFICATION_CLOSED))
        try:
            notification_id = await self.notify(notification)
        except BaseException:
            await subscription.close()
            raise
        subscription.follow(notification_id)
        return NotificationHandle(self, notification_id, notification, subscription)

    async def notify(self, notification: Notification, *, replaces_id: int | None = None) -> int:
        """Send ``Notify`` without listening for outcomes and return the assigned id."""
        body: list[object] = [
            notification.appname,
            notification.replaces_id if replaces_id is None else replaces_id,
            notification.icon,
            notification.summary,
            notification.body,
            encode_actions(notification.actions),
            encode_hints(notification.hints),
            notification.timeout,
        ]
        reply = await self._call(NOTIFY, NOTIFY_SIGNATURE, body, bus=self.destination(notification))
        if reply and _is_uint(reply[0]):
            notification_id = reply[0]
        else:
            logger.warning("notify_reply_malformed", reply=reply)
            notification_id = 0
        logger.debug("notification_sent", id=notification_id, summary=notification.summary)
        return notification_id

    async def get_capabilities(self) -> list[str]:
        reply = await self._call(GET_CAPABILITIES)
        if not reply or not isinstance(reply[0], list):
            return []
        return [capability for capability in reply[0] if isinstance(capability, str)]

    async def get_server_information(self) -> ServerInformation:
        return ServerInformation.from_body(await self._call(GET_SERVER_INFORMATION))

    async def close_notification(self, notification_id: int, *, bus: str | None = None) -> None:
        await self._call(CLOSE_NOTIFICATION, "u", [notification_id], bus=bus)

    async def stop_server(self) -> bool:
        reply = await self._call(STOP)
        return bool(reply) and reply[0] is True

    async def _call(
        self,
        member: str,
        signature: str = "",
        body: Sequence[object] = (),
        *,
        bus: str | None = None,
    ) -> list[Any]:
        request = MethodRequest(
            destination=bus or self._config.bus_name,
            path=NOTIFICATION_OBJECTPATH,
            interface=self._config.interface,
            member=member,
            signature=signature,
            body=list(body),
        )
        return await self._transport.call(request, timeout=self._config.reply_timeout)


@asynccontextmanager
async def open_session(config: ClientConfig | None = None) -> AsyncIterator[NotificationSession]:
    config = config or ClientConfig()
    transport = await DbusTransport.connect(config.bus_address, attempts=config.connect_attempts)
    try:
        yield NotificationSession(transport, config=config)
    finally:
        transport.close()
