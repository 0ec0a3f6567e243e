"""Transport-agnostic notification server.

Each ``Notify`` request is handled inside one synchronous scope: the id is
assigned, the handler runs, the auto-close timer is scheduled and the reply
is produced before the scope exits. The timer waits for that exit, so a
``NotificationClosed`` signal can never overtake the reply carrying its id.

All requests are dispatched from a single event loop and id assignment has
no suspension point, so concurrent ``Notify`` calls never share an id.
"""

from __future__ import annotations

import asyncio
from functools import partial
from typing import TYPE_CHECKING, Any, Protocol

from xdg_notify.config import ServerConfig
from xdg_notify.errors import ProtocolDecodeError, ServerStoppedError, TransportError
from xdg_notify.observability import get_logger
from xdg_notify.protocol.codec import decode_actions, decode_hints
from xdg_notify.protocol.constants import (
    ACTION_INVOKED,
    ACTION_INVOKED_SIGNATURE,
    CLOSE_NOTIFICATION,
    ERROR_FAILED,
    ERROR_INVALID_ARGS,
    ERROR_STOPPED,
    ERROR_UNKNOWN_METHOD,
    GET_CAPABILITIES,
    GET_SERVER_INFORMATION,
    MAX_NOTIFICATION_ID,
    NEW_NOTIFICATION_ID,
    NOTIFICATION_CLOSED,
    NOTIFICATION_CLOSED_SIGNATURE,
    NOTIFY,
    STOP,
)
from xdg_notify.protocol.models import CloseReason, NotifyRequest, ReceivedNotification, ServerInformation
from xdg_notify.protocol.timeout import TimeoutPolicy
from xdg_notify.server.handler import NotificationHandler, as_handler
from xdg_notify.server.sync import CloseSynchronizer, Waiter

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

logger = get_logger(__name__)


class MethodCall(Protocol):
    """An inbound method call that must be answered exactly once."""

    @property
    def member(self) -> str: ...

    @property
    def body(self) -> Sequence[Any]: ...

    def reply(self, signature: str, body: Sequence[object]) -> None: ...

    def fail(self, error_name: str, message: str) -> None: ...


class SignalEmitter(Protocol):
    def emit(self, member: str, signature: str, body: Sequence[object]) -> None: ...


class NotificationServer:
    def __init__(
        self,
        handler: NotificationHandler | Callable[[ReceivedNotification], None],
        emitter: SignalEmitter,
        *,
        config: ServerConfig | None = None,
    ) -> None:
        self._handler = as_handler(handler)
        self._emitter = emitter
        self._config = config or ServerConfig()
        self._timeout_policy = TimeoutPolicy(minimum_ms=self._config.minimum_timeout_ms)
        self._count = 0
        self._open: set[int] = set()
        self._close_tasks: dict[int, asyncio.Task[None]] = {}
        self._stop_event = asyncio.Event()
        # checked by every auto-close timer before sleeping and before emitting
        self._cancelled = asyncio.Event()
        self._methods: dict[str, Callable[[MethodCall], None]] = {
            NOTIFY: self._call_notify,
            GET_CAPABILITIES: self._call_get_capabilities,
            GET_SERVER_INFORMATION: self._call_get_server_information,
            CLOSE_NOTIFICATION: self._call_close_notification,
            STOP: self._call_stop,
        }

    @property
    def config(self) -> ServerConfig:
        return self._config

    @property
    def stopped(self) -> bool:
        return self._stop_event.is_set()

    @property
    def open_ids(self) -> frozenset[int]:
        return frozenset(self._open)

    @property
    def pending_closes(self) -> int:
        return len(self._close_tasks)

    def dispatch(self, call: MethodCall) -> None:
        if self.stopped:
            call.fail(ERROR_STOPPED, "notification server is stopped")
            return
        method = self._methods.get(call.member)
        if method is None:
            call.fail(ERROR_UNKNOWN_METHOD, f"unknown method {call.member!r}")
            return
        try:
            method(call)
        except ProtocolDecodeError as exc:
            logger.warning("request_rejected", member=call.member, error=str(exc))
            call.fail(ERROR_INVALID_ARGS, str(exc))
        except Exception as exc:
            logger.exception("request_failed", member=call.member)
            call.fail(ERROR_FAILED, str(exc))

    def notify(self, request: NotifyRequest, *, reply: Callable[[int], object] | None = None) -> int:
        """Handle one ``Notify`` request and return the id assigned to it.

        ``reply`` is called with the id as the last step of the request scope.
        Auto-close timing only starts once that scope has been left, on any
        exit path.
        """
        if self.stopped:
            msg = "notification server is stopped"
            raise ServerStoppedError(msg)

        signaler, has_replied = CloseSynchronizer.create()
        with signaler:
            notification_id = self._assign_id(request.replaces_id)
            received = ReceivedNotification(
                appname=request.appname,
                id=notification_id,
                replaces_id=request.replaces_id,
                icon=request.icon,
                summary=request.summary,
                body=request.body,
                actions=decode_actions(request.actions),
                hints=decode_hints(request.hints),
                timeout=request.timeout,
            )
            logger.debug(
                "notification_received",
                id=notification_id,
                appname=received.appname,
                summary=received.summary,
                actions=len(received.actions),
                hints=len(received.hints),
                timeout=received.timeout,
            )

            if self._config.emit_first_action and received.actions:
                self._emit(ACTION_INVOKED, ACTION_INVOKED_SIGNATURE, [notification_id, received.actions[0].tag])

            self._handler.handle(received)
            self._cancel_close(notification_id)
            self._open.add(notification_id)
            self._schedule_close(notification_id, request.timeout, has_replied)

            if reply is not None:
                reply(notification_id)
        return notification_id

    def get_server_information(self) -> ServerInformation:
        return ServerInformation(
            name=self._config.name,
            vendor=self._config.vendor,
            version=self._config.version,
            spec_version=self._config.spec_version,
        )

    def get_capabilities(self) -> list[str]:
        return list(self._config.capabilities)

    def invoke_action(self, notification_id: int, tag: str) -> bool:
        """Report that the user activated ``tag`` on an open notification."""
        if notification_id not in self._open:
            return False
        return self._emit(ACTION_INVOKED, ACTION_INVOKED_SIGNATURE, [notification_id, tag])

    def close(self, notification_id: int, reason: CloseReason = CloseReason.DISMISSED) -> bool:
        """Close an open notification. Nothing is emitted for unknown or closed ids."""
        self._cancel_close(notification_id)
        return self._emit_closed(notification_id, reason)

    def stop(self) -> bool:
        logger.info("stop_requested", pending_closes=len(self._close_tasks))
        self._stop_event.set()
        return True

    async def wait_stopped(self) -> None:
        await self._stop_event.wait()

    async def shutdown(self) -> None:
        tasks = list(self._close_tasks.values())
        if self._config.on_stop == "cancel":
            self._cancelled.set()
            for task in tasks:
                task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        logger.info("server_shutdown", policy=self._config.on_stop, pending_closes=len(tasks))

    def _assign_id(self, replaces_id: int) -> int:
        if replaces_id != NEW_NOTIFICATION_ID and replaces_id in self._open:
            return replaces_id
        # ids still open after a wrap are skipped
        while True:
            self._count = self._count % MAX_NOTIFICATION_ID + 1
            if self._count not in self._open:
                return self._count

    def _cancel_close(self, notification_id: int) -> None:
        task = self._close_tasks.pop(notification_id, None)
        if task is not None:
            task.cancel()

    def _schedule_close(self, notification_id: int, timeout: int, has_replied: Waiter) -> None:
        delay_ms = self._timeout_policy.resolve(timeout)
        if delay_ms is None:
            return
        task = asyncio.create_task(self._close_after(notification_id, delay_ms, has_replied))
        self._close_tasks[notification_id] = task
        task.add_done_callback(partial(self._forget_close, notification_id))

    def _forget_close(self, notification_id: int, task: asyncio.Task[None]) -> None:
        if self._close_tasks.get(notification_id) is task:
            del self._close_tasks[notification_id]

    async def _close_after(self, notification_id: int, delay_ms: int, has_replied: Waiter) -> None:
        await has_replied.wait()
        if self._cancelled.is_set():
            return
        logger.debug("auto_close_started", id=notification_id, delay_ms=delay_ms)
        await asyncio.sleep(delay_ms / 1000)
        if self._cancelled.is_set():
            return
        self._emit_closed(notification_id, CloseReason.EXPIRED)

    def _emit_closed(self, notification_id: int, reason: CloseReason) -> bool:
        if notification_id not in self._open:
            return False
        self._open.discard(notification_id)
        return self._emit(NOTIFICATION_CLOSED, NOTIFICATION_CLOSED_SIGNATURE, [notification_id, int(reason)])

    def _emit(self, member: str, signature: str, body: list[object]) -> bool:
        try:
            self._emitter.emit(member, signature, body)
        except TransportError as exc:
            logger.error("signal_emit_failed", member=member, body=body, error=str(exc))
            return False
        logger.debug("signal_emitted", member=member, body=body)
        return True

    def _call_notify(self, call: MethodCall) -> None:
        request = NotifyRequest.from_body(call.body)
        self.notify(request, reply=lambda notification_id: call.reply("u", [notification_id]))

    def _call_get_capabilities(self, call: MethodCall) -> None:
        call.reply("as", [self.get_capabilities()])

    def _call_get_server_information(self, call: MethodCall) -> None:
        call.reply("ssss", self.get_server_information().to_body())

    def _call_close_notification(self, call: MethodCall) -> None:
        body = call.body
        if len(body) != 1 or not isinstance(body[0], int) or isinstance(body[0], bool):
            msg = "CloseNotification expects one unsigned integer"
            raise ProtocolDecodeError(msg)
        self.close(body[0], CloseReason.CLOSED_BY_REQUEST)
        call.reply("", [])

    def _call_stop(self, call: MethodCall) -> None:
        call.reply("b", [self.stop()])
