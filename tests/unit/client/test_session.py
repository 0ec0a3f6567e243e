import asyncio

import pytest
from dbus_next import Variant

from tests.test_utils.factories import NotificationFactory
from tests.test_utils.fakes import InMemoryBus, RecordingHandler, ScriptedTransport
from tests.test_utils.helpers import settle
from xdg_notify.client.session import ActionInvoked, Closed, NotificationSession
from xdg_notify.client.transport import MethodRequest, SignalMessage
from xdg_notify.config import ClientConfig, ServerConfig
from xdg_notify.errors import HandleConsumedError, MessageBuildError, TransportError
from xdg_notify.protocol.constants import (
    CLOSED_ACTION,
    ERROR_STOPPED,
    NOTIFICATION_INTERFACE,
    NOTIFICATION_NAMESPACE,
    NOTIFICATION_OBJECTPATH,
)
from xdg_notify.protocol.hints import Hint, Urgency
from xdg_notify.protocol.models import CloseReason, Notification, NotificationBus, ServerInformation
from xdg_notify.server.server import NotificationServer


def action_signal(notification_id: int, tag: str) -> SignalMessage:
    return SignalMessage(NOTIFICATION_OBJECTPATH, NOTIFICATION_INTERFACE, "ActionInvoked", [notification_id, tag])


def closed_signal(notification_id: int, code: int) -> SignalMessage:
    return SignalMessage(NOTIFICATION_OBJECTPATH, NOTIFICATION_INTERFACE, "NotificationClosed", [notification_id, code])


@pytest.fixture
def transport() -> ScriptedTransport:
    return ScriptedTransport(replies={"Notify": [7], "Stop": [True]})


@pytest.fixture
def session(transport: ScriptedTransport) -> NotificationSession:
    return NotificationSession(transport, config=ClientConfig(poll_interval_ms=20))


class TestSend:
    async def test_notify_arguments_are_positional(
        self,
        session: NotificationSession,
        transport: ScriptedTransport,
    ) -> None:
        notification = Notification(
            summary="Disk almost full",
            body="3% left",
            icon="drive-harddisk",
            appname="monitor",
            hints=(Hint.urgency(Urgency.CRITICAL),),
            timeout=4000,
        ).with_action("open", "Open")

        await session.send(notification)

        (request,) = transport.calls
        assert request.destination == NOTIFICATION_NAMESPACE
        assert request.path == NOTIFICATION_OBJECTPATH
        assert request.member == "Notify"
        assert request.signature == "susssasa{sv}i"
        assert request.body == [
            "monitor",
            0,
            "drive-harddisk",
            "Disk almost full",
            "3% left",
            ["open", "Open"],
            {"urgency": Variant("y", 2)},
            4000,
        ]

    async def test_handle_carries_the_assigned_id(self, session: NotificationSession) -> None:
        handle = await session.send(NotificationFactory.build())

        assert handle.id == 7
        assert handle.outcome is None

    async def test_subscribes_before_sending(self, session: NotificationSession, transport: ScriptedTransport) -> None:
        await session.send(NotificationFactory.build())

        (subscription,) = transport.subscriptions
        assert subscription.members == {"ActionInvoked", "NotificationClosed"}
        assert subscription.interface == NOTIFICATION_INTERFACE

    async def test_failed_send_releases_the_subscription(self) -> None:
        transport = ScriptedTransport(errors={"Notify": TransportError("no reply")})
        session = NotificationSession(transport)

        with pytest.raises(TransportError, match="no reply"):
            await session.send(NotificationFactory.build())

        assert transport.subscriptions[0].closed

    async def test_replaces_existing_id(self, session: NotificationSession, transport: ScriptedTransport) -> None:
        await session.send(NotificationFactory.build(id=3))

        assert transport.calls[0].body[1] == 3

    async def test_custom_bus(self, session: NotificationSession, transport: ScriptedTransport) -> None:
        await session.send(NotificationFactory.build(bus=NotificationBus.custom("Test")))

        assert transport.calls[0].destination == f"{NOTIFICATION_NAMESPACE}.Test"

    async def test_configured_bus_is_the_default(self, transport: ScriptedTransport) -> None:
        session = NotificationSession(transport, config=ClientConfig(bus_name="org.example.Notifier"))

        await session.send(NotificationFactory.build())

        assert transport.calls[0].destination == "org.example.Notifier"

    async def test_invalid_bus_name_is_a_build_error(self, session: NotificationSession) -> None:
        with pytest.raises(MessageBuildError, match="bus name"):
            await session.send(NotificationFactory.build(bus=NotificationBus.custom("9 bad")))

    async def test_malformed_reply_yields_zero(self, transport: ScriptedTransport, session: NotificationSession) -> None:
        transport.replies["Notify"] = ["seven"]

        assert await session.notify(NotificationFactory.build()) == 0


class TestOutcome:
    async def test_action_calls_on_action_once(self, session: NotificationSession, transport: ScriptedTransport) -> None:
        actions: list[str] = []
        closes: list[CloseReason] = []
        handle = await session.send(NotificationFactory.build())
        transport.push(action_signal(7, "open"))

        outcome = await handle.wait_for_outcome(actions.append, closes.append)

        assert outcome == ActionInvoked(notification_id=7, tag="open")
        assert handle.outcome == outcome
        assert actions == ["open"]
        assert closes == []

    async def test_close_calls_on_close(self, session: NotificationSession, transport: ScriptedTransport) -> None:
        closes: list[CloseReason] = []
        handle = await session.send(NotificationFactory.build())
        transport.push(closed_signal(7, 2))

        await handle.on_close(closes.append)

        assert closes == [CloseReason.DISMISSED]

    async def test_signals_for_other_notifications_are_skipped(
        self,
        session: NotificationSession,
        transport: ScriptedTransport,
    ) -> None:
        handle = await session.send(NotificationFactory.build())
        transport.push(closed_signal(8, 1))
        transport.push(action_signal(6, "open"))
        transport.push(closed_signal(7, 3))

        outcome = await handle.wait_for_outcome()

        assert outcome == Closed(notification_id=7, reason=CloseReason.CLOSED_BY_REQUEST, code=3)

    async def test_idle_handle_buffers_only_its_own_signals(self, session: NotificationSession, transport: ScriptedTransport) -> None:
        await session.send(NotificationFactory.build())
        (subscription,) = transport.subscriptions

        for other_id in range(100, 200):
            transport.push(closed_signal(other_id, 1))
        transport.push(action_signal(7, "open"))

        assert subscription.buffered == 1

    async def test_signals_buffered_before_the_reply_are_narrowed_to_the_id(self, transport: ScriptedTransport) -> None:
        class EarlyTransport(ScriptedTransport):
            async def call(self, request: MethodRequest, *, timeout: float) -> list[object]:
                self.push(closed_signal(3, 1))
                self.push(action_signal(7, "open"))
                return await super().call(request, timeout=timeout)

        early = EarlyTransport(replies=transport.replies)
        session = NotificationSession(early, config=ClientConfig(poll_interval_ms=20))

        handle = await session.send(NotificationFactory.build())

        assert early.subscriptions[0].buffered == 1
        assert await handle.wait_for_outcome() == ActionInvoked(notification_id=7, tag="open")

    async def test_first_match_wins(self, session: NotificationSession, transport: ScriptedTransport) -> None:
        actions: list[str] = []
        handle = await session.send(NotificationFactory.build())
        transport.push(closed_signal(7, 1))
        transport.push(action_signal(7, "open"))

        outcome = await handle.wait_for_outcome(actions.append)

        assert isinstance(outcome, Closed)
        assert actions == []
        with pytest.raises(HandleConsumedError):
            await handle.wait_for_outcome(actions.append)

    async def test_second_concurrent_wait_is_refused(self, session: NotificationSession, transport: ScriptedTransport) -> None:
        handle = await session.send(NotificationFactory.build())
        first = asyncio.create_task(handle.wait_for_outcome())
        await settle()

        with pytest.raises(HandleConsumedError):
            await handle.wait_for_outcome()

        transport.push(action_signal(7, "open"))
        assert await first == ActionInvoked(notification_id=7, tag="open")

    async def test_timeout_leaves_the_handle_usable(self, session: NotificationSession, transport: ScriptedTransport) -> None:
        handle = await session.send(NotificationFactory.build())

        with pytest.raises(TimeoutError):
            await handle.wait_for_outcome(timeout=0.05)

        transport.push(closed_signal(7, 1))
        assert isinstance(await handle.wait_for_outcome(timeout=1), Closed)

    async def test_wait_for_action_reports_close_as_closed_action(
        self,
        session: NotificationSession,
        transport: ScriptedTransport,
    ) -> None:
        seen: list[str] = []
        handle = await session.send(NotificationFactory.build())
        transport.push(closed_signal(7, 1))

        await handle.wait_for_action(seen.append)

        assert seen == [CLOSED_ACTION]

    async def test_resolving_releases_the_subscription(
        self,
        session: NotificationSession,
        transport: ScriptedTransport,
    ) -> None:
        handle = await session.send(NotificationFactory.build())
        transport.push(action_signal(7, "open"))

        await handle.wait_for_outcome()

        assert transport.subscriptions[0].closed

    async def test_context_manager_releases_the_subscription(
        self,
        session: NotificationSession,
        transport: ScriptedTransport,
    ) -> None:
        async with await session.send(NotificationFactory.build()):
            pass

        assert transport.subscriptions[0].closed


class TestHandleOperations:
    async def test_update_resends_with_the_handle_id(self, session: NotificationSession, transport: ScriptedTransport) -> None:
        handle = await session.send(NotificationFactory.build(summary="Downloading"))

        await handle.update(NotificationFactory.build(summary="Downloaded"))

        request = transport.calls[-1]
        assert request.member == "Notify"
        assert request.body[1] == 7
        assert request.body[3] == "Downloaded"
        assert handle.notification.summary == "Downloaded"

    async def test_update_follows_a_newly_assigned_id(self, session: NotificationSession, transport: ScriptedTransport) -> None:
        handle = await session.send(NotificationFactory.build())
        transport.replies["Notify"] = [9]

        await handle.update()
        transport.push(closed_signal(7, 1))
        transport.push(closed_signal(9, 1))

        assert handle.id == 9
        assert await handle.wait_for_outcome() == Closed(notification_id=9, reason=CloseReason.EXPIRED, code=1)

    async def test_close_requests_close_of_the_id(self, session: NotificationSession, transport: ScriptedTransport) -> None:
        handle = await session.send(NotificationFactory.build())

        await handle.close()

        request = transport.calls[-1]
        assert (request.member, request.signature, request.body) == ("CloseNotification", "u", [7])


class TestQueries:
    async def test_capabilities_keep_only_strings(self, transport: ScriptedTransport, session: NotificationSession) -> None:
        transport.replies["GetCapabilities"] = [["body", 3, "actions"]]

        assert await session.get_capabilities() == ["body", "actions"]

    async def test_capabilities_degrade_to_empty(self, session: NotificationSession) -> None:
        assert await session.get_capabilities() == []

    async def test_server_information(self, transport: ScriptedTransport, session: NotificationSession) -> None:
        transport.replies["GetServerInformation"] = ["daemon", "example", "1.0", "1.2"]

        info = await session.get_server_information()

        assert info == ServerInformation(name="daemon", vendor="example", version="1.0", spec_version="1.2")

    async def test_server_information_degrades(self, session: NotificationSession) -> None:
        assert await session.get_server_information() == ServerInformation(name="", vendor="", version="", spec_version="")

    async def test_stop_server(self, session: NotificationSession, transport: ScriptedTransport) -> None:
        assert await session.stop_server() is True
        transport.replies["Stop"] = []
        assert await session.stop_server() is False


class TestAgainstServer:
    async def test_auto_close_reaches_the_handle(self, bus: InMemoryBus) -> None:
        bus.register(NOTIFICATION_NAMESPACE, NotificationServer(RecordingHandler(), bus.emitter()))
        session = NotificationSession(bus.transport())

        handle = await session.send(NotificationFactory.build())
        outcome = await handle.wait_for_outcome(timeout=1)

        assert outcome == Closed(notification_id=handle.id, reason=CloseReason.EXPIRED, code=1)

    async def test_first_action_emitted_before_the_reply_is_seen(self, bus: InMemoryBus) -> None:
        server = NotificationServer(RecordingHandler(), bus.emitter(), config=ServerConfig(emit_first_action=True))
        bus.register(NOTIFICATION_NAMESPACE, server)
        session = NotificationSession(bus.transport())

        handle = await session.send(NotificationFactory.build(timeout=0).with_action("default", "Open"))

        assert await handle.wait_for_outcome(timeout=1) == ActionInvoked(notification_id=1, tag="default")

    async def test_stopped_server_refuses_notify(self, bus: InMemoryBus) -> None:
        bus.register(NOTIFICATION_NAMESPACE, NotificationServer(RecordingHandler(), bus.emitter()))
        session = NotificationSession(bus.transport())

        assert await session.stop_server() is True
        with pytest.raises(TransportError) as excinfo:
            await session.notify(NotificationFactory.build())

        assert excinfo.value.error_name == ERROR_STOPPED

    async def test_missing_server_is_a_transport_error(self, bus: InMemoryBus) -> None:
        session = NotificationSession(bus.transport())

        with pytest.raises(TransportError):
            await session.get_capabilities()
