from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import pytest

from tests.e2e.conftest import E2E_BUS_NAME
from xdg_notify.client import ActionInvoked, Closed, NotificationSession
from xdg_notify.errors import TransportError
from xdg_notify.protocol import Hint, Notification, Urgency
from xdg_notify.protocol.constants import ERROR_STOPPED
from xdg_notify.protocol.hints import ByteArrayValue
from xdg_notify.protocol.models import CloseReason, NotificationBus

if TYPE_CHECKING:
    from tests.test_utils.fakes import RecordingHandler
    from xdg_notify.server import NotificationService


def _notification(**kwargs: object) -> Notification:
    fields: dict[str, object] = {"summary": "Backup finished", "appname": "e2e", "bus": NotificationBus(E2E_BUS_NAME), **kwargs}
    return Notification(**fields)  # type: ignore[arg-type]


async def test_notification_expires_after_the_reply(session: NotificationSession) -> None:
    handle = await session.send(_notification())

    outcome = await handle.wait_for_outcome(timeout=2)

    assert outcome == Closed(notification_id=handle.id, reason=CloseReason.EXPIRED, code=1)


async def test_hints_and_actions_cross_the_wire(session: NotificationSession, handler: RecordingHandler) -> None:
    notification = _notification(
        body="3 files",
        timeout=0,
        hints=(Hint.urgency(Urgency.CRITICAL), Hint.category("transfer.complete"), Hint("x-thumb", ByteArrayValue(b"\x00\x01"))),
    ).with_action("open", "Open folder")

    await session.notify(notification)

    (received,) = handler.received
    assert received.summary == "Backup finished"
    assert received.body == "3 files"
    assert received.actions == notification.actions
    assert set(received.hints) == set(notification.hints)


async def test_action_reaches_the_client(session: NotificationSession, service: NotificationService) -> None:
    handle = await session.send(_notification(timeout=0).with_action("open", "Open"))
    waiting = asyncio.create_task(handle.wait_for_outcome(timeout=2))

    assert service.server.invoke_action(handle.id, "open")

    assert await waiting == ActionInvoked(notification_id=handle.id, tag="open")


async def test_close_notification(session: NotificationSession) -> None:
    handle = await session.send(_notification(timeout=0))

    await handle.close()

    assert await handle.wait_for_outcome(timeout=2) == Closed(
        notification_id=handle.id,
        reason=CloseReason.CLOSED_BY_REQUEST,
        code=3,
    )


async def test_queries(session: NotificationSession) -> None:
    info = await session.get_server_information()

    assert (info.name, info.vendor, info.spec_version) == ("e2e-daemon", "xdg-notify", "1.2")
    assert await session.get_capabilities() == ["actions", "body"]


async def test_stop_then_notify_is_refused(session: NotificationSession, service: NotificationService) -> None:
    assert await session.stop_server() is True
    await service.run_until_stopped()

    with pytest.raises(TransportError):
        await session.notify(_notification())


async def test_stop_refuses_while_still_connected(session: NotificationSession, service: NotificationService) -> None:
    service.server.stop()

    with pytest.raises(TransportError) as excinfo:
        await session.notify(_notification())

    assert excinfo.value.error_name == ERROR_STOPPED
