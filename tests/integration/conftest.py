from __future__ import annotations

import pytest

from tests.test_utils.fakes import InMemoryBus, RecordingHandler
from xdg_notify.client.session import NotificationSession
from xdg_notify.config import ClientConfig
from xdg_notify.protocol.constants import NOTIFICATION_NAMESPACE
from xdg_notify.server.server import NotificationServer


@pytest.fixture
def server(bus: InMemoryBus, handler: RecordingHandler) -> NotificationServer:
    server = NotificationServer(handler, bus.emitter())
    bus.register(NOTIFICATION_NAMESPACE, server)
    return server


@pytest.fixture
def session(bus: InMemoryBus, server: NotificationServer) -> NotificationSession:
    _ = server
    return NotificationSession(bus.transport(), config=ClientConfig(poll_interval_ms=20))
