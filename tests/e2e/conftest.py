from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from tests.e2e.helpers import DBUS_DAEMON, start_dbus_daemon
from tests.test_utils.fakes import RecordingHandler
from xdg_notify.client import NotificationSession, open_session
from xdg_notify.config import ClientConfig, ServerConfig
from xdg_notify.server import NotificationService

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Generator

E2E_BUS_NAME = "org.freedesktop.Notifications.E2e"


@pytest.fixture
def bus_address() -> Generator[str, None, None]:
    if DBUS_DAEMON is None:
        pytest.skip("dbus-daemon is not installed")
    proc, address = start_dbus_daemon()
    yield address
    proc.terminate()
    proc.wait()


@pytest.fixture
def server_config() -> ServerConfig:
    return ServerConfig(bus_name=E2E_BUS_NAME, name="e2e-daemon", vendor="xdg-notify")


@pytest.fixture
async def service(bus_address: str, server_config: ServerConfig, handler: RecordingHandler) -> AsyncIterator[NotificationService]:
    service = await NotificationService.start(handler, config=server_config, bus_address=bus_address)
    yield service
    service.server.stop()
    await service.run_until_stopped()


@pytest.fixture
async def session(bus_address: str, service: NotificationService) -> AsyncIterator[NotificationSession]:
    _ = service
    config = ClientConfig(bus_name=E2E_BUS_NAME, bus_address=bus_address, poll_interval_ms=50)
    async with open_session(config) as session:
        yield session
