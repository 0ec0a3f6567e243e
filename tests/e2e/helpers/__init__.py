from tests.e2e.helpers.cli import CliResult, run_cli, start_serve, wait_for_server
from tests.e2e.helpers.daemon import DBUS_DAEMON, start_dbus_daemon

__all__ = [
    "DBUS_DAEMON",
    "CliResult",
    "run_cli",
    "start_dbus_daemon",
    "start_serve",
    "wait_for_server",
]
