from __future__ import annotations

from typing import Final

NOTIFICATION_NAMESPACE: Final[str] = "org.freedesktop.Notifications"
NOTIFICATION_INTERFACE: Final[str] = "org.freedesktop.Notifications"
NOTIFICATION_OBJECTPATH: Final[str] = "/org/freedesktop/Notifications"

NOTIFY: Final[str] = "Notify"
GET_CAPABILITIES: Final[str] = "GetCapabilities"
GET_SERVER_INFORMATION: Final[str] = "GetServerInformation"
CLOSE_NOTIFICATION: Final[str] = "CloseNotification"
STOP: Final[str] = "Stop"

ACTION_INVOKED: Final[str] = "ActionInvoked"
NOTIFICATION_CLOSED: Final[str] = "NotificationClosed"

NOTIFY_SIGNATURE: Final[str] = "susssasa{sv}i"
ACTIONS_SIGNATURE: Final[str] = "as"
HINTS_SIGNATURE: Final[str] = "a{sv}"
ACTION_INVOKED_SIGNATURE: Final[str] = "us"
NOTIFICATION_CLOSED_SIGNATURE: Final[str] = "uu"

# 0 in replaces_id asks the server for a fresh id
NEW_NOTIFICATION_ID: Final[int] = 0
MAX_NOTIFICATION_ID: Final[int] = 0xFFFFFFFF

DEFAULT_TIMEOUT: Final[int] = -1
NEVER_EXPIRE: Final[int] = 0
MINIMUM_TIMEOUT_MS: Final[int] = 10

# Passed to wait_for_action callbacks when the notification closes instead
CLOSED_ACTION: Final[str] = "__closed"

ERROR_STOPPED: Final[str] = "org.freedesktop.Notifications.Error.Stopped"
ERROR_INVALID_ARGS: Final[str] = "org.freedesktop.DBus.Error.InvalidArgs"
ERROR_UNKNOWN_METHOD: Final[str] = "org.freedesktop.DBus.Error.UnknownMethod"
ERROR_FAILED: Final[str] = "org.freedesktop.DBus.Error.Failed"
