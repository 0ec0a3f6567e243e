from __future__ import annotations

from typing import TYPE_CHECKING, Literal

from dbus_next.validators import is_bus_name_valid, is_interface_name_valid
from pydantic import BaseModel, ConfigDict, Field, field_validator

from xdg_notify._version import __version__
from xdg_notify.protocol.constants import MINIMUM_TIMEOUT_MS, NOTIFICATION_INTERFACE, NOTIFICATION_NAMESPACE

if TYPE_CHECKING:
    from collections.abc import Mapping


def _check_bus_name(value: str) -> str:
    if not is_bus_name_valid(value):
        msg = "must be a valid bus name"
        raise ValueError(msg)
    return value


def _check_interface(value: str) -> str:
    if not is_interface_name_valid(value):
        msg = "must be a valid interface name"
        raise ValueError(msg)
    return value


class ServerConfig(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    bus_name: str = NOTIFICATION_NAMESPACE
    interface: str = NOTIFICATION_INTERFACE
    name: str = "xdg-notify"
    vendor: str = "xdg-notify"
    version: str = __version__
    spec_version: str = "1.2"
    capabilities: tuple[str, ...] = ("actions", "body")
    minimum_timeout_ms: int = Field(default=MINIMUM_TIMEOUT_MS, gt=0)
    emit_first_action: bool = False
    on_stop: Literal["cancel", "drain"] = "cancel"

    @field_validator("bus_name")
    @classmethod
    def _validate_bus_name(cls, value: str) -> str:
        return _check_bus_name(value)

    @field_validator("interface")
    @classmethod
    def _validate_interface(cls, value: str) -> str:
        return _check_interface(value)


class ClientConfig(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    bus_name: str = NOTIFICATION_NAMESPACE
    interface: str = NOTIFICATION_INTERFACE
    reply_timeout_ms: int = Field(default=2000, gt=0)
    poll_interval_ms: int = Field(default=1000, gt=0)
    connect_attempts: int = Field(default=3, ge=1)
    bus_address: str | None = None

    @field_validator("bus_name")
    @classmethod
    def _validate_bus_name(cls, value: str) -> str:
        return _check_bus_name(value)

    @field_validator("interface")
    @classmethod
    def _validate_interface(cls, value: str) -> str:
        return _check_interface(value)

    @property
    def reply_timeout(self) -> float:
        return self.reply_timeout_ms / 1000

    @property
    def poll_interval(self) -> float:
        return self.poll_interval_ms / 1000


class AppConfig(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    server: ServerConfig = Field(default_factory=ServerConfig)
    client: ClientConfig = Field(default_factory=ClientConfig)

    @classmethod
    def from_raw(cls, data: Mapping[str, object]) -> AppConfig:
        return cls.model_validate(data)
