from __future__ import annotations

import os
import tomllib
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from .errors import ConfigError
from .models import AppConfig

if TYPE_CHECKING:
    from pathlib import Path

BUS_NAME_ENV = "XDG_NOTIFY_BUS_NAME"


def _format_validation_error(exc: ValidationError) -> str:
    first = exc.errors()[0]
    location = ".".join(str(part) for part in first["loc"])
    return f"{location}: {first['msg']}"


def _apply_env_overrides(data: dict[str, Any]) -> dict[str, Any]:
    bus_name = os.environ.get(BUS_NAME_ENV)
    if not bus_name:
        return data
    for section in ("server", "client"):
        table = data.get(section, {})
        if not isinstance(table, dict):
            msg = f"{section} must be a table"
            raise ConfigError(msg)
        data[section] = {**table, "bus_name": bus_name}
    return data


def load_config(path: Path | None = None) -> AppConfig:
    data: dict[str, Any] = {}
    if path is not None:
        try:
            data = tomllib.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError as exc:
            msg = f"config not found: {path}"
            raise ConfigError(msg) from exc
        except tomllib.TOMLDecodeError as exc:
            msg = "toml parse error"
            raise ConfigError(msg) from exc

    data = _apply_env_overrides(data)

    try:
        return AppConfig.from_raw(data)
    except ValidationError as exc:
        raise ConfigError(_format_validation_error(exc)) from exc
