from __future__ import annotations

import asyncio
from pathlib import Path
from typing import TYPE_CHECKING, Annotated

import typer

from xdg_notify.client import ActionInvoked, open_session
from xdg_notify.config import ConfigError, load_config
from xdg_notify.errors import TransportError
from xdg_notify.observability import configure_logging, get_logger
from xdg_notify.protocol import Action, Hint, Notification, Urgency
from xdg_notify.server import serve as serve_notifications

if TYPE_CHECKING:
    from xdg_notify.client import Outcome
    from xdg_notify.config import ClientConfig
    from xdg_notify.protocol import ReceivedNotification

logger = get_logger(__name__)

app = typer.Typer(add_completion=False)

ConfigOption = Annotated[Path | None, typer.Option("-c", "--config")]


def _print_notification(notification: ReceivedNotification) -> None:
    line = f"[{notification.id}] {notification.appname}: {notification.summary}"
    if notification.body:
        line = f"{line} - {notification.body}"
    typer.echo(line, err=True)
    for action in notification.actions:
        typer.echo(f"    action {action.tag}: {action.label}", err=True)


def _parse_action(value: str) -> Action:
    tag, sep, label = value.partition(":")
    if not sep or not tag:
        msg = f"action must look like TAG:LABEL, got {value!r}"
        raise typer.BadParameter(msg)
    return Action(tag, label)


def _describe(outcome: Outcome) -> str:
    if isinstance(outcome, ActionInvoked):
        return f"action {outcome.tag}"
    return f"closed {outcome.reason.name.lower()}"


def _client_config(config: Path | None) -> ClientConfig:
    return load_config(config).client


@app.command()
def serve(config: ConfigOption = None) -> None:
    """Run a notification server that prints what it receives until stopped."""
    configure_logging()
    try:
        server_config = load_config(config).server
        asyncio.run(serve_notifications(_print_notification, config=server_config))
    except (ConfigError, TransportError) as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1) from exc


@app.command()
def send(
    summary: str,
    body: Annotated[str, typer.Option()] = "",
    icon: Annotated[str, typer.Option()] = "",
    app_name: Annotated[str, typer.Option("--app-name")] = "xdg-notify",
    timeout: Annotated[int, typer.Option(help="milliseconds; -1 for the server default, 0 to never expire")] = -1,
    action: Annotated[list[str] | None, typer.Option(help="TAG:LABEL, repeatable")] = None,
    urgency: Annotated[str | None, typer.Option(help="low, normal or critical")] = None,
    category: Annotated[str | None, typer.Option()] = None,
    wait: Annotated[bool, typer.Option("--wait", help="wait for an action or for the close")] = False,
    config: ConfigOption = None,
) -> None:
    configure_logging()
    hints: list[Hint] = []
    if urgency is not None:
        try:
            hints.append(Hint.urgency(Urgency.parse(urgency)))
        except ValueError as exc:
            raise typer.BadParameter(str(exc), param_hint="--urgency") from exc
    if category is not None:
        hints.append(Hint.category(category))
    notification = Notification(
        summary=summary,
        body=body,
        icon=icon,
        appname=app_name,
        actions=tuple(_parse_action(value) for value in action or ()),
        hints=tuple(hints),
        timeout=timeout,
    )
    try:
        asyncio.run(_send(notification, _client_config(config), wait=wait))
    except (ConfigError, TransportError) as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1) from exc


async def _send(notification: Notification, config: ClientConfig, *, wait: bool) -> None:
    async with open_session(config) as session:
        if not wait:
            typer.echo(await session.notify(notification))
            return
        async with await session.send(notification) as handle:
            typer.echo(handle.id)
            outcome = await handle.wait_for_outcome()
            typer.echo(_describe(outcome))


@app.command()
def info(config: ConfigOption = None) -> None:
    """Print the server's name, vendor, version and protocol version."""
    configure_logging()
    try:
        asyncio.run(_info(_client_config(config)))
    except (ConfigError, TransportError) as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1) from exc


async def _info(config: ClientConfig) -> None:
    async with open_session(config) as session:
        information = await session.get_server_information()
    for label, value in zip(("name", "vendor", "version", "spec_version"), information.to_body(), strict=True):
        typer.echo(f"{label}: {value}")


@app.command()
def capabilities(config: ConfigOption = None) -> None:
    configure_logging()
    try:
        asyncio.run(_capabilities(_client_config(config)))
    except (ConfigError, TransportError) as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1) from exc


async def _capabilities(config: ClientConfig) -> None:
    async with open_session(config) as session:
        for capability in await session.get_capabilities():
            typer.echo(capability)


@app.command()
def stop(config: ConfigOption = None) -> None:
    """Ask the running server to stop."""
    configure_logging()
    try:
        stopped = asyncio.run(_stop(_client_config(config)))
    except (ConfigError, TransportError) as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1) from exc
    logger.info("stop_sent", acknowledged=stopped)


async def _stop(config: ClientConfig) -> bool:
    async with open_session(config) as session:
        return await session.stop_server()


if __name__ == "__main__":
    app()
