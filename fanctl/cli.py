"""Typer CLI entrypoint."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from enum import Enum
from pathlib import Path
from typing import TypeVar

import typer

from fanctl import mcp_server
from fanctl.core.config import FanConfig, load_config
from fanctl.core.errors import FanctlError
from fanctl.core.model import SendResult
from fanctl.core.service import FanController
from fanctl.logging_config import configure_logging

app = typer.Typer(help="Control a UDP smart fan directly or as an MCP tool server")

T = TypeVar("T")


class Switch(str, Enum):
    on = "on"
    off = "off"


@app.callback()
def main(
    ctx: typer.Context,
    config: Path | None = typer.Option(
        None, "--config", "-c", help="YAML config file (default: $XDG_CONFIG_HOME/fanctl/config.yaml)"
    ),
) -> None:
    ctx.obj = config


def _load(ctx: typer.Context) -> FanConfig:
    config = load_config(ctx.obj)
    configure_logging(
        config.log_level,
        log_path=config.log_path,
        console=config.environment != "production",
    )
    return config


def _run_with_controller(
    ctx: typer.Context, action: Callable[[FanController], Awaitable[T]]
) -> T:
    config = _load(ctx)

    async def _main() -> T:
        async with FanController.from_config(config) as controller:
            return await action(controller)

    return asyncio.run(_main())


def _echo_sent(result: SendResult, message: str) -> None:
    typer.echo(f"{message} (sent {result.payload_text} to {result.endpoint}, attempts={result.attempts})")


@app.command("serve")
def serve(ctx: typer.Context) -> None:
    """Run the MCP tool server on stdio."""
    try:
        config = _load(ctx)
        controller = FanController.from_config(config)
        asyncio.run(mcp_server.serve(controller))
    except FanctlError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("led")
def led(ctx: typer.Context, state: Switch) -> None:
    """Turn the fan LED on or off."""
    try:
        if state is Switch.on:
            result = _run_with_controller(ctx, lambda c: c.led_on())
        else:
            result = _run_with_controller(ctx, lambda c: c.led_off())
        _echo_sent(result, f"LED turned {state.value}")
    except FanctlError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("power")
def power(ctx: typer.Context, state: Switch) -> None:
    """Turn the fan on or off."""
    try:
        if state is Switch.on:
            result = _run_with_controller(ctx, lambda c: c.power_on())
        else:
            result = _run_with_controller(ctx, lambda c: c.power_off())
        _echo_sent(result, f"Fan turned {state.value}")
    except FanctlError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("speed")
def speed(ctx: typer.Context, level: int = typer.Argument(..., help="Fan speed from 1 to 6")) -> None:
    """Set the fan speed."""
    try:
        result = _run_with_controller(ctx, lambda c: c.set_speed(level))
        _echo_sent(result, f"Fan speed set to {level}")
    except FanctlError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("health")
def health(ctx: typer.Context) -> None:
    """Probe the fan and report whether it is reachable."""
    try:
        status = _run_with_controller(ctx, lambda c: c.check_health())
    except FanctlError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None
    typer.echo(f"Fan status: {status.state.value}. {status.detail}")
    if not status.healthy:
        raise typer.Exit(code=1)


@app.command("show-config")
def show_config(ctx: typer.Context) -> None:
    """Print the resolved configuration and exit."""
    try:
        config = load_config(ctx.obj)
    except FanctlError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None
    for key, value in config.as_dict().items():
        typer.echo(f"{key} = {value}")


def run() -> None:
    app()


if __name__ == "__main__":
    run()
