"""MCP tool server exposing the fan controller over stdio."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import signal
from collections.abc import Awaitable

from mcp.server.fastmcp import FastMCP

from fanctl import __version__
from fanctl.core.errors import FanctlError
from fanctl.core.service import FanController

LOGGER = logging.getLogger(__name__)

SERVER_NAME = "IOT Smart Fan"

TOOL_NAMES = (
    "check-fan-health",
    "turn-on-fan",
    "turn-off-fan",
    "turn-on-led",
    "turn-off-led",
    "set-fan-speed",
)


async def check_fan_health(controller: FanController) -> str:
    LOGGER.info("Health check requested")
    health = await controller.check_health()
    return f"Fan status: {health.state.value}. {health.detail}"


async def turn_on_fan(controller: FanController) -> str:
    LOGGER.info("Turn on fan requested")
    await _run(controller.power_on(), "turn on fan")
    return "Fan has been turned on successfully"


async def turn_off_fan(controller: FanController) -> str:
    LOGGER.info("Turn off fan requested")
    await _run(controller.power_off(), "turn off fan")
    return "Fan has been turned off successfully"


async def turn_on_led(controller: FanController) -> str:
    LOGGER.info("Turn on LED requested")
    await _run(controller.led_on(), "turn on LED")
    return "LED has been turned on successfully"


async def turn_off_led(controller: FanController) -> str:
    LOGGER.info("Turn off LED requested")
    await _run(controller.led_off(), "turn off LED")
    return "LED has been turned off successfully"


async def set_fan_speed(controller: FanController, speed: int) -> str:
    LOGGER.info("Set fan speed requested speed=%s", speed)
    await _run(controller.set_speed(speed), f"set fan speed to {speed}")
    return f"Fan speed has been set to {speed} successfully"


async def _run(operation: Awaitable[object], label: str) -> None:
    try:
        await operation
    except FanctlError as exc:
        LOGGER.error("Failed to %s: %s", label, exc)
        raise


def build_server(controller: FanController) -> FastMCP:
    server = FastMCP(SERVER_NAME)

    @server.tool(name="check-fan-health", description="Check the health status of the fan")
    async def _check_fan_health() -> str:
        return await check_fan_health(controller)

    @server.tool(name="turn-on-fan", description="Turn on the fan")
    async def _turn_on_fan() -> str:
        return await turn_on_fan(controller)

    @server.tool(name="turn-off-fan", description="Turn off the fan")
    async def _turn_off_fan() -> str:
        return await turn_off_fan(controller)

    @server.tool(name="turn-on-led", description="Turn on the LED")
    async def _turn_on_led() -> str:
        return await turn_on_led(controller)

    @server.tool(name="turn-off-led", description="Turn off the LED")
    async def _turn_off_led() -> str:
        return await turn_off_led(controller)

    @server.tool(name="set-fan-speed", description="Set the fan speed (1-6)")
    async def _set_fan_speed(speed: int) -> str:
        return await set_fan_speed(controller, speed)

    return server


async def serve(controller: FanController) -> None:
    """Run the tool server on stdio until stdin closes or a stop signal arrives."""
    server = build_server(controller)
    loop = asyncio.get_running_loop()
    task = asyncio.create_task(server.run_stdio_async())

    for sig in (signal.SIGINT, signal.SIGTERM):
        with contextlib.suppress(NotImplementedError):
            loop.add_signal_handler(sig, _request_stop, task, sig)

    LOGGER.info(
        "%s MCP server %s running on stdio, target %s", SERVER_NAME, __version__, controller.endpoint
    )
    try:
        with contextlib.suppress(asyncio.CancelledError):
            await task
    finally:
        for sig in (signal.SIGINT, signal.SIGTERM):
            with contextlib.suppress(NotImplementedError):
                loop.remove_signal_handler(sig)
        controller.shutdown()
        LOGGER.info("Graceful shutdown completed")


def _request_stop(task: asyncio.Task[None], sig: signal.Signals) -> None:
    LOGGER.info("Received %s, initiating graceful shutdown", sig.name)
    task.cancel()
