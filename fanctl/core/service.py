"""Service layer used by the CLI and the MCP tool server."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING

from fanctl.core.encoding import encode
from fanctl.core.errors import FanctlError, ValidationError
from fanctl.core.model import (
    Command,
    Endpoint,
    HealthState,
    HealthStatus,
    LedCommand,
    PowerCommand,
    RetryPolicy,
    SendResult,
    SpeedCommand,
)
from fanctl.core.retry import RetryExecutor
from fanctl.core.validation import validate_speed
from fanctl.transports.base import Transport
from fanctl.transports.udp import UDPTransport

if TYPE_CHECKING:
    from fanctl.core.config import FanConfig

LOGGER = logging.getLogger(__name__)

HEALTH_PROBE = LedCommand(on=False)


class FanController:
    def __init__(
        self,
        endpoint: Endpoint,
        policy: RetryPolicy,
        *,
        transport: Transport | None = None,
        sleep: Callable[[float], Awaitable[object]] | None = None,
    ) -> None:
        self.endpoint = endpoint
        self.policy = policy
        self.transport = transport or UDPTransport()
        self._executor = RetryExecutor(policy, sleep=sleep or asyncio.sleep)
        self._shut_down = False

    @classmethod
    def from_config(cls, config: FanConfig, *, transport: Transport | None = None) -> FanController:
        return cls(config.endpoint, config.retry_policy, transport=transport)

    async def __aenter__(self) -> FanController:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        self.shutdown()

    async def led_on(self) -> SendResult:
        return await self._send(LedCommand(on=True), "turn on LED")

    async def led_off(self) -> SendResult:
        return await self._send(LedCommand(on=False), "turn off LED")

    async def power_on(self) -> SendResult:
        return await self._send(PowerCommand(on=True), "turn on fan")

    async def power_off(self) -> SendResult:
        return await self._send(PowerCommand(on=False), "turn off fan")

    async def set_speed(self, level: object) -> SendResult:
        try:
            speed = validate_speed(level)
        except ValidationError as exc:
            LOGGER.warning("Invalid fan speed provided speed=%r error=%s", level, exc)
            raise
        return await self._send(SpeedCommand(level=speed), f"set fan speed to {speed}")

    async def check_health(self) -> HealthStatus:
        """Send the LED-off probe and report the outcome without raising."""
        LOGGER.debug("Checking fan health")
        try:
            await self._send(HEALTH_PROBE, "health probe")
        except FanctlError as exc:
            LOGGER.warning("Fan health check failed: %s", exc)
            return HealthStatus(HealthState.UNHEALTHY, f"Fan is not responding: {exc}")
        LOGGER.debug("Fan health check passed")
        return HealthStatus(HealthState.HEALTHY, "Fan is responding to UDP messages")

    def shutdown(self) -> None:
        if self._shut_down:
            return
        self._shut_down = True
        LOGGER.info("Shutting down fan controller")
        self.transport.close()

    async def _send(self, command: Command, label: str) -> SendResult:
        payload = encode(command)
        attempts = 0

        async def _attempt() -> None:
            nonlocal attempts
            attempts += 1
            await self.transport.send(
                payload,
                self.endpoint,
                timeout_s=self.policy.attempt_timeout_s,
            )

        LOGGER.info("%s: sending %s to %s", label, payload.decode("utf-8"), self.endpoint)
        try:
            await self._executor.run(_attempt, label=label)
        except FanctlError as exc:
            LOGGER.error("Failed to %s: %s", label, exc)
            raise
        LOGGER.info("%s: succeeded after %d attempt(s)", label, attempts)
        return SendResult(endpoint=self.endpoint, payload=payload, attempts=attempts)
