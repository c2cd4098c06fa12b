"""Stable public API for building tooling on top of fanctl.

This module is the supported integration surface for third-party callers.
Avoid importing from private/internal modules unless intentionally depending on
non-stable internals.
"""

from __future__ import annotations

from pathlib import Path

from fanctl.core.config import FanConfig, load_config
from fanctl.core.errors import (
    ConfigurationError,
    FanctlError,
    RetryExhaustedError,
    TransportError,
    TransportSendError,
    TransportTimeoutError,
    ValidationError,
)
from fanctl.core.model import (
    Endpoint,
    HealthState,
    HealthStatus,
    RetryPolicy,
    SendResult,
)
from fanctl.core.service import FanController
from fanctl.transports.base import Transport
from fanctl.transports.udp import UDPTransport

__all__ = [
    "FanctlError",
    "ValidationError",
    "ConfigurationError",
    "TransportError",
    "TransportSendError",
    "TransportTimeoutError",
    "RetryExhaustedError",
    "Endpoint",
    "HealthState",
    "HealthStatus",
    "RetryPolicy",
    "SendResult",
    "FanConfig",
    "UDPTransport",
    "Client",
]


class Client:
    """Public async client for a single fan.

    A `Client` loads configuration (or accepts an explicit endpoint and retry
    policy) and forwards each call to one shared `FanController`, so every
    call reuses the same UDP socket until `close()`.
    """

    def __init__(
        self,
        endpoint: Endpoint,
        policy: RetryPolicy | None = None,
        *,
        transport: Transport | None = None,
    ) -> None:
        self._controller = FanController(endpoint, policy or RetryPolicy(), transport=transport)

    @classmethod
    def from_config(
        cls,
        path: Path | None = None,
        *,
        transport: Transport | None = None,
    ) -> Client:
        config = load_config(path)
        return cls(config.endpoint, config.retry_policy, transport=transport)

    @property
    def endpoint(self) -> Endpoint:
        return self._controller.endpoint

    async def __aenter__(self) -> Client:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        self.close()

    async def led_on(self) -> SendResult:
        return await self._controller.led_on()

    async def led_off(self) -> SendResult:
        return await self._controller.led_off()

    async def power_on(self) -> SendResult:
        return await self._controller.power_on()

    async def power_off(self) -> SendResult:
        return await self._controller.power_off()

    async def set_speed(self, level: int) -> SendResult:
        return await self._controller.set_speed(level)

    async def check_health(self) -> HealthStatus:
        return await self._controller.check_health()

    def close(self) -> None:
        self._controller.shutdown()
