"""Core data models used across config, service, transports, and CLI."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from fanctl.core.errors import ValidationError
from fanctl.core.validation import is_int, validate_ip, validate_port


@dataclass(frozen=True)
class Endpoint:
    address: str
    port: int

    def __post_init__(self) -> None:
        object.__setattr__(self, "address", validate_ip(self.address))
        object.__setattr__(self, "port", validate_port(self.port))

    @classmethod
    def validated(cls, address: object, port: object) -> Endpoint:
        return cls(address=address, port=port)

    def __str__(self) -> str:
        return f"{self.address}:{self.port}"


@dataclass(frozen=True)
class RetryPolicy:
    max_attempts: int = 3
    base_delay_s: float = 0.1
    attempt_timeout_s: float = 5.0

    def __post_init__(self) -> None:
        if not is_int(self.max_attempts) or self.max_attempts < 1:
            raise ValidationError("max_attempts must be an integer of at least 1")
        for name in ("base_delay_s", "attempt_timeout_s"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)) or not value > 0:
                raise ValidationError(f"{name} must be greater than 0")

    def delay_after(self, attempt: int) -> float:
        """Backoff before the attempt following `attempt` (1-indexed)."""
        return self.base_delay_s * 2 ** (attempt - 1)


@dataclass(frozen=True)
class LedCommand:
    on: bool


@dataclass(frozen=True)
class PowerCommand:
    on: bool


@dataclass(frozen=True)
class SpeedCommand:
    level: int


Command = LedCommand | PowerCommand | SpeedCommand


class HealthState(str, Enum):
    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"


@dataclass(frozen=True)
class HealthStatus:
    state: HealthState
    detail: str

    @property
    def healthy(self) -> bool:
        return self.state is HealthState.HEALTHY


@dataclass(frozen=True)
class SendResult:
    endpoint: Endpoint
    payload: bytes
    attempts: int

    @property
    def payload_text(self) -> str:
        return self.payload.decode("utf-8")
