"""Transport interfaces."""

from __future__ import annotations

from typing import Protocol

from fanctl.core.model import Endpoint


class Transport(Protocol):
    async def send(self, payload: bytes, endpoint: Endpoint, *, timeout_s: float) -> None:
        """Hand one datagram to the network stack; nothing is read back."""

    def close(self) -> None:
        """Release the underlying socket. Safe to call more than once."""
