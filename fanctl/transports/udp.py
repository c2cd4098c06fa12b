"""UDP transport implementation using a single shared asyncio socket."""

from __future__ import annotations

import asyncio
import logging
import socket

from fanctl.core.errors import TransportSendError, TransportTimeoutError
from fanctl.core.model import Endpoint

LOGGER = logging.getLogger(__name__)


class UDPTransport:
    """One-shot datagram sender bound to a process-wide socket.

    The socket is created with the transport and reused for every send until
    :meth:`close`. Sends after close fail with :class:`TransportSendError`.
    """

    def __init__(self) -> None:
        try:
            self._sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        except OSError as exc:
            raise TransportSendError(f"Could not create UDP socket: {exc}") from exc
        self._sock.setblocking(False)
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def send(self, payload: bytes, endpoint: Endpoint, *, timeout_s: float) -> None:
        if self._closed:
            raise TransportSendError("Failed to send UDP message to fan: socket is closed")

        loop = asyncio.get_running_loop()
        try:
            await asyncio.wait_for(
                loop.sock_sendto(self._sock, payload, (endpoint.address, endpoint.port)),
                timeout=timeout_s,
            )
        except TimeoutError as exc:
            raise TransportTimeoutError("Operation timed out") from exc
        except OSError as exc:
            LOGGER.error("UDP send error to %s: %s", endpoint, exc)
            raise TransportSendError(f"Failed to send UDP message to fan: {exc}") from exc
        LOGGER.debug("UDP message sent to %s: %r", endpoint, payload)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._sock.close()
        LOGGER.info("UDP client closed")
