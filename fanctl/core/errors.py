"""Domain-specific errors for fanctl."""

from __future__ import annotations


class FanctlError(Exception):
    """Base error for fanctl."""

    code = "FAN_CONTROL_ERROR"
    status_code = 500


class ValidationError(FanctlError):
    """Raised when an input violates a constraint; never touches the network."""

    code = "INVALID_INPUT"
    status_code = 400


class ConfigurationError(FanctlError):
    """Raised at startup when configuration cannot be loaded or is invalid."""

    code = "CONFIGURATION_ERROR"


class TransportError(FanctlError):
    """Base network error."""

    code = "NETWORK_ERROR"
    status_code = 503


class TransportSendError(TransportError):
    """Raised when the datagram write fails."""

    code = "UDP_SEND_FAILED"


class TransportTimeoutError(TransportError):
    """Raised when a send does not complete before its deadline."""

    code = "TIMEOUT"


class RetryExhaustedError(TransportError):
    """Raised when every attempt of a retried operation failed."""

    code = "RETRY_EXHAUSTED"

    def __init__(self, attempts: int, last_error: FanctlError) -> None:
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(
            f"Maximum retry attempts exceeded ({attempts} attempts, last error: {last_error})"
        )
