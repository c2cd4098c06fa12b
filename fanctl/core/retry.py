"""Bounded retry with exponential backoff for async operations."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from fanctl.core.errors import FanctlError, RetryExhaustedError
from fanctl.core.model import RetryPolicy

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")


class RetryExecutor:
    """Runs an operation up to ``policy.max_attempts`` times.

    The delay after failed attempt ``k`` is ``base_delay_s * 2 ** (k - 1)``
    and is awaited, so other tasks on the loop keep running while a retry
    sequence backs off. Only :class:`FanctlError` counts as an attempt
    failure; anything else propagates immediately.
    """

    def __init__(
        self,
        policy: RetryPolicy,
        *,
        sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
    ) -> None:
        self.policy = policy
        self._sleep = sleep

    async def run(self, operation: Callable[[], Awaitable[T]], *, label: str = "operation") -> T:
        max_attempts = self.policy.max_attempts
        for attempt in range(1, max_attempts + 1):
            LOGGER.debug("%s: attempt %d/%d started", label, attempt, max_attempts)
            try:
                result = await operation()
            except FanctlError as exc:
                if attempt == max_attempts:
                    LOGGER.error(
                        "%s: retries exhausted attempt=%d max_attempts=%d error=%s",
                        label,
                        attempt,
                        max_attempts,
                        exc,
                    )
                    raise RetryExhaustedError(attempt, exc) from exc

                delay = self.policy.delay_after(attempt)
                LOGGER.warning(
                    "%s: attempt failed, retrying attempt=%d max_attempts=%d delay=%.3fs error=%s",
                    label,
                    attempt,
                    max_attempts,
                    delay,
                    exc,
                )
                await self._sleep(delay)
                continue

            LOGGER.debug("%s: succeeded on attempt %d/%d", label, attempt, max_attempts)
            return result

        raise AssertionError("unreachable")  # pragma: no cover
