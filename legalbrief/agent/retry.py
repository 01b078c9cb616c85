"""Bounded retry with exponential backoff around async model calls.

Only transient backend errors are retried. Once the retry budget is spent
(or on the first permanent error) an optional fallback operation runs once.
Every suspension point is an asyncio await, so cancelling the task that runs
an invocation aborts it, including during a backoff sleep.
"""

import asyncio
import logging
import random
from collections.abc import Awaitable, Callable
from typing import TypeVar

from legalbrief.agent.errors import is_retryable

logger = logging.getLogger(__name__)

T = TypeVar("T")

Operation = Callable[[], Awaitable[T]]

DEFAULT_MAX_RETRIES = 4
DEFAULT_BASE_DELAY = 1.8
DEFAULT_MAX_JITTER = 0.4


class RetryingInvoker:
    """Executes an async operation with retry, backoff and fallback.

    Holds configuration only, no per-call state, so one instance can be
    shared by concurrent callers.
    """

    def __init__(
        self,
        max_retries: int = DEFAULT_MAX_RETRIES,
        base_delay: float = DEFAULT_BASE_DELAY,
        max_jitter: float = DEFAULT_MAX_JITTER,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        jitter: Callable[[float, float], float] = random.uniform,
    ) -> None:
        """Initialize the invoker.

        Args:
            max_retries: Retries after the first attempt.
            base_delay: Backoff base in seconds, doubled per attempt.
            max_jitter: Upper bound of random jitter in seconds.
            sleep: Awaitable sleep, replaceable in tests.
            jitter: Random source returning a value in [a, b].
        """
        self.max_retries = max_retries
        self.base_delay = base_delay
        self.max_jitter = max_jitter
        self._sleep = sleep
        self._jitter = jitter

    def backoff_delay(self, attempt: int, base_delay: float | None = None) -> float:
        """Delay before the retry following the given zero-based attempt."""
        base = self.base_delay if base_delay is None else base_delay
        return base * (2**attempt) + self._jitter(0.0, self.max_jitter)

    async def invoke(
        self,
        primary: Operation[T],
        fallback: Operation[T] | None = None,
        *,
        max_retries: int | None = None,
        base_delay: float | None = None,
        label: str = "model call",
    ) -> T:
        """Run primary with retries, then fallback once if it still fails.

        Args:
            primary: Operation to attempt up to max_retries + 1 times.
            fallback: Optional operation run once after primary gives up.
                Its failure propagates.
            max_retries: Override of the instance retry budget.
            base_delay: Override of the instance backoff base.
            label: Name used in log messages.

        Returns:
            Result of primary, or of fallback.

        Raises:
            Exception: The last primary error when no fallback is given.
        """
        retries = self.max_retries if max_retries is None else max_retries
        last_error: Exception | None = None

        for attempt in range(retries + 1):
            try:
                return await primary()
            except Exception as e:
                last_error = e
                if not is_retryable(e):
                    logger.warning(f"[{label}] non-retryable error: {e}")
                    break
                if attempt == retries:
                    break

                delay = self.backoff_delay(attempt, base_delay)
                logger.warning(
                    f"[{label}] retry {attempt + 1}/{retries} after {delay:.2f}s: {e}"
                )
                await self._sleep(delay)

        if fallback is not None:
            logger.warning(f"[{label}] falling back to secondary operation")
            return await fallback()

        if last_error is None:
            raise RuntimeError(f"[{label}] all retry attempts failed")
        raise last_error
