"""Bounded retry loop with linear backoff."""
import asyncio
import logging
from typing import Awaitable, Callable, Optional, TypeVar

from ..errors import RetryExhaustedError, TransportError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RetryExecutor:
    """
    Runs an operation up to max_attempts times.

    Only TransportError is retried. Anything else, including
    asyncio.CancelledError, leaves the loop at once. The delay before
    attempt n+1 is n * base_delay.
    """

    def __init__(
        self,
        max_attempts: int = 3,
        base_delay: float = 1.0,
        sleep: Optional[Callable[[float], Awaitable[None]]] = None,
    ):
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {max_attempts}")
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self._sleep = sleep or asyncio.sleep

    def delay_for(self, attempt: int) -> float:
        """Delay after failed attempt `attempt` (1-based)."""
        return attempt * self.base_delay

    async def run(self, operation: Callable[[], Awaitable[T]], description: str = "request") -> T:
        last_exc: Optional[TransportError] = None

        for attempt in range(1, self.max_attempts + 1):
            try:
                return await operation()
            except TransportError as exc:
                last_exc = exc
                if attempt == self.max_attempts:
                    break
                delay = self.delay_for(attempt)
                logger.debug(
                    "%s failed (attempt %d/%d): %s; retrying in %ss",
                    description, attempt, self.max_attempts, exc, delay,
                )
                await self._sleep(delay)

        raise RetryExhaustedError(
            f"{description} failed after {self.max_attempts} attempts: {last_exc}",
            attempts=self.max_attempts,
            status=last_exc.status if last_exc else None,
            body=last_exc.body if last_exc else None,
        ) from last_exc
