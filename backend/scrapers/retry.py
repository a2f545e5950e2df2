"""
Retry Orchestrator - bounded retries with exponential backoff.

Shared by the schedule and rankings workflows. The wait before attempt
n+1 is 2**n * base_delay (n = 1, 2, ...), so 1.4s then 2.8s by default.
"""
import asyncio
import logging
from typing import Awaitable, Callable, Tuple, Type, TypeVar

from .errors import ExtractionEmptyError, PolicyDeniedError

logger = logging.getLogger(__name__)

T = TypeVar("T")

MAX_ATTEMPTS = 3
BASE_DELAY_MS = 700


class RetryOrchestrator:
    """Run an async operation up to N times."""

    def __init__(
        self,
        attempts: int = MAX_ATTEMPTS,
        base_delay_ms: int = BASE_DELAY_MS,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        no_retry_on: Tuple[Type[BaseException], ...] = (PolicyDeniedError,),
    ):
        self.attempts = max(1, attempts)
        self.base_delay_ms = base_delay_ms
        self.no_retry_on = no_retry_on
        self._sleep = sleep

    def delay_seconds(self, attempt: int) -> float:
        return (2 ** attempt) * self.base_delay_ms / 1000

    async def run(
        self,
        operation: Callable[[], Awaitable[T]],
        require_nonempty: bool = False,
        label: str = "operation",
    ) -> T:
        """
        Args:
            operation: Zero-arg coroutine factory, invoked once per attempt
            require_nonempty: Treat an empty/falsy result as a failure
            label: Name used in log lines

        Returns:
            The first successful result.

        Raises:
            The non-retryable error immediately, or the last error once all
            attempts are exhausted.
        """
        last_error: BaseException = RuntimeError(f"{label} never ran")

        for attempt in range(1, self.attempts + 1):
            try:
                result = await operation()
                if require_nonempty and not result:
                    raise ExtractionEmptyError(f"{label} returned no records")
                if attempt > 1:
                    logger.info(f"{label} succeeded on attempt {attempt}/{self.attempts}")
                return result
            except self.no_retry_on:
                raise
            except Exception as e:
                last_error = e
                if attempt == self.attempts:
                    break
                delay = self.delay_seconds(attempt)
                logger.warning(
                    f"{label} attempt {attempt}/{self.attempts} failed: {e}. "
                    f"Retrying in {delay:.1f}s"
                )
                await self._sleep(delay)

        logger.error(f"{label} failed after {self.attempts} attempts: {last_error}")
        raise last_error
