"""
Retry Policy - bounded retries for transient telemetry failures.
"""

import asyncio
from typing import Awaitable, Callable, Optional

import structlog

from aggregator.client.interface import BatchOutcome, TelemetryClient, is_transient
from aggregator.config import AggregatorConfig, get_config
from aggregator.core.batch import Batch

logger = structlog.get_logger(__name__)

MAX_RETRIES = 3
RETRY_DELAY_SECONDS = 2.0

Sleep = Callable[[float], Awaitable[None]]


class RetryPolicy:
    """
    Wraps a telemetry client with fixed-delay retries.

    Rate-limited and network failures are retried up to ``max_retries``
    additional times. Every other outcome is returned at once. When retries
    run out, the last transient outcome becomes the terminal result.
    """

    def __init__(
        self,
        client: TelemetryClient,
        max_retries: int = MAX_RETRIES,
        retry_delay_seconds: float = RETRY_DELAY_SECONDS,
        sleep: Sleep = asyncio.sleep,
    ):
        if max_retries < 0:
            raise ValueError("max_retries must be non-negative")
        if retry_delay_seconds < 0:
            raise ValueError("retry_delay_seconds must be non-negative")

        self.client = client
        self.max_retries = max_retries
        self.retry_delay_seconds = retry_delay_seconds
        self._sleep = sleep

    @classmethod
    def from_config(
        cls,
        client: TelemetryClient,
        config: Optional[AggregatorConfig] = None,
        sleep: Sleep = asyncio.sleep,
    ) -> "RetryPolicy":
        config = config or get_config()
        return cls(
            client,
            max_retries=config.max_retries,
            retry_delay_seconds=config.retry_delay_seconds,
            sleep=sleep,
        )

    async def attempt(self, batch: Batch) -> BatchOutcome:
        """
        Fetch one batch, retrying transient failures.

        Args:
            batch: Batch to fetch

        Returns:
            The first non-transient outcome, or the last one once retries are exhausted
        """
        retries = 0
        while True:
            outcome = await self.client.send(batch)

            if not is_transient(outcome):
                return outcome

            if retries >= self.max_retries:
                logger.error(
                    "retries_exhausted",
                    batch=batch.index,
                    attempts=retries + 1,
                    outcome=type(outcome).__name__,
                )
                return outcome

            retries += 1
            logger.warning(
                "transient_failure_retrying",
                batch=batch.index,
                outcome=type(outcome).__name__,
                delay_seconds=self.retry_delay_seconds,
                attempt=retries,
                max_retries=self.max_retries,
            )
            await self._sleep(self.retry_delay_seconds)
