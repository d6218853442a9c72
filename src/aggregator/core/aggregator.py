"""
Main Aggregator orchestrator.

Drives every batch of a run through the retry policy, one at a time,
and assembles the final report.
"""

import asyncio
import time
from collections import abc
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence

import structlog

from aggregator.client.http import HttpTelemetryClient
from aggregator.client.interface import Success, TelemetryClient
from aggregator.client.retry import RetryPolicy
from aggregator.config import AggregatorConfig, get_config
from aggregator.core.batch import Batch, create_batches
from aggregator.core.devices import generate_serial_numbers
from aggregator.core.report import AggregationReport, BatchFailure

logger = structlog.get_logger(__name__)


class AggregationError(Exception):
    """Raised when a run cannot be carried out at all."""
    pass


class Aggregator:
    """
    Main aggregation orchestrator.

    Dispatch is strictly sequential: a batch is only sent once the previous
    one has finished (including its retries) and the inter-request spacing
    has elapsed. Failed batches are recorded and never abort the run.

    Usage:
        ```python
        async with HttpTelemetryClient(config) as client:
            report = await Aggregator(client, config).run()
        ```
    """

    def __init__(
        self,
        client: TelemetryClient,
        config: Optional[AggregatorConfig] = None,
        retry_policy: Optional[RetryPolicy] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize the aggregator.

        Args:
            client: Telemetry client used for every request
            config: Aggregator configuration
            retry_policy: Custom retry policy (built from config if not provided)
            sleep: Coroutine used for the inter-request spacing
            clock: Monotonic clock used to time the run
        """
        self.config = config or get_config()
        self.client = client
        self.retry_policy = retry_policy or RetryPolicy.from_config(
            client, self.config, sleep=sleep
        )
        self._sleep = sleep
        self._clock = clock

    async def run(self, population: Optional[Sequence[str]] = None) -> AggregationReport:
        """
        Fetch telemetry for a whole population.

        Args:
            population: Serial numbers to fetch (generated from config if not provided)

        Returns:
            The finalized report

        Raises:
            AggregationError: If the population is malformed
        """
        start = self._clock()

        if population is None:
            population = generate_serial_numbers(self.config.device_count)
        self._validate_population(population)

        batches = create_batches(population, self.config.batch_size)

        logger.info(
            "aggregation_started",
            devices=len(population),
            batches=len(batches),
            batch_size=self.config.batch_size,
            rate_limit_ms=self.config.rate_limit_ms,
        )

        records: List[Dict[str, Any]] = []
        errors: List[BatchFailure] = []

        for position, batch in enumerate(batches):
            failure = await self._process_batch(batch, records, len(batches))
            if failure:
                errors.append(failure)

            # Spacing applies whether or not the batch succeeded
            if position < len(batches) - 1:
                await self._sleep(self.config.rate_limit_seconds)

        elapsed = self._clock() - start

        report = AggregationReport(
            total_devices=len(population),
            execution_time_seconds=elapsed,
            data=records,
            errors=errors,
        )

        logger.info(
            "aggregation_completed",
            fetched_devices=report.fetched_devices,
            failed_batches=report.failed_batches,
            execution_time_seconds=round(elapsed, 2),
        )

        return report

    async def _process_batch(
        self,
        batch: Batch,
        records: List[Dict[str, Any]],
        total_batches: int,
    ) -> Optional[BatchFailure]:
        """
        Process a single batch.

        Args:
            batch: Batch to process
            records: Accumulator extended with the batch's device records
            total_batches: Number of batches in the run (for logging)

        Returns:
            A failure descriptor, or None on success
        """
        logger.info(
            "batch_processing",
            batch=batch.index,
            total_batches=total_batches,
            size=batch.size,
        )

        outcome = await self.retry_policy.attempt(batch)

        if isinstance(outcome, Success):
            records.extend(outcome.records)
            logger.info("batch_succeeded", batch=batch.index, devices=len(outcome.records))
            return None

        logger.error(
            "batch_failed",
            batch=batch.index,
            error=outcome.error,
            status=outcome.status_code,
        )
        return BatchFailure(
            batch=batch.index,
            serial_numbers=batch.serial_numbers,
            error=outcome.error,
            status_code=outcome.status_code,
        )

    @staticmethod
    def _validate_population(population: Sequence[str]) -> None:
        if isinstance(population, (str, bytes)) or not isinstance(population, abc.Sequence):
            raise AggregationError("Population must be a sequence of serial numbers")

        for position, serial in enumerate(population):
            if not isinstance(serial, str) or not serial:
                raise AggregationError(
                    f"Invalid serial number at position {position}: {serial!r}"
                )


async def aggregate_device_data(
    host: Optional[str] = None,
    port: Optional[int] = None,
    config: Optional[AggregatorConfig] = None,
    population: Optional[Sequence[str]] = None,
) -> AggregationReport:
    """
    Run one full aggregation against the telemetry API at host:port.

    Args:
        host: API host (config default if not provided)
        port: API port (config default if not provided)
        config: Aggregator configuration
        population: Serial numbers to fetch (generated from config if not provided)

    Returns:
        The finalized report
    """
    config = config or get_config()

    async with HttpTelemetryClient(config, host=host, port=port) as client:
        return await Aggregator(client, config).run(population)
