"""
EnergyGrid Aggregator

Fetches telemetry for a fleet of devices from a rate-limited, signed HTTP API.
Devices are queried in small batches, one request at a time, with retries for
transient failures, and the results are combined into a single report.
"""

__version__ = "0.1.0"

from aggregator.core.batch import Batch, create_batches, partition
from aggregator.core.report import AggregationReport, BatchFailure
from aggregator.core.aggregator import AggregationError, Aggregator, aggregate_device_data

__all__ = [
    "Aggregator",
    "AggregationError",
    "AggregationReport",
    "Batch",
    "BatchFailure",
    "aggregate_device_data",
    "create_batches",
    "partition",
]
