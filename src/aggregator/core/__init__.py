"""
Core aggregator components.

This module contains the device population, batch partitioning
and report models. The orchestrator lives in ``aggregator.core.aggregator``.
"""

from aggregator.core.batch import Batch, create_batches, partition
from aggregator.core.devices import generate_serial_numbers
from aggregator.core.report import AggregationReport, BatchFailure

__all__ = [
    "Batch",
    "create_batches",
    "partition",
    "generate_serial_numbers",
    "AggregationReport",
    "BatchFailure",
]
