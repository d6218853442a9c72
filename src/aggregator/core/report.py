"""
Aggregation report models.

The report is assembled by the aggregator and serialized once, when a run completes.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple


@dataclass(frozen=True)
class BatchFailure:
    """
    A batch whose devices could not be fetched during a run.

    Attributes:
        batch: 1-based batch index
        serial_numbers: Devices that were lost with this batch
        error: Error detail from the last attempt
        status_code: HTTP status of the last attempt (0 for network errors)
    """

    batch: int
    serial_numbers: Tuple[str, ...]
    error: str
    status_code: int

    def to_dict(self) -> dict:
        return {
            "batch": self.batch,
            "serialNumbers": list(self.serial_numbers),
            "error": self.error,
            "statusCode": self.status_code,
        }


@dataclass
class AggregationReport:
    """Summary of one complete aggregation run."""

    total_devices: int
    execution_time_seconds: float
    data: List[Dict[str, Any]] = field(default_factory=list)
    errors: List[BatchFailure] = field(default_factory=list)

    @property
    def fetched_devices(self) -> int:
        return len(self.data)

    @property
    def failed_batches(self) -> int:
        return len(self.errors)

    @property
    def is_complete(self) -> bool:
        """Check whether every device was fetched."""
        return not self.errors and self.fetched_devices == self.total_devices

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "success": True,
            "totalDevices": self.total_devices,
            "fetchedDevices": self.fetched_devices,
            "failedBatches": self.failed_batches,
            "executionTimeSeconds": round(self.execution_time_seconds, 2),
            "data": list(self.data),
            "errors": [e.to_dict() for e in self.errors],
        }

    def __repr__(self) -> str:
        return (
            f"AggregationReport(total={self.total_devices}, "
            f"fetched={self.fetched_devices}, failed_batches={self.failed_batches})"
        )
