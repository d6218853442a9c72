"""
Abstract interface for telemetry API access.

Defines the batch outcome variants and the contract every transport client implements.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Union

from aggregator.core.batch import Batch


@dataclass(frozen=True)
class Success:
    """The endpoint returned device records for the batch."""
    records: List[Dict[str, Any]] = field(default_factory=list)


@dataclass(frozen=True)
class RateLimited:
    """The endpoint rejected the request with HTTP 429."""
    message: str = "Too Many Requests"
    status_code: int = 429

    @property
    def error(self) -> str:
        return self.message


@dataclass(frozen=True)
class NetworkError:
    """The request never produced an HTTP response (refused, reset, timeout, DNS)."""
    message: str
    status_code: int = 0

    @property
    def error(self) -> str:
        return self.message


@dataclass(frozen=True)
class OtherFailure:
    """Any other non-200 response."""
    status_code: int
    message: str

    @property
    def error(self) -> str:
        return self.message


@dataclass(frozen=True)
class ParseFailure:
    """A 200 response whose body could not be interpreted."""
    status_code: int
    message: str = "Failed to parse response"

    @property
    def error(self) -> str:
        return self.message


BatchOutcome = Union[Success, RateLimited, NetworkError, OtherFailure, ParseFailure]

# Outcomes worth retrying after a delay
TRANSIENT_OUTCOMES = (RateLimited, NetworkError)
TERMINAL_OUTCOMES = (OtherFailure, ParseFailure)


def is_transient(outcome: BatchOutcome) -> bool:
    """Check whether an outcome may resolve itself if retried."""
    if isinstance(outcome, TRANSIENT_OUTCOMES):
        return True
    if isinstance(outcome, (Success,) + TERMINAL_OUTCOMES):
        return False
    raise TypeError(f"Unknown batch outcome: {outcome!r}")


class TelemetryClient(ABC):
    """
    Abstract interface for the telemetry API.

    Implementations issue exactly one request per ``send`` call;
    repetition is the caller's concern.
    """

    @abstractmethod
    async def connect(self) -> None:
        """Prepare the underlying transport."""
        pass

    @abstractmethod
    async def disconnect(self) -> None:
        """Release the underlying transport."""
        pass

    @abstractmethod
    async def send(self, batch: Batch) -> BatchOutcome:
        """
        Fetch telemetry for one batch.

        Args:
            batch: Batch of serial numbers to query

        Returns:
            Classified outcome of the single request
        """
        pass

    async def __aenter__(self) -> "TelemetryClient":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.disconnect()
