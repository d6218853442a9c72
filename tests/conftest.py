"""
Pytest configuration and shared fixtures for the test suite.
"""

from typing import Callable, Dict, List, Optional, Sequence, Union

import pytest

from aggregator.client.interface import (
    BatchOutcome,
    NetworkError,
    OtherFailure,
    RateLimited,
    Success,
    TelemetryClient,
)
from aggregator.config import AggregatorConfig
from aggregator.core.batch import Batch


# ============================================================================
# Configuration Fixtures
# ============================================================================

@pytest.fixture
def test_config() -> AggregatorConfig:
    """Create a test configuration with the production timing values."""
    return AggregatorConfig(
        api_host="testserver",
        api_port=3000,
        api_token="test_token",
        device_count=25,
        batch_size=10,
        rate_limit_ms=1000,
        rate_limit_tolerance_ms=50,
        max_retries=3,
        retry_delay_ms=2000,
        log_level="DEBUG",
    )


@pytest.fixture
def fast_config(test_config) -> AggregatorConfig:
    """Configuration without any real waiting."""
    return test_config.model_copy(update={
        "rate_limit_ms": 0,
        "rate_limit_tolerance_ms": 0,
        "retry_delay_ms": 0,
    })


# ============================================================================
# Time Fakes
# ============================================================================

class FakeClock:
    """Monotonic clock that only moves when the fake sleep is awaited."""

    def __init__(self, start: float = 100.0):
        self.now = start
        self.sleeps: List[float] = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


# ============================================================================
# Scripted Telemetry Client
# ============================================================================

def records_for(batch: Batch) -> List[Dict[str, str]]:
    """Deterministic device records for a batch."""
    return [
        {"sn": sn, "power": "1.00 kW", "status": "Online", "last_updated": "2024-01-01T00:00:00+00:00"}
        for sn in batch.serial_numbers
    ]


Script = Union[BatchOutcome, Callable[[Batch], BatchOutcome]]


class ScriptedClient(TelemetryClient):
    """
    In-memory telemetry client.

    Outcomes are served per batch index from a script; once a script is
    exhausted its last entry repeats. Batches without a script succeed.
    """

    def __init__(
        self,
        scripts: Optional[Dict[int, Sequence[Script]]] = None,
        clock: Optional[FakeClock] = None,
    ):
        self.scripts = {k: list(v) for k, v in (scripts or {}).items()}
        self.clock = clock
        self.calls: List[Batch] = []
        self.call_times: List[float] = []
        self.connected = False

    async def connect(self) -> None:
        self.connected = True

    async def disconnect(self) -> None:
        self.connected = False

    async def send(self, batch: Batch) -> BatchOutcome:
        self.calls.append(batch)
        if self.clock is not None:
            self.call_times.append(self.clock())

        script = self.scripts.get(batch.index)
        if not script:
            return Success(records=records_for(batch))

        step = script.pop(0) if len(script) > 1 else script[0]
        if callable(step):
            return step(batch)
        return step

    def calls_for(self, index: int) -> int:
        return sum(1 for b in self.calls if b.index == index)


@pytest.fixture
def scripted_client(clock) -> Callable[..., ScriptedClient]:
    """Factory for scripted clients bound to the fake clock."""
    def factory(scripts: Optional[Dict[int, Sequence[Script]]] = None) -> ScriptedClient:
        return ScriptedClient(scripts, clock=clock)
    return factory


# ============================================================================
# Canned Outcomes
# ============================================================================

@pytest.fixture
def succeed() -> Callable[[Batch], BatchOutcome]:
    """Script step answering with records for whichever batch was sent."""
    def step(batch: Batch) -> BatchOutcome:
        return Success(records=records_for(batch))
    return step


@pytest.fixture
def rate_limited() -> RateLimited:
    return RateLimited(message='{"error":"Too Many Requests. Limit: 1 req/sec."}')


@pytest.fixture
def network_down() -> NetworkError:
    return NetworkError(message="All connection attempts failed")


@pytest.fixture
def server_error() -> OtherFailure:
    return OtherFailure(status_code=500, message="Internal Server Error")


@pytest.fixture
def population() -> List[str]:
    return [f"SN-{i:03d}" for i in range(25)]
