"""
Telemetry API client layer.

Provides request signing, outcome classification and retries
on top of the HTTP transport.
"""

from aggregator.client.interface import (
    BatchOutcome,
    NetworkError,
    OtherFailure,
    ParseFailure,
    RateLimited,
    Success,
    TelemetryClient,
    is_transient,
)
from aggregator.client.http import HttpTelemetryClient
from aggregator.client.retry import RetryPolicy
from aggregator.client.signer import RequestSigner, generate_signature

__all__ = [
    "BatchOutcome",
    "NetworkError",
    "OtherFailure",
    "ParseFailure",
    "RateLimited",
    "Success",
    "TelemetryClient",
    "is_transient",
    "HttpTelemetryClient",
    "RetryPolicy",
    "RequestSigner",
    "generate_signature",
]
