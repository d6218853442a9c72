"""
HTTP surface.

Serves the mock telemetry API and the aggregation trigger endpoint.
"""

from aggregator.server.app import create_app
from aggregator.server.mock_api import create_mock_router
from aggregator.server.rate_limit import IntervalRateLimiter

__all__ = [
    "create_app",
    "create_mock_router",
    "IntervalRateLimiter",
]
