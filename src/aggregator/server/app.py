"""
Combined API server.

Hosts the mock telemetry API alongside the endpoint that triggers a full
aggregation run against it.
"""

import random
from typing import Callable, Optional

import structlog
from fastapi import FastAPI
from fastapi.responses import JSONResponse

from aggregator import __version__
from aggregator.client.http import HttpTelemetryClient
from aggregator.client.interface import TelemetryClient
from aggregator.config import AggregatorConfig, get_config
from aggregator.core.aggregator import Aggregator
from aggregator.server.mock_api import create_mock_router
from aggregator.server.rate_limit import IntervalRateLimiter

logger = structlog.get_logger(__name__)

ClientFactory = Callable[[AggregatorConfig], TelemetryClient]


def loopback_client(config: AggregatorConfig) -> TelemetryClient:
    """Client that calls back into the mock API served by this process."""
    return HttpTelemetryClient(config, host=config.api_host, port=config.server_port)


def create_app(
    config: Optional[AggregatorConfig] = None,
    client_factory: Optional[ClientFactory] = None,
    rng: Optional[random.Random] = None,
) -> FastAPI:
    """
    Create the combined FastAPI application.

    Args:
        config: Aggregator configuration
        client_factory: Builds the telemetry client for each aggregation run
        rng: Random source for the mock API readings

    Returns:
        Configured application
    """
    config = config or get_config()
    client_factory = client_factory or loopback_client

    app = FastAPI(title="EnergyGrid Mock API + Data Aggregator", version=__version__)
    app.state.config = config
    app.state.rate_limiter = IntervalRateLimiter(config.server_min_interval_ms)

    app.include_router(
        create_mock_router(config, limiter=app.state.rate_limiter, rng=rng)
    )

    @app.get("/aggregate", tags=["aggregator"])
    async def aggregate():
        logger.info("aggregation_requested", devices=config.device_count)

        try:
            async with client_factory(config) as client:
                report = await Aggregator(client, config).run()
        except Exception as e:
            logger.exception("aggregation_error", error=str(e))
            return JSONResponse(
                status_code=500,
                content={"error": "Aggregation failed", "details": str(e)},
            )

        return {
            "message": "Data aggregation completed successfully",
            "result": report.to_dict(),
        }

    @app.get("/", tags=["meta"])
    async def usage() -> dict:
        batches = -(-config.device_count // config.batch_size)
        return {
            "message": "EnergyGrid Mock API + Data Aggregator",
            "endpoints": {
                f"POST {config.api_path}": "Mock API endpoint (requires signature & timestamp headers)",
                "GET /aggregate": (
                    f"Trigger data aggregation for all {config.device_count} devices "
                    f"(~{batches * config.rate_limit_seconds:.0f} seconds)"
                ),
                "GET /": "This help message",
            },
            "mockApiConstraints": {
                "rateLimit": f"1 request per {config.rate_limit_ms} ms",
                "maxBatchSize": config.max_batch_size,
                "authToken": config.api_token,
            },
        }

    return app
