"""
Mock telemetry API.

Serves the device query endpoint with the same constraints as the real
service: one request per second, signed requests, at most 10 devices per batch.
"""

import random
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import structlog
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from aggregator.client.signer import generate_signature, verify_signature
from aggregator.config import AggregatorConfig, get_config
from aggregator.server.rate_limit import IntervalRateLimiter

logger = structlog.get_logger(__name__)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def build_device_record(serial_number: str, rng: random.Random) -> Dict[str, Any]:
    """Generate a simulated reading for one device."""
    return {
        "sn": serial_number,
        "power": f"{rng.random() * 5:.2f} kW",
        "status": "Online" if rng.random() > 0.1 else "Offline",
        "last_updated": datetime.now(timezone.utc).isoformat(),
    }


def create_mock_router(
    config: Optional[AggregatorConfig] = None,
    limiter: Optional[IntervalRateLimiter] = None,
    rng: Optional[random.Random] = None,
) -> APIRouter:
    """
    Create the mock telemetry API router.

    Args:
        config: Aggregator configuration (path, token, limits)
        limiter: Rate limiter for this router (one is created if not provided)
        rng: Random source for simulated readings

    Returns:
        Router exposing POST {api_path}
    """
    config = config or get_config()
    limiter = limiter or IntervalRateLimiter(config.server_min_interval_ms)
    rng = rng or random.Random()

    router = APIRouter(tags=["mock-api"])

    @router.post(config.api_path)
    async def query_devices(request: Request) -> JSONResponse:
        # 1. Rate limit
        allowed, _ = limiter.check()
        if not allowed:
            return _error(429, "Too Many Requests. Limit: 1 req/sec.")

        # 2. Signature
        signature = request.headers.get("signature")
        timestamp = request.headers.get("timestamp")
        if not signature or not timestamp:
            return _error(401, "Missing headers: signature or timestamp")

        url = request.url.path
        if request.url.query:
            url += "?" + request.url.query

        if not verify_signature(signature, url, config.api_token, timestamp):
            logger.warning(
                "mock_bad_signature",
                received=signature,
                expected=generate_signature(url, config.api_token, timestamp),
            )
            return _error(401, "Invalid Signature")

        # 3. Body
        try:
            payload = await request.json()
        except ValueError:
            return _error(400, "sn_list array is required")

        sn_list = payload.get("sn_list") if isinstance(payload, dict) else None
        if not isinstance(sn_list, list):
            return _error(400, "sn_list array is required")
        if len(sn_list) > config.max_batch_size:
            return _error(400, f"Batch size limit exceeded (Max {config.max_batch_size})")

        results: List[Dict[str, Any]] = [build_device_record(str(sn), rng) for sn in sn_list]

        logger.info("mock_query_served", devices=len(sn_list))
        return JSONResponse(content={"data": results})

    return router
