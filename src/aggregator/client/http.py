"""
HTTP adapter for the telemetry API.

Issues signed POST requests with httpx and classifies each response into a batch outcome.
"""

from typing import Optional

import httpx
import structlog

from aggregator.client.interface import (
    BatchOutcome,
    NetworkError,
    OtherFailure,
    ParseFailure,
    RateLimited,
    Success,
    TelemetryClient,
)
from aggregator.client.signer import RequestSigner
from aggregator.config import AggregatorConfig, get_config
from aggregator.core.batch import Batch

logger = structlog.get_logger(__name__)


class HttpTelemetryClient(TelemetryClient):
    """
    Telemetry API client over HTTP.

    Implements the TelemetryClient interface using httpx.
    """

    def __init__(
        self,
        config: Optional[AggregatorConfig] = None,
        host: Optional[str] = None,
        port: Optional[int] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the HTTP client.

        Args:
            config: Aggregator configuration. Uses global config if not provided.
            host: Override for the API host
            port: Override for the API port
            transport: Custom httpx transport (used by tests to serve the mock API in-process)
        """
        self.config = config or get_config()
        self.host = host or self.config.api_host
        self.port = port or self.config.api_port
        self.path = self.config.api_path
        self.signer = RequestSigner(self.path, self.config.api_token)
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def base_url(self) -> str:
        return f"http://{self.host}:{self.port}"

    async def connect(self) -> None:
        """Create the HTTP client."""
        if self._client is not None:
            return

        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.config.request_timeout_seconds,
            transport=self._transport,
        )
        logger.info("telemetry_client_connected", base_url=self.base_url)

    async def disconnect(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None
            logger.info("telemetry_client_disconnected")

    async def send(self, batch: Batch) -> BatchOutcome:
        """Issue one signed request for a batch."""
        if not self._client:
            await self.connect()

        # Signed per attempt, the timestamp must be fresh
        headers = self.signer.headers()
        body = {"sn_list": list(batch.serial_numbers)}

        try:
            response = await self._client.post(self.path, json=body, headers=headers)
        except httpx.RequestError as e:
            message = str(e) or type(e).__name__
            logger.warning("telemetry_request_error", batch=batch.index, error=message)
            return NetworkError(message=message)

        return self._classify(batch, response)

    def _classify(self, batch: Batch, response: httpx.Response) -> BatchOutcome:
        status = response.status_code

        if status == 429:
            return RateLimited(message=response.text)

        if status != 200:
            logger.error(
                "telemetry_request_failed",
                batch=batch.index,
                status=status,
                error=response.text,
            )
            return OtherFailure(status_code=status, message=response.text)

        try:
            records = response.json()["data"]
        except (ValueError, KeyError, TypeError):
            logger.error("telemetry_response_unparseable", batch=batch.index)
            return ParseFailure(status_code=status)

        if not isinstance(records, list):
            logger.error("telemetry_response_unparseable", batch=batch.index)
            return ParseFailure(status_code=status)

        return Success(records=records)
