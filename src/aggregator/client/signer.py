"""
Request Signer - computes per-request authentication signatures.

The telemetry API authenticates each request with MD5(path + token + timestamp),
sent in the ``signature`` and ``timestamp`` headers.
"""

import hashlib
import hmac
import time
from typing import Dict, Optional, Union

import structlog

logger = structlog.get_logger(__name__)

Timestamp = Union[int, str]


def current_timestamp_millis() -> int:
    """Get the current wall-clock time in milliseconds."""
    return int(time.time() * 1000)


def _render_timestamp(timestamp: Timestamp) -> str:
    if isinstance(timestamp, bool):
        raise ValueError("Timestamp must be an integer or a string")
    if isinstance(timestamp, int):
        if timestamp < 0:
            raise ValueError("Timestamp must be non-negative")
        return str(timestamp)
    if isinstance(timestamp, str) and timestamp:
        return timestamp
    raise ValueError("Timestamp must be an integer or a non-empty string")


def generate_signature(path: str, secret: str, timestamp: Timestamp) -> str:
    """
    Compute the signature for one request.

    Args:
        path: Request path, e.g. /device/real/query
        secret: Shared API token
        timestamp: Send time in milliseconds

    Returns:
        32 character lowercase hex digest
    """
    if not isinstance(path, str) or not path:
        raise ValueError("Path must be a non-empty string")
    if not isinstance(secret, str) or not secret:
        raise ValueError("Secret must be a non-empty string")

    payload = path + secret + _render_timestamp(timestamp)
    return hashlib.md5(payload.encode("utf-8")).hexdigest()


def verify_signature(signature: str, path: str, secret: str, timestamp: Timestamp) -> bool:
    """Check a received signature against the recomputed one."""
    try:
        expected = generate_signature(path, secret, timestamp)
    except ValueError:
        return False
    return hmac.compare_digest(signature.encode("utf-8"), expected.encode("utf-8"))


class RequestSigner:
    """
    Builds authentication headers for the telemetry API.

    A fresh timestamp is taken on every call so that retries never
    reuse a signature context.
    """

    def __init__(self, path: str, secret: str):
        if not path or not secret:
            raise ValueError("Signer requires a path and a secret")
        self.path = path
        self._secret = secret

    def sign(self, timestamp: Timestamp) -> str:
        return generate_signature(self.path, self._secret, timestamp)

    def headers(self, timestamp: Optional[Timestamp] = None) -> Dict[str, str]:
        """
        Get the signature headers for one request attempt.

        Args:
            timestamp: Send time in milliseconds (current time if not provided)
        """
        if timestamp is None:
            timestamp = current_timestamp_millis()
        rendered = _render_timestamp(timestamp)
        signature = self.sign(rendered)

        logger.debug("request_signed", path=self.path, timestamp=rendered)

        return {
            "signature": signature,
            "timestamp": rendered,
        }
