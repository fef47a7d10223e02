"""Slack request signature verification.

Slack signs every Events API delivery with HMAC-SHA256 over
``v0:<timestamp>:<body>`` keyed by the app's signing secret. The signature is
sent as ``X-Slack-Signature: v0=<hex>`` alongside
``X-Slack-Request-Timestamp``.
"""

from __future__ import annotations

import hashlib
import hmac
import logging
import time
from collections.abc import Mapping

from src.bridge.errors import AuthenticationError, MalformedHeadersError

logger = logging.getLogger(__name__)

SIGNATURE_VERSION = "v0"
TIMESTAMP_HEADER = "x-slack-request-timestamp"
SIGNATURE_HEADER = "x-slack-signature"


class SignatureVerifier:
    """Validates Slack webhook deliveries against the signing secret."""

    def __init__(self, signing_secret: str, max_age_seconds: int = 300) -> None:
        if not signing_secret:
            raise ValueError("Slack signing secret must not be empty")
        self._secret = signing_secret.encode()
        self._max_age_seconds = max_age_seconds

    def verify(self, body: bytes, headers: Mapping[str, str]) -> None:
        """Raise unless ``body`` carries a valid signature.

        Header problems raise ``MalformedHeadersError`` before any hashing;
        a signature mismatch raises ``AuthenticationError``.
        """
        lowered = {k.lower(): v for k, v in headers.items()}
        timestamp = self._parse_timestamp(lowered.get(TIMESTAMP_HEADER, ""))
        signature = lowered.get(SIGNATURE_HEADER, "")
        if not signature:
            raise MalformedHeadersError("Missing Slack signature header")

        expected = self.sign(body, timestamp)
        if not hmac.compare_digest(signature.encode(), expected.encode()):
            raise AuthenticationError("Slack signature mismatch")

    def sign(self, body: bytes, timestamp: int | str) -> str:
        """Return the ``v0=<hex>`` signature for ``body`` at ``timestamp``."""
        basestring = f"{SIGNATURE_VERSION}:{timestamp}:".encode() + body
        digest = hmac.new(self._secret, basestring, hashlib.sha256).hexdigest()
        return f"{SIGNATURE_VERSION}={digest}"

    def _parse_timestamp(self, raw: str) -> int:
        if not raw:
            raise MalformedHeadersError("Missing Slack request timestamp")
        try:
            timestamp = int(raw)
        except ValueError:
            raise MalformedHeadersError(f"Unparsable Slack request timestamp: {raw!r}") from None

        # Outside the window the delivery is treated as a replay
        age = abs(int(time.time()) - timestamp)
        if age > self._max_age_seconds:
            logger.warning("Rejecting Slack request with stale timestamp (age=%ss)", age)
            raise MalformedHeadersError("Slack request timestamp outside allowed window")
        return timestamp
