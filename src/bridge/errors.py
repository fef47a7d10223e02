"""Exception taxonomy for the bridge.

Request-level errors (``AuthenticationError``, ``MalformedHeadersError``,
``TransportError``, ``EventParseError``) carry the HTTP status the endpoint
answers with. The remaining errors are raised inside event processing and are
logged by the dispatcher; they never reach the webhook caller.
"""

from __future__ import annotations


class BridgeError(Exception):
    """Base class for all bridge errors."""

    status_code: int = 500


class AuthenticationError(BridgeError):
    """Raised when a webhook signature does not match the request body."""

    status_code = 401


class MalformedHeadersError(BridgeError):
    """Raised when signature headers are missing, unparsable or stale."""

    status_code = 400


class TransportError(BridgeError):
    """Raised when the request body cannot be read."""

    status_code = 400


class EventParseError(BridgeError):
    """Raised when a payload is not a recognized Events API envelope."""

    status_code = 500


class SlackLookupError(BridgeError):
    """Raised when a Slack Web API call fails."""

    def __init__(self, method: str, reason: str) -> None:
        self.method = method
        self.reason = reason
        super().__init__(f"Slack {method} failed: {reason}")


class IdentityNotFoundError(BridgeError):
    """Raised when a Slack identity has no Mattermost counterpart."""

    def __init__(self, kind: str, key: str) -> None:
        self.kind = kind
        self.key = key
        super().__init__(f"No Mattermost {kind} found for {key!r}")


class DestinationError(BridgeError):
    """Raised when a Mattermost API call fails."""

    def __init__(self, operation: str, status_code: int | None, detail: str) -> None:
        self.operation = operation
        self.upstream_status = status_code
        self.detail = detail
        super().__init__(f"Mattermost {operation} failed ({status_code}): {detail}")


class ThreadAnchorError(BridgeError, ValueError):
    """Raised when a Slack timestamp cannot be converted to milliseconds."""

    def __init__(self, anchor: str) -> None:
        self.anchor = anchor
        super().__init__(f"Invalid Slack timestamp: {anchor!r}")
