"""Shared test fixtures for slack-mattermost-bridge."""

from __future__ import annotations

import hashlib
import hmac
import json
import time
from typing import Any
from unittest.mock import MagicMock

import pytest

from src.audit.logger import AuditLogger
from src.bridge.cache import BridgeCaches
from src.bridge.service import Bridge
from src.clients.mattermost import MattermostClient
from src.clients.slack import SlackDirectory
from src.models import ExternalIdentity, LocalIdentity

SIGNING_SECRET = "8f742231b10e8888abcd99yyyzzz85a5"
TEAM_ID = "6rjwrkb71jyn9cbdo5z7nu4rja"


@pytest.fixture
def mock_audit_logger() -> MagicMock:
    return MagicMock(spec=AuditLogger)


@pytest.fixture
def caches() -> BridgeCaches:
    return BridgeCaches()


@pytest.fixture
def slack() -> MagicMock:
    """SlackDirectory double whose lookups answer from a small directory."""
    users = {"U123ABC": "alice", "U999BOB": "bob"}
    channels = {"C01GENERAL": "general", "C02RANDOM": "random"}
    directory = MagicMock(spec=SlackDirectory)
    directory.get_user.side_effect = lambda uid: ExternalIdentity(
        id=uid, display_name=users.get(uid, ""),
    )
    directory.get_channel.side_effect = lambda cid: ExternalIdentity(
        id=cid, display_name=channels.get(cid, ""),
    )
    directory.join_channel.side_effect = lambda cid: ExternalIdentity(
        id=cid, display_name=channels.get(cid, ""),
    )
    return directory


@pytest.fixture
def mattermost() -> MagicMock:
    """MattermostClient double with one user per Slack name and no channels yet."""
    client = MagicMock(spec=MattermostClient)
    client.get_users_by_usernames.side_effect = lambda names: [
        LocalIdentity(id=f"mm-{name}", name=name) for name in names if name in ("alice", "bob")
    ]
    client.get_channel_by_name.return_value = None
    client.create_channel.side_effect = lambda team_id, name, display_name, channel_type: (
        LocalIdentity(id=f"mmc-{name}", name=name)
    )
    client.create_post.return_value = "post-new"
    client.get_posts_since.return_value = []
    return client


@pytest.fixture
def bridge(slack: MagicMock, mattermost: MagicMock, caches: BridgeCaches) -> Bridge:
    return Bridge(slack=slack, mattermost=mattermost, team_id=TEAM_ID, caches=caches)


# --- Factory functions for test data ---


def sign(
    body: bytes, timestamp: int | None = None, secret: str = SIGNING_SECRET,
) -> dict[str, str]:
    """Headers Slack would send for ``body``."""
    ts = str(int(time.time()) if timestamp is None else timestamp)
    digest = hmac.new(secret.encode(), f"v0:{ts}:".encode() + body, hashlib.sha256).hexdigest()
    return {
        "X-Slack-Request-Timestamp": ts,
        "X-Slack-Signature": f"v0={digest}",
    }


def make_message_event(**kwargs: Any) -> dict[str, Any]:
    """Factory for a Slack ``message`` inner event with sensible defaults."""
    defaults: dict[str, Any] = {
        "type": "message",
        "channel": "C01GENERAL",
        "channel_type": "channel",
        "user": "U123ABC",
        "text": "hello world",
        "ts": "1610000000.123456",
    }
    defaults.update(kwargs)
    return {k: v for k, v in defaults.items() if v is not None}


def make_callback(event: dict[str, Any], **kwargs: Any) -> dict[str, Any]:
    """Factory for an ``event_callback`` envelope."""
    defaults: dict[str, Any] = {
        "token": "verification-token",
        "team_id": "T0001",
        "type": "event_callback",
        "event": event,
        "event_id": "Ev0001",
        "event_time": 1610000000,
    }
    defaults.update(kwargs)
    return defaults


def encode(payload: dict[str, Any]) -> bytes:
    return json.dumps(payload).encode()
