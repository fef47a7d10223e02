"""Runtime configuration read from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class BridgeSettings:
    slack_token: str
    slack_signing_secret: str
    mattermost_url: str
    mattermost_token: str
    mattermost_team_id: str
    signature_max_age_seconds: int = 300
    mattermost_timeout_seconds: float = 30.0
    audit_log_path: str | None = None

    @classmethod
    def from_env(cls) -> BridgeSettings:
        """Build settings from the environment; missing required keys raise KeyError."""
        return cls(
            slack_token=os.environ["SLACK_TOKEN"],
            slack_signing_secret=os.environ["SLACK_SIGNING_SECRET"],
            mattermost_url=os.environ["MATTERMOST_URL"],
            mattermost_token=os.environ["MATTERMOST_TOKEN"],
            mattermost_team_id=os.environ["MATTERMOST_TEAM_ID"],
            signature_max_age_seconds=int(os.environ.get("SIGNATURE_MAX_AGE_SECONDS", "300")),
            mattermost_timeout_seconds=float(os.environ.get("MATTERMOST_TIMEOUT_SECONDS", "30")),
            audit_log_path=os.environ.get("AUDIT_LOG_PATH") or None,
        )
