"""Shared Pydantic data models for slack-mattermost-bridge."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

# --- Enums ---


class AuditEventType(str, Enum):
    SIGNATURE_REJECTED = "signature_rejected"
    PARSE_FAILED = "parse_failed"
    CHALLENGE_ANSWERED = "challenge_answered"
    CHANNEL_PROVISIONED = "channel_provisioned"
    POST_CREATED = "post_created"
    EVENT_IGNORED = "event_ignored"
    EVENT_DROPPED = "event_dropped"


class RiskLevel(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    INFO = "info"


# --- Identity Models ---


class ExternalIdentity(BaseModel):
    """A Slack user or channel as returned by the Slack Web API."""

    model_config = ConfigDict(frozen=True)

    id: str
    display_name: str


class LocalIdentity(BaseModel):
    """The Mattermost counterpart of a Slack user or channel."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str


# --- Post Models ---


class TranslatedMessage(BaseModel):
    model_config = ConfigDict(frozen=True)

    channel_id: str
    user_id: str
    text: str
    root_id: str | None = None
    created_at_millis: int | None = Field(default=None, ge=0)
    user_name: str | None = None

    def to_post_payload(self) -> dict[str, object]:
        """Body for ``POST /api/v4/posts``.

        The REST API attributes a post to the token's owner and keeps
        ``create_at`` only for system admins, so the author's name also
        travels in ``props`` where integrations may override the username.
        """
        props: dict[str, str] = {"from_slack": "true"}
        if self.user_name:
            props["override_username"] = self.user_name
        payload: dict[str, object] = {
            "channel_id": self.channel_id,
            "user_id": self.user_id,
            "message": self.text,
            "props": props,
        }
        if self.created_at_millis is not None:
            payload["create_at"] = self.created_at_millis
        if self.root_id:
            payload["root_id"] = self.root_id
        return payload


# --- Audit Models ---


def _now_iso() -> str:
    return datetime.now(UTC).isoformat()


class AuditEvent(BaseModel):
    timestamp: str = Field(default_factory=_now_iso)
    event_type: AuditEventType
    source_ip: str | None = None
    event_id: str | None = None
    action: str
    result: str  # "success" | "failure" | "ignored"
    risk_level: RiskLevel
    details: dict[str, object] | None = None
