"""Typed Slack Events API payloads and the parser that produces them."""

from __future__ import annotations

import json
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from src.bridge.errors import EventParseError

URL_VERIFICATION = "url_verification"
EVENT_CALLBACK = "event_callback"


# --- Inner events ---


class ChannelCreated(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["channel_created"] = "channel_created"
    channel_id: str = Field(min_length=1)
    channel_name: str = Field(min_length=1)


class EditInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    user: str = ""
    ts: str = ""


class MessagePosted(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["message"] = "message"
    channel: str = ""
    channel_type: str = ""
    user: str = ""
    text: str = ""
    ts: str = ""
    thread_ts: str | None = None
    edited: EditInfo | None = None
    subtype: str | None = None

    @property
    def is_plain_channel_message(self) -> bool:
        """Unedited, non-empty message posted in a public channel."""
        return self.channel_type == "channel" and self.edited is None and self.text != ""

    @property
    def is_threaded_reply(self) -> bool:
        return bool(self.thread_ts) and self.thread_ts != self.ts


class Other(BaseModel):
    """Any inner event type the bridge does not handle."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["other"] = "other"
    type: str = ""


InnerEvent = ChannelCreated | MessagePosted | Other


# --- Envelopes ---


class ChallengeRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    challenge: str


class CallbackEvent(BaseModel):
    model_config = ConfigDict(frozen=True)

    inner: InnerEvent = Field(discriminator="kind")
    team_id: str | None = None
    event_id: str | None = None
    event_time: int | None = None


ParsedEvent = ChallengeRequest | CallbackEvent


def parse_event(body: bytes) -> ParsedEvent:
    """Decode a verified request body into a typed event.

    Raises ``EventParseError`` for anything that is not a url_verification
    or event_callback envelope. Unknown inner event types become ``Other``.
    """
    try:
        payload = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise EventParseError(f"Body is not valid JSON: {exc}") from exc
    if not isinstance(payload, dict):
        raise EventParseError("Event payload must be a JSON object")

    outer_type = payload.get("type")
    try:
        if outer_type == URL_VERIFICATION:
            return ChallengeRequest.model_validate(payload)
        if outer_type == EVENT_CALLBACK:
            return CallbackEvent(
                inner=_parse_inner(payload.get("event")),
                team_id=payload.get("team_id"),
                event_id=payload.get("event_id"),
                event_time=payload.get("event_time"),
            )
    except ValidationError as exc:
        raise EventParseError(f"Malformed {outer_type} payload: {exc}") from exc
    raise EventParseError(f"Unrecognized event type: {outer_type!r}")


def _parse_inner(event: Any) -> InnerEvent:
    if not isinstance(event, dict):
        raise EventParseError("event_callback payload has no event object")

    event_type = event.get("type")
    if event_type == "channel_created":
        channel = event.get("channel")
        if not isinstance(channel, dict):
            raise EventParseError("channel_created event has no channel object")
        return ChannelCreated(
            channel_id=channel.get("id", ""),
            channel_name=channel.get("name", ""),
        )
    if event_type == "message":
        return MessagePosted.model_validate(
            {k: v for k, v in event.items() if k != "type"},
        )
    return Other(type=str(event_type or ""))
