"""Slack Web API lookups used to name users and channels."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import aiohttp
from slack_sdk.errors import SlackClientError
from slack_sdk.web.async_client import AsyncWebClient

from src.bridge.errors import SlackLookupError
from src.models import ExternalIdentity

logger = logging.getLogger(__name__)

_NETWORK_ERRORS = (aiohttp.ClientError, asyncio.TimeoutError)

class SlackDirectory:
    """Thin wrapper over ``AsyncWebClient`` returning ``ExternalIdentity``."""

    def __init__(self, client: AsyncWebClient) -> None:
        self._client = client

    @classmethod
    def from_token(cls, token: str) -> SlackDirectory:
        return cls(AsyncWebClient(token=token))

    async def get_user(self, user_id: str) -> ExternalIdentity:
        response = await self._call("users.info", self._client.users_info, user=user_id)
        user: dict[str, Any] = response.get("user") or {}
        return ExternalIdentity(id=user_id, display_name=user.get("name", ""))

    async def get_channel(self, channel_id: str) -> ExternalIdentity:
        response = await self._call(
            "conversations.info", self._client.conversations_info, channel=channel_id,
        )
        channel: dict[str, Any] = response.get("channel") or {}
        return ExternalIdentity(id=channel_id, display_name=channel.get("name", ""))

    async def join_channel(self, channel_id: str) -> ExternalIdentity:
        """Join a public channel so its messages are delivered to the bridge."""
        response = await self._call(
            "conversations.join", self._client.conversations_join, channel=channel_id,
        )
        channel: dict[str, Any] = response.get("channel") or {}
        return ExternalIdentity(id=channel_id, display_name=channel.get("name", ""))

    @staticmethod
    async def _call(method: str, func: Any, **kwargs: Any) -> Any:
        try:
            return await func(**kwargs)
        except SlackClientError as exc:
            response = getattr(exc, "response", None)
            reason = response.get("error", str(exc)) if response is not None else str(exc)
            raise SlackLookupError(method, reason) from exc
        except _NETWORK_ERRORS as exc:
            raise SlackLookupError(method, str(exc) or type(exc).__name__) from exc
