"""Mattermost channel naming and on-demand channel creation."""

from __future__ import annotations

import hashlib
import logging
import re

from src.bridge.cache import IdentityCache
from src.clients.mattermost import PUBLIC_CHANNEL, MattermostClient
from src.models import LocalIdentity

logger = logging.getLogger(__name__)

_ALLOWED_NAME = re.compile(r"[a-z0-9\-_]+")
MAX_CHANNEL_NAME_LENGTH = 64


def sanitize_channel_name(name: str) -> str:
    """Return a Mattermost-safe channel name for ``name``.

    Names made only of ``[a-z0-9-_]`` are kept; anything else becomes the
    32-character hex MD5 of the name, which itself satisfies the allowed set.
    """
    if len(name) <= MAX_CHANNEL_NAME_LENGTH and _ALLOWED_NAME.fullmatch(name):
        return name
    return hashlib.md5(name.encode()).hexdigest()  # noqa: S324 - naming, not security


class ChannelProvisioner:
    """Finds the Mattermost channel for a Slack channel name, creating it if absent."""

    def __init__(
        self,
        mattermost: MattermostClient,
        team_id: str,
        cache: IdentityCache[LocalIdentity],
    ) -> None:
        self._mattermost = mattermost
        self._team_id = team_id
        self._cache = cache

    async def ensure_channel(self, raw_name: str) -> LocalIdentity:
        """Resolve or create the public channel for ``raw_name``.

        Raises ``DestinationError`` when lookup or creation fails. Concurrent
        misses for the same name may each attempt a creation.
        """
        token = sanitize_channel_name(raw_name)
        cached = self._cache.get(token)
        if cached is not None:
            return cached

        channel = await self._mattermost.get_channel_by_name(self._team_id, token)
        if channel is None:
            logger.info("Creating Mattermost channel %s for Slack channel %r", token, raw_name)
            channel = await self._mattermost.create_channel(
                self._team_id,
                name=token,
                display_name=raw_name,
                channel_type=PUBLIC_CHANNEL,
            )
        self._cache.put(token, channel)
        return channel
