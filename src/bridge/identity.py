"""Slack to Mattermost identity resolution with per-instance caching."""

from __future__ import annotations

import logging

from src.bridge.cache import BridgeCaches
from src.bridge.channels import ChannelProvisioner
from src.bridge.errors import DestinationError, IdentityNotFoundError, SlackLookupError
from src.clients.mattermost import MattermostClient
from src.clients.slack import SlackDirectory
from src.models import LocalIdentity

logger = logging.getLogger(__name__)


class IdentityResolver:
    """Maps Slack user and channel ids to Mattermost identities.

    Slack and Mattermost ids are never comparable; the join key is the Slack
    name. Slack lookups that fail degrade to an empty name and are retried on
    the next event, successful ones are cached for the life of the instance.
    """

    def __init__(
        self,
        slack: SlackDirectory,
        mattermost: MattermostClient,
        provisioner: ChannelProvisioner,
        caches: BridgeCaches,
    ) -> None:
        self._slack = slack
        self._mattermost = mattermost
        self._provisioner = provisioner
        self._caches = caches

    async def user_name(self, slack_user_id: str) -> str:
        """Slack username for ``slack_user_id``, or ``""`` if the lookup fails."""
        cached = self._caches.slack_user_names.get(slack_user_id)
        if cached is not None:
            return cached
        try:
            identity = await self._slack.get_user(slack_user_id)
        except SlackLookupError as exc:
            logger.warning("Slack user lookup failed for %s: %s", slack_user_id, exc)
            return ""
        self._caches.slack_user_names.put(slack_user_id, identity.display_name)
        return identity.display_name

    async def channel_name(self, slack_channel_id: str) -> str:
        """Slack channel name for ``slack_channel_id``, or ``""`` if the lookup fails."""
        cached = self._caches.slack_channel_names.get(slack_channel_id)
        if cached is not None:
            return cached
        try:
            identity = await self._slack.get_channel(slack_channel_id)
        except SlackLookupError as exc:
            logger.warning("Slack channel lookup failed for %s: %s", slack_channel_id, exc)
            return ""
        self._caches.slack_channel_names.put(slack_channel_id, identity.display_name)
        return identity.display_name

    async def resolve_user(self, slack_user_id: str) -> LocalIdentity:
        """Return the Mattermost user whose username equals the Slack username.

        Raises ``IdentityNotFoundError`` when there is no such user; users are
        never created on the Mattermost side.
        """
        name = await self.user_name(slack_user_id)
        if not name:
            raise IdentityNotFoundError("user", slack_user_id)

        cached = self._caches.mattermost_users.get(name)
        if cached is not None:
            return cached

        try:
            users = await self._mattermost.get_users_by_usernames([name])
        except DestinationError as exc:
            logger.warning("Mattermost user lookup failed for %s: %s", name, exc)
            raise IdentityNotFoundError("user", name) from exc
        if not users:
            raise IdentityNotFoundError("user", name)

        user = users[0]
        self._caches.mattermost_users.put(name, user)
        return user

    async def resolve_channel(self, slack_channel_id: str) -> LocalIdentity:
        """Return the Mattermost channel for a Slack channel, provisioning it if needed."""
        name = await self.channel_name(slack_channel_id)
        if not name:
            raise IdentityNotFoundError("channel", slack_channel_id)
        return await self._provisioner.ensure_channel(name)
