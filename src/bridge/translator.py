"""Composes identity, mention and thread resolution into a Mattermost post."""

from __future__ import annotations

import logging

from src.bridge.errors import ThreadAnchorError
from src.bridge.identity import IdentityResolver
from src.bridge.mentions import MentionRewriter
from src.bridge.threads import ThreadResolver, anchor_to_millis
from src.models import TranslatedMessage
from src.webhook.events import MessagePosted

logger = logging.getLogger(__name__)


class MessageTranslator:
    def __init__(
        self,
        identities: IdentityResolver,
        mentions: MentionRewriter,
        threads: ThreadResolver,
    ) -> None:
        self._identities = identities
        self._mentions = mentions
        self._threads = threads

    async def translate(self, event: MessagePosted) -> TranslatedMessage:
        """Build the Mattermost post for a Slack message.

        Raises ``IdentityNotFoundError`` if the author has no Mattermost
        account, and ``DestinationError`` if the channel cannot be provisioned.
        """
        user = await self._identities.resolve_user(event.user)
        channel = await self._identities.resolve_channel(event.channel)
        text = await self._mentions.rewrite(event.text)

        created_at: int | None = None
        try:
            created_at = anchor_to_millis(event.ts)
        except ThreadAnchorError:
            logger.warning("Unparsable message ts %r; Mattermost will stamp the post", event.ts)

        root_id: str | None = None
        if event.is_threaded_reply and event.thread_ts:
            root_id = await self._threads.resolve_root(channel.id, event.thread_ts)

        return TranslatedMessage(
            channel_id=channel.id,
            user_id=user.id,
            text=text,
            root_id=root_id,
            created_at_millis=created_at,
            user_name=user.name,
        )
