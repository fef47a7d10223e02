"""Slack thread anchors to Mattermost root posts."""

from __future__ import annotations

import logging

from src.bridge.errors import DestinationError, ThreadAnchorError
from src.clients.mattermost import MattermostClient

logger = logging.getLogger(__name__)

MILLIS_DIGITS = 13
# Mattermost stamps the imported root slightly before the Slack ts
ROOT_LOOKBACK_MILLIS = 100


def anchor_to_millis(anchor: str) -> int:
    """Convert a Slack ``"<seconds>.<micros>"`` timestamp to epoch milliseconds.

    The first decimal point is removed and the digits truncated to 13, so
    ``"1610000000.123456"`` becomes ``1610000000123``. Shorter inputs are
    right-padded with zeros.
    """
    digits = anchor.replace(".", "", 1)
    if not (digits.isascii() and digits.isdigit()):
        raise ThreadAnchorError(anchor)
    return int(digits[:MILLIS_DIGITS].ljust(MILLIS_DIGITS, "0"))


class ThreadResolver:
    """Finds the Mattermost root post for a Slack thread reply."""

    def __init__(self, mattermost: MattermostClient) -> None:
        self._mattermost = mattermost

    async def resolve_root(self, channel_id: str, thread_anchor: str) -> str | None:
        """Return the Mattermost root post id for a Slack thread, or None.

        Takes the last post created since ``anchor - 100ms``. A bad anchor,
        a failed query or an empty result all yield None so the reply is
        posted at the top level instead.
        """
        try:
            since = anchor_to_millis(thread_anchor) - ROOT_LOOKBACK_MILLIS
        except ThreadAnchorError as exc:
            logger.warning("Cannot resolve thread root: %s", exc)
            return None

        try:
            order = await self._mattermost.get_posts_since(channel_id, since)
        except DestinationError as exc:
            logger.warning("Thread root lookup failed in %s: %s", channel_id, exc)
            return None

        if not order:
            logger.warning(
                "No Mattermost posts in %s since %s; posting reply at top level",
                channel_id,
                since,
            )
            return None
        return order[-1]
