"""Rewrites Slack ``<@U123>`` mention tokens as Mattermost ``@name`` text."""

from __future__ import annotations

import re
from collections.abc import Awaitable, Callable

MENTION_PATTERN = re.compile(r"<@[A-Z0-9]+>")


class MentionRewriter:
    """Replaces each Slack user mention with the user's Slack name."""

    def __init__(self, user_name: Callable[[str], Awaitable[str]]) -> None:
        self._user_name = user_name

    async def rewrite(self, text: str) -> str:
        for token in MENTION_PATTERN.findall(text):
            name = await self._user_name(token[2:-1])
            text = text.replace(token, f"@{name}", 1)
        return text
