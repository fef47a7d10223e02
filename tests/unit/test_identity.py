"""Tests for Slack to Mattermost identity resolution."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from src.bridge.cache import BridgeCaches
from src.bridge.channels import ChannelProvisioner
from src.bridge.errors import DestinationError, IdentityNotFoundError, SlackLookupError
from src.bridge.identity import IdentityResolver
from src.models import ExternalIdentity, LocalIdentity
from tests.conftest import TEAM_ID


@pytest.fixture
def resolver(slack: MagicMock, mattermost: MagicMock, caches: BridgeCaches) -> IdentityResolver:
    provisioner = ChannelProvisioner(mattermost, TEAM_ID, caches.mattermost_channels)
    return IdentityResolver(slack, mattermost, provisioner, caches)


class TestResolveUser:
    @pytest.mark.asyncio
    async def test_resolves_by_slack_username(
        self, resolver: IdentityResolver, mattermost: MagicMock,
    ) -> None:
        user = await resolver.resolve_user("U123ABC")
        assert user == LocalIdentity(id="mm-alice", name="alice")
        mattermost.get_users_by_usernames.assert_awaited_once_with(["alice"])

    @pytest.mark.asyncio
    async def test_repeated_calls_are_cache_stable(
        self, resolver: IdentityResolver, slack: MagicMock, mattermost: MagicMock,
    ) -> None:
        first = await resolver.resolve_user("U123ABC")
        second = await resolver.resolve_user("U123ABC")
        assert first == second
        assert slack.get_user.await_count == 1
        assert mattermost.get_users_by_usernames.await_count == 1

    @pytest.mark.asyncio
    async def test_cached_name_survives_upstream_rename(
        self, resolver: IdentityResolver, slack: MagicMock,
    ) -> None:
        await resolver.resolve_user("U123ABC")
        slack.get_user.side_effect = lambda uid: ExternalIdentity(id=uid, display_name="renamed")
        assert await resolver.user_name("U123ABC") == "alice"

    @pytest.mark.asyncio
    async def test_first_match_wins(
        self, resolver: IdentityResolver, mattermost: MagicMock,
    ) -> None:
        mattermost.get_users_by_usernames.side_effect = None
        mattermost.get_users_by_usernames.return_value = [
            LocalIdentity(id="first", name="alice"),
            LocalIdentity(id="second", name="alice"),
        ]
        user = await resolver.resolve_user("U123ABC")
        assert user.id == "first"

    @pytest.mark.asyncio
    async def test_unknown_mattermost_user_is_not_found(
        self, resolver: IdentityResolver, slack: MagicMock, caches: BridgeCaches,
    ) -> None:
        slack.get_user.side_effect = lambda uid: ExternalIdentity(id=uid, display_name="carol")
        with pytest.raises(IdentityNotFoundError):
            await resolver.resolve_user("U777CAROL")
        assert "carol" not in caches.mattermost_users

    @pytest.mark.asyncio
    async def test_slack_failure_degrades_to_not_found(
        self, resolver: IdentityResolver, slack: MagicMock, mattermost: MagicMock,
        caches: BridgeCaches,
    ) -> None:
        slack.get_user.side_effect = SlackLookupError("users.info", "user_not_found")
        with pytest.raises(IdentityNotFoundError):
            await resolver.resolve_user("U123ABC")
        mattermost.get_users_by_usernames.assert_not_called()
        assert "U123ABC" not in caches.slack_user_names

    @pytest.mark.asyncio
    async def test_mattermost_failure_degrades_to_not_found(
        self, resolver: IdentityResolver, mattermost: MagicMock,
    ) -> None:
        mattermost.get_users_by_usernames.side_effect = DestinationError(
            "get_users_by_usernames", 500, "boom",
        )
        with pytest.raises(IdentityNotFoundError):
            await resolver.resolve_user("U123ABC")


class TestUserName:
    @pytest.mark.asyncio
    async def test_failed_lookup_yields_empty_name(
        self, resolver: IdentityResolver, slack: MagicMock,
    ) -> None:
        slack.get_user.side_effect = SlackLookupError("users.info", "ratelimited")
        assert await resolver.user_name("U123ABC") == ""

    @pytest.mark.asyncio
    async def test_failed_lookup_is_retried_next_time(
        self, resolver: IdentityResolver, slack: MagicMock,
    ) -> None:
        slack.get_user.side_effect = [
            SlackLookupError("users.info", "ratelimited"),
            ExternalIdentity(id="U123ABC", display_name="alice"),
        ]
        assert await resolver.user_name("U123ABC") == ""
        assert await resolver.user_name("U123ABC") == "alice"


class TestResolveChannel:
    @pytest.mark.asyncio
    async def test_provisions_missing_channel(
        self, resolver: IdentityResolver, mattermost: MagicMock,
    ) -> None:
        channel = await resolver.resolve_channel("C01GENERAL")
        assert channel.name == "general"
        mattermost.create_channel.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_existing_channel_is_reused(
        self, resolver: IdentityResolver, mattermost: MagicMock,
    ) -> None:
        mattermost.get_channel_by_name.return_value = LocalIdentity(id="c-gen", name="general")
        channel = await resolver.resolve_channel("C01GENERAL")
        assert channel.id == "c-gen"
        mattermost.create_channel.assert_not_called()

    @pytest.mark.asyncio
    async def test_channel_lookup_cached(
        self, resolver: IdentityResolver, slack: MagicMock,
    ) -> None:
        await resolver.resolve_channel("C01GENERAL")
        await resolver.resolve_channel("C01GENERAL")
        assert slack.get_channel.await_count == 1

    @pytest.mark.asyncio
    async def test_unnamed_channel_is_not_found(
        self, resolver: IdentityResolver, slack: MagicMock, mattermost: MagicMock,
    ) -> None:
        slack.get_channel.side_effect = SlackLookupError("conversations.info", "channel_not_found")
        with pytest.raises(IdentityNotFoundError):
            await resolver.resolve_channel("C404")
        mattermost.create_channel.assert_not_called()
