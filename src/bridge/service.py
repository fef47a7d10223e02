"""Wires the bridge components around one set of caches and clients."""

from __future__ import annotations

from src.audit.logger import AuditLogger
from src.bridge.cache import BridgeCaches
from src.bridge.channels import ChannelProvisioner
from src.bridge.dispatcher import EventDispatcher
from src.bridge.identity import IdentityResolver
from src.bridge.mentions import MentionRewriter
from src.bridge.threads import ThreadResolver
from src.bridge.translator import MessageTranslator
from src.clients.mattermost import MattermostClient
from src.clients.slack import SlackDirectory
from src.config import BridgeSettings


class Bridge:
    """One bridge instance: caches are owned here, not at module level."""

    def __init__(
        self,
        slack: SlackDirectory,
        mattermost: MattermostClient,
        team_id: str,
        audit_logger: AuditLogger | None = None,
        caches: BridgeCaches | None = None,
    ) -> None:
        self.slack = slack
        self.mattermost = mattermost
        self.caches = caches or BridgeCaches()
        self.provisioner = ChannelProvisioner(mattermost, team_id, self.caches.mattermost_channels)
        self.identities = IdentityResolver(slack, mattermost, self.provisioner, self.caches)
        self.mentions = MentionRewriter(self.identities.user_name)
        self.threads = ThreadResolver(mattermost)
        self.translator = MessageTranslator(self.identities, self.mentions, self.threads)
        self.dispatcher = EventDispatcher(
            slack, mattermost, self.provisioner, self.translator, audit_logger,
        )

    @classmethod
    def from_settings(
        cls, settings: BridgeSettings, audit_logger: AuditLogger | None = None,
    ) -> Bridge:
        return cls(
            slack=SlackDirectory.from_token(settings.slack_token),
            mattermost=MattermostClient(
                settings.mattermost_url,
                settings.mattermost_token,
                timeout=settings.mattermost_timeout_seconds,
            ),
            team_id=settings.mattermost_team_id,
            audit_logger=audit_logger,
        )

    async def aclose(self) -> None:
        await self.mattermost.aclose()
