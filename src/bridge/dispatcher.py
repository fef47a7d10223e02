"""Routes parsed callback events to channel provisioning or message replay."""

from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING

from src.bridge.errors import DestinationError, IdentityNotFoundError, SlackLookupError
from src.models import AuditEvent, AuditEventType, RiskLevel
from src.webhook.events import CallbackEvent, ChannelCreated, MessagePosted, Other

if TYPE_CHECKING:
    from src.audit.logger import AuditLogger
    from src.bridge.channels import ChannelProvisioner
    from src.bridge.translator import MessageTranslator
    from src.clients.mattermost import MattermostClient
    from src.clients.slack import SlackDirectory

logger = logging.getLogger(__name__)


class DispatchOutcome(str, Enum):
    CHANNEL_PROVISIONED = "channel_provisioned"
    POST_CREATED = "post_created"
    IGNORED = "ignored"
    DROPPED = "dropped"


class EventDispatcher:
    """Stateless per-event dispatch.

    Failures inside a handler are logged and the event is dropped; nothing
    is retried and nothing propagates, since Slack already has its 200.
    """

    def __init__(
        self,
        slack: SlackDirectory,
        mattermost: MattermostClient,
        provisioner: ChannelProvisioner,
        translator: MessageTranslator,
        audit_logger: AuditLogger | None = None,
    ) -> None:
        self._slack = slack
        self._mattermost = mattermost
        self._provisioner = provisioner
        self._translator = translator
        self._audit = audit_logger

    async def dispatch(self, event: CallbackEvent) -> DispatchOutcome:
        inner = event.inner
        try:
            if isinstance(inner, ChannelCreated):
                outcome = await self._on_channel_created(event, inner)
            elif isinstance(inner, MessagePosted):
                outcome = await self._on_message(event, inner)
            else:
                outcome = self._ignore(inner)
        except (IdentityNotFoundError, DestinationError, SlackLookupError) as exc:
            logger.warning("Dropping event %s: %s", event.event_id or "<no id>", exc)
            self._record(
                AuditEventType.EVENT_DROPPED,
                event,
                result="failure",
                risk_level=RiskLevel.MEDIUM,
                details={"reason": str(exc), "error": type(exc).__name__},
            )
            return DispatchOutcome.DROPPED

        if outcome is DispatchOutcome.IGNORED:
            self._record(AuditEventType.EVENT_IGNORED, event, result="ignored")
        return outcome

    async def _on_channel_created(
        self, event: CallbackEvent, inner: ChannelCreated,
    ) -> DispatchOutcome:
        name = inner.channel_name
        try:
            joined = await self._slack.join_channel(inner.channel_id)
            name = joined.display_name or name
        except SlackLookupError as exc:
            logger.warning("Could not join Slack channel %s: %s", inner.channel_id, exc)

        channel = await self._provisioner.ensure_channel(name)
        logger.info("Provisioned Mattermost channel %s for %s", channel.name, inner.channel_id)
        self._record(
            AuditEventType.CHANNEL_PROVISIONED,
            event,
            result="success",
            details={"slack_channel": inner.channel_id, "mattermost_channel": channel.id},
        )
        return DispatchOutcome.CHANNEL_PROVISIONED

    async def _on_message(self, event: CallbackEvent, inner: MessagePosted) -> DispatchOutcome:
        if not inner.is_plain_channel_message:
            logger.debug(
                "Skipping message ts=%s (channel_type=%s, edited=%s)",
                inner.ts,
                inner.channel_type,
                inner.edited is not None,
            )
            return DispatchOutcome.IGNORED

        message = await self._translator.translate(inner)
        post_id = await self._mattermost.create_post(message)
        logger.info("Created Mattermost post %s in %s", post_id, message.channel_id)
        self._record(
            AuditEventType.POST_CREATED,
            event,
            result="success",
            details={
                "slack_ts": inner.ts,
                "mattermost_post": post_id,
                "threaded": message.root_id is not None,
            },
        )
        return DispatchOutcome.POST_CREATED

    @staticmethod
    def _ignore(inner: Other) -> DispatchOutcome:
        logger.debug("Ignoring unsupported Slack event type %r", inner.type)
        return DispatchOutcome.IGNORED

    def _record(
        self,
        event_type: AuditEventType,
        event: CallbackEvent,
        result: str,
        risk_level: RiskLevel = RiskLevel.INFO,
        details: dict[str, object] | None = None,
    ) -> None:
        if self._audit:
            self._audit.log(AuditEvent(
                event_type=event_type,
                event_id=event.event_id,
                action=f"dispatch:{event.inner.kind}",
                result=result,
                risk_level=risk_level,
                details=details,
            ))
