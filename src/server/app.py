"""FastAPI application receiving Slack Events API webhooks."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import BackgroundTasks, FastAPI, Request, Response
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.requests import ClientDisconnect

from src.audit.logger import AuditLogger
from src.bridge.errors import (
    AuthenticationError,
    EventParseError,
    MalformedHeadersError,
    TransportError,
)
from src.bridge.service import Bridge
from src.config import BridgeSettings
from src.models import AuditEvent, AuditEventType, RiskLevel
from src.webhook.events import ChallengeRequest, parse_event
from src.webhook.signature import SignatureVerifier

logger = logging.getLogger(__name__)

EVENTS_PATH = "/slack/events"


def create_app_from_env() -> FastAPI:
    """Factory for uvicorn --factory: reads config from environment variables."""
    settings = BridgeSettings.from_env()
    audit_logger = (
        AuditLogger.from_env(settings.audit_log_path) if settings.audit_log_path else None
    )
    return create_app(
        bridge=Bridge.from_settings(settings, audit_logger),
        verifier=SignatureVerifier(
            settings.slack_signing_secret,
            max_age_seconds=settings.signature_max_age_seconds,
        ),
        audit_logger=audit_logger,
    )


def create_app(
    bridge: Bridge,
    verifier: SignatureVerifier,
    audit_logger: AuditLogger | None = None,
) -> FastAPI:
    """Create the webhook app around an already-wired bridge."""

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        yield
        await bridge.aclose()

    app = FastAPI(docs_url=None, redoc_url=None, lifespan=lifespan)
    app.state.bridge = bridge

    def audit(
        request: Request, event_type: AuditEventType, result: str, **details: object,
    ) -> None:
        if audit_logger:
            audit_logger.log(AuditEvent(
                event_type=event_type,
                source_ip=request.client.host if request.client else None,
                action=f"{request.method} {request.url.path}",
                result=result,
                risk_level=RiskLevel.HIGH if result == "failure" else RiskLevel.INFO,
                details=details or None,
            ))

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.post(EVENTS_PATH)
    async def slack_events(request: Request, background_tasks: BackgroundTasks) -> Response:
        try:
            body = await _read_body(request)
            verifier.verify(body, request.headers)
        except (TransportError, MalformedHeadersError, AuthenticationError) as exc:
            logger.warning("Rejecting Slack delivery: %s", exc)
            audit(request, AuditEventType.SIGNATURE_REJECTED, "failure", reason=str(exc))
            return JSONResponse({"error": str(exc)}, status_code=exc.status_code)

        try:
            event = parse_event(body)
        except EventParseError as exc:
            logger.error("Unparsable Slack delivery: %s", exc)
            audit(request, AuditEventType.PARSE_FAILED, "failure", reason=str(exc))
            return JSONResponse({"error": "Unrecognized event payload"}, status_code=500)

        if isinstance(event, ChallengeRequest):
            logger.info("Answering Slack URL verification challenge")
            audit(request, AuditEventType.CHALLENGE_ANSWERED, "success")
            return PlainTextResponse(event.challenge)

        # Slack wants its 200 within 3 seconds; replay happens afterwards
        background_tasks.add_task(bridge.dispatcher.dispatch, event)
        return Response(status_code=200)

    return app


async def _read_body(request: Request) -> bytes:
    try:
        return await request.body()
    except ClientDisconnect as exc:
        raise TransportError("Request body could not be read") from exc
