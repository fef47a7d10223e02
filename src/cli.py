"""Click CLI for running the bridge and inspecting its translations."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path

import click
import uvicorn

from src.audit.logger import summarize_audit_log
from src.bridge.channels import sanitize_channel_name
from src.bridge.errors import ThreadAnchorError
from src.bridge.threads import anchor_to_millis


@click.group()
def cli() -> None:
    """Slack to Mattermost event bridge."""


@cli.command()
@click.option("--host", default="0.0.0.0", help="Interface to bind.")
@click.option("--port", default=8080, type=int, help="Port to listen on.")
@click.option(
    "--log-level",
    default=lambda: os.environ.get("LOG_LEVEL", "info"),
    help="Logging level (defaults to $LOG_LEVEL or info).",
)
def serve(host: str, port: int, log_level: str) -> None:
    """Run the webhook receiver (configuration comes from the environment)."""
    logging.basicConfig(
        level=log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(
        "src.server.app:create_app_from_env",
        factory=True,
        host=host,
        port=port,
        log_level=log_level.lower(),
    )


@cli.command("channel-token")
@click.argument("name")
def channel_token(name: str) -> None:
    """Print the Mattermost channel name a Slack channel NAME maps to."""
    click.echo(sanitize_channel_name(name))


@cli.command("anchor-millis")
@click.argument("ts")
def anchor_millis(ts: str) -> None:
    """Print the millisecond key for a Slack timestamp TS."""
    try:
        click.echo(anchor_to_millis(ts))
    except ThreadAnchorError as exc:
        raise click.BadParameter(str(exc), param_hint="TS") from exc


@cli.command("audit-summary")
@click.argument("log_path", type=click.Path(dir_okay=False, path_type=Path))
def audit_summary(log_path: Path) -> None:
    """Count audit records per event type in LOG_PATH."""
    click.echo(json.dumps(summarize_audit_log(log_path), indent=2, sort_keys=True))
