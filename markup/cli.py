"""Click CLI: serve the app and exercise the proxy and relay by hand."""

from __future__ import annotations

import asyncio
import json
import logging
import sys

import click

from markup.config import Settings
from markup.errors import ConfigurationError, InvalidInput, UpstreamFetchError
from markup.proxy.error_page import render_error
from markup.proxy.fetcher import UpstreamFetcher
from markup.proxy.rewriter import rewrite
from markup.proxy.urls import normalize_url, proxy_path
from markup.webhook.models import NotificationOutcome, WebhookRequest, loads_json
from markup.webhook.notifier import CommentNotifier
from markup.webhook.relay import WebhookRelay


@click.group()
@click.option(
    "--log-level",
    default="INFO",
    show_default=True,
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
)
@click.pass_context
def cli(ctx: click.Context, log_level: str) -> None:
    """Markup page proxy and webhook relay."""
    logging.basicConfig(
        level=log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    ctx.ensure_object(dict)
    try:
        ctx.obj["settings"] = Settings.from_env()
    except ConfigurationError as exc:
        raise click.ClickException(str(exc)) from exc


@cli.command()
@click.option("--host", default="127.0.0.1", show_default=True)
@click.option("--port", default=3000, show_default=True, type=int)
@click.option("--reload", is_flag=True, help="Reload on code changes.")
def serve(host: str, port: int, reload: bool) -> None:
    """Run the HTTP service with uvicorn."""
    import uvicorn

    uvicorn.run(
        "markup.proxy.app:create_app_from_env",
        factory=True,
        host=host,
        port=port,
        reload=reload,
    )


@cli.command()
@click.argument("url")
@click.option("--frame", is_flag=True, help="Print the /proxy path that frames URL instead.")
def normalize(url: str, frame: bool) -> None:
    """Print the normalized form of URL."""
    try:
        target = normalize_url(url)
        click.echo(proxy_path(target) if frame else target)
    except InvalidInput as exc:
        click.echo(f"Invalid URL: {exc}", err=True)
        sys.exit(2)


@cli.command()
@click.argument("url")
@click.option("--raw", is_flag=True, help="Print the upstream body without rewriting.")
@click.pass_context
def fetch(ctx: click.Context, url: str, raw: bool) -> None:
    """Fetch URL the way /proxy does and print the resulting page."""
    settings: Settings = ctx.obj["settings"]
    try:
        target = normalize_url(url)
    except InvalidInput as exc:
        click.echo(f"Invalid URL: {exc}", err=True)
        sys.exit(2)

    fetcher = UpstreamFetcher(timeout=settings.fetch_timeout)
    try:
        upstream = asyncio.run(fetcher.fetch(target))
    except UpstreamFetchError as exc:
        click.echo(render_error(target, 0, str(exc)))
        sys.exit(1)

    if raw:
        click.echo(upstream.body)
    elif upstream.ok:
        click.echo(rewrite(upstream.body, target))
    else:
        click.echo(render_error(target, upstream.status_code, upstream.status_text))
    if not upstream.ok:
        sys.exit(1)


@cli.command("send-webhook")
@click.argument("webhook_url")
@click.argument("payload")
@click.pass_context
def send_webhook(ctx: click.Context, webhook_url: str, payload: str) -> None:
    """Relay PAYLOAD (a JSON object) to WEBHOOK_URL."""
    try:
        data = loads_json(payload)
    except ValueError as exc:
        raise click.BadParameter(f"not valid JSON: {exc}", param_hint="PAYLOAD") from exc
    if not isinstance(data, dict):
        raise click.BadParameter("must be a JSON object", param_hint="PAYLOAD")
    notifier = _notifier(ctx)
    request = WebhookRequest(webhook_url=_checked_url(webhook_url), payload=data)
    _report(asyncio.run(notifier.deliver(request)))


@cli.command("test-webhook")
@click.argument("webhook_url")
@click.pass_context
def test_webhook(ctx: click.Context, webhook_url: str) -> None:
    """Send the sample test event to WEBHOOK_URL."""
    notifier = _notifier(ctx)
    _report(asyncio.run(notifier.send_test(_checked_url(webhook_url))))


def _notifier(ctx: click.Context) -> CommentNotifier:
    settings: Settings = ctx.obj["settings"]
    return CommentNotifier(WebhookRelay(timeout=settings.webhook_timeout))


def _checked_url(raw: str) -> str:
    try:
        return normalize_url(raw)
    except InvalidInput as exc:
        raise click.BadParameter(str(exc), param_hint="WEBHOOK_URL") from exc


def _report(outcome: NotificationOutcome) -> None:
    if outcome.result is None:
        body: dict[str, object] = {"error": "Failed to send webhook", "details": outcome.error}
    else:
        body, _ = outcome.result.to_response()
    click.echo(json.dumps(body, indent=2))
    if not outcome.success:
        sys.exit(1)


if __name__ == "__main__":
    cli()
