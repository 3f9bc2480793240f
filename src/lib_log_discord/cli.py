"""Command line interface: metadata banner, document preview, test delivery.

Purpose
-------
Give operators a way to check a webhook configuration without wiring the
handler into an application: ``preview`` renders the document a log event
would produce, ``send`` delivers one event and reports the outcome.

Contents
--------
* :func:`cli` - click group with ``--use-dotenv`` and ``--traceback``.
* ``info``, ``preview``, ``send`` commands.
* :func:`main` - entry point wrapping :func:`lib_cli_exit_tools.run_cli`.
"""

from __future__ import annotations

import os
from collections.abc import Callable, Sequence
from datetime import datetime, timezone
from typing import Any

import click
import lib_cli_exit_tools
from rich.console import Console

from . import __init__conf__
from . import config as config_module
from .application.use_cases.compose import compose_delivery
from .application.use_cases.render_body import render_request_fields
from .domain.events import LogEvent
from .domain.levels import LogLevel
from .domain.request import ManualRequest, snapshot_request
from .domain.severity import color_for
from .errors import WebhookConfigurationError
from .hook import WebhookHook

CLICK_CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}
_LEVEL_CHOICES = [level.name.lower() for level in LogLevel]


def _event_options(command: Callable[..., Any]) -> Callable[..., Any]:
    """Attach the options describing the synthetic event."""

    options = [
        click.option("--level", type=click.Choice(_LEVEL_CHOICES, case_sensitive=False), default="error", show_default=True),
        click.option("--message", "-m", default="lib_log_discord test message", show_default=True),
        click.option("--error", "error_text", default=None, help="Error text shown in the info section."),
        click.option("--method", default="", help="Request method for the REQUEST PAYLOAD section."),
        click.option("--url", "request_url", default="", help="Request URL for the REQUEST PAYLOAD section."),
        click.option("--body", default="", help="Request body for the REQUEST PAYLOAD section."),
        click.option("--headers", default="", help="Request headers for the REQUEST PAYLOAD section."),
    ]
    for option in reversed(options):
        command = option(command)
    return command


def _build_event(
    *,
    level: str,
    message: str,
    error_text: str | None,
    method: str,
    request_url: str,
    body: str,
    headers: str,
) -> LogEvent:
    request = None
    if any((method, request_url, body, headers)):
        request = ManualRequest(method=method, url=request_url, body=body, headers=headers)
    return LogEvent(
        level=LogLevel.from_name(level),
        timestamp=datetime.now(timezone.utc),
        message=message,
        error=error_text,
        request=request,
        logger_name=__init__conf__.shell_command,
    )


@click.group(
    help=__init__conf__.title,
    context_settings=CLICK_CONTEXT_SETTINGS,
    invoke_without_command=True,
)
@click.version_option(
    version=__init__conf__.version,
    prog_name=__init__conf__.shell_command,
    message=f"{__init__conf__.shell_command} version {__init__conf__.version}",
)
@click.option(
    "--use-dotenv/--no-use-dotenv",
    default=None,
    help=f"Load a nearby .env before running commands (default: ${config_module.DOTENV_ENV_VAR}).",
)
@click.option(
    "--traceback/--no-traceback",
    is_flag=True,
    default=False,
    help="Show full Python traceback on errors.",
)
@click.pass_context
def cli(ctx: click.Context, use_dotenv: bool | None, traceback: bool) -> None:
    """Root command storing global flags and loading ``.env`` when requested."""

    lib_cli_exit_tools.config.traceback = traceback
    lib_cli_exit_tools.config.traceback_force_color = traceback
    if config_module.should_use_dotenv(explicit=use_dotenv, env_value=os.getenv(config_module.DOTENV_ENV_VAR)):
        config_module.enable_dotenv()
    if ctx.invoked_subcommand is None:
        __init__conf__.print_info(writer=lambda text: click.echo(text, nl=False))


@cli.command("info", context_settings=CLICK_CONTEXT_SETTINGS)
def cli_info() -> None:
    """Print the package metadata banner."""

    __init__conf__.print_info(writer=lambda text: click.echo(text, nl=False))


@cli.command("preview", context_settings=CLICK_CONTEXT_SETTINGS)
@_event_options
def cli_preview(**event_options: Any) -> None:
    """Render the webhook document for a synthetic event without sending it."""

    event = _build_event(**event_options)
    snapshot = snapshot_request(event.request) if event.request is not None else None
    delivery = compose_delivery(event, color_for(event.level), render_request_fields(snapshot))
    console = Console()
    console.print_json(delivery.document.to_json())
    if delivery.attachment is not None:
        console.print(
            f"[yellow]message attached as {delivery.attachment.filename} ({len(delivery.attachment.content)} bytes)[/yellow]"
        )


@cli.command("send", context_settings=CLICK_CONTEXT_SETTINGS)
@_event_options
@click.option("--webhook-url", default=None, help=f"Webhook URL (default: ${config_module.WEBHOOK_URL_ENV_VAR}).")
@click.option("--wait", type=float, default=10.0, show_default=True, help="Seconds to wait for the delivery.")
def cli_send(webhook_url: str | None, wait: float, **event_options: Any) -> None:
    """Deliver one synthetic event to the configured webhook."""

    settings = config_module.load_settings(webhook_url=webhook_url)
    outcomes: list[tuple[str, dict[str, Any]]] = []

    def record(name: str, payload: dict[str, Any]) -> None:
        outcomes.append((name, payload))

    event = _build_event(**event_options)
    with WebhookHook.from_settings(settings, diagnostic=record) as hook:
        try:
            hook.fire(event)
        except WebhookConfigurationError as exc:
            raise click.ClickException(f"{exc}; pass --webhook-url or set ${config_module.WEBHOOK_URL_ENV_VAR}") from exc
        if not hook.drain(wait):
            raise click.ClickException(f"delivery did not finish within {wait} seconds")

    failures = [(name, payload) for name, payload in outcomes if name != "delivery_sent"]
    if failures:
        name, payload = failures[0]
        raise click.ClickException(f"{name}: {payload}")
    click.echo("delivered")


def main(argv: Sequence[str] | None = None, *, restore_traceback: bool = True) -> int:
    """Run the CLI and return its exit code.

    Traceback preferences changed by ``--traceback`` are restored afterwards
    so repeated in-process invocations start from the same state.
    """

    previous_traceback = getattr(lib_cli_exit_tools.config, "traceback", False)
    previous_force_color = getattr(lib_cli_exit_tools.config, "traceback_force_color", False)
    try:
        return lib_cli_exit_tools.run_cli(
            cli,
            argv=list(argv) if argv is not None else None,
            prog_name=__init__conf__.shell_command,
        )
    finally:
        if restore_traceback:
            lib_cli_exit_tools.config.traceback = previous_traceback
            lib_cli_exit_tools.config.traceback_force_color = previous_force_color


__all__ = ["cli", "main"]
