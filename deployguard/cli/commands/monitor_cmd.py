"""``deployguard monitor``: verify a deployment and report the result.

Resolves options against the environment configuration, runs the
Verifier, then performs the best-effort side effects: writing the report
file and posting the webhook notification.  The exit code is the only
machine-readable verdict.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Optional

import httpx
import typer
from rich.console import Console
from rich.markup import escape

from deployguard.cli.render import ReportRenderer
from deployguard.config import DeployGuardConfig, load_config
from deployguard.core.retry import RetryPolicy
from deployguard.core.verifier import InvalidTargetError, Verifier
from deployguard.logging_config import configure_logging
from deployguard.models.checks import CheckKind
from deployguard.models.reports import Report
from deployguard.sinks.report_file import ReportFileSink
from deployguard.sinks.webhook import WebhookNotifier, build_deployment_payload

console = Console()


def _make_client() -> httpx.AsyncClient:
    return httpx.AsyncClient()


def build_verifier(client: httpx.AsyncClient, settings: DeployGuardConfig) -> Verifier:
    return Verifier(
        client,
        timeout_ms=settings.timeout_ms,
        retry_policy=RetryPolicy(
            retries=settings.retries, base_delay_ms=settings.retry_delay_ms
        ),
        health_path=settings.health_path,
    )


async def run_monitor(
    settings: DeployGuardConfig,
    checks: list[CheckKind],
) -> Report:
    """Verify ``settings.deployment_url`` and run the configured side effects."""
    async with _make_client() as client:
        report = await build_verifier(client, settings).verify(
            settings.deployment_url, checks
        )
        if settings.output_file:
            ReportFileSink(settings.output_file).write(report)
        if settings.notify_url:
            await WebhookNotifier(client).notify(
                settings.notify_url, build_deployment_payload(report)
            )
    return report


def monitor_cmd(
    url: str = typer.Option(None, "--url", "-u", help="Deployment URL to verify."),
    checks: str = typer.Option(
        None,
        "--checks",
        "-c",
        help="Comma-separated checks: availability (alias health), links, performance.",
    ),
    timeout: int = typer.Option(None, "--timeout", help="Request timeout in milliseconds."),
    retries: int = typer.Option(None, "--retries", help="Retries per request to the target."),
    retry_delay: int = typer.Option(
        None, "--retry-delay", "--retryDelay", help="Base retry delay in milliseconds."
    ),
    output: Path = typer.Option(None, "--output", "-o", help="Write the report as JSON here."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
    notify_url: str = typer.Option(
        None, "--notify-url", "--notifyUrl", help="Webhook to POST the report to."
    ),
    exit_on_fail: Optional[bool] = typer.Option(
        None,
        "--exit-on-fail/--no-exit-on-fail",
        help="Exit with code 1 when any check fails (default: on).",
    ),
) -> None:
    """Verify a deployment: availability, internal links, and response times."""
    try:
        settings = load_config(
            deployment_url=url,
            checks=checks,
            timeout_ms=timeout,
            retries=retries,
            retry_delay_ms=retry_delay,
            output_file=output,
            notify_url=notify_url,
            exit_on_fail=exit_on_fail,
        )
    except ValueError as exc:
        console.print(f"[bold red]Invalid configuration:[/bold red] {escape(str(exc))}")
        raise typer.Exit(code=1)

    configure_logging(settings.log_level, verbose=verbose or settings.verbose)

    try:
        report = asyncio.run(run_monitor(settings, settings.check_kinds))
    except InvalidTargetError as exc:
        console.print(f"[bold red]Invalid URL:[/bold red] {escape(str(exc))}")
        raise typer.Exit(code=1)

    ReportRenderer(console=console).print_report(report)

    if not report.success and settings.exit_on_fail:
        console.print("[bold red]Exiting with error code 1 due to failed checks[/bold red]")
        raise typer.Exit(code=1)
    if report.success:
        console.print("[bold green]All checks completed successfully[/bold green]")
