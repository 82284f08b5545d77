"""``deployguard rollback``: roll a worker back to a previous version.

Thin adapter over ``RollbackController``: resolves configuration, wires
the default collaborators (project files, wrangler, terminal prompt,
webhook, JSON history), runs the workflow, and maps its outcome to an
exit code.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

import httpx
import typer
from rich.console import Console
from rich.markup import escape

from deployguard.adapters import (
    FileProjectConfigSource,
    ProjectConfigError,
    TerminalConfirmer,
    VersionRegistryError,
    WranglerRollbackExecutor,
    WranglerVersionRegistry,
)
from deployguard.cli.commands.monitor_cmd import build_verifier
from deployguard.cli.render import ReportRenderer
from deployguard.config import DeployGuardConfig, load_config
from deployguard.core.history import RollbackHistory
from deployguard.core.rollback_controller import RollbackController, RollbackError
from deployguard.core.verifier import InvalidTargetError
from deployguard.logging_config import configure_logging
from deployguard.models.rollback import RollbackRequest, RollbackResult
from deployguard.sinks.webhook import WebhookNotifier

console = Console()


def _make_client() -> httpx.AsyncClient:
    return httpx.AsyncClient()


def build_controller(
    settings: DeployGuardConfig, client: httpx.AsyncClient
) -> RollbackController:
    """Wire the controller with the production collaborators."""
    return RollbackController(
        config_source=FileProjectConfigSource(settings.project_dir),
        registry=WranglerVersionRegistry(),
        executor=WranglerRollbackExecutor(),
        confirmer=TerminalConfirmer(),
        history=RollbackHistory(settings.history_path),
        notifier=WebhookNotifier(client),
        verify=build_verifier(client, settings).verify,
        settle_delay_seconds=settings.settle_delay_seconds,
    )


async def run_rollback(
    settings: DeployGuardConfig, request: RollbackRequest
) -> RollbackResult:
    async with _make_client() as client:
        return await build_controller(settings, client).run(request)


def rollback_cmd(
    version: str = typer.Option(
        None, "--version", help="Version to roll back to (default: previous version)."
    ),
    environment: str = typer.Option(
        None, "--environment", "-e", help="Environment to roll back (default: production)."
    ),
    verify: bool = typer.Option(False, "--verify", help="Verify the deployment after rollback."),
    notify: str = typer.Option(None, "--notify", help="Webhook URL to notify about the rollback."),
    reason: str = typer.Option(None, "--reason", help="Reason for the rollback (for the audit log)."),
    force: bool = typer.Option(False, "--force", "-f", help="Skip the confirmation prompt."),
    history_path: Path = typer.Option(None, "--history", help="Path to the rollback history file."),
    project_dir: Path = typer.Option(
        None, "--project-dir", help="Directory holding package.json and wrangler.jsonc."
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    """Roll back a Cloudflare Workers deployment and record it in the audit log."""
    try:
        settings = load_config(
            environment=environment, history_path=history_path, project_dir=project_dir
        )
    except ValueError as exc:
        console.print(f"[bold red]Invalid configuration:[/bold red] {escape(str(exc))}")
        raise typer.Exit(code=1)

    configure_logging(settings.log_level, verbose=verbose or settings.verbose)

    request = RollbackRequest(
        version=version,
        environment=settings.environment,
        verify=verify,
        notify_url=notify,
        reason=reason,
        force=force,
    )

    console.print("[bold blue]Cloudflare Workers Deployment Rollback[/bold blue]")
    console.print("[blue]=======================================[/blue]")

    try:
        result = asyncio.run(run_rollback(settings, request))
    except RollbackError as exc:
        console.print(f"[bold red]{escape(str(exc))}[/bold red]")
        if exc.available:
            console.print("[blue]Available versions:[/blue]")
            for descriptor in exc.available:
                console.print(f"  {descriptor.id} ({descriptor.date})")
        raise typer.Exit(code=1)
    except (ProjectConfigError, VersionRegistryError, InvalidTargetError) as exc:
        console.print(f"[bold red]{escape(str(exc))}[/bold red]")
        raise typer.Exit(code=1)

    ReportRenderer(console=console).print_rollback_result(result)
    raise typer.Exit(code=result.exit_code)
