"""``deployguard history``: print the rollback audit log."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape

from deployguard.cli.render import ReportRenderer
from deployguard.config import load_config
from deployguard.core.history import HistoryError, RollbackHistory

console = Console()


def history_cmd(
    history_path: Path = typer.Option(None, "--history", help="Path to the rollback history file."),
    limit: int = typer.Option(0, "--limit", "-n", help="Show only the newest N entries."),
) -> None:
    """Show recorded rollbacks, oldest first."""
    try:
        settings = load_config(history_path=history_path)
    except ValueError as exc:
        console.print(f"[bold red]Invalid configuration:[/bold red] {escape(str(exc))}")
        raise typer.Exit(code=1)

    try:
        records = RollbackHistory(settings.history_path).read()
    except HistoryError as exc:
        console.print(f"[bold red]{escape(str(exc))}[/bold red]")
        raise typer.Exit(code=1)

    if limit > 0:
        records = records[-limit:]
    ReportRenderer(console=console).print_history(records)
