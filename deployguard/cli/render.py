"""Rich terminal rendering for reports, rollback results, and history.

Color scheme
------------
- green   : PASS / succeeded
- red     : FAIL / rollback failed
- yellow  : threshold miss, verification failed, cancelled
"""

from __future__ import annotations

from rich.console import Console, Group
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from deployguard.models.checks import CheckResult, LinksDetail, PerformanceDetail
from deployguard.models.reports import Report
from deployguard.models.rollback import RollbackOutcome, RollbackRecord, RollbackResult

_OUTCOME_MESSAGES: dict[RollbackOutcome, str] = {
    RollbackOutcome.SUCCEEDED: "[bold green]Rollback completed successfully[/bold green]",
    RollbackOutcome.VERIFICATION_FAILED: (
        "[bold yellow]Rollback completed but verification failed[/bold yellow]"
    ),
    RollbackOutcome.ROLLBACK_FAILED: "[bold red]Rollback failed[/bold red]",
    RollbackOutcome.CANCELLED: "[yellow]Rollback cancelled[/yellow]",
}


def _describe(result: CheckResult) -> str:
    if result.error:
        return f"[red]{escape(result.error)}[/red]"
    detail = result.detail
    if isinstance(detail, LinksDetail):
        text = f"{detail.total_checked} checked, {detail.broken_count} broken"
        for probe in detail.broken_links:
            reason = probe.error or f"status {probe.status_code}"
            text += f"\n[red]{escape(probe.url)} ({escape(reason)})[/red]"
        return text
    if isinstance(detail, PerformanceDetail):
        style = "green" if detail.passes_threshold else "yellow"
        return (
            f"[{style}]avg {detail.avg_response_time_ms:.0f}ms "
            f"(threshold {detail.threshold_ms:.0f}ms)[/{style}]"
        )
    if detail is not None:
        return f"status {detail.status_code}"
    return "[dim]-[/dim]"


class ReportRenderer:
    """Prints deployguard results to a Rich console.

    Parameters
    ----------
    console:
        Rich Console instance.  A new one is created if not provided.
    """

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def render_report(self, report: Report) -> Panel:
        table = Table(show_header=True, header_style="bold cyan", expand=True)
        table.add_column("Check", min_width=14)
        table.add_column("Result", width=8, justify="center")
        table.add_column("Duration", justify="right", width=10)
        table.add_column("Details")

        for result in report.checks:
            passed = result.success and result.passes_threshold
            verdict = "[green]PASS[/green]" if passed else "[bold red]FAIL[/bold red]"
            table.add_row(
                result.kind.value,
                verdict,
                f"{result.duration_ms:.0f}ms",
                _describe(result),
            )

        success = "[bold green]YES[/bold green]" if report.success else "[bold red]NO[/bold red]"
        summary = "  |  ".join([
            f"[bold]URL:[/bold] {report.url}",
            f"[bold]Success:[/bold] {success}",
            f"[bold]Duration:[/bold] {report.duration_ms:.0f}ms",
        ])

        parts: list = [table, Text(""), Text.from_markup(summary)]
        if report.errors:
            parts.append(Text(""))
            parts.append(Text.from_markup("[bold red]Errors:[/bold red]"))
            parts.extend(Text(f"- {error}", style="red") for error in report.errors)

        return Panel(
            Group(*parts),
            title="[bold]Deployment Monitoring Results[/bold]",
            border_style="green" if report.success else "red",
            padding=(1, 2),
        )

    def print_report(self, report: Report) -> None:
        self.console.print(self.render_report(report))

    def print_rollback_result(self, result: RollbackResult) -> None:
        if result.report is not None:
            self.print_report(result.report)
        self.console.print(_OUTCOME_MESSAGES[result.outcome])

    def print_history(self, records: list[RollbackRecord]) -> None:
        if not records:
            self.console.print("[dim]No rollbacks recorded.[/dim]")
            return

        table = Table(title="Rollback History", header_style="bold cyan")
        table.add_column("Timestamp")
        table.add_column("Project", style="cyan")
        table.add_column("Environment")
        table.add_column("Version", style="green")
        table.add_column("Success", justify="center")
        table.add_column("Initiator")
        table.add_column("Reason")

        for record in records:
            ok = "[green]Yes[/green]" if record.success else "[red]No[/red]"
            table.add_row(
                record.timestamp.strftime("%Y-%m-%d %H:%M:%S"),
                record.project,
                record.environment,
                record.version,
                ok,
                record.initiator,
                record.reason,
            )
        self.console.print(table)
