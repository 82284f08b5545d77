"""Main Typer application: imports and registers all CLI commands.

Entry point: ``deployguard`` (configured via pyproject.toml scripts).
"""

from __future__ import annotations

import typer

from deployguard.cli.commands.history_cmd import history_cmd
from deployguard.cli.commands.monitor_cmd import monitor_cmd
from deployguard.cli.commands.rollback_cmd import rollback_cmd

app = typer.Typer(
    name="deployguard",
    help="deployguard: deployment verification and rollback for Cloudflare Workers sites.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)

app.command(name="monitor", help="Verify a deployment (availability, links, performance).")(
    monitor_cmd
)
app.command(name="rollback", help="Roll back to a previous deployed version.")(rollback_cmd)
app.command(name="history", help="Show the rollback audit history.")(history_cmd)


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
