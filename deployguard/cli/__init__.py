"""deployguard CLI: Typer-based command-line interface.

Provides the ``deployguard`` command with subcommands for verifying a
deployment, rolling it back, and inspecting the rollback audit history.

All human-facing output uses Rich for formatted terminal display.
"""
