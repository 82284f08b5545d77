"""Subcommand implementations for the deployguard CLI."""
