"""Verification and rollback workflows, independent of any entry point."""
