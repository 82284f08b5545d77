"""Output sinks for verification reports and rollback notifications.

Sinks are best-effort side effects: they log their own failures and
never change a verdict that has already been computed.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class Notifier(Protocol):
    """Anything that can deliver a JSON payload to a URL."""

    async def notify(self, url: str, payload: dict[str, Any]) -> bool:
        """Deliver *payload*; return False (never raise) on failure."""
        ...
