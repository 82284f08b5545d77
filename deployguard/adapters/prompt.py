"""Interactive confirmation prompt."""

from __future__ import annotations

import typer


class TerminalConfirmer:
    """Asks the operator on the terminal; the default answer is no."""

    def confirm(self, message: str) -> bool:
        return typer.confirm(message, default=False)
