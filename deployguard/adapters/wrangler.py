"""Cloudflare ``wrangler`` adapters: version registry and rollback executor.

Both shell out to ``npx wrangler``.  The blocking ``subprocess.run`` call
is moved to a worker thread so the workflow's event loop stays free.
"""

from __future__ import annotations

import asyncio
import logging
import subprocess
from collections.abc import Callable, Sequence

from deployguard.models.rollback import VersionDescriptor

logger = logging.getLogger(__name__)

WRANGLER = ("npx", "wrangler")

Runner = Callable[..., subprocess.CompletedProcess]


class VersionRegistryError(RuntimeError):
    """Raised when the version list cannot be fetched."""


def parse_versions_table(output: str) -> list[VersionDescriptor]:
    """Parse the box-drawing table printed by ``wrangler versions list``.

    Only ``│``-delimited rows are considered; the header row (containing
    ``Tag``) and horizontal rules are skipped.  Row order is preserved,
    which is newest-first.
    """
    versions: list[VersionDescriptor] = []
    for line in output.splitlines():
        if "│" not in line or "Tag" in line or "─" in line:
            continue
        parts = [part.strip() for part in line.split("│")]
        if len(parts) < 4 or not parts[1]:
            continue
        versions.append(
            VersionDescriptor(id=parts[1], tag=parts[2] or None, date=parts[3] or None)
        )
    return versions


class WranglerVersionRegistry:
    """Lists deployed versions of a worker via ``wrangler versions list``."""

    def __init__(self, runner: Runner = subprocess.run) -> None:
        self._runner = runner

    async def list_versions(self, worker_name: str) -> list[VersionDescriptor]:
        logger.info("Fetching available versions from Cloudflare...")
        command: Sequence[str] = [*WRANGLER, "versions", "list", f"--name={worker_name}"]
        try:
            result = await asyncio.to_thread(
                self._runner, command, capture_output=True, text=True, check=True
            )
        except (subprocess.SubprocessError, OSError) as exc:
            raise VersionRegistryError(f"Error fetching versions: {exc}") from exc
        return parse_versions_table(result.stdout or "")


class WranglerRollbackExecutor:
    """Rolls a worker back via ``wrangler rollback``; output streams to the terminal."""

    def __init__(self, runner: Runner = subprocess.run) -> None:
        self._runner = runner

    async def rollback(self, worker_name: str, version_id: str) -> bool:
        logger.info("Rolling back %s to version %s...", worker_name, version_id)
        command: Sequence[str] = [
            *WRANGLER,
            "rollback",
            f"--name={worker_name}",
            f"--version={version_id}",
        ]
        try:
            await asyncio.to_thread(self._runner, command, check=True)
        except (subprocess.SubprocessError, OSError) as exc:
            logger.error("Rollback failed: %s", exc)
            return False

        logger.info("Successfully rolled back to version %s", version_id)
        return True
