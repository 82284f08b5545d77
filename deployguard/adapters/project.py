"""Project metadata source: reads ``package.json`` and ``wrangler.jsonc``."""

from __future__ import annotations

import json
import logging
import os
import re
from pathlib import Path
from typing import Any

from deployguard.models.rollback import ProjectConfig

logger = logging.getLogger(__name__)

# Strings are matched first so that "//" inside a URL value survives.
_JSONC_TOKENS = re.compile(
    r'("(?:\\.|[^"\\])*")|(//[^\n]*)|(/\*.*?\*/)',
    re.DOTALL,
)
_TRAILING_COMMA = re.compile(r",(\s*[}\]])")


class ProjectConfigError(RuntimeError):
    """Raised when project metadata is missing or unreadable."""


def parse_jsonc(text: str) -> Any:
    """Parse JSON with ``//`` and ``/* */`` comments and trailing commas."""
    stripped = _JSONC_TOKENS.sub(lambda m: m.group(1) or "", text)
    return json.loads(_TRAILING_COMMA.sub(r"\1", stripped))


def _route_url(route: Any) -> str | None:
    """Normalise a wrangler ``route`` value (string or object) to a URL."""
    if isinstance(route, dict):
        route = route.get("pattern")
    if not route:
        return None
    route = str(route).rstrip("*").rstrip("/")
    if not route.startswith(("http://", "https://")):
        route = f"https://{route}"
    return route


class FileProjectConfigSource:
    """Loads project identity from the files in a project directory.

    Parameters
    ----------
    project_dir:
        Directory holding ``package.json`` and ``wrangler.jsonc``.
    """

    def __init__(self, project_dir: Path | str = Path(".")) -> None:
        self._dir = Path(project_dir)

    def load(self) -> ProjectConfig:
        try:
            package = json.loads((self._dir / "package.json").read_text(encoding="utf-8"))
            wrangler = parse_jsonc(
                (self._dir / "wrangler.jsonc").read_text(encoding="utf-8")
            )
        except (OSError, ValueError) as exc:
            raise ProjectConfigError(f"Error reading project configuration: {exc}") from exc

        name = package.get("name") or "unknown"
        worker_name = wrangler.get("name") or package.get("name")
        if not worker_name:
            raise ProjectConfigError("Error reading project configuration: no worker name")

        config = ProjectConfig(
            name=name,
            version=package.get("version") or "0.0.0",
            worker_name=worker_name,
            account_id=wrangler.get("account_id") or os.environ.get("CLOUDFLARE_ACCOUNT_ID"),
            deployment_url=_route_url(wrangler.get("route"))
            or os.environ.get("DEPLOYMENT_URL"),
        )
        logger.debug("Loaded project config for worker %s", config.worker_name)
        return config
