"""Append-only rollback history backed by a single JSON file.

Design:
- Append-only: only ``append()`` writes; there is no update or delete.
- Full-file read-modify-write: the file holds one JSON list, oldest first.
- Prior entries are carried over as the raw JSON objects read from disk,
  never round-tripped through the model, so their content is preserved.
- A file that exists but cannot be parsed is never overwritten.
- Single writer: concurrent invocations against one file are not guarded.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from deployguard.models.rollback import RollbackRecord

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_PATH = Path("logs/rollback-history.json")


class HistoryError(RuntimeError):
    """Raised when the history file cannot be read or written safely."""


class RollbackHistory:
    """Durable audit trail of rollback attempts.

    Parameters
    ----------
    path:
        Location of the JSON history file.  Created on first append.
    """

    def __init__(self, path: Path | str = DEFAULT_HISTORY_PATH) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def _read_raw(self) -> list[dict[str, Any]]:
        if not self._path.exists():
            return []
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise HistoryError(f"Error reading rollback history {self._path}: {exc}") from exc
        if not isinstance(data, list):
            raise HistoryError(
                f"Rollback history {self._path} does not contain a JSON list"
            )
        return data

    def read(self) -> list[RollbackRecord]:
        """Return every recorded attempt, oldest first."""
        try:
            return [RollbackRecord.model_validate(item) for item in self._read_raw()]
        except ValidationError as exc:
            raise HistoryError(
                f"Rollback history {self._path} holds a malformed entry: {exc}"
            ) from exc

    def __len__(self) -> int:
        return len(self._read_raw())

    def append(self, record: RollbackRecord) -> None:
        """Append *record* to the history file, creating it if needed."""
        entries = self._read_raw()
        entries.append(record.model_dump(mode="json"))

        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(
                json.dumps(entries, indent=2, ensure_ascii=False), encoding="utf-8"
            )
        except OSError as exc:
            raise HistoryError(f"Error writing rollback history {self._path}: {exc}") from exc

        logger.info("Rollback logged to history (%d entries)", len(entries))
