"""Report file sink: writes a verification Report as indented JSON."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from deployguard.models.reports import Report

logger = logging.getLogger(__name__)


class ReportFileSink:
    """Persists reports to a single output file, replacing earlier content.

    Parameters
    ----------
    path:
        Output file.  Parent directories are created on demand.
    """

    def __init__(self, path: Path | str) -> None:
        self._path = Path(path)

    @property
    def sink_name(self) -> str:
        return "report_file"

    @property
    def path(self) -> Path:
        return self._path

    def write(self, report: Report) -> bool:
        """Write *report*; log and return False on failure."""
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(
                json.dumps(report.model_dump(mode="json"), indent=2),
                encoding="utf-8",
            )
        except OSError as exc:
            logger.error("Failed to save results: %s", exc)
            return False

        logger.info("Results saved to %s", self._path)
        return True

    def read(self) -> Report:
        """Load the last written report."""
        return Report.model_validate_json(self._path.read_text(encoding="utf-8"))
