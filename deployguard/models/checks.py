"""Verification check models: one frozen result per check kind."""

from __future__ import annotations

from enum import Enum
from typing import Union

from pydantic import BaseModel, ConfigDict

PERFORMANCE_THRESHOLD_MS = 2000.0


class CheckKind(str, Enum):
    """The verification dimensions a run may select."""

    AVAILABILITY = "availability"
    LINKS = "links"
    PERFORMANCE = "performance"

    @classmethod
    def parse(cls, value: str) -> CheckKind:
        """Parse a check name, accepting ``health`` as availability."""
        name = value.strip().lower()
        if name == "health":
            return cls.AVAILABILITY
        return cls(name)

    @classmethod
    def parse_list(cls, value: str) -> list[CheckKind]:
        """Parse a comma-separated check list, dropping duplicates in order."""
        kinds: list[CheckKind] = []
        for part in value.split(","):
            if not part.strip():
                continue
            kind = cls.parse(part)
            if kind not in kinds:
                kinds.append(kind)
        return kinds


class AvailabilityDetail(BaseModel):
    model_config = ConfigDict(frozen=True)

    status_code: int
    attempts: int = 1
    health_status_code: int | None = None  # secondary probe, informational only


class LinkProbe(BaseModel):
    """Result of a single HEAD probe against an internal link."""

    model_config = ConfigDict(frozen=True)

    url: str
    success: bool
    status_code: int | None = None
    error: str | None = None


class LinksDetail(BaseModel):
    model_config = ConfigDict(frozen=True)

    found: int
    total_checked: int
    broken_count: int
    broken_links: list[LinkProbe] = []


class PerformanceDetail(BaseModel):
    model_config = ConfigDict(frozen=True)

    response_times_ms: list[float]
    avg_response_time_ms: float
    threshold_ms: float = PERFORMANCE_THRESHOLD_MS
    passes_threshold: bool


CheckDetail = Union[AvailabilityDetail, LinksDetail, PerformanceDetail]


class CheckResult(BaseModel):
    """Outcome of one verification check.

    ``detail`` is ``None`` when the check failed before producing a
    kind-specific payload (e.g. the target never answered).
    """

    model_config = ConfigDict(frozen=True)

    kind: CheckKind
    success: bool
    duration_ms: float
    detail: CheckDetail | None = None
    error: str | None = None

    @property
    def passes_threshold(self) -> bool:
        """Threshold verdict; only performance results can fail it."""
        if isinstance(self.detail, PerformanceDetail):
            return self.detail.passes_threshold
        return True
