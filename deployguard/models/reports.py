"""Verification report: the aggregate outcome of one Verifier run.

A ``Report`` is never assembled by mutating shared state.  Checks are
folded into a ``ReportBuilder`` whose ``with_result`` returns a new
builder, and ``build`` seals the final frozen ``Report``.
"""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field

from deployguard.models.checks import CheckKind, CheckResult, PerformanceDetail


class Report(BaseModel):
    """Aggregate verification outcome for one run."""

    model_config = ConfigDict(frozen=True)

    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    url: str
    success: bool
    checks: list[CheckResult] = []
    errors: list[str] = []
    duration_ms: float = 0.0

    def get(self, kind: CheckKind) -> CheckResult | None:
        """Return the result for *kind*, or None if it was not requested."""
        for result in self.checks:
            if result.kind == kind:
                return result
        return None

    @property
    def summary(self) -> str:
        verdict = "succeeded" if self.success else "failed"
        return f"Deployment {verdict}: {self.url}"


def describe_failure(result: CheckResult) -> str | None:
    """Return the error-list line for a failed result, or None if it passed."""
    if result.kind == CheckKind.AVAILABILITY:
        if not result.success:
            return f"Health check failed: {result.error}"
        return None

    if result.kind == CheckKind.LINKS:
        if not result.success:
            broken = getattr(result.detail, "broken_count", 0)
            return f"Links check failed: {result.error or f'{broken} broken links found'}"
        return None

    if not result.success:
        return f"Performance check failed: {result.error}"
    if isinstance(result.detail, PerformanceDetail) and not result.detail.passes_threshold:
        return (
            f"Performance below threshold: {result.detail.avg_response_time_ms:.0f}ms "
            f"(threshold: {result.detail.threshold_ms:.0f}ms)"
        )
    return None


class ReportBuilder(BaseModel):
    """Immutable accumulator of check results for a single target."""

    model_config = ConfigDict(frozen=True)

    url: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    checks: tuple[CheckResult, ...] = ()

    def with_result(self, result: CheckResult) -> ReportBuilder:
        return self.model_copy(update={"checks": self.checks + (result,)})

    def build(self, duration_ms: float) -> Report:
        errors = [
            line for line in (describe_failure(r) for r in self.checks) if line
        ]
        success = all(r.success and r.passes_threshold for r in self.checks)
        return Report(
            timestamp=self.timestamp,
            url=self.url,
            success=success,
            checks=list(self.checks),
            errors=errors,
            duration_ms=duration_ms,
        )
