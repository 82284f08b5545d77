"""Tests for check, report and rollback models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from deployguard.models.checks import (
    AvailabilityDetail,
    CheckKind,
    CheckResult,
    LinksDetail,
    PerformanceDetail,
)
from deployguard.models.reports import ReportBuilder, describe_failure
from deployguard.models.rollback import (
    VALID_TRANSITIONS,
    RollbackOutcome,
    RollbackRecord,
    RollbackStep,
    default_initiator,
)


def _availability(success: bool = True, error: str | None = None) -> CheckResult:
    return CheckResult(
        kind=CheckKind.AVAILABILITY,
        success=success,
        duration_ms=12.0,
        detail=AvailabilityDetail(status_code=200) if success else None,
        error=error,
    )


def _performance(avg: float) -> CheckResult:
    return CheckResult(
        kind=CheckKind.PERFORMANCE,
        success=True,
        duration_ms=avg * 3,
        detail=PerformanceDetail(
            response_times_ms=[avg, avg, avg],
            avg_response_time_ms=avg,
            passes_threshold=avg <= 2000,
        ),
    )


class TestCheckKind:
    def test_parse_names(self):
        assert CheckKind.parse("links") == CheckKind.LINKS
        assert CheckKind.parse(" Performance ") == CheckKind.PERFORMANCE

    def test_health_is_an_alias(self):
        assert CheckKind.parse("health") == CheckKind.AVAILABILITY

    def test_unknown_name_rejected(self):
        with pytest.raises(ValueError):
            CheckKind.parse("security")

    def test_parse_list_dedups_in_order(self):
        assert CheckKind.parse_list("links,health,availability,,links") == [
            CheckKind.LINKS,
            CheckKind.AVAILABILITY,
        ]


class TestCheckResult:
    def test_frozen(self):
        result = _availability()
        with pytest.raises(ValidationError):
            result.success = False  # type: ignore[misc]

    def test_passes_threshold_only_judged_for_performance(self):
        assert _availability().passes_threshold
        assert _performance(1500).passes_threshold
        assert not _performance(2500).passes_threshold


class TestReportBuilder:
    def test_with_result_returns_new_builder(self):
        empty = ReportBuilder(url="https://site.example")
        one = empty.with_result(_availability())

        assert empty.checks == ()
        assert len(one.checks) == 1

    def test_all_passing_is_success(self):
        report = (
            ReportBuilder(url="https://site.example")
            .with_result(_availability())
            .with_result(_performance(800))
            .build(duration_ms=50.0)
        )
        assert report.success
        assert report.errors == []
        assert report.summary == "Deployment succeeded: https://site.example"
        assert report.get(CheckKind.PERFORMANCE) is not None
        assert report.get(CheckKind.LINKS) is None

    def test_any_failure_fails_report(self):
        report = (
            ReportBuilder(url="https://site.example")
            .with_result(_availability(False, "Request timeout after 30000ms"))
            .with_result(_performance(800))
            .build(duration_ms=50.0)
        )
        assert not report.success
        assert report.errors == ["Health check failed: Request timeout after 30000ms"]
        assert report.summary == "Deployment failed: https://site.example"

    def test_slow_performance_fails_report(self):
        report = ReportBuilder(url="https://site.example").with_result(
            _performance(2500)
        ).build(duration_ms=1.0)
        assert not report.success
        assert report.errors == ["Performance below threshold: 2500ms (threshold: 2000ms)"]

    def test_empty_report_is_success(self):
        assert ReportBuilder(url="https://site.example").build(duration_ms=0.0).success


class TestDescribeFailure:
    def test_broken_links_wording(self):
        result = CheckResult(
            kind=CheckKind.LINKS,
            success=False,
            duration_ms=5.0,
            detail=LinksDetail(found=4, total_checked=4, broken_count=2),
        )
        assert describe_failure(result) == "Links check failed: 2 broken links found"

    def test_links_error_wording(self):
        result = CheckResult(
            kind=CheckKind.LINKS, success=False, duration_ms=5.0, error="Request timeout after 30000ms"
        )
        assert describe_failure(result) == "Links check failed: Request timeout after 30000ms"

    def test_performance_error_wording(self):
        result = CheckResult(
            kind=CheckKind.PERFORMANCE, success=False, duration_ms=5.0, error="connection refused"
        )
        assert describe_failure(result) == "Performance check failed: connection refused"

    def test_passing_result_has_no_line(self):
        assert describe_failure(_availability()) is None


class TestRollbackModels:
    def test_outcome_exit_codes(self):
        assert RollbackOutcome.SUCCEEDED.exit_code == 0
        assert RollbackOutcome.CANCELLED.exit_code == 0
        assert RollbackOutcome.VERIFICATION_FAILED.exit_code == 1
        assert RollbackOutcome.ROLLBACK_FAILED.exit_code == 1

    def test_record_defaults(self, monkeypatch):
        monkeypatch.delenv("GITHUB_ACTOR", raising=False)
        monkeypatch.delenv("USER", raising=False)
        record = RollbackRecord(project="site", environment="production", version="v1", success=True)
        assert record.type == "rollback"
        assert record.reason == "Manual rollback"
        assert record.initiator == "unknown"
        assert record.timestamp.tzinfo is not None

    def test_initiator_prefers_ci_actor(self, monkeypatch):
        monkeypatch.setenv("GITHUB_ACTOR", "release-bot")
        monkeypatch.setenv("USER", "ops")
        assert default_initiator() == "release-bot"

    def test_end_is_terminal(self):
        assert VALID_TRANSITIONS[RollbackStep.END] == set()

    def test_every_step_has_transitions_entry(self):
        assert set(VALID_TRANSITIONS) == set(RollbackStep)
