"""deployguard data models: all Pydantic v2, all frozen (immutable)."""

from deployguard.models.checks import (
    PERFORMANCE_THRESHOLD_MS,
    AvailabilityDetail,
    CheckKind,
    CheckResult,
    LinkProbe,
    LinksDetail,
    PerformanceDetail,
)
from deployguard.models.reports import Report, ReportBuilder
from deployguard.models.rollback import (
    DEFAULT_REASON,
    VALID_TRANSITIONS,
    ProjectConfig,
    RollbackOutcome,
    RollbackRecord,
    RollbackRequest,
    RollbackResult,
    RollbackStep,
    VersionDescriptor,
)

__all__ = [
    # checks
    "PERFORMANCE_THRESHOLD_MS",
    "CheckKind",
    "CheckResult",
    "AvailabilityDetail",
    "LinkProbe",
    "LinksDetail",
    "PerformanceDetail",
    # reports
    "Report",
    "ReportBuilder",
    # rollback
    "DEFAULT_REASON",
    "VALID_TRANSITIONS",
    "ProjectConfig",
    "RollbackOutcome",
    "RollbackRecord",
    "RollbackRequest",
    "RollbackResult",
    "RollbackStep",
    "VersionDescriptor",
]
