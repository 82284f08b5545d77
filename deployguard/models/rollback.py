"""Rollback workflow models: versions, audit records, and the step machine."""

from __future__ import annotations

import os
from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from deployguard.models.reports import Report

DEFAULT_REASON = "Manual rollback"


def default_initiator() -> str:
    """Who started the rollback: CI actor, then local user, then unknown."""
    return os.environ.get("GITHUB_ACTOR") or os.environ.get("USER") or "unknown"


class VersionDescriptor(BaseModel):
    """One entry of a worker's version history (lists are newest-first)."""

    model_config = ConfigDict(frozen=True)

    id: str
    tag: str | None = None
    date: str | None = None


class ProjectConfig(BaseModel):
    """Project identity and deployment target read from project metadata."""

    model_config = ConfigDict(frozen=True)

    name: str = "unknown"
    version: str = "0.0.0"
    worker_name: str
    account_id: str | None = None
    deployment_url: str | None = None


class RollbackRecord(BaseModel):
    """A single entry in the append-only rollback history."""

    model_config = ConfigDict(frozen=True)

    type: str = "rollback"
    project: str
    environment: str
    version: str
    reason: str = DEFAULT_REASON
    success: bool
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    initiator: str = Field(default_factory=default_initiator)


class RollbackRequest(BaseModel):
    """Caller-supplied options for one rollback invocation."""

    model_config = ConfigDict(frozen=True)

    version: str | None = None
    environment: str = "production"
    verify: bool = False
    notify_url: str | None = None
    reason: str | None = None
    force: bool = False


class RollbackStep(str, Enum):
    """Steps of the rollback workflow, in execution order."""

    START = "start"
    RESOLVE_CONFIG = "resolve_config"
    LIST_VERSIONS = "list_versions"
    SELECT_TARGET = "select_target"
    CONFIRM = "confirm"
    EXECUTE_ROLLBACK = "execute_rollback"
    VERIFY = "verify"
    NOTIFY = "notify"
    LOG = "log"
    END = "end"


# Linear workflow: VERIFY and NOTIFY may be skipped, CONFIRM may end early.
VALID_TRANSITIONS: dict[RollbackStep, set[RollbackStep]] = {
    RollbackStep.START: {RollbackStep.RESOLVE_CONFIG},
    RollbackStep.RESOLVE_CONFIG: {RollbackStep.LIST_VERSIONS},
    RollbackStep.LIST_VERSIONS: {RollbackStep.SELECT_TARGET},
    RollbackStep.SELECT_TARGET: {RollbackStep.CONFIRM},
    RollbackStep.CONFIRM: {RollbackStep.EXECUTE_ROLLBACK, RollbackStep.END},
    RollbackStep.EXECUTE_ROLLBACK: {
        RollbackStep.VERIFY,
        RollbackStep.NOTIFY,
        RollbackStep.LOG,
    },
    RollbackStep.VERIFY: {RollbackStep.NOTIFY, RollbackStep.LOG},
    RollbackStep.NOTIFY: {RollbackStep.LOG},
    RollbackStep.LOG: {RollbackStep.END},
    RollbackStep.END: set(),  # terminal
}


class RollbackOutcome(str, Enum):
    SUCCEEDED = "succeeded"
    VERIFICATION_FAILED = "verification_failed"
    ROLLBACK_FAILED = "rollback_failed"
    CANCELLED = "cancelled"

    @property
    def exit_code(self) -> int:
        if self in (RollbackOutcome.SUCCEEDED, RollbackOutcome.CANCELLED):
            return 0
        return 1


class RollbackResult(BaseModel):
    """What one rollback invocation did, returned to the entry point."""

    model_config = ConfigDict(frozen=True)

    outcome: RollbackOutcome
    target_version: str
    record: RollbackRecord | None = None
    report: Report | None = None
    steps: list[RollbackStep] = []

    @property
    def exit_code(self) -> int:
        return self.outcome.exit_code
