"""Rollback Controller: orchestrates a rollback and its audit trail.

Workflow (linear, every transition checked against VALID_TRANSITIONS):

    START -> RESOLVE_CONFIG -> LIST_VERSIONS -> SELECT_TARGET -> CONFIRM
          -> EXECUTE_ROLLBACK -> [VERIFY] -> [NOTIFY] -> LOG -> END

Failure semantics:
- Config, version-listing and target-selection errors are fatal and
  raised to the caller before anything is mutated.
- A failed or crashing rollback action is recorded, not raised.
- Verification failure never undoes the rollback; it only flips the
  final status.
- Notification and history failures are logged and never alter the
  outcome already determined.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Protocol

from deployguard.core.history import RollbackHistory
from deployguard.core.retry import SleepFn
from deployguard.models.checks import CheckKind
from deployguard.models.reports import Report
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
from deployguard.sinks import Notifier
from deployguard.sinks.webhook import build_rollback_payload

logger = logging.getLogger(__name__)

SETTLE_DELAY_SECONDS = 30.0
VERIFY_CHECKS: tuple[CheckKind, ...] = (CheckKind.AVAILABILITY, CheckKind.LINKS)

VerifyFn = Callable[[str, list[CheckKind]], Awaitable[Report]]


class ProjectConfigSource(Protocol):
    def load(self) -> ProjectConfig: ...


class VersionRegistry(Protocol):
    async def list_versions(self, worker_name: str) -> list[VersionDescriptor]: ...


class RollbackExecutor(Protocol):
    async def rollback(self, worker_name: str, version_id: str) -> bool: ...


class Confirmer(Protocol):
    def confirm(self, message: str) -> bool: ...


class RollbackError(RuntimeError):
    """Raised for fatal rollback errors; nothing has been mutated.

    ``available`` lists the versions known at the time of failure.
    """

    def __init__(
        self, message: str, available: list[VersionDescriptor] | None = None
    ) -> None:
        super().__init__(message)
        self.available = list(available or [])


class InvalidStepError(RuntimeError):
    """Raised when the workflow attempts a transition not in VALID_TRANSITIONS."""


class _StepTrail:
    """Tracks the current step and the ordered list of visited steps."""

    def __init__(self) -> None:
        self.current = RollbackStep.START
        self.steps: list[RollbackStep] = [RollbackStep.START]

    def advance(self, target: RollbackStep) -> None:
        allowed = VALID_TRANSITIONS.get(self.current, set())
        if target not in allowed:
            raise InvalidStepError(
                f"Cannot move from {self.current.value} to {target.value}. "
                f"Allowed: {sorted(s.value for s in allowed)}"
            )
        logger.debug("Rollback step %s -> %s", self.current.value, target.value)
        self.current = target
        self.steps.append(target)


class RollbackController:
    """Runs the rollback workflow against injected collaborators.

    Parameters
    ----------
    config_source:
        Supplies project identity and the deployment URL.
    registry:
        Lists deployed versions, newest first.
    executor:
        Performs the rollback action.
    confirmer:
        Asked before mutating unless the request sets ``force``.
    history:
        Append-only audit log; written on every attempted rollback.
    notifier:
        Delivers the rollback record to the request's webhook, if any.
    verify:
        ``verify(url, checks) -> Report`` used after a successful rollback.
    sleep:
        Awaited with ``settle_delay_seconds`` before verification.
    """

    def __init__(
        self,
        *,
        config_source: ProjectConfigSource,
        registry: VersionRegistry,
        executor: RollbackExecutor,
        confirmer: Confirmer,
        history: RollbackHistory,
        notifier: Notifier | None = None,
        verify: VerifyFn | None = None,
        sleep: SleepFn = asyncio.sleep,
        settle_delay_seconds: float = SETTLE_DELAY_SECONDS,
    ) -> None:
        self._config_source = config_source
        self._registry = registry
        self._executor = executor
        self._confirmer = confirmer
        self._history = history
        self._notifier = notifier
        self._verify = verify
        self._sleep = sleep
        self._settle_delay_seconds = settle_delay_seconds

    async def run(self, request: RollbackRequest) -> RollbackResult:
        trail = _StepTrail()

        trail.advance(RollbackStep.RESOLVE_CONFIG)
        project = self._config_source.load()

        trail.advance(RollbackStep.LIST_VERSIONS)
        versions = await self._registry.list_versions(project.worker_name)
        if len(versions) < 2:
            raise RollbackError("Not enough versions available for rollback", versions)

        trail.advance(RollbackStep.SELECT_TARGET)
        target = self.select_target(versions, request.version)

        trail.advance(RollbackStep.CONFIRM)
        if not request.force:
            message = (
                f"Are you sure you want to roll back to version {target.id} "
                f"({target.date})?"
            )
            if not self._confirmer.confirm(message):
                logger.info("Rollback cancelled")
                trail.advance(RollbackStep.END)
                return RollbackResult(
                    outcome=RollbackOutcome.CANCELLED,
                    target_version=target.id,
                    steps=trail.steps,
                )

        trail.advance(RollbackStep.EXECUTE_ROLLBACK)
        rollback_ok = await self._execute(project, target.id)

        report: Report | None = None
        verification_ok = True
        if rollback_ok and request.verify:
            if project.deployment_url and self._verify is not None:
                trail.advance(RollbackStep.VERIFY)
                report = await self._verify_deployment(project.deployment_url)
                verification_ok = report is not None and report.success
            else:
                logger.warning("Verification requested but no deployment URL is known")

        record = RollbackRecord(
            project=project.name,
            environment=request.environment,
            version=target.id,
            reason=request.reason or DEFAULT_REASON,
            success=rollback_ok and verification_ok,
        )

        if request.notify_url:
            trail.advance(RollbackStep.NOTIFY)
            await self._notify(request.notify_url, record)

        trail.advance(RollbackStep.LOG)
        self._log(record)

        trail.advance(RollbackStep.END)
        if not rollback_ok:
            outcome = RollbackOutcome.ROLLBACK_FAILED
        elif not verification_ok:
            outcome = RollbackOutcome.VERIFICATION_FAILED
        else:
            outcome = RollbackOutcome.SUCCEEDED

        logger.info("Rollback of %s to %s: %s", project.worker_name, target.id, outcome.value)
        return RollbackResult(
            outcome=outcome,
            target_version=target.id,
            record=record,
            report=report,
            steps=trail.steps,
        )

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    @staticmethod
    def select_target(
        versions: list[VersionDescriptor], requested: str | None
    ) -> VersionDescriptor:
        """Explicit version if given, else the previous one (index 1)."""
        target_id = requested or versions[1].id
        for version in versions:
            if version.id == target_id:
                return version
        raise RollbackError(f"Version {target_id} not found", versions)

    async def _execute(self, project: ProjectConfig, version_id: str) -> bool:
        try:
            return bool(await self._executor.rollback(project.worker_name, version_id))
        except Exception as exc:  # noqa: BLE001
            logger.error("Rollback failed: %s", exc)
            return False

    async def _verify_deployment(self, url: str) -> Report | None:
        logger.info(
            "Waiting %.0f seconds for rollback to propagate...",
            self._settle_delay_seconds,
        )
        await self._sleep(self._settle_delay_seconds)
        try:
            report = await self._verify(url, list(VERIFY_CHECKS))
        except Exception as exc:  # noqa: BLE001
            logger.error("Error verifying rollback: %s", exc)
            return None

        if report.success:
            logger.info("Rollback verification successful")
        else:
            logger.error("Rollback verification failed: %s", "; ".join(report.errors))
        return report

    async def _notify(self, url: str, record: RollbackRecord) -> None:
        if self._notifier is None:
            logger.warning("Notification URL given but no notifier configured")
            return
        try:
            await self._notifier.notify(url, build_rollback_payload(record))
        except Exception as exc:  # noqa: BLE001
            logger.error("Failed to send notification: %s", exc)

    def _log(self, record: RollbackRecord) -> None:
        try:
            self._history.append(record)
        except Exception as exc:  # noqa: BLE001
            logger.error("Failed to log rollback to history: %s", exc)
