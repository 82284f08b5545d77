"""Deployment Verifier: answers "is this deployment healthy?".

Runs the selected checks against one target and folds their results
into a ``Report``.  Checks run one after another in a fixed order
(availability, links, performance); only the link probes inside the
links check are dispatched concurrently.

A check that raises is converted into a failed ``CheckResult`` carrying
the exception message, so one broken check never aborts the run.  The
only error that escapes ``verify`` is ``InvalidTargetError``.
"""

from __future__ import annotations

import asyncio
import logging
import random
import time
from collections.abc import Awaitable, Callable, Iterable, Mapping
from urllib.parse import urljoin, urlparse

import httpx

from deployguard.core.http import Clock, HttpResponse, RequestFailedError, fetch
from deployguard.core.links import MAX_PROBED_LINKS, extract_links, select_links
from deployguard.core.retry import RetryPolicy, SleepFn, with_retry
from deployguard.models.checks import (
    PERFORMANCE_THRESHOLD_MS,
    AvailabilityDetail,
    CheckDetail,
    CheckKind,
    CheckResult,
    LinkProbe,
    LinksDetail,
    PerformanceDetail,
)
from deployguard.models.reports import Report, ReportBuilder

logger = logging.getLogger(__name__)

PROBE_TIMEOUT_MS = 5000.0
PERFORMANCE_SAMPLES = 3
PERFORMANCE_SPACING_MS = 500.0
DEFAULT_HEALTH_PATH = "/api/health"

_CHECK_ORDER: tuple[CheckKind, ...] = (
    CheckKind.AVAILABILITY,
    CheckKind.LINKS,
    CheckKind.PERFORMANCE,
)

_CheckOutput = tuple[bool, CheckDetail]


class InvalidTargetError(ValueError):
    """Raised when the verification target is not an absolute http(s) URL."""


def validate_target(target: str) -> str:
    """Return *target* stripped, or raise ``InvalidTargetError``."""
    candidate = (target or "").strip()
    parsed = urlparse(candidate)
    if parsed.scheme not in ("http", "https") or not parsed.hostname:
        raise InvalidTargetError(
            f"Target must be an absolute http(s) URL, got {target!r}"
        )
    return candidate


class Verifier:
    """Runs availability, link and performance checks against a target.

    Parameters
    ----------
    client:
        The ``httpx.AsyncClient`` all requests go through.
    timeout_ms:
        Per-request timeout for requests to the target itself.
    retry_policy:
        Backoff used for requests to the target.
    retry_overrides:
        Optional per-check replacement for ``retry_policy``.
    health_path:
        Conventional health endpoint probed after availability passes.
    sleep, clock, rng:
        Injected for deterministic tests.  ``sleep`` takes seconds,
        ``clock`` returns seconds.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        *,
        timeout_ms: float = 30000.0,
        retry_policy: RetryPolicy | None = None,
        retry_overrides: Mapping[CheckKind, RetryPolicy] | None = None,
        health_path: str = DEFAULT_HEALTH_PATH,
        sleep: SleepFn = asyncio.sleep,
        clock: Clock = time.perf_counter,
        rng: random.Random | None = None,
    ) -> None:
        self._client = client
        self._timeout_ms = timeout_ms
        self._retry_policy = retry_policy or RetryPolicy()
        self._retry_overrides = dict(retry_overrides or {})
        self._health_path = health_path
        self._sleep = sleep
        self._clock = clock
        self._rng = rng or random.Random()

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------

    async def verify(self, target: str, checks: Iterable[CheckKind]) -> Report:
        """Run *checks* against *target* and return the aggregate Report."""
        target = validate_target(target)
        selected = set(checks)
        started = self._clock()

        logger.info("Starting deployment monitoring for %s", target)
        logger.info(
            "Checks to run: %s",
            ", ".join(k.value for k in _CHECK_ORDER if k in selected),
        )

        builder = ReportBuilder(url=target)
        for kind in _CHECK_ORDER:
            if kind in selected:
                builder = builder.with_result(await self.run_check(kind, target))

        report = builder.build(duration_ms=self._elapsed_ms(started))
        logger.info(
            "Verification of %s finished: %s",
            target,
            "success" if report.success else "failure",
        )
        return report

    async def run_check(self, kind: CheckKind, target: str) -> CheckResult:
        runners: dict[CheckKind, Callable[[str], Awaitable[_CheckOutput]]] = {
            CheckKind.AVAILABILITY: self._availability,
            CheckKind.LINKS: self._links,
            CheckKind.PERFORMANCE: self._performance,
        }
        started = self._clock()
        try:
            success, detail = await runners[kind](target)
        except Exception as exc:  # noqa: BLE001
            message = str(exc) or exc.__class__.__name__
            logger.error("%s check failed: %s", kind.value, message)
            return CheckResult(
                kind=kind,
                success=False,
                duration_ms=self._elapsed_ms(started),
                error=message,
            )
        return CheckResult(
            kind=kind,
            success=success,
            duration_ms=self._elapsed_ms(started),
            detail=detail,
        )

    async def check_availability(self, target: str) -> CheckResult:
        return await self.run_check(CheckKind.AVAILABILITY, validate_target(target))

    async def check_links(self, target: str) -> CheckResult:
        return await self.run_check(CheckKind.LINKS, validate_target(target))

    async def check_performance(self, target: str) -> CheckResult:
        return await self.run_check(CheckKind.PERFORMANCE, validate_target(target))

    # ------------------------------------------------------------------
    # Checks
    # ------------------------------------------------------------------

    async def _availability(self, target: str) -> _CheckOutput:
        logger.info("Running health check...")
        attempts = 0

        async def _attempt() -> HttpResponse:
            nonlocal attempts
            attempts += 1
            return await self._fetch_ok(target)

        response = await with_retry(
            _attempt, self._policy_for(CheckKind.AVAILABILITY), self._sleep
        )
        health_status = await self._probe_health(target)
        return True, AvailabilityDetail(
            status_code=response.status_code,
            attempts=attempts,
            health_status_code=health_status,
        )

    async def _probe_health(self, target: str) -> int | None:
        """Best-effort probe of the health endpoint; never fails the check."""
        health_url = urljoin(target, self._health_path)
        try:
            response = await fetch(
                self._client, health_url, timeout_ms=PROBE_TIMEOUT_MS, clock=self._clock
            )
        except RequestFailedError as exc:
            logger.warning("Health endpoint check failed: %s", exc)
            return None

        if response.status_code != 200:
            logger.warning("Health endpoint returned status %d", response.status_code)
        else:
            logger.info("Health endpoint check passed")
        return response.status_code

    async def _links(self, target: str) -> _CheckOutput:
        logger.info("Checking for broken links...")
        response = await with_retry(
            lambda: self._fetch_ok(target),
            self._policy_for(CheckKind.LINKS),
            self._sleep,
        )

        links = extract_links(response.text, target)
        logger.info("Found %d internal links to check", len(links))
        selected = select_links(links, MAX_PROBED_LINKS, self._rng)

        probes = await asyncio.gather(*(self._probe_link(link) for link in selected))
        broken = [probe for probe in probes if not probe.success]
        for probe in broken:
            logger.warning(
                "Broken link %s: %s",
                probe.url,
                probe.error or f"status {probe.status_code}",
            )

        return not broken, LinksDetail(
            found=len(links),
            total_checked=len(probes),
            broken_count=len(broken),
            broken_links=broken,
        )

    async def _probe_link(self, url: str) -> LinkProbe:
        try:
            response = await fetch(
                self._client,
                url,
                method="HEAD",
                timeout_ms=PROBE_TIMEOUT_MS,
                clock=self._clock,
            )
        except RequestFailedError as exc:
            return LinkProbe(url=url, success=False, error=str(exc))
        return LinkProbe(
            url=url, success=response.ok, status_code=response.status_code
        )

    async def _performance(self, target: str) -> _CheckOutput:
        logger.info("Checking performance...")
        response_times: list[float] = []
        for sample in range(PERFORMANCE_SAMPLES):
            response = await fetch(
                self._client, target, timeout_ms=self._timeout_ms, clock=self._clock
            )
            response_times.append(response.elapsed_ms)
            if sample < PERFORMANCE_SAMPLES - 1:
                await self._sleep(PERFORMANCE_SPACING_MS / 1000.0)

        average = sum(response_times) / len(response_times)
        return True, PerformanceDetail(
            response_times_ms=response_times,
            avg_response_time_ms=average,
            threshold_ms=PERFORMANCE_THRESHOLD_MS,
            passes_threshold=average < PERFORMANCE_THRESHOLD_MS,
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _fetch_ok(self, target: str) -> HttpResponse:
        response = await fetch(
            self._client, target, timeout_ms=self._timeout_ms, clock=self._clock
        )
        if not response.ok:
            raise RequestFailedError(
                f"Main URL returned status code {response.status_code}"
            )
        return response

    def _policy_for(self, kind: CheckKind) -> RetryPolicy:
        return self._retry_overrides.get(kind, self._retry_policy)

    def _elapsed_ms(self, started: float) -> float:
        return (self._clock() - started) * 1000.0
