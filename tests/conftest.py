"""Shared test fixtures for deployguard."""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path
from types import SimpleNamespace
from typing import Any

import httpx
import pytest

from deployguard.core.history import RollbackHistory
from deployguard.core.rollback_controller import RollbackController
from deployguard.models.checks import CheckKind
from deployguard.models.reports import Report, ReportBuilder
from deployguard.models.rollback import ProjectConfig, VersionDescriptor

SITE = "https://site.example"

HOME_PAGE = """
<html><body>
  <a href="/about">About</a>
  <a href="/contact">Contact</a>
  <a href="#top">Top</a>
  <a href="mailto:hello@site.example">Mail</a>
  <a href="https://other.example/page">Elsewhere</a>
</body></html>
"""


# ---------------------------------------------------------------------------
# Time and randomness
# ---------------------------------------------------------------------------


class FakeClock:
    """Manually advanced clock returning seconds, like ``time.perf_counter``."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeSleep:
    """Records requested sleeps (seconds) without waiting."""

    def __init__(self, clock: FakeClock | None = None) -> None:
        self.calls: list[float] = []
        self._clock = clock

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)
        if self._clock is not None:
            self._clock.advance(seconds)


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def fake_sleep() -> FakeSleep:
    return FakeSleep()


@pytest.fixture
def restore_logging():
    """Undo any handler or level change made via ``configure_logging``."""
    logger = logging.getLogger("deployguard")
    handlers, level = list(logger.handlers), logger.level
    yield
    logger.handlers[:] = handlers
    logger.setLevel(level)


# ---------------------------------------------------------------------------
# HTTP
# ---------------------------------------------------------------------------

Handler = Callable[[httpx.Request], httpx.Response]


@pytest.fixture
def make_client() -> Callable[[Handler], httpx.AsyncClient]:
    """Factory fixture: an AsyncClient served by a MockTransport handler."""

    def _factory(handler: Handler) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(handler))

    return _factory


@pytest.fixture
def site_handler() -> Callable[..., Handler]:
    """Factory fixture: a handler serving a small site.

    ``pages`` maps paths to (status, body).  Unknown paths return 404.
    Every handled request is appended to ``handler.requests``.
    """

    def _factory(pages: dict[str, tuple[int, str]] | None = None) -> Handler:
        routes = {
            "/": (200, HOME_PAGE),
            "/about": (200, "about"),
            "/contact": (200, "contact"),
            "/api/health": (200, '{"status":"ok"}'),
        }
        routes.update(pages or {})
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            status, body = routes.get(request.url.path, (404, "not found"))
            return httpx.Response(status, text=body)

        handler.requests = requests  # type: ignore[attr-defined]
        return handler

    return _factory


# ---------------------------------------------------------------------------
# Rollback collaborators
# ---------------------------------------------------------------------------


class FakeConfigSource:
    def __init__(self, config: ProjectConfig | None = None, error: Exception | None = None):
        self.config = config or ProjectConfig(
            name="comingsoon-site",
            worker_name="comingsoon-worker",
            deployment_url=SITE,
        )
        self.error = error

    def load(self) -> ProjectConfig:
        if self.error is not None:
            raise self.error
        return self.config


class FakeRegistry:
    def __init__(self, versions: list[VersionDescriptor]) -> None:
        self.versions = versions
        self.calls: list[str] = []

    async def list_versions(self, worker_name: str) -> list[VersionDescriptor]:
        self.calls.append(worker_name)
        return list(self.versions)


class FakeExecutor:
    def __init__(self, result: bool = True, error: Exception | None = None) -> None:
        self.result = result
        self.error = error
        self.calls: list[tuple[str, str]] = []

    async def rollback(self, worker_name: str, version_id: str) -> bool:
        self.calls.append((worker_name, version_id))
        if self.error is not None:
            raise self.error
        return self.result


class FakeConfirmer:
    def __init__(self, answer: bool = True) -> None:
        self.answer = answer
        self.messages: list[str] = []

    def confirm(self, message: str) -> bool:
        self.messages.append(message)
        return self.answer


class FakeNotifier:
    def __init__(self, error: Exception | None = None) -> None:
        self.error = error
        self.sent: list[tuple[str, dict[str, Any]]] = []

    async def notify(self, url: str, payload: dict[str, Any]) -> bool:
        if self.error is not None:
            raise self.error
        self.sent.append((url, payload))
        return True


class FakeVerify:
    """Stands in for ``Verifier.verify`` with a canned verdict."""

    def __init__(self, success: bool = True, error: Exception | None = None) -> None:
        self.success = success
        self.error = error
        self.calls: list[tuple[str, list[CheckKind]]] = []

    async def __call__(self, url: str, checks: list[CheckKind]) -> Report:
        self.calls.append((url, checks))
        if self.error is not None:
            raise self.error
        report = ReportBuilder(url=url).build(duration_ms=1.0)
        return report.model_copy(
            update={
                "success": self.success,
                "errors": [] if self.success else ["Health check failed: boom"],
            }
        )


@pytest.fixture
def versions() -> list[VersionDescriptor]:
    return [
        VersionDescriptor(id="v-current", tag="release-3", date="2026-10-18"),
        VersionDescriptor(id="v-previous", tag="release-2", date="2026-10-10"),
        VersionDescriptor(id="v-older", tag=None, date="2026-10-01"),
    ]


@pytest.fixture
def history(tmp_path: Path) -> RollbackHistory:
    """Provide a RollbackHistory in a temp directory (file not yet created)."""
    return RollbackHistory(tmp_path / "logs" / "rollback-history.json")


@pytest.fixture
def make_controller(
    versions: list[VersionDescriptor],
    history: RollbackHistory,
    fake_sleep: FakeSleep,
) -> Callable[..., tuple[RollbackController, SimpleNamespace]]:
    """Factory fixture: a RollbackController wired to fakes.

    Returns ``(controller, parts)`` where ``parts`` exposes every fake so
    tests can inspect calls.
    """

    def _factory(
        *,
        available: list[VersionDescriptor] | None = None,
        rollback_result: bool = True,
        rollback_error: Exception | None = None,
        confirm: bool = True,
        verify_success: bool = True,
        verify_error: Exception | None = None,
        notify_error: Exception | None = None,
        config_error: Exception | None = None,
        project: ProjectConfig | None = None,
        store: Any = None,
    ) -> tuple[RollbackController, SimpleNamespace]:
        parts = SimpleNamespace(
            config_source=FakeConfigSource(project, error=config_error),
            registry=FakeRegistry(versions if available is None else available),
            executor=FakeExecutor(rollback_result, error=rollback_error),
            confirmer=FakeConfirmer(confirm),
            notifier=FakeNotifier(error=notify_error),
            verify=FakeVerify(verify_success, error=verify_error),
            history=store if store is not None else history,
            sleep=fake_sleep,
        )
        controller = RollbackController(
            config_source=parts.config_source,
            registry=parts.registry,
            executor=parts.executor,
            confirmer=parts.confirmer,
            history=parts.history,
            notifier=parts.notifier,
            verify=parts.verify,
            sleep=parts.sleep,
        )
        return controller, parts

    return _factory
