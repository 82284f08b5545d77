"""Single-request HTTP helper over ``httpx.AsyncClient``.

Every request carries its own timeout; a timeout or transport failure
is raised as ``RequestFailedError`` so callers deal with one error type.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import Any

import httpx
from pydantic import BaseModel, ConfigDict

logger = logging.getLogger(__name__)

USER_AGENT = "Deployment-Monitor/1.0"

Clock = Callable[[], float]


class RequestFailedError(RuntimeError):
    """Raised when a request times out or fails below the HTTP layer."""


class HttpResponse(BaseModel):
    """The parts of a response the checks care about."""

    model_config = ConfigDict(frozen=True)

    url: str
    status_code: int
    text: str = ""
    elapsed_ms: float = 0.0

    @property
    def ok(self) -> bool:
        """True for 2xx and 3xx statuses."""
        return 200 <= self.status_code < 400


async def fetch(
    client: httpx.AsyncClient,
    url: str,
    *,
    method: str = "GET",
    timeout_ms: float = 30000.0,
    clock: Clock = time.perf_counter,
    json: Any = None,
) -> HttpResponse:
    """Issue one request and measure its wall-clock round trip."""
    start = clock()
    try:
        response = await client.request(
            method,
            url,
            headers={"User-Agent": USER_AGENT},
            timeout=timeout_ms / 1000.0,
            json=json,
        )
    except httpx.TimeoutException as exc:
        raise RequestFailedError(f"Request timeout after {timeout_ms:.0f}ms") from exc
    except (httpx.HTTPError, httpx.InvalidURL) as exc:
        raise RequestFailedError(str(exc) or exc.__class__.__name__) from exc

    elapsed_ms = (clock() - start) * 1000.0
    logger.debug("%s %s -> %d (%.0fms)", method, url, response.status_code, elapsed_ms)
    return HttpResponse(
        url=url,
        status_code=response.status_code,
        text=response.text if method != "HEAD" else "",
        elapsed_ms=elapsed_ms,
    )
