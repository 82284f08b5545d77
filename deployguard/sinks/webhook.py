"""Webhook sink: POSTs JSON notifications for reports and rollbacks.

Delivery is fire-and-forget from the caller's point of view: errors are
logged and reported as ``False`` but never raised.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from deployguard.core.http import HttpResponse, fetch
from deployguard.models.reports import Report
from deployguard.models.rollback import RollbackRecord

logger = logging.getLogger(__name__)

NOTIFY_TIMEOUT_MS = 10000.0


def build_deployment_payload(report: Report) -> dict[str, Any]:
    """Notification body for a verification report."""
    details = report.model_dump(mode="json")
    return {
        "deployment": {
            "url": report.url,
            "timestamp": details["timestamp"],
            "success": report.success,
            "summary": report.summary,
            "details": details,
        }
    }


def build_rollback_payload(record: RollbackRecord) -> dict[str, Any]:
    """Notification body for a rollback attempt: the record itself."""
    return record.model_dump(mode="json")


class WebhookNotifier:
    """Delivers notifications with an HTTP POST.

    Parameters
    ----------
    client:
        Shared ``httpx.AsyncClient``.  When omitted, a short-lived client
        is opened per notification.
    timeout_ms:
        Request timeout for each POST.
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        timeout_ms: float = NOTIFY_TIMEOUT_MS,
    ) -> None:
        self._client = client
        self._timeout_ms = timeout_ms

    @property
    def sink_name(self) -> str:
        return "webhook"

    async def notify(self, url: str, payload: dict[str, Any]) -> bool:
        logger.info("Sending notification to %s", url)
        try:
            if self._client is not None:
                response = await self._post(self._client, url, payload)
            else:
                async with httpx.AsyncClient() as client:
                    response = await self._post(client, url, payload)
        except Exception as exc:  # noqa: BLE001
            logger.error("Failed to send notification: %s", exc)
            return False

        if not response.ok:
            logger.error(
                "Failed to send notification: webhook returned status %d",
                response.status_code,
            )
            return False

        logger.info("Notification sent successfully")
        return True

    async def _post(
        self, client: httpx.AsyncClient, url: str, payload: dict[str, Any]
    ) -> HttpResponse:
        return await fetch(
            client, url, method="POST", timeout_ms=self._timeout_ms, json=payload
        )
