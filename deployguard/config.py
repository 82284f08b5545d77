"""Runtime configuration: env-driven via pydantic-settings.

Reads from a ``.env`` file and ``DEPLOYGUARD_*`` environment variables.
Command-line options override these values per invocation; the resolved
configuration is frozen and never mutated afterwards.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from deployguard.models.checks import CheckKind


class DeployGuardConfig(BaseSettings):
    """Verification and rollback settings with environment overrides.

    Examples
    --------
    Override via environment::

        export DEPLOYGUARD_DEPLOYMENT_URL=https://example.com
        export DEPLOYGUARD_CHECKS=health,links,performance
        export DEPLOYGUARD_RETRIES=5

    Or via .env file::

        DEPLOYGUARD_NOTIFY_URL=https://hooks.example.com/deploys
        DEPLOYGUARD_HISTORY_PATH=/var/log/deployguard/rollback-history.json
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="DEPLOYGUARD_",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    # Verifier
    deployment_url: str = "http://localhost:8788"
    checks: str = "availability,links"
    timeout_ms: int = Field(default=30000, gt=0)
    retries: int = Field(default=3, ge=0)
    retry_delay_ms: int = Field(default=5000, ge=0)
    health_path: str = "/api/health"
    output_file: Path | None = None
    notify_url: str | None = None
    exit_on_fail: bool = True

    # Rollback
    environment: str = "production"
    project_dir: Path = Path(".")
    history_path: Path = Path("logs/rollback-history.json")
    settle_delay_seconds: float = Field(default=30.0, ge=0)

    # Logging
    log_level: str = "INFO"
    verbose: bool = False

    @field_validator("checks")
    @classmethod
    def _validate_checks(cls, value: str) -> str:
        if not CheckKind.parse_list(value):
            raise ValueError("at least one check must be selected")
        return value

    @property
    def check_kinds(self) -> list[CheckKind]:
        return CheckKind.parse_list(self.checks)


def load_config(**overrides: Any) -> DeployGuardConfig:
    """Resolve settings from the environment, applying non-None *overrides*.

    Raises pydantic's ``ValidationError`` (a ``ValueError``) when the
    environment or an override holds an invalid value.
    """
    return DeployGuardConfig(
        **{key: value for key, value in overrides.items() if value is not None}
    )
