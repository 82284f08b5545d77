"""Default implementations of the rollback workflow's external collaborators.

Project metadata comes from the project's own files, versions and the
rollback action go through ``wrangler``, and confirmation is an
interactive terminal prompt.
"""

from deployguard.adapters.project import (
    FileProjectConfigSource,
    ProjectConfigError,
    parse_jsonc,
)
from deployguard.adapters.prompt import TerminalConfirmer
from deployguard.adapters.wrangler import (
    VersionRegistryError,
    WranglerRollbackExecutor,
    WranglerVersionRegistry,
    parse_versions_table,
)

__all__ = [
    "FileProjectConfigSource",
    "ProjectConfigError",
    "parse_jsonc",
    "TerminalConfirmer",
    "VersionRegistryError",
    "WranglerRollbackExecutor",
    "WranglerVersionRegistry",
    "parse_versions_table",
]
