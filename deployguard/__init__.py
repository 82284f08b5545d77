"""deployguard: deployment verification and rollback for a static site.

Two cooperating workflows:
  - Verifier: availability, internal-link and response-time checks with
    bounded exponential backoff, folded into an immutable Report
  - Rollback Controller: selects a prior version, rolls back, optionally
    verifies, notifies a webhook, and appends to an audit history
"""

__version__ = "1.0.0"
__description__ = "Deployment verification and rollback workflow"

from deployguard.core.rollback_controller import RollbackController
from deployguard.core.verifier import Verifier
from deployguard.cli.app import app as cli

__all__ = ["RollbackController", "Verifier", "cli", "__version__"]
