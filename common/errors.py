"""Error kinds raised while remediating requirements manifests."""
from __future__ import annotations

from typing import Optional, Sequence


class FixError(RuntimeError):
    """Base class for per-entity remediation failures."""

    default_message = "Failed to apply fixes"

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message or self.default_message)
        self.user_message = message or self.default_message


class MissingRemediationDataError(FixError):
    default_message = "Remediation data is required to apply fixes"


class MissingFileNameError(FixError):
    default_message = "Target file name is required to apply fixes"


class NoWorkspaceBoundError(FixError):
    default_message = "A workspace is required to read and write manifests"


class NoFixesCouldBeAppliedError(FixError):
    default_message = "No fixes could be applied"


class CollaboratorError(FixError):
    """Wraps a failure surfaced while reading, parsing or writing a manifest."""

    def __init__(
        self,
        action: str,
        path: str,
        cause: BaseException,
        written: Sequence[str] = (),
    ) -> None:
        super().__init__(f"Failed to {action} {path}: {cause}")
        self.action = action
        self.path = path
        self.cause = cause
        # files already rewritten before the failure
        self.written = list(written)


__all__ = [
    "CollaboratorError",
    "FixError",
    "MissingFileNameError",
    "MissingRemediationDataError",
    "NoFixesCouldBeAppliedError",
    "NoWorkspaceBoundError",
]
