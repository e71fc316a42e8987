"""Workspace abstraction: file access scoped to one project checkout."""
from __future__ import annotations

from pathlib import Path
from typing import Protocol, runtime_checkable

from common.logging import get_logger
from common.paths import canonical_path

LOGGER = get_logger(__name__)


@runtime_checkable
class Workspace(Protocol):
    def read_file(self, path: str) -> str:
        ...

    def write_file(self, path: str, content: str) -> None:
        ...


class WorkspaceError(OSError):
    """Raised when a path escapes the workspace root."""


class LocalWorkspace:
    """Reads and writes UTF-8 manifests under a checkout root."""

    def __init__(self, root: Path) -> None:
        self.root = Path(root).resolve()

    def _resolve(self, path: str) -> Path:
        relative = canonical_path(path)
        target = (self.root / relative).resolve()
        if target != self.root and self.root not in target.parents:
            raise WorkspaceError(f"{path} is outside of workspace {self.root}")
        return target

    def read_file(self, path: str) -> str:
        return self._resolve(path).read_text(encoding="utf-8")

    def write_file(self, path: str, content: str) -> None:
        target = self._resolve(path)
        # newline="" keeps the manifest's own line endings intact
        with target.open("w", encoding="utf-8", newline="") as handle:
            handle.write(content)
        LOGGER.debug("Wrote %s", target)

    def __repr__(self) -> str:
        return f"LocalWorkspace({str(self.root)!r})"


__all__ = ["LocalWorkspace", "Workspace", "WorkspaceError"]
