from __future__ import annotations

import sys
from pathlib import Path
from typing import Dict, List, Optional

import pytest

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from common.schema import EntityToFix, RemediationChanges
from common.workspace import LocalWorkspace


class RecordingWorkspace(LocalWorkspace):
    """Local workspace that remembers every write."""

    def __init__(self, root: Path) -> None:
        super().__init__(root)
        self.writes: List[str] = []

    def write_file(self, path: str, content: str) -> None:
        self.writes.append(path)
        super().write_file(path, content)

    def text(self, path: str) -> str:
        return (self.root / path).read_text(encoding="utf-8")


@pytest.fixture(autouse=True)
def _no_env_dry_run(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("REQFIX_DRY_RUN", raising=False)


@pytest.fixture
def project(tmp_path: Path):
    def _make(files: Dict[str, str]) -> RecordingWorkspace:
        for relative, content in files.items():
            path = tmp_path / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        return RecordingWorkspace(tmp_path)

    return _make


def generate_entity_to_fix(
    workspace: Optional[LocalWorkspace],
    target_file: Optional[str],
    pin: Optional[Dict[str, object]] = None,
    upgrade: Optional[Dict[str, object]] = None,
    package_manager: str = "pip",
) -> EntityToFix:
    remediation = RemediationChanges.from_raw({"pin": pin or {}, "upgrade": upgrade or {}})
    return EntityToFix(
        target_file=target_file,
        remediation=remediation,
        workspace=workspace,
        package_manager=package_manager,
    )


@pytest.fixture
def make_entity():
    return generate_entity_to_fix
