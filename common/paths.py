"""Path helpers for manifest locations inside a workspace.

Workspace paths are POSIX-style strings relative to the checkout root, so
every helper here goes through ``posixpath`` to keep cache keys identical
regardless of the host separator.
"""
from __future__ import annotations

import posixpath
from pathlib import Path
from typing import Tuple


def to_posix(path: str) -> str:
    return (path or "").replace("\\", "/")


def split_manifest_path(path: str) -> Tuple[str, str]:
    """Return ``(directory, base name)`` for a manifest path."""

    return posixpath.split(to_posix(path))


def join_manifest_path(directory: str, name: str) -> str:
    return canonical_path(posixpath.join(to_posix(directory), to_posix(name)))


def canonical_path(path: str) -> str:
    """Full normalized path used as the fixed-files cache key."""

    normalized = posixpath.normpath(to_posix(path))
    return "" if normalized == "." else normalized


def directory_key(path: str) -> str:
    directory, _ = split_manifest_path(canonical_path(path))
    return directory


def relative_to(path: str, start: str) -> str:
    return posixpath.relpath(canonical_path(path), canonical_path(start) or ".")


def ensure_dir(path: Path) -> Path:
    path.mkdir(parents=True, exist_ok=True)
    return path
