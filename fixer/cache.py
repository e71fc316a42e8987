"""Fixed-files cache shared by every entity of one fix run."""
from __future__ import annotations

from typing import Dict, Iterable, Iterator, List

from common.paths import canonical_path


class FixedFilesCache:
    """Ordered set of canonical manifest paths already rewritten in this run.

    Entries are full normalized paths (directory and file name), so two
    manifests with the same base name in different directories never collide.
    The cache only grows; there is no removal.
    """

    def __init__(self, paths: Iterable[str] = ()) -> None:
        self._paths: Dict[str, None] = {}
        self.extend(paths)

    def add(self, path: str) -> None:
        self._paths.setdefault(canonical_path(path), None)

    def extend(self, paths: Iterable[str]) -> None:
        for path in paths:
            self.add(path)

    def __contains__(self, path: object) -> bool:
        return isinstance(path, str) and canonical_path(path) in self._paths

    def __iter__(self) -> Iterator[str]:
        return iter(self._paths)

    def __len__(self) -> int:
        return len(self._paths)

    def to_list(self) -> List[str]:
        return list(self._paths)

    def __repr__(self) -> str:
        return f"FixedFilesCache({self.to_list()!r})"


__all__ = ["FixedFilesCache"]
