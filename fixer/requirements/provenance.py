"""Resolve the closure of manifests an entry file pulls in via -r / -c."""
from __future__ import annotations

from typing import Callable, Dict, Optional

from common.errors import CollaboratorError
from common.logging import get_logger
from common.paths import join_manifest_path, relative_to, split_manifest_path
from common.workspace import Workspace
from fixer.requirements.parser import ParsedRequirements, parse_requirements_file

LOGGER = get_logger(__name__)

Provenance = Dict[str, ParsedRequirements]
ReadFile = Callable[[str], str]


def read_and_parse(read_file: ReadFile, path: str) -> ParsedRequirements:
    """Read ``path`` and parse it, wrapping any failure in :class:`CollaboratorError`."""

    try:
        content = read_file(path)
    except Exception as exc:
        raise CollaboratorError("read", path, exc) from exc
    try:
        return parse_requirements_file(content)
    except Exception as exc:
        raise CollaboratorError("parse", path, exc) from exc


def extract_provenance(
    workspace: Workspace,
    root_dir: str,
    file_name: str,
    *,
    directory: Optional[str] = None,
    provenance: Optional[Provenance] = None,
    read_file: Optional[ReadFile] = None,
) -> Provenance:
    """Return ``{path relative to root_dir: parsed lines}`` for the entry and its includes.

    The entry file comes first, included files follow in depth-first
    include order. Include paths are resolved against the directory of the
    file that declares them; an include that points back at a file already
    collected is skipped.
    """

    reader = read_file or workspace.read_file
    result: Provenance = provenance if provenance is not None else {}
    current_dir = root_dir if directory is None else directory
    full_path = join_manifest_path(current_dir, file_name)
    parsed = read_and_parse(reader, full_path)
    result[relative_to(full_path, root_dir)] = parsed

    for include in parsed.includes:
        required_path = join_manifest_path(current_dir, include.include_path or "")
        key = relative_to(required_path, root_dir)
        if key in result:
            LOGGER.debug("Detected recursive include of %s, skipping", key)
            continue
        include_dir, include_base = split_manifest_path(required_path)
        extract_provenance(
            workspace,
            root_dir,
            include_base,
            directory=include_dir,
            provenance=result,
            read_file=reader,
        )
    return result


__all__ = ["Provenance", "extract_provenance", "read_and_parse"]
