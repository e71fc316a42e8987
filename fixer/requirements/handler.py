"""Fix pip requirements.txt manifests for a batch of entities.

Entities are grouped by manifest directory and processed one directory at a
time, one entity at a time. For each entity every manifest reachable from
its entry file first gets in-place upgrades, then whatever remediation is
still outstanding is pinned in the entry file. A :class:`FixedFilesCache`
shared across the whole batch makes sure a physical file is rewritten at
most once, and any error is confined to the entity that raised it.
"""
from __future__ import annotations

from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from common.config import FixOptions
from common.errors import (
    CollaboratorError,
    MissingFileNameError,
    MissingRemediationDataError,
    NoFixesCouldBeAppliedError,
    NoWorkspaceBoundError,
)
from common.logging import get_logger
from common.paths import canonical_path, directory_key, join_manifest_path, split_manifest_path
from common.schema import EntityToFix, RemediationChanges, RemediationTarget, normalize_key
from common.workspace import Workspace
from fixer.cache import FixedFilesCache
from fixer.requirements.parser import ParsedRequirements
from fixer.requirements.provenance import extract_provenance, read_and_parse
from fixer.requirements.supported import partition_by_fixable
from fixer.requirements.update import update_dependencies
from fixer.results import (
    EntityOutcome,
    FailedEntity,
    FixChangesSummary,
    FixedEntity,
    PluginFixResponse,
)

LOGGER = get_logger(__name__)

PREVIOUSLY_FIXED = "Previously fixed"


class StagedWrites:
    """Per-entity view of manifest contents with writes held until flush.

    Reads see staged content first so the pin pass works on the upgraded
    entry file, and each path is written once no matter how many passes
    touched it.
    """

    def __init__(self, workspace: Workspace) -> None:
        self.workspace = workspace
        self._contents: Dict[str, str] = {}

    def read_file(self, path: str) -> str:
        key = canonical_path(path)
        if key in self._contents:
            return self._contents[key]
        return self.workspace.read_file(key)

    def stage(self, path: str, content: str) -> None:
        self._contents[canonical_path(path)] = content

    @property
    def paths(self) -> List[str]:
        return list(self._contents)

    def flush(self, dry_run: bool) -> None:
        written: List[str] = []
        for path, content in self._contents.items():
            if dry_run:
                LOGGER.debug("Skipping writing changes to %s in dry-run mode", path)
                continue
            LOGGER.debug("Writing changes to %s", path)
            try:
                self.workspace.write_file(path, content)
            except Exception as exc:
                raise CollaboratorError("write", path, exc, written=written) from exc
            written.append(path)


def pip_requirements_txt(
    entities: Sequence[EntityToFix],
    options: FixOptions,
    fixed_files: Optional[FixedFilesCache] = None,
) -> PluginFixResponse:
    """Fix every entity and return the succeeded/failed/skipped partition.

    Never raises: unsupported entities are skipped and every per-entity error
    is reported under ``failed``.
    """

    LOGGER.debug("Preparing to fix %s Python requirements.txt projects", len(entities))
    response = PluginFixResponse()
    fixable, not_fixable = partition_by_fixable(entities)
    response.skipped.extend(not_fixable)

    cache = fixed_files if fixed_files is not None else FixedFilesCache()
    for directory, group in sort_by_directory(fixable).items():
        LOGGER.info("Fixing %s entities in directory %s", len(group), directory or ".")
        response.extend(fix_all(group, options, cache))
    return response


def sort_by_directory(entities: Iterable[EntityToFix]) -> Dict[str, List[EntityToFix]]:
    """Group entities by manifest directory, directories in ascending order."""

    groups: Dict[str, List[EntityToFix]] = {}
    for entity in entities:
        groups.setdefault(directory_key(entity.target_file or ""), []).append(entity)
    return {directory: groups[directory] for directory in sorted(groups)}


def get_required_data(entity: EntityToFix) -> Tuple[RemediationChanges, str, Workspace]:
    remediation = entity.remediation
    if remediation is None:
        raise MissingRemediationDataError()
    target_file = entity.target_file
    if not target_file:
        raise MissingFileNameError()
    workspace = entity.workspace
    if workspace is None:
        raise NoWorkspaceBoundError()
    return remediation, target_file, workspace


def fix_all(
    entities: Sequence[EntityToFix],
    options: FixOptions,
    fixed_files: FixedFilesCache,
) -> PluginFixResponse:
    """Fix entities of one directory in order, appending to the shared cache."""

    response = PluginFixResponse()
    for entity in entities:
        response.record(fix_entity(entity, options, fixed_files))
    return response


def fix_entity(entity: EntityToFix, options: FixOptions, fixed_files: FixedFilesCache) -> EntityOutcome:
    target_file = entity.target_file or ""
    try:
        entry_path = canonical_path(target_file)
        if entry_path in fixed_files:
            return FixedEntity(
                original=entity,
                changes=[FixChangesSummary(success=True, user_message=PREVIOUSLY_FIXED, file=entry_path)],
            )
        changes, touched = apply_all_fixes(entity, options, fixed_files)
        if not changes:
            LOGGER.debug("Manifest %s has not changed", target_file)
            raise NoFixesCouldBeAppliedError()
        fixed_files.extend(touched)
        return FixedEntity(original=entity, changes=changes)
    except CollaboratorError as exc:
        if exc.written:
            # written files count as fixed even though the entity failed
            fixed_files.extend(exc.written)
            LOGGER.warning("Failed to fix %s after writing %s: %s", target_file, ", ".join(exc.written), exc)
        else:
            LOGGER.warning("Failed to fix %s: %s", target_file, exc)
        return FailedEntity(original=entity, error=exc, touched_files=list(exc.written))
    except Exception as exc:
        LOGGER.warning("Failed to fix %s: %s", target_file, exc)
        return FailedEntity(original=entity, error=exc)


def fix_individual_requirements_txt(
    staged: StagedWrites,
    directory: str,
    entry_file_name: str,
    file_name: str,
    updates: Mapping[str, RemediationTarget],
    parsed: ParsedRequirements,
    options: FixOptions,
    direct_only: bool,
) -> Tuple[List[FixChangesSummary], List[str]]:
    """Apply ``updates`` to one manifest and stage the result when it changed."""

    full_path = join_manifest_path(directory, file_name)
    is_entry = join_manifest_path(directory, entry_file_name) == full_path
    result = update_dependencies(
        parsed,
        updates,
        direct_only=direct_only,
        reference_file=None if is_entry else file_name,
        pin_comment=options.pin_comment,
    )
    for change in result.changes:
        change.file = file_name
    if result.changes:
        staged.stage(full_path, result.updated_manifest)
    return result.changes, result.applied_remediation


def apply_all_fixes(
    entity: EntityToFix,
    options: FixOptions,
    fixed_files: Optional[FixedFilesCache] = None,
) -> Tuple[List[FixChangesSummary], List[str]]:
    """Upgrade across the entity's include closure, then pin leftovers in the entry file.

    Returns every change summary and the de-duplicated list of files that
    were (or, in dry-run mode, would have been) rewritten.
    """

    remediation, entry_file, workspace = get_required_data(entity)
    cache = fixed_files if fixed_files is not None else FixedFilesCache()
    directory, base = split_manifest_path(canonical_path(entry_file))
    staged = StagedWrites(workspace)
    provenance = extract_provenance(workspace, directory, base)

    upgrade_targets = remediation.upgrade_targets()
    upgrade_changes: List[FixChangesSummary] = []
    applied_upgrades: List[str] = []
    for file_name, parsed in provenance.items():
        if not parsed.lines:
            LOGGER.debug("Skipping empty manifest %s", file_name)
            continue
        if join_manifest_path(directory, file_name) in cache:
            # already rewritten for another entity: learn what it satisfies, never rewrite
            result = update_dependencies(parsed, upgrade_targets, direct_only=True)
            applied_upgrades.extend(result.applied_remediation)
            upgrade_changes.append(
                FixChangesSummary(success=True, user_message=f"{PREVIOUSLY_FIXED} ({file_name})", file=file_name)
            )
            continue
        changes, applied = fix_individual_requirements_txt(
            staged,
            directory,
            base,
            file_name,
            upgrade_targets,
            parsed,
            options,
            direct_only=True,
        )
        applied_upgrades.extend(applied)
        upgrade_changes.extend(changes)

    to_pin = filter_out_applied_upgrades(remediation, applied_upgrades)
    pin_changes: List[FixChangesSummary] = []
    if to_pin.pin:
        entry_path = join_manifest_path(directory, base)
        entry_parsed = read_and_parse(staged.read_file, entry_path)
        pin_changes, _ = fix_individual_requirements_txt(
            staged,
            directory,
            base,
            base,
            to_pin.pin,
            entry_parsed,
            options,
            direct_only=False,
        )
    else:
        LOGGER.debug("No leftover pins for %s", entry_file)

    staged.flush(options.dry_run)
    return upgrade_changes + pin_changes, staged.paths


def filter_out_applied_upgrades(
    remediation: RemediationChanges,
    applied_remediation: Iterable[str],
) -> RemediationChanges:
    """Pins not already handled by an applied upgrade; the upgrade map is emptied."""

    applied = {normalize_key(key) for key in applied_remediation}
    leftover = {key: target for key, target in remediation.pin.items() if key not in applied}
    return RemediationChanges(pin=leftover, upgrade={})


__all__ = [
    "PREVIOUSLY_FIXED",
    "StagedWrites",
    "apply_all_fixes",
    "filter_out_applied_upgrades",
    "fix_all",
    "fix_entity",
    "fix_individual_requirements_txt",
    "get_required_data",
    "pip_requirements_txt",
    "sort_by_directory",
]
