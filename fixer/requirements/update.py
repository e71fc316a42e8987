"""Apply remediation targets to one parsed manifest."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional

from packaging.version import InvalidVersion, Version

from common.config import DEFAULT_PIN_COMMENT
from common.errors import NoFixesCouldBeAppliedError
from common.logging import get_logger
from common.schema import RemediationTarget
from fixer.requirements.parser import LineKind, ParsedRequirements, RequirementLine
from fixer.results import FixChangesSummary

LOGGER = get_logger(__name__)

# comparators whose version token acts as a lower bound or exact pin
REWRITABLE_COMPARATORS = {"==", "===", ">=", "~=", ">"}
# comparator swaps applied when the version token is rewritten
_REWRITTEN_COMPARATORS = {">": ">="}


@dataclass
class UpdateResult:
    updated_manifest: str
    changes: List[FixChangesSummary] = field(default_factory=list)
    applied_remediation: List[str] = field(default_factory=list)


def is_satisfied(current: Optional[str], target: str) -> bool:
    """True when ``current`` already meets ``target``."""

    if not current:
        return False
    try:
        return Version(current) >= Version(target)
    except InvalidVersion:
        return current.strip() == target.strip()


def _choose_target(line: RequirementLine, candidates: List[RemediationTarget]) -> RemediationTarget:
    for candidate in candidates:
        if candidate.from_version and candidate.from_version == line.version:
            return candidate
    return candidates[0]


def _suffix(reference_file: Optional[str], verb: str) -> str:
    return f" ({verb} in {reference_file})" if reference_file else ""


def update_dependencies(
    parsed: ParsedRequirements,
    updates: Mapping[str, RemediationTarget],
    direct_only: bool = False,
    reference_file: Optional[str] = None,
    pin_comment: str = DEFAULT_PIN_COMMENT,
) -> UpdateResult:
    """Rewrite matching requirement lines and, unless ``direct_only``, pin the rest.

    Returns the updated text, one change summary per rewritten or appended
    line and the remediation keys that are now satisfied by this file. A line
    already at or above its target version produces no change but still
    counts its key as applied, which keeps re-runs free of edits.
    """

    if not parsed.lines:
        raise NoFixesCouldBeAppliedError("Requirements file is empty")

    by_name: Dict[str, List[RemediationTarget]] = {}
    for target in updates.values():
        by_name.setdefault(target.canonical_name, []).append(target)

    changes: List[FixChangesSummary] = []
    applied: List[str] = []
    declared: set[str] = set()
    updated_lines: List[RequirementLine] = []
    for line in parsed.lines:
        if line.kind is LineKind.REFERENCE:
            declared.add(line.canonical_name or "")
            if line.canonical_name in by_name:
                LOGGER.debug("Not rewriting %s: direct reference without a version", line.name)
        if line.kind is not LineKind.REQUIREMENT:
            updated_lines.append(line)
            continue
        declared.add(line.canonical_name or "")
        candidates = by_name.get(line.canonical_name or "")
        if not candidates:
            updated_lines.append(line)
            continue
        target = _choose_target(line, candidates)
        if line.version is None:
            if direct_only:
                updated_lines.append(line)
                continue
            updated_lines.append(line.with_version(target.to_version))
            applied.append(target.key)
            changes.append(
                FixChangesSummary(
                    success=True,
                    user_message=f"Pinned {line.name} to {target.to_version}{_suffix(reference_file, 'pinned')}",
                    package=line.name,
                    from_version=None,
                    to_version=target.to_version,
                    issue_ids=target.issue_ids,
                )
            )
            continue
        if line.comparator not in REWRITABLE_COMPARATORS:
            LOGGER.debug("Not rewriting %s: comparator %s is not a lower bound", line.name, line.comparator)
            updated_lines.append(line)
            continue
        if is_satisfied(line.version, target.to_version):
            applied.append(target.key)
            updated_lines.append(line)
            continue
        if line.has_hashes:
            LOGGER.warning("Hashes for %s must be regenerated for version %s", line.name, target.to_version)
        updated_lines.append(line.with_version(target.to_version, _REWRITTEN_COMPARATORS.get(line.comparator or "")))
        applied.append(target.key)
        changes.append(
            FixChangesSummary(
                success=True,
                user_message=(
                    f"Upgraded {line.name} from {line.version} to {target.to_version}"
                    f"{_suffix(reference_file, 'upgraded')}"
                ),
                package=line.name,
                from_version=line.version,
                to_version=target.to_version,
                issue_ids=target.issue_ids,
            )
        )

    pinned_lines: List[str] = []
    if not direct_only:
        applied_lower = {key.lower() for key in applied}
        for name, candidates in by_name.items():
            if name in declared:
                continue
            target = candidates[0]
            if target.key.lower() in applied_lower:
                continue
            comment = f"  # {pin_comment}" if pin_comment else ""
            pinned_lines.append(f"{target.name}=={target.to_version}{comment}")
            applied.append(target.key)
            changes.append(
                FixChangesSummary(
                    success=True,
                    user_message=(
                        f"Pinned {target.name} from {target.from_version or 'unknown'} to {target.to_version}"
                        f"{_suffix(reference_file, 'pinned')}"
                    ),
                    package=target.name,
                    from_version=target.from_version or None,
                    to_version=target.to_version,
                    issue_ids=target.issue_ids,
                )
            )

    return UpdateResult(
        updated_manifest=parsed.render(updated_lines, extra=pinned_lines),
        changes=changes,
        applied_remediation=applied,
    )


__all__ = ["REWRITABLE_COMPARATORS", "UpdateResult", "is_satisfied", "update_dependencies"]
