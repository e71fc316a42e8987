"""Decide which entities the requirements.txt handler can fix."""
from __future__ import annotations

from enum import Enum
from typing import Iterable, List, Optional, Tuple

from common.schema import EntityToFix
from fixer.results import SkippedEntity


class SupportedHandlerTypes(str, Enum):
    REQUIREMENTS = "requirements.txt"


def is_requirements_txt_manifest(target_file: str) -> bool:
    return (target_file or "").strip().lower().endswith(".txt")


def get_handler_type(entity: EntityToFix) -> Optional[SupportedHandlerTypes]:
    if (entity.package_manager or "").lower() != "pip" or not entity.target_file:
        return None
    if is_requirements_txt_manifest(entity.target_file):
        return SupportedHandlerTypes.REQUIREMENTS
    return None


def unsupported_reason(entity: EntityToFix) -> Optional[str]:
    """Return why ``entity`` cannot be fixed, or ``None`` when it can."""

    if not entity.target_file:
        return "No target file to fix"
    if get_handler_type(entity) is None:
        return f"{entity.target_file} is not a supported pip requirements manifest"
    if entity.remediation is None:
        return "No remediation data available"
    if entity.remediation.is_empty():
        return "There is no actionable remediation to apply"
    return None


def partition_by_fixable(entities: Iterable[EntityToFix]) -> Tuple[List[EntityToFix], List[SkippedEntity]]:
    fixable: List[EntityToFix] = []
    skipped: List[SkippedEntity] = []
    for entity in entities:
        reason = unsupported_reason(entity)
        if reason is None:
            fixable.append(entity)
        else:
            skipped.append(SkippedEntity(original=entity, reason=reason))
    return fixable, skipped


__all__ = [
    "SupportedHandlerTypes",
    "get_handler_type",
    "is_requirements_txt_manifest",
    "partition_by_fixable",
    "unsupported_reason",
]
