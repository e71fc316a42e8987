"""Change summaries and the succeeded/failed/skipped result partition."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Union

from common.schema import EntityToFix


@dataclass
class FixChangesSummary:
    """One applied (or attempted) textual change."""

    success: bool
    user_message: str
    package: Optional[str] = None
    from_version: Optional[str] = None
    to_version: Optional[str] = None
    file: Optional[str] = None
    issue_ids: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"success": self.success, "user_message": self.user_message}
        for key in ("package", "from_version", "to_version", "file"):
            value = getattr(self, key)
            if value is not None:
                payload[key] = value
        if self.issue_ids:
            payload["issue_ids"] = list(self.issue_ids)
        return payload


@dataclass
class FixedEntity:
    original: EntityToFix
    changes: List[FixChangesSummary]


@dataclass
class FailedEntity:
    original: EntityToFix
    error: BaseException
    touched_files: List[str] = field(default_factory=list)


@dataclass
class SkippedEntity:
    original: EntityToFix
    reason: str


EntityOutcome = Union[FixedEntity, FailedEntity, SkippedEntity]


@dataclass
class PluginFixResponse:
    succeeded: List[FixedEntity] = field(default_factory=list)
    failed: List[FailedEntity] = field(default_factory=list)
    skipped: List[SkippedEntity] = field(default_factory=list)

    def record(self, outcome: EntityOutcome) -> None:
        if isinstance(outcome, FixedEntity):
            self.succeeded.append(outcome)
        elif isinstance(outcome, FailedEntity):
            self.failed.append(outcome)
        else:
            self.skipped.append(outcome)

    def extend(self, other: "PluginFixResponse") -> None:
        self.succeeded.extend(other.succeeded)
        self.failed.extend(other.failed)
        self.skipped.extend(other.skipped)

    def to_summary(self) -> Dict[str, List[Dict[str, Any]]]:
        return {
            "succeeded": [
                {
                    "target_file": item.original.display_name,
                    "changes": [change.to_dict() for change in item.changes],
                }
                for item in self.succeeded
            ],
            "failed": [
                {
                    "target_file": item.original.display_name,
                    "error": getattr(item.error, "user_message", None) or str(item.error),
                    "error_type": type(item.error).__name__,
                    "touched_files": list(item.touched_files),
                }
                for item in self.failed
            ],
            "skipped": [
                {"target_file": item.original.display_name, "reason": item.reason}
                for item in self.skipped
            ],
        }


__all__ = [
    "EntityOutcome",
    "FailedEntity",
    "FixChangesSummary",
    "FixedEntity",
    "PluginFixResponse",
    "SkippedEntity",
]
