"""Entity and remediation plan models plus batch payload normalization."""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

from packaging.utils import canonicalize_name

from common.workspace import Workspace

_KEY_RE = re.compile(r"^\s*(?P<name>[A-Za-z0-9][A-Za-z0-9._-]*)\s*(?:@|==)\s*(?P<version>\S+)\s*$")


class EntityValidationError(ValueError):
    """Raised when a batch payload entry cannot be turned into an entity."""


def split_package_key(key: str) -> Tuple[str, str]:
    """Split ``name@version`` (or ``name==version``) into its parts."""

    match = _KEY_RE.match(key or "")
    if match:
        return match.group("name"), match.group("version")
    return (key or "").strip(), ""


def normalize_key(key: str) -> str:
    return (key or "").strip().lower()


def _target_version(payload: Mapping[str, Any]) -> str:
    raw = payload.get("upgradeTo") or payload.get("upgrade_to") or payload.get("target") or payload.get("version")
    if not isinstance(raw, str) or not raw.strip():
        return ""
    value = raw.strip()
    if "@" in value:
        value = value.rsplit("@", 1)[1]
    elif "==" in value:
        value = value.split("==", 1)[1]
    return value.strip()


@dataclass(frozen=True)
class RemediationTarget:
    """One remediation entry: move ``name`` from ``from_version`` to ``to_version``."""

    key: str
    name: str
    from_version: str
    to_version: str
    issue_ids: Tuple[str, ...] = ()

    @property
    def canonical_name(self) -> str:
        return canonicalize_name(self.name)

    @classmethod
    def from_raw(cls, key: str, payload: Any) -> "RemediationTarget":
        if isinstance(payload, str):
            payload = {"upgradeTo": payload}
        if not isinstance(payload, Mapping):
            raise EntityValidationError(f"Remediation entry {key!r} must be a mapping")
        name, from_version = split_package_key(key)
        if not name:
            raise EntityValidationError(f"Remediation key {key!r} has no package name")
        to_version = _target_version(payload)
        if not to_version:
            raise EntityValidationError(f"Remediation entry {key!r} has no target version")
        issues = payload.get("vulns") or payload.get("issue_ids") or []
        return cls(
            key=key,
            name=name,
            from_version=from_version,
            to_version=to_version,
            issue_ids=tuple(str(issue) for issue in issues if issue),
        )


def _build_map(raw: Any, label: str) -> Dict[str, RemediationTarget]:
    if raw is None:
        return {}
    if not isinstance(raw, Mapping):
        raise EntityValidationError(f"Remediation '{label}' must be a mapping")
    result: Dict[str, RemediationTarget] = {}
    for key, payload in raw.items():
        target = RemediationTarget.from_raw(str(key), payload)
        result[normalize_key(target.key)] = target
    return result


@dataclass(frozen=True, eq=False)
class RemediationChanges:
    """Remediation plan keyed by lower-cased ``name@version`` identity.

    ``pin`` holds exact target versions, ``upgrade`` minimum target versions.
    The original-case key is kept on each :class:`RemediationTarget` for
    display purposes.
    """

    pin: Dict[str, RemediationTarget] = field(default_factory=dict)
    upgrade: Dict[str, RemediationTarget] = field(default_factory=dict)

    @classmethod
    def from_raw(cls, raw: Optional[Mapping[str, Any]]) -> "RemediationChanges":
        raw = raw or {}
        if not isinstance(raw, Mapping):
            raise EntityValidationError("Remediation must be a mapping")
        return cls(pin=_build_map(raw.get("pin"), "pin"), upgrade=_build_map(raw.get("upgrade"), "upgrade"))

    def is_empty(self) -> bool:
        return not self.pin and not self.upgrade

    def upgrade_targets(self) -> Dict[str, RemediationTarget]:
        """Every entry usable as an in-place upgrade; ``upgrade`` wins over ``pin``."""

        combined = dict(self.pin)
        combined.update(self.upgrade)
        return combined


@dataclass(frozen=True, eq=False)
class EntityToFix:
    """One remediation unit bound to a manifest, a plan and a workspace."""

    target_file: Optional[str]
    remediation: Optional[RemediationChanges]
    workspace: Optional[Workspace]
    package_manager: str = "pip"
    label: Optional[str] = None

    @property
    def display_name(self) -> str:
        return self.label or self.target_file or "<unknown>"


def normalize_entity(payload: Mapping[str, Any], workspace: Optional[Workspace]) -> EntityToFix:
    """Turn one batch-file entry into an :class:`EntityToFix`."""

    if not isinstance(payload, Mapping):
        raise EntityValidationError("Entity entries must be mappings")
    target_file = payload.get("target_file") or payload.get("targetFile")
    remediation_raw = payload.get("remediation")
    remediation = RemediationChanges.from_raw(remediation_raw) if remediation_raw is not None else None
    return EntityToFix(
        target_file=str(target_file).strip() if target_file else None,
        remediation=remediation,
        workspace=workspace,
        package_manager=str(payload.get("package_manager") or payload.get("packageManager") or "pip").strip().lower(),
        label=payload.get("label"),
    )


def normalize_entities(payload: Mapping[str, Any], workspace: Optional[Workspace]) -> List[EntityToFix]:
    if not isinstance(payload, Mapping):
        raise EntityValidationError("Batch payload must be a mapping")
    entries = payload.get("entities")
    if not isinstance(entries, list) or not entries:
        raise EntityValidationError("Batch payload requires a non-empty 'entities' list")
    return [normalize_entity(entry, workspace) for entry in entries]


__all__ = [
    "EntityToFix",
    "EntityValidationError",
    "RemediationChanges",
    "RemediationTarget",
    "normalize_entities",
    "normalize_entity",
    "normalize_key",
    "split_package_key",
]
