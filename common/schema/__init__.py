"""Entity and remediation plan models."""
from .entity import (
    EntityToFix,
    EntityValidationError,
    RemediationChanges,
    RemediationTarget,
    normalize_entities,
    normalize_entity,
    normalize_key,
    split_package_key,
)

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
