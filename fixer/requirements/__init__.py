"""pip requirements.txt remediation handler."""
from .handler import (
    apply_all_fixes,
    filter_out_applied_upgrades,
    fix_all,
    pip_requirements_txt,
    sort_by_directory,
)
from .parser import LineKind, ParsedRequirements, RequirementLine, parse_requirements_file
from .provenance import extract_provenance
from .supported import SupportedHandlerTypes, get_handler_type, is_requirements_txt_manifest, partition_by_fixable
from .update import UpdateResult, update_dependencies

__all__ = [
    "LineKind",
    "ParsedRequirements",
    "RequirementLine",
    "SupportedHandlerTypes",
    "UpdateResult",
    "apply_all_fixes",
    "extract_provenance",
    "filter_out_applied_upgrades",
    "fix_all",
    "get_handler_type",
    "is_requirements_txt_manifest",
    "parse_requirements_file",
    "partition_by_fixable",
    "pip_requirements_txt",
    "sort_by_directory",
    "update_dependencies",
]
