"""Fix run options shared by the CLI and the remediation engine.

Values are merged from (lowest to highest precedence) the defaults below, the
``fix:`` section of an optional YAML config file, the ``REQFIX_DRY_RUN``
environment variable and explicit keyword overrides."""
from __future__ import annotations

import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

DEFAULT_PIN_COMMENT = "not directly required, pinned to avoid a vulnerability"
_DRY_RUN_ENV = "REQFIX_DRY_RUN"


def _as_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in {"true", "1", "yes", "on"}
    return bool(value)


@dataclass(frozen=True)
class FixOptions:
    """Options recognised by a fix run."""

    dry_run: bool = False
    pin_comment: str = DEFAULT_PIN_COMMENT

    def to_dict(self) -> Dict[str, Any]:
        return {"dry_run": self.dry_run, "pin_comment": self.pin_comment}


def _read_config_section(path: Path) -> Dict[str, Any]:
    data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a mapping")
    section = data.get("fix") or {}
    if not isinstance(section, dict):
        raise ValueError(f"'fix' section of {path} must be a mapping")
    return section


def load_fix_options(path: Optional[Path] = None, **overrides: Any) -> FixOptions:
    """Build :class:`FixOptions` from config file, environment and overrides."""

    known = {item.name for item in fields(FixOptions)}
    values: Dict[str, Any] = {}
    if path is not None:
        for key, value in _read_config_section(Path(path)).items():
            if key in known:
                values[key] = value
    env_dry_run = os.environ.get(_DRY_RUN_ENV)
    if env_dry_run is not None and env_dry_run.strip():
        values["dry_run"] = env_dry_run
    for key, value in overrides.items():
        if key in known and value is not None:
            values[key] = value

    options = FixOptions()
    if "dry_run" in values:
        options = replace(options, dry_run=_as_bool(values["dry_run"]))
    if values.get("pin_comment"):
        options = replace(options, pin_comment=str(values["pin_comment"]).strip())
    return options


__all__ = ["DEFAULT_PIN_COMMENT", "FixOptions", "load_fix_options"]
