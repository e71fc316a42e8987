from __future__ import annotations

import sys
from pathlib import Path

import pytest

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from common.config import DEFAULT_PIN_COMMENT, FixOptions, load_fix_options


def test_defaults() -> None:
    options = load_fix_options()
    assert options == FixOptions(dry_run=False, pin_comment=DEFAULT_PIN_COMMENT)


def test_config_env_and_override_precedence(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    config = tmp_path / "reqfix.yml"
    config.write_text("fix:\n  dry_run: yes\n  pin_comment: pinned by security review\n", encoding="utf-8")

    from_file = load_fix_options(config)
    assert from_file.dry_run is True
    assert from_file.pin_comment == "pinned by security review"

    monkeypatch.setenv("REQFIX_DRY_RUN", "0")
    assert load_fix_options(config).dry_run is False
    assert load_fix_options(config, dry_run=True).dry_run is True


def test_config_must_be_a_mapping(tmp_path: Path) -> None:
    config = tmp_path / "reqfix.yml"
    config.write_text("- dry_run\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_fix_options(config)
