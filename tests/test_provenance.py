from __future__ import annotations

import sys
from pathlib import Path

import pytest

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from common.errors import CollaboratorError
from fixer.requirements.provenance import extract_provenance


def test_closure_follows_includes_and_skips_cycles(project) -> None:
    workspace = project(
        {
            "requirements.txt": "-r base.txt\n-c constraints/pins.txt\nflask==0.12\n",
            "base.txt": "-r requirements.txt\ndjango==1.6.1\n",
            "constraints/pins.txt": "-r ../base.txt\nsqlparse==0.2.4\n",
        }
    )
    provenance = extract_provenance(workspace, "", "requirements.txt")
    assert list(provenance) == ["requirements.txt", "base.txt", "constraints/pins.txt"]
    assert provenance["base.txt"].requirements[0].name == "django"
    assert provenance["constraints/pins.txt"].requirements[0].version == "0.2.4"


def test_keys_are_relative_to_entry_directory(project) -> None:
    workspace = project(
        {
            "proj/requirements.txt": "-r ../shared/base.txt\n",
            "shared/base.txt": "django==1.6.1\n",
        }
    )
    provenance = extract_provenance(workspace, "proj", "requirements.txt")
    assert list(provenance) == ["requirements.txt", "../shared/base.txt"]


def test_missing_include_is_wrapped(project) -> None:
    workspace = project({"requirements.txt": "-r missing.txt\n"})
    with pytest.raises(CollaboratorError) as excinfo:
        extract_provenance(workspace, "", "requirements.txt")
    assert excinfo.value.action == "read"
    assert excinfo.value.path == "missing.txt"
    assert isinstance(excinfo.value.cause, FileNotFoundError)
