"""Fix stage CLI.

Reads a batch file describing the manifests to remediate, applies the
remediation plans through the requirements.txt handler and reports the
succeeded/failed/skipped tally. Per-entity failures never change the exit
code; only an unreadable or invalid batch file does."""
from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from common.config import FixOptions, load_fix_options
from common.logging import configure_logging, get_logger
from common.paths import ensure_dir
from common.schema import EntityToFix, EntityValidationError, normalize_entities
from common.workspace import LocalWorkspace
from fixer.requirements import pip_requirements_txt
from fixer.results import PluginFixResponse

LOGGER = get_logger(__name__)


def load_batch(path: Path, root: Optional[Path] = None) -> Tuple[LocalWorkspace, List[EntityToFix]]:
    """Load a YAML/JSON batch file and bind its entities to a local workspace."""

    try:
        payload = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise EntityValidationError(f"Batch file {path} is not valid YAML/JSON: {exc}") from exc
    if not isinstance(payload, dict):
        raise EntityValidationError(f"Batch file {path} must contain a mapping")
    if root is None:
        declared_root = payload.get("root")
        root = path.parent / declared_root if declared_root else path.parent
    workspace = LocalWorkspace(root)
    return workspace, normalize_entities(payload, workspace)


def run_batch(entities: List[EntityToFix], options: FixOptions) -> PluginFixResponse:
    if options.dry_run:
        LOGGER.info("Dry-run mode: manifests will not be written")
    return pip_requirements_txt(entities, options)


def format_tally(response: PluginFixResponse) -> str:
    return (
        f"{len(response.succeeded)} succeeded, "
        f"{len(response.failed)} failed, "
        f"{len(response.skipped)} skipped"
    )


def write_summary(response: PluginFixResponse, output: Path, options: FixOptions) -> Path:
    summary: Dict[str, Any] = {"options": options.to_dict(), **response.to_summary()}
    ensure_dir(output.parent)
    output.write_text(json.dumps(summary, indent=2, ensure_ascii=False), encoding="utf-8")
    return output


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Remediate vulnerable pins in requirements.txt manifests")
    parser.add_argument("--input", required=True, type=Path, help="Batch YAML/JSON file")
    parser.add_argument("--root", type=Path, help="Project checkout root (defaults to the batch file's root)")
    parser.add_argument("--config", type=Path, help="YAML config file with a 'fix' section")
    parser.add_argument("--dry-run", action="store_true", default=None, help="Report changes without writing")
    parser.add_argument("--output", type=Path, help="Write a JSON summary to this path")
    parser.add_argument("--log-level", default=None, help="Logging level (default: REQFIX_LOG_LEVEL or INFO)")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    configure_logging(args.log_level)
    try:
        options = load_fix_options(args.config, dry_run=args.dry_run)
        _, entities = load_batch(args.input, args.root)
    except (OSError, ValueError) as exc:
        LOGGER.error("Invalid batch input: %s", exc)
        return 1

    response = run_batch(entities, options)
    for item in response.succeeded:
        for change in item.changes:
            LOGGER.info("%s: %s", item.original.display_name, change.user_message)
    for item in response.failed:
        LOGGER.warning("%s: %s", item.original.display_name, item.error)
    for item in response.skipped:
        LOGGER.info("%s skipped: %s", item.original.display_name, item.reason)
    if args.output:
        path = write_summary(response, args.output, options)
        LOGGER.info("Summary written to %s", path)
    print(format_tally(response))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
