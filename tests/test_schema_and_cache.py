"""Tests for entity schema normalization and the fixed-files cache."""
from __future__ import annotations

import sys
from pathlib import Path
from unittest import TestCase

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from common.schema import (
    EntityValidationError,
    RemediationChanges,
    normalize_entity,
    split_package_key,
)
from fixer.cache import FixedFilesCache


class RemediationSchemaTests(TestCase):
    def test_split_package_key(self) -> None:
        self.assertEqual(split_package_key("django@1.6.1"), ("django", "1.6.1"))
        self.assertEqual(split_package_key("Flask==1.0"), ("Flask", "1.0"))
        self.assertEqual(split_package_key("requests"), ("requests", ""))

    def test_target_version_shapes(self) -> None:
        changes = RemediationChanges.from_raw(
            {
                "pin": {
                    "django@1.6.1": {"upgradeTo": "django@1.9.0", "vulns": ["SNYK-1"]},
                    "flask@0.12": {"target": "2.3.2"},
                    "six@1.0": "1.16.0",
                }
            }
        )
        self.assertEqual([target.to_version for target in changes.pin.values()], ["1.9.0", "2.3.2", "1.16.0"])
        self.assertEqual(changes.pin["django@1.6.1"].issue_ids, ("SNYK-1",))
        upper = RemediationChanges.from_raw({"pin": {"DJANGO@1.6.1": "1.9.0"}})
        self.assertEqual(list(upper.pin), ["django@1.6.1"])

    def test_entry_without_target_is_rejected(self) -> None:
        with self.assertRaises(EntityValidationError):
            RemediationChanges.from_raw({"pin": {"django@1.6.1": {}}})
        with self.assertRaises(EntityValidationError):
            RemediationChanges.from_raw({"upgrade": ["django"]})

    def test_normalize_entity_accepts_camel_case(self) -> None:
        entity = normalize_entity(
            {"targetFile": "requirements.txt", "packageManager": "PIP", "remediation": {"pin": {}}},
            None,
        )
        self.assertEqual(entity.target_file, "requirements.txt")
        self.assertEqual(entity.package_manager, "pip")
        self.assertTrue(entity.remediation.is_empty())
        self.assertIsNone(normalize_entity({"target_file": "r.txt"}, None).remediation)


class FixedFilesCacheTests(TestCase):
    def test_paths_are_normalized_and_ordered(self) -> None:
        cache = FixedFilesCache(["proj/base.txt"])
        cache.extend(["proj/./base.txt", "other/base.txt", "proj/sub/../dev.txt"])
        self.assertEqual(cache.to_list(), ["proj/base.txt", "other/base.txt", "proj/dev.txt"])
        self.assertIn("proj/base.txt", cache)
        self.assertNotIn("base.txt", cache)
        self.assertEqual(len(cache), 3)
