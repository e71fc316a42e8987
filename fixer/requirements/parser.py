"""Line-preserving parser for requirements.txt style manifests.

Every physical line becomes one :class:`RequirementLine`. Only the version
token of a requirement line is ever rewritten, everything else (comments,
markers, spacing, line endings) is carried over untouched when the manifest
is rendered back to text.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import List, Optional, Sequence, Tuple

from packaging.utils import canonicalize_name

INCLUDE_RE = re.compile(
    r"^\s*(?P<flag>--requirement|--constraint|-r|-c)(?:\s*=\s*|\s+|(?=[^\s=]))(?P<path>[^\s#]+)"
)
REQUIREMENT_RE = re.compile(
    r"^(?P<lead>\s*)"
    r"(?P<name>[A-Za-z0-9](?:[A-Za-z0-9._-]*[A-Za-z0-9])?)"
    r"(?P<extras>\s*\[[^\]]*\])?"
    r"(?:\s*(?P<comparator>===|==|>=|<=|~=|!=|>|<)\s*(?P<version>[A-Za-z0-9][A-Za-z0-9.*+!_-]*))?"
    r"(?P<rest>.*)$"
)
DIRECT_REFERENCE_RE = re.compile(
    r"^\s*(?P<name>[A-Za-z0-9](?:[A-Za-z0-9._-]*[A-Za-z0-9])?)\s*(?:\[[^\]]*\])?\s*@"
)
EGG_RE = re.compile(r"[#&]egg=(?P<name>[A-Za-z0-9](?:[A-Za-z0-9._-]*[A-Za-z0-9])?)")
# per-requirement options such as --hash, and a trailing line continuation
REQUIREMENT_OPTIONS_RE = re.compile(r"(?:(?:^|\s)--[A-Za-z][\w-]*|\\\s*$)")
_OPAQUE_PREFIXES = ("-", ".", "/", "~")


class LineKind(str, Enum):
    REQUIREMENT = "requirement"
    REFERENCE = "reference"
    COMMENT = "comment"
    BLANK = "blank"
    INCLUDE = "include"
    OPTION = "option"


@dataclass(frozen=True)
class RequirementLine:
    """One physical line of a manifest.

    ``REFERENCE`` lines (``name @ url``, ``-e ...#egg=name``) carry a package
    name but no rewritable version.
    """

    kind: LineKind
    original_text: str
    line: int
    name: Optional[str] = None
    extras: Optional[str] = None
    comparator: Optional[str] = None
    version: Optional[str] = None
    marker: Optional[str] = None
    options: Optional[str] = None
    comment: Optional[str] = None
    include_flag: Optional[str] = None
    include_path: Optional[str] = None
    comparator_span: Optional[Tuple[int, int]] = None
    version_span: Optional[Tuple[int, int]] = None
    insert_at: Optional[int] = None

    @property
    def canonical_name(self) -> Optional[str]:
        return canonicalize_name(self.name) if self.name else None

    @property
    def has_hashes(self) -> bool:
        return bool(self.options) and "--hash" in self.options

    def with_version(self, version: str, comparator: Optional[str] = None) -> "RequirementLine":
        """Return a copy whose version token is replaced by ``version``.

        ``comparator`` replaces the existing comparator when given. Lines
        without a version get ``<comparator><version>`` (``==`` by default)
        inserted right after the name and extras.
        """

        text = self.original_text
        if self.version_span is not None:
            start, end = self.version_span
            updated = text[:start] + version + text[end:]
            new_span = (start, start + len(version))
            comparator_span = self.comparator_span
            if comparator and comparator != self.comparator and comparator_span is not None:
                c_start, c_end = comparator_span
                updated = updated[:c_start] + comparator + updated[c_end:]
                shift = len(comparator) - (c_end - c_start)
                new_span = (new_span[0] + shift, new_span[1] + shift)
                comparator_span = (c_start, c_start + len(comparator))
            return replace(
                self,
                original_text=updated,
                comparator=comparator or self.comparator,
                version=version,
                comparator_span=comparator_span,
                version_span=new_span,
            )
        if self.insert_at is None:
            raise ValueError(f"Line {self.line} has no version to rewrite")
        comparator = comparator or "=="
        token = f"{comparator}{version}"
        updated = text[: self.insert_at] + token + text[self.insert_at:]
        start = self.insert_at + len(comparator)
        return replace(
            self,
            original_text=updated,
            comparator=comparator,
            version=version,
            comparator_span=(self.insert_at, start),
            version_span=(start, start + len(version)),
            insert_at=None,
        )


@dataclass
class ParsedRequirements:
    lines: List[RequirementLine] = field(default_factory=list)
    ends_with_newline: bool = False

    @property
    def requirements(self) -> List[RequirementLine]:
        return [line for line in self.lines if line.kind is LineKind.REQUIREMENT]

    @property
    def includes(self) -> List[RequirementLine]:
        return [line for line in self.lines if line.kind is LineKind.INCLUDE]

    def render(self, lines: Optional[Sequence[RequirementLine]] = None, extra: Sequence[str] = ()) -> str:
        texts = [line.original_text for line in (self.lines if lines is None else lines)]
        texts.extend(extra)
        if not texts:
            return ""
        content = "\n".join(texts)
        return content + "\n" if self.ends_with_newline else content


def _split_comment(rest: str) -> Tuple[str, Optional[str]]:
    index = rest.find("#")
    if index < 0:
        return rest, None
    if index > 0 and not rest[index - 1].isspace():
        return rest, None
    return rest[:index], rest[index + 1:].strip() or None


def _split_options(remainder: str) -> Tuple[str, Optional[str]]:
    match = REQUIREMENT_OPTIONS_RE.search(remainder)
    if not match:
        return remainder, None
    return remainder[: match.start()].rstrip(), remainder[match.start():].strip()


def _opaque_line(text: str, line: int) -> RequirementLine:
    stripped = text.strip()
    name: Optional[str] = None
    if not stripped.startswith(_OPAQUE_PREFIXES):
        direct = DIRECT_REFERENCE_RE.match(stripped)
        name = direct.group("name") if direct else None
    if name is None:
        egg = EGG_RE.search(stripped)
        name = egg.group("name") if egg else None
    kind = LineKind.REFERENCE if name else LineKind.OPTION
    return RequirementLine(kind=kind, original_text=text, line=line, name=name)


def parse_line(text: str, line: int) -> RequirementLine:
    stripped = text.strip()
    if not stripped:
        return RequirementLine(kind=LineKind.BLANK, original_text=text, line=line)
    if stripped.startswith("#"):
        return RequirementLine(
            kind=LineKind.COMMENT,
            original_text=text,
            line=line,
            comment=stripped[1:].strip() or None,
        )
    include = INCLUDE_RE.match(text)
    if include:
        return RequirementLine(
            kind=LineKind.INCLUDE,
            original_text=text,
            line=line,
            include_flag=include.group("flag"),
            include_path=include.group("path"),
        )
    if stripped.startswith(_OPAQUE_PREFIXES) or "://" in stripped:
        return _opaque_line(text, line)

    match = REQUIREMENT_RE.match(text)
    if not match:
        return _opaque_line(text, line)
    rest, comment = _split_comment(match.group("rest"))
    remainder, options = _split_options(rest.strip())
    marker: Optional[str] = None
    if remainder.startswith(";"):
        marker = remainder[1:].strip() or None
    elif remainder and not remainder.startswith(","):
        return _opaque_line(text, line)
    comparator_span = None
    version_span = None
    insert_at = None
    if match.group("version"):
        comparator_span = (match.start("comparator"), match.end("comparator"))
        version_span = (match.start("version"), match.end("version"))
    else:
        insert_at = match.end("extras") if match.group("extras") else match.end("name")
    extras = match.group("extras")
    return RequirementLine(
        kind=LineKind.REQUIREMENT,
        original_text=text,
        line=line,
        name=match.group("name"),
        extras=extras.strip() if extras else None,
        comparator=match.group("comparator"),
        version=match.group("version"),
        marker=marker,
        options=options,
        comment=comment,
        comparator_span=comparator_span,
        version_span=version_span,
        insert_at=insert_at,
    )


def parse_requirements_file(content: str) -> ParsedRequirements:
    """Parse manifest text into ordered line records."""

    if not content:
        return ParsedRequirements(lines=[], ends_with_newline=False)
    ends_with_newline = content.endswith("\n")
    body = content[:-1] if ends_with_newline else content
    lines = [parse_line(text, index) for index, text in enumerate(body.split("\n"))]
    return ParsedRequirements(lines=lines, ends_with_newline=ends_with_newline)


__all__ = [
    "LineKind",
    "ParsedRequirements",
    "RequirementLine",
    "parse_line",
    "parse_requirements_file",
]
