from __future__ import annotations

import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from fixer.requirements.parser import LineKind, parse_requirements_file

MANIFEST = (
    "# top comment\n"
    "\n"
    "Django[argon2] >= 1.6.1, <2.0  # web\n"
    "requests\n"
    "-r base.txt\n"
    "--constraint=constraints.txt\n"
    "-e git+https://github.com/example/lib.git#egg=lib\n"
    'flask==0.12; python_version >= "3.6"\n'
)


def test_render_reproduces_input() -> None:
    parsed = parse_requirements_file(MANIFEST)
    assert parsed.render() == MANIFEST
    assert [line.kind for line in parsed.lines] == [
        LineKind.COMMENT,
        LineKind.BLANK,
        LineKind.REQUIREMENT,
        LineKind.REQUIREMENT,
        LineKind.INCLUDE,
        LineKind.INCLUDE,
        LineKind.REFERENCE,
        LineKind.REQUIREMENT,
    ]


def test_requirement_fields() -> None:
    parsed = parse_requirements_file(MANIFEST)
    django, requests, flask = parsed.requirements
    assert django.name == "Django"
    assert django.canonical_name == "django"
    assert django.extras == "[argon2]"
    assert django.comparator == ">="
    assert django.version == "1.6.1"
    assert django.comment == "web"
    assert requests.version is None
    assert flask.marker == 'python_version >= "3.6"'


def test_include_directives() -> None:
    parsed = parse_requirements_file(MANIFEST + "-rlocal.txt\n--requirement dev.txt\n")
    includes = parsed.includes
    assert [line.include_path for line in includes] == ["base.txt", "constraints.txt", "local.txt", "dev.txt"]
    assert [line.include_flag for line in includes] == ["-r", "--constraint", "-r", "--requirement"]


def test_with_version_only_touches_version_token() -> None:
    parsed = parse_requirements_file(MANIFEST)
    django, requests, _ = parsed.requirements
    assert django.with_version("2.2.28").original_text == "Django[argon2] >= 2.2.28, <2.0  # web"
    assert requests.with_version("2.31.0").original_text == "requests==2.31.0"


def test_crlf_line_endings_survive() -> None:
    content = "django==1.6.1\r\nflask==0.12\r\n"
    parsed = parse_requirements_file(content)
    assert parsed.requirements[0].version == "1.6.1"
    assert parsed.render() == content
    updated = [parsed.lines[0].with_version("1.9.0"), parsed.lines[1]]
    assert parsed.render(updated) == "django==1.9.0\r\nflask==0.12\r\n"


def test_empty_and_newline_only_files() -> None:
    assert parse_requirements_file("").lines == []
    assert parse_requirements_file("").render() == ""
    newline_only = parse_requirements_file("\n")
    assert [line.kind for line in newline_only.lines] == [LineKind.BLANK]
    assert newline_only.render() == "\n"


def test_missing_trailing_newline_is_kept() -> None:
    parsed = parse_requirements_file("django==1.6.1")
    assert not parsed.ends_with_newline
    assert parsed.render(extra=["six==1.16.0"]) == "django==1.6.1\nsix==1.16.0"


def test_direct_references_keep_their_name() -> None:
    parsed = parse_requirements_file(
        "lib @ https://example.com/lib.tar.gz\n"
        "-e git+https://github.com/example/tool.git#egg=tool&subdirectory=src\n"
        "https://example.com/archive.zip\n"
        "--index-url https://pypi.example.com/simple\n"
    )
    assert [line.kind for line in parsed.lines] == [
        LineKind.REFERENCE,
        LineKind.REFERENCE,
        LineKind.OPTION,
        LineKind.OPTION,
    ]
    assert [line.canonical_name for line in parsed.lines] == ["lib", "tool", None, None]
    assert parsed.requirements == []


def test_hash_options_stay_on_a_requirement_line() -> None:
    content = "Django==1.6.1 --hash=sha256:abc --hash=sha256:def  # pinned\n"
    parsed = parse_requirements_file(content)
    (django,) = parsed.lines
    assert django.kind is LineKind.REQUIREMENT
    assert django.version == "1.6.1"
    assert django.options == "--hash=sha256:abc --hash=sha256:def"
    assert django.comment == "pinned"
    assert django.has_hashes
    assert parsed.render() == content
    assert django.with_version("1.9.0").original_text == (
        "Django==1.9.0 --hash=sha256:abc --hash=sha256:def  # pinned"
    )


def test_continued_requirement_line() -> None:
    content = 'django==1.6.1 ; python_version >= "3.6" \\\n    --hash=sha256:abc\n'
    parsed = parse_requirements_file(content)
    django, continuation = parsed.lines
    assert django.kind is LineKind.REQUIREMENT
    assert django.marker == 'python_version >= "3.6"'
    assert django.options == "\\"
    assert continuation.kind is LineKind.OPTION
    assert parsed.render() == content


def test_with_version_can_swap_comparator() -> None:
    (line,) = parse_requirements_file("django > 1.6.1, <3\n").lines
    rewritten = line.with_version("1.9.0", ">=")
    assert rewritten.original_text == "django >= 1.9.0, <3"
    assert rewritten.comparator == ">="
    assert rewritten.version == "1.9.0"
    assert rewritten.with_version("2.0.0").original_text == "django >= 2.0.0, <3"
