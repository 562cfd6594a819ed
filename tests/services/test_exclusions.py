import logging

import pytest

from prsize.models import FileChangeStat
from prsize.services.exclusions import compile_glob, expand_braces, filter_excluded, is_excluded


def make_stat(path: str, changed: int = 1) -> FileChangeStat:
    return FileChangeStat(path=path, inserted=changed, deleted=0, modified=0)


@pytest.mark.parametrize(
    "pattern,path",
    [
        ("vendor/**", "vendor/lib.go"),
        ("vendor/**", "vendor/github.com/pkg/errors/errors.go"),
        ("**/*.lock", "poetry.lock"),
        ("**/*.lock", "frontend/app/yarn.lock"),
        ("docs/**/*.md", "docs/index.md"),
        ("docs/**/*.md", "docs/guide/setup/install.md"),
        ("*.md", "README.md"),
        ("**", "any/path/at/all.txt"),
        ("file?.txt", "file1.txt"),
        ("file[0-9].txt", "file7.txt"),
        ("file[!0-9].txt", "fileA.txt"),
        ("go.sum", "go.sum"),
        ("generated/*_pb2.py", "generated/api_pb2.py"),
    ],
)
def test_compile_glob_matches(pattern: str, path: str) -> None:
    assert compile_glob(pattern).match(path)


@pytest.mark.parametrize(
    "pattern,path",
    [
        ("vendor/**", "main.go"),
        ("vendor/**", "src/vendor/lib.go"),
        ("*.md", "docs/index.md"),
        ("docs/*.md", "docs/guide/index.md"),
        ("file?.txt", "file10.txt"),
        ("file?.txt", "file/.txt"),
        ("file[0-9].txt", "fileA.txt"),
        ("file[!0-9].txt", "file7.txt"),
        ("go.sum", "go.summary"),
        ("main.go", "cmd/main.go"),
    ],
)
def test_compile_glob_does_not_match(pattern: str, path: str) -> None:
    assert not compile_glob(pattern).match(path)


def test_compile_glob_escapes_regex_characters() -> None:
    assert compile_glob("a+b(1).txt").match("a+b(1).txt")
    assert not compile_glob("a.txt").match("abtxt")


def test_compile_glob_unclosed_bracket_is_literal() -> None:
    assert compile_glob("file[.txt").match("file[.txt")


def test_is_excluded_returns_first_matching_pattern() -> None:
    assert is_excluded("vendor/lib.go", ["*.md", "vendor/**", "**/*.go"]) == "vendor/**"
    assert is_excluded("main.go", ["*.md", "vendor/**"]) is None


def test_filter_excluded_drops_vendored_files() -> None:
    stats = [make_stat("vendor/lib.go", 100), make_stat("main.go", 5)]
    assert filter_excluded(stats, ["vendor/**"]) == [make_stat("main.go", 5)]


def test_filter_excluded_empty_patterns_is_identity() -> None:
    stats = [make_stat("a.py"), make_stat("b.py")]
    assert filter_excluded(stats, []) == stats


def test_filter_excluded_preserves_order() -> None:
    stats = [make_stat(path) for path in ["z.py", "vendor/x.go", "a.py", "m.py", "vendor/y.go"]]
    result = filter_excluded(stats, ["vendor/**"])
    assert [stat.path for stat in result] == ["z.py", "a.py", "m.py"]


def test_filter_excluded_composes_as_union() -> None:
    stats = [make_stat(path) for path in ["vendor/a.go", "docs/b.md", "c.py", "poetry.lock", "d/e.py"]]
    first = ["vendor/**"]
    second = ["**/*.md", "**/*.lock"]
    assert filter_excluded(filter_excluded(stats, first), second) == filter_excluded(stats, first + second)
    assert filter_excluded(filter_excluded(stats, second), first) == filter_excluded(stats, first + second)


def test_filter_excluded_logs_each_exclusion(caplog: pytest.LogCaptureFixture) -> None:
    stats = [make_stat("vendor/a.go"), make_stat("main.go"), make_stat("vendor/b.go")]
    with caplog.at_level(logging.INFO, logger="prsize.services.exclusions"):
        filter_excluded(stats, ["vendor/**"])

    messages = [record.getMessage() for record in caplog.records]
    assert messages == [
        "Excluded file: vendor/a.go (matched vendor/**)",
        "Excluded file: vendor/b.go (matched vendor/**)",
    ]


@pytest.mark.parametrize(
    "pattern,expected",
    [
        ("*.go", ["*.go"]),
        ("**/*.{lock,sum}", ["**/*.lock", "**/*.sum"]),
        ("{vendor/**,go.sum}", ["vendor/**", "go.sum"]),
        ("a{b,c{d,e}}f", ["abf", "acdf", "acef"]),
        ("\\{a,b\\}", ["\\{a,b\\}"]),
        ("{unclosed", ["{unclosed"]),
    ],
)
def test_expand_braces(pattern: str, expected: list[str]) -> None:
    assert expand_braces(pattern) == expected


@pytest.mark.parametrize(
    "pattern,path",
    [
        ("**/*.{lock,sum}", "go.sum"),
        ("**/*.{lock,sum}", "web/yarn.lock"),
        ("{vendor/**,go.sum}", "vendor/lib.go"),
        ("{vendor/**,go.sum}", "go.sum"),
        ("docs/{api,guide}/*.md", "docs/guide/intro.md"),
        ("a\\*b", "a*b"),
        ("\\{a,b\\}", "{a,b}"),
        ("file\\?.txt", "file?.txt"),
        ("file[\\]].txt", "file].txt"),
        ("file[\\!a].txt", "file!.txt"),
    ],
)
def test_compile_glob_alternation_and_escapes_match(pattern: str, path: str) -> None:
    assert compile_glob(pattern).match(path)


@pytest.mark.parametrize(
    "pattern,path",
    [
        ("**/*.{lock,sum}", "go.mod"),
        ("{vendor/**,go.sum}", "main.go"),
        ("docs/{api,guide}/*.md", "docs/other/intro.md"),
        ("a\\*b", "axxb"),
        ("\\{a,b\\}", "a"),
        ("file\\?.txt", "file1.txt"),
        ("a[!b]c", "a/c"),
        ("a[!-0]c", "a/c"),
        ("a[!b]c", "abc"),
    ],
)
def test_compile_glob_alternation_and_escapes_do_not_match(pattern: str, path: str) -> None:
    assert not compile_glob(pattern).match(path)


def test_filter_excluded_with_alternation() -> None:
    stats = [make_stat("vendor/lib.go", 100), make_stat("go.sum", 40), make_stat("main.go", 5)]
    assert [stat.path for stat in filter_excluded(stats, ["{vendor/**,go.sum}"])] == ["main.go"]
