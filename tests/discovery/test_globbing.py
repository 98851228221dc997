"""Tests for glob compilation."""

from __future__ import annotations

import pytest

from localctx.discovery.globbing import compile_glob, compile_globs


@pytest.mark.parametrize(
    ("pattern", "path", "expected"),
    [
        ("**/*.ts", "a.ts", True),
        ("**/*.ts", "src/deep/a.ts", True),
        ("**/*.ts", "src/a.tsx", False),
        ("*.dart", "lib/src/widget.dart", True),
        ("src/*.py", "src/app.py", True),
        ("src/*.py", "src/pkg/app.py", False),
        ("src/**", "src/a/b/c.txt", True),
        ("{a,b}.txt", "a.txt", True),
        ("{a,b}.txt", "c.txt", False),
        ("file?.md", "file1.md", True),
        ("file?.md", "file10.md", False),
        ("[ab]*.py", "alpha.py", True),
        ("[!ab]*.py", "alpha.py", False),
        ("*.TS", "a.ts", False),
        ("**/*", ".env", True),
        ("lib/**/*_widget.dart", "lib/ui/home_widget.dart", True),
        ("lib/**/*_widget.dart", "lib/home_widget.dart", True),
    ],
)
def test_glob_matching(pattern: str, path: str, expected: bool) -> None:
    compiled = compile_glob(pattern)
    assert compiled is not None
    assert compiled.matches(path) is expected


def test_negated_patterns_exclude_matches() -> None:
    globs = compile_globs(["**/*.ts", "!**/*.test.ts"])

    assert globs.matches("src/app.ts")
    assert not globs.matches("src/app.test.ts")


def test_only_negations_match_nothing() -> None:
    globs = compile_globs(["!**/*.ts"])

    assert not globs
    assert not globs.matches("a.js")


def test_invalid_pattern_is_skipped() -> None:
    assert compile_glob("[z-a].py") is None
    globs = compile_globs(["[z-a].py", "*.py"])
    assert globs.matches("ok.py")


def test_blank_pattern_is_ignored() -> None:
    assert compile_glob("   ") is None
