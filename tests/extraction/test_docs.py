"""Tests for documentation comment collection."""

from __future__ import annotations

from localctx.extraction.docs import collect_documentation, is_comment_line


def test_triple_slash_lines_are_joined() -> None:
    lines = ["/// Line one", "/// Line two", "fn run() {}"]

    assert collect_documentation(lines, 2) == "Line one\nLine two"


def test_block_comment_above_annotation() -> None:
    lines = ["/**", " * Adds two numbers.", " */", "@override", "int add() {"]

    assert collect_documentation(lines, 4) == "Adds two numbers."


def test_hash_comments_document_python_declarations() -> None:
    lines = ["# Loads settings", "# from disk.", "@dataclass", "class Settings:"]

    assert collect_documentation(lines, 3) == "Loads settings\nfrom disk."


def test_plain_line_comment_is_not_documentation() -> None:
    lines = ["// plain note", "void f() {}"]

    assert collect_documentation(lines, 1) is None


def test_blank_lines_inside_doc_block_are_tolerated() -> None:
    lines = ["/// First", "", "/// Second", "void f() {}"]

    assert collect_documentation(lines, 3) == "First\nSecond"


def test_code_directly_above_means_no_documentation() -> None:
    lines = ["int x = 1;", "void f() {}"]

    assert collect_documentation(lines, 1) is None
    assert collect_documentation(lines, 0) is None


def test_preprocessor_lines_are_not_comments() -> None:
    assert is_comment_line("// note")
    assert is_comment_line("# note")
    assert is_comment_line("* continued")
    assert not is_comment_line("#include <stdio.h>")
    assert not is_comment_line("#[derive(Debug)]")
