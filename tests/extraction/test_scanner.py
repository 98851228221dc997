"""Tests for balanced-delimiter signature scanning."""

from __future__ import annotations

from localctx.extraction.scanner import (
    MAX_SIGNATURE_LINES,
    DelimiterState,
    find_complete_signature,
)


def test_multi_line_signature_is_normalised() -> None:
    lines = [
        "Future<void> load(",
        "  String id,",
        "  int count,",
        ") async {",
        "  body();",
        "}",
    ]

    span = find_complete_signature(lines, 0)

    assert span.text == "Future<void> load( String id, int count, ) async"
    assert span.has_body
    assert span.body_line == 3
    assert span.end == 3


def test_semicolon_terminates_and_is_kept() -> None:
    span = find_complete_signature(["int add(int a, int b);", "int other();"], 0)

    assert span.text == "int add(int a, int b);"
    assert not span.has_body
    assert span.end == 0


def test_opening_brace_on_next_line_is_the_body() -> None:
    lines = ["public void Run()", "", "{", "}"]

    span = find_complete_signature(lines, 0)

    assert span.text == "public void Run()"
    assert span.body_line == 2
    assert span.body_column == 0


def test_braces_inside_strings_and_comments_are_ignored() -> None:
    span = find_complete_signature(['log("{", x) { // }'], 0)
    assert span.text == 'log("{", x)'

    commented = find_complete_signature(["def helper(value):  # returns {value}"], 0)
    assert commented.text == "def helper(value):"
    assert not commented.has_body


def test_arrow_continuation_joins_next_line() -> None:
    lines = ["int twice(int x) =>", "    x * 2;"]

    span = find_complete_signature(lines, 0)

    assert span.text == "int twice(int x) => x * 2;"
    assert span.end == 1


def test_unterminated_signature_stops_at_line_limit() -> None:
    lines = ["foo("] + ["  a,"] * 200

    span = find_complete_signature(lines, 0)

    assert span.end == MAX_SIGNATURE_LINES - 1
    assert not span.has_body


def test_unterminated_signature_stops_at_end_of_text() -> None:
    span = find_complete_signature(["foo(", "  'unclosed"], 0)

    assert span.end == 1
    assert span.text.startswith("foo(")


def test_column_window_limits_first_line() -> None:
    line = "class Foo { bar() {} }"

    span = find_complete_signature([line], 0, start_column=11, end_column=21)

    assert span.text == "bar()"
    assert span.body_column == 18


def test_continuation_prefixes_extend_class_headers() -> None:
    lines = [
        "class Repository<T extends Model,",
        "    K extends Key>",
        "    implements Store<T> {",
        "}",
    ]

    span = find_complete_signature(lines, 0, continuation_prefixes=("implements",))

    assert span.text == "class Repository<T extends Model, K extends Key> implements Store<T>"
    assert span.body_line == 2


def test_delimiter_state_tracks_escapes_and_close() -> None:
    state = DelimiterState(braces=1)

    halt = state.feed(r'x = "\"}"; }', stop_at_close=True)

    assert halt == ("}", 11)
    assert state.balanced


def test_block_comments_span_lines_and_hide_delimiters() -> None:
    state = DelimiterState(braces=1)

    assert state.feed("/* it's { open", stop_at_close=True) is None
    assert state.in_block_comment
    assert not state.in_string
    assert state.braces == 1

    halt = state.feed("  still ' here */ }", stop_at_close=True)

    assert not state.in_block_comment
    assert halt == ("}", 18)
