"""Tests for styling helpers."""

from __future__ import annotations

from atuin_fzf.utils.formatting import (
    GREEN,
    RED,
    ansi,
    dir_context,
    exit_marker,
    format_label,
    format_related,
    status_style,
)


class TestAnsi:
    def test_wraps_text(self):
        styled = ansi("hello", RED)
        assert styled.startswith("\x1b[")
        assert "hello" in styled
        assert styled.endswith("\x1b[0m")


class TestExitMarker:
    def test_success(self):
        assert exit_marker("0") == " "

    def test_failure(self):
        marker = exit_marker("127")
        assert "exit 127" in marker
        assert "\x1b[" in marker

    def test_non_numeric_code(self):
        assert "exit ?" in exit_marker("?")


class TestDirContext:
    def test_match(self):
        ctx = dir_context("/home/me", "/home/me")
        assert "(current dir)" in ctx
        assert ctx.startswith(" ")

    def test_no_match(self):
        assert dir_context("/home/me", "/tmp") == ""

    def test_unknown_cwd(self):
        assert dir_context("/home/me", None) == ""


class TestStatusStyle:
    def test_success_is_green(self):
        assert status_style("0") == GREEN

    def test_failure_is_red(self):
        assert status_style("1") == RED


class TestFormatRelated:
    def test_short_command_padded(self):
        assert format_related("ls", "/tmp") == "ls" + " " * 38 + " (/tmp)"

    def test_long_command_truncated(self):
        assert format_related("x" * 50, "/d") == "x" * 40 + " (/d)"


def test_format_label():
    assert format_label("Status:") == "Status:    "
