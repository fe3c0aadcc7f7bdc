"""ANSI styling helpers for fzf rows and the preview pane."""

from __future__ import annotations

from rich.color import ColorSystem
from rich.style import Style

# Indices below 16 render as standard SGR codes (31, 32); 242 as 38;5;242
RED = Style(color="color(1)")
GREEN = Style(color="color(2)")
DIM_GRAY = Style(color="color(242)")
BOLD = Style(bold=True)

RULE = "─" * 51
LABEL_WIDTH = 10
RELATED_COMMAND_WIDTH = 40


def ansi(text: str, style: Style) -> str:
    """Wrap text in the ANSI escape codes for a style."""
    return style.render(text, color_system=ColorSystem.EIGHT_BIT)


def exit_marker(exit_code: str) -> str:
    """Return the fzf column shown next to a command for its exit status.

    Successful commands get a single blank so the column still lines up.
    """
    if exit_code == "0":
        return " "
    return ansi(f"exit {exit_code}", RED)


def dir_context(directory: str, current_dir: str | None) -> str:
    """Annotate commands that ran in the directory we were started from."""
    if current_dir is None or directory != current_dir:
        return ""
    return " " + ansi("(current dir)", DIM_GRAY)


def status_style(exit_code: str) -> Style:
    return GREEN if exit_code == "0" else RED


def format_label(label: str) -> str:
    return f"{label:<{LABEL_WIDTH}} "


def format_related(command: str, directory: str) -> str:
    """Format one related command line: a fixed-width command, then its directory."""
    width = RELATED_COMMAND_WIDTH
    return f"{command:<{width}.{width}} ({directory})"
