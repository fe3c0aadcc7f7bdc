"""System utility checks."""

from __future__ import annotations

import logging
import os
import shlex
import shutil
import sys

logger = logging.getLogger(__name__)

# Tried in order; the first one on PATH wins
CLIPBOARD_COMMANDS: list[list[str]] = [
    ["pbcopy"],
    ["wl-copy"],
    ["xclip", "-selection", "clipboard"],
    ["xsel", "--clipboard", "--input"],
]


def current_directory() -> str | None:
    """Return the working directory, or None if it cannot be determined.

    Prefers ``$PWD`` while it still names the same directory: atuin records
    the shell's logical path, which keeps symlinks that ``os.getcwd()``
    resolves away.
    """
    pwd = os.environ.get("PWD", "")
    if os.path.isabs(pwd):
        try:
            if os.path.samefile(pwd, "."):
                return pwd
        except OSError as e:
            logger.debug("Ignoring stale PWD %s: %s", pwd, e)
    try:
        return os.getcwd()
    except OSError as e:
        # e.g. the directory was removed underneath the shell
        logger.debug("Cannot determine current directory: %s", e)
        return None


def detect_clipboard_command() -> str:
    """Find a clipboard tool to pipe yanked commands into."""
    for cmd in CLIPBOARD_COMMANDS:
        if shutil.which(cmd[0]):
            return shlex.join(cmd)
    return "pbcopy"


def self_command() -> str:
    """Shell command that re-invokes this program, for fzf's preview pane."""
    return shlex.join([sys.executable, "-m", "atuin_fzf"])
