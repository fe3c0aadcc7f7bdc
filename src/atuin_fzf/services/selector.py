"""fzf invocation for the interactive picker."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

from atuin_fzf.config import AppConfig
from atuin_fzf.errors import LaunchError, SelectorError
from atuin_fzf.records import DELIMITER, RECORD_FIELDS
from atuin_fzf.services.adapter import EnrichedStream
from atuin_fzf.utils.system import detect_clipboard_command, self_command

logger = logging.getLogger(__name__)

# The raw record plus the exit marker; the current-dir column is display-only
PREVIEW_FIELDS = RECORD_FIELDS + 1


@dataclass
class SelectionOutcome:
    """How the fzf session ended."""

    exit_code: int = 0
    aborted: bool = False


def preview_command(executable: str | None = None, delimiter: str = DELIMITER) -> str:
    """The command fzf runs for the preview pane, with row fields as placeholders."""
    fields = delimiter.join(f"{{{i}}}" for i in range(1, PREVIEW_FIELDS + 1))
    return f"{executable or self_command()} --preview {fields}"


def build_selector_args(query: str, config: AppConfig, preview: str | None = None) -> list[str]:
    """Build fzf arguments (without the executable itself)."""
    sel = config.selector
    clipboard = sel.clipboard_command or detect_clipboard_command()
    return [
        "--tac",
        "--ansi",
        "--scheme", sel.scheme,
        "--prompt", sel.prompt,
        "--header", sel.header,
        "--preview", preview or preview_command(),
        "--preview-window", sel.preview_window,
        "--delimiter", DELIMITER,
        # command, then the exit marker and current-dir columns
        "--with-nth", "{1}  {6} {7}",
        "--accept-nth", "{1}",
        "--bind", f"ctrl-y:execute-silent(echo -n {{1}} | {clipboard})+abort",
        "--query", query,
        "--height", sel.height,
    ]  # fmt: skip


async def run_selector(
    stream: EnrichedStream,
    query: str,
    config: AppConfig,
    preview: str | None = None,
) -> SelectionOutcome:
    """Run fzf over the enriched stream and wait for the operator to finish.

    fzf's stdout and stderr are the terminal's; the accepted command is
    printed there directly.
    """
    executable = config.selector.executable
    args = build_selector_args(query, config, preview)
    logger.debug("Launching %s %s", executable, args)

    try:
        try:
            proc = await asyncio.create_subprocess_exec(executable, *args, stdin=stream.fileno())
        except FileNotFoundError:
            raise LaunchError(executable, "executable not found") from None
        except PermissionError:
            raise LaunchError(executable, "permission denied") from None
        except OSError as e:
            raise LaunchError(executable, str(e)) from e
    finally:
        # fzf holds its own copy now; ours would keep the pipe alive after it exits
        stream.close()

    exit_code = await proc.wait()
    logger.debug("%s exited with status %d", executable, exit_code)

    if exit_code == 0:
        return SelectionOutcome(exit_code=0)
    if exit_code in config.selector.abort_exit_codes:
        return SelectionOutcome(exit_code=exit_code, aborted=True)
    raise SelectorError(exit_code)
