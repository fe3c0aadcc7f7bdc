"""Preview pane: details of one history record plus similar recent commands."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Iterable

from rich.text import Text

from atuin_fzf.config import AppConfig
from atuin_fzf.errors import BackendQueryError, FormatError, MalformedRecordError
from atuin_fzf.records import DELIMITER, HistoryRecord, parse
from atuin_fzf.services.launcher import capture
from atuin_fzf.utils.formatting import BOLD, RULE, format_label, format_related, status_style

logger = logging.getLogger(__name__)

RELATED_FORMAT = "{command}\t{directory}"


@dataclass
class PreviewReport:
    """Rendered preview text and any related-command queries that failed."""

    text: Text
    failures: list[BackendQueryError] = field(default_factory=list)


def merge_related(*sources: Iterable[str]) -> list[tuple[str, str]]:
    """Merge ``command<TAB>directory`` lines from several queries.

    Sources are consumed in order and the first occurrence of each exact line
    wins. Lines without a tab are skipped.
    """
    seen: set[str] = set()
    merged: list[tuple[str, str]] = []
    for lines in sources:
        for line in lines:
            if line in seen:
                continue
            seen.add(line)
            command, sep, directory = line.partition("\t")
            if sep:
                merged.append((command, directory))
    return merged


class PreviewRenderer:
    """Build the preview report for one fzf row."""

    def __init__(self, config: AppConfig) -> None:
        self.config = config

    async def render(self, data: str) -> PreviewReport:
        try:
            record = parse(data, DELIMITER)
        except MalformedRecordError as e:
            raise FormatError(str(e)) from e

        text = Text()
        self._section(text, "Full Command")
        text.append(record.command + "\n")
        text.append("\n")

        self._section(text, "Execution Details")
        text.append(format_label("Status:"))
        text.append(record.exit_code, style=status_style(record.exit_code))
        text.append("\n")
        text.append(format_label("Ran In:") + record.directory + "\n")
        text.append(format_label("Duration:") + record.duration + "\n")
        text.append(format_label("When:") + record.timestamp + "\n")
        text.append("\n")

        self._section(text, "Recent Similar Commands")
        sources, failures = await self._related(record)
        for command, directory in merge_related(*sources):
            text.append(format_related(command, directory) + "\n")

        return PreviewReport(text=text, failures=failures)

    @staticmethod
    def _section(text: Text, title: str) -> None:
        text.append(title, style=BOLD)
        text.append("\n" + RULE + "\n")

    async def _related(self, record: HistoryRecord) -> tuple[list[list[str]], list[BackendQueryError]]:
        """Query global and directory-scoped history; failures never cancel each other."""
        scopes = {
            "global": self.related_args(record.command),
            "directory": self.related_args(record.command, cwd=record.directory),
        }
        executable = self.config.backend.executable
        results = await asyncio.gather(
            *(capture(executable, args) for args in scopes.values()),
            return_exceptions=True,
        )

        sources: list[list[str]] = []
        failures: list[BackendQueryError] = []
        for scope, result in zip(scopes, results):
            if isinstance(result, BaseException):
                if not isinstance(result, Exception):
                    raise result
                logger.info("Related %s search failed: %s", scope, result)
                failures.append(BackendQueryError(scope, result))
                continue
            sources.append(result.splitlines())
        return sources, failures

    def related_args(self, command: str, cwd: str | None = None) -> list[str]:
        args = [
            "search",
            "--limit", str(self.config.backend.related_limit),
            "--search-mode", "prefix",
        ]  # fmt: skip
        if cwd is not None:
            args += ["--cwd", cwd]
        args += ["--format", RELATED_FORMAT, command]
        return args
