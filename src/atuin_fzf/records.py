"""History record line format shared by atuin output, fzf rows and the preview payload."""

from __future__ import annotations

from dataclasses import astuple, dataclass

from atuin_fzf.errors import MalformedRecordError
from atuin_fzf.utils.formatting import dir_context, exit_marker

DELIMITER = ":::"
RECORD_FIELDS = 5

# atuin --format placeholders, in record field order
ATUIN_FIELDS = ("{command}", "{exit}", "{directory}", "{duration}", "{time}")


@dataclass(frozen=True)
class HistoryRecord:
    """One history entry as emitted by ``atuin search``."""

    command: str
    exit_code: str
    directory: str
    duration: str
    timestamp: str

    def fields(self) -> tuple[str, ...]:
        return astuple(self)


@dataclass(frozen=True)
class EnrichedRecord:
    """A history record plus the display-only columns shown in fzf."""

    record: HistoryRecord
    exit_marker: str
    dir_context: str

    def fields(self) -> tuple[str, ...]:
        return (*self.record.fields(), self.exit_marker, self.dir_context)


def parse(line: str, delimiter: str = DELIMITER) -> HistoryRecord:
    """Parse one delimited line into a record.

    Fields beyond the fifth are ignored, so a full fzf row (which carries the
    derived columns too) parses back into the record it came from.
    """
    parts = line.rstrip("\r\n").split(delimiter)
    if len(parts) < RECORD_FIELDS:
        raise MalformedRecordError(len(parts), RECORD_FIELDS)
    return HistoryRecord(*parts[:RECORD_FIELDS])


def serialize(record: HistoryRecord | EnrichedRecord, delimiter: str = DELIMITER) -> str:
    """Join a record's fields into one line, without a trailing newline.

    Delimiter occurrences inside a field are not escaped.
    """
    return delimiter.join(record.fields())


def enrich(record: HistoryRecord, current_dir: str | None) -> EnrichedRecord:
    return EnrichedRecord(
        record=record,
        exit_marker=exit_marker(record.exit_code),
        dir_context=dir_context(record.directory, current_dir),
    )


def atuin_format(delimiter: str = DELIMITER) -> str:
    """The ``atuin search --format`` template producing parseable lines."""
    return delimiter.join(ATUIN_FIELDS)
