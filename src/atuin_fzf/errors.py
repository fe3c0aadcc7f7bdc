"""Error types raised by the search pipeline and the preview renderer."""

from __future__ import annotations


class AtuinFzfError(RuntimeError):
    """Base error for atuin-fzf failures."""

    exit_code: int = 1


class LaunchError(AtuinFzfError):
    """Raised when an external process cannot be started."""

    def __init__(self, executable: str, reason: str) -> None:
        self.executable = executable
        self.reason = reason
        super().__init__(f"start {executable}: {reason}")


class WaitError(AtuinFzfError):
    """Raised when an external process exits with a non-zero status."""

    def __init__(self, executable: str, exit_code: int, stderr: str = "") -> None:
        self.executable = executable
        self.returncode = exit_code
        self.stderr = stderr
        msg = f"{executable} exited with status {exit_code}"
        if stderr:
            msg = f"{msg}: {stderr.strip()}"
        super().__init__(msg)


class MalformedRecordError(AtuinFzfError, ValueError):
    """Raised when a history line has fewer fields than a record needs."""

    def __init__(self, field_count: int, expected: int = 5) -> None:
        self.field_count = field_count
        self.expected = expected
        super().__init__(f"data format incorrect, expected {expected} parts, got {field_count}")


class FormatError(AtuinFzfError):
    """Raised when the preview payload cannot be decoded into a record."""


class WriteAbortedError(AtuinFzfError):
    """The reader of the enriched stream went away before the producer finished."""


class SelectorError(AtuinFzfError):
    """Raised when fzf exits with a status that is not a user abort."""

    def __init__(self, exit_code: int) -> None:
        self.returncode = exit_code
        super().__init__(f"run fzf: exit status {exit_code}")


class BackendQueryError(AtuinFzfError):
    """A related-command query failed during preview."""

    def __init__(self, scope: str, cause: BaseException) -> None:
        self.scope = scope
        self.cause = cause
        super().__init__(f"{scope} search: {cause}")
