"""Shared test fixtures."""

from __future__ import annotations

import asyncio
import os
import sys
import textwrap

import pytest

from atuin_fzf.config import AppConfig, BackendConfig, LoggingConfig, SelectorConfig


@pytest.fixture
def make_script(tmp_path):
    """Write an executable Python script that stands in for atuin or fzf."""

    def _make(name: str, body: str) -> str:
        path = tmp_path / name
        path.write_text(f"#!{sys.executable}\nimport sys\n" + textwrap.dedent(body))
        path.chmod(0o755)
        return str(path)

    return _make


@pytest.fixture
def app_config(tmp_path):
    """Create a test configuration."""
    return AppConfig(
        backend=BackendConfig(executable=str(tmp_path / "atuin"), search_limit=1000, related_limit=5),
        selector=SelectorConfig(executable=str(tmp_path / "fzf"), clipboard_command="pbcopy"),
        logging=LoggingConfig(level="DEBUG", file=str(tmp_path / "test.log")),
    )


@pytest.fixture
def read_rows():
    """Read an EnrichedStream to EOF (or ``limit`` rows) without blocking the loop."""

    async def _read(stream, limit: int | None = None) -> list[str]:
        loop = asyncio.get_running_loop()
        reader = asyncio.StreamReader()
        pipe = os.fdopen(os.dup(stream.fileno()), "rb", buffering=0)
        stream.close()
        transport, _ = await loop.connect_read_pipe(lambda: asyncio.StreamReaderProtocol(reader), pipe)
        rows: list[str] = []
        try:
            while limit is None or len(rows) < limit:
                line = await reader.readline()
                if not line:
                    break
                rows.append(line.decode().rstrip("\n"))
        finally:
            transport.close()
        return rows

    return _read


def feed(*lines: str) -> asyncio.StreamReader:
    """A StreamReader preloaded with raw atuin lines."""
    reader = asyncio.StreamReader()
    for line in lines:
        reader.feed_data(line.encode() + b"\n")
    reader.feed_eof()
    return reader


@pytest.fixture
def source():
    return feed
