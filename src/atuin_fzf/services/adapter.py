"""Stream atuin output into fzf, adding the exit-status and current-dir columns.

The adapter sits between two processes. atuin writes raw history lines to its
stdout; fzf reads enriched rows from its stdin. Rows are produced on a
background task while fzf is already rendering, so the first screen appears
before atuin has finished.

The producer owns the write end of an OS pipe and closes it on every exit
path. fzf exiting early (a selection or an abort) closes the read end; the
next write then fails and the producer stops quietly. What atuin still has to
say is read and dropped so it can run to completion.
"""

from __future__ import annotations

import asyncio
import logging
import os

from atuin_fzf.errors import MalformedRecordError, WriteAbortedError
from atuin_fzf.records import DELIMITER, enrich, parse, serialize
from atuin_fzf.utils.system import current_directory

logger = logging.getLogger(__name__)

DISCARD_CHUNK = 64 * 1024


class EnrichedStream:
    """Readable end of the enriched record pipe, plus a handle on its producer."""

    def __init__(self, read_fd: int) -> None:
        self._read_fd: int | None = read_fd
        self._task: asyncio.Task[None] | None = None
        self.aborted = False
        self.records_written = 0

    def fileno(self) -> int:
        if self._read_fd is None:
            raise ValueError("enriched stream is closed")
        return self._read_fd

    @property
    def closed(self) -> bool:
        return self._read_fd is None

    def close(self) -> None:
        """Close our copy of the read end. Safe to call more than once."""
        if self._read_fd is not None:
            os.close(self._read_fd)
            self._read_fd = None

    async def wait(self) -> None:
        """Wait for the producer to finish, re-raising a fatal failure."""
        if self._task is not None:
            await self._task

    async def aclose(self) -> None:
        """Stop the producer and release the pipe, for failure paths."""
        self.close()
        if self._task is None:
            return
        if not self._task.done():
            self._task.cancel()
        (result,) = await asyncio.gather(self._task, return_exceptions=True)
        if isinstance(result, BaseException) and not isinstance(result, asyncio.CancelledError):
            logger.debug("Producer failed during shutdown: %s", result)


class StreamAdapter:
    """Turns a raw atuin record stream into fzf rows."""

    def __init__(self, current_dir: str | None = None, delimiter: str = DELIMITER) -> None:
        self.current_dir = current_dir if current_dir is not None else current_directory()
        self.delimiter = delimiter

    async def attach(self, source: asyncio.StreamReader) -> EnrichedStream:
        """Start enriching ``source`` and return the stream to hand to fzf.

        Returns as soon as the pipe exists; rows are written concurrently.
        """
        loop = asyncio.get_running_loop()
        read_fd, write_fd = os.pipe()
        try:
            pipe = os.fdopen(write_fd, "wb", buffering=0)
        except BaseException:
            os.close(read_fd)
            os.close(write_fd)
            raise

        # FlowControlMixin is asyncio's own protocol behind StreamWriter.drain();
        # not exported, but it is what gives a bare write pipe backpressure
        try:
            transport, protocol = await loop.connect_write_pipe(asyncio.streams.FlowControlMixin, pipe)
        except BaseException:
            pipe.close()
            os.close(read_fd)
            raise
        writer = asyncio.StreamWriter(transport, protocol, None, loop)

        stream = EnrichedStream(read_fd)
        stream._task = asyncio.create_task(self._produce(source, writer, stream))
        return stream

    async def _produce(
        self,
        source: asyncio.StreamReader,
        writer: asyncio.StreamWriter,
        stream: EnrichedStream,
    ) -> None:
        line_number = 0
        try:
            while True:
                raw = await source.readline()
                if not raw:
                    break
                line_number += 1

                text = raw.decode("utf-8", errors="surrogateescape")
                try:
                    record = parse(text, self.delimiter)
                except MalformedRecordError:
                    logger.error("Malformed history line %d: %r", line_number, text)
                    raise
                row = serialize(enrich(record, self.current_dir), self.delimiter)

                try:
                    await _write_line(writer, row)
                except WriteAbortedError as e:
                    logger.debug("Reader went away after %d rows: %s", stream.records_written, e)
                    stream.aborted = True
                    writer.close()
                    await _discard(source)
                    break
                stream.records_written += 1
        finally:
            writer.close()
        logger.debug("Producer done: %d rows written", stream.records_written)


async def _write_line(writer: asyncio.StreamWriter, line: str) -> None:
    if writer.is_closing():
        raise WriteAbortedError("pipe already closed")
    writer.write(line.encode("utf-8", errors="surrogateescape") + b"\n")
    try:
        await writer.drain()
    except (BrokenPipeError, ConnectionResetError) as e:
        raise WriteAbortedError(str(e) or type(e).__name__) from e


async def _discard(source: asyncio.StreamReader) -> None:
    while await source.read(DISCARD_CHUNK):
        pass
