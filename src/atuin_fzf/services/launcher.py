"""Start external processes and wait for them."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

from atuin_fzf.errors import LaunchError, WaitError

logger = logging.getLogger(__name__)

# atuin prints whole commands on one line; heredocs and pasted scripts get long
STREAM_LIMIT = 1024 * 1024


@dataclass
class LaunchedProcess:
    """A running process whose stdout is readable as a stream."""

    executable: str
    process: asyncio.subprocess.Process
    stdout: asyncio.StreamReader


async def launch(executable: str, args: list[str]) -> LaunchedProcess:
    """Start a process with its stdout piped back to us.

    The caller owns the process and must eventually ``wait`` or ``terminate`` it.
    """
    logger.debug("Launching %s %s", executable, args)
    try:
        proc = await asyncio.create_subprocess_exec(
            executable,
            *args,
            stdout=asyncio.subprocess.PIPE,
            limit=STREAM_LIMIT,
        )
    except FileNotFoundError:
        raise LaunchError(executable, "executable not found") from None
    except PermissionError:
        raise LaunchError(executable, "permission denied") from None
    except OSError as e:
        raise LaunchError(executable, str(e)) from e

    if proc.stdout is None:
        proc.kill()
        await proc.wait()
        raise LaunchError(executable, "stdout not attached")

    return LaunchedProcess(executable=executable, process=proc, stdout=proc.stdout)


async def wait(launched: LaunchedProcess) -> int:
    """Block until the process exits; a non-zero status raises ``WaitError``."""
    returncode = await launched.process.wait()
    logger.debug("%s exited with status %d", launched.executable, returncode)
    if returncode != 0:
        raise WaitError(launched.executable, returncode)
    return returncode


async def terminate(launched: LaunchedProcess) -> None:
    """Kill the process if it is still running and reap it."""
    if launched.process.returncode is None:
        logger.debug("Killing %s (pid %s)", launched.executable, launched.process.pid)
        try:
            launched.process.kill()
        except ProcessLookupError:
            pass
    await launched.process.wait()


async def capture(executable: str, args: list[str]) -> str:
    """Run a process to completion and return its decoded stdout."""
    logger.debug("Running %s %s", executable, args)
    try:
        proc = await asyncio.create_subprocess_exec(
            executable,
            *args,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except FileNotFoundError:
        raise LaunchError(executable, "executable not found") from None
    except PermissionError:
        raise LaunchError(executable, "permission denied") from None
    except OSError as e:
        raise LaunchError(executable, str(e)) from e

    stdout_bytes, stderr_bytes = await proc.communicate()
    exit_code = proc.returncode or 0
    if exit_code != 0:
        raise WaitError(executable, exit_code, stderr_bytes.decode("utf-8", errors="replace"))
    return stdout_bytes.decode("utf-8", errors="replace")
