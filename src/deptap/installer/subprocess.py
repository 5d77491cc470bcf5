"""Async shell execution for package installation, with line-by-line streaming."""

from __future__ import annotations

import asyncio
import os
import signal
from collections.abc import Callable
from pathlib import Path

from deptap.errors import SpawnError

_OUTPUT_LIMIT = 4000
_CHUNK_SIZE = 65536

LineSink = Callable[[str, str], None]


async def run_shell(
    command: str,
    cwd: Path | str,
    on_line: LineSink | None = None,
    timeout: float | None = None,
) -> tuple[int, str, str]:
    """Run a shell command in ``cwd``, return (returncode, stdout, stderr).

    Each output line is handed to ``on_line(stream, line)`` as it arrives,
    where ``stream`` is ``"stdout"`` or ``"stderr"``. Captured output is
    truncated to the last few thousand characters.
    Uses start_new_session=True so child processes can be killed as a group.
    No timeout unless one is given.

    Raises:
        SpawnError: If the shell could not be started.
    """
    try:
        proc = await asyncio.create_subprocess_shell(
            command,
            cwd=str(cwd),
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            start_new_session=True,
        )
    except OSError as exc:
        raise SpawnError(f"Failed to start '{command}': {exc}") from exc

    stdout_lines: list[str] = []
    stderr_lines: list[str] = []

    async def _pump() -> None:
        await asyncio.gather(
            _read_lines(proc.stdout, "stdout", stdout_lines, on_line),
            _read_lines(proc.stderr, "stderr", stderr_lines, on_line),
        )
        await proc.wait()

    try:
        await asyncio.wait_for(_pump(), timeout=timeout)
    except TimeoutError:
        return (-1, _tail(stdout_lines), f"Command timed out after {timeout}s")
    finally:
        if proc.returncode is None:
            _kill_group(proc)
            await proc.wait()

    return (proc.returncode or 0, _tail(stdout_lines), _tail(stderr_lines))


def _kill_group(proc: asyncio.subprocess.Process) -> None:
    try:
        os.killpg(os.getpgid(proc.pid), signal.SIGKILL)
    except (ProcessLookupError, OSError):
        proc.kill()


async def _read_lines(
    stream: asyncio.StreamReader | None,
    name: str,
    sink: list[str],
    on_line: LineSink | None,
) -> None:
    """Split a stream into lines without a per-line length limit."""
    if stream is None:
        return
    pending = b""
    while True:
        chunk = await stream.read(_CHUNK_SIZE)
        if not chunk:
            break
        pending += chunk
        *complete, pending = pending.split(b"\n")
        for raw in complete:
            _emit(raw, name, sink, on_line)
    if pending:
        _emit(pending, name, sink, on_line)


def _emit(raw: bytes, name: str, sink: list[str], on_line: LineSink | None) -> None:
    line = raw.decode(errors="replace").rstrip("\r")
    sink.append(line)
    if on_line is not None and line.strip():
        on_line(name, line)


def _tail(lines: list[str]) -> str:
    return "\n".join(lines)[-_OUTPUT_LIMIT:]
