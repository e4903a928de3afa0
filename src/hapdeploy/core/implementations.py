"""Production implementations of dependency injection protocols.

This module provides real implementations that wrap actual external
dependencies (console, child processes, PATH lookup). These are used by the
CLI commands.

For testing, use mocks or the recording/scripted doubles instead.
"""

import asyncio
import json
import shutil
import sys
from typing import AsyncIterator, List, Optional, TextIO, Tuple

from hapdeploy.core.events import (
    ProcessError,
    ProcessEvent,
    StderrLine,
    StdoutLine,
    Terminated,
)

# Longest single line accepted from a child process (bytes)
PROCESS_LINE_LIMIT = 1024 * 1024

DEFAULT_PROGRESS_CHANNEL = 'deploy-progress'


class ConsoleLogger:
    """Production logger that prints to console (stdout/stderr).

    ``stream`` replaces stdout for non-error output, e.g. when stdout carries
    JSON progress events.
    """

    def __init__(self, verbose: bool = False, stream: Optional[TextIO] = None):
        self.verbose = verbose
        self.stream = stream

    def info(self, message: str) -> None:
        """Print info message to stdout."""
        print(message, file=self.stream or sys.stdout)

    def warning(self, message: str) -> None:
        """Print warning message to stdout."""
        print(f"Warning: {message}", file=self.stream or sys.stdout)

    def error(self, message: str) -> None:
        """Print error message to stderr."""
        print(f"Error: {message}", file=sys.stderr)

    def debug(self, message: str) -> None:
        """Print debug message to stdout (only in verbose mode)."""
        if self.verbose:
            print(f"Debug: {message}", file=self.stream or sys.stdout)


class ConsoleProgressSink:
    """Prints every progress line as soon as it is emitted."""

    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream

    def emit(self, line: str) -> None:
        print(line, file=self.stream or sys.stdout, flush=True)


class JsonLinesProgressSink:
    """Writes one JSON object per progress line for an external subscriber.

    Each record looks like ``{"channel": "deploy-progress", "line": "..."}``.
    """

    def __init__(self, stream: Optional[TextIO] = None, channel: str = DEFAULT_PROGRESS_CHANNEL):
        self.stream = stream
        self.channel = channel

    def emit(self, line: str) -> None:
        out = self.stream or sys.stdout
        out.write(json.dumps({"channel": self.channel, "line": line}, ensure_ascii=False) + "\n")
        out.flush()


class RecordingProgressSink:
    """Keeps emitted lines in memory."""

    def __init__(self):
        self.lines: List[str] = []

    def emit(self, line: str) -> None:
        self.lines.append(line)


class AsyncioProcessHandle:
    """Wrapper around asyncio.subprocess.Process."""

    def __init__(self, process: asyncio.subprocess.Process):
        self._process = process

    @property
    def pid(self) -> int:
        return self._process.pid

    @property
    def returncode(self) -> Optional[int]:
        return self._process.returncode

    async def wait(self) -> int:
        return await self._process.wait()

    def kill(self) -> None:
        if self._process.returncode is None:
            try:
                self._process.kill()
            except ProcessLookupError:
                pass


async def _pump_lines(stream: asyncio.StreamReader, wrap, queue: asyncio.Queue) -> None:
    """Forward decoded lines from one pipe into ``queue``; None marks EOF."""
    try:
        while True:
            raw = await stream.readline()
            if not raw:
                break
            text = raw.decode('utf-8', errors='replace').rstrip('\r\n')
            queue.put_nowait(wrap(text))
    except (OSError, ValueError) as e:
        queue.put_nowait(ProcessError(f"Failed to read process output: {e}"))
    finally:
        queue.put_nowait(None)


class AsyncioProcessRunner:
    """Production process runner using asyncio.create_subprocess_exec.

    stdout and stderr are read concurrently and merged into one stream in
    arrival order. ``Terminated`` is produced only when the child reports an
    exit code; a child killed by a signal ends the stream without it.
    """

    def __init__(self, line_limit: int = PROCESS_LINE_LIMIT):
        self.line_limit = line_limit

    async def spawn(
        self,
        program: str,
        args: List[str],
    ) -> Tuple[AsyncIterator[ProcessEvent], AsyncioProcessHandle]:
        # Lazy import to avoid circular dependencies
        from hapdeploy.deploy.exceptions import ProcessSpawnError

        try:
            process = await asyncio.create_subprocess_exec(
                program,
                *args,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                limit=self.line_limit,
            )
        except (OSError, ValueError) as e:
            raise ProcessSpawnError(f"Failed to start '{program}': {e}") from e

        return self._events(process), AsyncioProcessHandle(process)

    async def _events(self, process: asyncio.subprocess.Process) -> AsyncIterator[ProcessEvent]:
        queue: asyncio.Queue = asyncio.Queue()
        readers = [
            asyncio.ensure_future(_pump_lines(process.stdout, StdoutLine, queue)),
            asyncio.ensure_future(_pump_lines(process.stderr, StderrLine, queue)),
        ]
        try:
            open_pipes = len(readers)
            while open_pipes:
                event = await queue.get()
                if event is None:
                    open_pipes -= 1
                    continue
                yield event
            returncode = await process.wait()
        finally:
            for reader in readers:
                reader.cancel()

        # Negative return code: terminated by a signal, no exit code reported
        if returncode >= 0:
            yield Terminated(returncode)


class SystemToolLocator:
    """Production tool locator using real shutil.which."""

    def find_tool(self, tool_name: str) -> Optional[str]:
        """Find tool in PATH."""
        return shutil.which(tool_name)

    def has_tool(self, tool_name: str) -> bool:
        """Check if tool exists in PATH."""
        return self.find_tool(tool_name) is not None
