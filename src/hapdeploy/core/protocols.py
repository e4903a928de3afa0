"""Protocol definitions for dependency injection.

This module defines Protocol-based abstractions for everything the deployment
pipeline touches outside of pure Python: the console, the progress channel,
child processes and tool discovery. Protocols use structural typing, so any
object with matching methods satisfies them without inheritance.

Benefits:
- Easy to mock in tests (just implement the methods)
- Stages receive their collaborators explicitly (no process-wide handles)
- Clear interface contracts at every seam
"""

from typing import AsyncIterator, List, Optional, Protocol, Tuple

from hapdeploy.core.events import ProcessEvent


class Logger(Protocol):
    """Abstraction for human-facing diagnostics.

    Replaces direct print() statements in commands and stages. Progress lines
    are not logs; they go through ProgressSink.
    """

    def info(self, message: str) -> None:
        """Log informational message."""
        ...

    def warning(self, message: str) -> None:
        """Log warning message."""
        ...

    def error(self, message: str) -> None:
        """Log error message."""
        ...

    def debug(self, message: str) -> None:
        """Log debug message."""
        ...


class ProgressSink(Protocol):
    """Live feed of deployment progress lines.

    Receives exactly the lines that end up in the returned transcript, in the
    same order, one call per line.
    """

    def emit(self, line: str) -> None:
        """Publish one progress line."""
        ...


class ProcessHandle(Protocol):
    """Abstraction for a spawned child process."""

    @property
    def pid(self) -> int:
        ...

    @property
    def returncode(self) -> Optional[int]:
        """Exit code once the child has been reaped, otherwise None."""
        ...

    async def wait(self) -> int:
        """Wait for the child to terminate and return its exit code."""
        ...

    def kill(self) -> None:
        """Forcefully terminate the child."""
        ...


class ProcessRunner(Protocol):
    """Abstraction for process execution.

    Wraps asyncio subprocess creation so stages can be tested with scripted
    event sequences instead of real executables.
    """

    async def spawn(
        self,
        program: str,
        args: List[str],
    ) -> Tuple[AsyncIterator[ProcessEvent], ProcessHandle]:
        """Start ``program`` with ``args``.

        Returns the ordered event stream of the child plus its handle. The
        caller must drain the stream to completion.

        Raises:
            ProcessSpawnError: If the process could not be started
        """
        ...


class ToolLocator(Protocol):
    """Abstraction for external tool discovery.

    Wraps shutil.which() to enable testing without the bridge tool installed.
    """

    def find_tool(self, tool_name: str) -> Optional[str]:
        """Find tool in PATH and return absolute path, or None if not found."""
        ...

    def has_tool(self, tool_name: str) -> bool:
        """Check if tool exists in PATH."""
        ...
