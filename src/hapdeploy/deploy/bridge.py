"""Running bridge tool subcommands and draining their output.

Shared by DeviceProbe and Installer: both forward every output line into the
transcript and only differ in how they interpret the result.
"""

from typing import List, Optional

from hapdeploy.core.events import ProcessError, StderrLine, StdoutLine, Terminated
from hapdeploy.core.protocols import ProcessRunner
from hapdeploy.deploy.base import SENTINEL_EXIT_CODE
from hapdeploy.deploy.exceptions import ProcessStreamError
from hapdeploy.deploy.transcript import Transcript

DEFAULT_BRIDGE_TOOL = 'hdc'

# Prefix for every stderr line; also one of the probe's error markers
STDERR_PREFIX = '[error] '


class BridgeTool:
    """Invokes subcommands of the device bridge executable.

    Args:
        runner: Process execution abstraction
        executable: Bridge tool name or path (default: hdc)
    """

    def __init__(self, runner: ProcessRunner, executable: str = DEFAULT_BRIDGE_TOOL):
        self.runner = runner
        self.executable = executable

    async def run(self, args: List[str], transcript: Transcript) -> int:
        """Run ``executable args...`` and drain its event stream.

        stdout lines are appended as-is, stderr lines with STDERR_PREFIX, in
        the order received.

        Returns:
            The reported exit code, or SENTINEL_EXIT_CODE if the stream ended
            without a Terminated event

        Raises:
            ProcessSpawnError: If the tool could not be started
            ProcessStreamError: If the tool's output could not be read
        """
        events, handle = await self.runner.spawn(self.executable, args)

        exit_code: Optional[int] = None
        async for event in events:
            if isinstance(event, StdoutLine):
                transcript.append(event.text)
            elif isinstance(event, StderrLine):
                transcript.append(f"{STDERR_PREFIX}{event.text}")
            elif isinstance(event, ProcessError):
                handle.kill()
                raise ProcessStreamError(
                    f"Error while running {self.executable} {' '.join(args)}: {event.message}"
                )
            elif isinstance(event, Terminated):
                exit_code = event.exit_code

        return SENTINEL_EXIT_CODE if exit_code is None else exit_code
