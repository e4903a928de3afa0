"""Shared test doubles for the deployment pipeline.

ScriptedProcessRunner replays canned ProcessEvent sequences instead of
spawning the bridge tool, so every stage can be tested without hdc or a
device.
"""

import zipfile
from pathlib import Path
from typing import Dict, List, Optional, Union

import pytest

from hapdeploy.core import RecordingProgressSink, StdoutLine, Terminated
from hapdeploy.deploy import ProcessSpawnError


class ScriptedHandle:
    """Stands in for a child process handle."""

    def __init__(self, pid: int):
        self.pid = pid
        self.returncode: Optional[int] = None
        self.killed = False

    async def wait(self) -> int:
        return self.returncode if self.returncode is not None else 0

    def kill(self) -> None:
        self.killed = True


class ScriptedProcessRunner:
    """Replays events for each spawned command.

    ``scripts`` maps a command prefix ("list targets", "install") to either a
    list of events or an exception to raise from spawn().
    """

    def __init__(self, scripts: Dict[str, Union[List, Exception]]):
        self.scripts = scripts
        self.calls: List[tuple] = []
        self.handles: List[ScriptedHandle] = []

    async def spawn(self, program, args):
        self.calls.append((program, list(args)))
        command = ' '.join(args)
        for prefix, script in self.scripts.items():
            if command.startswith(prefix):
                break
        else:
            raise AssertionError(f"Unexpected command: {program} {command}")

        if isinstance(script, Exception):
            raise script

        handle = ScriptedHandle(pid=1000 + len(self.calls))
        self.handles.append(handle)

        async def events():
            for event in script:
                yield event

        return events(), handle

    def commands(self) -> List[List[str]]:
        return [args for _, args in self.calls]


@pytest.fixture
def make_runner():
    """Factory for ScriptedProcessRunner."""
    return ScriptedProcessRunner


@pytest.fixture
def device_attached_runner():
    """Runner with one attached device and a successful install."""
    return ScriptedProcessRunner({
        'list targets': [StdoutLine('127.0.0.1:5555'), Terminated(0)],
        'install': [StdoutLine('install bundle successfully.'), Terminated(0)],
    })


@pytest.fixture
def spawn_failing_runner():
    return ScriptedProcessRunner({
        'list targets': ProcessSpawnError("Failed to start 'hdc': No such file or directory"),
    })


@pytest.fixture
def sink():
    return RecordingProgressSink()


@pytest.fixture
def make_zip():
    """Write a zip archive from {entry_name: bytes or None (directory)}."""

    def _make_zip(path: Path, entries: Dict[str, Optional[bytes]]) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        with zipfile.ZipFile(path, 'w') as archive:
            for name, content in entries.items():
                if content is None:
                    archive.writestr(name if name.endswith('/') else name + '/', b'')
                else:
                    archive.writestr(name, content)
        return path

    return _make_zip
