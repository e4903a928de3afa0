"""Core dependency injection infrastructure for hapdeploy.

This module provides Protocol-based abstractions for every external
collaborator of the deployment pipeline (console, progress channel, child
processes, tool discovery) together with their production implementations.

Design:
- Protocol-based abstractions (typing.Protocol) for structural typing
- Production implementations for real-world use
- Easy mocking for unit tests
- Collaborators are passed explicitly to each stage
"""

from hapdeploy.core.events import (
    ProcessEvent,
    StdoutLine,
    StderrLine,
    ProcessError,
    Terminated,
)

from hapdeploy.core.protocols import (
    Logger,
    ProgressSink,
    ProcessHandle,
    ProcessRunner,
    ToolLocator,
)

from hapdeploy.core.implementations import (
    ConsoleLogger,
    ConsoleProgressSink,
    JsonLinesProgressSink,
    RecordingProgressSink,
    AsyncioProcessRunner,
    SystemToolLocator,
    DEFAULT_PROGRESS_CHANNEL,
)

__all__ = [
    # Events
    "ProcessEvent",
    "StdoutLine",
    "StderrLine",
    "ProcessError",
    "Terminated",
    # Protocols
    "Logger",
    "ProgressSink",
    "ProcessHandle",
    "ProcessRunner",
    "ToolLocator",
    # Implementations
    "ConsoleLogger",
    "ConsoleProgressSink",
    "JsonLinesProgressSink",
    "RecordingProgressSink",
    "AsyncioProcessRunner",
    "SystemToolLocator",
    "DEFAULT_PROGRESS_CHANNEL",
]
