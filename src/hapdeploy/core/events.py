"""Events produced by one child process, in emission order."""

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class StdoutLine:
    """One line the child wrote to stdout (newline stripped)."""
    text: str


@dataclass(frozen=True)
class StderrLine:
    """One line the child wrote to stderr (newline stripped)."""
    text: str


@dataclass(frozen=True)
class ProcessError:
    """The child's output could not be read. Always fatal for the consumer."""
    message: str


@dataclass(frozen=True)
class Terminated:
    """The child exited and reported ``exit_code``."""
    exit_code: int


ProcessEvent = Union[StdoutLine, StderrLine, ProcessError, Terminated]
