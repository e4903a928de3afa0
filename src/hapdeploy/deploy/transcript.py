"""Dual progress channel: accumulated transcript plus live sink."""

from typing import List

from hapdeploy.core.protocols import ProgressSink


class Transcript:
    """Records progress lines and forwards each one to a ProgressSink.

    Both channels see identical lines in identical order because every line
    goes through append().
    """

    def __init__(self, sink: ProgressSink):
        self.sink = sink
        self._lines: List[str] = []

    def append(self, line: str) -> None:
        self._lines.append(line)
        self.sink.emit(line)

    @property
    def lines(self) -> List[str]:
        return list(self._lines)

    @property
    def text(self) -> str:
        return ''.join(f"{line}\n" for line in self._lines)

    def __len__(self) -> int:
        return len(self._lines)
