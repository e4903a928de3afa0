"""Unit tests for BridgeTool event draining and Transcript mirroring."""

import asyncio

import pytest

from hapdeploy.core import ProcessError, RecordingProgressSink, StderrLine, StdoutLine, Terminated
from hapdeploy.deploy import SENTINEL_EXIT_CODE, BridgeTool, ProcessStreamError, Transcript


class TestTranscript:

    def test_append_mirrors_to_sink(self):
        sink = RecordingProgressSink()
        transcript = Transcript(sink)

        transcript.append('first')
        transcript.append('second')

        assert sink.lines == ['first', 'second']
        assert transcript.lines == ['first', 'second']
        assert transcript.text == 'first\nsecond\n'
        assert len(transcript) == 2

    def test_empty_transcript(self):
        assert Transcript(RecordingProgressSink()).text == ''


class TestBridgeToolRun:
    """Test BridgeTool.run() draining semantics."""

    def test_lines_in_order_with_stderr_prefix(self, make_runner, sink):
        runner = make_runner({'list targets': [
            StdoutLine('a'),
            StderrLine('b'),
            StdoutLine('c'),
            Terminated(0),
        ]})
        transcript = Transcript(sink)

        code = asyncio.run(BridgeTool(runner).run(['list', 'targets'], transcript))

        assert code == 0
        assert sink.lines == ['a', '[error] b', 'c']
        assert runner.calls == [('hdc', ['list', 'targets'])]

    def test_stream_without_terminated_yields_sentinel(self, make_runner, sink):
        runner = make_runner({'install': [StdoutLine('still going')]})

        code = asyncio.run(BridgeTool(runner).run(['install', 'x.hap'], Transcript(sink)))

        assert code == SENTINEL_EXIT_CODE == -1

    def test_empty_stream_yields_sentinel(self, make_runner, sink):
        runner = make_runner({'install': []})

        code = asyncio.run(BridgeTool(runner).run(['install', 'x.hap'], Transcript(sink)))

        assert code == -1
        assert sink.lines == []

    def test_nonzero_exit_code_passes_through(self, make_runner, sink):
        runner = make_runner({'install': [Terminated(42)]})

        code = asyncio.run(BridgeTool(runner).run(['install', 'x.hap'], Transcript(sink)))

        assert code == 42

    def test_custom_executable(self, make_runner, sink):
        runner = make_runner({'list targets': [Terminated(0)]})

        asyncio.run(BridgeTool(runner, '/opt/sdk/toolchains/hdc').run(['list', 'targets'], Transcript(sink)))

        assert runner.calls[0][0] == '/opt/sdk/toolchains/hdc'

    def test_process_error_is_fatal_and_kills_child(self, make_runner, sink):
        runner = make_runner({'install': [
            StdoutLine('partial'),
            ProcessError('pipe closed'),
            Terminated(0),
        ]})

        with pytest.raises(ProcessStreamError) as exc_info:
            asyncio.run(BridgeTool(runner).run(['install', 'x.hap'], Transcript(sink)))

        assert 'pipe closed' in str(exc_info.value)
        assert runner.handles[0].killed
        assert sink.lines == ['partial']
