"""
Tests for metrics sinks and sink selection from configuration.
"""
import io
import sys

import pytest

from app.services.metrics import ConsoleSink, FileSink, SinkWriteError, build_sink


class TestBuildSink:
    """Test suite for build_sink()"""

    @pytest.mark.parametrize("target", ["console", "stdout", " Console "])
    def test_console_targets(self, target):
        sink = build_sink(target)
        assert isinstance(sink, ConsoleSink)
        assert sink.stream is sys.stdout

    def test_stderr_target(self):
        sink = build_sink("stderr")
        assert isinstance(sink, ConsoleSink)
        assert sink.stream is sys.stderr

    def test_file_target(self, tmp_path):
        path = tmp_path / "metrics.jsonl"
        sink = build_sink(f"file:{path}")
        assert isinstance(sink, FileSink)
        assert sink.path == str(path)

    def test_file_target_requires_path(self):
        with pytest.raises(ValueError):
            build_sink("file:")

    def test_unknown_target(self):
        with pytest.raises(ValueError):
            build_sink("kafka://broker")


class TestConsoleSink:
    """Test suite for ConsoleSink"""

    def test_writes_to_stdout(self, capsys):
        ConsoleSink().write('{"metrics": []}')
        assert capsys.readouterr().out == '{"metrics": []}\n'

    def test_writes_to_given_stream(self):
        stream = io.StringIO()
        ConsoleSink(stream).write("a")
        ConsoleSink(stream).write("b")
        assert stream.getvalue() == "a\nb\n"

    def test_closed_stream_raises_sink_error(self):
        stream = io.StringIO()
        stream.close()
        with pytest.raises(SinkWriteError):
            ConsoleSink(stream).write("payload")


class TestFileSink:
    """Test suite for FileSink"""

    def test_appends_payloads(self, tmp_path):
        path = tmp_path / "nested" / "metrics.jsonl"
        sink = FileSink(str(path))

        sink.write("first")
        sink.write("second")

        assert path.read_text(encoding="utf-8") == "first\nsecond\n"

    def test_unwritable_path_raises_sink_error(self, tmp_path):
        # A directory cannot be opened for appending
        sink = FileSink(str(tmp_path))
        with pytest.raises(SinkWriteError):
            sink.write("payload")
