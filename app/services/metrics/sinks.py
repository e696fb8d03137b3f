"""Output sinks for serialized metrics snapshots.

A sink is an opaque append-style writer. It receives one serialized
snapshot per export and raises SinkWriteError when the write fails; it
never retries on its own.
"""

import os
import sys
from typing import Optional, Protocol, TextIO

from .errors import SinkWriteError


class MetricsSink(Protocol):
    """Destination for serialized snapshots."""

    def write(self, payload: str) -> None:
        """Write one serialized snapshot.

        Raises:
            SinkWriteError: the payload could not be written
        """
        ...


class ConsoleSink:
    """Writes snapshots to a text stream (stdout by default)."""

    def __init__(self, stream: Optional[TextIO] = None):
        self._stream = stream

    @property
    def stream(self) -> TextIO:
        # Resolved lazily so redirected sys.stdout is honoured
        return self._stream if self._stream is not None else sys.stdout

    def write(self, payload: str) -> None:
        try:
            self.stream.write(payload + "\n")
            self.stream.flush()
        except (OSError, ValueError) as e:
            raise SinkWriteError(f"Console write failed: {e}") from e

    def __repr__(self) -> str:
        return f"ConsoleSink(stream={getattr(self.stream, 'name', self.stream)!r})"


class FileSink:
    """Appends snapshots to a file, one JSON document per export."""

    def __init__(self, path: str):
        self.path = path

    def write(self, payload: str) -> None:
        try:
            directory = os.path.dirname(os.path.abspath(self.path))
            os.makedirs(directory, exist_ok=True)
            with open(self.path, "a", encoding="utf-8") as f:
                f.write(payload + "\n")
        except OSError as e:
            raise SinkWriteError(f"File write to {self.path} failed: {e}") from e

    def __repr__(self) -> str:
        return f"FileSink(path={self.path!r})"


def build_sink(target: str) -> MetricsSink:
    """Create a sink from a configuration string.

    Args:
        target: "console" / "stdout", "stderr", or "file:<path>"

    Returns:
        The configured sink

    Raises:
        ValueError: unknown target
    """
    target = target.strip()
    lowered = target.lower()

    if lowered in ("console", "stdout"):
        return ConsoleSink()
    if lowered == "stderr":
        return ConsoleSink(sys.stderr)
    if lowered.startswith("file:"):
        path = target[len("file:"):].strip()
        if not path:
            raise ValueError("File sink target needs a path, e.g. 'file:metrics.jsonl'")
        return FileSink(path)

    raise ValueError(f"Unknown metrics sink target: {target!r}")
