"""PeriodicExporter - Background task that pushes metrics snapshots to a sink.

The exporter wakes every ``interval`` seconds, takes a registry snapshot,
serializes it to pretty JSON and writes it to its sink once. The wait
between ticks watches the stop event, so shutdown is observed promptly.
Sink writes run in a worker thread via asyncio.to_thread.

States: IDLE -> WAITING -> EXPORTING -> WAITING -> ... -> STOPPED
"""

import asyncio
import time
from enum import Enum
from typing import Optional

from app.core.logging_config import get_logger
from .registry import MetricsRegistry
from .sinks import MetricsSink

logger = get_logger("metrics_exporter")


class ExporterState(str, Enum):
    IDLE = "idle"
    WAITING = "waiting"
    EXPORTING = "exporting"
    STOPPED = "stopped"


class PeriodicExporter:
    """Drives the export cadence for one registry and one sink.

    A failed export is logged and counted but never ends the loop; the next
    tick exports a fresh snapshot. Once stopped, the exporter cannot be
    started again.
    """

    def __init__(
        self,
        registry: MetricsRegistry,
        sink: MetricsSink,
        interval: float = 5.0,
        shutdown_timeout: float = 5.0,
    ):
        """
        Args:
            registry: Registry to snapshot on each tick
            sink: Destination for serialized snapshots
            interval: Seconds between exports
            shutdown_timeout: Seconds stop() waits for the final flush
        """
        if interval <= 0:
            raise ValueError(f"Export interval must be positive, got {interval}")

        self.registry = registry
        self.sink = sink
        self.interval = float(interval)
        self.shutdown_timeout = shutdown_timeout

        self.state = ExporterState.IDLE
        self.exports_completed = 0
        self.exports_failed = 0
        self.last_export_ts: Optional[float] = None
        self.last_error: Optional[str] = None

        self._task: Optional[asyncio.Task] = None
        self._stop_event: Optional[asyncio.Event] = None
        self._exported_records = 0
        self._export_lock: Optional[asyncio.Lock] = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def has_pending(self) -> bool:
        """True if measurements were recorded since the last successful export."""
        return self.registry.record_count() != self._exported_records

    @property
    def _lock(self) -> asyncio.Lock:
        # Created on first use so it belongs to the running loop
        if self._export_lock is None:
            self._export_lock = asyncio.Lock()
        return self._export_lock

    async def export_once(self) -> bool:
        """Snapshot, serialize and write once.

        The snapshot is taken on the loop; the sink write runs in a worker
        thread so slow sinks never stall request handlers. Concurrent calls
        are serialized.

        Returns:
            True if the sink accepted the payload, False if the export failed
        """
        async with self._lock:
            previous = self.state
            self.state = ExporterState.EXPORTING
            try:
                seen = self.registry.record_count()
                snapshot = self.registry.snapshot()
                await asyncio.to_thread(self.sink.write, snapshot.model_dump_json(indent=2))
            except Exception as e:
                self.exports_failed += 1
                self.last_error = str(e)
                logger.error(f"Metrics export failed: {e}")
                return False
            finally:
                self.state = previous

            self._exported_records = seen
            self.exports_completed += 1
            self.last_export_ts = time.time()
            self.last_error = None
            logger.debug(f"Exported metrics snapshot with {len(snapshot.metrics)} instruments")
            return True

    async def force_flush(self) -> bool:
        """Export immediately, outside the regular cadence."""
        if self.state is ExporterState.STOPPED:
            logger.warning("Metrics exporter is stopped, flush ignored")
            return False
        return await self.export_once()

    async def _final_flush(self) -> None:
        if self.has_pending():
            logger.info("Flushing pending metrics before shutdown")
            await self.export_once()
        self.state = ExporterState.STOPPED

    async def _run(self, stop_event: asyncio.Event) -> None:
        """Background loop that exports on every tick until stop_event is set."""
        loop = asyncio.get_running_loop()
        logger.info(f"Metrics exporter started, interval {self.interval}s, sink {self.sink!r}")

        next_tick = loop.time() + self.interval
        while True:
            self.state = ExporterState.WAITING
            try:
                # Wait for the next tick or until stop event is set
                await asyncio.wait_for(stop_event.wait(), timeout=max(0.0, next_tick - loop.time()))
                break
            except asyncio.TimeoutError:
                pass

            await self.export_once()

            next_tick += self.interval
            now = loop.time()
            if next_tick <= now:
                # Ticks missed while exporting are skipped, not replayed
                skipped = int((now - next_tick) // self.interval) + 1
                next_tick += skipped * self.interval
                logger.warning(f"Metrics exporter fell behind, skipped {skipped} tick(s)")

        await self._final_flush()
        logger.info("Metrics exporter stopped")

    def start(self) -> None:
        """Start the background export task on the running event loop."""
        if self.state is ExporterState.STOPPED:
            raise RuntimeError("Metrics exporter has been stopped and cannot be restarted")

        if self.is_running:
            logger.warning("Metrics exporter already running")
            return

        self._stop_event = asyncio.Event()
        self._task = asyncio.create_task(self._run(self._stop_event))
        logger.info("Metrics exporter task created")

    async def stop(self) -> None:
        """Signal shutdown and wait for the final flush."""
        if self.state is ExporterState.STOPPED:
            return

        if not self.is_running:
            # Never started: nothing to cancel, still flush what was recorded
            await self._final_flush()
            self._task = None
            self._stop_event = None
            return

        self._stop_event.set()
        try:
            await asyncio.wait_for(self._task, timeout=self.shutdown_timeout)
        except asyncio.TimeoutError:
            logger.warning(f"Metrics exporter did not stop within {self.shutdown_timeout}s, cancelled")
            self.state = ExporterState.STOPPED

        self._task = None
        self._stop_event = None
        logger.info("Metrics exporter stop completed")
