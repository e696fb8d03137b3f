"""Metrics aggregation and export pipeline.

This package provides the named instrument registry that request handlers
record into, and the periodic exporter that snapshots it and writes the
result to a sink. All state is session-only and in memory.
"""

from .errors import MetricsError, KindMismatchError, InvalidMeasurementError, SinkWriteError
from .models import InstrumentKind, MetricsSnapshotModel
from .instruments import Counter, Histogram, Gauge, Instrument, canonical_labels
from .registry import MeasurementEvent, MetricsRegistry
from .collector import IMetricsCollector, MetricsCollector
from .null_collector import NullMetricsCollector
from .sinks import ConsoleSink, FileSink, MetricsSink, build_sink
from .exporter import ExporterState, PeriodicExporter

__all__ = [
    "MetricsError",
    "KindMismatchError",
    "InvalidMeasurementError",
    "SinkWriteError",
    "InstrumentKind",
    "MetricsSnapshotModel",
    "Counter",
    "Histogram",
    "Gauge",
    "Instrument",
    "canonical_labels",
    "MeasurementEvent",
    "MetricsRegistry",
    "IMetricsCollector",
    "MetricsCollector",
    "NullMetricsCollector",
    "ConsoleSink",
    "FileSink",
    "MetricsSink",
    "build_sink",
    "ExporterState",
    "PeriodicExporter",
]
