"""IMetricsCollector Protocol and the registry-backed implementation.

This module defines the ingestion contract used by request handlers and
middleware to record measurements, decoupled from how they are stored.
NullMetricsCollector (null_collector.py) is the no-op variant used when
metrics are disabled.
"""

from typing import Protocol

from .instruments import DEFAULT_SCOPE, Labels, Number
from .models import InstrumentKind, MetricsSnapshotModel
from .registry import MeasurementEvent, MetricsRegistry


class IMetricsCollector(Protocol):
    """Protocol defining the interface for metrics ingestion."""

    def record_event(
        self,
        instrument_name: str,
        kind: InstrumentKind,
        value: Number,
        labels: Labels = None,
        scope: str = DEFAULT_SCOPE,
    ) -> None:
        """Record a single measurement.

        Args:
            instrument_name: Name of the instrument, created on first use
            kind: Instrument kind; must match an existing registration
            value: Measurement value
            labels: Key/value tags selecting the sub-series
            scope: Meter name owning the instrument
        """
        ...

    def snapshot(self) -> MetricsSnapshotModel:
        """Get current metrics snapshot as Pydantic model."""
        ...

    def is_enabled(self) -> bool:
        """Check if metrics collection is enabled."""
        ...


class MetricsCollector:
    """Real metrics collector implementation.

    Turns each call into a MeasurementEvent and applies it to the owned
    MetricsRegistry. KindMismatchError and InvalidMeasurementError propagate
    to the caller.
    """

    def __init__(self, registry: MetricsRegistry):
        """Initialize with a metrics registry.

        Args:
            registry: MetricsRegistry instance to store data in
        """
        self.registry = registry

    def record_event(
        self,
        instrument_name: str,
        kind: InstrumentKind,
        value: Number,
        labels: Labels = None,
        scope: str = DEFAULT_SCOPE,
    ) -> None:
        """Record a single measurement into the registry."""
        self.registry.apply(MeasurementEvent.create(instrument_name, kind, value, labels, scope=scope))

    def snapshot(self) -> MetricsSnapshotModel:
        """Get current metrics snapshot as Pydantic model."""
        return self.registry.snapshot()

    def is_enabled(self) -> bool:
        """Check if metrics collection is enabled."""
        return True
