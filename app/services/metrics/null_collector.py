"""NullMetricsCollector - No-op implementation for disabled metrics.

This module provides a null object pattern implementation that does nothing
when metrics are disabled, allowing handlers to record unconditionally.
"""

from .instruments import DEFAULT_SCOPE
from .models import MetricsSnapshotModel


class NullMetricsCollector:
    """No-op metrics collector for when metrics are disabled.

    record_event() discards its input. The snapshot() method returns a valid
    empty MetricsSnapshotModel to maintain API contracts.
    """

    def record_event(self, instrument_name, kind, value, labels=None, scope=DEFAULT_SCOPE) -> None:
        """No-op: record a measurement."""
        pass

    def snapshot(self) -> MetricsSnapshotModel:
        """Return valid empty MetricsSnapshotModel."""
        return MetricsSnapshotModel(timestamp=0.0, resource={}, metrics=[])

    def is_enabled(self) -> bool:
        """Always returns False for null collector."""
        return False
