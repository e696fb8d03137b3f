"""MetricsRegistry - In-memory state for all named instruments.

This module holds the process's instruments in session-only memory. The
registry is owned by the application and handed explicitly to request
handlers and to the periodic exporter; it is never reached through a
module-level global.

Label cardinality is not bounded here. A caller that records an unbounded
number of distinct label sets will grow memory without limit, so callers
are expected to keep label values to a small fixed vocabulary.
"""

import threading
import time
from dataclasses import dataclass, field
from typing import Dict, Optional, Sequence

from .errors import KindMismatchError
from .instruments import DEFAULT_SCOPE, INSTRUMENT_TYPES, Instrument, LabelKey, Labels, Number, canonical_labels
from .models import InstrumentKind, MetricsSnapshotModel


@dataclass(frozen=True)
class MeasurementEvent:
    """A single measurement produced by a handler, applied to one bucket."""
    name: str
    kind: InstrumentKind
    value: Number
    labels: LabelKey = ()
    timestamp: float = field(default_factory=time.time)
    scope: str = DEFAULT_SCOPE

    @classmethod
    def create(cls, name: str, kind: InstrumentKind, value: Number, labels: Labels = None,
               scope: str = DEFAULT_SCOPE) -> "MeasurementEvent":
        return cls(name=name, kind=InstrumentKind(kind), value=value, labels=canonical_labels(labels), scope=scope)


class MetricsRegistry:
    """Registry of uniquely named, typed instruments.

    Instrument creation is serialized by a single lock so concurrent first
    callers always share one instrument object. Recording never touches that
    lock: lookups of existing instruments are plain dict reads and updates
    go through the instrument's per-bucket locks.
    """

    def __init__(self, service_label: str = "unknown_service"):
        self.service_label = service_label
        self._instruments: Dict[str, Instrument] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._instruments)

    def __contains__(self, name: str) -> bool:
        return name in self._instruments

    def get(self, name: str) -> Optional[Instrument]:
        return self._instruments.get(name)

    def get_or_create(
        self,
        name: str,
        kind: InstrumentKind,
        scope: str = DEFAULT_SCOPE,
        description: str = "",
        unit: str = "",
        boundaries: Optional[Sequence[float]] = None,
    ) -> Instrument:
        """Return the instrument registered under ``name``, creating it if needed.

        Args:
            name: Unique instrument name
            kind: Instrument kind
            scope: Name of the meter that owns the instrument
            description: Optional human-readable description
            unit: Optional unit string
            boundaries: Explicit bucket boundaries (histograms only)

        Returns:
            The single instrument object for ``name``

        Raises:
            KindMismatchError: ``name`` is already registered with another kind
            ValueError: boundaries given for a non-histogram, or not increasing
        """
        kind = InstrumentKind(kind)
        instrument = self._instruments.get(name)
        if instrument is None:
            with self._lock:
                instrument = self._instruments.get(name)
                if instrument is None:
                    instrument = self._build(name, kind, scope, description, unit, boundaries)
                    self._instruments[name] = instrument
                    return instrument

        if instrument.kind is not kind:
            raise KindMismatchError(name, instrument.kind, kind)
        return instrument

    @staticmethod
    def _build(name, kind, scope, description, unit, boundaries) -> Instrument:
        cls = INSTRUMENT_TYPES[kind]
        if kind is InstrumentKind.HISTOGRAM:
            return cls(name, scope=scope, description=description, unit=unit, boundaries=boundaries)
        if boundaries is not None:
            raise ValueError(f"Bucket boundaries only apply to histograms, not {kind.value} '{name}'")
        return cls(name, scope=scope, description=description, unit=unit)

    def record(self, handle: Instrument, value: Number, labels: Labels = None) -> None:
        """Apply a measurement through an instrument handle."""
        handle.record(value, labels)

    def apply(self, event: MeasurementEvent) -> None:
        """Apply a MeasurementEvent, creating its instrument on first use."""
        instrument = self.get_or_create(event.name, event.kind, scope=event.scope)
        instrument.record(event.value, event.labels, timestamp=event.timestamp)

    def record_count(self) -> int:
        """Total number of measurements applied across all instruments."""
        with self._lock:
            instruments = list(self._instruments.values())
        return sum(instrument.update_count() for instrument in instruments)

    def snapshot(self) -> MetricsSnapshotModel:
        """Serialize current state into a frozen MetricsSnapshotModel.

        Each bucket is read under its own lock; different buckets may be
        read at slightly different instants.
        """
        with self._lock:
            instruments = list(self._instruments.values())

        return MetricsSnapshotModel(
            timestamp=time.time(),
            resource={"service.name": self.service_label},
            metrics=[instrument.collect() for instrument in instruments],
        )
