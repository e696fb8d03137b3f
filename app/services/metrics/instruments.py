"""Metric instruments and their per-label-set buckets.

Each instrument owns a dict of buckets keyed by a canonical label key. A
bucket is created lazily on first use and lives as long as the instrument.
Every bucket carries its own lock, so concurrent records into different
buckets never contend and records into the same bucket are applied one at
a time. Snapshot reads take the same lock, so a bucket is never read
half-updated.
"""

import math
import threading
import time
from bisect import bisect_left
from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from .errors import InvalidMeasurementError
from .models import (
    DataPointModel, HistogramDataPointModel, InstrumentKind, MetricModel, NumberDataPointModel
)

LabelKey = Tuple[Tuple[str, str], ...]
Labels = Optional[Union[Mapping[str, Any], Iterable[Tuple[str, Any]]]]
Number = Union[int, float]

DEFAULT_SCOPE = "default"

# OpenTelemetry SDK default explicit bucket boundaries
DEFAULT_HISTOGRAM_BOUNDARIES: Tuple[float, ...] = (
    0.0, 5.0, 10.0, 25.0, 50.0, 75.0, 100.0, 250.0, 500.0, 750.0,
    1000.0, 2500.0, 5000.0, 7500.0, 10000.0,
)


def canonical_labels(labels: Labels = None) -> LabelKey:
    """Build an order-independent key for a label set.

    Args:
        labels: Mapping or iterable of (key, value) pairs. Keys and values
            are coerced to strings.

    Returns:
        Tuple of (key, value) pairs sorted by key

    Raises:
        InvalidMeasurementError: labels is not a mapping or an iterable of pairs
    """
    if not labels:
        return ()
    items = labels.items() if isinstance(labels, Mapping) else labels
    try:
        pairs = dict(items)
    except (TypeError, ValueError) as e:
        raise InvalidMeasurementError(f"Invalid label set {labels!r}: {e}") from e
    return tuple(sorted((str(k), str(v)) for k, v in pairs.items()))


def _check_finite(name: str, value: Number) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidMeasurementError(f"Instrument '{name}' expects a number, got {value!r}")
    if not math.isfinite(value):
        raise InvalidMeasurementError(f"Instrument '{name}' rejected non-finite value {value!r}")


@dataclass
class _Bucket:
    labels: LabelKey
    start_time: float = field(default_factory=time.time)
    time: float = 0.0
    updates: int = 0
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)


@dataclass
class CounterBucket(_Bucket):
    """Monotonic sum for one label set."""
    value: Number = 0

    def apply(self, value: Number, ts: float) -> None:
        with self.lock:
            self.value += value
            self.time = ts
            self.updates += 1

    def read(self) -> NumberDataPointModel:
        with self.lock:
            return NumberDataPointModel(
                labels=dict(self.labels),
                value=self.value,
                start_time=self.start_time,
                time=self.time,
            )


@dataclass
class GaugeBucket(_Bucket):
    """Last recorded value for one label set."""
    value: Number = 0.0

    def apply(self, value: Number, ts: float) -> None:
        with self.lock:
            self.value = value
            self.time = ts
            self.updates += 1

    def read(self) -> NumberDataPointModel:
        with self.lock:
            return NumberDataPointModel(
                labels=dict(self.labels),
                value=self.value,
                start_time=self.start_time,
                time=self.time,
            )


@dataclass
class HistogramBucket(_Bucket):
    """Count, sum, extremes and bucket counts for one label set."""
    bounds: Tuple[float, ...] = DEFAULT_HISTOGRAM_BOUNDARIES
    count: int = 0
    sum: float = 0.0
    min: Optional[float] = None
    max: Optional[float] = None
    bucket_counts: List[int] = field(default_factory=list)

    def __post_init__(self):
        if not self.bucket_counts:
            self.bucket_counts = [0] * (len(self.bounds) + 1)

    def apply(self, value: Number, ts: float) -> None:
        # Buckets are upper-inclusive: (bounds[i-1], bounds[i]]
        index = bisect_left(self.bounds, value)
        with self.lock:
            self.count += 1
            self.sum += value
            self.min = value if self.min is None else min(self.min, value)
            self.max = value if self.max is None else max(self.max, value)
            self.bucket_counts[index] += 1
            self.time = ts
            self.updates += 1

    def read(self) -> HistogramDataPointModel:
        with self.lock:
            return HistogramDataPointModel(
                labels=dict(self.labels),
                count=self.count,
                sum=self.sum,
                min=self.min,
                max=self.max,
                bounds=list(self.bounds),
                bucket_counts=list(self.bucket_counts),
                start_time=self.start_time,
                time=self.time,
            )


class Instrument:
    """Base class for named instruments.

    Subclasses set ``kind`` and implement ``_new_bucket`` and, where the
    kind restricts values, ``_validate``.
    """

    kind: ClassVar[InstrumentKind]

    def __init__(self, name: str, scope: str = DEFAULT_SCOPE, description: str = "", unit: str = ""):
        self.name = name
        self.scope = scope
        self.description = description
        self.unit = unit
        self._buckets: Dict[LabelKey, _Bucket] = {}
        self._buckets_lock = threading.Lock()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, scope={self.scope!r})"

    def _new_bucket(self, key: LabelKey) -> _Bucket:
        raise NotImplementedError

    def _validate(self, value: Number) -> None:
        _check_finite(self.name, value)

    def _bucket(self, key: LabelKey) -> _Bucket:
        bucket = self._buckets.get(key)
        if bucket is None:
            with self._buckets_lock:
                bucket = self._buckets.get(key)
                if bucket is None:
                    bucket = self._new_bucket(key)
                    self._buckets[key] = bucket
        return bucket

    def record(self, value: Number, labels: Labels = None, timestamp: Optional[float] = None) -> None:
        """Apply one measurement to the bucket for ``labels``.

        Raises:
            InvalidMeasurementError: value rejected by this instrument kind, or
                labels not a mapping or iterable of pairs
        """
        self._validate(value)
        self._bucket(canonical_labels(labels)).apply(value, time.time() if timestamp is None else timestamp)

    def buckets(self) -> List[_Bucket]:
        with self._buckets_lock:
            return list(self._buckets.values())

    def update_count(self) -> int:
        """Total number of measurements applied to this instrument."""
        total = 0
        for bucket in self.buckets():
            with bucket.lock:
                total += bucket.updates
        return total

    def collect(self) -> MetricModel:
        """Read every bucket into a frozen MetricModel."""
        points: List[DataPointModel] = [bucket.read() for bucket in self.buckets()]
        return MetricModel(
            name=self.name,
            kind=self.kind,
            scope=self.scope,
            description=self.description,
            unit=self.unit,
            data_points=points,
        )


class Counter(Instrument):
    kind = InstrumentKind.COUNTER

    def _new_bucket(self, key: LabelKey) -> CounterBucket:
        return CounterBucket(labels=key)

    def _validate(self, value: Number) -> None:
        _check_finite(self.name, value)
        if value < 0:
            raise InvalidMeasurementError(
                f"Counter '{self.name}' only accepts non-negative increments, got {value!r}"
            )


class Gauge(Instrument):
    kind = InstrumentKind.GAUGE

    def _new_bucket(self, key: LabelKey) -> GaugeBucket:
        return GaugeBucket(labels=key)


class Histogram(Instrument):
    kind = InstrumentKind.HISTOGRAM

    def __init__(
        self,
        name: str,
        scope: str = DEFAULT_SCOPE,
        description: str = "",
        unit: str = "",
        boundaries: Optional[Sequence[float]] = None,
    ):
        super().__init__(name, scope=scope, description=description, unit=unit)
        bounds = DEFAULT_HISTOGRAM_BOUNDARIES if boundaries is None else tuple(float(b) for b in boundaries)
        if any(b >= nxt for b, nxt in zip(bounds, bounds[1:])):
            raise ValueError(f"Histogram '{name}' boundaries must be strictly increasing: {list(bounds)}")
        self.boundaries = bounds

    def _new_bucket(self, key: LabelKey) -> HistogramBucket:
        return HistogramBucket(labels=key, bounds=self.boundaries)


INSTRUMENT_TYPES: Dict[InstrumentKind, type] = {
    InstrumentKind.COUNTER: Counter,
    InstrumentKind.HISTOGRAM: Histogram,
    InstrumentKind.GAUGE: Gauge,
}
