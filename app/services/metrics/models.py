"""Pydantic V2 models for metrics snapshots and API responses.

This module defines all data models used for serializing metrics data
in REST endpoints and exporter sinks. Snapshot models are frozen: a snapshot
is a point-in-time copy and is never mutated after the registry builds it.
"""

from enum import Enum
from typing import Dict, List, Mapping, Optional, Union
from pydantic import BaseModel, ConfigDict


class InstrumentKind(str, Enum):
    """Kind of a registered instrument."""
    COUNTER = "counter"
    HISTOGRAM = "histogram"
    GAUGE = "gauge"


class NumberDataPointModel(BaseModel):
    """Counter or gauge value for a single label set"""
    model_config = ConfigDict(from_attributes=True, frozen=True)

    labels: Dict[str, str]
    value: Union[int, float]
    start_time: float
    time: float


class HistogramDataPointModel(BaseModel):
    """Histogram aggregation for a single label set.

    ``bucket_counts`` has one more entry than ``bounds``; the last entry
    counts values above the highest bound.
    """
    model_config = ConfigDict(from_attributes=True, frozen=True)

    labels: Dict[str, str]
    count: int
    sum: float
    min: Optional[float] = None
    max: Optional[float] = None
    bounds: List[float]
    bucket_counts: List[int]
    start_time: float
    time: float


DataPointModel = Union[HistogramDataPointModel, NumberDataPointModel]


class MetricModel(BaseModel):
    """All data points of one instrument"""
    model_config = ConfigDict(from_attributes=True, frozen=True)

    name: str
    kind: InstrumentKind
    scope: str
    description: str = ""
    unit: str = ""
    data_points: List[DataPointModel]

    def point(self, labels: Optional[Mapping[str, str]] = None) -> Optional[DataPointModel]:
        """Return the data point recorded with exactly ``labels``, if any."""
        wanted = {str(k): str(v) for k, v in (labels or {}).items()}
        return next((p for p in self.data_points if p.labels == wanted), None)


class MetricsSnapshotModel(BaseModel):
    """Root envelope for one export of all instruments"""
    model_config = ConfigDict(from_attributes=True, frozen=True)

    timestamp: float
    resource: Dict[str, str]
    metrics: List[MetricModel]

    def metric(self, name: str) -> Optional[MetricModel]:
        """Look up a metric by instrument name."""
        return next((m for m in self.metrics if m.name == name), None)


class ExporterHealthModel(BaseModel):
    """Lightweight health check response for the periodic exporter"""
    model_config = ConfigDict(from_attributes=True)

    metrics_enabled: bool
    exporter_running: bool
    state: str
    interval_s: float
    exports_completed: int
    exports_failed: int
    last_export_ts: Optional[float]
    last_error: Optional[str]
    instrument_count: int
    version: str


class FlushResultModel(BaseModel):
    """Result of a forced export"""
    model_config = ConfigDict(from_attributes=True)

    exported: bool
    exports_completed: int
    exports_failed: int
