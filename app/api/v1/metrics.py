"""Metrics REST API endpoints.

This module provides HTTP endpoints for reading the current metrics
snapshot, checking exporter health and forcing an export.
"""

from fastapi import APIRouter, HTTPException, Depends, Request
from app.core.config import settings
from app.services.metrics import IMetricsCollector
from app.services.metrics.instance import MetricsRuntime
from app.services.metrics.models import (
    MetricsSnapshotModel,
    ExporterHealthModel,
    FlushResultModel,
)

router = APIRouter(prefix="/metrics", tags=["metrics"])

DISABLED_DETAIL = "Metrics collection is disabled. Set METRICS_ENABLED=true to enable."


def get_metrics_runtime(request: Request) -> MetricsRuntime:
    """FastAPI dependency returning the app-owned metrics runtime."""
    return request.app.state.metrics


def get_collector(runtime: MetricsRuntime = Depends(get_metrics_runtime)) -> IMetricsCollector:
    """FastAPI dependency for metrics collector injection."""
    return runtime.collector


@router.get("/", response_model=MetricsSnapshotModel)
async def get_metrics_snapshot(collector: IMetricsCollector = Depends(get_collector)):
    """Get full metrics snapshot.

    Raises:
        HTTPException: 503 if metrics collection is disabled
    """
    if not collector.is_enabled():
        raise HTTPException(status_code=503, detail=DISABLED_DETAIL)

    return collector.snapshot()


@router.get("/health/exporter", response_model=ExporterHealthModel)
async def get_exporter_health(runtime: MetricsRuntime = Depends(get_metrics_runtime)):
    """Get exporter health status.

    Lightweight health check that always returns 200, even when metrics
    are disabled.
    """
    exporter = runtime.exporter
    if exporter is None:
        return ExporterHealthModel(
            metrics_enabled=False,
            exporter_running=False,
            state="disabled",
            interval_s=settings.METRICS_EXPORT_INTERVAL,
            exports_completed=0,
            exports_failed=0,
            last_export_ts=None,
            last_error=None,
            instrument_count=0,
            version=settings.VERSION,
        )

    return ExporterHealthModel(
        metrics_enabled=runtime.collector.is_enabled(),
        exporter_running=exporter.is_running,
        state=exporter.state.value,
        interval_s=exporter.interval,
        exports_completed=exporter.exports_completed,
        exports_failed=exporter.exports_failed,
        last_export_ts=exporter.last_export_ts,
        last_error=exporter.last_error,
        instrument_count=len(exporter.registry),
        version=settings.VERSION,
    )


@router.post("/flush", response_model=FlushResultModel)
async def flush_metrics(runtime: MetricsRuntime = Depends(get_metrics_runtime)):
    """Force an immediate export to the configured sink.

    Raises:
        HTTPException: 503 if metrics collection is disabled
    """
    exporter = runtime.exporter
    if exporter is None:
        raise HTTPException(status_code=503, detail=DISABLED_DETAIL)

    exported = await exporter.force_flush()
    return FlushResultModel(
        exported=exported,
        exports_completed=exporter.exports_completed,
        exports_failed=exporter.exports_failed,
    )
