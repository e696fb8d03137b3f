"""Application-scoped metrics wiring.

Builds the registry, collector and exporter from settings. The resulting
MetricsRuntime is stored on ``app.state`` by the application lifespan and
reached by handlers through FastAPI dependencies, so there is no
module-level collector singleton.
"""

from dataclasses import dataclass
from typing import Optional

from app.core.logging_config import get_logger
from .collector import IMetricsCollector, MetricsCollector
from .exporter import PeriodicExporter
from .null_collector import NullMetricsCollector
from .registry import MetricsRegistry
from .sinks import build_sink

logger = get_logger(__name__)


@dataclass
class MetricsRuntime:
    collector: IMetricsCollector
    exporter: Optional[PeriodicExporter] = None

    async def start(self) -> None:
        if self.exporter is not None:
            self.exporter.start()

    async def stop(self) -> None:
        if self.exporter is not None:
            await self.exporter.stop()


def create_metrics_runtime(config) -> MetricsRuntime:
    """Build the metrics pipeline described by ``config``.

    Args:
        config: Settings object exposing the METRICS_* options

    Returns:
        MetricsRuntime with a real registry and exporter, or with only a
        NullMetricsCollector when metrics are disabled

    Raises:
        ValueError: invalid sink target or export interval
    """
    if not config.METRICS_ENABLED:
        logger.info("Metrics disabled, using null collector")
        return MetricsRuntime(collector=NullMetricsCollector())

    registry = MetricsRegistry(service_label=config.METRICS_SERVICE_LABEL)
    exporter = PeriodicExporter(
        registry,
        build_sink(config.METRICS_SINK),
        interval=config.METRICS_EXPORT_INTERVAL,
        shutdown_timeout=config.METRICS_SHUTDOWN_TIMEOUT,
    )
    return MetricsRuntime(collector=MetricsCollector(registry), exporter=exporter)
