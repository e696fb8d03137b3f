"""
Tokenize Metrics API Server

A demonstration server whose endpoints flip a coin and record success/error
measurements into counters, histograms and gauges. A background exporter
writes a JSON snapshot of all instruments to the configured sink on a fixed
interval.

Environment Variables:
    METRICS_ENABLED: Enable metrics collection (default: true)
    METRICS_EXPORT_INTERVAL: Seconds between exports (default: 5)
    METRICS_SERVICE_LABEL: service.name attached to every snapshot (default: open-telemetry)
    METRICS_SINK: console, stderr or file:<path> (default: console)
    HOST: Server host address (default: 0.0.0.0)
    PORT: Server port (default: 8080)
    DEBUG: Enable debug mode with auto-reload (default: false)

CLI Usage:
    python main.py

    # Export every second to a file
    METRICS_EXPORT_INTERVAL=1 METRICS_SINK=file:metrics.jsonl python main.py
"""

import uvicorn

from app.core.config import settings

if __name__ == "__main__":
    port = settings.PORT
    host = settings.HOST

    print(f"Starting {settings.PROJECT_NAME} on {host}:{port}")
    print(f"Metrics: {'enabled' if settings.METRICS_ENABLED else 'disabled'}, "
          f"export every {settings.METRICS_EXPORT_INTERVAL}s to {settings.METRICS_SINK}")

    # If reload is enabled, restrict watch scope to backend code only.
    reload_enabled = bool(settings.DEBUG)
    reload_dirs = None
    if reload_enabled:
        from pathlib import Path

        repo_root = Path(__file__).resolve().parent
        reload_dirs = [str(repo_root / "app")]

    uvicorn.run(
        "app.app:app",
        host=host,
        port=port,
        reload=reload_enabled,
        reload_dirs=reload_dirs,
    )
