import os


class Settings:
    # API Settings
    PROJECT_NAME: str = "Tokenize Metrics API"
    VERSION: str = "0.1.0"
    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", 8080))
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"

    # Metrics Settings
    METRICS_ENABLED: bool = os.getenv("METRICS_ENABLED", "true").lower() == "true"
    METRICS_EXPORT_INTERVAL: float = float(os.getenv("METRICS_EXPORT_INTERVAL", "5"))
    METRICS_SERVICE_LABEL: str = os.getenv("METRICS_SERVICE_LABEL", "open-telemetry")
    METRICS_SINK: str = os.getenv("METRICS_SINK", "console")  # "console", "stderr" or "file:<path>"
    METRICS_SHUTDOWN_TIMEOUT: float = float(os.getenv("METRICS_SHUTDOWN_TIMEOUT", "5"))


settings = Settings()
