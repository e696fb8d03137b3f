"""Exception hierarchy for the metrics pipeline."""


class MetricsError(Exception):
    """Base class for all metrics errors."""


class KindMismatchError(MetricsError):
    """An instrument name was requested with a kind other than the registered one."""

    def __init__(self, name: str, existing, requested):
        self.name = name
        self.existing = existing
        self.requested = requested
        super().__init__(
            f"Instrument '{name}' is already registered as {existing.value}, "
            f"cannot re-register it as {requested.value}"
        )


class InvalidMeasurementError(MetricsError):
    """A measurement value was rejected by its instrument."""


class SinkWriteError(MetricsError):
    """A sink failed to write a serialized snapshot."""
