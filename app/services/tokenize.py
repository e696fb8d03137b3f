"""Coin-flip tokenize service that emits success/error measurements."""
import random
from typing import Dict, Tuple

from app.services.metrics import IMetricsCollector, InstrumentKind

SUCCESS_LABELS = {"type": "success_tokenize"}
ERROR_LABELS = {"type": "error_tokenize"}

# kind -> (meter scope, success instrument, error instrument, recorded value)
TOKENIZE_INSTRUMENTS: Dict[InstrumentKind, Tuple[str, str, str, float]] = {
    InstrumentKind.COUNTER: ("tokenize_metric", "success_counter", "error_counter", 1),
    InstrumentKind.HISTOGRAM: ("tokenize_histogram", "success_histogram", "error_histogram", 1.0),
    InstrumentKind.GAUGE: ("tokenize_gauge", "success_gauge", "error_gauge", 1.0),
}


def flip_coin(rng=random) -> bool:
    """Uniform success with probability 0.5."""
    return rng.random() < 0.5


def tokenize(collector: IMetricsCollector, kind: InstrumentKind, rng=random) -> bool:
    """Run one tokenize attempt and record its outcome.

    Args:
        collector: Collector to record into
        kind: Which instrument pair receives the measurement
        rng: Random source exposing random()

    Returns:
        True if the attempt succeeded
    """
    scope, success_name, error_name, value = TOKENIZE_INSTRUMENTS[kind]
    successful = flip_coin(rng)
    if successful:
        collector.record_event(success_name, kind, value, SUCCESS_LABELS, scope=scope)
    else:
        collector.record_event(error_name, kind, value, ERROR_LABELS, scope=scope)
    return successful
