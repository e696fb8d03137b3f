from typing import List, Set

import pytest
from fastapi.testclient import TestClient

from app.services.metrics import SinkWriteError


class RecordingSink:
    """In-memory sink that can be told to fail on given write attempts (1-based)."""

    def __init__(self, fail_on: Set[int] = frozenset()):
        self.payloads: List[str] = []
        self.attempts = 0
        self.fail_on = set(fail_on)

    def write(self, payload: str) -> None:
        self.attempts += 1
        if self.attempts in self.fail_on:
            raise SinkWriteError(f"simulated failure on write {self.attempts}")
        self.payloads.append(payload)


@pytest.fixture
def recording_sink():
    return RecordingSink()


def _client(monkeypatch, enabled: bool):
    from app.core.config import settings

    # Long interval so no periodic export happens during a request test
    monkeypatch.setattr(settings, "METRICS_ENABLED", enabled)
    monkeypatch.setattr(settings, "METRICS_EXPORT_INTERVAL", 3600.0)
    monkeypatch.setattr(settings, "METRICS_SINK", "console")
    monkeypatch.setattr(settings, "METRICS_SERVICE_LABEL", "test-service")

    from app.app import app

    return TestClient(app)


@pytest.fixture
def client(monkeypatch):
    with _client(monkeypatch, enabled=True) as test_client:
        yield test_client


@pytest.fixture
def disabled_client(monkeypatch):
    with _client(monkeypatch, enabled=False) as test_client:
        yield test_client


@pytest.fixture
def sink_factory():
    return RecordingSink
