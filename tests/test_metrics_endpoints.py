"""
Integration tests for the tokenize and metrics REST API endpoints.

Uses FastAPI TestClient with the application lifespan, so every test gets
a fresh registry and exporter.
"""

from app.api.v1.tokenize import get_rng
from app.app import app


class FixedRng:
    def __init__(self, *values):
        self._values = list(values)

    def random(self):
        return self._values.pop(0)


def _override_rng(*values):
    rng = FixedRng(*values)
    app.dependency_overrides[get_rng] = lambda: rng


def _metric(client, name):
    data = client.get("/api/v1/metrics/").json()
    return next((m for m in data["metrics"] if m["name"] == name), None)


def teardown_function():
    app.dependency_overrides.clear()


def test_tokenize_counter_records_success_and_error(client):
    # 3 successes, 2 errors
    _override_rng(0.1, 0.2, 0.9, 0.3, 0.7)
    for _ in range(5):
        response = client.get("/api/v1/tokenize_counter")
        assert response.status_code == 200
        assert response.json() == "Ok"

    success = _metric(client, "success_counter")
    error = _metric(client, "error_counter")
    assert success["kind"] == "counter"
    assert success["scope"] == "tokenize_metric"
    assert success["data_points"][0]["labels"] == {"type": "success_tokenize"}
    assert success["data_points"][0]["value"] == 3
    assert error["data_points"][0]["labels"] == {"type": "error_tokenize"}
    assert error["data_points"][0]["value"] == 2


def test_tokenize_histogram_records_count_and_sum(client):
    _override_rng(0.1, 0.4)
    client.get("/api/v1/tokenize_histogram")
    client.get("/api/v1/tokenize_histogram")

    point = _metric(client, "success_histogram")["data_points"][0]
    assert point["count"] == 2
    assert point["sum"] == 2.0
    assert _metric(client, "error_histogram") is None


def test_tokenize_gauge_records_latest_value(client):
    _override_rng(0.8)
    client.get("/api/v1/tokenize_gauge")

    metric = _metric(client, "error_gauge")
    assert metric["kind"] == "gauge"
    assert metric["scope"] == "tokenize_gauge"
    assert metric["data_points"][0]["value"] == 1.0


def test_snapshot_carries_service_label(client):
    data = client.get("/api/v1/metrics/").json()
    assert data["resource"] == {"service.name": "test-service"}
    assert "timestamp" in data


def test_latency_middleware_records_api_requests(client):
    client.get("/api/v1/tokenize_counter")

    metric = _metric(client, "http_server_duration")
    assert metric["kind"] == "histogram"
    labels = [p["labels"] for p in metric["data_points"]]
    assert {
        "http.method": "GET",
        "http.route": "/api/v1/tokenize_counter",
        "http.status_code": "200",
    } in labels


def test_get_metrics_returns_503_when_disabled(disabled_client):
    response = disabled_client.get("/api/v1/metrics/")

    assert response.status_code == 503
    assert "disabled" in response.json()["detail"].lower()


def test_tokenize_still_works_when_disabled(disabled_client):
    response = disabled_client.get("/api/v1/tokenize_counter")
    assert response.status_code == 200
    assert response.json() == "Ok"


def test_exporter_health_when_enabled(client):
    response = client.get("/api/v1/metrics/health/exporter")

    assert response.status_code == 200
    data = response.json()
    assert data["metrics_enabled"] is True
    assert data["exporter_running"] is True
    assert data["state"] == "waiting"
    assert data["interval_s"] == 3600.0
    assert data["exports_completed"] == 0
    assert data["exports_failed"] == 0
    assert "version" in data


def test_exporter_health_always_200(disabled_client):
    response = disabled_client.get("/api/v1/metrics/health/exporter")

    assert response.status_code == 200
    data = response.json()
    assert data["metrics_enabled"] is False
    assert data["exporter_running"] is False
    assert data["state"] == "disabled"
    assert data["instrument_count"] == 0


def test_flush_exports_to_sink(client, capsys):
    client.get("/api/v1/tokenize_counter")

    response = client.post("/api/v1/metrics/flush")

    assert response.status_code == 200
    data = response.json()
    assert data["exported"] is True
    assert data["exports_completed"] == 1
    assert '"service.name": "test-service"' in capsys.readouterr().out


def test_flush_returns_503_when_disabled(disabled_client):
    response = disabled_client.post("/api/v1/metrics/flush")
    assert response.status_code == 503


def test_latency_labels_use_route_template_not_raw_url(client):
    for i in range(50):
        assert client.get(f"/api/v1/does-not-exist/{i}").status_code == 404

    metric = _metric(client, "http_server_duration")
    routes = {p["labels"]["http.route"] for p in metric["data_points"]}
    assert "unmatched" in routes
    assert not any("does-not-exist" in r for r in routes)
    unmatched = [p for p in metric["data_points"] if p["labels"]["http.route"] == "unmatched"]
    assert len(unmatched) == 1
    assert unmatched[0]["count"] == 50
    assert unmatched[0]["labels"]["http.status_code"] == "404"


def test_latency_labels_collapse_unknown_methods(client):
    for method in ("FOO", "BAR"):
        client.request(method, "/api/v1/tokenize_counter")

    metric = _metric(client, "http_server_duration")
    methods = {p["labels"]["http.method"] for p in metric["data_points"]}
    assert "FOO" not in methods
    assert "BAR" not in methods
    other = [p for p in metric["data_points"] if p["labels"]["http.method"] == "_OTHER"]
    assert sum(p["count"] for p in other) == 2
