from __future__ import annotations

from fastapi.testclient import TestClient


def test_health_without_backing_stores(client: TestClient) -> None:
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {
        "status": "ok",
        "checks": {"database": "not_configured", "redis": "not_configured"},
    }


def test_ready(client: TestClient) -> None:
    assert client.get("/ready").status_code == 200


def test_metrics_exposes_certification_counters(client: TestClient) -> None:
    client.get("/v1/certificates/tiers")
    resp = client.get("/metrics")
    assert resp.status_code == 200
    assert "text/plain" in resp.headers["content-type"]
    text = resp.text
    assert "credential_verifications_total" in text
    assert 'endpoint="/v1/certificates/tiers"' in text

