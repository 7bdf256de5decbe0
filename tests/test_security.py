import json
import logging

from fastapi.testclient import TestClient

from salat.app import app

PARAMS = {"lat": 21.3891, "lon": 39.8579, "tz": "Asia/Riyadh", "date": "2024-03-15"}


def test_reject_without_key(monkeypatch):
    monkeypatch.setenv("AUTH_ENABLED", "true")
    with TestClient(app, raise_server_exceptions=False) as client:
        r = client.get("/v1/prayer/today", params=PARAMS)
    assert r.status_code == 401


def test_reject_with_invalid_key(monkeypatch):
    monkeypatch.setenv("AUTH_ENABLED", "true")
    monkeypatch.setenv("API_KEYS", "valid123")
    with TestClient(app, raise_server_exceptions=False) as client:
        r = client.get("/v1/prayer/today", headers={"Authorization": "Bearer nope"}, params=PARAMS)
    assert r.status_code == 403


def test_allow_with_valid_key(monkeypatch):
    monkeypatch.setenv("AUTH_ENABLED", "true")
    monkeypatch.setenv("API_KEYS", "other, valid123")
    with TestClient(app, raise_server_exceptions=False) as client:
        r = client.get("/v1/prayer/today", headers={"Authorization": "Bearer valid123"}, params=PARAMS)
        health = client.get("/__health")
    assert r.status_code == 200
    assert health.status_code == 200


def test_rate_limit(monkeypatch):
    from salat.middleware.ratelimit import _counters

    monkeypatch.setenv("RATE_LIMIT_ENABLED", "true")
    monkeypatch.setenv("RATE_LIMIT_PER_MINUTE", "2")
    monkeypatch.setenv("AUTH_ENABLED", "false")
    _counters.clear()
    with TestClient(app, raise_server_exceptions=False) as client:
        for i in range(3):
            r = client.get("/v1/hijri/convert", params={"date": "2024-03-11"})
            if i < 2:
                assert r.status_code == 200
    assert r.status_code == 429
    _counters.clear()


def test_access_log_when_enabled(monkeypatch, caplog):
    monkeypatch.setenv("LOGGING_ENABLED", "true")
    monkeypatch.setenv("AUTH_ENABLED", "false")
    monkeypatch.setenv("RATE_LIMIT_ENABLED", "false")
    with caplog.at_level(logging.INFO, logger="salat.access"):
        with TestClient(app) as client:
            client.get("/v1/hijri/convert", params={"date": "2024-03-11"})
    records = [json.loads(r.getMessage()) for r in caplog.records if r.name == "salat.access"]
    assert records
    assert records[-1]["endpoint"] == "/v1/hijri/convert"
    assert records[-1]["status"] == 200
