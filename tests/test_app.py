"""Tests for the HTTP endpoints in app."""

import time
from collections import deque
from concurrent.futures import ThreadPoolExecutor
from types import SimpleNamespace

import pytest
from fastapi import HTTPException
from fastapi.testclient import TestClient

import app as app_module
from app import app


@pytest.fixture
def client():
    app_module._ip_hits.clear()
    with TestClient(app) as c:
        yield c
    app_module._ip_hits.clear()


def test_healthz(client):
    resp = client.get("/healthz")
    assert resp.status_code == 200
    assert resp.json()["ok"] is True


def test_home_defaults_to_starters(client):
    resp = client.get("/")
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/html")
    assert 'data-active="starters"' in resp.text


def test_home_with_category(client):
    resp = client.get("/", params={"category": "desserts"})
    assert resp.status_code == 200
    assert 'data-active="desserts"' in resp.text


def test_home_rejects_unknown_category(client):
    assert client.get("/", params={"category": "brunch"}).status_code == 422


def test_menu_all(client):
    body = client.get("/menu").json()
    assert body["categories"] == ["starters", "mains", "desserts", "drinks"]
    assert [len(body["menu"][c]) for c in body["categories"]] == [4, 4, 4, 4]


def test_menu_category(client):
    body = client.get("/menu/desserts").json()
    assert body["category"] == "desserts"
    assert body["entries"][0] == {
        "name": "Dark Chocolate Soufflé",
        "description": "Raspberry coulis, crème fraîche, gold leaf",
        "price": "$14",
    }


def test_menu_category_not_found(client):
    resp = client.get("/menu/brunch")
    assert resp.status_code == 404
    assert "brunch" in resp.json()["detail"]


def test_menu_fragment_is_region_only(client):
    resp = client.get("/menu/mains/fragment")
    assert resp.status_code == 200
    assert resp.text.startswith('<div id="menu-region" data-active="mains">')
    assert "<html" not in resp.text
    assert "Saffron Risotto" in resp.text


def test_menu_fragment_not_found(client):
    assert client.get("/menu/brunch/fragment").status_code == 404


def test_rate_limit(client, monkeypatch):
    monkeypatch.setattr(app_module, "RATE_LIMIT_PER_MIN", 2)
    assert client.get("/menu").status_code == 200
    assert client.get("/menu").status_code == 200
    resp = client.get("/menu")
    assert resp.status_code == 429
    # liveness is not rate limited
    assert client.get("/healthz").status_code == 200


def test_idle_buckets_are_evicted_when_full(client, monkeypatch):
    monkeypatch.setattr(app_module, "MAX_IP_BUCKETS", 3)
    stale = time.time() - 3600
    for i in range(4):
        app_module._ip_hits[f"10.0.0.{i}"] = deque([stale])
    assert client.get("/menu").status_code == 200
    assert not any(ip.startswith("10.0.0.") for ip in app_module._ip_hits)


def test_busy_when_all_buckets_are_active(client, monkeypatch):
    monkeypatch.setattr(app_module, "MAX_IP_BUCKETS", 3)
    now = time.time()
    for i in range(3):
        app_module._ip_hits[f"10.0.0.{i}"] = deque([now])
    assert client.get("/menu").status_code == 503


def test_rate_limit_is_exact_under_concurrency(monkeypatch):
    app_module._ip_hits.clear()
    monkeypatch.setattr(app_module, "RATE_LIMIT_PER_MIN", 25)
    request = SimpleNamespace(client=SimpleNamespace(host="192.0.2.7"))

    def hit(_):
        try:
            app_module.rate_limit(request)
            return 200
        except HTTPException as e:
            return e.status_code

    with ThreadPoolExecutor(max_workers=16) as pool:
        statuses = list(pool.map(hit, range(200)))
    app_module._ip_hits.clear()
    assert statuses.count(200) == 25
    assert statuses.count(429) == 175


def test_missing_image_is_not_found(client):
    assert client.get("/images/hero-ambiance.jpg").status_code == 404
