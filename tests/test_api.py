import hashlib
import threading

import pytest
from fastapi.testclient import TestClient

import api_app
from config_store import ConfigStore

PASSWORD = "frame-shop"


@pytest.fixture
def store():
    return ConfigStore(password_digest=hashlib.sha256(PASSWORD.encode("utf-8")).hexdigest())


@pytest.fixture
def client(catalog, store):
    api_app.app.dependency_overrides[api_app.get_catalog_index] = lambda: catalog
    api_app.app.dependency_overrides[api_app.get_store] = lambda: store
    yield TestClient(api_app.app)
    api_app.app.dependency_overrides.clear()


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"ok": True}


def test_quote_golden(client):
    r = client.post("/quote", json={
        "width": 20,
        "height": "60",
        "frame_sku": "8694",
        "acrylic_type": "None",
        "backing_type": "None",
    })
    assert r.status_code == 200
    body = r.json()
    assert body["item_total"] == "105.74"
    assert body["shipping"] == "250.00"
    assert "sales_tax" not in body


def test_quote_accepts_fractions(client):
    r = client.post("/quote", json={"width": "16 1/2", "height": "20 1/2", "frame_sku": "8694"})
    assert r.status_code == 200
    assert r.json()["measurements"]["united_inches"] == 37


def test_quote_remote_shipping(client):
    r = client.post("/quote", json={
        "width": 20,
        "height": 20,
        "frame_sku": "8694",
        "city_state_zip": "Honolulu, HI 96815",
    })
    assert r.json()["shipping"] == "118.00"


def test_quote_requires_api_key_when_set(client, monkeypatch):
    monkeypatch.setattr(api_app, "API_KEY", "secret")
    assert client.post("/quote", json={"width": 10, "height": 10}).status_code == 401
    r = client.post("/quote", json={"width": 10, "height": 10}, headers={"x-api-key": "secret"})
    assert r.status_code == 200


def test_multi_quote(client):
    r = client.post("/multi-quote", json={
        "items": [
            {"width": 20, "height": 60, "frame_sku": "8694", "acrylic_type": "None", "backing_type": "None"},
            {"width": 8, "height": 10, "frame_sku": "8694", "acrylic_type": "None", "backing_type": "None"},
        ],
        "delivery_method": "pickup",
        "deposit": "$100",
    })
    assert r.status_code == 200
    body = r.json()
    assert len(body["items"]) == 2
    assert body["shipping"] == "0.00"
    assert body["balance"] == "40.99"


def test_control_panel_login(client):
    assert client.post("/control-panel/login", json={"password": PASSWORD}).status_code == 200
    assert client.post("/control-panel/login", json={"password": "bad"}).status_code == 401


def test_control_panel_config_hides_digest(client):
    body = client.get("/control-panel/config").json()
    assert body["markup"] == 2.75
    assert "auth_secret_digest" not in body


def test_control_panel_update_changes_quotes(client):
    r = client.post("/control-panel/config", json={"password": PASSWORD, "markup": 3.0})
    assert r.status_code == 200
    assert r.json()["markup"] == 3.0

    r = client.post("/quote", json={
        "width": 20, "height": 60, "frame_sku": "8694", "acrylic_type": "None", "backing_type": "None",
    })
    assert r.json()["item_total"] == "115.35"


def test_control_panel_update_errors(client):
    assert client.post("/control-panel/config", json={"password": "bad", "markup": 3}).status_code == 401
    r = client.post("/control-panel/config", json={"password": PASSWORD, "markup": "high"})
    assert r.status_code == 400


def test_catalog_listing(client):
    skus = {m["sku"] for m in client.get("/catalog/mouldings").json()}
    assert {"8694", "F101", "5102"} <= skus
    supplies = client.get("/catalog/supplies").json()
    assert {"sku": "B8501", "name": "Bright White mat", "price": 12.5} in supplies


def test_control_panel_rejects_non_finite_markup(client):
    r = client.post("/control-panel/config", json={"password": PASSWORD, "markup": "nan"})
    assert r.status_code == 400
    assert client.get("/control-panel/config").json()["markup"] == 2.75


def test_get_store_builds_once(monkeypatch, store):
    calls = []

    def fake_build():
        calls.append(1)
        return store

    monkeypatch.setattr(api_app, "_store", None)
    monkeypatch.setattr(api_app, "build_store", fake_build)

    results = []
    threads = [threading.Thread(target=lambda: results.append(api_app.get_store())) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(calls) == 1
    assert all(r is store for r in results)
