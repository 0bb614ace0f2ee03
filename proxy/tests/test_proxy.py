import logging

import httpx
from fastapi.testclient import TestClient

from wallconnector_proxy.main import create_app


def make_app(handler):
    return create_app(
        target="wallconnector.local", timeout=2.0, transport=httpx.MockTransport(handler)
    )


def test_forwards_request_and_response():
    """Test that the proxy relays path, query and body unchanged"""
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json={"grid_v": 240.1})

    with TestClient(make_app(handler)) as client:
        response = client.get("/api/1/vitals?verbose=1")

    assert response.status_code == 200
    assert response.json() == {"grid_v": 240.1}
    assert response.headers["content-type"] == "application/json"
    assert str(seen[0].url) == "http://wallconnector.local/api/1/vitals?verbose=1"
    assert seen[0].headers["host"] == "wallconnector.local"


def test_forwards_method_and_body():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(201, text="accepted")

    with TestClient(make_app(handler)) as client:
        response = client.post("/api/1/settings", content=b'{"max_current": 32}')

    assert response.status_code == 201
    assert response.text == "accepted"
    assert seen[0].method == "POST"
    assert seen[0].content == b'{"max_current": 32}'


def test_forwards_other_methods():
    seen = []

    def handler(request):
        seen.append(request.method)
        return httpx.Response(204)

    with TestClient(make_app(handler)) as client:
        client.put("/api/1/settings", content=b"x")
        client.delete("/api/1/settings")

    assert seen == ["PUT", "DELETE"]


def test_request_body_is_logged(caplog):
    caplog.set_level(logging.INFO, logger="wallconnector_proxy.main")

    def handler(request):
        return httpx.Response(200)

    with TestClient(make_app(handler)) as client:
        client.post("/api/1/settings", content=b"charge_now=1")

    messages = [r.getMessage() for r in caplog.records]
    assert any(m.startswith("request:\nPOST /api/1/settings") and "charge_now=1" in m for m in messages)


def test_upstream_status_preserved():
    def handler(request):
        return httpx.Response(404, text="no such page")

    with TestClient(make_app(handler)) as client:
        response = client.get("/missing")

    assert response.status_code == 404
    assert response.text == "no such page"


def test_upstream_failure_returns_bad_gateway():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with TestClient(make_app(handler)) as client:
        response = client.get("/api/1/vitals")

    assert response.status_code == 502
    assert "connection refused" in response.text


def test_exchange_is_logged(caplog):
    caplog.set_level(logging.INFO, logger="wallconnector_proxy.main")

    def handler(request):
        return httpx.Response(200, json={"uptime_s": 5})

    with TestClient(make_app(handler)) as client:
        client.get("/api/1/lifetime")

    messages = [r.getMessage() for r in caplog.records]
    assert any(m.startswith("request:\nGET /api/1/lifetime") for m in messages)
    assert any(m.startswith("response:\n200") and '"uptime_s"' in m for m in messages)
