"""
Transport Tests
===============

Tests for the HTTP endpoints and the function-style handler.
"""

import pytest
from fastapi.testclient import TestClient

from conftest import OUTPUT_BUCKET, PHOTO_BUCKET, RecordingRenderer
from image_bundler import main
from image_bundler.errors import RenderError


@pytest.fixture
def wired(monkeypatch, store, make_pipeline):
    """Route every invocation to a pipeline built on the test store."""
    state = {"renderer": RecordingRenderer()}

    def fake_create_pipeline(settings):
        return make_pipeline(store, renderer=state["renderer"])

    monkeypatch.setattr(main, "create_pipeline", fake_create_pipeline)
    store.add(PHOTO_BUCKET, "A1_1.jpeg", b"photo-1")
    return state


@pytest.fixture
def client(wired):
    with TestClient(main.app) as test_client:
        yield test_client


class TestHttp:

    def test_root(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert response.json()["service"] == "ImageBundler"

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_invoke_ok(self, client, store, wired):
        response = client.post("/invoke", json={"item_code": "A1", "image_count": "1"})

        assert response.status_code == 200
        assert response.json() == {"result": "ok", "message": ""}
        assert (OUTPUT_BUCKET, "A1.zip") in store.objects
        assert wired["renderer"].closed

    def test_missing_field_is_400(self, client):
        response = client.post("/invoke", json={"item_code": "A1"})

        assert response.status_code == 400
        assert response.headers[main.ERROR_KIND_HEADER] == "MISSING_FIELD"
        assert response.json()["result"] == "error"

    def test_malformed_json_is_400(self, client):
        response = client.post(
            "/invoke",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.headers[main.ERROR_KIND_HEADER] == "FIELD_PARSE_ERROR"

    def test_render_failure_is_502(self, client, wired):
        wired["renderer"] = RecordingRenderer(error=RenderError("render service returned 503"))
        payload = {
            "item_code": "A1",
            "image_count": 1,
            "body": {"size_table": None, "size_zh": "S"},
        }

        response = client.post("/invoke", json=payload)

        assert response.status_code == 502
        assert response.headers[main.ERROR_KIND_HEADER] == "RENDER_ERROR"
        assert response.json() == {
            "result": "error",
            "message": "RENDER_ERROR: render service returned 503",
        }


class TestHandler:

    def test_success(self, wired):
        assert main.handler({"item_code": "A1", "image_count": 1}) == {
            "result": "ok",
            "message": "",
        }

    def test_failure_carries_error_type(self, wired):
        response = main.handler({"item_code": "A1", "image_count": "-1"})

        assert response["result"] == "error"
        assert response["error_type"] == "FIELD_PARSE_ERROR"
        assert response["message"] == "FIELD_PARSE_ERROR: failed to parse image count"
