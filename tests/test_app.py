"""Tests for the FastAPI application routes."""
from __future__ import annotations

import json
from unittest.mock import AsyncMock, patch

import httpx
import pytest
from fastapi.testclient import TestClient

from wordsnap import app as app_module
from wordsnap.app import app
from wordsnap.config import Settings
from wordsnap.errors import TransportError
from wordsnap.providers.llm_ollama import OllamaProvider


@pytest.fixture
def test_app(fake_provider):
    """Test app with in-memory settings and a swappable fake provider."""
    settings = Settings()
    state = {"llm": fake_provider(['{"items": []}'])}

    # Set globals BEFORE creating TestClient so startup() is a no-op
    app_module._settings = settings
    app_module._analysis_busy = False

    with patch("wordsnap.app.save_settings"), \
         patch("wordsnap.app._get_llm", side_effect=lambda: state["llm"]):
        client = TestClient(app, raise_server_exceptions=False)
        yield client, settings, state
        client.close()

    app_module._settings = None
    app_module._analysis_busy = False


def _upload(png_bytes, field="image"):
    return {field: ("sheet.png", png_bytes, "image/png")}


def _refusing_ollama() -> OllamaProvider:
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    return OllamaProvider(transport=httpx.MockTransport(handler))


class TestExtractAPI:
    def test_extract(self, test_app, fake_provider, sheet_reply, png_bytes):
        client, _, state = test_app
        state["llm"] = fake_provider([sheet_reply])
        resp = client.post("/api/extract", files=_upload(png_bytes))
        assert resp.status_code == 200
        assert resp.json() == {"items": [
            {"word": "cat", "meaning": "고양이"},
            {"word": "dog", "meaning": "개"},
            {"word": "apple", "meaning": ""},
            {"word": "run", "meaning": ""},
        ]}
        request, structured = state["llm"].calls[0]
        assert structured is True
        assert request.image == png_bytes
        assert request.mime == "image/png"

    @pytest.mark.parametrize("field", ["images", "file", "upload"])
    def test_alternate_field_names(self, test_app, fake_provider, sheet_reply, png_bytes, field):
        client, _, state = test_app
        state["llm"] = fake_provider([sheet_reply])
        resp = client.post("/api/extract", files=_upload(png_bytes, field))
        assert resp.status_code == 200
        assert len(resp.json()["items"]) == 4

    def test_no_file_lists_received_keys(self, test_app):
        client, _, _ = test_app
        resp = client.post("/api/extract", data={"note": "hello", "translate": "on"})
        assert resp.status_code == 400
        detail = resp.json()["detail"]
        assert "No file received" in detail
        assert "Got keys: [note, translate]" in detail

    def test_wrong_field_name(self, test_app, png_bytes):
        client, _, _ = test_app
        resp = client.post("/api/extract", files=_upload(png_bytes, "photo"))
        assert resp.status_code == 400
        assert "photo" in resp.json()["detail"]

    def test_oversize_upload(self, test_app, png_bytes):
        client, settings, state = test_app
        settings.max_upload_mb = 0
        resp = client.post("/api/extract", files=_upload(png_bytes))
        assert resp.status_code == 413
        assert state["llm"].call_count == 0

    def test_transport_error(self, test_app, fake_provider, png_bytes):
        client, _, state = test_app
        state["llm"] = fake_provider([TransportError(401, "bad key")])
        resp = client.post("/api/extract", files=_upload(png_bytes))
        assert resp.status_code == 502
        assert resp.json()["detail"] == "model 401: bad key"
        assert state["llm"].call_count == 1

    def test_recovery_failure(self, test_app, fake_provider, png_bytes):
        client, _, state = test_app
        state["llm"] = fake_provider(["nope", "still nope"])
        resp = client.post("/api/extract", files=_upload(png_bytes))
        assert resp.status_code == 502
        assert resp.json()["detail"] == "invalid JSON from model"
        assert state["llm"].call_count == 2

    def test_unreachable_model(self, test_app, png_bytes):
        client, _, state = test_app
        state["llm"] = _refusing_ollama()
        resp = client.post("/api/extract", files=_upload(png_bytes))
        assert resp.status_code == 502
        assert resp.json()["detail"] == "Ollama unreachable: connection refused"
        assert app_module._analysis_busy is False

    def test_busy(self, test_app, png_bytes):
        client, _, state = test_app
        app_module._analysis_busy = True
        resp = client.post("/api/extract", files=_upload(png_bytes))
        assert resp.status_code == 409
        assert state["llm"].call_count == 0

    def test_busy_flag_released_after_failure(self, test_app, fake_provider, png_bytes):
        client, _, state = test_app
        state["llm"] = fake_provider(["nope"])
        client.post("/api/extract", files=_upload(png_bytes))
        assert app_module._analysis_busy is False


class TestAnalyzeAPI:
    def test_defaults_use_image_meanings(self, test_app, fake_provider, sheet_reply, png_bytes):
        client, _, state = test_app
        state["llm"] = fake_provider([sheet_reply])
        resp = client.post("/api/analyze", files=_upload(png_bytes))
        assert resp.status_code == 200
        data = resp.json()
        assert data["count"] == 4
        assert [r["meaning"] for r in data["rows"]] == ["고양이", "개", "", ""]
        assert len(data["sheet"]) == 30
        assert data["sheet"][0] == [1, "cat", "고양이", 31, "", ""]
        assert state["llm"].call_count == 1

    def test_translate_off(self, test_app, fake_provider, sheet_reply, png_bytes):
        client, _, state = test_app
        state["llm"] = fake_provider([sheet_reply])
        resp = client.post("/api/analyze", files=_upload(png_bytes),
                           data={"translate": "off", "image_has_meaning": "off"})
        assert resp.status_code == 200
        assert all(r["meaning"] == "" for r in resp.json()["rows"])
        assert state["llm"].call_count == 1

    def test_batch_meanings_for_blanks(self, test_app, fake_provider, sheet_reply, items_json, png_bytes):
        client, _, state = test_app
        state["llm"] = fake_provider([
            sheet_reply,
            items_json(("apple", "사과"), ("cat", "캣")),
        ])
        resp = client.post("/api/analyze", files=_upload(png_bytes),
                           data={"translate": "on", "image_has_meaning": "off"})
        assert resp.status_code == 200
        rows = resp.json()["rows"]
        assert [(r["word"], r["meaning"]) for r in rows] == [
            ("cat", "고양이"),
            ("dog", "개"),
            ("apple", "사과"),
            ("run", ""),
        ]
        assert state["llm"].call_count == 2
        meanings_request = state["llm"].calls[1][0]
        assert "apple, run" in meanings_request.prompt

    def test_batch_failure_is_silent(self, test_app, fake_provider, sheet_reply, png_bytes):
        client, _, state = test_app
        state["llm"] = fake_provider([sheet_reply, TransportError(500, "down")])
        resp = client.post("/api/analyze", files=_upload(png_bytes),
                           data={"image_has_meaning": "none"})
        assert resp.status_code == 200
        assert [r["meaning"] for r in resp.json()["rows"]] == ["고양이", "개", "", ""]

    def test_pronunciations(self, test_app, fake_provider, sheet_reply, png_bytes):
        client, settings, state = test_app
        settings.fetch_pronunciations = True
        state["llm"] = fake_provider([sheet_reply])
        with patch("wordsnap.pronunciation.PronunciationLookup.ipa",
                   new=AsyncMock(return_value="/x/")):
            resp = client.post("/api/analyze", files=_upload(png_bytes))
        assert resp.status_code == 200
        assert all(r["ipa"] == "/x/" for r in resp.json()["rows"])


class TestMeaningsAPI:
    def test_meanings_in_input_order(self, test_app, fake_provider, items_json):
        client, _, state = test_app
        state["llm"] = fake_provider([items_json(("dog", "개"), ("cat", "고양이"))])
        resp = client.post("/api/meanings", json={"words": ["Cat", "bird", "dog"]})
        assert resp.status_code == 200
        assert resp.json() == {"items": [
            {"word": "Cat", "meaning": "고양이"},
            {"word": "bird", "meaning": ""},
            {"word": "dog", "meaning": "개"},
        ]}

    @pytest.mark.parametrize("body", [{}, {"words": []}, {"words": "cat"}, {"words": ["", None]}])
    def test_no_words(self, test_app, body):
        client, _, _ = test_app
        resp = client.post("/api/meanings", json=body)
        assert resp.status_code == 400
        assert resp.json()["detail"] == "No words"

    def test_upstream_failure(self, test_app, fake_provider):
        client, _, state = test_app
        state["llm"] = fake_provider(["not json"])
        resp = client.post("/api/meanings", json={"words": ["cat"]})
        assert resp.status_code == 502

    def test_unreachable_model(self, test_app):
        client, _, state = test_app
        state["llm"] = _refusing_ollama()
        resp = client.post("/api/meanings", json={"words": ["cat"]})
        assert resp.status_code == 502
        assert "unreachable" in resp.json()["detail"]


class TestSettingsAPI:
    def test_get_settings(self, test_app):
        client, _, _ = test_app
        resp = client.get("/api/settings")
        assert resp.status_code == 200
        data = resp.json()
        assert data["llm_provider"] == "openai"
        assert data["max_words"] == 60

    def test_update_settings(self, test_app):
        client, settings, _ = test_app
        resp = client.put("/api/settings", content=json.dumps({"max_words": 30, "bogus": 1}))
        assert resp.status_code == 200
        data = resp.json()
        assert data["max_words"] == 30
        assert "bogus" not in data
        assert settings.max_words == 30
