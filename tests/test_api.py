from __future__ import annotations

import io
import json
import zipfile

import pytest
from fastapi.testclient import TestClient

from caption_api.api import captions as captions_api
from caption_api.api import ollama as ollama_api
from caption_api.api.captions import _parse_max_chars, _sse
from caption_api.captions.batch import CaptionRequest, run_batch
from caption_api.core.exceptions import CaptionGenerationError
from caption_api.core.settings import settings
from caption_api.main import app


class _StubGenerator:
    def __init__(self, replies: dict[str, str], fail_on: set[str] | None = None):
        self.replies = replies
        self.fail_on = fail_on or set()
        self.seen: list[CaptionRequest] = []

    def generate(self, request: CaptionRequest) -> str:
        self.seen.append(request)
        if request.name in self.fail_on:
            raise CaptionGenerationError("model overloaded")
        return self.replies.get(request.name, "")


@pytest.fixture()
def client() -> TestClient:
    return TestClient(app)


def _events(body: str) -> list[dict]:
    chunks = [c for c in body.split("\n\n") if c.strip()]
    return [json.loads(c[len("data: "):]) for c in chunks]


def test_stream_captions_in_upload_order(client: TestClient, monkeypatch: pytest.MonkeyPatch, png_bytes: bytes) -> None:
    stub = _StubGenerator(
        {"b.png": "This image shows a red fox.", "a.png": "A cat on a mat."},
        fail_on={"c.png"},
    )
    captured = {}

    def fake_build(**kwargs):
        captured.update(kwargs)
        return stub

    monkeypatch.setattr(captions_api, "build_generator", fake_build)

    files = [
        ("images", ("b.png", png_bytes, "image/png")),
        ("images", ("c.png", png_bytes, "image/png")),
        ("images", ("a.png", png_bytes, "application/octet-stream")),
    ]
    data = {"prefix": "TOK", "promptStyleId": "sdxl-tags", "service": "ollama", "model": "llava"}

    resp = client.post("/api/v1/captions/stream", files=files, data=data)

    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/event-stream")
    events = _events(resp.text)
    assert [e["filename"] for e in events] == ["b.txt", "c.txt", "a.txt"]
    assert events[0] == {"ok": True, "filename": "b.txt", "caption": "TOK, a red fox"}
    assert events[1]["ok"] is False
    assert events[1]["caption"] == "Error: model overloaded"
    assert events[2]["caption"] == "TOK, a cat on a mat"

    assert captured["service"] == "ollama"
    assert captured["model"] == "llava"
    first = stub.seen[0]
    assert first.config.max_chars == 450
    assert first.system_message.startswith("Generate SDXL training tags")
    assert stub.seen[2].content_type == "image/png"


def test_stream_uses_form_prompts_and_limit(client: TestClient, monkeypatch: pytest.MonkeyPatch, png_bytes: bytes) -> None:
    stub = _StubGenerator({"x.png": "a very long caption about a cat"})
    monkeypatch.setattr(captions_api, "build_generator", lambda **kwargs: stub)

    resp = client.post(
        "/api/v1/captions/stream",
        files=[("images", ("x.png", png_bytes, "image/png"))],
        data={"systemMessage": "sys", "userPrompt": "usr", "maxChars": "13", "detail": "low"},
    )

    assert _events(resp.text)[0]["caption"] == "A very long"
    seen = stub.seen[0]
    assert (seen.system_message, seen.user_prompt, seen.detail) == ("sys", "usr", "low")
    assert seen.config.negative_filters == ()


def test_stream_without_api_key_is_rejected(client: TestClient, monkeypatch: pytest.MonkeyPatch, png_bytes: bytes) -> None:
    monkeypatch.setattr(settings, "openai_api_key", None)

    resp = client.post(
        "/api/v1/captions/stream",
        files=[("images", ("x.png", png_bytes, "image/png"))],
        data={"service": "openai"},
    )

    assert resp.status_code == 400
    assert resp.json()["error"] == "OpenAI API key is required"


def test_stream_unknown_style_is_404(client: TestClient, png_bytes: bytes) -> None:
    resp = client.post(
        "/api/v1/captions/stream",
        files=[("images", ("x.png", png_bytes, "image/png"))],
        data={"promptStyleId": "nope", "apiKey": "sk-test"},
    )

    assert resp.status_code == 404
    assert resp.json()["ok"] is False


@pytest.mark.parametrize("raw, expected", [(None, None), ("", None), ("abc", None), ("0", None), ("-3", None), (" 120 ", 120)])
def test_parse_max_chars(raw, expected) -> None:
    assert _parse_max_chars(raw) == expected


def test_archive_download(client: TestClient) -> None:
    payload = {
        "items": [
            {"filename": "cat.txt", "caption": "A cat"},
            {"filename": "dog.txt", "caption": "Error: timeout", "ok": False},
            {"filename": "../evil.txt", "caption": "sneaky"},
        ]
    }

    resp = client.post("/api/v1/captions/archive", json=payload)

    assert resp.status_code == 200
    assert resp.headers["content-type"] == "application/zip"
    assert settings.archive_filename in resp.headers["content-disposition"]
    with zipfile.ZipFile(io.BytesIO(resp.content)) as zf:
        assert sorted(zf.namelist()) == ["cat.txt", "evil.txt"]
        assert zf.read("cat.txt").decode() == "A cat"


def test_presets_routes(client: TestClient) -> None:
    styles = client.get("/api/v1/presets/styles").json()
    assert styles["default"] == "flux-semantic"
    assert len(styles["styles"]) == 9

    style = client.get("/api/v1/presets/styles/booru-tags").json()["style"]
    assert style["defaultMaxChars"] == 400

    z_person = client.get("/api/v1/presets/templates", params={"model_type": "z-image", "category": "person"}).json()
    assert len(z_person["templates"]) == 2

    missing = client.get("/api/v1/presets/templates/nope")
    assert missing.status_code == 404


def test_ollama_routes(client: TestClient, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(ollama_api, "ollama_status", lambda url: {"status": "running", "url": url})
    monkeypatch.setattr(ollama_api, "list_ollama_models", lambda url: [{"name": "llava"}])

    assert client.get("/api/v1/ollama/status", params={"url": "http://box:11434"}).json()["url"] == "http://box:11434"
    models = client.get("/api/v1/ollama/models").json()
    assert models == {"ok": True, "count": 1, "models": [{"name": "llava"}]}


def test_healthz_and_correlation_header(client: TestClient) -> None:
    resp = client.get("/healthz", headers={"X-Correlation-ID": "req-123"})

    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"
    assert resp.headers["X-Correlation-ID"] == "req-123"


def test_stream_response_echoes_correlation_header(client: TestClient, monkeypatch: pytest.MonkeyPatch, png_bytes: bytes) -> None:
    monkeypatch.setattr(captions_api, "build_generator", lambda **kwargs: _StubGenerator({"x.png": "a cat"}))

    resp = client.post(
        "/api/v1/captions/stream",
        files=[("images", ("x.png", png_bytes, "image/png"))],
        headers={"X-Correlation-ID": "batch-7"},
    )

    assert resp.status_code == 200
    assert resp.headers["X-Correlation-ID"] == "batch-7"
    assert _events(resp.text)[0]["caption"] == "A cat"


def test_closing_the_event_stream_stops_the_batch(png_bytes: bytes) -> None:
    stub = _StubGenerator({"a.png": "a cat", "b.png": "a dog", "c.png": "a fox"})
    requests = [
        CaptionRequest(image=png_bytes, name=name, system_message="sys", user_prompt="usr")
        for name in ("a.png", "b.png", "c.png")
    ]
    batch = run_batch(requests, stub.generate, correlation_id="batch-7")
    events = _sse(batch)

    first = next(events)
    events.close()

    assert json.loads(first[len("data: "):])["filename"] == "a.txt"
    assert [r.name for r in stub.seen] == ["a.png"]
    with pytest.raises(StopIteration):
        next(batch)
