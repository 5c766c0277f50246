import logging

import httpx
from fastapi.testclient import TestClient

from songsmith.app.main import GENERATION_FAILED_MESSAGE, app
from songsmith.gateway import config
from songsmith.gateway.completion import CompletionClient
from songsmith.errors import AuthError, UpstreamError
from songsmith.lyrics.parser import count_words

from conftest import SAMPLE_LYRICS


def _payload(**overrides):
    body = {
        "keywords": ["love", "sunset"],
        "genre": "pop",
        "emotion": "happy",
        "language": "english",
    }
    body.update(overrides)
    return body


def test_health_check(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "healthy"
    assert data["version"] == "1.0.0"
    assert "timestamp" in data


def test_generate_success(client, fake_completion):
    resp = client.post("/api/v1/generate", json=_payload())
    assert resp.status_code == 200
    data = resp.json()

    assert data["id"]
    assert data["lyrics"]["title"] == "Sunset Love"
    assert list(data["lyrics"]["structure"]) == ["verse 1", "chorus", "verse 2"]

    metadata = data["metadata"]
    assert metadata["genre"] == "pop"
    assert metadata["emotion"] == "happy"
    assert metadata["language"] == "english"
    assert metadata["keywords_used"] == ["love", "sunset"]
    assert metadata["word_count"] == count_words(SAMPLE_LYRICS)
    assert metadata["created_at"]

    assert len(fake_completion.calls) == 1
    prompt = fake_completion.calls[0]["user_prompt"]
    assert "Number of verses: 2" in prompt
    assert "Include chorus: true" in prompt


def test_generate_returns_request_id_header(client):
    resp = client.post(
        "/api/v1/generate", json=_payload(), headers={"X-Request-ID": "req-123"}
    )
    assert resp.headers["X-Request-ID"] == "req-123"


def test_generate_ids_are_unique(client):
    first = client.post("/api/v1/generate", json=_payload()).json()
    second = client.post("/api/v1/generate", json=_payload()).json()
    assert first["id"] != second["id"]


def test_generate_invalid_genre(client, fake_completion):
    resp = client.post("/api/v1/generate", json=_payload(genre="unknown"))
    assert resp.status_code == 400
    data = resp.json()
    assert data["error"] == "invalid_genre"
    assert "pop" in data["message"]
    assert "rock" in data["message"]
    assert fake_completion.calls == []


def test_generate_invalid_emotion(client):
    resp = client.post("/api/v1/generate", json=_payload(emotion="invalid"))
    assert resp.status_code == 400
    assert resp.json()["error"] == "invalid_emotion"


def test_generate_invalid_language(client):
    resp = client.post("/api/v1/generate", json=_payload(language="klingon"))
    assert resp.status_code == 400
    assert resp.json()["error"] == "invalid_language"


def test_generate_no_keywords(client):
    resp = client.post("/api/v1/generate", json=_payload(keywords=[]))
    assert resp.status_code == 400
    assert resp.json()["error"] == "invalid_request"


def test_generate_missing_field(client):
    body = _payload()
    del body["genre"]
    resp = client.post("/api/v1/generate", json=body)
    assert resp.status_code == 400
    data = resp.json()
    assert data["error"] == "invalid_request"
    assert "genre" in data["message"]


def test_generate_upstream_failure_hides_detail(client, fake_completion):
    fake_completion.error = UpstreamError("status 503: secret upstream detail")
    resp = client.post("/api/v1/generate", json=_payload())
    assert resp.status_code == 500
    assert resp.json() == {
        "error": "generation_failed",
        "message": GENERATION_FAILED_MESSAGE,
    }


def test_generate_auth_failure(client, credentials, fake_completion):
    credentials.error = AuthError("OAuth error: invalid_client")
    resp = client.post("/api/v1/generate", json=_payload())
    assert resp.status_code == 500
    assert resp.json()["error"] == "generation_failed"
    assert fake_completion.calls == []


def test_generate_null_structure_uses_defaults(client, fake_completion):
    resp = client.post("/api/v1/generate", json=_payload(structure=None))
    assert resp.status_code == 200
    prompt = fake_completion.calls[0]["user_prompt"]
    assert "Number of verses: 2" in prompt
    assert "Include chorus: true" in prompt


def test_generate_malformed_upstream_body_returns_json_500(service):
    def handler(request):
        return httpx.Response(200, json={"choices": [{"message": {"content": 5}}]})

    service.completion_client = CompletionClient(
        "https://gateway.example.com/v1",
        http_client=httpx.Client(transport=httpx.MockTransport(handler)),
    )
    app.dependency_overrides[config.get_lyrics_service] = lambda: service
    try:
        resp = TestClient(app).post("/api/v1/generate", json=_payload())
    finally:
        app.dependency_overrides.clear()

    assert resp.status_code == 500
    assert resp.json() == {
        "error": "generation_failed",
        "message": GENERATION_FAILED_MESSAGE,
    }


def test_generation_failure_detail_is_logged(client, fake_completion, caplog):
    fake_completion.error = UpstreamError("status 503: upstream overloaded")
    with caplog.at_level(logging.ERROR):
        resp = client.post("/api/v1/generate", json=_payload())

    assert "upstream overloaded" not in resp.text
    failures = [r for r in caplog.records if getattr(r, "event", None) == "generation_failed"]
    assert len(failures) == 1
    assert failures[0].reason == "status 503: upstream overloaded"
    assert failures[0].error_type == "UpstreamError"
