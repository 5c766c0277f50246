import pytest
from fastapi.testclient import TestClient

from songsmith.app.main import app
from songsmith.app.services import LyricsService
from songsmith.gateway import config

SAMPLE_LYRICS = """[Title: Sunset Love]
[Verse 1]
Golden light upon the bay
Love is here to stay
[Chorus]
Sing it loud, sing it clear
Sunset love is always near
[Verse 2]
Colors fading into blue
Every sunset brings me you"""


class FakeCompletionClient:
    """Records every call and answers with canned text or a canned error."""

    def __init__(self, text: str = SAMPLE_LYRICS, error: Exception = None):
        self.text = text
        self.error = error
        self.calls = []

    def complete_chat(self, **kwargs) -> str:
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        return self.text


class StaticCredentials:
    def __init__(self, header: str = "Bearer test-token", error: Exception = None):
        self.header = header
        self.error = error
        self.calls = 0

    def authorization_header(self) -> str:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.header


@pytest.fixture
def fake_completion():
    return FakeCompletionClient()


@pytest.fixture
def credentials():
    return StaticCredentials()


@pytest.fixture
def service(fake_completion, credentials):
    return LyricsService(
        completion_client=fake_completion,
        credentials=credentials,
        model="gpt-test",
    )


@pytest.fixture
def client(service):
    app.dependency_overrides[config.get_lyrics_service] = lambda: service
    yield TestClient(app)
    app.dependency_overrides.clear()
