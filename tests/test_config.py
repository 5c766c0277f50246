import pytest

from songsmith.gateway import config
from songsmith.gateway.credentials import ApiKeyCredentials, OAuthCredentials

GATEWAY_ENV = {
    "AI_GATEWAY_CONSUMER_KEY": "consumer-key",
    "AI_GATEWAY_CONSUMER_SECRET": "consumer-secret",
    "AI_GATEWAY_TOKEN_ENDPOINT": "https://auth.example.com/oauth/token",
    "AI_GATEWAY_ENDPOINT": "https://gateway.example.com/v1",
}
ALL_VARS = [*GATEWAY_ENV, "AUTH_MODE", "OPENAI_API_KEY", "OPENAI_BASE_URL", "AI_GATEWAY_SCOPE"]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ALL_VARS:
        monkeypatch.delenv(name, raising=False)


def test_gateway_key_selects_oauth(monkeypatch):
    for name, value in GATEWAY_ENV.items():
        monkeypatch.setenv(name, value)
    monkeypatch.setenv("AI_GATEWAY_SCOPE", "lyrics")

    credentials, base_url = config.build_credentials()

    assert isinstance(credentials, OAuthCredentials)
    assert base_url == "https://gateway.example.com/v1"
    assert credentials.token_cache.client_id == "consumer-key"
    assert credentials.token_cache.scope == "lyrics"


def test_api_key_mode(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")

    credentials, base_url = config.build_credentials()

    assert isinstance(credentials, ApiKeyCredentials)
    assert base_url == config.DEFAULT_BASE_URL
    assert credentials.authorization_header() == "Bearer sk-test"


def test_oauth_mode_requires_gateway_settings(monkeypatch):
    monkeypatch.setenv("AUTH_MODE", "oauth")
    monkeypatch.setenv("AI_GATEWAY_CONSUMER_KEY", "consumer-key")

    with pytest.raises(ValueError, match="AI_GATEWAY_CONSUMER_SECRET"):
        config.build_credentials()


def test_api_key_mode_requires_key():
    with pytest.raises(ValueError, match="OPENAI_API_KEY"):
        config.build_credentials()


def test_unknown_auth_mode(monkeypatch):
    monkeypatch.setenv("AUTH_MODE", "kerberos")
    with pytest.raises(ValueError, match="Unsupported AUTH_MODE"):
        config.get_auth_mode()
