# src/songsmith/gateway/credentials.py
from typing import Protocol

from .oauth import TokenCache


class CredentialStrategy(Protocol):
    """Anything that can produce the value of an `Authorization` header."""

    def authorization_header(self) -> str: ...


class ApiKeyCredentials:
    """Direct vendor access with a static API key."""

    def __init__(self, api_key: str):
        self.api_key = api_key

    def authorization_header(self) -> str:
        return f"Bearer {self.api_key}"


class OAuthCredentials:
    """AI gateway access with a client-credentials token from a `TokenCache`."""

    def __init__(self, token_cache: TokenCache):
        self.token_cache = token_cache

    def authorization_header(self) -> str:
        # AuthError from the cache propagates to the caller untouched.
        return f"Bearer {self.token_cache.get_token()}"
