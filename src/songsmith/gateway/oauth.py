# src/songsmith/gateway/oauth.py
import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional

import httpx

from ..errors import AuthError
from ..logging_utils import log_event, sanitize_for_logging

logger = logging.getLogger(__name__)

EXPIRY_BUFFER_SECONDS = 30.0
DEFAULT_EXPIRES_IN = 3600
DEFAULT_TIMEOUT = 30.0


@dataclass(frozen=True)
class CachedToken:
    value: str
    expires_at: float


class TokenCache:
    """
    Holds a single OAuth2 bearer token obtained with the client-credentials
    grant and refreshes it lazily.

    Readers take the current snapshot without locking; a snapshot is an
    immutable `CachedToken` swapped in one assignment, so it is never seen
    half-written. Refreshes are serialized behind `_refresh_lock` and re-check
    freshness once inside, so a burst of callers that all find the token stale
    results in a single exchange.

    Args:
        token_endpoint: URL of the OAuth2 token endpoint.
        client_id: Consumer key of the gateway application.
        client_secret: Consumer secret of the gateway application.
        scope: Optional space-separated scope string.
        timeout: Seconds allowed for the exchange when no client is given.
        http_client: httpx client used for the exchange.
        clock: Monotonic seconds source, replaceable in tests.
    """

    def __init__(
        self,
        token_endpoint: str,
        client_id: str,
        client_secret: str,
        scope: str = "",
        timeout: float = DEFAULT_TIMEOUT,
        http_client: Optional[httpx.Client] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.token_endpoint = token_endpoint
        self.client_id = client_id
        self.client_secret = client_secret
        self.scope = scope
        self._http = http_client or httpx.Client(timeout=timeout)
        self._clock = clock
        self._token: Optional[CachedToken] = None
        self._refresh_lock = threading.Lock()

    def _is_fresh(self, token: Optional[CachedToken]) -> bool:
        return (
            token is not None
            and self._clock() + EXPIRY_BUFFER_SECONDS < token.expires_at
        )

    def get_token(self) -> str:
        """Returns a bearer token that has more than 30 seconds left to live."""
        token = self._token
        if self._is_fresh(token):
            return token.value

        with self._refresh_lock:
            token = self._token
            if self._is_fresh(token):
                return token.value
            token = self._request_new_token()
            self._token = token
            return token.value

    def invalidate(self) -> None:
        with self._refresh_lock:
            self._token = None

    def _request_new_token(self) -> CachedToken:
        data = {
            "grant_type": "client_credentials",
            "client_id": self.client_id,
            "client_secret": self.client_secret,
        }
        if self.scope:
            data["scope"] = self.scope

        log_event(
            logger,
            "oauth_token_requested",
            level=logging.DEBUG,
            token_endpoint=self.token_endpoint,
            client_id=sanitize_for_logging(self.client_id),
            scope=self.scope,
        )

        try:
            response = self._http.post(
                self.token_endpoint,
                data=data,
                headers={"Accept": "application/json"},
            )
        except httpx.HTTPError as exc:
            log_event(
                logger,
                "oauth_token_request_failed",
                level=logging.ERROR,
                token_endpoint=self.token_endpoint,
                reason=str(exc),
            )
            raise AuthError(f"OAuth token request failed: {exc}") from exc

        try:
            body = response.json()
        except ValueError as exc:
            log_event(
                logger,
                "oauth_token_response_unparseable",
                level=logging.ERROR,
                status_code=response.status_code,
                body=response.text,
            )
            raise AuthError(f"failed to parse token response: {exc}") from exc
        if not isinstance(body, dict):
            raise AuthError(f"unexpected token response: {response.text}")

        if body.get("error"):
            log_event(
                logger,
                "oauth_token_error",
                level=logging.ERROR,
                error=body.get("error"),
                error_description=body.get("error_description", ""),
                status_code=response.status_code,
            )
            raise AuthError(
                f"OAuth error: {body.get('error')} - {body.get('error_description', '')}"
            )

        if response.status_code != 200:
            log_event(
                logger,
                "oauth_token_bad_status",
                level=logging.ERROR,
                status_code=response.status_code,
                body=response.text,
            )
            raise AuthError(
                f"OAuth token endpoint returned status {response.status_code}: {response.text}"
            )

        access_token = body.get("access_token") or ""
        if not access_token:
            raise AuthError("received empty access token")

        try:
            expires_in = int(body.get("expires_in") or 0)
        except (TypeError, ValueError):
            expires_in = 0
        if expires_in <= 0:
            expires_in = DEFAULT_EXPIRES_IN

        token = CachedToken(value=access_token, expires_at=self._clock() + expires_in)
        log_event(
            logger,
            "oauth_token_obtained",
            level=logging.DEBUG,
            token_type=body.get("token_type", ""),
            expires_in=expires_in,
        )
        return token
