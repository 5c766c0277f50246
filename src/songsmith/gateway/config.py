# src/songsmith/gateway/config.py
import logging
import os

from dotenv import load_dotenv

from ..app.services import LyricsService
from ..logging_utils import log_event, sanitize_for_logging
from .completion import CompletionClient
from .credentials import ApiKeyCredentials, CredentialStrategy, OAuthCredentials
from .oauth import TokenCache

load_dotenv(".env")

logger = logging.getLogger(__name__)

APP_VERSION = "1.0.0"
DEFAULT_BASE_URL = "https://api.openai.com/v1"

OPENAI_MODEL = os.getenv("OPENAI_MODEL") or "gpt-3.5-turbo"
MAX_TOKENS = int(os.getenv("MAX_TOKENS", "1000"))
TEMPERATURE = float(os.getenv("TEMPERATURE", "0.8"))
REQUEST_TIMEOUT = float(os.getenv("REQUEST_TIMEOUT", "30"))
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT") or "8080")
CORS_ORIGINS = [
    origin.strip() for origin in os.getenv("CORS_ORIGINS", "*").split(",") if origin.strip()
]


def _require(*names: str) -> list[str]:
    values = [os.getenv(name) for name in names]
    missing = [name for name, value in zip(names, values) if not value]
    if missing:
        raise ValueError(f"{', '.join(missing)} not found in environment variables.")
    return values


def get_auth_mode() -> str:
    """
    Returns "oauth" or "api_key".

    AUTH_MODE wins when set; otherwise a configured gateway consumer key
    selects OAuth.
    """
    mode = (os.getenv("AUTH_MODE") or "").strip().lower()
    if not mode:
        mode = "oauth" if os.getenv("AI_GATEWAY_CONSUMER_KEY") else "api_key"
    if mode not in ("oauth", "api_key"):
        raise ValueError(f"Unsupported AUTH_MODE '{mode}'. Use 'oauth' or 'api_key'.")
    return mode


def build_credentials() -> tuple[CredentialStrategy, str]:
    """Returns the credential strategy and the completion base URL."""
    if get_auth_mode() == "oauth":
        consumer_key, consumer_secret, token_endpoint, gateway_url = _require(
            "AI_GATEWAY_CONSUMER_KEY",
            "AI_GATEWAY_CONSUMER_SECRET",
            "AI_GATEWAY_TOKEN_ENDPOINT",
            "AI_GATEWAY_ENDPOINT",
        )
        token_cache = TokenCache(
            token_endpoint=token_endpoint,
            client_id=consumer_key,
            client_secret=consumer_secret,
            scope=os.getenv("AI_GATEWAY_SCOPE", ""),
            timeout=REQUEST_TIMEOUT,
        )
        log_event(
            logger,
            "gateway_oauth_configured",
            token_endpoint=token_endpoint,
            gateway_url=gateway_url,
            consumer_key=sanitize_for_logging(consumer_key),
            model=OPENAI_MODEL,
        )
        return OAuthCredentials(token_cache), gateway_url

    (api_key,) = _require("OPENAI_API_KEY")
    base_url = os.getenv("OPENAI_BASE_URL") or DEFAULT_BASE_URL
    log_event(
        logger,
        "vendor_api_key_configured",
        base_url=base_url,
        api_key=sanitize_for_logging(api_key),
        model=OPENAI_MODEL,
    )
    return ApiKeyCredentials(api_key), base_url


_lyrics_service = None


def get_lyrics_service() -> LyricsService:
    """
    Returns the process-wide LyricsService, building it on the first call.
    """
    global _lyrics_service
    if _lyrics_service is None:
        credentials, base_url = build_credentials()
        _lyrics_service = LyricsService(
            completion_client=CompletionClient(base_url, timeout=REQUEST_TIMEOUT),
            credentials=credentials,
            model=OPENAI_MODEL,
            max_tokens=MAX_TOKENS,
            temperature=TEMPERATURE,
        )
    return _lyrics_service
