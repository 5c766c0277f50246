# src/songsmith/logging_utils.py
import contextvars
import json
import logging
import os
import sys
import uuid
from datetime import datetime, timezone
from typing import Any

request_id_var: contextvars.ContextVar[str] = contextvars.ContextVar(
    "request_id", default="-"
)

REDACTED_BEARER = "[REDACTED_BEARER_TOKEN]"
REDACTED_API_KEY = "[REDACTED_API_KEY]"
REDACTED_TOKEN = "[REDACTED_TOKEN]"
REDACTED_CREDENTIALS = "[REDACTED_CREDENTIALS]"

TOKEN_PREFIXES = ("sk-", "pk-", "api_", "token_", "ey", "access_token")

# Attributes every LogRecord carries; anything else came in through `extra`.
_RESERVED_ATTRS = set(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


def sanitize_for_logging(value: str) -> str:
    """
    Replaces anything that looks like a credential with a redaction marker.

    Bearer headers, API keys and tokens with a well-known prefix, and long
    strings mentioning a client id or secret are all masked. Other values
    pass through unchanged.
    """
    if not value:
        return value
    lowered = value.lower()
    if "bearer " in lowered:
        return REDACTED_BEARER
    if lowered.startswith("sk-"):
        return REDACTED_API_KEY
    if lowered.startswith(TOKEN_PREFIXES):
        return REDACTED_TOKEN
    if len(value) > 20 and ("secret" in lowered or "client" in lowered):
        return REDACTED_CREDENTIALS
    return value


class RequestContextFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "request_id"):
            record.request_id = request_id_var.get()
        if not hasattr(record, "event"):
            if isinstance(record.msg, str) and not record.args:
                record.event = record.msg
            else:
                record.event = "log"
        return True


class StructuredFormatter(logging.Formatter):
    """Renders records as `key=value` pairs, or as JSON lines."""

    def __init__(self, json_output: bool) -> None:
        super().__init__()
        self.json_output = json_output

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "event": getattr(record, "event", "log"),
            "request_id": getattr(record, "request_id", "-"),
        }
        message = record.getMessage()
        if message and message != payload["event"]:
            payload["message"] = message

        for key, value in record.__dict__.items():
            if key.startswith("_") or key in _RESERVED_ATTRS or key in payload:
                continue
            payload[key] = value

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        if self.json_output:
            return json.dumps(payload, default=str)
        return " ".join(f"{key}={value}" for key, value in payload.items())


def configure_logging_from_env() -> None:
    root = logging.getLogger()
    if getattr(root, "_songsmith_logging_configured", False):
        return

    level_name = os.getenv("LOG_LEVEL", "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)
    json_output = os.getenv("LOG_FORMAT", "text").lower() == "json"

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(StructuredFormatter(json_output=json_output))
    handler.addFilter(RequestContextFilter())

    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)
    root._songsmith_logging_configured = True  # type: ignore[attr-defined]


def new_request_id() -> str:
    return str(uuid.uuid4())


def log_event(
    logger: logging.Logger, event: str, level: int = logging.INFO, **fields: Any
) -> None:
    logger.log(level, event, extra={"event": event, **fields})
