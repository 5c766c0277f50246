# src/songsmith/gateway/completion.py
import logging
from typing import Optional

import httpx
import openai
from openai import OpenAI
from openai.types.chat import ChatCompletion
from pydantic import BaseModel

from ..errors import UpstreamError
from ..logging_utils import log_event, sanitize_for_logging

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


def _field(obj, name: str):
    # The SDK builds response models without validation, so nested values may
    # still be plain dicts, models, or something else entirely.
    if isinstance(obj, dict):
        return obj.get(name)
    return getattr(obj, name, None)


class CompletionClient:
    """
    Thin wrapper around the OpenAI chat-completions API.

    Works against the vendor endpoint or any OpenAI-compatible gateway; the
    caller supplies the `Authorization` header for each call, so the same
    client serves API-key and OAuth deployments. SDK retries are disabled,
    a failed call is reported once and the caller decides what to do.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str = "unused",
        timeout: float = DEFAULT_TIMEOUT,
        http_client: Optional[httpx.Client] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._client = OpenAI(
            api_key=api_key,
            base_url=self.base_url,
            timeout=timeout,
            max_retries=0,
            http_client=http_client,
        )

    def complete_chat(
        self,
        system_prompt: str,
        user_prompt: str,
        model: str,
        max_tokens: int,
        temperature: float,
        authorization: str,
    ) -> str:
        """
        Sends a system + user message pair and returns the first choice's text.

        Raises:
            UpstreamError: on transport failure or timeout, a non-200 status,
                an unparseable body, an `error` object in the body, or an
                empty `choices` list.
        """
        log_event(
            logger,
            "completion_requested",
            level=logging.DEBUG,
            model=model,
            gateway_url=f"{self.base_url}/chat/completions",
            prompt=sanitize_for_logging(user_prompt),
            authorization=sanitize_for_logging(authorization),
        )

        try:
            response = self._client.chat.completions.create(
                model=model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                max_tokens=max_tokens,
                temperature=temperature,
                extra_headers={"Authorization": authorization},
            )
        except openai.APIStatusError as exc:
            log_event(
                logger,
                "completion_bad_status",
                level=logging.ERROR,
                model=model,
                status_code=exc.status_code,
                reason=exc.message,
            )
            raise UpstreamError(
                f"completion endpoint returned status {exc.status_code}: {exc.message}"
            ) from exc
        except openai.APITimeoutError as exc:
            log_event(logger, "completion_timeout", level=logging.ERROR, model=model)
            raise UpstreamError("completion request timed out") from exc
        except openai.OpenAIError as exc:
            log_event(
                logger,
                "completion_request_failed",
                level=logging.ERROR,
                model=model,
                reason=str(exc),
            )
            raise UpstreamError(f"completion request failed: {exc}") from exc
        except ValueError as exc:
            log_event(
                logger,
                "completion_response_unparseable",
                level=logging.ERROR,
                model=model,
                reason=str(exc),
            )
            raise UpstreamError(f"failed to parse completion response: {exc}") from exc

        if not isinstance(response, ChatCompletion):
            log_event(
                logger,
                "completion_response_unparseable",
                level=logging.ERROR,
                model=model,
                body=str(response),
            )
            raise UpstreamError("completion endpoint returned a non-JSON body")

        error = getattr(response, "error", None)
        if error:
            message = error.get("message", str(error)) if isinstance(error, dict) else str(error)
            log_event(
                logger,
                "completion_api_error",
                level=logging.ERROR,
                model=model,
                error_message=message,
            )
            raise UpstreamError(f"completion API error: {message}")

        choices = getattr(response, "choices", None) or []
        if not isinstance(choices, list):
            raise self._malformed(model, "choices is not a list")
        if not choices:
            log_event(logger, "completion_no_choices", level=logging.ERROR, model=model)
            raise UpstreamError("no choices returned by completion endpoint")

        message = _field(choices[0], "message")
        if not isinstance(message, (dict, BaseModel)):
            raise self._malformed(model, "first choice has no message")
        content = _field(message, "content")
        if content is not None and not isinstance(content, str):
            raise self._malformed(model, "message content is not text")
        return content or ""

    def _malformed(self, model: str, reason: str) -> UpstreamError:
        log_event(
            logger,
            "completion_response_unparseable",
            level=logging.ERROR,
            model=model,
            reason=reason,
        )
        return UpstreamError("failed to parse completion response")
