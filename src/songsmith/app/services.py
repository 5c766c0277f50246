import logging
import uuid
from datetime import datetime, timezone

from ..errors import ValidationError
from ..gateway.completion import CompletionClient
from ..gateway.credentials import CredentialStrategy
from ..logging_utils import log_event
from ..lyrics import catalog
from ..lyrics.parser import count_words, parse_lyrics
from ..lyrics.prompt import SYSTEM_PROMPT, build_prompt
from .schemas import (
    GeneratedLyrics,
    GenerationRequest,
    LyricsMetadata,
    LyricsResponse,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_TOKENS = 1000
DEFAULT_TEMPERATURE = 0.8


def validate_request(request: GenerationRequest) -> None:
    """
    Checks a request against the documented constraints.

    Raises:
        ValidationError: naming the first offending field; for genre, emotion
            and language the message lists the supported values.
    """
    count = len(request.keywords)
    if not catalog.MIN_KEYWORDS <= count <= catalog.MAX_KEYWORDS:
        raise ValidationError(
            "invalid_request",
            f"keywords must contain between {catalog.MIN_KEYWORDS} and "
            f"{catalog.MAX_KEYWORDS} entries, got {count}",
        )
    if any(not keyword.strip() for keyword in request.keywords):
        raise ValidationError("invalid_request", "keywords must not be empty")

    verses = request.structure.verses
    if verses != 0 and not catalog.MIN_VERSES <= verses <= catalog.MAX_VERSES:
        raise ValidationError(
            "invalid_request",
            f"structure.verses must be between {catalog.MIN_VERSES} and "
            f"{catalog.MAX_VERSES}, got {verses}",
        )

    if not catalog.is_supported(request.genre, catalog.VALID_GENRES):
        raise ValidationError(
            "invalid_genre",
            "Unsupported genre. Supported genres: "
            + catalog.format_options(catalog.VALID_GENRES),
        )
    if not catalog.is_supported(request.emotion, catalog.VALID_EMOTIONS):
        raise ValidationError(
            "invalid_emotion",
            "Unsupported emotion. Supported emotions: "
            + catalog.format_options(catalog.VALID_EMOTIONS),
        )
    if not catalog.is_supported(request.language, catalog.VALID_LANGUAGES):
        raise ValidationError(
            "invalid_language",
            "Unsupported language. Supported languages: "
            + catalog.format_options(catalog.VALID_LANGUAGES),
        )


def apply_structure_defaults(request: GenerationRequest) -> GenerationRequest:
    """Returns a copy with an unset verse count and an unset chorus filled in."""
    structure = request.structure
    updates = {}
    if structure.verses == 0:
        updates["verses"] = catalog.DEFAULT_VERSES
    if structure.chorus is None:
        updates["chorus"] = True
    if not updates:
        return request
    return request.model_copy(
        update={"structure": structure.model_copy(update=updates)}
    )


class LyricsService:
    """
    Runs one lyrics generation from request to response envelope.

    The credential strategy decides how the completion call is authorized
    (static API key, or an OAuth token from the shared cache); everything
    else is the same for both deployments.
    """

    def __init__(
        self,
        completion_client: CompletionClient,
        credentials: CredentialStrategy,
        model: str,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        temperature: float = DEFAULT_TEMPERATURE,
    ):
        self.completion_client = completion_client
        self.credentials = credentials
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature

    def generate(self, request: GenerationRequest) -> LyricsResponse:
        validate_request(request)
        request = apply_structure_defaults(request)

        prompt = build_prompt(request)
        authorization = self.credentials.authorization_header()
        text = self.completion_client.complete_chat(
            system_prompt=SYSTEM_PROMPT,
            user_prompt=prompt,
            model=self.model,
            max_tokens=self.max_tokens,
            temperature=self.temperature,
            authorization=authorization,
        )

        parsed = parse_lyrics(text)
        word_count = count_words(text)

        response = LyricsResponse(
            id=str(uuid.uuid4()),
            lyrics=GeneratedLyrics(title=parsed.title, structure=parsed.sections),
            metadata=LyricsMetadata(
                genre=request.genre,
                emotion=request.emotion,
                language=request.language,
                keywords_used=list(request.keywords),
                created_at=datetime.now(timezone.utc),
                word_count=word_count,
            ),
        )
        log_event(
            logger,
            "lyrics_generated",
            level=logging.DEBUG,
            response_id=response.id,
            word_count=word_count,
            title=parsed.title,
            sections=list(parsed.sections),
        )
        return response
