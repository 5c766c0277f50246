# src/songsmith/lyrics/catalog.py
# Accepted values for the enumerated request fields, all lowercase.

VALID_GENRES = (
    "pop",
    "rock",
    "country",
    "hip-hop",
    "r&b",
    "jazz",
    "folk",
    "electronic",
    "classical",
    "reggae",
    "blues",
    "indie",
)

VALID_EMOTIONS = (
    "happy",
    "sad",
    "romantic",
    "energetic",
    "melancholic",
    "hopeful",
    "nostalgic",
    "peaceful",
    "excited",
    "contemplative",
)

VALID_LANGUAGES = (
    "english",
    "spanish",
    "french",
    "german",
    "italian",
    "portuguese",
    "japanese",
    "korean",
)

MIN_KEYWORDS = 1
MAX_KEYWORDS = 10
MIN_VERSES = 1
MAX_VERSES = 4
DEFAULT_VERSES = 2


def is_supported(value: str, options: tuple[str, ...]) -> bool:
    """Case-insensitive membership test."""
    return value.strip().lower() in options


def format_options(options: tuple[str, ...]) -> str:
    return ", ".join(options)
