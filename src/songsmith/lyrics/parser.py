# src/songsmith/lyrics/parser.py
from dataclasses import dataclass, field

DEFAULT_TITLE = "Untitled Song"
FALLBACK_SECTION = "verse1"
TITLE_PREFIX = "title:"


@dataclass
class ParsedLyrics:
    title: str = DEFAULT_TITLE
    sections: dict[str, str] = field(default_factory=dict)


def _is_header(line: str) -> bool:
    return line.startswith("[") and line.endswith("]")


def parse_lyrics(text: str) -> ParsedLyrics:
    """
    Splits generated text into a title and named sections.

    Lines such as `[Verse 1]` or `[Chorus]` open a section; the lines that
    follow, up to the next header, become its content. `[Title: ...]` sets the
    title and closes any open section, so lines after it are dropped until the
    next header. Section names are lowercased, a header with no content lines
    is left out entirely, and a repeated header replaces the earlier content.

    If no section ends up with content, the whole text is kept under
    `verse1` so nothing the model wrote is lost.

    Args:
        text (str): Raw completion text.

    Returns:
        ParsedLyrics: The title (default "Untitled Song") and the sections in
                      order of first appearance.
    """
    lyrics = ParsedLyrics()
    current_section = ""
    current_content: list[str] = []

    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line:
            continue

        if _is_header(line):
            if current_section and current_content:
                lyrics.sections[current_section] = "\n".join(current_content)

            label = line.strip("[]").strip()
            if label.lower().startswith(TITLE_PREFIX):
                # Title keeps the casing the model used.
                lyrics.title = label[len(TITLE_PREFIX):].strip() or DEFAULT_TITLE
                current_section = ""
            else:
                current_section = label.lower()
            current_content = []
        elif current_section:
            current_content.append(line)

    if current_section and current_content:
        lyrics.sections[current_section] = "\n".join(current_content)

    if not lyrics.sections:
        lyrics.sections[FALLBACK_SECTION] = text

    return lyrics


def count_words(text: str) -> int:
    """Number of whitespace-separated tokens; punctuation stays attached."""
    return len(text.split())
