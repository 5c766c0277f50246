# src/songsmith/lyrics/prompt.py
from ..app.schemas import GenerationRequest

SYSTEM_PROMPT = (
    "You are a professional songwriter who creates family-friendly, appropriate "
    "lyrics for all ages. Always ensure content is positive and suitable for children."
)

USER_PROMPT_TEMPLATE = """Write song lyrics in {language} with the following specifications:

Genre: {genre}
Emotion/Mood: {emotion}
Keywords to include: {keywords}
Number of verses: {verses}
Include chorus: {chorus}
Include bridge: {bridge}

Requirements:
- Family-friendly content only (suitable for all ages)
- No explicit language, violence, or inappropriate themes
- Creative and engaging lyrics that flow well
- Natural incorporation of the provided keywords
- Clear structure with labeled sections

Please format the output with clear section labels like:
[Title: Song Title Here]
[Verse 1]
...
[Chorus]
...
[Verse 2]
...
[Bridge] (if requested)
...

Make sure the lyrics capture the {emotion} emotion and fit the {genre} genre style."""


def _flag(value) -> str:
    return "true" if value else "false"


def build_prompt(request: GenerationRequest) -> str:
    """
    Renders the user prompt for a request whose structure defaults have
    already been applied. Same request in, same prompt out.
    """
    structure = request.structure
    return USER_PROMPT_TEMPLATE.format(
        language=request.language,
        genre=request.genre,
        emotion=request.emotion,
        keywords=", ".join(request.keywords),
        verses=structure.verses,
        chorus=_flag(structure.chorus),
        bridge=_flag(structure.bridge),
    )
