from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class SongStructure(BaseModel):
    # 0 means "not given" and becomes the default verse count.
    verses: int = 0
    # None means "not given"; an explicit false is honored.
    chorus: Optional[bool] = None
    bridge: bool = False


class GenerationRequest(BaseModel):
    keywords: list[str]
    genre: str
    emotion: str
    language: str
    structure: SongStructure = Field(default_factory=SongStructure)

    @field_validator("structure", mode="before")
    def null_structure_means_defaults(cls, v):
        return {} if v is None else v


class GeneratedLyrics(BaseModel):
    title: str
    structure: dict[str, str]


class LyricsMetadata(BaseModel):
    genre: str
    emotion: str
    language: str
    keywords_used: list[str]
    created_at: datetime
    word_count: int


class LyricsResponse(BaseModel):
    id: str
    lyrics: GeneratedLyrics
    metadata: LyricsMetadata


class HealthResponse(BaseModel):
    status: str
    timestamp: datetime
    version: str


class ErrorResponse(BaseModel):
    error: str
    message: str
