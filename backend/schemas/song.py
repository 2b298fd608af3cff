import uuid
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator


class SectionLine(BaseModel):
    kind: Literal["chords", "lyrics", "mixed"] = "chords"
    chords: Optional[str] = None
    lyrics: Optional[str] = None


class Section(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    name: str
    lines: List[SectionLine] = []


def _default_sections() -> List[Section]:
    return [Section(name="Intro", lines=[SectionLine(kind="chords", chords="| C - F - G - C |")])]


class SongCreateRequest(BaseModel):
    title: str = "New Song"
    artist: Optional[str] = None
    key: str = "C"
    prefer_sharps: Optional[bool] = None
    sections: List[Section] = Field(default_factory=_default_sections)

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("title must be a non-empty string")
        return v


class SongUpdateRequest(BaseModel):
    title: Optional[str] = None
    artist: Optional[str] = None
    key: Optional[str] = None
    prefer_sharps: Optional[bool] = None
    sections: Optional[List[Section]] = None

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            raise ValueError("title must be a non-empty string")
        return v


class SongDocument(BaseModel):
    """Song as exported to / imported from a JSON file."""

    id: Optional[str] = None
    title: str
    artist: Optional[str] = None
    key: str = "C"
    prefer_sharps: Optional[bool] = None
    sections: List[Section] = []

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("title must be a non-empty string")
        return v


class SongRecord(BaseModel):
    id: str
    title: str
    artist: Optional[str] = None
    key: str
    prefer_sharps: Optional[bool] = None
    sections: List[Section]
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class SongListResponse(BaseModel):
    songs: List[SongRecord]


class SectionCreateRequest(BaseModel):
    name: str = "Section"
    lines: List[SectionLine] = Field(
        default_factory=lambda: [SectionLine(kind="chords", chords="| C - G - Am - F |")]
    )


class MoveRequest(BaseModel):
    direction: Literal[-1, 1]
