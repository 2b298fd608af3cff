from typing import List, Literal, Optional

from pydantic import BaseModel

ViewKind = Literal["mixed", "chords", "lyrics"]


class RenderedLine(BaseModel):
    kind: str
    chords: List[str] = []
    lyrics: Optional[str] = None


class RenderedSection(BaseModel):
    id: str
    name: str
    lines: List[RenderedLine]


class RenderedSong(BaseModel):
    song_id: str
    title: str
    artist: Optional[str] = None
    key: str
    transpose: int
    prefer_sharps: bool
    view: ViewKind
    sections: List[RenderedSection]


class RenderedSetlistEntry(BaseModel):
    position: int
    song_id: str
    transpose: int
    missing: bool = False
    song: Optional[RenderedSong] = None


class RenderedSetlist(BaseModel):
    setlist_id: str
    name: str
    entries: List[RenderedSetlistEntry]
