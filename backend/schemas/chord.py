from typing import List, Optional

from pydantic import BaseModel, model_validator


class ParsedChord(BaseModel):
    root: str
    extension: str = ""
    bass: Optional[str] = None
    no_chord: bool = False


class ChordParseRequest(BaseModel):
    token: str


class ChordParseResponse(BaseModel):
    token: str
    parsed: Optional[ParsedChord] = None


class ChordTransposeRequest(BaseModel):
    text: str
    steps: Optional[int] = None
    source_key: Optional[str] = None
    target_key: Optional[str] = None
    prefer_sharps: bool = True

    @model_validator(mode="after")
    def steps_or_keys(self) -> "ChordTransposeRequest":
        if self.steps is None and (self.source_key is None or self.target_key is None):
            raise ValueError("provide either steps or both source_key and target_key")
        return self


class ChordTransposeResponse(BaseModel):
    text: str
    steps: int
    prefer_sharps: bool


class NoteSpellingsResponse(BaseModel):
    spellings: List[str]
    sharps: List[str]
    flats: List[str]
