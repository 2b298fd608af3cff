from typing import List, Optional

from pydantic import BaseModel


class SetlistItem(BaseModel):
    song_id: str
    transpose: int = 0


class SetlistCreateRequest(BaseModel):
    name: str = "New Setlist"
    items: List[SetlistItem] = []


class SetlistUpdateRequest(BaseModel):
    name: Optional[str] = None
    items: Optional[List[SetlistItem]] = None


class SetlistDocument(BaseModel):
    id: Optional[str] = None
    name: str
    items: List[SetlistItem] = []


class SetlistRecord(BaseModel):
    id: str
    name: str
    items: List[SetlistItem]
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class SetlistListResponse(BaseModel):
    setlists: List[SetlistRecord]


class ItemTransposeRequest(BaseModel):
    delta: int
