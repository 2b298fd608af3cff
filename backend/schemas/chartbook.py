from typing import List, Optional

from pydantic import BaseModel


class ChartbookEntry(BaseModel):
    position: int
    song_id: str
    title: str
    key: str
    transpose: int
    file_name: str


class ChartbookArtifact(BaseModel):
    artifact_id: str
    setlist_id: str
    setlist_name: str
    entries: List[ChartbookEntry]
    missing_song_ids: List[str] = []
    dir_path: str
    zip_path: str
    created_at: str


class ChartbookExportRecord(BaseModel):
    id: str
    setlist_id: str
    status: str
    created_at: Optional[str] = None
    artifact: Optional[ChartbookArtifact] = None
    error: Optional[str] = None
