from typing import List

from pydantic import BaseModel

from schemas.setlist import SetlistRecord
from schemas.settings import AppSettings
from schemas.song import SongRecord


class BackupDocument(BaseModel):
    songs: List[SongRecord]
    setlists: List[SetlistRecord]
    settings: AppSettings


class BackupImportResponse(BaseModel):
    songs_imported: int
    setlists_imported: int
    settings_imported: bool
