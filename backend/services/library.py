"""Conversions between ORM rows and validated schema records.

Stored JSON columns are re-validated on every read; callers decide how to
surface a ``ValidationError``.
"""
import logging
from typing import Dict, List

from sqlalchemy.orm import Session

from models import AppSettingsRow, Setlist, Song
from schemas.setlist import SetlistRecord
from schemas.settings import AppSettings
from schemas.song import SongRecord

logger = logging.getLogger(__name__)


def _iso(value) -> str | None:
    return value.isoformat() if value else None


def song_to_record(song: Song) -> SongRecord:
    return SongRecord(
        id=song.id,
        title=song.title,
        artist=song.artist,
        key=song.key,
        prefer_sharps=song.prefer_sharps,
        sections=song.sections or [],
        created_at=_iso(song.created_at),
        updated_at=_iso(song.updated_at),
    )


def setlist_to_record(setlist: Setlist) -> SetlistRecord:
    return SetlistRecord(
        id=setlist.id,
        name=setlist.name,
        items=setlist.items or [],
        created_at=_iso(setlist.created_at),
        updated_at=_iso(setlist.updated_at),
    )


def load_songs_by_id(db: Session, song_ids: List[str]) -> Dict[str, SongRecord]:
    if not song_ids:
        return {}
    rows = db.query(Song).filter(Song.id.in_(sorted(set(song_ids)))).all()
    return {row.id: song_to_record(row) for row in rows}


def get_settings_row(db: Session) -> AppSettingsRow:
    row = db.query(AppSettingsRow).filter(AppSettingsRow.id == 1).first()
    if row is None:
        row = AppSettingsRow(id=1, theme="system", prefer_sharps_global=True)
        db.add(row)
        db.commit()
        db.refresh(row)
        logger.info("Created default app settings")
    return row


def load_app_settings(db: Session) -> AppSettings:
    row = get_settings_row(db)
    return AppSettings(theme=row.theme, prefer_sharps_global=row.prefer_sharps_global)
