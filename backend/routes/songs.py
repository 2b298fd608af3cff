import uuid
import logging
from typing import Optional

from fastapi import APIRouter, UploadFile, File, Depends, HTTPException
from pydantic import ValidationError
from sqlalchemy.orm import Session
from sqlalchemy.orm.attributes import flag_modified

from database import get_db
from models import Song
from schemas.render import ViewKind
from schemas.song import (
    MoveRequest,
    Section,
    SectionCreateRequest,
    SongCreateRequest,
    SongDocument,
    SongListResponse,
    SongRecord,
    SongUpdateRequest,
)
from services.library import load_app_settings, song_to_record
from services.render import render_song, resolve_prefer_sharps
from services.search import song_matches
from services.storage import read_json_upload

router = APIRouter()
logger = logging.getLogger(__name__)

# Fields a client may explicitly clear with null
_NULLABLE_FIELDS = {"artist", "prefer_sharps"}


def _load_song(song_id: str, db: Session) -> Song:
    song = db.query(Song).filter(Song.id == song_id).first()
    if not song:
        raise HTTPException(status_code=404, detail="Song not found")
    return song


def _song_record(song: Song) -> SongRecord:
    try:
        return song_to_record(song)
    except ValidationError as exc:
        logger.error("Song %s: invalid song schema: %s", song.id, exc)
        raise HTTPException(
            status_code=500,
            detail="Invalid song schema in sections",
        )


def _store_sections(song: Song, sections: list[Section], db: Session) -> None:
    song.sections = [s.model_dump() for s in sections]
    flag_modified(song, "sections")
    db.commit()
    db.refresh(song)


@router.post("/songs")
def create_song(req: SongCreateRequest, db: Session = Depends(get_db)) -> dict:
    song = Song(
        id=str(uuid.uuid4()),
        title=req.title,
        artist=req.artist,
        key=req.key,
        prefer_sharps=req.prefer_sharps,
        sections=[s.model_dump() for s in req.sections],
    )
    db.add(song)
    db.commit()
    db.refresh(song)

    logger.info("Created song %s (%r)", song.id, song.title)
    return _song_record(song).model_dump()


@router.get("/songs")
def list_songs(q: str = "", db: Session = Depends(get_db)) -> dict:
    rows = db.query(Song).order_by(Song.created_at.desc()).all()
    records = [_song_record(row) for row in rows]
    return SongListResponse(
        songs=[r for r in records if song_matches(r, q)],
    ).model_dump()


@router.get("/songs/{song_id}")
def get_song(song_id: str, db: Session = Depends(get_db)) -> dict:
    return _song_record(_load_song(song_id, db)).model_dump()


@router.put("/songs/{song_id}")
def update_song(
    song_id: str,
    req: SongUpdateRequest,
    db: Session = Depends(get_db),
) -> dict:
    song = _load_song(song_id, db)

    # Only overwrite fields that were provided
    updates = {
        k: v for k, v in req.model_dump(exclude_unset=True).items()
        if v is not None or k in _NULLABLE_FIELDS
    }
    for field, value in updates.items():
        setattr(song, field, value)
    if "sections" in updates:
        flag_modified(song, "sections")
    db.commit()
    db.refresh(song)

    return _song_record(song).model_dump()


@router.delete("/songs/{song_id}")
def delete_song(song_id: str, db: Session = Depends(get_db)) -> dict:
    song = _load_song(song_id, db)
    db.delete(song)
    db.commit()
    logger.info("Deleted song %s", song_id)
    return {"id": song_id, "deleted": True}


@router.post("/songs/{song_id}/sections")
def add_section(
    song_id: str,
    req: SectionCreateRequest,
    db: Session = Depends(get_db),
) -> dict:
    song = _load_song(song_id, db)
    record = _song_record(song)
    sections = record.sections + [Section(name=req.name, lines=req.lines)]
    _store_sections(song, sections, db)
    return _song_record(song).model_dump()


@router.delete("/songs/{song_id}/sections/{section_id}")
def remove_section(
    song_id: str,
    section_id: str,
    db: Session = Depends(get_db),
) -> dict:
    song = _load_song(song_id, db)
    record = _song_record(song)
    sections = [s for s in record.sections if s.id != section_id]
    if len(sections) == len(record.sections):
        raise HTTPException(status_code=404, detail="Section not found")
    _store_sections(song, sections, db)
    return _song_record(song).model_dump()


@router.post("/songs/{song_id}/sections/{section_id}/move")
def move_section(
    song_id: str,
    section_id: str,
    req: MoveRequest,
    db: Session = Depends(get_db),
) -> dict:
    song = _load_song(song_id, db)
    record = _song_record(song)
    sections = list(record.sections)

    idx = next((i for i, s in enumerate(sections) if s.id == section_id), None)
    if idx is None:
        raise HTTPException(status_code=404, detail="Section not found")

    j = idx + req.direction
    if 0 <= j < len(sections):
        sections[idx], sections[j] = sections[j], sections[idx]
        _store_sections(song, sections, db)
    return _song_record(song).model_dump()


@router.get("/songs/{song_id}/render")
def get_song_render(
    song_id: str,
    transpose: int = 0,
    view: ViewKind = "mixed",
    prefer_sharps: Optional[bool] = None,
    db: Session = Depends(get_db),
) -> dict:
    record = _song_record(_load_song(song_id, db))
    app_settings = load_app_settings(db)
    sharps = resolve_prefer_sharps(
        record.prefer_sharps, app_settings.prefer_sharps_global, prefer_sharps
    )
    return render_song(record, transpose, sharps, view).model_dump()


@router.get("/songs/{song_id}/export")
def export_song(song_id: str, db: Session = Depends(get_db)) -> dict:
    record = _song_record(_load_song(song_id, db))
    return SongDocument(
        id=record.id,
        title=record.title,
        artist=record.artist,
        key=record.key,
        prefer_sharps=record.prefer_sharps,
        sections=record.sections,
    ).model_dump()


@router.post("/songs/{song_id}/import")
def import_song(
    song_id: str,
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
) -> dict:
    song = _load_song(song_id, db)

    try:
        data = read_json_upload(file)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    if not isinstance(data, dict):
        raise HTTPException(status_code=400, detail="Song file must contain a JSON object")

    try:
        doc = SongDocument(**data)
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    # The song keeps its own id regardless of the file's
    song.title = doc.title
    song.artist = doc.artist
    song.key = doc.key
    song.prefer_sharps = doc.prefer_sharps
    _store_sections(song, doc.sections, db)

    logger.info("Replaced song %s from upload %s", song_id, file.filename)
    return _song_record(song).model_dump()
