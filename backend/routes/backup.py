import uuid
import logging

from fastapi import APIRouter, UploadFile, File, Depends, HTTPException
from pydantic import ValidationError
from sqlalchemy.orm import Session

from database import get_db
from models import Setlist, Song
from schemas.backup import BackupDocument, BackupImportResponse
from schemas.setlist import SetlistDocument
from schemas.settings import AppSettings
from schemas.song import SongDocument
from services.library import (
    get_settings_row,
    load_app_settings,
    setlist_to_record,
    song_to_record,
)
from services.storage import read_json_upload

router = APIRouter()
logger = logging.getLogger(__name__)


def _first_duplicate_id(docs) -> str | None:
    seen = set()
    for doc in docs:
        if doc.id is None:
            continue
        if doc.id in seen:
            return doc.id
        seen.add(doc.id)
    return None


@router.get("/backup")
def export_backup(db: Session = Depends(get_db)) -> dict:
    try:
        songs = [song_to_record(s) for s in db.query(Song).order_by(Song.created_at.desc())]
        setlists = [
            setlist_to_record(s) for s in db.query(Setlist).order_by(Setlist.created_at.desc())
        ]
    except ValidationError as exc:
        logger.error("Backup export: invalid stored schema: %s", exc)
        raise HTTPException(status_code=500, detail="Invalid stored schema")

    return BackupDocument(
        songs=songs,
        setlists=setlists,
        settings=load_app_settings(db),
    ).model_dump()


@router.post("/backup")
def import_backup(
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
) -> dict:
    try:
        data = read_json_upload(file)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    if not isinstance(data, dict):
        raise HTTPException(status_code=400, detail="Backup file must contain a JSON object")

    # Validate everything before touching the database
    songs = None
    setlists = None
    app_settings = None
    try:
        if isinstance(data.get("songs"), list):
            songs = [SongDocument(**raw) for raw in data["songs"]]
        if isinstance(data.get("setlists"), list):
            setlists = [SetlistDocument(**raw) for raw in data["setlists"]]
        if data.get("settings"):
            app_settings = AppSettings(**data["settings"])
    except (ValidationError, TypeError) as exc:
        raise HTTPException(status_code=400, detail=f"Invalid backup file: {exc}")

    for kind, docs in (("song", songs), ("setlist", setlists)):
        dup = _first_duplicate_id(docs or [])
        if dup is not None:
            raise HTTPException(
                status_code=400,
                detail=f"Invalid backup file: duplicate {kind} id {dup!r}",
            )

    if app_settings is not None:
        row = get_settings_row(db)
        row.theme = app_settings.theme
        row.prefer_sharps_global = app_settings.prefer_sharps_global

    if songs is not None:
        db.query(Song).delete()
        for doc in songs:
            db.add(Song(
                id=doc.id or str(uuid.uuid4()),
                title=doc.title,
                artist=doc.artist,
                key=doc.key,
                prefer_sharps=doc.prefer_sharps,
                sections=[s.model_dump() for s in doc.sections],
            ))

    if setlists is not None:
        db.query(Setlist).delete()
        for doc in setlists:
            db.add(Setlist(
                id=doc.id or str(uuid.uuid4()),
                name=doc.name,
                items=[it.model_dump() for it in doc.items],
            ))

    db.commit()

    result = BackupImportResponse(
        songs_imported=len(songs) if songs is not None else 0,
        setlists_imported=len(setlists) if setlists is not None else 0,
        settings_imported=app_settings is not None,
    )
    logger.info(
        "Imported backup %s: songs=%d setlists=%d settings=%s",
        file.filename, result.songs_imported, result.setlists_imported,
        result.settings_imported,
    )
    return result.model_dump()
