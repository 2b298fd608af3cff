import uuid
import logging

import redis
from rq import Queue
from fastapi import APIRouter, UploadFile, File, Depends, HTTPException
from pydantic import ValidationError
from sqlalchemy.orm import Session
from sqlalchemy.orm.attributes import flag_modified

from config import settings
from database import get_db
from models import ChartbookExport, Setlist, Song
from schemas.chartbook import ChartbookExportRecord
from schemas.render import ViewKind
from schemas.setlist import (
    ItemTransposeRequest,
    SetlistCreateRequest,
    SetlistDocument,
    SetlistItem,
    SetlistListResponse,
    SetlistRecord,
    SetlistUpdateRequest,
)
from schemas.song import MoveRequest
from services.library import load_app_settings, load_songs_by_id, setlist_to_record
from services.render import render_setlist
from services.storage import read_json_upload
from workers.tasks import process_chartbook_export

router = APIRouter()
logger = logging.getLogger(__name__)


def _load_setlist(setlist_id: str, db: Session) -> Setlist:
    setlist = db.query(Setlist).filter(Setlist.id == setlist_id).first()
    if not setlist:
        raise HTTPException(status_code=404, detail="Setlist not found")
    return setlist


def _setlist_record(setlist: Setlist) -> SetlistRecord:
    try:
        return setlist_to_record(setlist)
    except ValidationError as exc:
        logger.error("Setlist %s: invalid setlist schema: %s", setlist.id, exc)
        raise HTTPException(
            status_code=500,
            detail="Invalid setlist schema in items",
        )


def _store_items(setlist: Setlist, items: list[SetlistItem], db: Session) -> None:
    setlist.items = [it.model_dump() for it in items]
    flag_modified(setlist, "items")
    db.commit()
    db.refresh(setlist)


def _item_index(record: SetlistRecord, index: int) -> int:
    if index < 0 or index >= len(record.items):
        raise HTTPException(status_code=404, detail="Setlist item not found")
    return index


def _enqueue_chartbook(export_id: str) -> None:
    conn = redis.from_url(settings.redis_url)
    q = Queue(settings.queue_name, connection=conn)
    q.enqueue(process_chartbook_export, export_id)


@router.post("/setlists")
def create_setlist(req: SetlistCreateRequest, db: Session = Depends(get_db)) -> dict:
    setlist = Setlist(
        id=str(uuid.uuid4()),
        name=req.name,
        items=[it.model_dump() for it in req.items],
    )
    db.add(setlist)
    db.commit()
    db.refresh(setlist)

    logger.info("Created setlist %s (%r)", setlist.id, setlist.name)
    return _setlist_record(setlist).model_dump()


@router.get("/setlists")
def list_setlists(db: Session = Depends(get_db)) -> dict:
    rows = db.query(Setlist).order_by(Setlist.created_at.desc()).all()
    return SetlistListResponse(
        setlists=[_setlist_record(row) for row in rows],
    ).model_dump()


@router.get("/setlists/{setlist_id}")
def get_setlist(setlist_id: str, db: Session = Depends(get_db)) -> dict:
    return _setlist_record(_load_setlist(setlist_id, db)).model_dump()


@router.put("/setlists/{setlist_id}")
def update_setlist(
    setlist_id: str,
    req: SetlistUpdateRequest,
    db: Session = Depends(get_db),
) -> dict:
    """Replace name and/or items. Unknown song ids are kept and render as missing."""
    setlist = _load_setlist(setlist_id, db)

    if req.name is not None:
        setlist.name = req.name
    if req.items is not None:
        setlist.items = [it.model_dump() for it in req.items]
        flag_modified(setlist, "items")
    db.commit()
    db.refresh(setlist)

    return _setlist_record(setlist).model_dump()


@router.delete("/setlists/{setlist_id}")
def delete_setlist(setlist_id: str, db: Session = Depends(get_db)) -> dict:
    setlist = _load_setlist(setlist_id, db)
    db.delete(setlist)
    db.commit()
    logger.info("Deleted setlist %s", setlist_id)
    return {"id": setlist_id, "deleted": True}


@router.post("/setlists/{setlist_id}/items")
def add_item(
    setlist_id: str,
    req: SetlistItem,
    db: Session = Depends(get_db),
) -> dict:
    setlist = _load_setlist(setlist_id, db)
    if not db.query(Song).filter(Song.id == req.song_id).first():
        raise HTTPException(status_code=404, detail="Song not found")

    record = _setlist_record(setlist)
    _store_items(setlist, record.items + [req], db)
    return _setlist_record(setlist).model_dump()


@router.delete("/setlists/{setlist_id}/items/{index}")
def remove_item(
    setlist_id: str,
    index: int,
    db: Session = Depends(get_db),
) -> dict:
    setlist = _load_setlist(setlist_id, db)
    record = _setlist_record(setlist)
    idx = _item_index(record, index)

    items = list(record.items)
    items.pop(idx)
    _store_items(setlist, items, db)
    return _setlist_record(setlist).model_dump()


@router.post("/setlists/{setlist_id}/items/{index}/move")
def move_item(
    setlist_id: str,
    index: int,
    req: MoveRequest,
    db: Session = Depends(get_db),
) -> dict:
    setlist = _load_setlist(setlist_id, db)
    record = _setlist_record(setlist)
    idx = _item_index(record, index)

    j = idx + req.direction
    if 0 <= j < len(record.items):
        items = list(record.items)
        items[idx], items[j] = items[j], items[idx]
        _store_items(setlist, items, db)
    return _setlist_record(setlist).model_dump()


@router.post("/setlists/{setlist_id}/items/{index}/transpose")
def transpose_item(
    setlist_id: str,
    index: int,
    req: ItemTransposeRequest,
    db: Session = Depends(get_db),
) -> dict:
    setlist = _load_setlist(setlist_id, db)
    record = _setlist_record(setlist)
    idx = _item_index(record, index)

    items = list(record.items)
    current = items[idx]
    items[idx] = SetlistItem(song_id=current.song_id, transpose=current.transpose + req.delta)
    _store_items(setlist, items, db)
    return _setlist_record(setlist).model_dump()


@router.get("/setlists/{setlist_id}/render")
def get_setlist_render(
    setlist_id: str,
    view: ViewKind = "mixed",
    db: Session = Depends(get_db),
) -> dict:
    record = _setlist_record(_load_setlist(setlist_id, db))
    try:
        songs_by_id = load_songs_by_id(db, [it.song_id for it in record.items])
    except ValidationError as exc:
        logger.error("Setlist %s: invalid song schema: %s", setlist_id, exc)
        raise HTTPException(status_code=500, detail="Invalid song schema in sections")

    app_settings = load_app_settings(db)
    return render_setlist(
        record, songs_by_id, app_settings.prefer_sharps_global, view
    ).model_dump()


@router.get("/setlists/{setlist_id}/export")
def export_setlist(setlist_id: str, db: Session = Depends(get_db)) -> dict:
    record = _setlist_record(_load_setlist(setlist_id, db))
    return SetlistDocument(id=record.id, name=record.name, items=record.items).model_dump()


@router.post("/setlists/{setlist_id}/import")
def import_setlist(
    setlist_id: str,
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
) -> dict:
    setlist = _load_setlist(setlist_id, db)

    try:
        data = read_json_upload(file)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    if not isinstance(data, dict):
        raise HTTPException(status_code=400, detail="Setlist file must contain a JSON object")

    try:
        doc = SetlistDocument(**data)
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    setlist.name = doc.name
    _store_items(setlist, doc.items, db)

    logger.info("Replaced setlist %s from upload %s", setlist_id, file.filename)
    return _setlist_record(setlist).model_dump()


@router.post("/setlists/{setlist_id}/chartbook")
def create_chartbook(setlist_id: str, db: Session = Depends(get_db)) -> dict:
    _load_setlist(setlist_id, db)

    export = ChartbookExport(
        id=str(uuid.uuid4()),
        setlist_id=setlist_id,
        status="CREATED",
    )
    db.add(export)
    db.commit()
    db.refresh(export)

    _enqueue_chartbook(export.id)

    logger.info("Created and enqueued chartbook %s (setlist=%s)", export.id, setlist_id)
    return ChartbookExportRecord(
        id=export.id,
        setlist_id=export.setlist_id,
        status=export.status,
        created_at=export.created_at.isoformat() if export.created_at else None,
    ).model_dump()
