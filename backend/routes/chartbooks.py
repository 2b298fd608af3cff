import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import ValidationError
from sqlalchemy.orm import Session

from database import get_db
from models import ChartbookExport
from schemas.chartbook import ChartbookArtifact, ChartbookExportRecord

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/chartbooks/{export_id}")
def get_chartbook(export_id: str, db: Session = Depends(get_db)) -> dict:
    export = db.query(ChartbookExport).filter(ChartbookExport.id == export_id).first()
    if not export:
        raise HTTPException(status_code=404, detail="Chartbook not found")

    artifact = None
    if export.result_json is not None:
        try:
            artifact = ChartbookArtifact(**export.result_json)
        except ValidationError as exc:
            logger.error("Chartbook %s: invalid artifact schema: %s", export_id, exc)
            raise HTTPException(
                status_code=500,
                detail="Invalid chartbook schema in result_json",
            )

    return ChartbookExportRecord(
        id=export.id,
        setlist_id=export.setlist_id,
        status=export.status,
        created_at=export.created_at.isoformat() if export.created_at else None,
        artifact=artifact,
        error=export.error,
    ).model_dump()
