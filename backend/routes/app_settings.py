import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import ValidationError
from sqlalchemy.orm import Session

from database import get_db
from schemas.settings import AppSettings, SettingsUpdateRequest
from services.library import get_settings_row, load_app_settings

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/settings")
def get_settings(db: Session = Depends(get_db)) -> dict:
    return load_app_settings(db).model_dump()


@router.put("/settings")
def update_settings(req: SettingsUpdateRequest, db: Session = Depends(get_db)) -> dict:
    row = get_settings_row(db)

    # Merge settings: only overwrite fields that were provided
    existing = {"theme": row.theme, "prefer_sharps_global": row.prefer_sharps_global}
    updates = req.model_dump(exclude_none=True)
    merged = {**existing, **updates}

    try:
        validated = AppSettings(**merged)
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    row.theme = validated.theme
    row.prefer_sharps_global = validated.prefer_sharps_global
    db.commit()

    logger.info("Updated settings: %s", updates)
    return validated.model_dump()
