import logging

from sqlalchemy.orm.attributes import flag_modified

from config import settings
from database import SessionLocal
from models import ChartbookExport, Setlist
from services.chartbook import build_chartbook
from services.library import load_app_settings, load_songs_by_id, setlist_to_record

logger = logging.getLogger(__name__)


def process_chartbook_export(export_id: str) -> None:
    db = SessionLocal()
    export = None
    try:
        export = db.query(ChartbookExport).filter(ChartbookExport.id == export_id).first()
        if not export:
            logger.error("Chartbook export %s not found", export_id)
            return

        export.status = "BUILDING"
        db.commit()
        logger.info("Chartbook %s: BUILDING", export_id)

        setlist_row = db.query(Setlist).filter(Setlist.id == export.setlist_id).first()
        if setlist_row is None:
            raise LookupError(f"Setlist {export.setlist_id} no longer exists")

        setlist = setlist_to_record(setlist_row)
        songs_by_id = load_songs_by_id(db, [item.song_id for item in setlist.items])
        app_settings = load_app_settings(db)

        artifact = build_chartbook(
            export_id,
            setlist,
            songs_by_id,
            app_settings.prefer_sharps_global,
            settings.data_dir,
        )
        if artifact.missing_song_ids:
            logger.warning(
                "Chartbook %s: skipped %d missing song(s)",
                export_id, len(artifact.missing_song_ids),
            )

        export.result_json = artifact.model_dump()
        flag_modified(export, "result_json")
        export.status = "READY"
        db.commit()
        logger.info("Chartbook %s: READY (%d charts)", export_id, len(artifact.entries))

    except Exception as exc:
        logger.exception("Chartbook %s failed: %s", export_id, exc)
        try:
            if export is not None:
                db.rollback()
                export.status = "FAILED"
                export.error = str(exc)
                db.commit()
        except Exception:
            logger.exception("Chartbook %s: could not record failure", export_id)
    finally:
        db.close()
