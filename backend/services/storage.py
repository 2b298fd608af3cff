import json
import logging

from fastapi import UploadFile

logger = logging.getLogger(__name__)


def read_json_upload(file: UploadFile) -> object:
    """Decode an uploaded JSON file.

    Raises ValueError if the upload is not valid UTF-8 JSON.
    """
    raw = file.file.read()
    try:
        data = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise ValueError(f"Invalid JSON upload: {exc}") from exc
    logger.info("Read JSON upload %s (%d bytes)", file.filename, len(raw))
    return data
