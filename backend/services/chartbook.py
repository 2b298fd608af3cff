import json
import os
import re
import zipfile
from datetime import datetime, timezone
from typing import Dict

from schemas.chartbook import ChartbookArtifact, ChartbookEntry
from schemas.setlist import SetlistRecord
from schemas.song import SongRecord
from services.render import render_song, resolve_prefer_sharps, song_to_text

_SLUG_RE = re.compile(r"[^a-z0-9]+")


def _slugify(title: str) -> str:
    slug = _SLUG_RE.sub("-", title.lower()).strip("-")
    return slug or "song"


def build_chartbook(
    export_id: str,
    setlist: SetlistRecord,
    songs_by_id: Dict[str, SongRecord],
    prefer_sharps_global: bool,
    data_dir: str,
) -> ChartbookArtifact:
    """Write one text chart per setlist item, a manifest, and a ZIP archive."""
    book_dir = os.path.join(data_dir, "chartbooks", setlist.id, export_id)
    os.makedirs(book_dir, exist_ok=True)

    entries: list[ChartbookEntry] = []
    missing: list[str] = []

    for position, item in enumerate(setlist.items):
        song = songs_by_id.get(item.song_id)
        if song is None:
            missing.append(item.song_id)
            continue

        prefer_sharps = resolve_prefer_sharps(song.prefer_sharps, prefer_sharps_global)
        rendered = render_song(song, item.transpose, prefer_sharps)

        file_name = f"{position + 1:02d}-{_slugify(song.title)}.txt"
        with open(os.path.join(book_dir, file_name), "w", encoding="utf-8") as f:
            f.write(song_to_text(rendered))

        entries.append(ChartbookEntry(
            position=position,
            song_id=song.id,
            title=song.title,
            key=rendered.key,
            transpose=item.transpose,
            file_name=file_name,
        ))

    manifest = {
        "artifact_id": export_id,
        "setlist_id": setlist.id,
        "setlist_name": setlist.name,
        "entries": [e.model_dump() for e in entries],
        "missing_song_ids": missing,
    }
    manifest_path = os.path.join(book_dir, "manifest.json")
    with open(manifest_path, "w", encoding="utf-8") as f:
        json.dump(manifest, f, indent=2)

    zip_path = os.path.join(book_dir, "chartbook.zip")
    with zipfile.ZipFile(zip_path, "w", zipfile.ZIP_DEFLATED) as zf:
        for entry in entries:
            zf.write(os.path.join(book_dir, entry.file_name), arcname=entry.file_name)
        zf.write(manifest_path, arcname="manifest.json")

    return ChartbookArtifact(
        artifact_id=export_id,
        setlist_id=setlist.id,
        setlist_name=setlist.name,
        entries=entries,
        missing_song_ids=missing,
        dir_path=book_dir,
        zip_path=zip_path,
        created_at=datetime.now(timezone.utc).isoformat(),
    )
