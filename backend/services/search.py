from schemas.song import SongRecord


def song_matches(song: SongRecord, query: str) -> bool:
    """Case-insensitive match on title, artist, chords or lyrics."""
    q = query.strip().lower()
    if not q:
        return True

    if q in song.title.lower():
        return True
    if song.artist and q in song.artist.lower():
        return True
    for sec in song.sections:
        for ln in sec.lines:
            if q in (ln.chords or "").lower() or q in (ln.lyrics or "").lower():
                return True
    return False
