from typing import Dict, List, Optional

from schemas.render import (
    RenderedLine,
    RenderedSection,
    RenderedSetlist,
    RenderedSetlistEntry,
    RenderedSong,
    ViewKind,
)
from schemas.setlist import SetlistRecord
from schemas.song import SongRecord
from services.theory import transpose_chord_line, transpose_token


def resolve_prefer_sharps(
    song_pref: Optional[bool], global_pref: bool, override: Optional[bool] = None
) -> bool:
    """Pick the accidental preference: explicit override, then song, then global."""
    if override is not None:
        return override
    if song_pref is not None:
        return song_pref
    return global_pref


def render_song(
    song: SongRecord,
    transpose: int,
    prefer_sharps: bool,
    view: ViewKind = "mixed",
) -> RenderedSong:
    """Render a song's sections with every chord line shifted by ``transpose``.

    Lyrics are passed through untouched. Lines with nothing left to show in
    the chosen view are dropped.
    """
    show_chords = view in ("mixed", "chords")
    show_lyrics = view in ("mixed", "lyrics")

    sections: List[RenderedSection] = []
    for sec in song.sections:
        lines: List[RenderedLine] = []
        for ln in sec.lines:
            chords = []
            if show_chords and ln.chords:
                chords = [
                    transpose_chord_line(line, transpose, prefer_sharps)
                    for line in ln.chords.split("\n")
                ]
            lyrics = ln.lyrics if show_lyrics and ln.lyrics else None
            if not chords and lyrics is None:
                continue
            lines.append(RenderedLine(kind=ln.kind, chords=chords, lyrics=lyrics))
        sections.append(RenderedSection(id=sec.id, name=sec.name, lines=lines))

    return RenderedSong(
        song_id=song.id,
        title=song.title,
        artist=song.artist,
        key=transpose_token(song.key, transpose, prefer_sharps),
        transpose=transpose,
        prefer_sharps=prefer_sharps,
        view=view,
        sections=sections,
    )


def song_to_text(rendered: RenderedSong) -> str:
    """Format a rendered song as a plain-text chart."""
    out = [rendered.title]
    if rendered.artist:
        out.append(rendered.artist)
    header = f"Key: {rendered.key}"
    if rendered.transpose:
        header += f" (transpose {rendered.transpose:+d})"
    out.append(header)

    for sec in rendered.sections:
        out.append("")
        out.append(f"[{sec.name.upper()}]")
        for ln in sec.lines:
            out.extend(ln.chords)
            if ln.lyrics:
                out.extend(ln.lyrics.split("\n"))
    return "\n".join(out) + "\n"


def render_setlist(
    setlist: SetlistRecord,
    songs_by_id: Dict[str, SongRecord],
    prefer_sharps_global: bool,
    view: ViewKind = "mixed",
) -> RenderedSetlist:
    entries: List[RenderedSetlistEntry] = []
    for position, item in enumerate(setlist.items):
        song = songs_by_id.get(item.song_id)
        if song is None:
            entries.append(RenderedSetlistEntry(
                position=position,
                song_id=item.song_id,
                transpose=item.transpose,
                missing=True,
            ))
            continue

        prefer_sharps = resolve_prefer_sharps(song.prefer_sharps, prefer_sharps_global)
        entries.append(RenderedSetlistEntry(
            position=position,
            song_id=item.song_id,
            transpose=item.transpose,
            song=render_song(song, item.transpose, prefer_sharps, view),
        ))

    return RenderedSetlist(setlist_id=setlist.id, name=setlist.name, entries=entries)
