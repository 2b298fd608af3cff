import json
import os
import zipfile

from schemas.setlist import SetlistItem, SetlistRecord
from schemas.song import Section, SectionLine, SongRecord
from services.chartbook import build_chartbook
from services.render import render_setlist, render_song, resolve_prefer_sharps, song_to_text
from services.search import song_matches


def _song(**overrides) -> SongRecord:
    fields = dict(
        id="song-1",
        title="Blue Skies",
        artist="Someone",
        key="Em",
        prefer_sharps=None,
        sections=[
            Section(id="s1", name="Intro", lines=[SectionLine(kind="chords", chords="| Em - C |\n| G - D/F# |")]),
            Section(id="s2", name="Verse", lines=[
                SectionLine(kind="mixed", chords="Em  C", lyrics="Blue skies\nsmiling at me"),
                SectionLine(kind="lyrics", lyrics=""),
            ]),
        ],
    )
    fields.update(overrides)
    return SongRecord(**fields)


class TestResolvePreferSharps:
    def test_override_wins(self):
        assert resolve_prefer_sharps(True, True, False) is False

    def test_song_then_global(self):
        assert resolve_prefer_sharps(False, True) is False
        assert resolve_prefer_sharps(None, False) is False
        assert resolve_prefer_sharps(None, True) is True


class TestRenderSong:
    def test_chord_lines_are_transposed_per_line(self):
        rendered = render_song(_song(), 2, True)
        intro = rendered.sections[0].lines[0]
        assert intro.chords == ["| F#m - D |", "| A - E/G# |"]

    def test_lyrics_untouched_and_key_transposed(self):
        rendered = render_song(_song(), 2, True)
        verse = rendered.sections[1]
        assert verse.lines[0].chords == ["F#m  D"]
        assert verse.lines[0].lyrics == "Blue skies\nsmiling at me"
        assert rendered.key == "F#m"
        assert rendered.transpose == 2

    def test_empty_lines_are_dropped(self):
        rendered = render_song(_song(), 0, True)
        assert len(rendered.sections[1].lines) == 1

    def test_chords_view_drops_lyrics(self):
        rendered = render_song(_song(), 0, True, view="chords")
        assert all(ln.lyrics is None for sec in rendered.sections for ln in sec.lines)

    def test_lyrics_view_drops_chords(self):
        rendered = render_song(_song(), 0, True, view="lyrics")
        assert rendered.sections[0].lines == []
        assert rendered.sections[1].lines[0].chords == []

    def test_text_chart(self):
        text = song_to_text(render_song(_song(), -1, False))
        lines = text.splitlines()
        assert lines[0] == "Blue Skies"
        assert lines[1] == "Someone"
        assert lines[2] == "Key: Ebm (transpose -1)"
        assert "[INTRO]" in lines
        assert "| Ebm - B |" in lines
        assert "smiling at me" in lines


class TestRenderSetlist:
    def test_items_use_own_transpose_and_missing_songs_are_flagged(self):
        setlist = SetlistRecord(
            id="set-1",
            name="Sunday",
            items=[
                SetlistItem(song_id="song-1", transpose=1),
                SetlistItem(song_id="gone"),
                SetlistItem(song_id="song-1", transpose=-2),
            ],
        )
        rendered = render_setlist(setlist, {"song-1": _song()}, prefer_sharps_global=False)

        assert [e.position for e in rendered.entries] == [0, 1, 2]
        assert rendered.entries[0].song.key == "Fm"
        assert rendered.entries[0].song.prefer_sharps is False
        assert rendered.entries[1].missing is True
        assert rendered.entries[1].song is None
        assert rendered.entries[2].song.key == "Dm"

    def test_song_preference_beats_global(self):
        setlist = SetlistRecord(id="set-1", name="x", items=[SetlistItem(song_id="song-1", transpose=1)])
        rendered = render_setlist(setlist, {"song-1": _song(prefer_sharps=True)}, prefer_sharps_global=False)
        assert rendered.entries[0].song.sections[0].lines[0].chords[0] == "| Fm - C# |"


class TestSearch:
    def test_matches_title_artist_chords_and_lyrics(self):
        song = _song()
        assert song_matches(song, "blue")
        assert song_matches(song, "SOMEONE")
        assert song_matches(song, "d/f#")
        assert song_matches(song, "smiling")
        assert not song_matches(song, "hallelujah")

    def test_blank_query_matches(self):
        assert song_matches(_song(), "   ")


class TestChartbook:
    def test_build_writes_charts_manifest_and_zip(self, tmp_path):
        setlist = SetlistRecord(
            id="set-1",
            name="Sunday",
            items=[SetlistItem(song_id="song-1", transpose=2), SetlistItem(song_id="gone")],
        )
        artifact = build_chartbook("exp-1", setlist, {"song-1": _song()}, True, str(tmp_path))

        assert artifact.missing_song_ids == ["gone"]
        assert len(artifact.entries) == 1
        entry = artifact.entries[0]
        assert entry.file_name == "01-blue-skies.txt"
        assert entry.key == "F#m"

        with open(os.path.join(artifact.dir_path, entry.file_name), encoding="utf-8") as f:
            assert "| F#m - D |" in f.read()

        with open(os.path.join(artifact.dir_path, "manifest.json"), encoding="utf-8") as f:
            manifest = json.load(f)
        assert manifest["setlist_name"] == "Sunday"
        assert manifest["missing_song_ids"] == ["gone"]

        with zipfile.ZipFile(artifact.zip_path) as zf:
            assert sorted(zf.namelist()) == ["01-blue-skies.txt", "manifest.json"]
