import io
import json

from models import Song
from services.seed import seed_demo_song


def _upload(payload) -> dict:
    raw = payload if isinstance(payload, bytes) else json.dumps(payload).encode()
    return {"file": ("song.json", io.BytesIO(raw), "application/json")}


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


class TestSongCrud:
    def test_create_defaults(self, client):
        resp = client.post("/songs", json={})
        assert resp.status_code == 200
        song = resp.json()
        assert song["title"] == "New Song"
        assert song["key"] == "C"
        assert song["prefer_sharps"] is None
        assert song["sections"][0]["name"] == "Intro"
        assert song["sections"][0]["lines"][0]["chords"] == "| C - F - G - C |"
        assert song["sections"][0]["id"]

    def test_blank_title_rejected(self, client):
        assert client.post("/songs", json={"title": "  "}).status_code == 422

    def test_get_and_missing(self, client, make_song):
        song = make_song()
        assert client.get(f"/songs/{song['id']}").json()["title"] == "Amazing Grace"
        assert client.get("/songs/nope").status_code == 404

    def test_list_and_search(self, client, make_song):
        make_song()
        make_song(title="Be Thou My Vision", artist="Irish", sections=[])
        assert len(client.get("/songs").json()["songs"]) == 2

        found = client.get("/songs", params={"q": "sweet the"}).json()["songs"]
        assert [s["title"] for s in found] == ["Amazing Grace"]

        found = client.get("/songs", params={"q": "irish"}).json()["songs"]
        assert [s["title"] for s in found] == ["Be Thou My Vision"]

    def test_partial_update(self, client, make_song):
        song = make_song(prefer_sharps=True)
        resp = client.put(f"/songs/{song['id']}", json={"key": "A"})
        updated = resp.json()
        assert updated["key"] == "A"
        assert updated["title"] == "Amazing Grace"
        assert updated["prefer_sharps"] is True

        resp = client.put(f"/songs/{song['id']}", json={"prefer_sharps": None, "title": None})
        updated = resp.json()
        assert updated["prefer_sharps"] is None
        assert updated["title"] == "Amazing Grace"

    def test_delete(self, client, make_song):
        song = make_song()
        assert client.delete(f"/songs/{song['id']}").json() == {"id": song["id"], "deleted": True}
        assert client.get(f"/songs/{song['id']}").status_code == 404

    def test_invalid_stored_sections_is_server_error(self, client, db, make_song):
        song = make_song()
        row = db.query(Song).filter(Song.id == song["id"]).first()
        row.sections = [{"lines": "not-a-list"}]
        db.commit()
        assert client.get(f"/songs/{song['id']}").status_code == 500


class TestSections:
    def test_add_remove_and_move(self, client, make_song):
        song = make_song()
        sid = song["id"]

        song = client.post(f"/songs/{sid}/sections", json={}).json()
        assert [s["name"] for s in song["sections"]] == ["Verse", "Section"]
        assert song["sections"][1]["lines"][0]["chords"] == "| C - G - Am - F |"

        new_id = song["sections"][1]["id"]
        song = client.post(f"/songs/{sid}/sections/{new_id}/move", json={"direction": -1}).json()
        assert [s["name"] for s in song["sections"]] == ["Section", "Verse"]

        # Moving past the top is a no-op
        song = client.post(f"/songs/{sid}/sections/{new_id}/move", json={"direction": -1}).json()
        assert [s["name"] for s in song["sections"]] == ["Section", "Verse"]

        song = client.delete(f"/songs/{sid}/sections/{new_id}").json()
        assert [s["name"] for s in song["sections"]] == ["Verse"]
        assert client.delete(f"/songs/{sid}/sections/{new_id}").status_code == 404

    def test_bad_direction(self, client, make_song):
        song = make_song()
        section_id = song["sections"][0]["id"]
        resp = client.post(f"/songs/{song['id']}/sections/{section_id}/move", json={"direction": 2})
        assert resp.status_code == 422


class TestRender:
    def test_render_transposed(self, client, make_song):
        song = make_song(prefer_sharps=False)
        rendered = client.get(f"/songs/{song['id']}/render", params={"transpose": 1}).json()
        assert rendered["key"] == "Ab"
        assert rendered["prefer_sharps"] is False
        line = rendered["sections"][0]["lines"][0]
        assert line["chords"] == ["| Ab - Ab7 - Db/Ab - Ab |"]

    def test_render_uses_global_preference(self, client, make_song):
        song = make_song()
        client.put("/settings", json={"prefer_sharps_global": False})
        rendered = client.get(f"/songs/{song['id']}/render", params={"transpose": 1}).json()
        assert rendered["key"] == "Ab"

        rendered = client.get(
            f"/songs/{song['id']}/render", params={"transpose": 1, "prefer_sharps": True}
        ).json()
        assert rendered["key"] == "G#"

    def test_render_lyrics_view(self, client, make_song):
        song = make_song()
        rendered = client.get(f"/songs/{song['id']}/render", params={"view": "lyrics"}).json()
        lines = rendered["sections"][0]["lines"]
        assert len(lines) == 1
        assert lines[0]["lyrics"].startswith("Amazing grace")

    def test_render_bad_view(self, client, make_song):
        song = make_song()
        assert client.get(f"/songs/{song['id']}/render", params={"view": "tabs"}).status_code == 422


class TestExportImport:
    def test_export_then_import_into_other_song(self, client, make_song):
        source = make_song()
        target = make_song(title="Placeholder", sections=[])

        doc = client.get(f"/songs/{source['id']}/export").json()
        assert doc["id"] == source["id"]
        assert "created_at" not in doc

        resp = client.post(f"/songs/{target['id']}/import", files=_upload(doc))
        assert resp.status_code == 200
        replaced = resp.json()
        assert replaced["id"] == target["id"]
        assert replaced["title"] == "Amazing Grace"
        assert replaced["sections"][0]["lines"][0]["chords"] == "| G - G7 - C/G - G |"

    def test_import_rejects_bad_files(self, client, make_song):
        song = make_song()
        url = f"/songs/{song['id']}/import"
        assert client.post(url, files=_upload(b"{not json")).status_code == 400
        assert client.post(url, files=_upload([1, 2])).status_code == 400
        assert client.post(url, files=_upload({"sections": []})).status_code == 400

    def test_import_rejects_blank_title(self, client, make_song):
        song = make_song()
        resp = client.post(f"/songs/{song['id']}/import", files=_upload({"title": "  "}))
        assert resp.status_code == 400
        assert client.get(f"/songs/{song['id']}").json()["title"] == "Amazing Grace"


def test_seed_demo_song_only_when_empty(db):
    song = seed_demo_song(db)
    assert song is not None
    assert song.key == "G"
    assert song.sections[1]["lines"][0]["chords"] == "| G - D/F# - Em - D - C - Am - D |"
    assert seed_demo_song(db) is None
    assert db.query(Song).count() == 1
