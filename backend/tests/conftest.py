import os
import tempfile

_TMP = tempfile.mkdtemp(prefix="chartbook-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TMP, 'test.db')}"
os.environ["DATA_DIR"] = os.path.join(_TMP, "data")
os.environ["SEED_DEMO_SONG"] = "false"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

import routes.setlists  # noqa: E402
from app import app  # noqa: E402
from database import Base, SessionLocal, engine  # noqa: E402
from workers.tasks import process_chartbook_export  # noqa: E402


@pytest.fixture(autouse=True)
def fresh_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(monkeypatch):
    # Run chartbook jobs inline instead of going through redis
    monkeypatch.setattr(routes.setlists, "_enqueue_chartbook", process_chartbook_export)
    return TestClient(app)


@pytest.fixture
def make_song(client):
    def _make(**overrides):
        body = {
            "title": "Amazing Grace",
            "artist": "Traditional",
            "key": "G",
            "sections": [
                {
                    "name": "Verse",
                    "lines": [
                        {"kind": "chords", "chords": "| G - G7 - C/G - G |"},
                        {"kind": "lyrics", "lyrics": "Amazing grace\nhow sweet the sound"},
                    ],
                },
            ],
        }
        body.update(overrides)
        resp = client.post("/songs", json=body)
        assert resp.status_code == 200, resp.text
        return resp.json()

    return _make
