import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import settings
from database import engine, Base, SessionLocal
from routes.app_settings import router as settings_router
from routes.backup import router as backup_router
from routes.chartbooks import router as chartbooks_router
from routes.chords import router as chords_router
from routes.health import router as health_router
from routes.setlists import router as setlists_router
from routes.songs import router as songs_router
from services.seed import seed_demo_song

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="Chart Book API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173"],
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["*"],
)


@app.on_event("startup")
def on_startup() -> None:
    Base.metadata.create_all(bind=engine)
    if settings.seed_demo_song:
        db = SessionLocal()
        try:
            seed_demo_song(db)
        finally:
            db.close()


app.include_router(health_router)
app.include_router(chords_router)
app.include_router(songs_router)
app.include_router(setlists_router)
app.include_router(chartbooks_router)
app.include_router(settings_router)
app.include_router(backup_router)
