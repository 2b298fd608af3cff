import uuid
from datetime import datetime

from sqlalchemy import JSON, Boolean, Column, DateTime, Integer, String, Text

from database import Base


def _new_id() -> str:
    return str(uuid.uuid4())


class Song(Base):
    __tablename__ = "songs"

    id = Column(String, primary_key=True, default=_new_id)
    title = Column(String, nullable=False)
    artist = Column(String, nullable=True)
    key = Column(String, nullable=False, default="C")
    prefer_sharps = Column(Boolean, nullable=True)
    sections = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class Setlist(Base):
    __tablename__ = "setlists"

    id = Column(String, primary_key=True, default=_new_id)
    name = Column(String, nullable=False)
    items = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class AppSettingsRow(Base):
    __tablename__ = "app_settings"

    id = Column(Integer, primary_key=True, default=1)
    theme = Column(String, nullable=False, default="system")
    prefer_sharps_global = Column(Boolean, nullable=False, default=True)


class ChartbookExport(Base):
    __tablename__ = "chartbook_exports"

    id = Column(String, primary_key=True, default=_new_id)
    setlist_id = Column(String, nullable=False)
    status = Column(String, nullable=False, default="CREATED")
    created_at = Column(DateTime, default=datetime.utcnow)
    result_json = Column(JSON, nullable=True)
    error = Column(Text, nullable=True)
