import logging

from sqlalchemy.orm import Session

from models import Song
from schemas.song import Section, SectionLine

logger = logging.getLogger(__name__)


def demo_sections() -> list[Section]:
    return [
        Section(name="Intro", lines=[
            SectionLine(kind="chords", chords="| G - Em - D - C |"),
        ]),
        Section(name="Verse", lines=[
            SectionLine(kind="chords", chords="| G - D/F# - Em - D - C - Am - D |"),
            SectionLine(kind="lyrics", lyrics="\n".join([
                "Your eyes can see right through me",
                "Nothing I can hide",
                "I am nothing without You",
                "Oh faithful Lord",
            ])),
        ]),
        Section(name="Chorus", lines=[
            SectionLine(kind="chords", chords="| G - Em - Am - C |"),
            SectionLine(kind="lyrics", lyrics="\n".join([
                "Lead my life to a single truth",
                "When You look at me",
                "Nothing can be hidden",
            ])),
        ]),
    ]


def seed_demo_song(db: Session) -> Song | None:
    """Insert the demo song when the library is empty."""
    if db.query(Song).first() is not None:
        return None

    song = Song(
        title="Your Eyes (Demo)",
        artist="Example",
        key="G",
        prefer_sharps=True,
        sections=[s.model_dump() for s in demo_sections()],
    )
    db.add(song)
    db.commit()
    db.refresh(song)
    logger.info("Seeded demo song %s", song.id)
    return song
