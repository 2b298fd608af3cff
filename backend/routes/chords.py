import logging

from fastapi import APIRouter, HTTPException

from schemas.chord import (
    ChordParseRequest,
    ChordParseResponse,
    ChordTransposeRequest,
    ChordTransposeResponse,
    NoteSpellingsResponse,
)
from services.theory import (
    FLAT_NAMES,
    NOTE_SPELLINGS,
    PITCH_CLASS,
    SHARP_NAMES,
    parse_chord,
    parse_chord_root,
    semitone_interval,
    transpose_chord_block,
)

router = APIRouter()
logger = logging.getLogger(__name__)


def _key_root(key: str, field: str) -> str:
    """Accept a key written as a chord ('Em', 'Bb') and return its root spelling."""
    root = parse_chord_root(key)
    if root is None or root not in PITCH_CLASS:
        raise HTTPException(status_code=400, detail=f"Invalid {field}: {key!r}")
    return root


@router.get("/chords/notes")
def list_note_spellings() -> dict:
    return NoteSpellingsResponse(
        spellings=sorted(NOTE_SPELLINGS, key=lambda s: (PITCH_CLASS[s], s)),
        sharps=list(SHARP_NAMES),
        flats=list(FLAT_NAMES),
    ).model_dump()


@router.post("/chords/parse")
def parse_token(req: ChordParseRequest) -> dict:
    return ChordParseResponse(token=req.token, parsed=parse_chord(req.token)).model_dump()


@router.post("/chords/transpose")
def transpose_text(req: ChordTransposeRequest) -> dict:
    steps = req.steps
    if steps is None:
        source = _key_root(req.source_key, "source_key")
        target = _key_root(req.target_key, "target_key")
        steps = semitone_interval(source, target)
        logger.debug("Transposing %s -> %s (%d semitones)", source, target, steps)

    return ChordTransposeResponse(
        text=transpose_chord_block(req.text, steps, req.prefer_sharps),
        steps=steps,
        prefer_sharps=req.prefer_sharps,
    ).model_dump()
