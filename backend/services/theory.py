import re
from typing import Optional

from schemas.chord import ParsedChord

# Pitch-class map: note name -> semitone offset from C
PITCH_CLASS = {
    "C": 0, "B#": 0,
    "C#": 1, "Db": 1,
    "D": 2,
    "D#": 3, "Eb": 3,
    "E": 4, "Fb": 4,
    "F": 5, "E#": 5,
    "F#": 6, "Gb": 6,
    "G": 7,
    "G#": 8, "Ab": 8,
    "A": 9,
    "A#": 10, "Bb": 10,
    "B": 11, "Cb": 11,
}

NOTE_SPELLINGS = frozenset(PITCH_CLASS)

# Canonical spellings used when rendering a pitch class back to a name
SHARP_NAMES = (
    "C", "C#", "D", "D#", "E", "F",
    "F#", "G", "G#", "A", "A#", "B",
)
FLAT_NAMES = (
    "C", "Db", "D", "Eb", "E", "F",
    "Gb", "G", "Ab", "A", "Bb", "B",
)

NO_CHORD_MARKERS = frozenset({"N.C.", "NC"})

# Regex: root is a capital letter optionally followed by # or b
_ROOT_RE = re.compile(r"^([A-G][#b]?)")

# A whole chord token:
#   root      A-G plus at most one '#' or 'b'
#   extension anything up to an optional slash; never whitespace, '/' or '|'
#   bass      optional '/' followed by another A-G plus at most one '#' or 'b'
_CHORD_RE = re.compile(
    r"""
    ^(?P<root>[A-G][#b]?)
    (?P<extension>[^\s/|]*)
    (?:/(?P<bass>[A-G][#b]?))?
    $
    """,
    re.VERBOSE,
)

_TOKEN_RE = re.compile(r"\S+")


def normalize_to_range(n: int) -> int:
    """Reduce any integer to a pitch class in 0-11 (-1 -> 11)."""
    return n % 12


def pitch_class_of(spelling: str) -> Optional[int]:
    """Return the pitch class for a note spelling, or None if it is not accepted."""
    return PITCH_CLASS.get(spelling)


def spelling_for(pitch_class: int, prefer_sharps: bool) -> str:
    names = SHARP_NAMES if prefer_sharps else FLAT_NAMES
    return names[normalize_to_range(pitch_class)]


def parse_key(key: str) -> int:
    """Return semitone value (0-11) for a key string like 'C', 'F#', 'Bb'.

    Raises ValueError if the key is not recognized.
    """
    if key not in PITCH_CLASS:
        raise ValueError(f"Unknown key: {key!r}")
    return PITCH_CLASS[key]


def semitone_interval(source_key: str, target_key: str) -> int:
    """Return the upward semitone interval from source to target (0-11)."""
    return normalize_to_range(parse_key(target_key) - parse_key(source_key))


def parse_chord_root(symbol: str) -> str | None:
    """Extract the root note from a chord symbol like 'Dm7', 'F#7', 'Bbmaj7'.

    Returns None if no valid root is found.
    """
    m = _ROOT_RE.match(symbol)
    return m.group(1) if m else None


def parse_chord(token: str) -> Optional[ParsedChord]:
    """Classify a single whitespace-free token.

    Returns a no-chord ParsedChord for ``N.C.``/``NC``, a ParsedChord with
    root, verbatim extension and optional bass for a chord, or None when the
    token is not a chord (bar lines, dashes, section labels, numbers...).
    Matching is case sensitive: roots are uppercase, flats are lowercase 'b'.
    """
    if not token:
        return None
    if token in NO_CHORD_MARKERS:
        return ParsedChord(root=token, no_chord=True)

    m = _CHORD_RE.match(token)
    if not m:
        return None
    return ParsedChord(
        root=m.group("root"),
        extension=m.group("extension"),
        bass=m.group("bass"),
    )


def _shift_note(note: str, steps: int, prefer_sharps: bool) -> Optional[str]:
    pc = pitch_class_of(note)
    if pc is None:
        return None
    return spelling_for(pc + steps, prefer_sharps)


def transpose_token(token: str, steps: int, prefer_sharps: bool) -> str:
    """Transpose one chord token by a number of semitones.

    Root and bass are shifted independently and re-spelled with the requested
    accidentals, so a zero-step call can still change 'Db' into 'C#'. The
    extension is copied unchanged. Anything that is not a pitched chord comes
    back exactly as given.
    """
    parsed = parse_chord(token)
    if parsed is None or parsed.no_chord:
        return token

    new_root = _shift_note(parsed.root, steps, prefer_sharps)
    if new_root is None:
        return token

    if parsed.bass is None:
        return new_root + parsed.extension

    new_bass = _shift_note(parsed.bass, steps, prefer_sharps)
    if new_bass is None:
        return token
    return f"{new_root}{parsed.extension}/{new_bass}"


def transpose_chord_line(line: str, steps: int, prefer_sharps: bool) -> str:
    """Transpose every token in a chord line, keeping the whitespace between them."""
    if not line:
        return ""
    return _TOKEN_RE.sub(
        lambda m: transpose_token(m.group(0), steps, prefer_sharps), line
    )


def transpose_chord_block(text: str, steps: int, prefer_sharps: bool) -> str:
    """Transpose a multi-line chord block one line at a time."""
    if not text:
        return ""
    return "\n".join(
        transpose_chord_line(line, steps, prefer_sharps)
        for line in text.split("\n")
    )
