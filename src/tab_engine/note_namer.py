"""Note Namer — track-wide enharmonic policy and written pitch spelling.

Guitar is a transposing instrument: it sounds an octave below written pitch,
so spellings are computed from ``pitch + 12``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Literal

Spelling = Literal["sharps", "flats"]

_SHARP_NAMES: tuple[str, ...] = ("c", "c#", "d", "d#", "e", "f", "f#", "g", "g#", "a", "a#", "b")
_FLAT_NAMES: tuple[str, ...] = ("c", "db", "d", "eb", "e", "f", "gb", "g", "ab", "a", "bb", "b")

# C#, F# pull toward sharps; Eb, Ab, Bb toward flats.
SHARP_PITCH_CLASSES: frozenset[int] = frozenset({1, 6})
FLAT_PITCH_CLASSES: frozenset[int] = frozenset({3, 8, 10})

WRITTEN_OCTAVE_SHIFT: int = 12


@dataclass(frozen=True)
class SpelledPitch:
    letter: str
    octave: int
    accidental: str | None = None

    @property
    def key(self) -> str:
        """Engraver key such as ``"c/5"``; the accidental is a separate modifier."""
        return f"{self.letter}/{self.octave}"


def choose_spelling(pitches: Iterable[int]) -> Spelling:
    """Pick one accidental policy for a whole track by majority vote.

    Ties (including an empty track) favour sharps.
    """
    sharp_score = 0
    flat_score = 0
    for pitch in pitches:
        pitch_class = pitch % 12
        if pitch_class in SHARP_PITCH_CLASSES:
            sharp_score += 1
        elif pitch_class in FLAT_PITCH_CLASSES:
            flat_score += 1
    return "sharps" if sharp_score >= flat_score else "flats"


def spell_pitch(pitch: int, spelling: Spelling = "sharps") -> SpelledPitch:
    """Spell a sounding MIDI pitch as written guitar notation.

    Args:
        pitch: Sounding MIDI pitch.
        spelling: ``"sharps"`` or ``"flats"``.

    Returns:
        Letter, written octave and accidental (``"#"``, ``"b"`` or ``None``).
    """
    names = _SHARP_NAMES if spelling == "sharps" else _FLAT_NAMES
    written = pitch + WRITTEN_OCTAVE_SHIFT
    name = names[written % 12]
    octave = written // 12 - 1
    return SpelledPitch(letter=name[0], octave=octave, accidental=name[1:] or None)
