"""Voices — split simultaneous notes into a melody and a bass line.

This is a two-voice notation split, not a general voice allocator:
    - a chord sends its lowest note to the bass and the rest to the melody;
    - a lone note goes to the bass below E3 (MIDI 52), otherwise to the melody.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from .clustering import CHORD_TOLERANCE, group_chords
from .models import Note


BASS_SPLIT_PITCH: int = 52  # E3


@dataclass(frozen=True)
class VoiceSplit:
    melody: tuple[Note, ...]
    bass: Note | None

    @property
    def onset(self) -> float:
        """Onset of the group's earliest note."""
        members = self.melody + ((self.bass,) if self.bass is not None else ())
        return min(n.onset for n in members)


def split_chord(notes: Sequence[Note]) -> VoiceSplit:
    """Route one chord group to the two voices.

    Args:
        notes: A non-empty group of simultaneous notes.

    Returns:
        Melody notes ascending by pitch, and the bass note (or ``None``).
    """
    ordered = sorted(notes, key=lambda n: n.pitch)
    if len(ordered) > 1:
        return VoiceSplit(melody=tuple(ordered[1:]), bass=ordered[0])
    only = ordered[0]
    if only.pitch < BASS_SPLIT_PITCH:
        return VoiceSplit(melody=(), bass=only)
    return VoiceSplit(melody=(only,), bass=None)


def separate_voices(
    notes: Sequence[Note], tolerance: float = CHORD_TOLERANCE
) -> list[VoiceSplit]:
    """Regroup ``notes`` into chords and split each chord into voices.

    Grouping uses its own chord tolerance, independent of the solver's
    slice timeline.
    """
    return [split_chord(group) for group in group_chords(notes, tolerance)]
