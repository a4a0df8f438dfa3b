"""State Space — enumerate playable fingering states for one slice.

For every pitch the generator lists each string that can sound it within
``[0, max_fret]``, then expands the Cartesian product across the slice:

    - a partial assignment that reuses a string is rejected as it is built;
    - the live list is truncated to ``max_combinations`` after each pitch
      (stable prefix, no re-sort) to bound blow-up on dense chords;
    - states wider than ``max_stretch`` frets are discarded.

The result is never empty:
    - no low-stretch state → one fallback state built from the first
      combination, ``max_stretch`` forced to ``fallback_stretch``;
    - no combination at all → one state without fingerings, which marks
      the slice as unplayable.
"""

from __future__ import annotations

from collections import Counter
from typing import Sequence

from .models import Fingering, State
from .tunings import Tuning


# ── Search bounds ─────────────────────────────────────────────
MAX_FRET: int = 20
MAX_COMBINATIONS: int = 100
MAX_STRETCH: int = 5
FALLBACK_STRETCH: int = 10

# Three or more fretted notes on one fret read as a barre.
_BARRE_MIN_NOTES: int = 3

UNPLAYABLE_STATE = State(fingerings=(), avg_fret=0.0, max_stretch=0)


def candidate_fingerings(
    pitch: int, tuning: Tuning, max_fret: int = MAX_FRET
) -> list[Fingering]:
    """All (string, fret) positions that sound ``pitch``, string 1 first.

    Args:
        pitch: MIDI pitch.
        tuning: Open-string pitches, highest string first.
        max_fret: Highest usable fret.

    Returns:
        Possibly empty list of fingerings.
    """
    options: list[Fingering] = []
    for string_idx, open_pitch in enumerate(tuning.pitches):
        fret = pitch - open_pitch
        if 0 <= fret <= max_fret:
            options.append(Fingering(string=string_idx + 1, fret=fret, pitch=pitch))
    return options


def build_state(fingerings: Sequence[Fingering]) -> State:
    """Compute the derived hand-shape metrics for a fingering combination."""
    frets = [f.fret for f in fingerings if f.fret > 0]
    if frets:
        avg_fret = sum(frets) / len(frets)
        stretch = max(frets) - min(frets)
        is_barre = max(Counter(frets).values()) >= _BARRE_MIN_NOTES
    else:
        avg_fret, stretch, is_barre = 0.0, 0, False
    return State(
        fingerings=tuple(fingerings),
        avg_fret=avg_fret,
        max_stretch=stretch,
        is_barre=is_barre,
    )


def _fallback_state(fingerings: Sequence[Fingering], fallback_stretch: int) -> State:
    # Averaged over every fret, open strings included.
    avg_fret = sum(f.fret for f in fingerings) / len(fingerings)
    return State(
        fingerings=tuple(fingerings),
        avg_fret=avg_fret,
        max_stretch=fallback_stretch,
        is_barre=False,
        is_fallback=True,
    )


def expand_combinations(
    pitches: Sequence[int],
    tuning: Tuning,
    max_fret: int = MAX_FRET,
    max_combinations: int = MAX_COMBINATIONS,
) -> list[tuple[Fingering, ...]]:
    """String-collision-free Cartesian product of per-pitch positions.

    Args:
        pitches: Slice pitches in slice order.
        tuning: Instrument tuning.
        max_fret: Highest usable fret.
        max_combinations: Live-list cap applied after each pitch.

    Returns:
        Combinations in generation order; each has one fingering per pitch.
    """
    combinations: list[tuple[Fingering, ...]] = [()]
    for pitch in pitches:
        options = candidate_fingerings(pitch, tuning, max_fret)
        expanded: list[tuple[Fingering, ...]] = []
        for combo in combinations:
            used = {f.string for f in combo}
            for option in options:
                if option.string not in used:
                    expanded.append(combo + (option,))
        combinations = expanded[:max_combinations]
        if not combinations:
            break
    return combinations


def generate_states(
    pitches: Sequence[int],
    tuning: Tuning,
    max_fret: int = MAX_FRET,
    max_combinations: int = MAX_COMBINATIONS,
    max_stretch: int = MAX_STRETCH,
    fallback_stretch: int = FALLBACK_STRETCH,
) -> list[State]:
    """Enumerate the fingering states admitted to the solver for one slice.

    Args:
        pitches: Slice pitches in slice order.
        tuning: Instrument tuning.
        max_fret: Highest usable fret.
        max_combinations: Cap on live combinations during expansion.
        max_stretch: Widest admitted fret span.
        fallback_stretch: Stretch sentinel of the fallback state.

    Returns:
        At least one state, in generation order.
    """
    if not pitches:
        return [UNPLAYABLE_STATE]

    combinations = expand_combinations(pitches, tuning, max_fret, max_combinations)
    if not combinations:
        return [UNPLAYABLE_STATE]

    states = [build_state(combo) for combo in combinations]
    playable = [s for s in states if s.max_stretch <= max_stretch]
    if playable:
        return playable
    return [_fallback_state(combinations[0], fallback_stretch)]
