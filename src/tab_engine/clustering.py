"""Clustering — group near-simultaneous notes into slices.

Two tolerances serve different purposes and are kept apart:
    SLICE_TOLERANCE  (35 ms) – global slice timeline for the fingering solver
    CHORD_TOLERANCE  (20 ms) – chord grouping for voice separation

Both are empirically chosen tuning parameters, not physical constants.

Groups are anchored on their *first* note: a note joins the open group
while ``|onset - anchor| < tolerance``. Boundaries therefore depend on onset
order and are asymmetric; groups are never recentred.
"""

from __future__ import annotations

from typing import Sequence

from .models import Note


SLICE_TOLERANCE: float = 0.035  # seconds
CHORD_TOLERANCE: float = 0.02  # seconds

# A slice is an ordered tuple of Note indices.
Slice = tuple[int, ...]


def group_by_onset(notes: Sequence[Note], tolerance: float) -> list[list[Note]]:
    """Split onset-sorted ``notes`` into anchor-based groups.

    Args:
        notes: Notes sorted by onset ascending.
        tolerance: Maximum distance (exclusive) from the group anchor, seconds.

    Returns:
        Consecutive groups covering every input note exactly once.
    """
    groups: list[list[Note]] = []
    anchor: float = 0.0
    for note in notes:
        if groups and abs(note.onset - anchor) < tolerance:
            groups[-1].append(note)
        else:
            groups.append([note])
            anchor = note.onset
    return groups


def cluster_onsets(
    notes: Sequence[Note], tolerance: float = SLICE_TOLERANCE
) -> list[Slice]:
    """Build the global slice timeline used by the fingering solver.

    Args:
        notes: Notes sorted by onset ascending.
        tolerance: Slice tolerance in seconds.

    Returns:
        Ordered slices of note indices; they partition ``notes``.
    """
    return [tuple(n.index for n in group) for group in group_by_onset(notes, tolerance)]


def group_chords(
    notes: Sequence[Note], tolerance: float = CHORD_TOLERANCE
) -> list[list[Note]]:
    """Chord grouping for voice separation (stable onset sort first)."""
    ordered = sorted(notes, key=lambda n: n.onset)
    return group_by_onset(ordered, tolerance)
