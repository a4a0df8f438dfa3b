"""Pipeline — one synchronous pass from a decoded track to notated measures.

Stages:
    1. Cluster notes into the global slice timeline.
    2. Solve the fingering path once over the whole track.
    3. Choose the track-wide accidental policy.
    4. Assemble measures (voice split, quantization, rests, playback ids).

Measures cannot be built independently: the fingering of any bar depends
on the whole-track optimum, so stage 2 always completes first.
"""

from __future__ import annotations

import logging

from .clustering import cluster_onsets
from .cost_model import TabCostModel
from .measures import assemble_measures
from .models import ProcessedTrack, TrackRecord
from .note_namer import choose_spelling
from .solver import solve
from .tunings import DEFAULT_TUNING, Tuning, get_tuning


logger = logging.getLogger(__name__)


def process_track(
    track: TrackRecord,
    tuning: str | Tuning = DEFAULT_TUNING,
    cost_model: TabCostModel | None = None,
) -> ProcessedTrack:
    """Convert a decoded track into measures of fingered, notated events.

    Args:
        track: Decoded track with indexed notes.
        tuning: Preset key or a :class:`Tuning`.
        cost_model: Cost weights and search bounds.
            Defaults to ``configs/tab_costs.yaml``.

    Returns:
        The processed track. An empty or zero-length track yields no measures.

    Raises:
        InvalidTuningError: If ``tuning`` cannot be resolved.
    """
    resolved = get_tuning(tuning)
    empty = ProcessedTrack(
        measures=(),
        tuning_label=resolved.name,
        time_signature=track.time_signature,
        bpm=track.bpm,
        name=track.name,
    )
    if not track.notes or track.duration <= 0:
        return empty

    if cost_model is None:
        cost_model = TabCostModel()

    # Stable onset order; equal onsets keep ingestion order.
    notes = sorted(track.notes, key=lambda n: (n.onset, n.index))
    notes_by_index = {n.index: n for n in notes}

    slices = cluster_onsets(notes)
    fingerings = solve(slices, notes_by_index, resolved, cost_model)
    spelling = choose_spelling(n.pitch for n in notes)

    logger.debug(
        "Track '%s': %d notes, %d slices, %d fingered, %s spelling",
        track.name, len(notes), len(slices), len(fingerings), spelling,
    )

    measures = assemble_measures(
        slices,
        notes_by_index,
        fingerings,
        spelling,
        bpm=track.bpm,
        beats_per_bar=track.beats_per_bar,
        track_duration=track.duration,
    )
    return ProcessedTrack(
        measures=measures,
        tuning_label=resolved.name,
        time_signature=track.time_signature,
        bpm=track.bpm,
        name=track.name,
    )
