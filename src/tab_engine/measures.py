"""Measures — bucket slices into bars and build the notated melody/bass voices.

Per bar:
    1. Slices are assigned by the onset of their first note.
    2. Each slice is split as one chord into melody and bass
       (:func:`voices.split_chord`); its first note gives the onset.
    3. Each voice is padded with rests up to the slice's beat offset,
       receives its note or chord, and is finally padded to a full bar.
    4. Every onset gets a playback id shared by melody and bass.

Quantization can leave a voice a little short or long of a full bar. The
drift is accepted (no clamping) and reported at DEBUG level.
"""

from __future__ import annotations

import logging
import math
from collections import defaultdict
from typing import Mapping, Sequence

from .clustering import Slice
from .durations import beats_to_symbol, fill_rests, symbol_to_beats, voice_beats
from .models import Fingering, Measure, Note, RenderableNote
from .note_namer import Spelling, spell_pitch
from .voices import split_chord


logger = logging.getLogger(__name__)


# ── Tuning parameters ─────────────────────────────────────────
MEASURE_EPSILON: float = 0.005  # seconds; pulls slightly early onsets into their bar
BEAT_DECIMALS: int = 2  # onset offsets are rounded to 0.01 beat
BAR_DRIFT_TOLERANCE: float = 0.01  # beats

# ── Layout hint ───────────────────────────────────────────────
MIN_MEASURE_WIDTH: int = 450
WIDTH_PER_SLICE: int = 90
WIDTH_PADDING: int = 200

MELODY_VOICE: int = 0
BASS_VOICE: int = 1


class PlaybackIdRegistry:
    """Hands out one id per distinct onset, rounded to the millisecond."""

    def __init__(self) -> None:
        self._ids: dict[float, int] = {}

    def id_for(self, onset: float) -> int:
        key = round(onset, 3)
        if key not in self._ids:
            self._ids[key] = len(self._ids)
        return self._ids[key]


def measure_index(onset: float, bar_duration: float) -> int:
    """Bar a slice starting at ``onset`` belongs to (never negative)."""
    return max(0, math.floor((onset + MEASURE_EPSILON) / bar_duration))


def measure_count(track_duration: float, bar_duration: float) -> int:
    if track_duration <= 0:
        return 0
    return math.ceil(track_duration / bar_duration)


def _note_event(
    notes: Sequence[Note],
    onset: float,
    fingerings: Mapping[int, Fingering],
    spelling: Spelling,
    seconds_per_beat: float,
    playback_id: int,
    voice: int,
) -> RenderableNote:
    # A chord shares the duration of its first note.
    symbol = beats_to_symbol(notes[0].duration / seconds_per_beat)
    spelled = [spell_pitch(n.pitch, spelling) for n in notes]
    return RenderableNote(
        keys=tuple(s.key for s in spelled),
        accidentals=tuple(s.accidental for s in spelled),
        positions=tuple(fingerings[n.index] for n in notes if n.index in fingerings),
        pitches=tuple(n.pitch for n in notes),
        duration=symbol,
        is_rest=False,
        start_time=onset,
        duration_seconds=symbol_to_beats(symbol) * seconds_per_beat,
        playback_id=playback_id,
        voice=voice,
    )


def assemble_measures(
    slices: Sequence[Slice],
    notes_by_index: Mapping[int, Note],
    fingerings: Mapping[int, Fingering],
    spelling: Spelling,
    *,
    bpm: float,
    beats_per_bar: int,
    track_duration: float,
) -> tuple[Measure, ...]:
    """Build every bar of a track.

    Args:
        slices: Global slice timeline (onset order).
        notes_by_index: Note lookup by stable index.
        fingerings: Solved fingering per note index.
        spelling: Track-wide accidental policy.
        bpm: Tempo.
        beats_per_bar: Time-signature numerator.
        track_duration: Latest note end, in seconds.

    Returns:
        ``ceil(track_duration / bar_duration)`` measures in order, extended
        when a slice starting just before the track end opens one more bar.
    """
    seconds_per_beat = 60.0 / bpm
    bar_duration = beats_per_bar * seconds_per_beat
    slices_by_measure: dict[int, list[Slice]] = defaultdict(list)
    for note_indices in slices:
        first_onset = notes_by_index[note_indices[0]].onset
        slices_by_measure[measure_index(first_onset, bar_duration)].append(note_indices)

    # A slice pulled forward by the epsilon may open a bar past the track end.
    total = max(measure_count(track_duration, bar_duration), max(slices_by_measure, default=-1) + 1)

    registry = PlaybackIdRegistry()
    measures: list[Measure] = []

    for m_idx in range(total):
        measure_start = m_idx * bar_duration
        measure_slices = slices_by_measure.get(m_idx, [])
        timing = {"measure_start": measure_start, "seconds_per_beat": seconds_per_beat}

        melody: tuple[RenderableNote, ...] = ()
        bass: tuple[RenderableNote, ...] = ()
        melody_cursor = 0.0
        bass_cursor = 0.0

        for note_indices in measure_slices:
            # The whole slice is one chord; its first note fixes the onset.
            onset = notes_by_index[note_indices[0]].onset
            split = split_chord([notes_by_index[i] for i in note_indices])
            beat = round((onset - measure_start) / seconds_per_beat, BEAT_DECIMALS)
            playback_id = registry.id_for(onset)

            if split.bass is not None:
                bass, bass_cursor = fill_rests(
                    bass, bass_cursor, beat, voice=BASS_VOICE, **timing
                )
                event = _note_event(
                    [split.bass], onset, fingerings, spelling,
                    seconds_per_beat, playback_id, BASS_VOICE,
                )
                bass += (event,)
                bass_cursor += symbol_to_beats(event.duration)

            if split.melody:
                melody, melody_cursor = fill_rests(
                    melody, melody_cursor, beat, voice=MELODY_VOICE, **timing
                )
                event = _note_event(
                    split.melody, onset, fingerings, spelling,
                    seconds_per_beat, playback_id, MELODY_VOICE,
                )
                melody += (event,)
                melody_cursor += symbol_to_beats(event.duration)

        melody, _ = fill_rests(melody, melody_cursor, beats_per_bar, voice=MELODY_VOICE, **timing)
        bass, _ = fill_rests(bass, bass_cursor, beats_per_bar, voice=BASS_VOICE, **timing)

        for label, events in (("melody", melody), ("bass", bass)):
            drift = voice_beats(events) - beats_per_bar
            if abs(drift) > BAR_DRIFT_TOLERANCE:
                logger.debug("Measure %d %s drifts %+.3f beats from the bar", m_idx, label, drift)

        measures.append(
            Measure(
                index=m_idx,
                melody=melody,
                bass=bass,
                width=max(MIN_MEASURE_WIDTH, len(measure_slices) * WIDTH_PER_SLICE + WIDTH_PADDING),
            )
        )

    return tuple(measures)
