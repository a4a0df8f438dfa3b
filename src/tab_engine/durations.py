"""Durations — quantize beat lengths to notated symbols and fill gaps with rests.

Symbols are engraver duration codes:
    w = whole, hd = dotted half, h = half, qd = dotted quarter, q = quarter,
    8d = dotted eighth, 8 = eighth, 16 = sixteenth, 32 = thirty-second.

``beats_to_symbol`` is lossy; ``symbol_to_beats`` is the exact
inverse table.
"""

from __future__ import annotations

from typing import Sequence

from .models import RenderableNote


# Inclusive lower bounds in beats, highest first; first match wins.
DURATION_THRESHOLDS: tuple[tuple[float, str], ...] = (
    (3.5, "w"),
    (2.7, "hd"),
    (1.7, "h"),
    (1.3, "qd"),
    (0.8, "q"),
    (0.6, "8d"),
    (0.35, "8"),
    (0.18, "16"),
)
SHORTEST_SYMBOL: str = "32"

SYMBOL_BEATS: dict[str, float] = {
    "w": 4.0,
    "hd": 3.0,
    "h": 2.0,
    "qd": 1.5,
    "q": 1.0,
    "8d": 0.75,
    "8": 0.5,
    "16": 0.25,
    "32": 0.125,
}
DEFAULT_BEATS: float = 0.25

# Gaps at or below this many beats count as aligned.
MIN_REST_GAP: float = 0.01
GAP_DECIMALS: int = 3

# Staff placeholder keys for rests, by voice (0 = melody, 1 = bass).
REST_KEYS: dict[int, str] = {0: "b/4", 1: "d/4"}

NO_PLAYBACK_ID: int = -1


def beats_to_symbol(beats: float) -> str:
    """Quantize a length in beats to the nearest supported duration symbol."""
    for threshold, symbol in DURATION_THRESHOLDS:
        if beats >= threshold:
            return symbol
    return SHORTEST_SYMBOL


def symbol_to_beats(symbol: str) -> float:
    """Length in beats of a duration symbol; a trailing ``r`` (rest) is ignored.

    Unknown symbols count as a sixteenth.
    """
    return SYMBOL_BEATS.get(symbol.removesuffix("r"), DEFAULT_BEATS)


def voice_beats(events: Sequence[RenderableNote]) -> float:
    """Sum of the notated lengths of a voice, in beats."""
    return sum(symbol_to_beats(e.duration) for e in events)


def make_rest(
    symbol: str,
    start_time: float,
    seconds_per_beat: float,
    voice: int,
) -> RenderableNote:
    return RenderableNote(
        keys=(REST_KEYS.get(voice, REST_KEYS[0]),),
        accidentals=(),
        positions=(),
        pitches=(),
        duration=symbol,
        is_rest=True,
        start_time=start_time,
        duration_seconds=symbol_to_beats(symbol) * seconds_per_beat,
        playback_id=NO_PLAYBACK_ID,
        voice=voice,
    )


def fill_rests(
    events: Sequence[RenderableNote],
    cursor: float,
    target: float,
    *,
    voice: int,
    measure_start: float,
    seconds_per_beat: float,
) -> tuple[tuple[RenderableNote, ...], float]:
    """Append rests so that a voice reaches ``target`` beats.

    The gap is repeatedly quantized to a duration symbol until at most
    ``MIN_REST_GAP`` beats remain. A cursor already past ``target`` is left
    unchanged. Pure: the input sequence is not modified.

    Args:
        events: The voice's events so far.
        cursor: The voice's current position in beats from the bar start.
        target: Position to reach, in beats.
        voice: 0 for melody, 1 for bass.
        measure_start: Bar start in seconds.
        seconds_per_beat: Tempo.

    Returns:
        ``(events, cursor)`` after the inserted rests.
    """
    filled = list(events)
    gap = round(target - cursor, GAP_DECIMALS)
    while gap > MIN_REST_GAP:
        symbol = beats_to_symbol(gap)
        rest_beats = symbol_to_beats(symbol)
        if rest_beats <= 0:
            break
        filled.append(
            make_rest(symbol, measure_start + cursor * seconds_per_beat, seconds_per_beat, voice)
        )
        cursor += rest_beats
        gap = round(gap - rest_beats, GAP_DECIMALS)
    return tuple(filled), cursor
