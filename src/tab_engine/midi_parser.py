"""MIDI Parser — load MIDI files and decode them into track records.

Responsibilities:
    - Load a MIDI file via *pretty_midi*.
    - Read the first tempo (default 120 BPM) and time signature (default 4/4).
    - Turn every non-drum instrument with sounding notes into a
      :class:`TrackRecord` with stably indexed notes.

No fingering logic lives here.
"""

from __future__ import annotations

import logging
from pathlib import Path

import pretty_midi

from .models import Note, TrackRecord


logger = logging.getLogger(__name__)

DEFAULT_BPM: float = 120.0
DEFAULT_TIME_SIGNATURE: tuple[int, int] = (4, 4)


def load_midi(midi_path: str | Path) -> pretty_midi.PrettyMIDI:
    """Load a MIDI file and return a PrettyMIDI object.

    Args:
        midi_path: Path to the ``.mid`` / ``.midi`` file.

    Returns:
        A ``pretty_midi.PrettyMIDI`` instance.

    Raises:
        FileNotFoundError: If *midi_path* does not exist.
        ValueError: If the file cannot be parsed as MIDI.
    """
    path = Path(midi_path)
    if not path.exists():
        raise FileNotFoundError(f"MIDI file not found: {path}")

    try:
        midi_data = pretty_midi.PrettyMIDI(str(path))
    except Exception as exc:
        raise ValueError(f"Failed to parse MIDI file '{path.name}': {exc}") from exc

    return midi_data


def read_tempo(midi_data: pretty_midi.PrettyMIDI) -> float:
    """First tempo of the file in BPM, or 120 when none is declared."""
    _, tempi = midi_data.get_tempo_changes()
    if len(tempi) > 0 and tempi[0] > 0:
        return float(tempi[0])
    return DEFAULT_BPM


def read_time_signature(midi_data: pretty_midi.PrettyMIDI) -> tuple[int, int]:
    """First time signature of the file, or 4/4 when none is declared."""
    if midi_data.time_signature_changes:
        first = midi_data.time_signature_changes[0]
        return (int(first.numerator), int(first.denominator))
    return DEFAULT_TIME_SIGNATURE


def extract_tracks(midi_data: pretty_midi.PrettyMIDI) -> list[TrackRecord]:
    """Decode every pitched instrument into a track record.

    Notes with zero velocity are dropped, the rest are sorted
    **deterministically** by ``(onset, pitch)`` and indexed in that order.
    Instruments left without notes are skipped.

    Args:
        midi_data: A loaded ``PrettyMIDI`` object.

    Returns:
        One ``TrackRecord`` per remaining instrument, in file order.
    """
    bpm = read_tempo(midi_data)
    time_signature = read_time_signature(midi_data)

    tracks: list[TrackRecord] = []
    for track_id, instrument in enumerate(midi_data.instruments):
        if instrument.is_drum:
            continue  # skip percussion tracks

        raw = sorted(
            (n for n in instrument.notes if n.velocity > 0),
            key=lambda n: (n.start, n.pitch),
        )
        if not raw:
            continue

        notes = tuple(
            Note(
                index=i,
                pitch=n.pitch,
                onset=round(n.start, 6),
                duration=round(n.end - n.start, 6),
                velocity=n.velocity,
            )
            for i, n in enumerate(raw)
        )
        tracks.append(
            TrackRecord(
                notes=notes,
                bpm=bpm,
                time_signature=time_signature,
                name=instrument.name or f"Track {track_id + 1}",
                instrument=pretty_midi.program_to_instrument_name(instrument.program),
                id=track_id,
            )
        )

    logger.debug("Decoded %d tracks at %.2f BPM, %s", len(tracks), bpm, time_signature)
    return tracks


def parse_midi(midi_path: str | Path) -> list[TrackRecord]:
    """Convenience wrapper: load MIDI → extract tracks.

    Args:
        midi_path: Path to the MIDI file.

    Returns:
        Decoded track records.
    """
    midi_data = load_midi(midi_path)
    return extract_tracks(midi_data)
