"""Annotator — run the tablature pipeline on a MIDI file and export results.

Responsibilities:
    1. Call the MIDI parser to decode the file into tracks.
    2. Run the pipeline on every track (or one selected track).
    3. Save ``<stem>_tab.json`` (default: ``data/annotations/``).
    4. Optionally export a MIDI file with tab positions as lyric events.
    5. Return the processed tracks for programmatic use.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Sequence

import pretty_midi

from src.config import ANNOTATIONS_DIR

from .cost_model import TabCostModel
from .midi_parser import extract_tracks, load_midi
from .models import ProcessedTrack
from .pipeline import process_track
from .playback import flatten_for_playback
from .tunings import DEFAULT_TUNING, Tuning, get_tuning


logger = logging.getLogger(__name__)


def annotate(
    midi_path: str | Path,
    output_dir: str | Path | None = None,
    tuning: str | Tuning = DEFAULT_TUNING,
    track_index: int | None = None,
    config_path: str | Path | None = None,
    export_midi: bool = False,
) -> list[ProcessedTrack]:
    """Run the full tablature pipeline on a MIDI file.

    Args:
        midi_path: Path to the input ``.mid`` / ``.midi`` file.
        output_dir: Directory for output files.
            Defaults to ``data/annotations/`` relative to the project root.
        tuning: Preset key or :class:`Tuning`.
        track_index: Position of a single track to process (among decoded
            tracks). ``None`` processes all of them.
        config_path: Path to the cost-config YAML.
            Defaults to ``configs/tab_costs.yaml``.
        export_midi: If ``True``, also save an annotated MIDI file.

    Returns:
        The processed tracks, in file order.

    Raises:
        IndexError: If ``track_index`` is out of range.
    """
    midi_path = Path(midi_path)
    output_dir = Path(output_dir) if output_dir is not None else ANNOTATIONS_DIR
    output_dir.mkdir(parents=True, exist_ok=True)

    # Validate configuration before doing any work.
    resolved = get_tuning(tuning)
    cost_model = TabCostModel(config_path)

    # ── Pipeline ──────────────────────────────────────────────
    midi_data = load_midi(midi_path)
    tracks = extract_tracks(midi_data)
    if track_index is not None:
        if not 0 <= track_index < len(tracks):
            raise IndexError(
                f"Track {track_index} out of range: '{midi_path.name}' has {len(tracks)} tracks"
            )
        tracks = [tracks[track_index]]

    processed = [process_track(t, resolved, cost_model) for t in tracks]
    logger.info("Processed %d tracks from %s", len(processed), midi_path.name)

    # ── Save <stem>_tab.json ──────────────────────────────────
    stem = midi_path.stem  # filename without extension (safe with spaces/commas)
    json_path = output_dir / f"{stem}_tab.json"
    with open(json_path, "w", encoding="utf-8") as fh:
        json.dump(tracks_to_dicts(processed), fh, indent=2, ensure_ascii=False)

    # ── Optional: export annotated MIDI ───────────────────────
    if export_midi:
        _export_annotated_midi(midi_data, processed, output_dir, stem)

    return processed


def tracks_to_dicts(tracks: Sequence[ProcessedTrack]) -> list[dict[str, Any]]:
    return [t.to_dict() for t in tracks]


def _export_annotated_midi(
    midi_data: pretty_midi.PrettyMIDI,
    tracks: Sequence[ProcessedTrack],
    output_dir: Path,
    stem: str,
) -> Path:
    """Write an annotated MIDI file with tab positions encoded as lyrics.

    Each fingered note becomes a ``pretty_midi.Lyric`` at its onset with the
    text ``S<string>F<fret>`` (e.g. ``S2F5``); chords join their positions
    with ``/``.

    Args:
        midi_data: The original PrettyMIDI object.
        tracks: Processed tracks.
        output_dir: Where to save the MIDI file.
        stem: Base filename (without extension).

    Returns:
        Path to the saved annotated MIDI file.
    """
    for track in tracks:
        for event in flatten_for_playback(track.measures):
            if event.is_rest or not event.positions:
                continue
            label = "/".join(f"S{p.string}F{p.fret}" for p in event.positions)
            midi_data.lyrics.append(pretty_midi.Lyric(text=label, time=event.start_time))

    midi_out_path = output_dir / f"{stem}_tab.mid"
    midi_data.write(str(midi_out_path))
    return midi_out_path


def tracks_to_json_bytes(tracks: Sequence[ProcessedTrack]) -> bytes:
    """Serialise processed tracks to UTF-8 JSON bytes.

    Args:
        tracks: Processed tracks.

    Returns:
        UTF-8 encoded JSON bytes.
    """
    return json.dumps(tracks_to_dicts(tracks), indent=2, ensure_ascii=False).encode("utf-8")
