"""Evaluator — score solved tab positions against reference tablature.

Metrics:
    - ``position_accuracy`` : string and fret must both match
    - ``string_accuracy``   : only the string is checked
    - ``mean_fret_error``   : mean absolute fret distance where both sides
                              have a position

Plus ``evaluate_config`` which runs the fingering stage of the pipeline on a
MIDI file with a given YAML config and returns all metrics.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Sequence

import numpy as np

from src.tab_engine.clustering import cluster_onsets
from src.tab_engine.cost_model import TabCostModel
from src.tab_engine.models import TrackRecord
from src.tab_engine.solver import solve
from src.tab_engine.tunings import DEFAULT_TUNING, Tuning, get_tuning


def _check_lengths(predicted: Sequence[Any], ground_truth: Sequence[Any]) -> None:
    if len(predicted) != len(ground_truth):
        raise ValueError(
            f"Length mismatch: predicted={len(predicted)}, "
            f"ground_truth={len(ground_truth)}"
        )


def position_accuracy(
    predicted: list[dict[str, Any]],
    ground_truth: list[dict[str, Any]],
) -> float:
    """Fraction of notes placed on the reference string *and* fret.

    Returns:
        Accuracy in [0.0, 1.0]; 0.0 on empty input.

    Raises:
        ValueError: If the two lists have different lengths.
    """
    _check_lengths(predicted, ground_truth)
    if not ground_truth:
        return 0.0
    hits = np.array(
        [p["string"] == g["string"] and p["fret"] == g["fret"] for p, g in zip(predicted, ground_truth)]
    )
    return float(hits.mean())


def string_accuracy(
    predicted: list[dict[str, Any]],
    ground_truth: list[dict[str, Any]],
) -> float:
    """Fraction of notes placed on the reference string."""
    _check_lengths(predicted, ground_truth)
    if not ground_truth:
        return 0.0
    hits = np.array([p["string"] == g["string"] for p, g in zip(predicted, ground_truth)])
    return float(hits.mean())


def mean_fret_error(
    predicted: list[dict[str, Any]],
    ground_truth: list[dict[str, Any]],
) -> float:
    """Mean absolute fret distance over notes the solver could place.

    Unplayable predictions (``fret`` is ``None``) are left out; returns 0.0
    when nothing remains.
    """
    _check_lengths(predicted, ground_truth)
    errors = [
        abs(p["fret"] - g["fret"])
        for p, g in zip(predicted, ground_truth)
        if p["fret"] is not None
    ]
    if not errors:
        return 0.0
    return float(np.mean(errors))


def predict_positions(
    track: TrackRecord,
    tuning: str | Tuning = DEFAULT_TUNING,
    cost_model: TabCostModel | None = None,
) -> list[dict[str, Any]]:
    """Run the slice + solver stages and list one position per note.

    Args:
        track: Decoded track.
        tuning: Preset key or :class:`Tuning`.
        cost_model: Cost weights to evaluate.

    Returns:
        Dicts with ``onset_time``, ``pitch``, ``string`` and ``fret`` in
        ``(onset, pitch)`` order; ``string``/``fret`` are ``None`` for
        unplayable notes.
    """
    notes = sorted(track.notes, key=lambda n: (n.onset, n.index))
    notes_by_index = {n.index: n for n in notes}
    fingerings = solve(cluster_onsets(notes), notes_by_index, get_tuning(tuning), cost_model)

    predicted: list[dict[str, Any]] = []
    for note in sorted(notes, key=lambda n: (n.onset, n.pitch)):
        fingering = fingerings.get(note.index)
        predicted.append(
            {
                "onset_time": note.onset,
                "pitch": note.pitch,
                "string": fingering.string if fingering else None,
                "fret": fingering.fret if fingering else None,
            }
        )
    return predicted


def evaluate_config(
    midi_path: str | Path,
    ground_truth: list[dict[str, Any]],
    config_path: str | Path,
    tuning: str | Tuning = DEFAULT_TUNING,
    track_index: int = 0,
) -> dict[str, float]:
    """Run the fingering stage with a YAML config and score against the reference.

    The MIDI parser is imported lazily to keep this module light for
    callers that only need the metric functions.

    Args:
        midi_path: Path to the source MIDI file.
        ground_truth: Validated reference entries.
        config_path: Path to the cost-config YAML to evaluate.
        tuning: Tuning the reference was written for.
        track_index: Which decoded track the reference describes.

    Returns:
        A dict with ``position_accuracy``, ``string_accuracy`` and
        ``mean_fret_error``.
    """
    from src.tab_engine.midi_parser import parse_midi

    tracks = parse_midi(midi_path)
    predicted = (
        predict_positions(tracks[track_index], tuning, TabCostModel(config_path))
        if track_index < len(tracks)
        else []
    )

    # The reference may cover only the first N notes.
    min_len = min(len(predicted), len(ground_truth))
    if min_len == 0:
        return {
            "position_accuracy": 0.0,
            "string_accuracy": 0.0,
            "mean_fret_error": 0.0,
        }

    pred_trimmed = predicted[:min_len]
    gt_trimmed = ground_truth[:min_len]

    return {
        "position_accuracy": position_accuracy(pred_trimmed, gt_trimmed),
        "string_accuracy": string_accuracy(pred_trimmed, gt_trimmed),
        "mean_fret_error": mean_fret_error(pred_trimmed, gt_trimmed),
    }
