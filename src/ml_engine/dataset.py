"""Dataset — load and validate reference tablature for weight tuning.

Reference files list one entry per note, in onset order::

    [
      {"onset_time": 0.0, "pitch": 64, "string": 1, "fret": 0},
      {"onset_time": 0.5, "pitch": 67, "string": 1, "fret": 3},
      ...
    ]

Files must be named ``*_ground_truth.json`` and placed in the annotations
directory (default ``data/annotations/``). Each file is paired with the MIDI
file of the same stem in ``data/raw/`` (``etude_ground_truth.json`` ↔
``etude.mid``).
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from src.config import ANNOTATIONS_DIR, RAW_DIR
from src.tab_engine.state_space import MAX_FRET


_REQUIRED_KEYS: tuple[str, ...] = ("onset_time", "pitch", "string", "fret")
_GROUND_TRUTH_SUFFIX: str = "_ground_truth.json"


def _validate_entry(entry: Any, i: int, source: str) -> dict[str, Any]:
    if not isinstance(entry, dict):
        raise ValueError(f"Entry {i} in '{source}' must be an object")
    for key in _REQUIRED_KEYS:
        if key not in entry:
            raise ValueError(f"Entry {i} in '{source}' is missing required key '{key}'")

    try:
        string = int(entry["string"])
        fret = int(entry["fret"])
        pitch = int(entry["pitch"])
        onset = float(entry["onset_time"])
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Entry {i} in '{source}' has a non-numeric field: {exc}") from exc

    if string < 1:
        raise ValueError(f"Entry {i} in '{source}': string must be >= 1, got {string}")
    if not 0 <= fret <= MAX_FRET:
        raise ValueError(f"Entry {i} in '{source}': fret must be 0–{MAX_FRET}, got {fret}")

    return {"onset_time": onset, "pitch": pitch, "string": string, "fret": fret}


def load_ground_truth(json_path: str | Path) -> list[dict[str, Any]]:
    """Load and validate a single reference tablature file.

    Args:
        json_path: Path to a ``*_ground_truth.json`` file.

    Returns:
        Validated entries with ``onset_time`` (float), ``pitch``,
        ``string`` and ``fret`` (int).

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the file is not a JSON array or an entry is invalid.
    """
    path = Path(json_path)
    if not path.exists():
        raise FileNotFoundError(f"Ground-truth file not found: {path}")

    with open(path, "r", encoding="utf-8") as fh:
        data = json.load(fh)

    if not isinstance(data, list):
        raise ValueError(
            f"Ground-truth file must contain a JSON array, got {type(data).__name__}: {path}"
        )

    return [_validate_entry(entry, i, path.name) for i, entry in enumerate(data)]


def load_training_set(
    annotations_dir: str | Path | None = None,
    raw_dir: str | Path | None = None,
) -> list[dict[str, Any]]:
    """Discover every reference-tab / MIDI pair.

    Args:
        annotations_dir: Directory with ``*_ground_truth.json`` files.
            Defaults to ``data/annotations/``.
        raw_dir: Directory with the source MIDI files.
            Defaults to ``data/raw/``.

    Returns:
        One dict per pair with ``midi_path`` (Path), ``ground_truth``
        (list) and ``stem`` (str), sorted by file name.

    Raises:
        FileNotFoundError: If a directory is missing, holds no reference
            files, or a reference file has no matching MIDI.
    """
    annotations_dir = Path(annotations_dir) if annotations_dir is not None else ANNOTATIONS_DIR
    raw_dir = Path(raw_dir) if raw_dir is not None else RAW_DIR

    if not annotations_dir.is_dir():
        raise FileNotFoundError(f"Annotations directory not found: {annotations_dir}")
    if not raw_dir.is_dir():
        raise FileNotFoundError(f"Raw MIDI directory not found: {raw_dir}")

    gt_files = sorted(annotations_dir.glob(f"*{_GROUND_TRUTH_SUFFIX}"))
    if not gt_files:
        raise FileNotFoundError(
            f"No *{_GROUND_TRUTH_SUFFIX} files found in: {annotations_dir}"
        )

    pairs: list[dict[str, Any]] = []
    for gt_path in gt_files:
        stem = gt_path.name[: -len(_GROUND_TRUTH_SUFFIX)]
        candidates = [raw_dir / f"{stem}{ext}" for ext in (".mid", ".midi")]
        midi_path = next((c for c in candidates if c.exists()), None)
        if midi_path is None:
            raise FileNotFoundError(
                f"No matching MIDI file for '{gt_path.name}' "
                f"in {raw_dir} (tried {stem}.mid / {stem}.midi)"
            )

        pairs.append(
            {
                "midi_path": midi_path,
                "ground_truth": load_ground_truth(gt_path),
                "stem": stem,
            }
        )

    return pairs
