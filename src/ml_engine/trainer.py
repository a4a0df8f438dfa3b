"""Trainer — fit the scalar cost weights of ``tab_costs.yaml`` to reference tabs.

Each candidate configuration is scored by re-running the fingering solver on
every training pair and averaging position accuracy.

Search (:func:`coordinate_descent`):
    - weights are visited in ``WEIGHT_KEYS`` order;
    - each is scaled by every entry of ``MULTIPLIERS`` and the best strictly
      improving value is kept;
    - a sweep that changes nothing ends the search.

Normalisers and search bounds are never touched. The result is written to a
separate YAML file so the baseline stays intact.
"""

from __future__ import annotations

import tempfile
from pathlib import Path
from typing import Any, Callable, Mapping, Sequence

import numpy as np
import yaml

from src.config import DEFAULT_COST_CONFIG, LEARNED_COST_CONFIG
from src.tab_engine.tunings import DEFAULT_TUNING

from .evaluator import evaluate_config


WEIGHT_KEYS: tuple[str, ...] = (
    "distance_scale",
    "height_weight",
    "stretch_weight",
    "changed_strings_weight",
    "barre_penalty",
    "initial_height_weight",
)

MULTIPLIERS: tuple[float, ...] = (0.25, 0.5, 0.75, 1.25, 1.5, 2.0, 3.0)

Scorer = Callable[[Mapping[str, Any]], float]


def mean_position_accuracy(
    training_pairs: Sequence[Mapping[str, Any]],
    config_path: Path,
    tuning: str = DEFAULT_TUNING,
) -> float:
    """Average position accuracy of one YAML config over all pairs."""
    if not training_pairs:
        return 0.0
    return float(
        np.mean(
            [
                evaluate_config(pair["midi_path"], pair["ground_truth"], config_path, tuning)[
                    "position_accuracy"
                ]
                for pair in training_pairs
            ]
        )
    )


def yaml_scorer(training_pairs: Sequence[Mapping[str, Any]], tuning: str) -> Scorer:
    """Scorer that round-trips each candidate through a throwaway YAML file."""

    def score(cfg: Mapping[str, Any]) -> float:
        with tempfile.TemporaryDirectory() as tmp_dir:
            trial = Path(tmp_dir) / "trial.yaml"
            trial.write_text(yaml.safe_dump(dict(cfg)), encoding="utf-8")
            return mean_position_accuracy(training_pairs, trial, tuning)

    return score


def coordinate_descent(
    base_cfg: Mapping[str, Any],
    score: Scorer,
    max_rounds: int = 3,
    keys: Sequence[str] = WEIGHT_KEYS,
    multipliers: Sequence[float] = MULTIPLIERS,
    report: Callable[[str], None] | None = None,
) -> tuple[dict[str, Any], float, float]:
    """Greedy one-weight-at-a-time search.

    Args:
        base_cfg: Starting configuration.
        score: Maps a configuration to an accuracy (higher is better).
        max_rounds: Maximum number of sweeps.
        keys: Weights to tune, in visiting order.
        multipliers: Factors applied to the current value of a weight.
        report: Optional sink for progress lines.

    Returns:
        ``(best_cfg, baseline_score, best_score)``.
    """
    say = report or (lambda _msg: None)
    best = dict(base_cfg)
    baseline = best_score = score(best)
    say(f"Baseline position accuracy: {baseline:.4f}")

    for sweep in range(1, max_rounds + 1):
        improved = False
        for key in keys:
            current = float(best[key])
            for factor in multipliers:
                value = round(current * factor, 6)
                if value <= 0 or value == current:
                    continue
                trial = {**best, key: value}
                accuracy = score(trial)
                if accuracy > best_score:
                    say(f"  sweep {sweep}: {key} {current:.3f} -> {value:.3f} (acc={accuracy:.4f})")
                    best, best_score, improved = trial, accuracy, True
        say(f"Sweep {sweep}/{max_rounds} finished at {best_score:.4f}")
        if not improved:
            break

    return best, baseline, best_score


def _write_learned(path: Path, cfg: Mapping[str, Any], tuning: str, baseline: float, learned: float) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    header = (
        "# Fretline learned cost weights (coordinate descent)\n"
        f"# tuning: {tuning}\n"
        f"# position accuracy: {baseline:.4f} -> {learned:.4f}\n\n"
    )
    path.write_text(header + yaml.safe_dump(dict(cfg), default_flow_style=False), encoding="utf-8")


def train(
    training_pairs: Sequence[Mapping[str, Any]],
    base_config_path: str | Path | None = None,
    output_config_path: str | Path | None = None,
    tuning: str = DEFAULT_TUNING,
    max_rounds: int = 3,
    verbose: bool = True,
) -> dict[str, Any]:
    """Tune the cost weights and save the learned YAML.

    Args:
        training_pairs: Output of :func:`dataset.load_training_set`.
        base_config_path: Starting YAML. Defaults to ``configs/tab_costs.yaml``.
        output_config_path: Destination. Defaults to
            ``configs/tab_costs_learned.yaml``.
        tuning: Tuning the reference tabs were written for.
        max_rounds: Maximum number of sweeps.
        verbose: Print progress lines.

    Returns:
        ``config``, ``baseline_accuracy``, ``learned_accuracy`` and
        ``output_path``.

    Raises:
        ValueError: If there is nothing to train on.
        FileNotFoundError: If the starting YAML is missing.
    """
    if not training_pairs:
        raise ValueError(
            "Nothing to train on: add *_ground_truth.json reference tabs to "
            "data/annotations/ and their MIDI files to data/raw/."
        )

    source = Path(base_config_path) if base_config_path is not None else DEFAULT_COST_CONFIG
    target = Path(output_config_path) if output_config_path is not None else LEARNED_COST_CONFIG
    if not source.exists():
        raise FileNotFoundError(f"Cost config not found: {source}")

    base_cfg = yaml.safe_load(source.read_text(encoding="utf-8"))
    best, baseline, learned = coordinate_descent(
        base_cfg,
        yaml_scorer(training_pairs, tuning),
        max_rounds=max_rounds,
        report=print if verbose else None,
    )
    _write_learned(target, best, tuning, baseline, learned)

    if verbose:
        print(f"Learned weights written to {target} ({learned - baseline:+.4f})")

    return {
        "config": best,
        "baseline_accuracy": baseline,
        "learned_accuracy": learned,
        "output_path": target,
    }
