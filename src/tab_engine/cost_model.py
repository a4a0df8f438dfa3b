"""Cost Model — configurable biomechanical transition costs on the fretboard.

All weights and search bounds are loaded from ``configs/tab_costs.yaml``.
No hardcoded constants: if a required key is missing from the YAML,
a ``ValueError`` is raised with a clear message.

Methods:
    distance_cost         – hand movement between average fret positions
    height_cost           – preference for low fretboard positions
    stretch_cost          – finger span of the current shape
    changed_strings_cost  – strings newly brought into play
    barre_cost            – flat penalty for barre shapes
    initial_cost          – cost of the very first state of a track
    transition_cost       – aggregated transition cost
"""

from __future__ import annotations

import math
from pathlib import Path
from typing import Any, Mapping

import yaml

from src.config import DEFAULT_COST_CONFIG

from .models import State


_WEIGHT_KEYS: tuple[str, ...] = (
    "distance_scale",
    "height_weight",
    "stretch_weight",
    "changed_strings_weight",
    "barre_penalty",
    "initial_height_weight",
)

_POSITIVE_INT_KEYS: tuple[str, ...] = (
    "n_frets",
    "n_strings",
    "max_stretch_ref",
    "beam_width",
    "max_combinations",
    "max_stretch",
    "fallback_stretch",
    "max_fret",
)

REQUIRED_KEYS: tuple[str, ...] = _WEIGHT_KEYS + _POSITIVE_INT_KEYS


def changed_strings(prev: State, curr: State) -> int:
    """Strings used by ``curr`` that were not fretted in ``prev``."""
    reused = len(curr.strings & prev.fretted_strings)
    return len(curr.strings) - reused


class TabCostModel:
    """Rule-based cost model for evaluating fingering-state transitions.

    Args:
        config_path: Path to the YAML configuration file.
            Defaults to ``configs/tab_costs.yaml``.

    Raises:
        FileNotFoundError: If the configuration file does not exist.
        ValueError: If a required key is missing or a bound is not positive.
    """

    def __init__(self, config_path: str | Path | None = None) -> None:
        config_path = Path(config_path) if config_path is not None else DEFAULT_COST_CONFIG

        if not config_path.exists():
            raise FileNotFoundError(f"Cost config not found: {config_path}")

        with open(config_path, "r", encoding="utf-8") as fh:
            cfg = yaml.safe_load(fh)

        self._load(cfg, source=str(config_path))

    @classmethod
    def from_dict(cls, cfg: Mapping[str, Any], source: str = "<dict>") -> "TabCostModel":
        """Build a model from an in-memory configuration mapping."""
        model = cls.__new__(cls)
        model._load(cfg, source=source)
        return model

    def _load(self, cfg: Any, source: str) -> None:
        if not isinstance(cfg, Mapping):
            raise ValueError(f"Cost config must be a mapping: {source}")

        for key in REQUIRED_KEYS:
            if key not in cfg:
                raise ValueError(f"Missing required key '{key}' in cost config: {source}")

        self._cfg: dict[str, Any] = dict(cfg)

        self.distance_scale: float = float(cfg["distance_scale"])
        self.height_weight: float = float(cfg["height_weight"])
        self.stretch_weight: float = float(cfg["stretch_weight"])
        self.changed_strings_weight: float = float(cfg["changed_strings_weight"])
        self.barre_penalty: float = float(cfg["barre_penalty"])
        self.initial_height_weight: float = float(cfg["initial_height_weight"])

        if self.distance_scale <= 0:
            raise ValueError(f"'distance_scale' must be positive in cost config: {source}")

        bounds: dict[str, int] = {}
        for key in _POSITIVE_INT_KEYS:
            value = int(cfg[key])
            if value <= 0:
                raise ValueError(f"'{key}' must be a positive integer in cost config: {source}")
            bounds[key] = value

        self.n_frets: int = bounds["n_frets"]
        self.n_strings: int = bounds["n_strings"]
        self.max_stretch_ref: int = bounds["max_stretch_ref"]
        self.beam_width: int = bounds["beam_width"]
        self.max_combinations: int = bounds["max_combinations"]
        self.max_stretch: int = bounds["max_stretch"]
        self.fallback_stretch: int = bounds["fallback_stretch"]
        self.max_fret: int = bounds["max_fret"]

    def as_dict(self) -> dict[str, Any]:
        """Copy of the raw configuration this model was built from."""
        return dict(self._cfg)

    # ── Individual cost components ────────────────────────────

    def distance_cost(self, prev: State, curr: State) -> float:
        """Laplace-style hand movement term: normalised |Δ avg fret|.

        Args:
            prev: Previous state.
            curr: Current state.

        Returns:
            Non-negative cost.
        """
        distance = abs(curr.avg_fret - prev.avg_fret) / self.n_frets
        return distance / self.distance_scale

    def height_cost(self, curr: State) -> float:
        """Penalise playing high up the neck."""
        return math.log(1 + self.height_weight * curr.avg_fret / self.n_frets)

    def stretch_cost(self, curr: State) -> float:
        """Penalise wide hand shapes (the fallback sentinel counts as wide)."""
        return math.log(1 + self.stretch_weight * curr.max_stretch / self.max_stretch_ref)

    def changed_strings_cost(self, prev: State, curr: State) -> float:
        """Penalise strings brought into play that the hand was not holding.

        Args:
            prev: Previous state; only its fretted strings count as held.
            curr: Current state.

        Returns:
            Non-negative cost.
        """
        n_changed = changed_strings(prev, curr)
        return math.log(1 + self.changed_strings_weight * n_changed / self.n_strings)

    def barre_cost(self, curr: State) -> float:
        return self.barre_penalty if curr.is_barre else 0.0

    def initial_cost(self, state: State) -> float:
        """Cost of a state opening the track: mild bias toward low positions."""
        return state.avg_fret * self.initial_height_weight

    # ── Aggregate ─────────────────────────────────────────────

    def transition_cost(self, prev: State, curr: State) -> float:
        """Compute the total cost of moving from ``prev`` to ``curr``.

        This is the plain sum of all individual cost components; lower is
        easier to play.

        Args:
            prev: Previous fingering state.
            curr: Current fingering state.

        Returns:
            Aggregated non-negative cost.
        """
        cost = self.distance_cost(prev, curr)
        cost += self.height_cost(curr)
        cost += self.stretch_cost(curr)
        cost += self.changed_strings_cost(prev, curr)
        cost += self.barre_cost(curr)
        return cost
