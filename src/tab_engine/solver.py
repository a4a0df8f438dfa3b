"""Solver — layered dynamic-programming search for a whole-track fingering path.

Layer:      one node per candidate :class:`State` of a slice.
Transition: :meth:`TabCostModel.transition_cost` between every node of the
            previous layer and every state of the current one.
Output:     the minimum-cost path, one state per slice, recovered by
            backtracking predecessor indices.

Design choices:
    - The search runs once over the entire track, independent of measures.
    - Layers larger than ``beam_width`` are stably sorted by cumulative
      cost and truncated. This is a beam search: the path is optimal only
      up to the beam width, an accepted approximation.
    - Ties keep generation order (stable sort, strict ``<`` minimum), so
      identical inputs always give identical paths.
    - :func:`solve_exhaustive` scores every path and serves as a reference
      for small inputs.
"""

from __future__ import annotations

import itertools
import logging
import math
from dataclasses import dataclass
from typing import Mapping, Sequence

from .clustering import Slice
from .cost_model import TabCostModel
from .models import Fingering, Note, State
from .state_space import UNPLAYABLE_STATE, generate_states
from .tunings import Tuning


logger = logging.getLogger(__name__)


@dataclass
class PathNode:
    state: State
    min_cost: float
    prev_index: int  # index into the previous layer, -1 on layer 0


@dataclass(frozen=True)
class SolvedPath:
    states: tuple[State, ...]
    cost: float


def _states_for(pitches: Sequence[int], tuning: Tuning, cost_model: TabCostModel) -> list[State]:
    return generate_states(
        pitches,
        tuning,
        max_fret=cost_model.max_fret,
        max_combinations=cost_model.max_combinations,
        max_stretch=cost_model.max_stretch,
        fallback_stretch=cost_model.fallback_stretch,
    )


def path_cost(states: Sequence[State], cost_model: TabCostModel) -> float:
    """Total cost of an explicit state path under ``cost_model``."""
    if not states:
        return 0.0
    cost = cost_model.initial_cost(states[0])
    for prev, curr in zip(states, states[1:]):
        cost += cost_model.transition_cost(prev, curr)
    return cost


def solve_path(
    slice_pitches: Sequence[Sequence[int]],
    tuning: Tuning,
    cost_model: TabCostModel | None = None,
) -> SolvedPath:
    """Find the minimum-cost fingering path over a sequence of slices.

    Args:
        slice_pitches: Pitches of every slice, in timeline order.
        tuning: Instrument tuning.
        cost_model: Cost weights and search bounds. Defaults to the
            project configuration.

    Returns:
        A :class:`SolvedPath` with exactly one state per slice.
    """
    n = len(slice_pitches)
    if n == 0:
        return SolvedPath(states=(), cost=0.0)

    if cost_model is None:
        cost_model = TabCostModel()

    # ── Initialise first layer ────────────────────────────────
    graph: list[list[PathNode]] = [
        [
            PathNode(state=s, min_cost=cost_model.initial_cost(s), prev_index=-1)
            for s in _states_for(slice_pitches[0], tuning, cost_model)
        ]
    ]

    # ── Forward pass ──────────────────────────────────────────
    for i in range(1, n):
        previous_layer = graph[-1]
        current_states = _states_for(slice_pitches[i], tuning, cost_model)
        if not previous_layer or not current_states:
            logger.warning("Empty solver layer at slice %d; remaining slices left unfingered", i)
            break

        layer: list[PathNode] = []
        for curr in current_states:
            best_cost: float = math.inf
            best_prev: int = -1
            for p_idx, prev in enumerate(previous_layer):
                total = prev.min_cost + cost_model.transition_cost(prev.state, curr)
                if total < best_cost:
                    best_cost = total
                    best_prev = p_idx
            layer.append(PathNode(state=curr, min_cost=best_cost, prev_index=best_prev))

        # Beam pruning; sorted() is stable so ties keep generation order.
        if len(layer) > cost_model.beam_width:
            layer = sorted(layer, key=lambda node: node.min_cost)[: cost_model.beam_width]

        graph.append(layer)

    # ── Backtrack ─────────────────────────────────────────────
    while graph and not graph[-1]:
        graph.pop()
    if not graph:
        return SolvedPath(states=(UNPLAYABLE_STATE,) * n, cost=0.0)

    last_layer = graph[-1]
    best_idx = min(range(len(last_layer)), key=lambda k: last_layer[k].min_cost)
    total_cost = last_layer[best_idx].min_cost

    path: list[State] = []
    node_idx = best_idx
    for layer in reversed(graph):
        node = layer[node_idx]
        path.append(node.state)
        node_idx = node.prev_index
    path.reverse()

    # Slices past an empty layer get no fingering.
    path.extend([UNPLAYABLE_STATE] * (n - len(path)))

    logger.debug("Solved %d slices, total cost %.4f", n, total_cost)
    return SolvedPath(states=tuple(path), cost=total_cost)


def solve(
    slices: Sequence[Slice],
    notes_by_index: Mapping[int, Note],
    tuning: Tuning,
    cost_model: TabCostModel | None = None,
) -> dict[int, Fingering]:
    """Solve the whole track and map every note index to its fingering.

    Args:
        slices: Slice timeline of note indices (see :func:`cluster_onsets`).
        notes_by_index: Note lookup by stable index.
        tuning: Instrument tuning.
        cost_model: Cost weights and search bounds.

    Returns:
        ``{note_index: Fingering}``. Notes of an unplayable slice are absent.
    """
    slice_pitches = [[notes_by_index[i].pitch for i in s] for s in slices]
    solved = solve_path(slice_pitches, tuning, cost_model)

    fingerings: dict[int, Fingering] = {}
    for note_indices, state in zip(slices, solved.states):
        # State fingerings are positional with the slice's notes.
        for note_index, fingering in zip(note_indices, state.fingerings):
            fingerings[note_index] = fingering
    return fingerings


def solve_exhaustive(
    slice_pitches: Sequence[Sequence[int]],
    tuning: Tuning,
    cost_model: TabCostModel | None = None,
    max_paths: int = 200_000,
) -> SolvedPath:
    """Score every possible state path and return the cheapest.

    Reference implementation for small inputs: no beam, no pruning.

    Raises:
        ValueError: If the number of paths exceeds ``max_paths``.
    """
    if not slice_pitches:
        return SolvedPath(states=(), cost=0.0)
    if cost_model is None:
        cost_model = TabCostModel()

    layers = [_states_for(p, tuning, cost_model) for p in slice_pitches]
    total_paths = math.prod(len(layer) for layer in layers)
    if total_paths > max_paths:
        raise ValueError(f"Exhaustive search over {total_paths} paths exceeds max_paths={max_paths}")

    best_states: tuple[State, ...] = ()
    best_cost = math.inf
    for candidate in itertools.product(*layers):
        cost = path_cost(candidate, cost_model)
        if cost < best_cost:
            best_cost = cost
            best_states = candidate
    return SolvedPath(states=best_states, cost=best_cost)
