"""Tunings — open-string presets and construction-time validation.

Pitches are ordered high string first: index 0 is string 1.
"""

from __future__ import annotations

from dataclasses import dataclass


STANDARD_STRING_COUNT: int = 6


class InvalidTuningError(ValueError):
    """Raised when a tuning cannot be built or resolved."""


@dataclass(frozen=True)
class Tuning:
    """An ordered set of open-string MIDI pitches.

    Args:
        key: Preset identifier (e.g. ``"drop-d"``).
        name: Human-readable label carried into the processed track.
        pitches: Open-string pitches, highest string first.
        string_count: Number of strings the instrument must have.

    Raises:
        InvalidTuningError: On a wrong string count or a pitch that is not
            an integer MIDI number.
    """

    key: str
    name: str
    pitches: tuple[int, ...]
    string_count: int = STANDARD_STRING_COUNT

    def __post_init__(self) -> None:
        if len(self.pitches) != self.string_count:
            raise InvalidTuningError(
                f"Tuning '{self.key}' needs exactly {self.string_count} strings, "
                f"got {len(self.pitches)}"
            )
        for pitch in self.pitches:
            if isinstance(pitch, bool) or not isinstance(pitch, int):
                raise InvalidTuningError(
                    f"Tuning '{self.key}' has a non-integer pitch: {pitch!r}"
                )
            if not 0 <= pitch <= 127:
                raise InvalidTuningError(
                    f"Tuning '{self.key}' has a pitch outside 0–127: {pitch}"
                )

    def __len__(self) -> int:
        return len(self.pitches)

    def open_pitch(self, string: int) -> int:
        """Open pitch of ``string`` (1-based)."""
        return self.pitches[string - 1]


# ── Presets ───────────────────────────────────────────────────
TUNINGS: dict[str, Tuning] = {
    "standard": Tuning("standard", "Standard E", (64, 59, 55, 50, 45, 40)),  # E4 B3 G3 D3 A2 E2
    "drop-d": Tuning("drop-d", "Drop D", (64, 59, 55, 50, 45, 38)),
    "dadgad": Tuning("dadgad", "DADGAD", (62, 57, 55, 50, 45, 38)),
    "open-g": Tuning("open-g", "Open G", (62, 59, 55, 50, 47, 38)),
}

DEFAULT_TUNING: str = "standard"


def get_tuning(tuning: str | Tuning) -> Tuning:
    """Resolve a preset key (or pass a ``Tuning`` through).

    Raises:
        InvalidTuningError: If ``tuning`` names no known preset.
    """
    if isinstance(tuning, Tuning):
        return tuning
    try:
        return TUNINGS[tuning]
    except KeyError:
        known = ", ".join(sorted(TUNINGS))
        raise InvalidTuningError(
            f"Unknown tuning '{tuning}' (known: {known})"
        ) from None


def custom_tuning(
    pitches: list[int] | tuple[int, ...],
    name: str = "Custom",
    string_count: int = STANDARD_STRING_COUNT,
) -> Tuning:
    """Build a validated tuning from raw open-string pitches."""
    return Tuning("custom", name, tuple(pitches), string_count=string_count)
