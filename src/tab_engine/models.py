"""Models — immutable records flowing through the tablature pipeline.

Entities:
    Note            – one decoded MIDI note, addressed by a stable ``index``
    TrackRecord     – a decoded track: notes + tempo + time signature
    Fingering       – one (string, fret) realisation of a pitch
    State           – collision-free fingering assignment for one slice
    RenderableNote  – one notated event (note, chord or rest) of a voice
    Measure         – one bar with its melody and bass voices
    ProcessedTrack  – the pipeline result handed to renderers / playback

Every record exposes ``to_dict()`` returning JSON-ready primitives.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Mapping


@dataclass(frozen=True)
class Note:
    """A single note event.

    ``index`` is assigned at ingestion and is the only key used to look a
    note up later (fingering maps, voice routing).
    """

    index: int
    pitch: int
    onset: float
    duration: float
    velocity: int = 64

    @property
    def end(self) -> float:
        return self.onset + self.duration

    def to_dict(self) -> dict[str, Any]:
        return {
            "index": self.index,
            "pitch": self.pitch,
            "onset": self.onset,
            "duration": self.duration,
            "velocity": self.velocity,
        }


@dataclass(frozen=True)
class TrackRecord:
    """A decoded track ready for the pipeline.

    Raises:
        ValueError: If ``bpm`` or either time-signature term is not positive.
    """

    notes: tuple[Note, ...]
    bpm: float = 120.0
    time_signature: tuple[int, int] = (4, 4)
    name: str = ""
    instrument: str = ""
    id: int = 0

    def __post_init__(self) -> None:
        if self.bpm <= 0:
            raise ValueError(f"bpm must be positive, got {self.bpm}")
        if len(self.time_signature) != 2 or min(self.time_signature) <= 0:
            raise ValueError(
                f"time_signature must be two positive integers, got {self.time_signature}"
            )

    @property
    def beats_per_bar(self) -> int:
        return int(self.time_signature[0])

    @property
    def duration(self) -> float:
        """Track length in seconds (latest note end, 0 when empty)."""
        if not self.notes:
            return 0.0
        return max(n.end for n in self.notes)

    @classmethod
    def from_dicts(
        cls,
        notes: Iterable[Mapping[str, Any]],
        bpm: float = 120.0,
        time_signature: tuple[int, int] | list[int] = (4, 4),
        **kwargs: Any,
    ) -> "TrackRecord":
        """Ingest raw note dicts and assign stable indices.

        Each dict needs ``pitch``, ``onset`` and ``duration``; ``velocity``
        defaults to 64. Notes are stably sorted by onset before indexing, so
        equal onsets keep their input order.

        Args:
            notes: Raw note mappings.
            bpm: Tempo in beats per minute.
            time_signature: ``(numerator, denominator)``.
            **kwargs: Forwarded to the constructor (``name``, ``instrument``, ``id``).

        Returns:
            A new ``TrackRecord``.
        """
        ordered = sorted(notes, key=lambda n: float(n["onset"]))
        ingested = tuple(
            Note(
                index=i,
                pitch=int(raw["pitch"]),
                onset=float(raw["onset"]),
                duration=float(raw["duration"]),
                velocity=int(raw.get("velocity", 64)),
            )
            for i, raw in enumerate(ordered)
        )
        return cls(
            notes=ingested,
            bpm=float(bpm),
            time_signature=(int(time_signature[0]), int(time_signature[1])),
            **kwargs,
        )


@dataclass(frozen=True)
class Fingering:
    """A pitch realised on ``string`` (1 = highest) at ``fret`` (0 = open)."""

    string: int
    fret: int
    pitch: int

    def to_dict(self) -> dict[str, int]:
        return {"string": self.string, "fret": self.fret}


@dataclass(frozen=True)
class State:
    """A simultaneous fingering assignment for one slice.

    ``fingerings`` is positional: entry *k* realises the *k*-th pitch of the
    slice. An empty tuple marks an unplayable slice.
    """

    fingerings: tuple[Fingering, ...]
    avg_fret: float
    max_stretch: int
    is_barre: bool = False
    is_fallback: bool = False

    @property
    def strings(self) -> frozenset[int]:
        return frozenset(f.string for f in self.fingerings)

    @property
    def fretted_strings(self) -> frozenset[int]:
        return frozenset(f.string for f in self.fingerings if f.fret > 0)


@dataclass(frozen=True)
class RenderableNote:
    """One notated event in a voice: a note, a chord or a rest."""

    keys: tuple[str, ...]
    accidentals: tuple[str | None, ...]
    positions: tuple[Fingering, ...]
    pitches: tuple[int, ...]
    duration: str
    is_rest: bool
    start_time: float
    duration_seconds: float
    playback_id: int
    voice: int = 0  # 0 = melody, 1 = bass

    @property
    def vex_duration(self) -> str:
        """Duration code as notation engravers expect it (``"qr"`` for a rest)."""
        return f"{self.duration}r" if self.is_rest else self.duration

    def to_dict(self) -> dict[str, Any]:
        return {
            "keys": list(self.keys),
            "accidentals": list(self.accidentals),
            "positions": [p.to_dict() for p in self.positions],
            "pitches": list(self.pitches),
            "duration": self.vex_duration,
            "is_rest": self.is_rest,
            "start_time": self.start_time,
            "duration_seconds": self.duration_seconds,
            "playback_id": self.playback_id,
            "voice": self.voice,
        }


@dataclass(frozen=True)
class Measure:
    index: int
    melody: tuple[RenderableNote, ...]
    bass: tuple[RenderableNote, ...]
    width: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "index": self.index,
            "melody": [n.to_dict() for n in self.melody],
            "bass": [n.to_dict() for n in self.bass],
            "width": self.width,
        }


@dataclass(frozen=True)
class ProcessedTrack:
    """Pipeline output: measures plus the context renderers need."""

    measures: tuple[Measure, ...]
    tuning_label: str
    time_signature: tuple[int, int]
    bpm: float
    transposition: int = 0
    name: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "tuning": self.tuning_label,
            "transposition": self.transposition,
            "time_signature": list(self.time_signature),
            "bpm": self.bpm,
            "measures": [m.to_dict() for m in self.measures],
        }
