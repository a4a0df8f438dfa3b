"""Playback — time-ordered event list and cursor lookup for highlighting.

:func:`flatten_for_playback` is the single definition of playback order:
each measure's melody then bass events, stably sorted by ``start_time``.
:class:`PlaybackCursor` walks that list forward as playback time advances,
so each lookup is amortised O(1).
"""

from __future__ import annotations

from typing import Iterable, Sequence

from .models import Measure, RenderableNote


END_OF_TRACK_TAIL: float = 4.0  # seconds played past the last event


def flatten_for_playback(measures: Iterable[Measure]) -> list[RenderableNote]:
    """Concatenate all voices of all measures in playback order."""
    events: list[RenderableNote] = []
    for measure in measures:
        events.extend(measure.melody)
        events.extend(measure.bass)
    events.sort(key=lambda e: e.start_time)
    return events


class PlaybackCursor:
    """Monotonic cursor over a flattened event list.

    Args:
        events: Output of :func:`flatten_for_playback`.
    """

    def __init__(self, events: Sequence[RenderableNote]) -> None:
        self._events = list(events)
        self._position = 0

    @property
    def position(self) -> int:
        return self._position

    def reset(self) -> None:
        self._position = 0

    def advance(self, elapsed: float) -> int | None:
        """Playback id of the event sounding at ``elapsed`` seconds.

        The current event is the last one whose ``start_time`` is not after
        ``elapsed``. Returns ``None`` before the first event. Rests report
        their id (``-1``). ``elapsed`` must not decrease between calls
        without a :meth:`reset`.
        """
        if not self._events:
            return None
        cursor = self._position
        while cursor < len(self._events) - 1 and self._events[cursor + 1].start_time <= elapsed:
            cursor += 1
        self._position = cursor

        current = self._events[cursor]
        if elapsed >= current.start_time:
            return current.playback_id
        return None

    def is_finished(self, elapsed: float, tail: float = END_OF_TRACK_TAIL) -> bool:
        """Whether playback has run ``tail`` seconds past the last event's start."""
        if not self._events:
            return True
        return elapsed > self._events[-1].start_time + tail
