"""Tests for onset clustering and voice separation."""

from src.tab_engine.clustering import (
    CHORD_TOLERANCE,
    SLICE_TOLERANCE,
    cluster_onsets,
    group_chords,
)
from src.tab_engine.models import Note
from src.tab_engine.voices import BASS_SPLIT_PITCH, separate_voices, split_chord


def _notes(onsets, pitch=64):
    return [Note(index=i, pitch=pitch, onset=o, duration=0.25) for i, o in enumerate(onsets)]


class TestClusterOnsets:
    """The 35 ms solver timeline."""

    def test_tolerances(self):
        assert SLICE_TOLERANCE == 0.035
        assert CHORD_TOLERANCE == 0.02

    def test_partition(self):
        notes = _notes([0.0, 0.01, 0.02, 0.5, 0.51, 1.0])
        slices = cluster_onsets(notes)
        assert slices == [(0, 1, 2), (3, 4), (5,)]
        flat = [i for s in slices for i in s]
        assert sorted(flat) == list(range(len(notes)))

    def test_anchor_is_first_note(self):
        """A chain of close onsets does not roll the window forward."""
        notes = _notes([0.0, 0.03, 0.06])
        assert cluster_onsets(notes) == [(0, 1), (2,)]

    def test_boundary_is_exclusive(self):
        notes = _notes([0.0, 0.035])
        assert cluster_onsets(notes) == [(0,), (1,)]

    def test_empty(self):
        assert cluster_onsets([]) == []


class TestGroupChords:
    """The 20 ms notation grouping."""

    def test_tighter_than_slices(self):
        notes = _notes([0.0, 0.015, 0.025])
        assert [[n.index for n in g] for g in group_chords(notes)] == [[0, 1], [2]]
        assert cluster_onsets(notes) == [(0, 1, 2)]

    def test_sorts_by_onset(self):
        notes = [Note(0, 60, 0.5, 0.25), Note(1, 64, 0.0, 0.25)]
        assert [[n.index for n in g] for g in group_chords(notes)] == [[1], [0]]


class TestVoices:
    """Melody / bass routing."""

    def test_chord_lowest_note_is_bass(self):
        chord = [Note(0, 67, 0.0, 1.0), Note(1, 48, 0.0, 1.0), Note(2, 64, 0.0, 1.0)]
        split = split_chord(chord)
        assert split.bass.pitch == 48
        assert [n.pitch for n in split.melody] == [64, 67]

    def test_high_chord_still_has_bass(self):
        split = split_chord([Note(0, 76, 0.0, 1.0), Note(1, 72, 0.0, 1.0)])
        assert split.bass.pitch == 72
        assert [n.pitch for n in split.melody] == [76]

    def test_single_note_threshold(self):
        low = split_chord([Note(0, BASS_SPLIT_PITCH - 1, 0.0, 1.0)])
        assert low.bass is not None and low.melody == ()
        high = split_chord([Note(0, BASS_SPLIT_PITCH, 0.0, 1.0)])
        assert high.bass is None and len(high.melody) == 1

    def test_separate_voices_regroups(self):
        notes = [Note(0, 60, 0.0, 0.5), Note(1, 64, 0.01, 0.5), Note(2, 67, 0.03, 0.5)]
        splits = separate_voices(notes)
        assert len(splits) == 2
        assert splits[0].bass.pitch == 60
        assert [n.pitch for n in splits[0].melody] == [64]
        assert splits[0].onset == 0.0
        assert splits[1].bass is None
        assert splits[1].onset == 0.03

    def test_every_note_routed_once(self):
        notes = [Note(i, 40 + 3 * i, 0.005 * i, 0.5) for i in range(8)]
        routed = []
        for split in separate_voices(notes):
            routed.extend(n.index for n in split.melody)
            if split.bass is not None:
                routed.append(split.bass.index)
        assert sorted(routed) == list(range(8))
