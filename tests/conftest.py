"""Shared fixtures for the tablature engine tests."""

import pretty_midi
import pytest

from src.tab_engine.cost_model import TabCostModel
from src.tab_engine.models import TrackRecord
from src.tab_engine.tunings import TUNINGS


@pytest.fixture
def standard():
    return TUNINGS["standard"]


@pytest.fixture(scope="session")
def cost_model():
    return TabCostModel()


@pytest.fixture
def make_track():
    """Build a TrackRecord from ``(pitch, onset, duration)`` triples."""

    def _make(triples, bpm=120.0, time_signature=(4, 4), name="Test"):
        notes = [{"pitch": p, "onset": o, "duration": d, "velocity": 90} for p, o, d in triples]
        return TrackRecord.from_dicts(notes, bpm=bpm, time_signature=time_signature, name=name)

    return _make


@pytest.fixture
def write_midi(tmp_path):
    """Write a single-guitar MIDI file from ``(pitch, start, end)`` triples."""

    def _write(triples, filename="song.mid", tempo=120.0):
        midi = pretty_midi.PrettyMIDI(initial_tempo=tempo)
        guitar = pretty_midi.Instrument(program=24, name="Guitar")
        for pitch, start, end in triples:
            guitar.notes.append(pretty_midi.Note(velocity=90, pitch=pitch, start=start, end=end))
        midi.instruments.append(guitar)
        path = tmp_path / filename
        midi.write(str(path))
        return path

    return _write
