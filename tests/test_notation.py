"""Tests for pitch spelling, tunings and duration quantization."""

import pytest

from src.tab_engine.durations import (
    NO_PLAYBACK_ID,
    SYMBOL_BEATS,
    beats_to_symbol,
    fill_rests,
    symbol_to_beats,
    voice_beats,
)
from src.tab_engine.note_namer import choose_spelling, spell_pitch
from src.tab_engine.tunings import (
    TUNINGS,
    InvalidTuningError,
    Tuning,
    custom_tuning,
    get_tuning,
)


class TestSpelling:
    """Track-wide accidental policy."""

    def test_sharp_majority(self):
        assert choose_spelling([73, 66, 70]) == "sharps"

    def test_flat_majority(self):
        assert choose_spelling([63, 68, 61]) == "flats"

    def test_tie_prefers_sharps(self):
        assert choose_spelling([61, 63]) == "sharps"
        assert choose_spelling([]) == "sharps"

    def test_naturals_do_not_vote(self):
        assert choose_spelling([60, 62, 64, 70]) == "flats"


class TestSpellPitch:
    """Written pitch is an octave above sounding pitch."""

    def test_middle_c(self):
        spelled = spell_pitch(60)
        assert (spelled.letter, spelled.octave, spelled.accidental) == ("c", 5, None)
        assert spelled.key == "c/5"

    def test_open_strings(self):
        assert spell_pitch(40).key == "e/3"
        assert spell_pitch(64).key == "e/5"

    def test_sharp(self):
        spelled = spell_pitch(73, "sharps")
        assert spelled.key == "c/6"
        assert spelled.accidental == "#"

    def test_flat(self):
        spelled = spell_pitch(70, "flats")
        assert spelled.key == "b/5"
        assert spelled.accidental == "b"

    def test_octave_boundary(self):
        assert spell_pitch(59).key == "b/4"
        assert spell_pitch(71, "flats").key == "b/5"
        assert spell_pitch(72).key == "c/6"


class TestTunings:
    """Presets and validation."""

    def test_standard(self):
        assert get_tuning("standard").pitches == (64, 59, 55, 50, 45, 40)
        assert get_tuning("standard").name == "Standard E"

    def test_presets_have_six_strings(self):
        assert set(TUNINGS) == {"standard", "drop-d", "dadgad", "open-g"}
        assert all(len(t) == 6 for t in TUNINGS.values())

    def test_unknown_key(self):
        with pytest.raises(InvalidTuningError, match="banjo"):
            get_tuning("banjo")

    def test_passthrough(self):
        tuning = custom_tuning([62, 59, 55, 50, 45, 38], name="Drop D copy")
        assert get_tuning(tuning) is tuning

    def test_wrong_string_count(self):
        with pytest.raises(InvalidTuningError):
            custom_tuning([64, 59, 55, 50, 45])

    def test_non_integer_pitch(self):
        with pytest.raises(InvalidTuningError):
            Tuning("bad", "Bad", (64, 59, 55, 50, 45, 40.5))
        with pytest.raises(InvalidTuningError):
            Tuning("bad", "Bad", (64, 59, 55, 50, 45, True))

    def test_out_of_range_pitch(self):
        with pytest.raises(InvalidTuningError):
            custom_tuning([128, 59, 55, 50, 45, 40])

    def test_error_is_value_error(self):
        assert issubclass(InvalidTuningError, ValueError)


class TestDurationSymbols:
    """Threshold quantization and its inverse table."""

    @pytest.mark.parametrize(
        "beats, symbol",
        [
            (4.0, "w"), (3.5, "w"), (3.49, "hd"), (2.7, "hd"), (1.7, "h"),
            (1.69, "qd"), (1.3, "qd"), (1.0, "q"), (0.8, "q"), (0.6, "8d"),
            (0.5, "8"), (0.35, "8"), (0.25, "16"), (0.18, "16"), (0.17, "32"),
            (0.0, "32"),
        ],
    )
    def test_thresholds(self, beats, symbol):
        assert beats_to_symbol(beats) == symbol

    def test_inverse_table(self):
        assert symbol_to_beats("w") == 4.0
        assert symbol_to_beats("qd") == 1.5
        assert symbol_to_beats("8d") == 0.75
        assert symbol_to_beats("32") == 0.125

    def test_rest_suffix_ignored(self):
        assert symbol_to_beats("qr") == 1.0
        assert symbol_to_beats("hdr") == 3.0

    def test_unknown_symbol(self):
        assert symbol_to_beats("64") == 0.25

    def test_symbols_are_fixed_points(self):
        for symbol, beats in SYMBOL_BEATS.items():
            assert beats_to_symbol(beats) == symbol


class TestFillRests:
    """Gap filling for a voice."""

    timing = {"measure_start": 2.0, "seconds_per_beat": 0.5}

    def test_single_rest(self):
        events, cursor = fill_rests((), 1.0, 4.0, voice=0, **self.timing)
        assert [e.duration for e in events] == ["hd"]
        assert cursor == 4.0
        rest = events[0]
        assert rest.is_rest
        assert rest.vex_duration == "hdr"
        assert rest.keys == ("b/4",)
        assert rest.start_time == pytest.approx(2.5)
        assert rest.duration_seconds == pytest.approx(1.5)
        assert rest.playback_id == NO_PLAYBACK_ID

    def test_bass_rest_key(self):
        events, _ = fill_rests((), 0.0, 4.0, voice=1, **self.timing)
        assert [(e.duration, e.keys, e.voice) for e in events] == [("w", ("d/4",), 1)]

    def test_input_not_modified(self):
        first, cursor = fill_rests((), 0.0, 1.0, voice=0, **self.timing)
        second, _ = fill_rests(first, cursor, 4.0, voice=0, **self.timing)
        assert len(first) == 1
        assert len(second) == 2
        assert second[0] is first[0]

    def test_cursor_past_target_unchanged(self):
        events, cursor = fill_rests((), 3.0, 2.0, voice=0, **self.timing)
        assert events == ()
        assert cursor == 3.0

    def test_tiny_gap_ignored(self):
        events, cursor = fill_rests((), 1.995, 2.0, voice=0, **self.timing)
        assert events == ()
        assert cursor == 1.995

    def test_small_gap_terminates(self):
        events, cursor = fill_rests((), 0.0, 0.05, voice=0, **self.timing)
        assert [e.duration for e in events] == ["32"]
        assert cursor == 0.125

    def test_composite_gap(self):
        events, cursor = fill_rests((), 0.75, 4.0, voice=0, **self.timing)
        assert [e.duration for e in events] == ["hd", "16"]
        assert voice_beats(events) == pytest.approx(3.25)
        assert all(symbol_to_beats(e.duration) > 0 for e in events)
        assert cursor == pytest.approx(4.0)
