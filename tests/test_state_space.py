"""Tests for fingering state enumeration."""

import pytest

from src.tab_engine.models import Fingering
from src.tab_engine.state_space import (
    FALLBACK_STRETCH,
    MAX_FRET,
    UNPLAYABLE_STATE,
    build_state,
    candidate_fingerings,
    expand_combinations,
    generate_states,
)


class TestCandidateFingerings:
    """Per-pitch string/fret options."""

    def test_e4_positions_on_standard(self, standard):
        options = candidate_fingerings(64, standard)
        assert [(f.string, f.fret) for f in options] == [(1, 0), (2, 5), (3, 9), (4, 14), (5, 19)]

    def test_fret_matches_tuning(self, standard):
        for pitch in range(40, 85):
            for f in candidate_fingerings(pitch, standard):
                assert 0 <= f.fret <= MAX_FRET
                assert f.fret == pitch - standard.pitches[f.string - 1]
                assert f.pitch == pitch

    def test_below_lowest_string_has_no_options(self, standard):
        assert candidate_fingerings(39, standard) == []


class TestGenerateStates:
    """State space for whole slices."""

    def test_single_open_e(self, standard):
        states = generate_states([64], standard)
        assert states[0].fingerings == (Fingering(string=1, fret=0, pitch=64),)
        assert states[0].avg_fret == 0
        assert states[0].max_stretch == 0

    def test_c_major_triad_has_compact_state(self, standard):
        """C E G can be played on three distinct strings within a 5-fret span."""
        states = generate_states([60, 64, 67], standard)
        compact = [
            s for s in states
            if len(s.strings) == 3 and s.max_stretch <= 5
        ]
        assert compact

    def test_no_string_collisions(self, standard):
        for pitches in ([60, 64, 67], [40, 45, 50, 55, 59, 64], [64, 64], [55, 59, 62, 67]):
            for state in generate_states(pitches, standard):
                strings = [f.string for f in state.fingerings]
                assert len(strings) == len(set(strings))

    def test_admitted_states_respect_stretch(self, standard):
        for state in generate_states([43, 47, 50, 55, 59, 67], standard):
            assert state.max_stretch <= 5 or state.is_fallback

    def test_fingerings_follow_slice_order(self, standard):
        pitches = [67, 60, 64]
        for state in generate_states(pitches, standard):
            assert [f.pitch for f in state.fingerings] == pitches

    def test_unison_uses_two_strings(self, standard):
        states = generate_states([64, 64], standard)
        assert all(len(s.strings) == 2 for s in states)

    def test_open_chord_comes_first(self, standard):
        states = generate_states([40, 45, 50, 55, 59, 64], standard)
        assert len(states) <= 100
        assert all(f.fret == 0 for f in states[0].fingerings)

    def test_out_of_range_pitch_is_unplayable(self, standard):
        assert generate_states([30], standard) == [UNPLAYABLE_STATE]
        assert generate_states([100], standard) == [UNPLAYABLE_STATE]

    def test_one_unplayable_pitch_makes_slice_unplayable(self, standard):
        assert generate_states([64, 30], standard) == [UNPLAYABLE_STATE]

    def test_seven_notes_cannot_fit_six_strings(self, standard):
        assert generate_states([40, 45, 50, 55, 59, 64, 67], standard) == [UNPLAYABLE_STATE]

    def test_empty_slice(self, standard):
        assert generate_states([], standard) == [UNPLAYABLE_STATE]

    def test_wide_interval_falls_back(self, standard):
        """F2 + C5 only exist with spans above 5 frets."""
        states = generate_states([41, 72], standard)
        assert len(states) == 1
        fallback = states[0]
        assert fallback.is_fallback
        assert fallback.max_stretch == FALLBACK_STRETCH
        assert [(f.string, f.fret) for f in fallback.fingerings] == [(6, 1), (1, 8)]
        assert fallback.avg_fret == pytest.approx(4.5)
        assert not fallback.is_barre


class TestCombinationCap:
    """Stable-prefix truncation during expansion."""

    def test_capped_is_prefix_of_uncapped(self, standard):
        pitches = [55, 60, 64]
        capped = expand_combinations(pitches, standard, max_combinations=5)
        full = expand_combinations(pitches, standard, max_combinations=10_000)
        assert len(capped) == 5
        assert len(full) > 5
        assert capped == full[: len(capped)]

    def test_state_count_bounded(self, standard):
        states = generate_states([52, 55, 59, 64], standard, max_combinations=10)
        assert 1 <= len(states) <= 10


class TestBuildState:
    """Derived hand-shape metrics."""

    def test_open_strings_excluded_from_average(self):
        state = build_state([Fingering(1, 0, 64), Fingering(2, 3, 62)])
        assert state.avg_fret == 3
        assert state.max_stretch == 0

    def test_stretch_is_fretted_span(self):
        state = build_state([Fingering(6, 3, 43), Fingering(5, 2, 47), Fingering(1, 3, 67)])
        assert state.max_stretch == 1
        assert state.avg_fret == pytest.approx(8 / 3)

    def test_barre_needs_three_on_one_fret(self):
        barre = build_state([Fingering(1, 5, 69), Fingering(2, 5, 64), Fingering(6, 5, 45)])
        assert barre.is_barre
        pair = build_state([Fingering(1, 5, 69), Fingering(2, 5, 64)])
        assert not pair.is_barre

    def test_open_strings_never_barre(self):
        assert not build_state([Fingering(s, 0, p) for s, p in ((1, 64), (2, 59), (3, 55))]).is_barre
