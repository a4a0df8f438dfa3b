"""Tab Engine — MIDI notes to guitar tablature and notation-ready measures.

Sub-package containing:
    models       – immutable records (notes, fingerings, measures)
    tunings      – open-string presets and validation
    clustering   – onset slices and chord groups
    state_space  – per-slice fingering state enumeration
    cost_model   – configurable biomechanical transition costs
    solver       – beam-pruned DP search over the whole track
    note_namer   – track-wide enharmonic spelling
    voices       – melody / bass split
    durations    – duration quantization and rest filling
    measures     – bar assembly and playback ids
    playback     – playback ordering and cursor lookup
    pipeline     – the end-to-end track conversion
    midi_parser  – MIDI loading and track decoding
    annotate     – orchestrates file-level runs and exports results
"""
