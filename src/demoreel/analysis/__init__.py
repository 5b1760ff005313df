"""
DemoReel Analysis - sequence detection, button runs and voice masks.
"""

from demoreel.analysis.buttons import (
    ButtonRun,
    TickSample,
    build_runs_for_clip,
    decode_buttons,
    tick_samples_from_records,
)
from demoreel.analysis.events import (
    GameEvent,
    MatchEndNotFoundError,
    events_from_records,
    normalize_events,
    tag_last_round,
)
from demoreel.analysis.sequences import Sequence, build_sequences, find_sequences
from demoreel.analysis.voice import (
    VoiceIndicesInfo,
    calculate_voice_indices,
    team_voice_slots,
    visualize_voice_indices,
)

__all__ = [
    "ButtonRun",
    "GameEvent",
    "MatchEndNotFoundError",
    "Sequence",
    "TickSample",
    "VoiceIndicesInfo",
    "build_runs_for_clip",
    "build_sequences",
    "calculate_voice_indices",
    "decode_buttons",
    "events_from_records",
    "find_sequences",
    "normalize_events",
    "tag_last_round",
    "team_voice_slots",
    "tick_samples_from_records",
    "visualize_voice_indices",
]
