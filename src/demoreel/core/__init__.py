"""
DemoReel Core - Foundation modules shared by the planning pipeline.

This module contains the fundamental components:
- constants: Tick rate, event kinds, button table and timing rules
- config: Application configuration management
- utils: Timing helpers
"""

from demoreel.core.constants import (
    BOUNDARY_EVENT_KINDS,
    CS2_TICK_RATE,
    DEATH_PADDING_SECONDS,
    PLAYER_EVENT_KINDS,
    SPAWN_DELAY_SECONDS,
    TRACKED_BUTTONS,
    VOICE_SLOT_MAX,
    VOICE_SLOT_MIN,
    Button,
    EventKind,
)

__all__ = [
    # Enums
    "Button",
    "EventKind",
    # Constants
    "BOUNDARY_EVENT_KINDS",
    "CS2_TICK_RATE",
    "DEATH_PADDING_SECONDS",
    "PLAYER_EVENT_KINDS",
    "SPAWN_DELAY_SECONDS",
    "TRACKED_BUTTONS",
    "VOICE_SLOT_MAX",
    "VOICE_SLOT_MIN",
]
