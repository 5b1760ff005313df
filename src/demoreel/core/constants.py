"""
DemoReel CS2 Clip Planner - Constants

Defines the event kinds, button bit table, and timing rules shared by
sequence detection, run encoding, and voice mask calculation.
"""

from enum import IntFlag, StrEnum

# NOTE: CS2 uses 64 tick UNIVERSALLY with the subtick system
CS2_TICK_RATE = 64


class EventKind(StrEnum):
    """
    Demo events relevant to sequence detection.

    Values are the demoparser2 event names so parsed rows map directly.
    """

    PLAYER_SPAWN = "player_spawn"
    PLAYER_DEATH = "player_death"
    ROUND_OFFICIALLY_ENDED = "round_officially_ended"
    MATCH_WON = "cs_win_panel_match"


# Events that carry the acting player (user_steamid)
PLAYER_EVENT_KINDS = frozenset({EventKind.PLAYER_SPAWN, EventKind.PLAYER_DEATH})

# Events that mark a round or match boundary regardless of player
BOUNDARY_EVENT_KINDS = frozenset({EventKind.ROUND_OFFICIALLY_ENDED, EventKind.MATCH_WON})


class Button(IntFlag):
    """
    CS2 input button bits as stored in the ``buttons`` tick property.

    Bit 12 is unused. IN_SCORE (bit 33) and IN_INSPECT (bit 35) exist in the
    engine but are not part of the decoded table.
    """

    IN_ATTACK = 1 << 0
    IN_JUMP = 1 << 1
    IN_DUCK = 1 << 2
    IN_FORWARD = 1 << 3
    IN_BACK = 1 << 4
    IN_USE = 1 << 5
    IN_CANCEL = 1 << 6
    IN_TURNLEFT = 1 << 7
    IN_TURNRIGHT = 1 << 8
    IN_MOVELEFT = 1 << 9
    IN_MOVERIGHT = 1 << 10
    IN_ATTACK2 = 1 << 11
    IN_RELOAD = 1 << 13
    IN_ALT1 = 1 << 14
    IN_ALT2 = 1 << 15
    IN_SPEED = 1 << 16
    IN_WALK = 1 << 17
    IN_ZOOM = 1 << 18
    IN_WEAPON1 = 1 << 19
    IN_WEAPON2 = 1 << 20
    IN_BULLRUSH = 1 << 21
    IN_GRENADE1 = 1 << 22
    IN_GRENADE2 = 1 << 23
    IN_ATTACK3 = 1 << 24


# Buttons drawn on the key overlay (order is the overlay scan order)
TRACKED_BUTTONS: tuple[Button, ...] = (
    Button.IN_FORWARD,
    Button.IN_BACK,
    Button.IN_MOVELEFT,
    Button.IN_MOVERIGHT,
    Button.IN_JUMP,
    Button.IN_DUCK,
    Button.IN_USE,
    Button.IN_RELOAD,
    Button.IN_ATTACK,
    Button.IN_ATTACK2,
    Button.IN_SPEED,
)

# Recording starts this long after spawn (skips freeze time / buy phase)
SPAWN_DELAY_SECONDS = 10

# Recording continues this long after the player's death (kill feed, death cam)
DEATH_PADDING_SECONDS = 3

# Player slot numbers in CS2 demos run 4-13 (10 players)
VOICE_SLOT_MIN = 4
VOICE_SLOT_MAX = 13
