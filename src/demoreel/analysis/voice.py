"""
Voice index bitmask for tv_listen_voice_indices.

In CS2 demos players are assigned slot numbers 4-13. The
``tv_listen_voice_indices`` console variable takes a bitmask where slot N
maps to bit N-1, so a recording can be limited to one team's voice comms.

Example:
    >>> calculate_voice_indices([4, 6, 8, 9, 11])
    1448
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from demoreel.core.constants import VOICE_SLOT_MAX, VOICE_SLOT_MIN

logger = logging.getLogger(__name__)


@dataclass
class VoiceIndicesInfo:
    """Human-readable breakdown of a voice mask."""

    player_numbers: list[int]
    bit_positions: list[int]
    binary: str  # 32 bits, grouped by byte
    hex: str
    decimal: int
    command: str


def calculate_voice_indices(player_numbers: Iterable[int]) -> int:
    """
    Convert player slot numbers to the tv_listen_voice_indices bitmask.

    Args:
        player_numbers: Slot numbers (4-13); order and duplicates don't matter

    Returns:
        Bitmask with bit (slot - 1) set for every slot

    Raises:
        ValueError: If any slot is outside 4-13
    """
    slots = list(player_numbers)
    for slot in slots:
        if isinstance(slot, bool) or not isinstance(slot, int):
            raise ValueError(f"Invalid player number: {slot!r}. Must be an integer")
        if slot < VOICE_SLOT_MIN or slot > VOICE_SLOT_MAX:
            raise ValueError(
                f"Invalid player number: {slot}. Must be between {VOICE_SLOT_MIN}-{VOICE_SLOT_MAX}"
            )

    bitmask = 0
    for slot in slots:
        bitmask |= 1 << (slot - 1)
    return bitmask


def visualize_voice_indices(player_numbers: Iterable[int]) -> VoiceIndicesInfo:
    """Break a voice mask down into binary/hex forms for debugging."""
    requested = list(player_numbers)
    decimal = calculate_voice_indices(requested)
    slots = sorted(set(requested))
    binary = format(decimal, "032b")

    return VoiceIndicesInfo(
        player_numbers=slots,
        bit_positions=[slot - 1 for slot in slots],
        binary=" ".join(binary[i : i + 8] for i in range(0, 32, 8)),
        hex=f"0x{decimal:08X}",
        decimal=decimal,
        command=f"tv_listen_voice_indices {decimal}",
    )


@dataclass(frozen=True)
class PlayerSlot:
    """A player's demo slot number and team."""

    steam_id: str
    team_number: int
    number: int


def assign_player_slots(players: Sequence[Mapping[str, Any]]) -> list[PlayerSlot]:
    """
    Number players in roster order starting at slot 4.

    Args:
        players: parse_player_info rows with ``steamid`` and ``team_number``
    """
    return [
        PlayerSlot(
            steam_id=str(p.get("steamid", "")),
            team_number=int(p.get("team_number") or 0),
            number=index + VOICE_SLOT_MIN,
        )
        for index, p in enumerate(players)
    ]


def team_voice_slots(players: Sequence[Mapping[str, Any]], steam_id: str | int) -> list[int]:
    """Slot numbers of every player on ``steam_id``'s team (empty if not found)."""
    slots = assign_player_slots(players)
    target = next((s for s in slots if s.steam_id == str(steam_id)), None)
    if target is None:
        logger.warning(f"Player {steam_id} not found in roster, voice mask disabled")
        return []
    return [s.number for s in slots if s.team_number == target.team_number]
