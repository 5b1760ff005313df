"""
Sequence Detection Module for CS2 POV Recording.

Walks the tagged event stream for one player and emits the tick windows
worth recording:
  - A window opens a fixed delay after the player spawns
  - It closes a few seconds after the player dies
  - Or exactly at the (adjusted) round end if the player survived
  - In the final round it runs to the match-won event instead
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from demoreel.analysis.events import (
    GameEvent,
    MatchEndNotFoundError,
    normalize_events,
    tag_last_round,
)
from demoreel.core.constants import (
    CS2_TICK_RATE,
    DEATH_PADDING_SECONDS,
    SPAWN_DELAY_SECONDS,
    EventKind,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Sequence:
    """A [start_tick, end_tick] window selected for recording."""

    start_tick: int
    end_tick: int

    @property
    def duration_ticks(self) -> int:
        return self.end_tick - self.start_tick

    def duration_seconds(self, tick_rate: int = CS2_TICK_RATE) -> float:
        return self.duration_ticks / tick_rate

    def as_pair(self) -> tuple[int, int]:
        return (self.start_tick, self.end_tick)


@dataclass(frozen=True)
class _BuilderState:
    """Fold state for the sequence builder."""

    open_tick: int | None = None
    finished: bool = False


def _match_won_tick(events: list[GameEvent]) -> int:
    for event in events:
        if event.kind == EventKind.MATCH_WON:
            return event.tick
    raise MatchEndNotFoundError("No match win event found for last round")


def build_sequences(
    events: list[GameEvent],
    tick_rate: int = CS2_TICK_RATE,
    spawn_delay_seconds: float = SPAWN_DELAY_SECONDS,
    death_padding_seconds: float = DEATH_PADDING_SECONDS,
) -> list[Sequence]:
    """Build recording windows from normalized, last-round-tagged events.

    Args:
        events: Output of :func:`tag_last_round`, ascending by tick.
        tick_rate: Ticks per second.
        spawn_delay_seconds: Delay between spawn and window start.
        death_padding_seconds: Footage kept after the player's death.

    Returns:
        Windows in chronological order.

    Raises:
        MatchEndNotFoundError: If a last-round event closes a window but the
            list has no match-won event.
    """
    spawn_delay = int(spawn_delay_seconds * tick_rate)
    death_padding = int(death_padding_seconds * tick_rate)

    sequences: list[Sequence] = []
    state = _BuilderState()

    def close(start: int, end: int, reason: str) -> None:
        if end <= start:
            logger.warning(f"Dropping empty sequence [{start}, {end}] ({reason})")
            return
        logger.debug(f"Ending sequence [{start}, {end}]: {reason}")
        sequences.append(Sequence(start, end))

    for event in events:
        if state.finished:
            logger.debug(f"Final sequence already added, skipping {event.kind} at {event.tick}")
            continue

        if event.kind == EventKind.PLAYER_SPAWN:
            if state.open_tick is not None:
                logger.debug(f"Spawn at {event.tick} while a sequence is open, restarting it")
            state = _BuilderState(open_tick=event.tick + spawn_delay)
            continue

        if state.open_tick is None:
            continue

        if event.is_last_round:
            close(state.open_tick, _match_won_tick(events), "last round")
            state = _BuilderState(finished=True)
        elif event.kind == EventKind.PLAYER_DEATH:
            close(state.open_tick, event.tick + death_padding, "player death")
            state = _BuilderState()
        elif event.kind == EventKind.ROUND_OFFICIALLY_ENDED:
            close(state.open_tick, event.tick, "round ended")
            state = _BuilderState()
        else:
            logger.warning(f"Event skipped: {event.kind} at {event.tick}")

    return sequences


def find_sequences(
    events: Iterable[GameEvent],
    steam_id: str | int,
    tick_rate: int = CS2_TICK_RATE,
    spawn_delay_seconds: float = SPAWN_DELAY_SECONDS,
    death_padding_seconds: float = DEATH_PADDING_SECONDS,
) -> list[Sequence]:
    """Normalize, tag and build sequences for ``steam_id`` from raw demo events."""
    normalized = normalize_events(events, steam_id)
    tagged = tag_last_round(normalized)
    sequences = build_sequences(
        tagged,
        tick_rate=tick_rate,
        spawn_delay_seconds=spawn_delay_seconds,
        death_padding_seconds=death_padding_seconds,
    )
    logger.info(f"Found {len(sequences)} sequences for player {steam_id}")
    return sequences
