"""
Event normalization and last-round tagging for sequence detection.

The raw demo event stream mixes every player's spawns and deaths with
round/match boundaries and warm-up noise. Before the sequence builder can
run, the stream is reduced to the target player's lifecycle plus the
boundaries, deduplicated, and each event is tagged with whether it falls
in the final round of the match.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, replace
from typing import Any

from demoreel.core.constants import BOUNDARY_EVENT_KINDS, PLAYER_EVENT_KINDS, EventKind

logger = logging.getLogger(__name__)


class MatchEndNotFoundError(ValueError):
    """Raised when the last round cannot be resolved because no match-won event exists."""

    def __init__(self, message: str = "No match win event found"):
        super().__init__(message)


@dataclass(frozen=True)
class GameEvent:
    """A lifecycle or boundary event at a specific tick."""

    kind: EventKind
    tick: int
    steam_id: str | None = None
    is_warmup: bool = False
    is_last_round: bool = False


def _is_relevant(event: GameEvent, steam_id: str) -> bool:
    if event.kind in PLAYER_EVENT_KINDS:
        return event.steam_id == steam_id
    return event.kind in BOUNDARY_EVENT_KINDS


def normalize_events(events: Iterable[GameEvent], steam_id: str | int) -> list[GameEvent]:
    """
    Reduce a raw event stream to what the sequence builder needs.

    - Warm-up events are dropped.
    - Spawns/deaths are kept only for ``steam_id``; round-end and match-won
      events are always kept.
    - Events sharing the same kind and tick are collapsed (first wins).
    - Round-end ticks are moved back by one so a round end always sorts
      before a spawn stamped on the same tick.

    Args:
        events: Raw events in demo order
        steam_id: Target player's Steam ID

    Returns:
        New list of events, stable-sorted by adjusted tick
    """
    target = str(steam_id)
    seen: set[tuple[EventKind, int]] = set()
    normalized: list[GameEvent] = []

    for event in events:
        if event.is_warmup or not _is_relevant(event, target):
            continue

        key = (event.kind, event.tick)
        if key in seen:
            logger.debug(f"Dropping duplicate {event.kind} at tick {event.tick}")
            continue
        seen.add(key)

        if event.kind == EventKind.ROUND_OFFICIALLY_ENDED:
            event = replace(event, tick=event.tick - 1)
        normalized.append(event)

    normalized.sort(key=lambda e: e.tick)
    return normalized


def tag_last_round(events: list[GameEvent]) -> list[GameEvent]:
    """
    Tag every event that belongs to the final round of the match.

    Scans backward from the match end. The match-won event is always in the
    last round; any other event is in the last round only if no round-end has
    been passed yet. A round-end counts itself, so the round-end closing the
    second-to-last round is never tagged.

    Raises:
        MatchEndNotFoundError: If a non-empty list has no match-won event
    """
    if not events:
        return []
    if not any(e.kind == EventKind.MATCH_WON for e in events):
        raise MatchEndNotFoundError()

    tagged: list[GameEvent] = []
    round_ends_seen = 0
    for event in reversed(events):
        if event.kind == EventKind.MATCH_WON:
            tagged.append(replace(event, is_last_round=True))
            continue
        if event.kind == EventKind.ROUND_OFFICIALLY_ENDED:
            round_ends_seen += 1
        tagged.append(replace(event, is_last_round=round_ends_seen == 0))

    tagged.reverse()
    return tagged


def _coerce_steam_id(value: Any) -> str | None:
    if value is None:
        return None
    # pandas hands back NaN for events without a user
    if isinstance(value, float):
        if value != value:
            return None
        # float64 loses precision past 2**53, which covers every 64-bit Steam ID
        if value.is_integer() and abs(value) <= 2**53:
            return str(int(value))
        logger.warning(f"Discarding Steam ID that lost precision as a float: {value!r}")
        return None
    return str(value)


def _coerce_flag(value: Any) -> bool:
    if value is None or (isinstance(value, float) and value != value):
        return False
    return bool(value)


def events_from_records(records: Iterable[Mapping[str, Any]]) -> list[GameEvent]:
    """
    Build GameEvents from demoparser2-style event rows.

    Expected keys: ``event_name``, ``tick``, and optionally ``user_steamid``
    and ``is_warmup_period``. Rows with an unknown event name are skipped.
    """
    events: list[GameEvent] = []
    for row in records:
        try:
            kind = EventKind(row["event_name"])
        except ValueError:
            logger.debug(f"Skipping unsupported event: {row.get('event_name')}")
            continue

        events.append(
            GameEvent(
                kind=kind,
                tick=int(row["tick"]),
                steam_id=_coerce_steam_id(row.get("user_steamid")),
                is_warmup=_coerce_flag(row.get("is_warmup_period")),
            )
        )
    return events
