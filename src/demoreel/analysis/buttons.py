"""
Button decoding and press-run extraction for the key overlay.

Tick data carries the player's held inputs as a bit-packed integer. For a
recorded window the overlay only needs, per tracked button, the intervals
during which it was held, expressed in seconds from the window start.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from demoreel.core.constants import CS2_TICK_RATE, TRACKED_BUTTONS, Button

logger = logging.getLogger(__name__)


def decode_buttons(raw: int | str | None) -> frozenset[Button]:
    """
    Decode a raw ``buttons`` value into the set of held buttons.

    Accepts ints or numeric strings (demoparser2 returns uint64 values that
    may arrive as either). Bits outside the button table are ignored.
    """
    if raw is None or raw == "":
        return frozenset()
    value = int(raw)
    return frozenset(button for button in Button if value & button)


@dataclass(frozen=True)
class TickSample:
    """Held buttons for the target player at one tick."""

    tick: int
    buttons: frozenset[Button] = frozenset()

    @classmethod
    def from_raw(cls, tick: int, raw: int | str | None) -> TickSample:
        return cls(tick=int(tick), buttons=decode_buttons(raw))


@dataclass(frozen=True)
class ButtonRun:
    """A continuous press of one button, in seconds relative to the clip start."""

    button: Button
    t0: float
    t1: float

    @property
    def name(self) -> str:
        return self.button.name or str(int(self.button))


def tick_samples_from_records(records: Iterable[Mapping[str, Any]]) -> list[TickSample]:
    """Build TickSamples from parse_ticks rows with ``tick`` and ``buttons`` keys."""
    samples = []
    for row in records:
        raw = row.get("buttons")
        # Missing values come back from pandas as NaN
        if isinstance(raw, float) and raw != raw:
            raw = None
        samples.append(TickSample.from_raw(row["tick"], raw))
    return samples


def build_runs_for_clip(
    samples: Iterable[TickSample],
    start_tick: int,
    end_tick: int,
    tick_rate: int = CS2_TICK_RATE,
    tracked: Iterable[Button] = TRACKED_BUTTONS,
) -> list[ButtonRun]:
    """
    Compress per-tick samples into press runs for one clip.

    Args:
        samples: Tick samples for the player (any order, may be sparse)
        start_tick: First tick of the clip
        end_tick: Last tick of the clip
        tick_rate: Ticks per second
        tracked: Buttons that produce runs; everything else is ignored

    Returns:
        Runs in the order they closed. Runs for the same button never
        overlap and are chronological. Buttons still held at the end of the
        clip are closed at the clip duration.
    """
    tracked = tuple(tracked)
    windowed = sorted(
        (s for s in samples if start_tick <= s.tick <= end_tick),
        key=lambda s: s.tick,
    )

    active: dict[Button, float] = {}
    runs: list[ButtonRun] = []

    def emit(button: Button, t0: float, t1: float) -> None:
        # Zero-length presses (duplicate ticks, press on the final tick) draw nothing
        if t1 > t0:
            runs.append(ButtonRun(button, t0, t1))

    for sample in windowed:
        now = (sample.tick - start_tick) / tick_rate
        for button in tracked:
            pressed = button in sample.buttons
            opened = active.get(button)
            if pressed and opened is None:
                active[button] = now
            elif not pressed and opened is not None:
                emit(button, opened, now)
                del active[button]

    clip_end = (end_tick - start_tick) / tick_rate
    for button in tracked:
        if button in active:
            emit(button, active.pop(button), clip_end)

    logger.debug(
        f"Built {len(runs)} runs from {len(windowed)} samples for clip [{start_tick}, {end_tick}]"
    )
    return runs
