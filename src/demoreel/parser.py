"""
Demo Parser Wrapper for CS2 Replay Files

Wraps demoparser2 to extract the three inputs clip planning needs from a
.dem file:
- Lifecycle and boundary events (spawns, deaths, round ends, match end)
- Per-tick button state for the target player
- The player roster (for voice slot numbering)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import pandas as pd

from demoreel.analysis.buttons import TickSample, tick_samples_from_records
from demoreel.analysis.events import GameEvent, events_from_records
from demoreel.core.constants import CS2_TICK_RATE, EventKind

try:
    from demoparser2 import DemoParser as Demoparser2
except ImportError:
    Demoparser2 = None  # type: ignore

logger = logging.getLogger(__name__)

SEQUENCE_EVENTS = [kind.value for kind in EventKind]


@dataclass
class DemoData:
    """Parsed demo data for one target player."""

    file_path: Path
    steam_id: str
    tick_rate: int
    map_name: str
    events: list[GameEvent]
    tick_samples: list[TickSample]
    players: list[dict[str, Any]] = field(default_factory=list)

    @property
    def player_name(self) -> str:
        for p in self.players:
            if str(p.get("steamid")) == self.steam_id:
                return str(p.get("name", "Unknown"))
        return "Unknown"


def _frame_to_records(df: pd.DataFrame | None) -> list[dict[str, Any]]:
    if df is None or df.empty:
        return []
    return df.to_dict(orient="records")


def merge_event_frames(frames: list[tuple[str, pd.DataFrame]]) -> pd.DataFrame:
    """
    Merge demoparser2's per-event frames into one tick-ordered frame.

    ``parse_events`` returns ``[(event_name, DataFrame), ...]`` grouped by
    event type; the merge is a stable sort so same-tick events keep the
    requested event order.
    """
    parts = []
    for name, df in frames:
        if df is None or df.empty:
            continue
        df = df.copy()
        if "event_name" not in df.columns:
            df["event_name"] = name
        parts.append(df)

    if not parts:
        return pd.DataFrame(columns=["event_name", "tick"])

    merged = pd.concat(parts, ignore_index=True)
    return merged.sort_values("tick", kind="stable").reset_index(drop=True)


class DemoParser:
    """
    Parser for CS2 demo files.

    Wraps demoparser2 and converts its DataFrames into the plain event and
    tick-sample lists consumed by sequence detection and run encoding.
    """

    def __init__(self, demo_path: str | Path):
        """
        Initialize the parser with a demo file path.

        Args:
            demo_path: Path to the .dem file
        """
        self.demo_path = Path(demo_path)
        if not self.demo_path.exists():
            raise FileNotFoundError(f"Demo file not found: {demo_path}")
        if not self.demo_path.suffix.lower() == ".dem":
            raise ValueError(f"Expected .dem file, got: {self.demo_path.suffix}")

        self._parser: Any | None = None

    def _get_parser(self) -> Any:
        if self._parser is None:
            if Demoparser2 is None:
                raise ImportError(
                    "demoparser2 is required but not installed. "
                    "Install with: pip install demoparser2"
                )
            self._parser = Demoparser2(str(self.demo_path))
        return self._parser

    def parse_header(self) -> tuple[str, int]:
        """Return (map_name, tick_rate), falling back to defaults on failure."""
        try:
            header = self._get_parser().parse_header()
        except ImportError:
            raise
        except Exception as e:
            logger.warning(f"Failed to parse header: {e}")
            return "unknown", CS2_TICK_RATE

        if isinstance(header, dict):
            map_name = header.get("map_name", "unknown")
            tick_rate = header.get("tickrate") or CS2_TICK_RATE
            return str(map_name), int(float(tick_rate))
        return "unknown", CS2_TICK_RATE

    def parse_events(self) -> list[GameEvent]:
        """Parse spawn/death/round-end/match-won events in tick order."""
        frames = self._get_parser().parse_events(SEQUENCE_EVENTS, other=["is_warmup_period"])
        merged = merge_event_frames(frames)
        events = events_from_records(_frame_to_records(merged))
        logger.debug(f"Parsed {len(events)} sequence events")
        return events

    def parse_tick_samples(self, steam_id: str | int) -> list[TickSample]:
        """Parse per-tick button state for one player."""
        df = self._get_parser().parse_ticks(["buttons"], players=[int(steam_id)])
        samples = tick_samples_from_records(_frame_to_records(df))
        logger.debug(f"Parsed {len(samples)} input ticks for {steam_id}")
        return samples

    def parse_players(self) -> list[dict[str, Any]]:
        """Parse the player roster (steamid, name, team_number) in slot order."""
        info = self._get_parser().parse_player_info()
        if isinstance(info, pd.DataFrame):
            return _frame_to_records(info)
        if isinstance(info, list):
            return [dict(p) for p in info if isinstance(p, dict)]
        return []

    def parse(self, steam_id: str | int) -> DemoData:
        """
        Parse everything needed to plan clips for ``steam_id``.

        Returns:
            DemoData containing events, tick samples and the roster
        """
        logger.info(f"Parsing demo: {self.demo_path}")
        map_name, tick_rate = self.parse_header()

        return DemoData(
            file_path=self.demo_path,
            steam_id=str(steam_id),
            tick_rate=tick_rate,
            map_name=map_name,
            events=self.parse_events(),
            tick_samples=self.parse_tick_samples(steam_id),
            players=self.parse_players(),
        )


def parse_demo(demo_path: str | Path, steam_id: str | int) -> DemoData:
    """Convenience function to parse a demo for one player."""
    return DemoParser(demo_path).parse(steam_id)
