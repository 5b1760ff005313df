"""
Reel planning orchestrator - main pipeline from parsed demo to clip plan.

Combines sequence detection, per-clip run encoding, voice mask calculation
and the external-tool argument builders into one serializable plan. The
plan covers the whole run: record each sequence, burn the key overlay into
each clip, then join the overlay clips into one final video. The recorder
and encoder are not invoked; the plan carries everything needed to invoke
them.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any

from demoreel.analysis.buttons import ButtonRun, build_runs_for_clip
from demoreel.analysis.sequences import Sequence, find_sequences
from demoreel.analysis.voice import calculate_voice_indices, team_voice_slots
from demoreel.core.config import DemoReelConfig, get_config
from demoreel.core.utils import timed
from demoreel.parser import DemoData
from demoreel.pipeline.recording import build_record_args, clip_filename
from demoreel.visualization.overlay import (
    build_concat_args,
    build_filter_graph,
    build_overlay_args,
    concat_list_body,
    filter_script_path,
    overlay_output_path,
)

logger = logging.getLogger(__name__)

CONCAT_LIST_NAME = "overlay_list.txt"


@dataclass
class ClipPlan:
    """Everything needed to record and overlay one sequence."""

    index: int
    sequence: Sequence
    runs: list[ButtonRun]
    clip_path: Path
    overlay_path: Path
    record_args: list[str]
    filter_graph: str
    filter_script: Path
    overlay_args: list[str]

    def to_dict(self, tick_rate: int) -> dict[str, Any]:
        return {
            "index": self.index,
            "start_tick": self.sequence.start_tick,
            "end_tick": self.sequence.end_tick,
            "duration_seconds": round(self.sequence.duration_seconds(tick_rate), 3),
            "clip_path": str(self.clip_path),
            "overlay_path": str(self.overlay_path),
            "record_args": self.record_args,
            "filter_script": str(self.filter_script),
            "filter_graph": self.filter_graph,
            "overlay_args": self.overlay_args,
            "runs": [
                {"button": run.name, "t0": round(run.t0, 4), "t1": round(run.t1, 4)}
                for run in self.runs
            ],
        }


@dataclass
class ReelPlan:
    """Clip plan for one player in one demo."""

    demo_path: Path
    steam_id: str
    player_name: str
    map_name: str
    tick_rate: int
    voice_slots: list[int]
    voice_mask: int | None
    clips: list[ClipPlan] = field(default_factory=list)

    # Final join step; unset when there is nothing to join
    concat_list_path: Path | None = None
    final_path: Path | None = None
    concat_args: list[str] = field(default_factory=list)

    @property
    def sequences(self) -> list[Sequence]:
        return [clip.sequence for clip in self.clips]

    @property
    def total_seconds(self) -> float:
        return sum(s.duration_seconds(self.tick_rate) for s in self.sequences)

    @property
    def concat_list_text(self) -> str:
        """Concat list text for the overlay clips, in sequence order."""
        return concat_list_body(clip.overlay_path for clip in self.clips)

    def to_dict(self) -> dict[str, Any]:
        return {
            "demo_info": {
                "file": str(self.demo_path),
                "map": self.map_name,
                "tick_rate": self.tick_rate,
            },
            "player": {
                "steam_id": self.steam_id,
                "name": self.player_name,
                "voice_slots": self.voice_slots,
                "voice_mask": self.voice_mask,
            },
            "total_seconds": round(self.total_seconds, 3),
            "clips": [clip.to_dict(self.tick_rate) for clip in self.clips],
            "concat": {
                "list_path": str(self.concat_list_path) if self.concat_list_path else None,
                "list_body": self.concat_list_text,
                "final_path": str(self.final_path) if self.final_path else None,
                "args": self.concat_args,
            },
            "planned_at": datetime.now().isoformat(timespec="seconds"),
        }


class ReelPlanner:
    """Builds a ReelPlan from parsed demo data using the active configuration."""

    def __init__(self, config: DemoReelConfig | None = None):
        self.config = config or get_config()

    def voice_mask(self, data: DemoData) -> tuple[list[int], int | None]:
        slots = team_voice_slots(data.players, data.steam_id)
        if not slots:
            return [], None
        return slots, calculate_voice_indices(slots)

    @timed
    def plan(self, data: DemoData, output_dir: str | Path | None = None) -> ReelPlan:
        """
        Plan every clip for ``data.steam_id``.

        Args:
            data: Parsed demo data
            output_dir: Where clips will be recorded (defaults to the config
                value, then to the demo's directory)

        Raises:
            MatchEndNotFoundError: If the demo has no match-won event
            ValueError: If the configured concat mode is unknown
        """
        clips_cfg = self.config.clips
        overlay_cfg = self.config.overlay
        framerate = self.config.recording.framerate
        tick_rate = clips_cfg.tick_rate or data.tick_rate
        tracked = clips_cfg.tracked()

        out_dir = Path(output_dir or self.config.recording.output_dir or data.file_path.parent)

        sequences = find_sequences(
            data.events,
            data.steam_id,
            tick_rate=tick_rate,
            spawn_delay_seconds=clips_cfg.spawn_delay_seconds,
            death_padding_seconds=clips_cfg.death_padding_seconds,
        )
        voice_slots, voice_mask = self.voice_mask(data)

        plan = ReelPlan(
            demo_path=data.file_path,
            steam_id=data.steam_id,
            player_name=data.player_name,
            map_name=data.map_name,
            tick_rate=tick_rate,
            voice_slots=voice_slots,
            voice_mask=voice_mask,
        )

        for sequence in sequences:
            runs = build_runs_for_clip(
                data.tick_samples,
                sequence.start_tick,
                sequence.end_tick,
                tick_rate=tick_rate,
                tracked=tracked,
            )
            clip_path = out_dir / clip_filename(sequence)
            overlay_path = overlay_output_path(clip_path)
            script_path = filter_script_path(clip_path)
            plan.clips.append(
                ClipPlan(
                    index=len(plan.clips) + 1,
                    sequence=sequence,
                    runs=runs,
                    clip_path=clip_path,
                    overlay_path=overlay_path,
                    record_args=build_record_args(
                        data.file_path,
                        sequence,
                        data.steam_id,
                        out_dir,
                        voice_mask=voice_mask,
                        cfg=self.config.recording,
                    ),
                    filter_graph=build_filter_graph(runs, overlay_cfg),
                    filter_script=script_path,
                    overlay_args=build_overlay_args(
                        clip_path, overlay_path, script_path, framerate=framerate
                    ),
                )
            )

        if plan.clips:
            plan.concat_list_path = out_dir / CONCAT_LIST_NAME
            plan.final_path = out_dir / overlay_cfg.final_name
            plan.concat_args = build_concat_args(
                plan.concat_list_path,
                plan.final_path,
                mode=overlay_cfg.concat_mode,
                framerate=framerate,
            )

        logger.info(
            f"Planned {len(plan.clips)} clips ({plan.total_seconds:.1f}s) for {data.steam_id}"
        )
        return plan


def export_plan(plan: ReelPlan, path: Path, indent: int = 2) -> Path:
    """Write a plan as JSON."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        json.dump(plan.to_dict(), f, indent=indent)
    logger.info(f"Exported plan to: {path}")
    return path
