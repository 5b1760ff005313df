"""
csdm recorder argument building.

Produces the argv for ``csdm video`` for one sequence and the clip path the
recorder will write. Nothing here runs the recorder.
"""

from __future__ import annotations

from pathlib import Path

from demoreel.analysis.sequences import Sequence
from demoreel.core.config import RecordingConfig


def voice_cfg_string(voice_mask: int | None) -> str:
    """In-game cfg for the recording; -1 listens to every player."""
    indices = -1 if voice_mask is None else voice_mask
    return (
        'safezonex "1"; safezoney "1"; '
        f"tv_listen_voice_indices {indices}; tv_listen_voice_indices_h {indices};"
    )


def clip_filename(sequence: Sequence, index: int = 1) -> str:
    """File name csdm gives a recorded sequence."""
    return f"sequence-{index}-tick-{sequence.start_tick}-to-{sequence.end_tick}.mp4"


def build_record_args(
    demo_path: str | Path,
    sequence: Sequence,
    steam_id: str | int,
    output_dir: str | Path,
    voice_mask: int | None = None,
    cfg: RecordingConfig | None = None,
) -> list[str]:
    """Arguments (without the ``csdm`` executable) to record one sequence."""
    cfg = cfg or RecordingConfig()

    args = [
        "video",
        str(demo_path),
        str(sequence.start_tick),
        str(sequence.end_tick),
        "--framerate", str(cfg.framerate),
        "--width", str(cfg.width),
        "--height", str(cfg.height),
        "--encoder-software", cfg.encoder_software,
        "--ffmpeg-video-container", cfg.video_container,
    ]
    if cfg.player_voices:
        args.append("--player-voices")
    args.append("--show-only-death-notices" if cfg.show_only_death_notices else "--no-show-only-death-notices")
    args.append("--show-x-ray" if cfg.show_x_ray else "--no-show-x-ray")
    args += [
        "--focus-player", str(steam_id),
        "--output", str(output_dir),
        "--cfg", voice_cfg_string(voice_mask),
    ]
    return args
