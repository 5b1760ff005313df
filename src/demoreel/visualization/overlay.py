"""
Key overlay filtergraph generation.

Builds the ffmpeg filter_complex text that draws a WASD-style keyboard in
the bottom-left of a recorded clip and lights up each key while its
ButtonRun is active. Only text is produced here; running the encoder is
left to the caller.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from demoreel.analysis.buttons import ButtonRun
from demoreel.core.config import OverlayConfig
from demoreel.core.constants import Button

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Tile:
    """On-screen key position in 1920x1080 pixel space."""

    x: int
    y: int
    w: int
    h: int
    label: str


KEY_TILES: dict[Button, Tile] = {
    # Top row: W E R
    Button.IN_FORWARD: Tile(210, 500, 80, 80, "W"),
    Button.IN_USE: Tile(300, 500, 80, 80, "E"),
    Button.IN_RELOAD: Tile(390, 500, 80, 80, "R"),
    # Middle row: SHIFT A S D
    Button.IN_SPEED: Tile(20, 590, 90, 80, "SHIFT"),
    Button.IN_MOVELEFT: Tile(120, 590, 80, 80, "A"),
    Button.IN_BACK: Tile(210, 590, 80, 80, "S"),
    Button.IN_MOVERIGHT: Tile(300, 590, 80, 80, "D"),
    # Bottom row: CTRL SPACE
    Button.IN_DUCK: Tile(20, 680, 90, 80, "CTRL"),
    Button.IN_JUMP: Tile(120, 680, 260, 80, "SPACE"),
    # Mouse
    Button.IN_ATTACK: Tile(390, 590, 90, 80, "M1"),
    Button.IN_ATTACK2: Tile(390, 680, 90, 80, "M2"),
}


def _drawtext(tile: Tile, cfg: OverlayConfig, alpha: float, offset: int = 0, enable: str = "") -> str:
    center_x = f"{tile.x} + ({tile.w} - text_w) / 2" + (f" + {offset}" if offset else "")
    center_y = f"{tile.y} + ({tile.h} - text_h) / 2" + (f" + {offset}" if offset else "")
    text = (
        f"drawtext=text='{tile.label}':x={center_x}:y={center_y}"
        f":fontcolor={cfg.font_color}@{alpha}:fontsize={cfg.font_size}:box=0"
    )
    if enable:
        text += f":enable='{enable}'"
    return text


def static_layer_filter(cfg: OverlayConfig | None = None) -> str:
    """Background panels, label shadows and labels for every key tile."""
    cfg = cfg or OverlayConfig()
    tiles = list(KEY_TILES.values())

    backgrounds = [
        f"drawbox=x={t.x - 2}:y={t.y - 2}:w={t.w + 4}:h={t.h + 4}:color={cfg.background_color}:t=fill"
        for t in tiles
    ]
    shadows = [_drawtext(t, cfg, 0.9, offset=1) for t in tiles]
    labels = [_drawtext(t, cfg, 0.95) for t in tiles]
    return ",".join(backgrounds + shadows + labels)


def runs_to_filter(runs: Iterable[ButtonRun], cfg: OverlayConfig | None = None) -> str:
    """Timed fill + label commands for each run; runs without a tile are skipped."""
    cfg = cfg or OverlayConfig()
    fills: list[str] = []
    labels: list[str] = []

    for run in runs:
        tile = KEY_TILES.get(run.button)
        if tile is None:
            continue
        enable = f"between(t,{run.t0:.3f},{run.t1:.3f})"
        fills.append(
            f"drawbox=x={tile.x}:y={tile.y}:w={tile.w}:h={tile.h}"
            f":color={cfg.active_color}:t=fill:enable='{enable}'"
        )
        labels.append(_drawtext(tile, cfg, 0.9, enable=enable))

    return ",".join(fills + labels)


def build_filter_graph(runs: Iterable[ButtonRun], cfg: OverlayConfig | None = None) -> str:
    """
    Full filter_complex for one clip.

    Input is ``[0:v]``, output label is ``[vout]``. Frames are converted to
    rgba first so alpha blending is consistent.
    """
    cfg = cfg or OverlayConfig()
    parts = ["format=rgba"]
    if not cfg.hide_inactive:
        parts.append(static_layer_filter(cfg))
    active = runs_to_filter(runs, cfg)
    if active:
        parts.append(active)
    return f"[0:v]{','.join(parts)}[vout]"


def overlay_output_path(clip_path: str | Path) -> Path:
    """``clip.mp4`` -> ``clip.overlay.mp4``."""
    path = Path(clip_path)
    return path.with_name(f"{path.stem}.overlay{path.suffix or '.mp4'}")


def filter_script_path(clip_path: str | Path) -> Path:
    """``clip.mp4`` -> ``clip.filter.txt``, one script per clip."""
    path = Path(clip_path)
    return path.with_name(f"{path.stem}.filter.txt")


def build_overlay_args(
    in_path: str | Path,
    out_path: str | Path,
    filter_script: str | Path,
    framerate: int = 60,
) -> list[str]:
    """ffmpeg arguments that burn a filter script into a clip at constant frame rate."""
    return [
        "-y",
        "-i", str(in_path),
        "-filter_complex_script", str(filter_script),
        "-map", "[vout]",
        "-map", "0:a?",
        "-c:v", "libx264",
        "-preset", "veryfast",
        "-crf", "18",
        "-pix_fmt", "yuv420p",
        "-vsync", "cfr",
        "-r", str(framerate),
        "-c:a", "copy",
        str(out_path),
    ]


CONCAT_MODES = ("copy", "reencode")


def concat_list_body(overlay_paths: Iterable[str | Path]) -> str:
    """
    Body of an ffmpeg concat demuxer list, one ``file '...'`` line per clip.

    Clips are listed in the given order (sequence order), never sorted by
    name. Backslashes are turned into forward slashes.
    """
    lines = []
    for path in overlay_paths:
        normalized = str(path).replace("\\", "/")
        lines.append(f"file '{normalized}'")
    return "\n".join(lines)


def build_concat_args(
    list_path: str | Path,
    out_file: str | Path,
    mode: str = "copy",
    framerate: int = 60,
) -> list[str]:
    """
    ffmpeg arguments that join the overlay clips listed in ``list_path``.

    ``copy`` remuxes without re-encoding; ``reencode`` re-encodes video and
    audio, which tolerates clips with mismatched stream parameters.

    Raises:
        ValueError: If mode is not one of CONCAT_MODES
    """
    if mode not in CONCAT_MODES:
        raise ValueError(f"Unknown concat mode: {mode}. Must be one of {', '.join(CONCAT_MODES)}")

    args = ["-f", "concat", "-safe", "0", "-i", str(list_path)]
    if mode == "copy":
        args += ["-fflags", "+genpts", "-c", "copy"]
    else:
        args += [
            "-c:v", "libx264",
            "-preset", "veryfast",
            "-crf", "18",
            "-r", str(framerate),
            "-pix_fmt", "yuv420p",
            "-c:a", "aac",
            "-ar", "48000",
            "-b:a", "160k",
        ]
    args += ["-movflags", "+faststart", str(out_file)]
    return args
