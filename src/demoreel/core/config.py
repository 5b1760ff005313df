"""
Configuration Management for DemoReel

Provides configuration loading from multiple sources:
- Default values
- Configuration files (YAML, TOML, JSON)
- Environment variables
- Command line arguments

Configuration precedence (highest to lowest):
1. Command line arguments
2. Environment variables (DEMOREEL_*)
3. Configuration file
4. Default values
"""

import json
import logging
import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

from demoreel.core.constants import (
    CS2_TICK_RATE,
    DEATH_PADDING_SECONDS,
    SPAWN_DELAY_SECONDS,
    TRACKED_BUTTONS,
    Button,
)

logger = logging.getLogger(__name__)


# ============================================================================
# Configuration Dataclasses
# ============================================================================


@dataclass
class ClipConfig:
    """Configuration for sequence detection and run encoding."""

    tick_rate: int = CS2_TICK_RATE
    spawn_delay_seconds: float = SPAWN_DELAY_SECONDS
    death_padding_seconds: float = DEATH_PADDING_SECONDS

    # Button names (Button member names) that get overlay runs
    tracked_buttons: list[str] = field(default_factory=lambda: [b.name for b in TRACKED_BUTTONS])

    def tracked(self) -> tuple[Button, ...]:
        """Resolve tracked_buttons names to Button members."""
        try:
            return tuple(Button[name] for name in self.tracked_buttons)
        except KeyError as e:
            raise ValueError(f"Unknown button in tracked_buttons: {e.args[0]}") from None


@dataclass
class RecordingConfig:
    """Configuration for the csdm video recorder arguments."""

    framerate: int = 60
    width: int = 1920
    height: int = 1080
    encoder_software: str = "FFmpeg"
    video_container: str = "mp4"
    player_voices: bool = True
    show_only_death_notices: bool = False
    show_x_ray: bool = False
    output_dir: str | None = None


@dataclass
class OverlayConfig:
    """Configuration for the key overlay filtergraph."""

    # Only draw keys while pressed (no static keyboard layer)
    hide_inactive: bool = False
    active_color: str = "cyan@0.8"
    background_color: str = "black@0.3"
    font_color: str = "white"
    font_size: int = 28

    # How overlay clips are joined: "copy" (remux) or "reencode"
    concat_mode: str = "copy"
    final_name: str = "final.overlay.mp4"


@dataclass
class ExportConfig:
    """Configuration for plan export."""

    json_indent: int = 2


@dataclass
class LoggingConfig:
    """Configuration for logging."""

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file: str | None = None


@dataclass
class DemoReelConfig:
    """Main configuration container."""

    clips: ClipConfig = field(default_factory=ClipConfig)
    recording: RecordingConfig = field(default_factory=RecordingConfig)
    overlay: OverlayConfig = field(default_factory=OverlayConfig)
    export: ExportConfig = field(default_factory=ExportConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    # Version of the config format
    config_version: str = "1.0"


# ============================================================================
# Configuration Loading
# ============================================================================


def get_default_config_paths() -> list[Path]:
    """Get the default paths to search for configuration files."""
    paths = []

    # Current directory
    paths.append(Path.cwd() / "demoreel.yaml")
    paths.append(Path.cwd() / "demoreel.toml")
    paths.append(Path.cwd() / "demoreel.json")
    paths.append(Path.cwd() / ".demoreel.yaml")

    # User home directory
    home = Path.home()
    paths.append(home / ".config" / "demoreel" / "config.yaml")
    paths.append(home / ".demoreel.yaml")

    # XDG config directory
    xdg_config = os.environ.get("XDG_CONFIG_HOME", str(home / ".config"))
    paths.append(Path(xdg_config) / "demoreel" / "config.yaml")

    return paths


def load_yaml_config(path: Path) -> dict[str, Any]:
    """Load configuration from a YAML file."""
    import yaml

    with open(path) as f:
        return yaml.safe_load(f) or {}


def load_toml_config(path: Path) -> dict[str, Any]:
    """Load configuration from a TOML file."""
    import tomllib

    with open(path, "rb") as f:
        return tomllib.load(f)


def load_json_config(path: Path) -> dict[str, Any]:
    """Load configuration from a JSON file."""
    with open(path) as f:
        return json.load(f)


def load_config_file(path: Path) -> dict[str, Any]:
    """Load configuration from a file, detecting format from extension."""
    if not path.exists():
        return {}

    suffix = path.suffix.lower()
    if suffix in (".yaml", ".yml"):
        return load_yaml_config(path)
    elif suffix == ".toml":
        return load_toml_config(path)
    elif suffix == ".json":
        return load_json_config(path)
    else:
        logger.warning(f"Unknown config file format: {suffix}")
        return {}


ENV_MAPPINGS = {
    "DEMOREEL_LOG_LEVEL": ("logging", "level"),
    "DEMOREEL_LOG_FILE": ("logging", "file"),
    "DEMOREEL_TICK_RATE": ("clips", "tick_rate"),
    "DEMOREEL_SPAWN_DELAY": ("clips", "spawn_delay_seconds"),
    "DEMOREEL_DEATH_PADDING": ("clips", "death_padding_seconds"),
    "DEMOREEL_OUTPUT_DIR": ("recording", "output_dir"),
    "DEMOREEL_FRAMERATE": ("recording", "framerate"),
    "DEMOREEL_HIDE_INACTIVE": ("overlay", "hide_inactive"),
}


def load_env_config() -> dict[str, Any]:
    """Load configuration from environment variables."""
    config: dict[str, Any] = {}

    for env_var, (section, key) in ENV_MAPPINGS.items():
        value = os.environ.get(env_var)
        if value is not None:
            if section not in config:
                config[section] = {}

            # Type conversion
            if value.lower() in ("true", "false"):
                value = value.lower() == "true"
            elif value.isdigit():
                value = int(value)
            else:
                try:
                    value = float(value)
                except ValueError:
                    pass

            config[section][key] = value

    return config


def merge_configs(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge two configuration dictionaries."""
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = merge_configs(result[key], value)
        else:
            result[key] = value

    return result


def dict_to_config(data: dict[str, Any]) -> DemoReelConfig:
    """Convert a dictionary to DemoReelConfig, ignoring unknown keys."""
    config = DemoReelConfig()

    for section in ("clips", "recording", "overlay", "export", "logging"):
        if section not in data:
            continue
        target = getattr(config, section)
        for key, value in (data[section] or {}).items():
            if hasattr(target, key):
                setattr(target, key, value)
            else:
                logger.warning(f"Ignoring unknown config key: {section}.{key}")

    return config


def load_config(config_file: Path | None = None, include_env: bool = True) -> DemoReelConfig:
    """
    Load configuration from all sources.

    Args:
        config_file: Explicit path to a config file (optional)
        include_env: Whether to include environment variables

    Returns:
        Merged DemoReelConfig
    """
    config_data: dict[str, Any] = {}

    # Try to find and load a config file
    if config_file:
        if not config_file.exists():
            raise FileNotFoundError(f"Config file not found: {config_file}")
        config_data = load_config_file(config_file)
        logger.info(f"Loaded config from: {config_file}")
    else:
        for path in get_default_config_paths():
            if path.exists():
                config_data = load_config_file(path)
                logger.info(f"Loaded config from: {path}")
                break

    # Merge environment variables
    if include_env:
        env_config = load_env_config()
        config_data = merge_configs(config_data, env_config)

    return dict_to_config(config_data)


# ============================================================================
# Configuration Saving
# ============================================================================


def config_to_dict(config: DemoReelConfig) -> dict[str, Any]:
    """Convert DemoReelConfig to a dictionary."""
    return asdict(config)


def save_config(config: DemoReelConfig, path: Path) -> None:
    """
    Save configuration to a file.

    Args:
        config: Configuration to save
        path: Path to save to (.yaml/.yml or .json)
    """
    data = config_to_dict(config)
    suffix = path.suffix.lower()

    if suffix in (".yaml", ".yml"):
        import yaml

        with open(path, "w") as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)

    elif suffix == ".json":
        with open(path, "w") as f:
            json.dump(data, f, indent=2)

    else:
        raise ValueError(f"Unknown config format: {suffix}")

    logger.info(f"Saved config to: {path}")


# ============================================================================
# Global Configuration
# ============================================================================

_global_config: DemoReelConfig | None = None


def get_config() -> DemoReelConfig:
    """Get the global configuration, loading it if necessary."""
    global _global_config

    if _global_config is None:
        _global_config = load_config()

    return _global_config


def set_config(config: DemoReelConfig) -> None:
    """Set the global configuration."""
    global _global_config
    _global_config = config


def reset_config() -> None:
    """Reset the global configuration to defaults."""
    global _global_config
    _global_config = None


# ============================================================================
# Configuration Templates
# ============================================================================

DEFAULT_CONFIG_YAML = """# DemoReel Configuration

# Sequence detection and overlay run settings
clips:
  tick_rate: 64
  spawn_delay_seconds: 10   # start recording this long after spawn
  death_padding_seconds: 3  # keep this much footage after death
  tracked_buttons:
    - IN_FORWARD
    - IN_BACK
    - IN_MOVELEFT
    - IN_MOVERIGHT
    - IN_JUMP
    - IN_DUCK
    - IN_USE
    - IN_RELOAD
    - IN_ATTACK
    - IN_ATTACK2
    - IN_SPEED

# csdm recorder settings
recording:
  framerate: 60
  width: 1920
  height: 1080
  encoder_software: FFmpeg
  video_container: mp4
  player_voices: true
  show_only_death_notices: false
  show_x_ray: false
  # output_dir: /path/to/clips

# Key overlay settings
overlay:
  hide_inactive: false
  active_color: cyan@0.8
  font_size: 28
  concat_mode: copy          # copy (remux) or reencode
  final_name: final.overlay.mp4

# Export settings
export:
  json_indent: 2

# Logging settings
logging:
  level: INFO
  # file: /path/to/demoreel.log
"""


def generate_default_config(path: Path) -> None:
    """Generate a default configuration file."""
    suffix = path.suffix.lower()

    if suffix in (".yaml", ".yml"):
        path.write_text(DEFAULT_CONFIG_YAML)
    else:
        save_config(DemoReelConfig(), path)

    logger.info(f"Generated default config at: {path}")
