"""
DemoReel CLI - Command Line Interface for CS2 clip planning

Provides commands for:
- Planning clips (sequences, key runs, recorder args) for a player
- Listing recording sequences
- Inspecting voice index masks
- Generating a default configuration file
"""

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from demoreel import __version__
from demoreel.analysis.events import MatchEndNotFoundError
from demoreel.analysis.voice import visualize_voice_indices
from demoreel.core.config import DemoReelConfig, generate_default_config, load_config, set_config
from demoreel.core.utils import PerformanceMonitor, format_duration
from demoreel.parser import DemoData, DemoParser
from demoreel.pipeline.orchestrator import ReelPlan, ReelPlanner, export_plan

app = typer.Typer(
    name="demoreel",
    help="Plan POV recordings and key overlays for a player in a CS2 demo",
    add_completion=False,
)
console = Console()

logger = logging.getLogger(__name__)


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        console.print(f"[bold blue]DemoReel[/bold blue] v{__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: bool = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-V", help="Enable verbose output"),
) -> None:
    """DemoReel - CS2 POV Clip Planner"""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def _load_config(config_file: Optional[Path]) -> DemoReelConfig:
    try:
        config = load_config(config_file)
        _apply_logging_config(config)
    except (OSError, ValueError) as e:
        console.print(f"[red]Error loading config:[/red] {e}")
        raise typer.Exit(1)
    set_config(config)
    return config


def _apply_logging_config(config: DemoReelConfig) -> None:
    root = logging.getLogger()
    # --verbose wins over the configured level
    if root.level != logging.DEBUG:
        root.setLevel(config.logging.level.upper())
    if config.logging.file:
        handler = logging.FileHandler(config.logging.file)
        handler.setFormatter(logging.Formatter(config.logging.format))
        root.addHandler(handler)
        logger.debug(f"Logging to file: {config.logging.file}")


def _parse(demo_path: Path, player: str) -> DemoData:
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
    ) as progress:
        task = progress.add_task("Parsing demo file...", total=None)
        try:
            with PerformanceMonitor("parsing demo"):
                data = DemoParser(demo_path).parse(player)
        except Exception as e:
            console.print(f"[red]Error parsing demo:[/red] {e}")
            raise typer.Exit(1)
        progress.update(task, description="Demo parsed successfully!")
    return data


def _plan(data: DemoData, config: DemoReelConfig, output_dir: Optional[Path]) -> ReelPlan:
    try:
        return ReelPlanner(config).plan(data, output_dir=output_dir)
    except MatchEndNotFoundError as e:
        console.print(f"[red]Error:[/red] {e} (is the demo complete?)")
        raise typer.Exit(1)
    except ValueError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)


def _display_sequences(plan: ReelPlan) -> None:
    if not plan.clips:
        console.print("[yellow]No sequences found for this player[/yellow]")
        return

    table = Table(title=f"Sequences - {plan.player_name} ({plan.steam_id})")
    table.add_column("#", justify="right", style="cyan")
    table.add_column("Start", justify="right")
    table.add_column("End", justify="right")
    table.add_column("Duration", justify="right")
    table.add_column("Runs", justify="right")

    for clip in plan.clips:
        seq = clip.sequence
        table.add_row(
            str(clip.index),
            str(seq.start_tick),
            str(seq.end_tick),
            format_duration(seq.duration_seconds(plan.tick_rate)),
            str(len(clip.runs)),
        )

    console.print(table)
    console.print(
        f"[green]{len(plan.clips)} sequences[/green], "
        f"{format_duration(plan.total_seconds)} of footage"
    )


@app.command()
def plan(
    demo_path: Path = typer.Argument(
        ...,
        help="Path to the .dem file",
        exists=True,
        dir_okay=False,
        resolve_path=True,
    ),
    player: str = typer.Option(..., "--player", "-p", help="Steam ID of the player to record"),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Write the full plan as JSON to this file"
    ),
    clips_dir: Optional[Path] = typer.Option(
        None, "--clips-dir", help="Directory the recorder will write clips to"
    ),
    config_file: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Configuration file (.yaml, .toml, .json)"
    ),
) -> None:
    """
    Plan the clips for a player: sequences, key runs and recorder arguments.
    """
    config = _load_config(config_file)
    console.print("\n[bold blue]DemoReel[/bold blue] - Planning clips...\n")

    data = _parse(demo_path, player)
    reel = _plan(data, config, clips_dir)

    info_table = Table(title="Demo Information", show_header=False)
    info_table.add_column("Property", style="cyan")
    info_table.add_column("Value", style="green")
    info_table.add_row("Map", reel.map_name)
    info_table.add_row("Tick Rate", str(reel.tick_rate))
    info_table.add_row("Events", str(len(data.events)))
    info_table.add_row("Input Ticks", str(len(data.tick_samples)))
    info_table.add_row("Voice Mask", "all" if reel.voice_mask is None else str(reel.voice_mask))
    info_table.add_row("Final Video", str(reel.final_path) if reel.final_path else "-")
    console.print(info_table)
    console.print()

    _display_sequences(reel)

    if output:
        export_plan(reel, output, indent=config.export.json_indent)
        console.print(f"\n[green]Plan exported to:[/green] {output}")


@app.command()
def sequences(
    demo_path: Path = typer.Argument(
        ...,
        help="Path to the .dem file",
        exists=True,
        dir_okay=False,
        resolve_path=True,
    ),
    player: str = typer.Option(..., "--player", "-p", help="Steam ID of the player to record"),
    config_file: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Configuration file (.yaml, .toml, .json)"
    ),
) -> None:
    """
    List the recording windows for a player as start/end tick pairs.
    """
    config = _load_config(config_file)
    data = _parse(demo_path, player)
    reel = _plan(data, config, None)

    for seq in reel.sequences:
        console.print(f"{seq.start_tick} {seq.end_tick}")


@app.command()
def voice(
    slots: list[int] = typer.Argument(..., help="Player slot numbers (4-13)"),
) -> None:
    """
    Show the tv_listen_voice_indices mask for a set of player slots.
    """
    try:
        info = visualize_voice_indices(slots)
    except ValueError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    panel = Panel(
        f"[cyan]Players:[/cyan] {', '.join(str(n) for n in info.player_numbers)}\n"
        f"[cyan]Bits:[/cyan] {', '.join(str(b) for b in info.bit_positions)}\n"
        f"[cyan]Binary:[/cyan] {info.binary}\n"
        f"[cyan]Hex:[/cyan] {info.hex}\n"
        f"[cyan]Decimal:[/cyan] {info.decimal}\n"
        f"[cyan]Command:[/cyan] {info.command}",
        title="[bold blue]Voice Indices[/bold blue]",
        expand=False,
    )
    console.print(panel)


@app.command("init-config")
def init_config(
    path: Path = typer.Argument(Path("demoreel.yaml"), help="Where to write the config file"),
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite an existing file"),
) -> None:
    """
    Write a default configuration file.
    """
    if path.exists() and not force:
        console.print(f"[yellow]{path} already exists[/yellow] (use --force to overwrite)")
        raise typer.Exit(1)
    try:
        generate_default_config(path)
    except ValueError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    console.print(f"[green]Config written to:[/green] {path}")


@app.command()
def info() -> None:
    """
    Display information about DemoReel and the environment.
    """
    import platform as plat
    import shutil

    console.print(f"\n[bold blue]DemoReel[/bold blue] v{__version__}\n")

    table = Table(show_header=False)
    table.add_column("Property", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Python", plat.python_version())
    table.add_row("Platform", plat.system())

    try:
        import demoparser2

        table.add_row("demoparser2", getattr(demoparser2, "__version__", "installed"))
    except ImportError:
        table.add_row("demoparser2", "[red]not installed[/red]")

    # External tools the plan is meant to be executed with
    for tool in ("csdm", "ffmpeg"):
        found = shutil.which(tool)
        table.add_row(tool, found if found else "[yellow]not found[/yellow]")

    console.print(table)


def main() -> None:
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
