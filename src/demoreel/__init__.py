"""
DemoReel - CS2 POV Clip Planner

Turns a CS2 demo into a recording plan for one player: the tick windows
worth recording (spawn to death, round end or match end) and, per window,
the key-press runs used to draw an input overlay.

Usage:
    from demoreel import parse_demo, find_sequences, build_runs_for_clip

    demo = parse_demo("match.dem", steam_id="76561198055776914")
    for seq in find_sequences(demo.events, demo.steam_id):
        runs = build_runs_for_clip(demo.tick_samples, seq.start_tick, seq.end_tick)
        print(seq.as_pair(), len(runs))
"""

__version__ = "0.1.0"
__author__ = "DemoReel Contributors"


def __getattr__(name):
    """Lazy import for heavy dependencies."""
    # Parser (pulls in pandas/demoparser2)
    if name == "DemoParser":
        from demoreel.parser import DemoParser
        return DemoParser
    elif name == "DemoData":
        from demoreel.parser import DemoData
        return DemoData
    elif name == "parse_demo":
        from demoreel.parser import parse_demo
        return parse_demo
    elif name == "ReelPlanner":
        from demoreel.pipeline.orchestrator import ReelPlanner
        return ReelPlanner
    elif name in ("find_sequences", "Sequence"):
        from demoreel.analysis import sequences
        return getattr(sequences, name)
    elif name in ("build_runs_for_clip", "decode_buttons"):
        from demoreel.analysis import buttons
        return getattr(buttons, name)
    elif name == "calculate_voice_indices":
        from demoreel.analysis.voice import calculate_voice_indices
        return calculate_voice_indices
    raise AttributeError(f"module 'demoreel' has no attribute '{name}'")


__all__ = [
    # Version
    "__version__",
    # Parser
    "DemoParser",
    "DemoData",
    "parse_demo",
    # Planning
    "ReelPlanner",
    "find_sequences",
    "Sequence",
    "build_runs_for_clip",
    "decode_buttons",
    "calculate_voice_indices",
]
