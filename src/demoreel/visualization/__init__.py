"""
DemoReel Visualization - key overlay rendering.

This module contains:
- overlay: ffmpeg filtergraph text for the pressed-key overlay
"""

__all__: list[str] = []
