"""
Planning pipeline: orchestrator and external tool argument builders.
"""

from demoreel.pipeline.orchestrator import ClipPlan, ReelPlan, ReelPlanner, export_plan

__all__ = ["ClipPlan", "ReelPlan", "ReelPlanner", "export_plan"]
