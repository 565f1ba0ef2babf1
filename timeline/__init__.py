"""Synthetic cluster timeline generator with injected disruptions."""

from timeline.generator import TimelineSummary, generate_timeline
from timeline.settings import DistributionBounds, SimulationConfig, load_config

__all__ = [
    "DistributionBounds",
    "SimulationConfig",
    "TimelineSummary",
    "generate_timeline",
    "load_config",
]
