"""
Disruption scheduling.
Draws randomized disruption events and keys them by start hour.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Optional, Tuple, Union

import numpy as np

import config
from timeline.settings import SimulationConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NodeDisruption:
    """Every (query, metric) on one node is disrupted."""
    node: int
    code = config.DISRUPTION_NODE

    def matches(self, node: int, query: int, metric: int) -> bool:
        return node == self.node


@dataclass(frozen=True)
class QueryDisruption:
    """Every (node, metric) running one of the queries is disrupted."""
    queries: Tuple[int, ...]
    code = config.DISRUPTION_QUERY

    def matches(self, node: int, query: int, metric: int) -> bool:
        return query in self.queries


@dataclass(frozen=True)
class MetricDisruption:
    """Every (node, query) reporting one of the metrics is disrupted."""
    metrics: Tuple[int, ...]
    code = config.DISRUPTION_METRIC

    def matches(self, node: int, query: int, metric: int) -> bool:
        return metric in self.metrics


Disruption = Union[NodeDisruption, QueryDisruption, MetricDisruption]


@dataclass(frozen=True)
class ScheduledDisruption:
    """A disruption event and how many hours it lasts."""
    event: Disruption
    duration: int


Schedule = Dict[int, ScheduledDisruption]


def disruption_code(event: Optional[Disruption]) -> int:
    """Record code for the active event (0 when nothing is active)."""
    if event is None:
        return config.DISRUPTION_NONE
    return event.code


def _draw_subset(rng: np.random.Generator, count: int, max_size: int) -> Tuple[int, ...]:
    """Draw a random-size id subset. Duplicates collapse, so it may be smaller."""
    size = int(rng.integers(1, max_size))
    return tuple(sorted(set(int(i) for i in rng.integers(0, count, size=size))))


def generate_disruptions(
    sim_config: SimulationConfig, rng: np.random.Generator
) -> Schedule:
    """Generate the disruptions seeded into the timeline.

    Start hours are drawn in [48, hours - 24) and durations in [2, 24).
    Draws that land on an already used start hour replace the earlier
    draw, so the schedule can hold fewer than `disruptions` entries.

    Args:
        sim_config: Simulation settings
        rng: Random generator (seed it for reproducible schedules)

    Returns:
        Mapping of start hour to ScheduledDisruption
    """
    earliest = config.DISRUPTION_EARLIEST_START
    latest = sim_config.hours - config.DISRUPTION_TAIL_MARGIN
    if sim_config.disruptions and latest <= earliest:
        raise ValueError(
            f"hours must exceed {earliest + config.DISRUPTION_TAIL_MARGIN} "
            f"to schedule disruptions, got {sim_config.hours}"
        )

    logger.debug("Generating %d disruptions...", sim_config.disruptions)
    schedule: Schedule = {}
    for _ in range(sim_config.disruptions):
        start = int(rng.integers(earliest, latest))
        duration = int(rng.integers(config.DISRUPTION_MIN_DURATION, config.DISRUPTION_MAX_DURATION))

        kind = int(rng.integers(1, 4))
        if kind == config.DISRUPTION_NODE:
            event: Disruption = NodeDisruption(int(rng.integers(0, sim_config.nodes)))
        elif kind == config.DISRUPTION_QUERY:
            # one to a tenth of all queries
            max_size = max(sim_config.queries // 10, 2)
            event = QueryDisruption(_draw_subset(rng, sim_config.queries, max_size))
        else:
            # one to all metrics
            max_size = max(sim_config.metrics, 2)
            event = MetricDisruption(_draw_subset(rng, sim_config.metrics, max_size))

        if start in schedule:
            logger.debug("Disruption at hour %d replaces %s", start, schedule[start].event)
        logger.debug("%s: %d-%d", event, start, start + duration)
        schedule[start] = ScheduledDisruption(event=event, duration=duration)

    return schedule
