"""
Timeline assembler: the simulation loop.
A SimPy process advances one simulated hour per tick, tracks the active
disruption and turns one buffered sample per tuple into a record.
"""

import logging
from typing import Dict, List, Optional, Protocol

import simpy

from timeline.disruptions import Disruption, Schedule, disruption_code
from timeline.distributions import EntityDistribution, EntityKey
from timeline.dispatch import DispatchThrottle
from timeline.records import Record, hour_timestamp
from timeline.settings import SimulationConfig

logger = logging.getLogger(__name__)


class SampleSource(Protocol):
    def take(self) -> float:
        ...


class TimelineAssembler:
    """Builds the records of every hour and hands full batches to dispatch."""

    def __init__(
        self,
        env: simpy.Environment,
        sim_config: SimulationConfig,
        schedule: Schedule,
        distributions: Dict[EntityKey, EntityDistribution],
        samples: SampleSource,
        throttle: DispatchThrottle,
    ):
        """Initialize timeline assembler.

        Args:
            env: SimPy environment, one time unit per simulated hour
            sim_config: Simulation settings
            schedule: Disruptions keyed by start hour
            distributions: Regular/disrupted parameters per tuple
            samples: Source of standard normal samples
            throttle: Receives full batches
        """
        self.env = env
        self.config = sim_config
        self.schedule = schedule
        self.distributions = distributions
        self.samples = samples
        self.throttle = throttle

        # Active disruption state
        self.disruption: Optional[Disruption] = None
        self.counter = 0

        self.batch: List[Record] = []
        self.records_emitted = 0
        self.disrupted_hours = 0

    def begin_hour(self, hour: int):
        """If no disruption is running, check whether one starts this hour."""
        if self.counter <= 0:
            scheduled = self.schedule.get(hour)
            self.disruption = scheduled.event if scheduled else None
            self.counter = scheduled.duration if scheduled else 0
            if scheduled:
                logger.debug("Hour %d: %s active for %d hours", hour, scheduled.event, scheduled.duration)

    def end_hour(self):
        # Disruptions are 2-24 hours long, at zero the next hour looks again
        if self.counter > 0:
            self.counter -= 1

    def is_disrupted(self, node: int, query: int, metric: int) -> bool:
        return (
            self.counter > 0
            and self.disruption is not None
            and self.disruption.matches(node, query, metric)
        )

    def emit_hour(self, hour: int):
        """Generate one record per tuple for this hour."""
        timestamp = hour_timestamp(hour)
        code = disruption_code(self.disruption if self.counter > 0 else None)
        if code:
            self.disrupted_hours += 1

        for node in range(self.config.nodes):
            for query in range(self.config.queries):
                for metric in range(self.config.metrics):
                    params = self.distributions[(node, query, metric)].select(
                        self.is_disrupted(node, query, metric)
                    )
                    self.batch.append(Record(
                        node=node,
                        metric=metric,
                        query=query,
                        hour=timestamp,
                        value=params.scale(self.samples.take()),
                        disruption=code,
                    ))
                    self.records_emitted += 1

                    if len(self.batch) >= self.config.bulk_size:
                        self.throttle.submit(self.batch)
                        self.batch = []

    def hour_process(self):
        """SimPy process: walk the timeline hour by hour."""
        for hour in range(self.config.hours):
            self.begin_hour(hour)
            self.emit_hour(hour)
            self.end_hour()
            yield self.env.timeout(1)

    def finish(self) -> bool:
        """Synchronously send whatever is left in the last batch."""
        batch, self.batch = self.batch, []
        return self.throttle.flush(batch)

    def run(self):
        """Run every hour, then flush the partial last batch."""
        self.env.run(until=self.env.process(self.hour_process()))
        self.finish()
