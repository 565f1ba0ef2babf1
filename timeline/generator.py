"""
Run orchestration: lookup tables, sample producer, assembler and dispatch.
"""

import logging
import time
from dataclasses import dataclass
from typing import Dict, Optional, Tuple, Union

import numpy as np
import simpy

from timeline.assembler import SampleSource, TimelineAssembler
from timeline.context import RunContext
from timeline.disruptions import Schedule, generate_disruptions
from timeline.dispatch import DispatchThrottle
from timeline.distributions import EntityDistribution, EntityKey, generate_distributions
from timeline.sampler import SampleProducer
from timeline.settings import SimulationConfig
from timeline.sinks import Sink

logger = logging.getLogger(__name__)


@dataclass
class TimelineSummary:
    """Outcome of one timeline run."""
    records_emitted: int
    records_sent: int
    records_lost: int
    batches_sent: int
    batches_failed: int
    disruptions_scheduled: int
    disrupted_hours: int
    elapsed_seconds: float


def build_tables(
    sim_config: SimulationConfig,
    seed: Union[int, np.random.SeedSequence, None] = None,
    schedule: Optional[Schedule] = None,
) -> Tuple[Schedule, Dict[EntityKey, EntityDistribution]]:
    """Draw the disruption schedule and the per-tuple distributions.

    Each table has its own random stream, so a forced schedule leaves the
    distributions of a seed unchanged and skips the scheduler entirely.

    Args:
        sim_config: Simulation settings
        seed: Root seed (or seed sequence) of both tables
        schedule: Use this schedule instead of drawing one

    Returns:
        (schedule, distributions)
    """
    if not isinstance(seed, np.random.SeedSequence):
        seed = np.random.SeedSequence(seed)
    schedule_seed, distribution_seed = seed.spawn(2)
    if schedule is None:
        schedule = generate_disruptions(sim_config, np.random.default_rng(schedule_seed))
    distributions = generate_distributions(sim_config, np.random.default_rng(distribution_seed))
    return schedule, distributions


def generate_timeline(
    sim_config: SimulationConfig,
    sink: Sink,
    seed: Optional[int] = None,
    schedule: Optional[Schedule] = None,
    samples: Optional[SampleSource] = None,
    context: Optional[RunContext] = None,
) -> TimelineSummary:
    """Run the simulation and stream every record to the sink.

    Args:
        sim_config: Simulation settings
        sink: Destination of the record batches
        seed: Overrides sim_config.seed when given
        schedule: Use this schedule instead of drawing one
        samples: Use this sample source instead of a background producer
        context: Run context (a fresh one if omitted)

    Returns:
        TimelineSummary
    """
    seed = seed if seed is not None else sim_config.seed
    table_seed, sample_seed = np.random.SeedSequence(seed).spawn(2)
    context = context if context is not None else RunContext()

    schedule, distributions = build_tables(sim_config, table_seed, schedule)

    producer = None
    if samples is None:
        producer = SampleProducer(
            context,
            capacity=sim_config.buffer_capacity,
            rng=np.random.default_rng(sample_seed),
        ).start()
        samples = producer

    started = time.perf_counter()
    logger.debug("Generating timeline...")
    throttle = DispatchThrottle(sink, sim_config.threads, context.in_flight)
    try:
        with throttle:
            assembler = TimelineAssembler(
                env=simpy.Environment(),
                sim_config=sim_config,
                schedule=schedule,
                distributions=distributions,
                samples=samples,
                throttle=throttle,
            )
            assembler.run()
    finally:
        # Every batch has been flushed or abandoned before the producer goes away
        if producer is not None:
            producer.stop()
        else:
            context.stop.set()

    stats = throttle.stats
    return TimelineSummary(
        records_emitted=assembler.records_emitted,
        records_sent=stats.records_sent,
        records_lost=stats.records_lost,
        batches_sent=stats.batches_sent,
        batches_failed=stats.batches_failed,
        disruptions_scheduled=len(schedule),
        disrupted_hours=assembler.disrupted_hours,
        elapsed_seconds=time.perf_counter() - started,
    )
