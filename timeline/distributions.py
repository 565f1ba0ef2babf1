"""
Per-tuple distribution assignment.
Every (node, query, metric) tuple gets a regular and a disrupted Gaussian.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Tuple

import numpy as np

from timeline.settings import DistributionBounds, SimulationConfig

logger = logging.getLogger(__name__)

EntityKey = Tuple[int, int, int]  # (node, query, metric)


@dataclass(frozen=True)
class NormalParams:
    """Gaussian parameters."""
    mean: float
    std: float

    def scale(self, sample: float) -> float:
        """Map a standard normal sample onto this distribution."""
        return sample * self.std + self.mean


@dataclass(frozen=True)
class EntityDistribution:
    """Regular and disrupted regimes of one tuple."""
    regular: NormalParams
    disrupted: NormalParams

    def select(self, is_disrupted: bool) -> NormalParams:
        return self.disrupted if is_disrupted else self.regular


def _draw_params(
    rng: np.random.Generator, bounds: DistributionBounds, size: int
) -> Tuple[np.ndarray, np.ndarray]:
    means = rng.integers(bounds.min_mean, bounds.max_mean, size=size)
    stds = rng.integers(bounds.min_std, bounds.max_std, size=size)
    return means, stds


def generate_distributions(
    sim_config: SimulationConfig, rng: np.random.Generator
) -> Dict[EntityKey, EntityDistribution]:
    """Generate the distributions for each (node, query, metric) tuple.

    Means and stds are whole numbers drawn uniformly from [min, max).

    Args:
        sim_config: Simulation settings
        rng: Random generator (seed it for reproducible tables)

    Returns:
        Mapping of (node, query, metric) to EntityDistribution
    """
    logger.debug("Generating distributions for %d tuples...", sim_config.tuple_count)
    size = sim_config.tuple_count
    reg_means, reg_stds = _draw_params(rng, sim_config.regular, size)
    dis_means, dis_stds = _draw_params(rng, sim_config.disrupted, size)

    distributions: Dict[EntityKey, EntityDistribution] = {}
    i = 0
    for node in range(sim_config.nodes):
        for query in range(sim_config.queries):
            for metric in range(sim_config.metrics):
                distributions[(node, query, metric)] = EntityDistribution(
                    regular=NormalParams(float(reg_means[i]), float(reg_stds[i])),
                    disrupted=NormalParams(float(dis_means[i]), float(dis_stds[i])),
                )
                i += 1

    return distributions
