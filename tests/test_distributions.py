"""
Tests for per-tuple distribution assignment.
"""

import numpy as np
from timeline.distributions import EntityDistribution, NormalParams, generate_distributions
from timeline.settings import DistributionBounds, SimulationConfig


def test_every_tuple_assigned():
    """Test the full node x query x metric cross product is covered."""
    sim_config = SimulationConfig(nodes=3, queries=4, metrics=5)
    distributions = generate_distributions(sim_config, np.random.default_rng(0))

    assert len(distributions) == 60
    assert set(distributions) == {
        (n, q, m) for n in range(3) for q in range(4) for m in range(5)
    }


def test_draws_within_bounds():
    """Test regular and disrupted parameters respect their bounds."""
    sim_config = SimulationConfig(
        nodes=4, queries=10, metrics=10,
        regular=DistributionBounds(min_mean=20, max_mean=40, min_std=1, max_std=10),
        disrupted=DistributionBounds(min_mean=60, max_mean=200, min_std=20, max_std=100),
    )
    distributions = generate_distributions(sim_config, np.random.default_rng(1))

    for d in distributions.values():
        assert 20 <= d.regular.mean < 40
        assert 1 <= d.regular.std < 10
        assert 60 <= d.disrupted.mean < 200
        assert 20 <= d.disrupted.std < 100
        assert float(d.regular.mean).is_integer()


def test_same_seed_same_tables():
    """Test a fixed seed reproduces the lookup table."""
    sim_config = SimulationConfig(nodes=2, queries=3, metrics=4)
    first = generate_distributions(sim_config, np.random.default_rng(99))
    second = generate_distributions(sim_config, np.random.default_rng(99))

    assert first == second


def test_scale_and_select():
    """Test a standard normal sample maps onto the selected regime."""
    d = EntityDistribution(regular=NormalParams(30.0, 2.0), disrupted=NormalParams(100.0, 50.0))

    assert d.select(False) is d.regular
    assert d.select(True) is d.disrupted
    assert d.regular.scale(0.0) == 30.0
    assert d.regular.scale(1.5) == 33.0
    assert d.disrupted.scale(-1.0) == 50.0
