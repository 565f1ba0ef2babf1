"""
Tests for disruption scheduling.
"""

import pytest
import numpy as np
import config
from timeline.disruptions import (
    MetricDisruption,
    NodeDisruption,
    QueryDisruption,
    disruption_code,
    generate_disruptions,
)
from timeline.settings import SimulationConfig


def test_windows_within_bounds():
    """Test every drawn start and duration is inside the allowed ranges."""
    sim_config = SimulationConfig(nodes=5, queries=40, metrics=12, hours=500, disruptions=200)
    schedule = generate_disruptions(sim_config, np.random.default_rng(3))

    assert 0 < len(schedule) <= 200
    for start, scheduled in schedule.items():
        assert 48 <= start <= sim_config.hours - 25
        assert 2 <= scheduled.duration <= 23


def test_selectors_within_entity_space():
    """Test selectors only name existing ids, sorted and deduplicated."""
    sim_config = SimulationConfig(nodes=5, queries=40, metrics=12, hours=500, disruptions=300)
    schedule = generate_disruptions(sim_config, np.random.default_rng(11))

    kinds = set()
    for scheduled in schedule.values():
        event = scheduled.event
        kinds.add(type(event))
        if isinstance(event, NodeDisruption):
            assert 0 <= event.node < sim_config.nodes
        elif isinstance(event, QueryDisruption):
            assert list(event.queries) == sorted(set(event.queries))
            assert 1 <= len(event.queries) < sim_config.queries // 10
            assert all(0 <= q < sim_config.queries for q in event.queries)
        else:
            assert list(event.metrics) == sorted(set(event.metrics))
            assert 1 <= len(event.metrics) < sim_config.metrics
            assert all(0 <= m < sim_config.metrics for m in event.metrics)

    assert kinds == {NodeDisruption, QueryDisruption, MetricDisruption}


def test_same_seed_same_schedule():
    """Test a fixed seed reproduces the schedule."""
    sim_config = SimulationConfig(hours=1000, disruptions=50)
    first = generate_disruptions(sim_config, np.random.default_rng(42))
    second = generate_disruptions(sim_config, np.random.default_rng(42))

    assert first == second


def test_collisions_keep_last_draw():
    """Test draws sharing a start hour collapse to one entry."""
    # Only hours 48..51 are possible starts, so 20 draws must collide
    sim_config = SimulationConfig(hours=76, disruptions=20)
    schedule = generate_disruptions(sim_config, np.random.default_rng(5))

    assert set(schedule) <= {48, 49, 50, 51}
    assert len(schedule) < 20


def test_default_entity_space_query_disruptions():
    """Test ten queries still give single-query disruptions."""
    sim_config = SimulationConfig(disruptions=300)
    schedule = generate_disruptions(sim_config, np.random.default_rng(8))

    queries = [s.event for s in schedule.values() if isinstance(s.event, QueryDisruption)]
    assert queries
    assert all(len(event.queries) == 1 for event in queries)


def test_short_timeline_rejected():
    """Test timelines too short for the disruption window raise."""
    with pytest.raises(ValueError):
        generate_disruptions(SimulationConfig(hours=72, disruptions=1), np.random.default_rng())


def test_no_disruptions_short_timeline():
    """Test zero disruptions needs no minimum timeline."""
    assert generate_disruptions(SimulationConfig(hours=10, disruptions=0), np.random.default_rng()) == {}


def test_matching_and_codes():
    """Test selectors and disruption codes."""
    node = NodeDisruption(1)
    query = QueryDisruption((0, 3))
    metric = MetricDisruption((2,))

    assert node.matches(1, 5, 5) and not node.matches(0, 5, 5)
    assert query.matches(9, 3, 9) and not query.matches(9, 1, 9)
    assert metric.matches(9, 9, 2) and not metric.matches(9, 9, 1)

    assert disruption_code(None) == config.DISRUPTION_NONE == 0
    assert disruption_code(node) == 1
    assert disruption_code(query) == 2
    assert disruption_code(metric) == 3
