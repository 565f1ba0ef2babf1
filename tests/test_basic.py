"""
Basic tests for the timeline generator.
"""

import json
from datetime import timedelta

import pytest
import config
from timeline.disruptions import NodeDisruption, ScheduledDisruption
from timeline.generator import generate_timeline
from timeline.records import START, decode_ndjson
from timeline.settings import SimulationConfig
from timeline.sinks import JsonFileSink


def test_config_parameters():
    """Test that config parameters are reasonable."""
    assert config.NODES > 0
    assert config.QUERIES >= 10
    assert config.METRICS >= 10
    assert config.HOURS > config.DISRUPTION_EARLIEST_START + config.DISRUPTION_TAIL_MARGIN
    assert config.REGULAR_MAX_MEAN <= config.DISRUPTED_MIN_MEAN
    assert config.BULK_SIZE > 0


def test_default_simulation_config():
    """Test the documented defaults."""
    sim_config = SimulationConfig()

    assert (sim_config.nodes, sim_config.queries, sim_config.metrics) == (10, 10, 10)
    assert sim_config.hours == 3000
    assert sim_config.disruptions == 50
    assert sim_config.threads == 2
    assert sim_config.bulk_size == 10000
    assert sim_config.regular.min_mean == 20 and sim_config.regular.max_mean == 40
    assert sim_config.regular.min_std == 1 and sim_config.regular.max_std == 10
    assert sim_config.disrupted.min_mean == 60 and sim_config.disrupted.max_mean == 200
    assert sim_config.disrupted.min_std == 20 and sim_config.disrupted.max_std == 100
    assert sim_config.record_count == 3000 * 1000


def test_file_run_end_to_end(tmp_path):
    """Test a small run writes every record to the JSON file."""
    output = tmp_path / "output.json"
    sim_config = SimulationConfig(
        nodes=2, queries=10, metrics=10, hours=100, disruptions=3,
        bulk_size=150, buffer_capacity=512,
    )

    summary = generate_timeline(sim_config, JsonFileSink(str(output)), seed=7)

    records = decode_ndjson(output.read_text())
    assert len(records) == sim_config.record_count
    assert summary.records_emitted == sim_config.record_count
    assert summary.records_sent == sim_config.record_count
    assert summary.records_lost == 0
    assert {r.disruption for r in records} <= {0, 1, 2, 3}

    first = json.loads(output.read_text().splitlines()[0])
    assert set(first) == set(config.RECORD_FIELDS)


def test_forced_schedule_end_to_end(tmp_path):
    """Test a forced node disruption shows up in the written records."""
    output = tmp_path / "output.json"
    sim_config = SimulationConfig(
        nodes=2, queries=2, metrics=2, hours=100, disruptions=1,
        bulk_size=16, buffer_capacity=256,
    )
    schedule = {50: ScheduledDisruption(NodeDisruption(1), 5)}

    generate_timeline(sim_config, JsonFileSink(str(output)), seed=1, schedule=schedule)

    records = decode_ndjson(output.read_text())
    flagged_hours = sorted({(r.hour - START) // timedelta(hours=1) for r in records if r.disruption == 1})
    assert flagged_hours == [50, 51, 52, 53, 54]
    assert all(r.disruption == 0 for r in records if r.disruption != 1)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
