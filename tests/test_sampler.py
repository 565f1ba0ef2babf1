"""
Tests for the background sample producer.
"""

import threading
import time

import pytest
import numpy as np
from timeline.context import RunContext
from timeline.errors import SampleExhaustedError
from timeline.sampler import SampleProducer


def wait_until(predicate, timeout=5.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return False


def test_buffer_fills_to_capacity():
    """Test the producer fills the buffer and then backs off."""
    producer = SampleProducer(RunContext(), capacity=100, backoff=0.01).start()
    try:
        assert wait_until(lambda: producer.buffer.full())
        time.sleep(0.05)
        assert producer.buffer.qsize() == 100
        assert producer.produced == 100
    finally:
        producer.stop(timeout=2)

    assert producer.finished


def test_samples_look_standard_normal():
    """Test samples come from N(0, 1)."""
    producer = SampleProducer(
        RunContext(), capacity=1000, rng=np.random.default_rng(4), backoff=0.01
    ).start()
    try:
        values = np.array([producer.take() for _ in range(20000)])
    finally:
        producer.stop(timeout=2)

    assert abs(values.mean()) < 0.05
    assert abs(values.std() - 1.0) < 0.05


def test_stop_signal_ends_producer():
    """Test setting the context stop event ends the thread."""
    context = RunContext()
    producer = SampleProducer(context, capacity=10, backoff=0.01).start()

    context.stop.set()
    assert wait_until(lambda: producer.finished, timeout=2)


def test_drained_after_stop_is_fatal():
    """Test reading past the last buffered sample after stop raises."""
    producer = SampleProducer(RunContext(), capacity=10, backoff=0.01, poll_interval=0.01).start()
    assert wait_until(lambda: producer.buffer.full())
    producer.stop(timeout=2)

    for _ in range(10):
        producer.take()

    with pytest.raises(SampleExhaustedError):
        producer.take()


def test_paused_producer_stalls_reader():
    """Test a reader blocks, without error, while the producer is paused."""
    producer = SampleProducer(RunContext(), capacity=20, backoff=0.01, poll_interval=0.01)
    producer.pause()
    producer.start()

    taken = []
    errors = []

    def reader():
        try:
            for _ in range(50):
                taken.append(producer.take())
        except Exception as e:
            errors.append(e)

    thread = threading.Thread(target=reader, daemon=True)
    thread.start()
    time.sleep(0.2)

    assert thread.is_alive()
    assert taken == []
    assert errors == []

    producer.resume()
    thread.join(timeout=5)
    producer.stop(timeout=2)

    assert not thread.is_alive()
    assert len(taken) == 50
    assert errors == []
