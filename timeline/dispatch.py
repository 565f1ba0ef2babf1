"""
Batch dispatch with a bounded number of in-flight sink calls.
"""

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from threading import Lock
from typing import Sequence

from timeline.context import InFlightCounter
from timeline.errors import SinkError
from timeline.records import Record
from timeline.sinks import Sink

logger = logging.getLogger(__name__)


@dataclass
class DispatchStats:
    """What happened to the batches handed to the throttle."""
    batches_sent: int = 0
    records_sent: int = 0
    batches_failed: int = 0
    records_lost: int = 0


class DispatchThrottle:
    """Forward batches to a sink on a worker pool, at most `limit` at a time.

    Failed batches are logged and counted, never retried.
    """

    def __init__(self, sink: Sink, limit: int, in_flight: InFlightCounter):
        """Initialize dispatch throttle.

        Args:
            sink: Where batches go
            limit: Maximum concurrent sink calls
            in_flight: Counter shared with the run context
        """
        if limit < 1:
            raise ValueError("limit must be at least 1")
        self.sink = sink
        self.limit = limit
        self.in_flight = in_flight
        self.stats = DispatchStats()
        self._stats_lock = Lock()
        self._pool = ThreadPoolExecutor(max_workers=limit, thread_name_prefix="dispatch")

    def submit(self, batch: Sequence[Record]) -> Future:
        """Hand a batch to the pool, waiting while `limit` batches are in flight."""
        self.in_flight.wait_below(self.limit)
        self.in_flight.increment()
        logger.debug("Dispatching batch of %d records", len(batch))
        try:
            future = self._pool.submit(self._send, batch)
        except RuntimeError:
            self.in_flight.decrement()
            raise
        return future

    def flush(self, batch: Sequence[Record]) -> bool:
        """Send a batch on the calling thread.

        Returns:
            True if the sink accepted it
        """
        if not batch:
            return True
        self.in_flight.increment()
        return self._send(batch)

    def close(self) -> DispatchStats:
        """Wait for every in-flight batch and shut the pool down."""
        self._pool.shutdown(wait=True)
        self.in_flight.wait_idle()
        return self.stats

    def _send(self, batch: Sequence[Record]) -> bool:
        try:
            self.sink.persist(batch)
        except SinkError as e:
            logger.error("Batch of %d records lost: %s", len(batch), e)
            self._count_lost(batch)
            return False
        except Exception:
            logger.exception("Batch of %d records lost to an unexpected sink error", len(batch))
            self._count_lost(batch)
            return False
        finally:
            self.in_flight.decrement()

        with self._stats_lock:
            self.stats.batches_sent += 1
            self.stats.records_sent += len(batch)
        return True

    def _count_lost(self, batch: Sequence[Record]):
        with self._stats_lock:
            self.stats.batches_failed += 1
            self.stats.records_lost += len(batch)

    def __enter__(self) -> "DispatchThrottle":
        return self

    def __exit__(self, *exc):
        self.close()
