"""
Background standard-normal sample producer.
Gaussian draws happen on their own thread and are cached in a bounded
buffer, so the timeline loop only pays for a queue read.
"""

import logging
import queue
import threading
from typing import Optional

import numpy as np

import config
from timeline.context import RunContext
from timeline.errors import SampleExhaustedError

logger = logging.getLogger(__name__)


class SampleProducer:
    """Keeps a bounded buffer topped up with N(0, 1) samples."""

    def __init__(
        self,
        context: RunContext,
        capacity: int = config.BUFFER_CAPACITY,
        rng: Optional[np.random.Generator] = None,
        chunk_size: int = config.SAMPLE_CHUNK_SIZE,
        backoff: float = config.PRODUCER_BACKOFF,
        poll_interval: float = config.SAMPLE_POLL_INTERVAL,
    ):
        """Initialize sample producer.

        Args:
            context: Run context; its stop event ends the producer
            capacity: Buffer size in samples
            rng: Random generator (a fresh one if omitted)
            chunk_size: Samples drawn per numpy call
            backoff: Seconds to wait before retrying a full buffer
            poll_interval: Seconds between liveness checks while reading
        """
        self.context = context
        self.rng = rng if rng is not None else np.random.default_rng()
        self.chunk_size = chunk_size
        self.backoff = backoff
        self.poll_interval = poll_interval

        self.buffer: "queue.Queue[float]" = queue.Queue(maxsize=capacity)
        self._resumed = threading.Event()
        self._resumed.set()
        self._finished = threading.Event()
        self._thread = threading.Thread(
            target=self._produce, name="sample-producer", daemon=True
        )
        self.produced = 0

    def start(self) -> "SampleProducer":
        logger.debug("Starting gaussian thread...")
        self._thread.start()
        return self

    def pause(self):
        """Stop filling the buffer until resume() is called."""
        self._resumed.clear()

    def resume(self):
        self._resumed.set()

    def stop(self, timeout: Optional[float] = None):
        """Signal the producer to exit and wait for it."""
        self.context.stop.set()
        self._resumed.set()
        if self._thread.is_alive():
            self._thread.join(timeout)

    @property
    def finished(self) -> bool:
        """True once the producer loop has exited."""
        return self._finished.is_set()

    def _produce(self):
        stop = self.context.stop
        try:
            pending = []
            while self.context.running:
                if not self._resumed.is_set():
                    self._resumed.wait(self.backoff)
                    continue

                if not pending:
                    pending = self.rng.standard_normal(self.chunk_size).tolist()

                try:
                    self.buffer.put_nowait(pending[-1])
                except queue.Full:
                    stop.wait(self.backoff)
                    continue
                pending.pop()
                self.produced += 1
        finally:
            self._finished.set()
            logger.debug("Gaussian thread stopped after %d samples", self.produced)

    def take(self) -> float:
        """Next sample from the buffer.

        Blocks while the buffer is empty and the producer is alive.

        Raises:
            SampleExhaustedError: buffer drained and producer stopped
        """
        while True:
            try:
                return self.buffer.get(timeout=self.poll_interval)
            except queue.Empty:
                if self._finished.is_set() and self.buffer.empty():
                    raise SampleExhaustedError(
                        f"Sample buffer drained after producer stopped "
                        f"({self.produced} samples produced)"
                    )
