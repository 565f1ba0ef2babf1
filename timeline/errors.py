"""
Exceptions raised by the timeline generator.
"""


class TimelineError(Exception):
    """Base class for all timeline generator errors."""


class ConfigError(TimelineError):
    """Configuration was readable but structurally invalid."""


class SampleExhaustedError(TimelineError):
    """The sample buffer is empty and its producer has stopped."""


class SinkError(TimelineError):
    """A batch could not be persisted by the sink."""

    def __init__(self, message: str, batch_size: int = 0):
        super().__init__(message)
        self.batch_size = batch_size
