"""
Exception hierarchy for provider and wait failures.
"""

from typing import Optional


class BrokerError(Exception):
    """Base class for all streamwright errors."""


class ProviderError(BrokerError):
    """A Kinesis API call failed."""

    def __init__(self, message: str, stream_name: Optional[str] = None, code: Optional[str] = None):
        super().__init__(message)
        self.stream_name = stream_name
        self.code = code


class StreamNotFoundError(ProviderError):
    """The named stream does not exist (or is not queryable yet)."""


class StreamAlreadyExistsError(ProviderError):
    """A create request hit a stream that already exists."""


class WaitError(BrokerError):
    """Waiting for a stream to become active did not succeed."""


class StreamNeverActiveError(WaitError):
    """The wait deadline passed before the stream became active."""


class WaitCancelledError(WaitError):
    """The wait was aborted through its cancel event."""


class DefinitionError(BrokerError):
    """A deployment definition could not be read or validated."""
