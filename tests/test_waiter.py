"""
Tests for the polling wait routine.
"""

import threading

import pytest
from unittest.mock import Mock

from streamwright.errors import (
    ProviderError,
    StreamNeverActiveError,
    StreamNotFoundError,
    WaitCancelledError,
)
from streamwright.waiter import wait_for


def _wait(probe, clock, **kwargs):
    return wait_for(
        probe,
        lambda status: status == "ACTIVE",
        interval=20,
        timeout=600,
        clock=clock,
        sleep=clock.sleep,
        **kwargs
    )


class TestWaitFor:
    """Test wait_for behaviour with a fake clock."""

    def test_returns_on_first_success(self, clock):
        probe = Mock(return_value="ACTIVE")

        assert _wait(probe, clock) == "ACTIVE"
        assert probe.call_count == 1
        assert clock.sleeps == [20]

    def test_stops_sleeping_once_done(self, clock):
        probe = Mock(side_effect=["CREATING", "CREATING", "ACTIVE", "CREATING"])

        _wait(probe, clock)

        assert probe.call_count == 3
        assert clock.sleeps == [20, 20, 20]

    def test_polls_are_spaced_by_interval(self, clock):
        poll_times = []

        def probe():
            poll_times.append(clock())
            return "ACTIVE" if len(poll_times) == 5 else "CREATING"

        _wait(probe, clock)

        gaps = [b - a for a, b in zip(poll_times, poll_times[1:])]
        assert poll_times[0] >= 20
        assert all(gap >= 20 for gap in gaps)

    def test_timeout(self, clock):
        probe = Mock(return_value="CREATING")

        with pytest.raises(StreamNeverActiveError, match="Stream s1 never became active"):
            _wait(probe, clock, description="Stream s1")

        assert clock.now == 600
        assert probe.call_count == 30

    def test_pending_errors_keep_polling(self, clock):
        probe = Mock(side_effect=[StreamNotFoundError("gone"), StreamNotFoundError("gone"), "ACTIVE"])

        result = _wait(probe, clock, is_pending_error=lambda e: isinstance(e, StreamNotFoundError))

        assert result == "ACTIVE"
        assert probe.call_count == 3

    def test_other_errors_propagate_immediately(self, clock):
        probe = Mock(side_effect=["CREATING", ProviderError("Throttled"), "ACTIVE"])

        with pytest.raises(ProviderError, match="Throttled"):
            _wait(probe, clock, is_pending_error=lambda e: isinstance(e, StreamNotFoundError))

        assert probe.call_count == 2

    def test_pending_errors_until_timeout(self, clock):
        probe = Mock(side_effect=StreamNotFoundError("gone"))

        with pytest.raises(StreamNeverActiveError):
            _wait(probe, clock, is_pending_error=lambda e: isinstance(e, StreamNotFoundError))

    def test_cancel(self, clock):
        cancel = threading.Event()
        cancel.set()
        probe = Mock(return_value="CREATING")

        with pytest.raises(WaitCancelledError):
            _wait(probe, clock, cancel=cancel)

        probe.assert_not_called()
