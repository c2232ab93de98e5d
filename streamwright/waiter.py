"""
Timeout-bounded polling for resources that are still provisioning.
"""

import logging
import threading
import time
from typing import Callable, Optional, TypeVar

from .errors import StreamNeverActiveError, WaitCancelledError

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_INTERVAL = 20.0
DEFAULT_TIMEOUT = 600.0


def wait_for(
    probe: Callable[[], T],
    is_done: Callable[[T], bool],
    *,
    interval: float = DEFAULT_INTERVAL,
    timeout: float = DEFAULT_TIMEOUT,
    is_pending_error: Callable[[Exception], bool] = lambda e: False,
    clock: Callable[[], float] = time.monotonic,
    sleep: Callable[[float], None] = time.sleep,
    cancel: Optional[threading.Event] = None,
    description: str = "resource",
) -> T:
    """
    Poll until a probe result satisfies is_done or the timeout elapses.

    Each iteration sleeps one interval before probing, so consecutive probes
    are at least `interval` seconds apart. The deadline is fixed on entry.

    Args:
        probe: Callable returning the current state
        is_done: Predicate on the probe result that ends the wait
        interval: Seconds between probes
        timeout: Total seconds before giving up
        is_pending_error: Predicate for exceptions meaning "not ready yet";
            any other exception from probe propagates immediately
        clock: Monotonic time source
        sleep: Sleep function, used when no cancel event is given
        cancel: Optional event that aborts the wait when set
        description: Name used in error messages

    Returns:
        The first probe result accepted by is_done

    Raises:
        StreamNeverActiveError: If the deadline passes first
        WaitCancelledError: If the cancel event is set
    """
    deadline = clock() + timeout

    while clock() < deadline:
        if cancel is not None:
            if cancel.wait(interval):
                raise WaitCancelledError(f"Waiting for {description} was cancelled")
        else:
            sleep(interval)

        try:
            result = probe()
        except Exception as e:
            if is_pending_error(e):
                logger.debug(f"{description} not ready yet: {e}")
                continue
            raise

        if is_done(result):
            return result

    raise StreamNeverActiveError(f"{description} never became active")
