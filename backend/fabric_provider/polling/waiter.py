"""
State Waiter

Polls a refresh function until a connection reaches one of the target
statuses. Used for provisioning waits after create and deprovisioning waits
after delete.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterable
from typing import Any, Optional, TypeVar

from fabric_provider.exceptions import (
    ResourceNotFoundError,
    UnexpectedStateError,
    WaitTimeoutError,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Returns the polled object (None when not found) and its status.
RefreshFunc = Callable[[], Awaitable[tuple[Optional[T], str]]]

DEFAULT_NOT_FOUND_CHECKS = 20


async def wait_for_state(
    refresh: RefreshFunc[T],
    *,
    pending: Iterable[str],
    target: Iterable[str],
    timeout: float,
    delay: float = 0.0,
    interval: float = 2.0,
    not_found_checks: int = DEFAULT_NOT_FOUND_CHECKS,
) -> T:
    """
    Wait until ``refresh`` reports a target status.

    Args:
        refresh: Coroutine function returning ``(result, status)``
        pending: Statuses that mean "keep waiting"
        target: Statuses that end the wait successfully
        timeout: Seconds to wait before giving up
        delay: Seconds to sleep before the first poll
        interval: Seconds to sleep between polls
        not_found_checks: Consecutive empty results tolerated

    Returns:
        The result of the last poll.

    Raises:
        WaitTimeoutError: still pending once ``timeout`` has elapsed
        UnexpectedStateError: a status outside pending and target
        ResourceNotFoundError: too many consecutive empty results
        Exception: whatever ``refresh`` raises, unchanged
    """
    pending = frozenset(pending)
    target = frozenset(target)
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout

    if delay > 0:
        await asyncio.sleep(delay)

    attempts = 0
    not_found = 0
    last_status: str | None = None

    while True:
        result, status = await refresh()
        attempts += 1

        if result is None:
            not_found += 1
            if not_found > not_found_checks:
                raise ResourceNotFoundError(not_found_checks)
        else:
            not_found = 0
            last_status = status
            logger.debug("Poll %d: status=%s", attempts, status)

            if status in target:
                return result
            if status not in pending:
                raise UnexpectedStateError(status, target)

        remaining = deadline - loop.time()
        if remaining <= 0:
            raise WaitTimeoutError(timeout, last_status, target)

        await asyncio.sleep(min(interval, remaining))


def status_of(obj: Any, attr: str = "status") -> str:
    """Read a status attribute, treating None as an empty status."""
    return getattr(obj, attr, None) or ""
