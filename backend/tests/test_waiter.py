"""Tests for the status polling loop."""

import asyncio
import time

import pytest

from fabric_provider.exceptions import (
    ResourceNotFoundError,
    StateWaitError,
    UnexpectedStateError,
    WaitTimeoutError,
)
from fabric_provider.polling import status_of, wait_for_state


class ScriptedRefresh:
    """Refresh function that replays a list of statuses, repeating the last one."""

    def __init__(self, statuses, result=object()):
        self.statuses = list(statuses)
        self.result = result
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        status = self.statuses.pop(0) if len(self.statuses) > 1 else self.statuses[0]
        if status is None:
            return None, ""
        return self.result, status


@pytest.mark.asyncio
async def test_returns_result_when_target_reached():
    result = {"uuid": "abc"}
    refresh = ScriptedRefresh(["PROVISIONING", "PROVISIONING", "PROVISIONED"], result)

    start = time.monotonic()
    got = await wait_for_state(
        refresh, pending=["PROVISIONING"], target=["PROVISIONED"], timeout=5, interval=0.05
    )
    elapsed = time.monotonic() - start

    assert got is result
    assert refresh.calls == 3
    assert elapsed >= 2 * 0.05 * 0.9


@pytest.mark.asyncio
async def test_target_on_first_poll_does_not_sleep():
    refresh = ScriptedRefresh(["PROVISIONED"])

    start = time.monotonic()
    await wait_for_state(refresh, pending=[], target=["PROVISIONED"], timeout=5, interval=1)

    assert refresh.calls == 1
    assert time.monotonic() - start < 0.5


@pytest.mark.asyncio
async def test_initial_delay_before_first_poll():
    refresh = ScriptedRefresh(["PROVISIONED"])

    start = time.monotonic()
    await wait_for_state(refresh, pending=[], target=["PROVISIONED"], timeout=5, delay=0.1)

    assert time.monotonic() - start >= 0.09


@pytest.mark.asyncio
async def test_times_out_when_always_pending():
    refresh = ScriptedRefresh(["PROVISIONING"])

    start = time.monotonic()
    with pytest.raises(WaitTimeoutError) as exc_info:
        await wait_for_state(
            refresh, pending=["PROVISIONING"], target=["PROVISIONED"], timeout=0.2, interval=0.05
        )
    elapsed = time.monotonic() - start

    assert elapsed >= 0.19
    assert exc_info.value.last_status == "PROVISIONING"
    assert isinstance(exc_info.value, TimeoutError)
    assert "PROVISIONED" in str(exc_info.value)


@pytest.mark.asyncio
async def test_unexpected_status_fails_immediately():
    refresh = ScriptedRefresh(["PROVISIONING", "FAILED"])

    with pytest.raises(UnexpectedStateError) as exc_info:
        await wait_for_state(
            refresh, pending=["PROVISIONING"], target=["PROVISIONED"], timeout=5, interval=0.01
        )

    assert exc_info.value.status == "FAILED"
    assert refresh.calls == 2


@pytest.mark.asyncio
async def test_refresh_error_propagates_unchanged():
    class Boom(Exception):
        pass

    calls = 0

    async def refresh():
        nonlocal calls
        calls += 1
        raise Boom("api down")

    with pytest.raises(Boom):
        await wait_for_state(refresh, pending=["PROVISIONING"], target=["PROVISIONED"], timeout=5)

    assert calls == 1


@pytest.mark.asyncio
async def test_not_found_limit():
    refresh = ScriptedRefresh([None])

    with pytest.raises(ResourceNotFoundError) as exc_info:
        await wait_for_state(
            refresh,
            pending=["PROVISIONING"],
            target=["PROVISIONED"],
            timeout=5,
            interval=0,
            not_found_checks=3,
        )

    assert refresh.calls == 4
    assert exc_info.value.checks == 3
    assert isinstance(exc_info.value, StateWaitError)


@pytest.mark.asyncio
async def test_not_found_counter_resets_after_a_result():
    refresh = ScriptedRefresh([None, None, "PROVISIONING", None, None, "PROVISIONED"])

    await wait_for_state(
        refresh,
        pending=["PROVISIONING"],
        target=["PROVISIONED"],
        timeout=5,
        interval=0,
        not_found_checks=2,
    )

    assert refresh.calls == 6


@pytest.mark.asyncio
async def test_cancellation_stops_polling():
    refresh = ScriptedRefresh(["PROVISIONING"])
    task = asyncio.create_task(
        wait_for_state(
            refresh, pending=["PROVISIONING"], target=["PROVISIONED"], timeout=10, interval=0.02
        )
    )
    await asyncio.sleep(0.1)
    task.cancel()

    with pytest.raises(asyncio.CancelledError):
        await task

    calls = refresh.calls
    await asyncio.sleep(0.1)
    assert refresh.calls == calls


def test_status_of_treats_none_as_empty():
    class Conn:
        status = None
        provider_status = "PROVISIONED"

    assert status_of(Conn()) == ""
    assert status_of(Conn(), "provider_status") == "PROVISIONED"
