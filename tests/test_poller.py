"""Submission poller state machine."""

from __future__ import annotations

import asyncio

import pytest

from txd_client.errors import (
    MalformedResponseError,
    PollTimeoutError,
    RelayRejectedError,
    TransportError,
)
from txd_client.models.config import PollConfig
from txd_client.models.records import PollState
from txd_client.relay import poller as poller_module
from txd_client.relay.poller import SubmissionPoller

from tests.factories import fast_poll
from tests.mocks import MockRelay


def _poller(relay, alice, **kwargs) -> SubmissionPoller:
    config = kwargs.pop("config", fast_poll())
    return SubmissionPoller(relay, alice.keypair, config=config, **kwargs)


async def test_finalized_on_first_poll(alice):
    relay = MockRelay(statuses=["Finalized"])
    poller = _poller(relay, alice)

    updates = await poller.run("abc123")

    assert [u.status for u in updates] == ["Finalized"]
    assert poller.state == PollState.FINALIZED
    assert poller.submission_id == "abc123"
    assert relay.status_calls == ["abc123"]


@pytest.mark.parametrize("status", ["Pending", "InBlock", "", "finalized", "Finalized ", "Failed"])
async def test_non_final_status_keeps_polling(alice, status):
    relay = MockRelay(statuses=[status, "Finalized"])
    poller = _poller(relay, alice)

    updates = await poller.run("abc123")

    assert [u.status for u in updates] == [status, "Finalized"]
    assert [u.attempt for u in updates] == [1, 2]
    assert poller.state == PollState.FINALIZED


async def test_state_is_polling_while_waiting(alice):
    seen = []
    relay = MockRelay(statuses=["Pending", "InBlock", "Finalized"])
    poller = _poller(
        relay, alice, on_status=lambda update: seen.append((update.status, poller.state)),
    )

    await poller.run("abc123")

    assert seen == [
        ("Pending", PollState.POLLING),
        ("InBlock", PollState.POLLING),
        ("Finalized", PollState.POLLING),
    ]
    assert poller.state == PollState.FINALIZED


async def test_on_status_called_in_order(alice):
    seen = []
    relay = MockRelay(statuses=["Pending", "InBlock", "Finalized"])
    await _poller(relay, alice, on_status=lambda u: seen.append(u.status)).run("abc123")
    assert seen == ["Pending", "InBlock", "Finalized"]


async def test_missing_status_is_fatal(alice):
    relay = MockRelay(statuses=["Pending", MalformedResponseError("no status field")])
    poller = _poller(relay, alice)

    with pytest.raises(MalformedResponseError):
        await poller.run("abc123")

    assert poller.state == PollState.FAILED
    assert isinstance(poller.failure, MalformedResponseError)
    assert len(relay.status_calls) == 2


async def test_rejection_is_fatal(alice):
    relay = MockRelay(statuses=[RelayRejectedError("unauthorized", status_code=401)])
    poller = _poller(relay, alice)
    with pytest.raises(RelayRejectedError):
        await poller.run("abc123")
    assert poller.state == PollState.FAILED


async def test_transport_error_aborts_by_default(alice):
    relay = MockRelay(statuses=[TransportError("connection reset"), "Finalized"])
    poller = _poller(relay, alice)
    with pytest.raises(TransportError):
        await poller.run("abc123")
    assert poller.state == PollState.FAILED
    assert relay.statuses == ["Finalized"]


async def test_transient_retries_recover(alice):
    relay = MockRelay(statuses=[
        TransportError("reset"), "Pending", TransportError("reset"), "Finalized",
    ])
    poller = _poller(relay, alice, config=fast_poll(transient_retries=1))

    updates = await poller.run("abc123")

    assert [u.status for u in updates] == ["Pending", "Finalized"]
    assert [u.attempt for u in updates] == [2, 4]


async def test_transient_retries_exhausted(alice):
    relay = MockRelay(statuses=[TransportError("a"), TransportError("b"), TransportError("c")])
    poller = _poller(relay, alice, config=fast_poll(transient_retries=2))
    with pytest.raises(TransportError):
        await poller.run("abc123")
    assert len(relay.status_calls) == 3


async def test_max_attempts(alice):
    relay = MockRelay(statuses=["Pending"] * 10)
    poller = _poller(relay, alice, config=fast_poll(max_attempts=3))

    with pytest.raises(PollTimeoutError) as exc_info:
        await poller.run("abc123")

    assert exc_info.value.attempts == 3
    assert exc_info.value.submission_id == "abc123"
    assert len(relay.status_calls) == 3
    assert poller.state == PollState.FAILED


async def test_deadline(alice):
    relay = MockRelay(statuses=["Pending"] * 1000)
    poller = _poller(relay, alice, config=PollConfig(interval=0.01, deadline=0.05))

    with pytest.raises(PollTimeoutError):
        await poller.run("abc123")

    assert 1 <= len(relay.status_calls) < 1000
    assert poller.state == PollState.FAILED


async def test_sleeps_before_every_poll_with_backoff(alice, monkeypatch):
    delays = []

    async def fake_sleep(delay):
        delays.append(delay)

    monkeypatch.setattr(poller_module.asyncio, "sleep", fake_sleep)
    relay = MockRelay(statuses=["Pending", "Pending", "Pending", "Finalized"])
    config = PollConfig(interval=1.0, backoff=2.0, max_interval=3.0)

    await _poller(relay, alice, config=config).run("abc123")

    assert delays == [1.0, 2.0, 3.0, 3.0]


async def test_fixed_interval_by_default(alice, monkeypatch):
    delays = []

    async def fake_sleep(delay):
        delays.append(delay)

    monkeypatch.setattr(poller_module.asyncio, "sleep", fake_sleep)
    relay = MockRelay(statuses=["Pending", "Finalized"])

    await SubmissionPoller(relay, alice.keypair).run("abc123")

    assert delays == [1.0, 1.0]


async def test_cancellation_interrupts_sleep(alice):
    relay = MockRelay(statuses=["Pending"] * 10)
    poller = _poller(relay, alice, config=PollConfig(interval=60.0))

    task = asyncio.create_task(poller.run("abc123"))
    await asyncio.sleep(0)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    assert relay.status_calls == []


@pytest.mark.parametrize(
    "kwargs",
    [
        dict(interval=-1),
        dict(max_attempts=0),
        dict(deadline=0),
        dict(backoff=0.5),
        dict(transient_retries=-1),
    ],
)
def test_poll_config_validation(kwargs):
    with pytest.raises(ValueError):
        PollConfig(**kwargs)


async def test_deadline_caps_final_sleep(alice, monkeypatch):
    real_sleep = asyncio.sleep
    delays = []

    async def recording_sleep(delay):
        delays.append(delay)
        await real_sleep(delay)

    monkeypatch.setattr(poller_module.asyncio, "sleep", recording_sleep)
    relay = MockRelay(statuses=["Pending"] * 10)
    poller = _poller(relay, alice, config=PollConfig(interval=0.2, deadline=0.3))

    with pytest.raises(PollTimeoutError) as exc_info:
        await poller.run("abc123")

    # One poll at ~0.2s; the next wait stops at the deadline instead of polling at ~0.4s.
    assert relay.status_calls == ["abc123"]
    assert exc_info.value.attempts == 1
    assert delays[0] == 0.2
    assert all(d <= 0.2 for d in delays)
    assert len(delays) <= 2
