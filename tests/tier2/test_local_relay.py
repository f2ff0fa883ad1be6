"""Full flow against a local relay that verifies signatures."""

from __future__ import annotations

import pytest

from txd_client.errors import RelayRejectedError
from txd_client.relay.client import RelayClient
from txd_client.submitter import submit_and_wait

from tests.factories import BOB_SEED, HELLO_WORLD_CALL, make_client_config
from tests.mocks import MockCallBuilder


async def test_submit_and_wait_against_local_relay(local_relay):
    base_url, relay = local_relay
    statuses = []

    result = await submit_and_wait(
        make_client_config(base_url=base_url),
        on_status=lambda u: statuses.append(u.status),
    )

    assert result.submission_id == "sub-1"
    assert statuses == ["Pending", "InBlock", "Finalized"]
    assert relay.submissions == {"sub-1": HELLO_WORLD_CALL}
    assert relay.rejected == 0


async def test_unknown_key_is_rejected(local_relay):
    base_url, relay = local_relay

    with pytest.raises(RelayRejectedError) as exc_info:
        await submit_and_wait(
            make_client_config(base_url=base_url, seed=BOB_SEED),
            call_builder=MockCallBuilder(),
        )

    assert exc_info.value.status_code == 401
    assert relay.submissions == {}


async def test_tampered_kid_is_rejected(local_relay, alice):
    base_url, relay = local_relay

    async with RelayClient(base_url, key_uri="did:kilt:4nobody#0x00") as client:
        with pytest.raises(RelayRejectedError):
            await client.submit_call(HELLO_WORLD_CALL, alice.keypair)


async def test_unknown_submission_is_rejected(local_relay, alice):
    base_url, _ = local_relay

    async with RelayClient(base_url) as client:
        with pytest.raises(RelayRejectedError) as exc_info:
            await client.get_status("missing", alice.keypair)
    assert exc_info.value.status_code == 404
