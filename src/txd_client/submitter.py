"""Submit-and-wait flow - wires key derivation, relay and poller together."""

from __future__ import annotations

import logging
from typing import Callable

import httpx

from txd_client.chain.builder import StaticCallBuilder, SubstrateRemarkBuilder
from txd_client.crypto.keys import DidKey
from txd_client.interfaces.call_builder import CallBuilder
from txd_client.interfaces.relay import Relay
from txd_client.models.config import ClientConfig, PollConfig
from txd_client.models.records import SubmissionResult
from txd_client.relay.client import RelayClient
from txd_client.relay.poller import StatusCallback, SubmissionPoller

log = logging.getLogger(__name__)


class SubmissionOrchestrator:
    """Runs one submission from call encoding to finalization.

    Steps run strictly in order and any failure aborts the rest:

    1. build the call data with the chain call builder
    2. derive the DID authentication key from the seed
    3. POST the call data to the relay
    4. read the submission id from the response
    5. poll the submission until it is finalized
    """

    def __init__(
        self,
        relay: Relay,
        call_builder: CallBuilder,
        poll_config: PollConfig | None = None,
        on_call_data: Callable[[str], None] | None = None,
        on_submitted: Callable[[str], None] | None = None,
        on_status: StatusCallback | None = None,
    ) -> None:
        self.relay = relay
        self.call_builder = call_builder
        self.poll_config = poll_config or PollConfig()
        self._on_call_data = on_call_data
        self._on_submitted = on_submitted
        self._on_status = on_status

    async def run(self, seed: str) -> SubmissionResult:
        call_data = await self.call_builder.build_call()
        log.info("Call data: %s", call_data)
        if self._on_call_data is not None:
            self._on_call_data(call_data)

        did_key = DidKey.from_seed(seed)
        log.info("Using DID %s", did_key.did)

        submission_id = await self.relay.submit_call(call_data, did_key.keypair)
        if self._on_submitted is not None:
            self._on_submitted(submission_id)

        poller = SubmissionPoller(
            self.relay,
            did_key.keypair,
            config=self.poll_config,
            on_status=self._on_status,
        )
        updates = await poller.run(submission_id)

        return SubmissionResult(
            submission_id=submission_id,
            status=updates[-1].status,
            call_data=call_data,
            updates=updates,
        )


def build_call_builder(cfg: ClientConfig) -> CallBuilder:
    """Pre-encoded call data wins over encoding against the chain."""
    if cfg.call_data:
        return StaticCallBuilder(cfg.call_data)
    return SubstrateRemarkBuilder(cfg.chain_rpc_url, cfg.remark)


async def submit_and_wait(
    cfg: ClientConfig,
    call_builder: CallBuilder | None = None,
    on_call_data: Callable[[str], None] | None = None,
    on_submitted: Callable[[str], None] | None = None,
    on_status: StatusCallback | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> SubmissionResult:
    """Build components from ``cfg``, run one submission and clean up."""
    log.info("Submitting to relay %s", cfg.base_url)

    async with RelayClient(
        cfg.base_url,
        timeout=cfg.timeout,
        key_uri=cfg.key_uri,
        transport=transport,
    ) as relay:
        orchestrator = SubmissionOrchestrator(
            relay,
            call_builder or build_call_builder(cfg),
            poll_config=cfg.poll,
            on_call_data=on_call_data,
            on_submitted=on_submitted,
            on_status=on_status,
        )
        return await orchestrator.run(cfg.seed)
