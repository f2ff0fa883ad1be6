"""Shared fixtures for txd_client tests."""

from __future__ import annotations

import pytest
from pytest_metadata.plugin import metadata_key

from txd_client.crypto.keys import DidKey
from txd_client.relay.client import RelayClient

from tests.factories import ALICE_SEED, RELAY_URL
from tests.mocks import MockCallBuilder, MockRelay, RelayRecorder


# ── Report metadata ──────────────────────────────────────────────


def pytest_configure(config):
    """Add relay info to the HTML report Environment table."""
    meta = config.stash.setdefault(metadata_key, {})
    meta["Relay"] = RELAY_URL
    meta["Test seed"] = ALICE_SEED


def pytest_html_results_summary(prefix, summary, postfix):
    """Show the DID used by the tests in the report summary."""
    did_key = DidKey.from_seed(ALICE_SEED)
    prefix.append(
        '<div style="margin:8px 0;padding:10px;background:#f8f9fa;border:1px solid #dee2e6;'
        'border-radius:4px;font-family:monospace;font-size:13px;">'
        "<strong>Test identity</strong><br/>"
        f"DID: {did_key.did}<br/>"
        f"Key ID: {did_key.kid}"
        "</div>"
    )


@pytest.fixture(scope="session")
def alice() -> DidKey:
    return DidKey.from_seed(ALICE_SEED)


@pytest.fixture
def recorder():
    return RelayRecorder(get_responses=[{"status": "Finalized"}])


@pytest.fixture
async def relay_client(recorder):
    """RelayClient backed by the recorder's mock transport."""
    client = RelayClient(RELAY_URL, transport=recorder.transport)
    yield client
    await client.close()


@pytest.fixture
def mock_relay():
    return MockRelay()


@pytest.fixture
def mock_builder():
    return MockCallBuilder()
