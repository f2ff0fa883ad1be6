"""Chain call builders - encode the call that gets submitted to the relay."""

from __future__ import annotations

import asyncio
import logging
import re

from substrateinterface import SubstrateInterface
from substrateinterface.exceptions import SubstrateRequestException
from websocket import WebSocketException

from txd_client.errors import EncodingError, TransportError
from txd_client.models.config import DEFAULT_CHAIN_RPC_URL, DEFAULT_REMARK

log = logging.getLogger(__name__)

# system.remark("Hello World!") as encoded on spiritnet
HELLO_WORLD_CALL = "0x00002c68656c6c6f20776f726c64"

_HEX_CALL = re.compile(r"^0x(?:[0-9a-f]{2})+$")


def normalize_call_data(call_data: str) -> str:
    """Validate ``0x``-prefixed hex call data and return it lowercased."""
    normalized = call_data.strip().lower()
    if not _HEX_CALL.match(normalized):
        raise EncodingError(f"call data is not 0x-prefixed hex: {call_data[:32]!r}")
    return normalized


class SubstrateRemarkBuilder:
    """Encodes ``System.remark(remark)`` using live chain metadata.

    The node is queried for its current metadata on each build so the call
    index matches the running runtime. SubstrateInterface is blocking, so
    the work runs in a thread.
    """

    def __init__(self, rpc_url: str = DEFAULT_CHAIN_RPC_URL, remark: str = DEFAULT_REMARK) -> None:
        self._rpc_url = rpc_url
        self._remark = remark

    async def build_call(self) -> str:
        log.info("Encoding System.remark using metadata from %s", self._rpc_url)
        call_data = await asyncio.to_thread(self._build_sync)
        log.debug("Encoded call: %s", call_data)
        return call_data

    def _build_sync(self) -> str:
        try:
            substrate = SubstrateInterface(url=self._rpc_url)
        except (OSError, WebSocketException, SubstrateRequestException) as exc:
            log.error("Could not connect to %s: %s", self._rpc_url, exc)
            raise TransportError(f"chain RPC unavailable: {exc}", exc) from exc

        try:
            call = substrate.compose_call(
                call_module="System",
                call_function="remark",
                call_params={"remark": self._remark},
            )
            return normalize_call_data(call.data.to_hex())
        except (OSError, WebSocketException, SubstrateRequestException) as exc:
            log.error("Metadata request to %s failed: %s", self._rpc_url, exc)
            raise TransportError(f"chain RPC request failed: {exc}", exc) from exc
        except (ValueError, TypeError, NotImplementedError) as exc:
            log.error("Encoding System.remark failed: %s", exc)
            raise EncodingError(f"could not encode remark call: {exc}", exc) from exc
        finally:
            substrate.close()


class StaticCallBuilder:
    """Returns call data that was encoded ahead of time."""

    def __init__(self, call_data: str = HELLO_WORLD_CALL) -> None:
        self._call_data = normalize_call_data(call_data)

    async def build_call(self) -> str:
        return self._call_data
