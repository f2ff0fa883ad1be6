"""Chain call encoding."""

from txd_client.chain.builder import (
    HELLO_WORLD_CALL,
    StaticCallBuilder,
    SubstrateRemarkBuilder,
    normalize_call_data,
)

__all__ = ["HELLO_WORLD_CALL", "StaticCallBuilder", "SubstrateRemarkBuilder", "normalize_call_data"]
