"""CallBuilder protocol - produces the encoded chain call to submit."""

from __future__ import annotations

from typing import Protocol


class CallBuilder(Protocol):
    """Encodes a chain call against current on-chain metadata."""

    async def build_call(self) -> str:
        """Return the encoded call as a 0x-prefixed lowercase hex string."""
        ...
