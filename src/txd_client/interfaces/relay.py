"""Relay protocol - authenticated access to the submission endpoints."""

from __future__ import annotations

from typing import Any, Protocol

from substrateinterface import Keypair


class Relay(Protocol):
    """Signed requests against the transaction relay."""

    async def post(self, path: str, body: str, keypair: Keypair) -> dict[str, Any]:
        """POST ``body`` to ``path`` and return the JSON object response."""
        ...

    async def get(self, path: str, keypair: Keypair) -> dict[str, Any]:
        """GET ``path`` and return the JSON object response."""
        ...

    async def submit_call(self, call_data: str, keypair: Keypair) -> str:
        """Submit encoded call data and return the submission id."""
        ...

    async def get_status(self, submission_id: str, keypair: Keypair) -> str:
        """Return the current status string of a submission."""
        ...

    async def get_meta(self) -> dict[str, Any]:
        """Return the relay's public metadata (includes ``paymentAddress``)."""
        ...
