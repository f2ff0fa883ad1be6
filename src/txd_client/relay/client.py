"""Relay HTTP client - signed POST/GET requests against the TXD API."""

from __future__ import annotations

import logging
from typing import Any

import httpx
from substrateinterface import Keypair

from txd_client.crypto.keys import key_id
from txd_client.crypto.token import sign_request
from txd_client.errors import (
    MalformedResponseError,
    RelayRejectedError,
    TransportError,
)
from txd_client.models.config import DEFAULT_RELAY_URL

log = logging.getLogger(__name__)

SUBMISSION_PATH = "/api/v1/submission"
META_PATH = "/meta"


def submission_path(submission_id: str) -> str:
    return f"{SUBMISSION_PATH}/{submission_id}"


class RelayClient:
    """Sends DID-authenticated requests to the transaction relay.

    Each request carries ``Authorization: Bearer <token>`` where the token
    signs the literal path and body being sent. The key id is derived from
    the keypair on every call unless ``key_uri`` overrides it.

    The client never retries; callers decide what to do with a
    ``TransportError``.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_RELAY_URL,
        timeout: float = 30.0,
        key_uri: str = "",
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._key_uri = key_uri
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(timeout, connect=10),
            transport=transport,
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    async def __aenter__(self) -> RelayClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def close(self) -> None:
        await self._client.aclose()

    def _auth_headers(self, path: str, body: bytes, keypair: Keypair) -> dict[str, str]:
        kid = self._key_uri or key_id(keypair)
        return {"Authorization": f"Bearer {sign_request(path, body, kid, keypair)}"}

    async def _request(
        self,
        method: str,
        path: str,
        body: bytes,
        keypair: Keypair | None,
    ) -> dict[str, Any]:
        url = f"{self._base_url}{path}"
        headers = self._auth_headers(path, body, keypair) if keypair is not None else {}

        try:
            resp = await self._client.request(
                method, url, content=body or None, headers=headers,
            )
        except httpx.TransportError as exc:
            log.error("%s %s failed: %s", method, url, exc)
            raise TransportError(f"{method} {path}: {exc}", exc) from exc

        if resp.status_code >= 500:
            log.error("%s %s returned HTTP %d", method, url, resp.status_code)
            raise TransportError(f"{method} {path}: relay HTTP {resp.status_code}")

        if resp.status_code >= 400:
            log.error(
                "%s %s rejected with HTTP %d: %s",
                method, url, resp.status_code, resp.text[:200],
            )
            raise RelayRejectedError(
                f"{method} {path}: relay rejected request (HTTP {resp.status_code})",
                status_code=resp.status_code,
                body=resp.text,
            )

        try:
            data = resp.json()
        except ValueError as exc:
            log.error("%s %s returned non-JSON body: %s", method, url, resp.text[:200])
            raise MalformedResponseError(f"{method} {path}: response is not JSON", exc) from exc

        if not isinstance(data, dict):
            log.error("%s %s returned %s, expected object", method, url, type(data).__name__)
            raise MalformedResponseError(f"{method} {path}: response is not a JSON object")

        log.debug("%s %s -> %s", method, path, data)
        return data

    async def post(self, path: str, body: str, keypair: Keypair) -> dict[str, Any]:
        """POST ``body`` (sent as raw UTF-8 bytes) to ``path``."""
        return await self._request("POST", path, body.encode("utf-8"), keypair)

    async def get(self, path: str, keypair: Keypair) -> dict[str, Any]:
        """GET ``path``; the token signs an empty body."""
        return await self._request("GET", path, b"", keypair)

    async def submit_call(self, call_data: str, keypair: Keypair) -> str:
        """Submit hex-encoded call data and return the relay's submission id."""
        resp = await self.post(SUBMISSION_PATH, call_data, keypair)
        submission_id = resp.get("id")
        if not isinstance(submission_id, str):
            log.error("Submission response has no id: %s", resp)
            raise MalformedResponseError("submission response has no string 'id' field")

        log.info("Submitted transaction with id %s", submission_id)
        return submission_id

    async def get_status(self, submission_id: str, keypair: Keypair) -> str:
        """Fetch the relay's current status string for a submission."""
        resp = await self.get(submission_path(submission_id), keypair)
        status = resp.get("status")
        if not isinstance(status, str):
            log.error("Status response for %s has no status: %s", submission_id, resp)
            raise MalformedResponseError(
                f"status response for {submission_id} has no string 'status' field"
            )
        return status

    async def get_meta(self) -> dict[str, Any]:
        """Fetch the relay's public metadata (unauthenticated).

        The relay pays fees from ``paymentAddress``; DID creation calls name
        it as the submitter.
        """
        meta = await self._request("GET", META_PATH, b"", None)
        if not isinstance(meta.get("paymentAddress"), str):
            log.error("Relay metadata has no paymentAddress: %s", meta)
            raise MalformedResponseError("relay metadata has no string 'paymentAddress' field")
        return meta
