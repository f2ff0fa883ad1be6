"""Tier 2 fixtures: a local relay server that checks request tokens."""

from __future__ import annotations

import pytest
from aiohttp import web

from txd_client.crypto.keys import DidKey, key_id
from txd_client.crypto.token import decode_token, verify_token


class LocalRelay:
    """Minimal relay: verifies bearer tokens and serves scripted statuses."""

    def __init__(self, known_keys: list[DidKey]) -> None:
        self.keys = {key_id(k.keypair): k.public_key for k in known_keys}
        self.statuses: list[str] = ["Pending", "InBlock", "Finalized"]
        self.submissions: dict[str, str] = {}
        self.rejected = 0

    def _authorize(self, request: web.Request, body: bytes) -> None:
        header = request.headers.get("Authorization", "")
        if not header.startswith("Bearer "):
            raise web.HTTPUnauthorized(text='{"error":"missing token"}')
        token = header[len("Bearer "):]
        public_key = self.keys.get(decode_token(token).kid)
        if public_key is None or not verify_token(token, request.path, body, public_key):
            self.rejected += 1
            raise web.HTTPUnauthorized(text='{"error":"invalid signature"}')

    async def handle_submit(self, request: web.Request) -> web.Response:
        body = await request.read()
        self._authorize(request, body)
        submission_id = f"sub-{len(self.submissions) + 1}"
        self.submissions[submission_id] = body.decode("utf-8")
        return web.json_response({"id": submission_id})

    async def handle_status(self, request: web.Request) -> web.Response:
        self._authorize(request, b"")
        submission_id = request.match_info["id"]
        if submission_id not in self.submissions:
            return web.json_response({"error": "not found"}, status=404)
        status = self.statuses.pop(0) if len(self.statuses) > 1 else self.statuses[0]
        return web.json_response({"id": submission_id, "status": status})


@pytest.fixture
async def local_relay(alice):
    """Runs LocalRelay on an ephemeral port. Returns (base_url, relay)."""
    relay = LocalRelay([alice])

    app = web.Application()
    app.router.add_post("/api/v1/submission", relay.handle_submit)
    app.router.add_get("/api/v1/submission/{id}", relay.handle_status)

    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, "127.0.0.1", 0)
    await site.start()
    host, port = runner.addresses[0][:2]
    yield f"http://{host}:{port}", relay
    await runner.cleanup()
