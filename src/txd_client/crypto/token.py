"""Compact signed tokens authorizing a single relay request.

A token has three dot-separated base64url segments (no padding)::

    b64url({"kid": kid}) . b64url(digest) . b64url(signature)

``digest`` is blake2b-256 over the request path immediately followed by the
request body. There is no separator, so ``("/a", "bc")`` and ``("/ab", "c")``
produce the same digest. The relay verifies exactly this construction, so
it cannot be changed on this side alone.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import json
import logging
from dataclasses import dataclass

from substrateinterface import Keypair, KeypairType

from txd_client.crypto.keys import KILT_SS58_FORMAT
from txd_client.errors import CryptoError, EncodingError

log = logging.getLogger(__name__)

DIGEST_SIZE = 32


def _as_bytes(value: str | bytes) -> bytes:
    return value if isinstance(value, bytes) else value.encode("utf-8")


def b64url_encode(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def b64url_decode(segment: str) -> bytes:
    padding = "=" * (-len(segment) % 4)
    try:
        return base64.urlsafe_b64decode(segment + padding)
    except (binascii.Error, ValueError) as exc:
        raise EncodingError(f"invalid base64url segment: {segment[:16]!r}", exc) from exc


def request_digest(path: str | bytes, body: str | bytes = b"") -> bytes:
    """blake2b-256 over ``path ‖ body`` exactly as transmitted."""
    hasher = hashlib.blake2b(digest_size=DIGEST_SIZE)
    hasher.update(_as_bytes(path))
    hasher.update(_as_bytes(body))
    return hasher.digest()


def sign_request(path: str | bytes, body: str | bytes, kid: str, keypair: Keypair) -> str:
    """Build the bearer token for a request to ``path`` carrying ``body``.

    sr25519 signatures are randomized, so two tokens for the same request
    differ in their last segment while both verify.
    """
    digest = request_digest(path, body)

    try:
        signature = keypair.sign(digest)
    except Exception as exc:
        log.error("Signing request digest failed: %s", exc)
        raise CryptoError("could not sign request", exc) from exc

    try:
        header = json.dumps({"kid": kid}, separators=(",", ":"))
    except (TypeError, ValueError) as exc:
        raise EncodingError("could not serialize token header", exc) from exc

    return ".".join(
        (
            b64url_encode(header.encode("utf-8")),
            b64url_encode(digest),
            b64url_encode(signature),
        )
    )


@dataclass(frozen=True)
class DecodedToken:
    """The three decoded segments of a signed token."""

    kid: str
    digest: bytes
    signature: bytes


def decode_token(token: str) -> DecodedToken:
    """Split and decode a token without verifying it."""
    parts = token.split(".")
    if len(parts) != 3:
        raise EncodingError(f"token must have 3 segments, got {len(parts)}")

    header_raw, digest, signature = (b64url_decode(p) for p in parts)
    try:
        header = json.loads(header_raw)
    except ValueError as exc:
        raise EncodingError("token header is not JSON", exc) from exc

    if not isinstance(header, dict) or not isinstance(header.get("kid"), str):
        raise EncodingError("token header has no kid")

    return DecodedToken(kid=header["kid"], digest=digest, signature=signature)


def verify_token(
    token: str,
    path: str | bytes,
    body: str | bytes,
    public_key: bytes,
) -> bool:
    """Check a token the way the relay does for a received request."""
    decoded = decode_token(token)
    if decoded.digest != request_digest(path, body):
        return False

    try:
        verifier = Keypair(
            public_key=public_key,
            ss58_format=KILT_SS58_FORMAT,
            crypto_type=KeypairType.SR25519,
        )
        return bool(verifier.verify(decoded.digest, decoded.signature))
    except (ValueError, TypeError) as exc:
        log.debug("Signature verification error: %s", exc)
        return False
