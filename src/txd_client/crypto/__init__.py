"""Key derivation and request signing."""

from txd_client.crypto.keys import DidKey, derive_keypair, did_from_public_key, key_id
from txd_client.crypto.token import decode_token, request_digest, sign_request, verify_token

__all__ = [
    "DidKey", "derive_keypair", "did_from_public_key", "key_id",
    "decode_token", "request_digest", "sign_request", "verify_token",
]
