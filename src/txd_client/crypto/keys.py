"""DID authentication key derivation.

The relay identifies a client by the DID authentication key registered on
chain. Wallets such as Sporran derive that key as sr25519 at the path
``//did//0`` below the account seed, so we do the same here.
"""

from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass

from substrateinterface import Keypair, KeypairType
from substrateinterface.utils.ss58 import ss58_encode

from txd_client.errors import CryptoError

log = logging.getLogger(__name__)

DERIVATION_SUFFIX = "//did//0"
KILT_SS58_FORMAT = 38
DID_METHOD = "kilt"

# PublicVerificationKey || Sr25519
_KEY_TYPE_TAG = b"\x00\x01"


def derive_keypair(seed: str) -> Keypair:
    """Derive the sr25519 DID authentication keypair for ``seed``.

    ``seed`` may be a mnemonic, a hex seed or a dev URI such as ``//Alice``.
    The same seed always yields the same keypair.
    """
    if not seed:
        raise CryptoError("seed must not be empty")

    try:
        return Keypair.create_from_uri(
            seed + DERIVATION_SUFFIX,
            ss58_format=KILT_SS58_FORMAT,
            crypto_type=KeypairType.SR25519,
        )
    except (ValueError, TypeError, AttributeError, NotImplementedError) as exc:
        # Do not include the seed in the message.
        log.error("Key derivation failed: %s", type(exc).__name__)
        raise CryptoError("could not derive keypair from seed", exc) from exc


def key_hash(public_key: bytes) -> bytes:
    """32-byte blake2b hash identifying a verification key."""
    return hashlib.blake2b(_KEY_TYPE_TAG + public_key, digest_size=32).digest()


def did_from_public_key(public_key: bytes) -> str:
    """DID URI for a light DID created from this key.

    Only correct while the DID's authentication key has not been rotated.
    """
    address = ss58_encode(public_key, ss58_format=KILT_SS58_FORMAT)
    return f"did:{DID_METHOD}:{address}"


def key_id(keypair: Keypair) -> str:
    """Key URI (``kid``) the relay uses to look up the verification key."""
    return f"{did_from_public_key(keypair.public_key)}#0x{key_hash(keypair.public_key).hex()}"


@dataclass(frozen=True)
class DidKey:
    """A derived keypair paired with its DID and key id."""

    keypair: Keypair
    did: str
    kid: str

    @classmethod
    def from_seed(cls, seed: str, key_uri: str = "") -> DidKey:
        keypair = derive_keypair(seed)
        did = did_from_public_key(keypair.public_key)
        kid = key_uri or key_id(keypair)
        log.debug("Derived DID key %s", kid)
        return cls(keypair=keypair, did=did, kid=kid)

    @property
    def public_key(self) -> bytes:
        return self.keypair.public_key
