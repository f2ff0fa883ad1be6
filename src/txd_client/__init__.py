"""txd_client - submit DID-signed transactions to a KILT transaction relay."""

__version__ = "0.1.0"
