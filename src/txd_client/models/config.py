"""Configuration models for the relay client."""

from __future__ import annotations

from dataclasses import dataclass, field

DEFAULT_RELAY_URL = "https://txd.trusted-entity.io"
DEFAULT_CHAIN_RPC_URL = "wss://spiritnet.kilt.io:443"
DEFAULT_REMARK = "Hello World!"


@dataclass
class PollConfig:
    """Submission status polling behaviour.

    ``max_attempts`` and ``deadline`` default to None, which polls until the
    relay reports a terminal status.
    """

    interval: float = 1.0  # seconds before each status request
    max_attempts: int | None = None
    deadline: float | None = None  # seconds since the first poll
    backoff: float = 1.0  # interval multiplier per poll, 1.0 = fixed
    max_interval: float = 30.0
    transient_retries: int = 0  # consecutive transport errors tolerated

    def __post_init__(self) -> None:
        if self.interval < 0:
            raise ValueError("poll interval must be >= 0")
        if self.max_attempts is not None and self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if self.deadline is not None and self.deadline <= 0:
            raise ValueError("deadline must be > 0")
        if self.backoff < 1.0:
            raise ValueError("backoff must be >= 1.0")
        if self.transient_retries < 0:
            raise ValueError("transient_retries must be >= 0")

    def next_interval(self, current: float) -> float:
        return min(current * self.backoff, max(self.max_interval, self.interval))


@dataclass
class ClientConfig:
    """Complete client configuration."""

    # Identity
    seed: str = ""  # loaded from env var TXD_SEED, never logged
    key_uri: str = ""  # overrides the derived key id when set

    # Relay
    base_url: str = DEFAULT_RELAY_URL
    timeout: float = 30.0  # seconds per HTTP request

    # Chain
    chain_rpc_url: str = DEFAULT_CHAIN_RPC_URL
    remark: str = DEFAULT_REMARK
    call_data: str = ""  # pre-encoded call, skips the chain client when set

    # Client
    log_level: str = "info"

    # Polling
    poll: PollConfig = field(default_factory=PollConfig)
