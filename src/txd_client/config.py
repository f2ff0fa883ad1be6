"""Configuration loading: TOML file + environment variables."""

from __future__ import annotations

import os
import tomllib
from pathlib import Path

from txd_client.models.config import ClientConfig, PollConfig


def load_config(
    config_path: str | Path | None = None,
    env_prefix: str = "TXD_",
) -> ClientConfig:
    """Load client configuration from a TOML file and env vars.

    Priority (highest wins):
        1. Environment variables (TXD_SEED, TXD_BASE_URL, ...)
        2. TOML config file
        3. Defaults from ClientConfig
    """
    raw: dict = {}
    if config_path is not None:
        p = Path(config_path).expanduser()
        if p.exists():
            with open(p, "rb") as f:
                raw = tomllib.load(f)

    cfg = ClientConfig()

    # ── Client section ─────────────────────────────────────
    client = raw.get("client", {})
    if v := client.get("log_level"):
        cfg.log_level = str(v)

    # ── Identity section ───────────────────────────────────
    identity = raw.get("identity", {})
    if v := identity.get("key_uri"):
        cfg.key_uri = str(v)

    # ── Relay section ──────────────────────────────────────
    relay = raw.get("relay", {})
    if v := relay.get("base_url"):
        cfg.base_url = str(v)
    if v := relay.get("timeout"):
        cfg.timeout = float(v)

    # ── Chain section ──────────────────────────────────────
    chain = raw.get("chain", {})
    if v := chain.get("rpc_url"):
        cfg.chain_rpc_url = str(v)
    if v := chain.get("remark"):
        cfg.remark = str(v)
    if v := chain.get("call_data"):
        cfg.call_data = str(v)

    # ── Poll section ───────────────────────────────────────
    poll_raw = raw.get("poll", {})
    max_attempts = poll_raw.get("max_attempts")
    deadline = poll_raw.get("deadline")
    cfg.poll = PollConfig(
        interval=float(poll_raw.get("interval", 1.0)),
        max_attempts=int(max_attempts) if max_attempts is not None else None,
        deadline=float(deadline) if deadline is not None else None,
        backoff=float(poll_raw.get("backoff", 1.0)),
        max_interval=float(poll_raw.get("max_interval", 30.0)),
        transient_retries=int(poll_raw.get("transient_retries", 0)),
    )

    # ── Environment variable overrides (highest priority) ──
    if seed := os.environ.get(f"{env_prefix}SEED"):
        cfg.seed = seed
    if url := os.environ.get(f"{env_prefix}BASE_URL"):
        cfg.base_url = url
    if rpc := os.environ.get(f"{env_prefix}CHAIN_RPC_URL"):
        cfg.chain_rpc_url = rpc
    if key_uri := os.environ.get(f"{env_prefix}KEY_URI"):
        cfg.key_uri = key_uri

    cfg.base_url = cfg.base_url.rstrip("/")
    return cfg
