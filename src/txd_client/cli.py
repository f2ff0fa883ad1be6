"""CLI entry point for txd_client."""

from __future__ import annotations

import asyncio
import dataclasses
import logging
import sys

import click

from txd_client.config import load_config
from txd_client.crypto.keys import DidKey
from txd_client.crypto.token import sign_request
from txd_client.errors import TxdError
from txd_client.models.config import ClientConfig
from txd_client.models.records import StatusUpdate
from txd_client.relay.client import RelayClient
from txd_client.submitter import submit_and_wait


def _require_seed(cfg: ClientConfig) -> None:
    """Exit with error if no seed is configured."""
    if not cfg.seed:
        click.echo("Error: No seed configured.", err=True)
        click.echo("Pass --seed or set the TXD_SEED env var.", err=True)
        sys.exit(1)


def _fail(exc: Exception) -> None:
    click.echo(f"Error: {exc}", err=True)
    sys.exit(1)


@click.group()
@click.option("-c", "--config", "config_path", default=None, help="Path to config TOML file")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, config_path: str | None, verbose: bool) -> None:
    """txd-client - submit DID-signed transactions to a KILT transaction relay."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["verbose"] = verbose

    try:
        cfg = load_config(config_path)
    except (ValueError, TypeError) as exc:
        raise click.ClickException(f"invalid configuration: {exc}") from exc
    ctx.obj["config"] = cfg

    if verbose:
        level = logging.DEBUG
    else:
        level = getattr(logging, cfg.log_level.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


# ── Submission ─────────────────────────────────────────


@cli.command()
@click.option("--seed", default=None, help="Seed of the DID account (or TXD_SEED)")
@click.option("--txd-endpoint", default=None, help="Base URL of the transaction relay")
@click.option("--kilt-endpoint", default=None, help="WebSocket URL of a KILT node")
@click.option("--tx", "call_data", default=None, help="Pre-encoded call data (0x-prefixed hex)")
@click.option("--remark", default=None, help="Remark text to encode when --tx is not given")
@click.option("--interval", type=float, default=None, help="Seconds between status polls")
@click.option("--max-attempts", type=int, default=None, help="Give up after this many polls")
@click.option("--deadline", type=float, default=None, help="Give up after this many seconds")
@click.pass_context
def submit(
    ctx: click.Context,
    seed: str | None,
    txd_endpoint: str | None,
    kilt_endpoint: str | None,
    call_data: str | None,
    remark: str | None,
    interval: float | None,
    max_attempts: int | None,
    deadline: float | None,
) -> None:
    """Submit a transaction and wait until it is finalized."""
    cfg: ClientConfig = ctx.obj["config"]
    if seed:
        cfg.seed = seed
    if txd_endpoint:
        cfg.base_url = txd_endpoint.rstrip("/")
    if kilt_endpoint:
        cfg.chain_rpc_url = kilt_endpoint
    if call_data:
        cfg.call_data = call_data
    if remark:
        cfg.remark = remark
    _require_seed(cfg)

    overrides = {
        k: v
        for k, v in (("interval", interval), ("max_attempts", max_attempts), ("deadline", deadline))
        if v is not None
    }
    try:
        cfg.poll = dataclasses.replace(cfg.poll, **overrides)
    except ValueError as exc:
        raise click.BadParameter(str(exc)) from exc

    def _call_data(call_hex: str) -> None:
        click.echo(f"Call data: {call_hex}")

    def _submitted(submission_id: str) -> None:
        click.echo(f"Successfully submitted transaction with id {submission_id}")

    def _status(update: StatusUpdate) -> None:
        click.echo(f"Current status: {update.status}")

    try:
        result = asyncio.run(submit_and_wait(
            cfg, on_call_data=_call_data, on_submitted=_submitted, on_status=_status,
        ))
    except TxdError as exc:
        _fail(exc)
        return

    click.echo(f"Transaction {result.submission_id} finalized after {result.polls} polls")


# ── Relay ──────────────────────────────────────────────


@cli.command()
@click.option("--txd-endpoint", default=None, help="Base URL of the transaction relay")
@click.pass_context
def meta(ctx: click.Context, txd_endpoint: str | None) -> None:
    """Show the relay's public metadata, including its payment address."""
    cfg: ClientConfig = ctx.obj["config"]
    if txd_endpoint:
        cfg.base_url = txd_endpoint.rstrip("/")

    async def _meta():
        async with RelayClient(cfg.base_url, timeout=cfg.timeout) as relay:
            return await relay.get_meta()

    try:
        data = asyncio.run(_meta())
    except TxdError as exc:
        _fail(exc)
        return

    click.echo(f"Relay:           {cfg.base_url}")
    click.echo(f"Payment address: {data['paymentAddress']}")
    for key, value in sorted(data.items()):
        if key != "paymentAddress":
            click.echo(f"  {key}: {value}")


# ── Identity ───────────────────────────────────────────


@cli.command()
@click.option("--seed", default=None, help="Seed of the DID account (or TXD_SEED)")
@click.pass_context
def whoami(ctx: click.Context, seed: str | None) -> None:
    """Show the DID and key id derived from the seed."""
    cfg: ClientConfig = ctx.obj["config"]
    if seed:
        cfg.seed = seed
    _require_seed(cfg)

    try:
        did_key = DidKey.from_seed(cfg.seed, cfg.key_uri)
    except TxdError as exc:
        _fail(exc)
        return

    click.echo(f"DID:        {did_key.did}")
    click.echo(f"Key ID:     {did_key.kid}")
    click.echo(f"Public key: 0x{did_key.public_key.hex()}")


@cli.command()
@click.argument("path")
@click.option("--body", default="", help="Request body the token should cover")
@click.option("--seed", default=None, help="Seed of the DID account (or TXD_SEED)")
@click.pass_context
def token(ctx: click.Context, path: str, body: str, seed: str | None) -> None:
    """Print a bearer token for a request to PATH."""
    cfg: ClientConfig = ctx.obj["config"]
    if seed:
        cfg.seed = seed
    _require_seed(cfg)

    try:
        did_key = DidKey.from_seed(cfg.seed, cfg.key_uri)
        click.echo(sign_request(path, body, did_key.kid, did_key.keypair))
    except TxdError as exc:
        _fail(exc)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
