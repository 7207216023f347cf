"""CLI entry point for the ovm_oracle relay."""

from __future__ import annotations

import asyncio
import logging
import sys

import click

from ovm_oracle.chain.connector import ChainConnector
from ovm_oracle.chain.registry import ContractRegistryResolver
from ovm_oracle.config import load_config, validate_config
from ovm_oracle.errors import ConfigError, OracleError
from ovm_oracle.models.config import OracleConfig, SinkKind
from ovm_oracle.oracle import run_oracle
from ovm_oracle.sink.sqlite import SQLiteProofStore


def _load(ctx: click.Context) -> OracleConfig:
    """Load config, exiting with an error message if it is invalid."""
    try:
        cfg = load_config(ctx.obj["config_path"])
    except ConfigError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)

    if not ctx.obj["verbose"]:
        logging.getLogger().setLevel(cfg.log_level.upper())
    return cfg


def _require_valid(cfg: OracleConfig) -> None:
    """Exit with error if the config cannot start the oracle."""
    try:
        validate_config(cfg)
    except ConfigError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)


@click.group()
@click.option("-c", "--config", "config_path", default=None, help="Path to config TOML file")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, config_path: str | None, verbose: bool) -> None:
    """ovm-oracle - relays L2 state batch proofs from L1 to a proof store."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["verbose"] = verbose

    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


# ── Oracle ─────────────────────────────────────────────


@cli.command()
@click.pass_context
def run(ctx: click.Context) -> None:
    """Start the proof oracle."""
    cfg = _load(ctx)
    _require_valid(cfg)

    click.echo(f"Starting ovm_oracle (sink: {cfg.sink.kind.value})")
    try:
        asyncio.run(run_oracle(cfg))
    except OracleError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)


# ── Info ───────────────────────────────────────────────


@cli.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show oracle configuration."""
    cfg = _load(ctx)
    click.echo(f"L1 RPC:          {cfg.l1_rpc_url}")
    click.echo(f"L2 RPC:          {cfg.l2_rpc_url}")
    click.echo(f"Address manager: {cfg.address_manager}")
    click.echo(f"L1 start block:  {cfg.l1_start_offset}")
    click.echo(f"Poll interval:   {cfg.poll_interval} ms ({cfg.policy.value})")
    click.echo(f"Safety lag:      {cfg.safety_lag} blocks")
    click.echo(f"Refresh ceiling: {'yes' if cfg.refresh_ceiling else 'no'}")
    if cfg.sink.kind is SinkKind.SQLITE:
        click.echo(f"Sink:            sqlite ({cfg.sink.db_path})")
    else:
        click.echo(f"Sink:            http ({cfg.sink.url.rstrip('/')}/{cfg.sink.path})")
    click.echo(f"Wallet key:      {'***configured***' if cfg.l1_wallet_key else '(not set)'}")


@cli.command()
@click.pass_context
def check(ctx: click.Context) -> None:
    """Connect to both chains and resolve the OVM contracts, then exit."""
    cfg = _load(ctx)

    async def _check():
        l1 = await ChainConnector(
            "L1", cfg.l1_rpc_url, cfg.connect_attempts, cfg.connect_retry_delay,
        ).connect()
        try:
            l2 = await ChainConnector(
                "L2", cfg.l2_rpc_url, cfg.connect_attempts, cfg.connect_retry_delay,
            ).connect()
            try:
                contracts = await ContractRegistryResolver(cfg.address_manager, l1).resolve()
                click.echo(f"L1:  chain {l1.chain_id}, block {await l1.block_number()}")
                click.echo(f"L2:  chain {l2.chain_id}, block {await l2.block_number()}")
                click.echo("")
                for name, contract in contracts.items():
                    click.echo(f"{name:<32} {contract.address}")
            finally:
                await l2.close()
        finally:
            await l1.close()

    try:
        asyncio.run(_check())
    except OracleError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)


@cli.command()
@click.option("--limit", type=int, default=20, help="Number of rows to show")
@click.pass_context
def proofs(ctx: click.Context, limit: int) -> None:
    """List proofs held by the local SQLite store."""
    cfg = _load(ctx)
    if cfg.sink.kind is not SinkKind.SQLITE:
        click.echo("Proofs are delivered over HTTP; no local store to list.", err=True)
        sys.exit(1)

    async def _list():
        store = SQLiteProofStore(cfg.sink.db_path)
        await store.initialize()
        try:
            total = await store.count()
            rows = await store.list_indices(limit)
        finally:
            await store.close()

        click.echo(f"{total} proofs stored")
        if rows:
            click.echo(f"{'INDEX':>10}  {'BATCH':>8}  DELIVERED")
        for index, batch_index, delivered_at in rows:
            click.echo(f"{index:>10}  {batch_index:>8}  {delivered_at}")

    asyncio.run(_list())


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
