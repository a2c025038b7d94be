"""
numbers-contracts — command-line interface for the Numbers contracts.

Commands operate on a persisted local chain state file (default
<build_dir>/state.json; created on first deploy):

  numbers-contracts deploy [--nft-cap 20] [--market-fee 5]
                           [--beneficiary ADDR] [--recipient ADDR] [--json]
  numbers-contracts call  TARGET METHOD [ARGS...]
  numbers-contracts send  TARGET METHOD [ARGS...] --from alice
  numbers-contracts accounts

TARGET is a 0x address or a deployed contract name (Num, NumbersNFT,
Market) looked up in build/deployments/<chainId>.json. Arguments accept
dev account labels, 0x-hex, integers and true/false.

Global options:
  --log-level LEVEL     (env: NUMBERS_LOG_LEVEL)
  --build-dir PATH      (env: NUMBERS_BUILD_DIR)
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import List, Optional

import typer

from numbers_vm.chain import LocalChain
from numbers_vm.config import load_config
from numbers_vm.context import ContextError, to_address, to_hex
from numbers_vm.errors import ExecError

from . import parse_arg, to_jsonable
from .deploy import deploy_all, read_registry, write_registry

log = logging.getLogger(__name__)

app = typer.Typer(
    name="numbers-contracts",
    help="Deploy and interact with the Numbers contracts on a local chain",
    no_args_is_help=True,
    add_completion=False,
)


class _Options:
    def __init__(self) -> None:
        self.build_dir: Path = load_config().build_dir


_opts = _Options()


@app.callback()
def main_callback(
    log_level: Optional[str] = typer.Option(
        None,
        "--log-level",
        help="Logging level (DEBUG, INFO, WARNING, ERROR)",
        envvar="NUMBERS_LOG_LEVEL",
    ),
    build_dir: Optional[Path] = typer.Option(
        None,
        "--build-dir",
        help="Directory for state.json and deployments/",
        envvar="NUMBERS_BUILD_DIR",
    ),
) -> None:
    cfg = load_config()
    level = (log_level or cfg.log_level).upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    _opts.build_dir = build_dir if build_dir is not None else cfg.build_dir


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _state_path(state: Optional[Path]) -> Path:
    return state if state is not None else _opts.build_dir / "state.json"


def _load_chain(state: Optional[Path], *, create: bool = False) -> LocalChain:
    path = _state_path(state)
    if path.is_file():
        log.debug("loading chain state from %s", path)
        return LocalChain.load(path)
    if create:
        log.debug("no state at %s; starting a fresh chain", path)
        return LocalChain()
    typer.echo(f"Error: no chain state at {path}; run 'deploy' first", err=True)
    raise typer.Exit(1)


def _resolve_target(chain: LocalChain, target: str) -> bytes:
    if target.startswith(("0x", "0X")):
        return to_address(target)
    entry = read_registry(chain.chain_id, _opts.build_dir).get("contracts", {}).get(target)
    if not entry:
        typer.echo(f"Error: unknown contract {target!r}", err=True)
        raise typer.Exit(1)
    return to_address(entry["address"])


def _echo(value, as_json: bool) -> None:
    value = to_jsonable(value)
    if as_json or isinstance(value, (dict, list)):
        typer.echo(json.dumps(value, indent=2, ensure_ascii=False))
    else:
        typer.echo(str(value))


def _fail(e: Exception) -> None:
    typer.echo(f"Error: {e}", err=True)
    raise typer.Exit(1)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@app.command()
def deploy(
    nft_cap: Optional[int] = typer.Option(None, "--nft-cap", help="NumbersNFT total supply cap"),
    market_fee: Optional[int] = typer.Option(None, "--market-fee", help="Market fee value"),
    beneficiary: Optional[str] = typer.Option(None, "--beneficiary", help="Royalty beneficiary (label or 0x)"),
    recipient: Optional[str] = typer.Option(None, "--recipient", help="Market fee recipient (label or 0x)"),
    sender: str = typer.Option("deployer", "--from", help="Deployer account (label or 0x)"),
    state: Optional[Path] = typer.Option(None, "--state", help="Chain state file"),
    as_json: bool = typer.Option(False, "--json", help="Output JSON"),
) -> None:
    """Deploy Num, NumbersNFT and Market; write state and the deployments registry."""
    chain = _load_chain(state, create=True)
    try:
        dep = deploy_all(
            chain,
            sender,
            nft_cap=nft_cap,
            market_fee=market_fee,
            beneficiary=beneficiary,
            recipient=recipient,
        )
    except (ExecError, ContextError) as e:
        _fail(e)
    chain.save(_state_path(state))
    reg = write_registry(dep, _opts.build_dir)

    if as_json:
        typer.echo(json.dumps(dep.to_dict(), indent=2))
        return
    typer.echo(f"Deploying contracts with the account: {to_hex(dep.deployer)}")
    typer.echo(f"Account balance: {chain.balance_of(dep.deployer)}")
    typer.echo(f"Num address: {dep.num.hex}")
    typer.echo(f"NumbersNFT address: {dep.nft.hex}")
    typer.echo(f"NFT Marketplace address: {dep.market.hex}")
    typer.echo(f"Registry: {reg}")


@app.command()
def call(
    target: str = typer.Argument(..., help="Contract name or 0x address"),
    method: str = typer.Argument(..., help="View method name"),
    args: Optional[List[str]] = typer.Argument(None, help="Method arguments"),
    state: Optional[Path] = typer.Option(None, "--state", help="Chain state file"),
    as_json: bool = typer.Option(False, "--json", help="Output JSON"),
) -> None:
    """Run a method without persisting any change."""
    chain = _load_chain(state)
    try:
        to = _resolve_target(chain, target)
        result = chain.call(to, method, *[parse_arg(a, chain.labels) for a in args or []])
    except (ExecError, ContextError, TypeError) as e:
        _fail(e)
    _echo(result, as_json)


@app.command()
def send(
    target: str = typer.Argument(..., help="Contract name or 0x address"),
    method: str = typer.Argument(..., help="Method name"),
    args: Optional[List[str]] = typer.Argument(None, help="Method arguments"),
    sender: str = typer.Option("deployer", "--from", help="Sending account (label or 0x)"),
    state: Optional[Path] = typer.Option(None, "--state", help="Chain state file"),
) -> None:
    """Submit a state-changing transaction and persist the result."""
    chain = _load_chain(state)
    try:
        to = _resolve_target(chain, target)
        rcpt = chain.transact(chain.account(sender), to, method, *[parse_arg(a, chain.labels) for a in args or []])
    except (ExecError, ContextError, TypeError) as e:
        # failed transactions still consume the sender nonce
        chain.save(_state_path(state))
        _fail(e)
    chain.save(_state_path(state))
    typer.echo(json.dumps(to_jsonable(rcpt.to_dict()), indent=2, ensure_ascii=False))


@app.command()
def accounts(
    state: Optional[Path] = typer.Option(None, "--state", help="Chain state file"),
    as_json: bool = typer.Option(False, "--json", help="Output JSON"),
) -> None:
    """List the dev accounts with native balance and nonce."""
    chain = _load_chain(state, create=True)
    rows = [
        {"label": label, "address": to_hex(addr), "balance": chain.balance_of(addr), "nonce": chain.nonce_of(addr)}
        for label, addr in chain.labels.items()
    ]
    if as_json:
        typer.echo(json.dumps(rows, indent=2))
        return
    for r in rows:
        typer.echo(f"{r['label']:<10} {r['address']}  balance={r['balance']}  nonce={r['nonce']}")


def main() -> None:  # pragma: no cover
    app()


if __name__ == "__main__":  # pragma: no cover
    main()
