# -*- coding: utf-8 -*-
"""
deploy.py
=========

Deploy the Numbers contract set onto a LocalChain:

  1. Num                                   (no constructor args)
  2. NumbersNFT(nftCap, num, beneficiary)
  3. Market(num, marketFee, recipient)

`beneficiary` and `recipient` default to the deployer. The NFT cap and
market fee default to NUMBERS_NFT_CAP / NUMBERS_MARKET_FEE (20 and 5).

Outputs
-------
- A `Deployment` record with the three contract handles.
- `write_registry()` writes/updates build/deployments/<chainId>.json with
  canonical JSON (atomic write).
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Union

from numbers_vm.chain import ContractHandle, LocalChain
from numbers_vm.config import load_config
from numbers_vm.context import to_hex

from . import atomic_write_text, canonical_json_str, to_jsonable
from ..market.contract import Market
from ..num.contract import Num
from ..numbers_nft.contract import NumbersNFT

log = logging.getLogger(__name__)

AddressLike = Union[bytes, str]


@dataclass
class Deployment:
    chain_id: int
    deployer: bytes
    num: ContractHandle
    nft: ContractHandle
    market: ContractHandle
    nft_cap: int
    market_fee: int
    beneficiary: bytes
    recipient: bytes

    def contracts(self) -> Dict[str, ContractHandle]:
        return {"Num": self.num, "NumbersNFT": self.nft, "Market": self.market}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "chainId": self.chain_id,
            "deployer": to_hex(self.deployer),
            "contracts": {
                "Num": {"address": self.num.hex, "args": []},
                "NumbersNFT": {
                    "address": self.nft.hex,
                    "args": to_jsonable([self.nft_cap, self.num.address, self.beneficiary]),
                },
                "Market": {
                    "address": self.market.hex,
                    "args": to_jsonable([self.num.address, self.market_fee, self.recipient]),
                },
            },
        }


def deploy_all(
    chain: LocalChain,
    deployer: Optional[AddressLike] = None,
    *,
    nft_cap: Optional[int] = None,
    market_fee: Optional[int] = None,
    beneficiary: Optional[AddressLike] = None,
    recipient: Optional[AddressLike] = None,
) -> Deployment:
    """Deploy Num, NumbersNFT and Market in order from `deployer`."""
    cfg = chain.config
    sender = chain.account(deployer) if deployer is not None else chain.accounts[0]
    cap = cfg.nft_cap if nft_cap is None else nft_cap
    fee = cfg.market_fee if market_fee is None else market_fee
    bene = chain.account(beneficiary) if beneficiary is not None else sender
    rcpt = chain.account(recipient) if recipient is not None else sender

    log.info("deploying Numbers contracts from %s (chainId=%d)", to_hex(sender), chain.chain_id)
    num = chain.deploy(Num, sender=sender)
    nft = chain.deploy(NumbersNFT, cap, num.address, bene, sender=sender)
    market = chain.deploy(Market, num.address, fee, rcpt, sender=sender)

    return Deployment(
        chain_id=chain.chain_id,
        deployer=sender,
        num=num,
        nft=nft,
        market=market,
        nft_cap=cap,
        market_fee=fee,
        beneficiary=bene,
        recipient=rcpt,
    )


def registry_path(chain_id: int, build_dir: Optional[Path] = None) -> Path:
    base = Path(build_dir) if build_dir is not None else load_config().build_dir
    return base / "deployments" / f"{chain_id}.json"


def write_registry(deployment: Deployment, build_dir: Optional[Path] = None) -> Path:
    """Write build/deployments/<chainId>.json (atomic, canonical JSON)."""
    path = registry_path(deployment.chain_id, build_dir)
    atomic_write_text(path, canonical_json_str(deployment.to_dict()) + "\n")
    log.info("deployments registry written: %s", path)
    return path


def read_registry(chain_id: int, build_dir: Optional[Path] = None) -> Dict[str, Any]:
    path = registry_path(chain_id, build_dir)
    if not path.is_file():
        return {}
    return json.loads(path.read_text(encoding="utf-8"))


__all__ = ["Deployment", "deploy_all", "registry_path", "write_registry", "read_registry"]
