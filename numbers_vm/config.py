"""
numbers_vm.config — local chain parameters and deploy defaults.

Configuration precedence:
  1) Environment variables (NUMBERS_*)
  2) Hardcoded safe defaults below

Key env vars:
  - NUMBERS_CHAIN_ID         (int)    default: 1337
  - NUMBERS_DEV_ACCOUNTS     (int)    default: 5
  - NUMBERS_DEV_BALANCE      (int)    default: 10_000 * 10**18
  - NUMBERS_MAX_CALL_DEPTH   (int)    default: 64, at most 128
  - NUMBERS_LOG_LEVEL        (str)    default: INFO
  - NUMBERS_BUILD_DIR        (path)   default: ./build
  - NUMBERS_NFT_CAP          (int)    default: 20
  - NUMBERS_MARKET_FEE       (int)    default: 5

Usage:
    from numbers_vm.config import load_config
    CFG = load_config()
    chain = LocalChain(CFG)
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict

_LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")

# Each nested contract call costs a handful of interpreter frames.
MAX_CALL_DEPTH_LIMIT = 128


# ----------------------------- helpers ---------------------------------------


def _env_int(name: str, default: int, *, min_v: int, max_v: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        v = int(raw, 0)
    except ValueError:
        return default
    if v < min_v:
        return min_v
    if v > max_v:
        return max_v
    return v


def _env_level(name: str, default: str) -> str:
    raw = (os.getenv(name) or "").strip().upper()
    return raw if raw in _LOG_LEVELS else default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if not raw:
        return default
    return Path(raw).expanduser()


# ------------------------------- config --------------------------------------


@dataclass(frozen=True)
class ChainConfig:
    chain_id: int
    dev_accounts: int
    dev_balance: int
    max_call_depth: int
    log_level: str
    build_dir: Path

    # Deploy defaults
    nft_cap: int
    market_fee: int

    def as_dict(self) -> Dict[str, Any]:
        return {
            "chain_id": self.chain_id,
            "dev_accounts": self.dev_accounts,
            "dev_balance": self.dev_balance,
            "max_call_depth": self.max_call_depth,
            "log_level": self.log_level,
            "build_dir": str(self.build_dir),
            "nft_cap": self.nft_cap,
            "market_fee": self.market_fee,
        }


@lru_cache(maxsize=1)
def load_config() -> ChainConfig:
    """
    Build and cache a ChainConfig from environment + safe defaults.
    Call `load_config.cache_clear()` after changing the environment.
    """
    return ChainConfig(
        chain_id=_env_int("NUMBERS_CHAIN_ID", 1337, min_v=1, max_v=2**32 - 1),
        dev_accounts=_env_int("NUMBERS_DEV_ACCOUNTS", 5, min_v=2, max_v=64),
        dev_balance=_env_int("NUMBERS_DEV_BALANCE", 10_000 * 10**18, min_v=0, max_v=2**256 - 1),
        max_call_depth=_env_int("NUMBERS_MAX_CALL_DEPTH", 64, min_v=2, max_v=MAX_CALL_DEPTH_LIMIT),
        log_level=_env_level("NUMBERS_LOG_LEVEL", "INFO"),
        build_dir=_env_path("NUMBERS_BUILD_DIR", Path("build")),
        nft_cap=_env_int("NUMBERS_NFT_CAP", 20, min_v=0, max_v=2**64),
        market_fee=_env_int("NUMBERS_MARKET_FEE", 5, min_v=0, max_v=10_000),
    )


__all__ = ["ChainConfig", "load_config", "MAX_CALL_DEPTH_LIMIT"]
