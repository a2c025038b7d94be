"""
numbers_contracts — the Numbers token contracts and their deploy tooling.

Contracts (importing this package registers them with numbers_vm):

- numbers_contracts.num.contract.Num                  NumbersCoin / NUM
- numbers_contracts.numbers_nft.contract.NumbersNFT   NumbersNFT / nNUM
- numbers_contracts.market.contract.Market            marketplace stub
"""

from __future__ import annotations

from .market.contract import Market
from .num.contract import Num
from .numbers_nft.contract import NumbersNFT

__all__ = ["Market", "Num", "NumbersNFT"]
