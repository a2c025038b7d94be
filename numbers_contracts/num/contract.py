# -*- coding: utf-8 -*-
"""
NumbersCoin (NUM)
-----------------

Capped, owner-mintable fungible ledger.

Views:
  - name() -> "NumbersCoin"
  - symbol() -> "NUM"
  - decimals() -> 18
  - cap() -> 1_000_000 * 10**18
  - totalSupply() -> int
  - balanceOf(account) -> int
  - allowance(owner, spender) -> int
  - owner() -> bytes
State-changing:
  - mint(to, amount)                  (owner-only, cap-checked)
  - transfer(to, amount) -> bool
  - approve(spender, amount) -> bool
  - transferFrom(owner, to, amount) -> bool
  - increaseAllowance / decreaseAllowance
  - transferOwnership(newOwner) / renounceOwnership()   (owner-only)

Construction mints the initial 100 NUM to the deployer, who becomes owner.
"""
from __future__ import annotations

from typing import Final

from numbers_vm.abi import Contract, public
from numbers_vm.context import Context

from ..stdlib.access.ownable import Ownable, init_owner, require_owner
from ..stdlib.token import fungible
from ..stdlib.token.capped import CappedToken, init_cap

NAME: Final[str] = "NumbersCoin"
SYMBOL: Final[str] = "NUM"
DECIMALS: Final[int] = 18

CAP: Final[int] = 1_000_000 * 10**DECIMALS
INITIAL_SUPPLY: Final[int] = 100 * 10**DECIMALS


class Num(Ownable, CappedToken, Contract):
    def constructor(self, ctx: Context) -> None:
        fungible.init(ctx, NAME, SYMBOL, DECIMALS)
        init_cap(ctx, CAP)
        init_owner(ctx, ctx.sender)
        self._mint(ctx, ctx.sender, INITIAL_SUPPLY)

    @public
    def mint(self, ctx: Context, to: bytes, amount: int) -> None:
        require_owner(ctx)
        self._mint(ctx, to, amount)
