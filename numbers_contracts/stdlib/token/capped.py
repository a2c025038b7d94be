# -*- coding: utf-8 -*-
"""
Supply cap for fungible ledgers.

The cap is written once at construction and never changes; every mint checks
`totalSupply + amount <= cap` and raises CapExceededError otherwise.
"""

from __future__ import annotations

from typing import Final

from numbers_vm.abi import view
from numbers_vm.context import Context
from numbers_vm.errors import CapExceededError, InvalidAmountError

from . import require_amount
from .fungible import FungibleToken, mint_to, total_supply

K_CAP: Final[bytes] = b"tok:meta:cap"


def init_cap(ctx: Context, cap: int) -> None:
    if require_amount(cap) == 0:
        raise InvalidAmountError("ERC20Capped: cap is 0")
    if ctx.storage.exists(K_CAP):
        raise InvalidAmountError("ERC20Capped: cap already set")
    ctx.storage.set_int(K_CAP, cap)


def cap(ctx: Context) -> int:
    return ctx.storage.get_int(K_CAP)


def mint_capped(ctx: Context, to: bytes, amount: int) -> None:
    limit = cap(ctx)
    supply = total_supply(ctx)
    if supply + require_amount(amount) > limit:
        raise CapExceededError(data={"cap": str(limit), "totalSupply": str(supply), "amount": str(amount)})
    mint_to(ctx, to, amount)


class CappedToken(FungibleToken):
    def _mint(self, ctx: Context, to: bytes, amount: int) -> None:
        mint_capped(ctx, to, amount)

    @view
    def cap(self, ctx: Context) -> int:
        return cap(ctx)
