# -*- coding: utf-8 -*-
"""
ERC-20 style fungible ledger
============================

Storage-backed, float-free token logic for Numbers contracts. Functions take
the call `Context` explicitly: `ctx.sender` is the caller, `ctx.storage` the
ledger's own storage.

Events:
    - b"Transfer" {from, to, value}      (from = zero address on mint)
    - b"Approval" {owner, spender, value}

Public interface (via `FungibleToken`)
--------------------------------------
# views
name() -> str
symbol() -> str
decimals() -> int
totalSupply() -> int
balanceOf(account) -> int
allowance(owner, spender) -> int

# state-changing (caller = ctx.sender)
transfer(to, amount) -> bool
approve(spender, amount) -> bool
transferFrom(owner, to, amount) -> bool
increaseAllowance(spender, added) -> bool
decreaseAllowance(spender, subtracted) -> bool

Notes
-----
- An allowance of 2**256-1 is unlimited and is never decremented.
- transferFrom checks the allowance before the balance.
- There is no burn; total supply only grows through `mint_to`.
"""

from __future__ import annotations

from typing import Final

from numbers_vm.abi import public, view
from numbers_vm.context import ZERO_ADDRESS, Context
from numbers_vm.errors import InsufficientAllowanceError, InsufficientBalanceError, InvalidAmountError

from ..math.safe_uint import u256_add
from . import (
    DEFAULT_DECIMALS,
    EVT_APPROVAL,
    EVT_TRANSFER,
    INFINITE_ALLOWANCE,
    key_allow,
    key_balance,
    require_address,
    require_amount,
)

K_NAME: Final[bytes] = b"tok:meta:name"
K_SYMBOL: Final[bytes] = b"tok:meta:symbol"
K_DECIMALS: Final[bytes] = b"tok:meta:dec"
K_TOTAL: Final[bytes] = b"tok:meta:total"


# ------------------------------------------------------------------------------
# Init
# ------------------------------------------------------------------------------


def init(ctx: Context, name: str, symbol: str, decimals: int = DEFAULT_DECIMALS) -> None:
    if not name or not symbol:
        raise InvalidAmountError("token name and symbol must be non-empty")
    if not isinstance(decimals, int) or not 0 <= decimals <= 36:
        raise InvalidAmountError("decimals out of range", data={"decimals": decimals})
    ctx.storage.set(K_NAME, name.encode("utf-8"))
    ctx.storage.set(K_SYMBOL, symbol.encode("utf-8"))
    # decimals == 0 is stored as absent; read back as 0
    ctx.storage.set_int(K_DECIMALS, decimals)


# ------------------------------------------------------------------------------
# Views
# ------------------------------------------------------------------------------


def name(ctx: Context) -> str:
    return ctx.storage.get(K_NAME).decode("utf-8")


def symbol(ctx: Context) -> str:
    return ctx.storage.get(K_SYMBOL).decode("utf-8")


def decimals(ctx: Context) -> int:
    return ctx.storage.get_int(K_DECIMALS)


def total_supply(ctx: Context) -> int:
    return ctx.storage.get_int(K_TOTAL)


def balance_of(ctx: Context, account: bytes) -> int:
    return ctx.storage.get_int(key_balance(require_address(account)))


def allowance(ctx: Context, owner: bytes, spender: bytes) -> int:
    return ctx.storage.get_int(key_allow(require_address(owner), require_address(spender)))


# ------------------------------------------------------------------------------
# Mutations
# ------------------------------------------------------------------------------


def transfer(ctx: Context, to: bytes, amount: int) -> bool:
    _move(ctx, ctx.sender, to, amount)
    return True


def approve(ctx: Context, spender: bytes, amount: int) -> bool:
    _approve(ctx, ctx.sender, spender, amount)
    return True


def transfer_from(ctx: Context, owner: bytes, to: bytes, amount: int) -> bool:
    """Spender (`ctx.sender`) moves `amount` from `owner` to `to`."""
    owner = require_address(owner)
    spend_allowance(ctx, owner, ctx.sender, amount)
    _move(ctx, owner, to, amount)
    return True


def increase_allowance(ctx: Context, spender: bytes, added: int) -> bool:
    cur = allowance(ctx, ctx.sender, spender)
    _approve(ctx, ctx.sender, spender, u256_add(cur, require_amount(added)))
    return True


def decrease_allowance(ctx: Context, spender: bytes, subtracted: int) -> bool:
    cur = allowance(ctx, ctx.sender, spender)
    if cur < require_amount(subtracted):
        raise InsufficientAllowanceError(
            "ERC20: decreased allowance below zero", data={"allowance": str(cur), "subtracted": str(subtracted)}
        )
    _approve(ctx, ctx.sender, spender, cur - subtracted)
    return True


def spend_allowance(ctx: Context, owner: bytes, spender: bytes, amount: int) -> None:
    require_amount(amount)
    cur = allowance(ctx, owner, spender)
    if cur == INFINITE_ALLOWANCE:
        return
    if cur < amount:
        raise InsufficientAllowanceError(data={"allowance": str(cur), "needed": str(amount)})
    ctx.storage.set_int(key_allow(owner, spender), cur - amount)


def mint_to(ctx: Context, to: bytes, amount: int) -> None:
    """Unchecked mint (no owner/cap check); callers enforce permissions."""
    to = require_address(to, allow_zero=False, message="ERC20: mint to the zero address")
    require_amount(amount)
    ctx.storage.set_int(K_TOTAL, u256_add(total_supply(ctx), amount))
    bal_key = key_balance(to)
    ctx.storage.set_int(bal_key, u256_add(ctx.storage.get_int(bal_key), amount))
    ctx.emit(EVT_TRANSFER, {"from": ZERO_ADDRESS, "to": to, "value": amount})


# ------------------------------------------------------------------------------
# Internals
# ------------------------------------------------------------------------------


def _move(ctx: Context, src: bytes, to: bytes, amount: int) -> None:
    src = require_address(src, allow_zero=False, message="ERC20: transfer from the zero address")
    to = require_address(to, allow_zero=False, message="ERC20: transfer to the zero address")
    require_amount(amount)

    src_key = key_balance(src)
    src_bal = ctx.storage.get_int(src_key)
    if src_bal < amount:
        raise InsufficientBalanceError(data={"balance": str(src_bal), "needed": str(amount)})
    ctx.storage.set_int(src_key, src_bal - amount)
    to_key = key_balance(to)
    ctx.storage.set_int(to_key, u256_add(ctx.storage.get_int(to_key), amount))

    ctx.emit(EVT_TRANSFER, {"from": src, "to": to, "value": amount})


def _approve(ctx: Context, owner: bytes, spender: bytes, amount: int) -> None:
    owner = require_address(owner, allow_zero=False, message="ERC20: approve from the zero address")
    spender = require_address(spender, allow_zero=False, message="ERC20: approve to the zero address")
    require_amount(amount)
    ctx.storage.set_int(key_allow(owner, spender), amount)
    ctx.emit(EVT_APPROVAL, {"owner": owner, "spender": spender, "value": amount})


# ------------------------------------------------------------------------------
# Exported surface
# ------------------------------------------------------------------------------


class FungibleToken:
    """ERC-20 ABI; mix into a Contract subclass. Override `_mint` to add checks."""

    def _mint(self, ctx: Context, to: bytes, amount: int) -> None:
        mint_to(ctx, to, amount)

    @view
    def name(self, ctx: Context) -> str:
        return name(ctx)

    @view
    def symbol(self, ctx: Context) -> str:
        return symbol(ctx)

    @view
    def decimals(self, ctx: Context) -> int:
        return decimals(ctx)

    @view
    def totalSupply(self, ctx: Context) -> int:
        return total_supply(ctx)

    @view
    def balanceOf(self, ctx: Context, account: bytes) -> int:
        return balance_of(ctx, account)

    @view
    def allowance(self, ctx: Context, owner: bytes, spender: bytes) -> int:
        return allowance(ctx, owner, spender)

    @public
    def transfer(self, ctx: Context, to: bytes, amount: int) -> bool:
        return transfer(ctx, to, amount)

    @public
    def approve(self, ctx: Context, spender: bytes, amount: int) -> bool:
        return approve(ctx, spender, amount)

    @public
    def transferFrom(self, ctx: Context, owner: bytes, to: bytes, amount: int) -> bool:
        return transfer_from(ctx, owner, to, amount)

    @public
    def increaseAllowance(self, ctx: Context, spender: bytes, added: int) -> bool:
        return increase_allowance(ctx, spender, added)

    @public
    def decreaseAllowance(self, ctx: Context, spender: bytes, subtracted: int) -> bool:
        return decrease_allowance(ctx, spender, subtracted)
