# -*- coding: utf-8 -*-
"""
NumbersNFT (nNUM)
-----------------

Collectible registry with owner minting, NUM-paid minting, a raisable supply
ceiling and a 5% default royalty.

Views:
  - name() -> "NumbersNFT", symbol() -> "nNUM"
  - count() -> int                    items minted so far (next id)
  - totalSupplyCap() -> int
  - price() -> int                    whole NUM per paid mint
  - numToken() -> bytes               ledger address (immutable)
  - isContentOwned(id) -> bool
  - royaltyInfo(id, salePrice) -> (beneficiary, salePrice * 500 / 10_000)
  - ownerOf / balanceOf / getApproved / isApprovedForAll / supportsInterface
State-changing:
  - safeMint(to)                      owner-only, free
  - payToMint(to)                     anyone; pulls price * 10**decimals NUM
                                      from the caller (needs an allowance
                                      for this registry)
  - updatePrice(newPrice)             owner-only
  - increaseAvailableTotalSupply(n)   owner-only
  - withdrawNUM()                     owner-only; sends all held NUM to owner
  - approve / setApprovalForAll / transferFrom / safeTransferFrom

Events: PriceUpdated{price}, SupplyCapIncreased{totalSupplyCap},
Withdrawal{to, value}, plus the ERC-721 Transfer/Approval/ApprovalForAll.
"""
from __future__ import annotations

from typing import Final

from numbers_vm.abi import Contract, public, view
from numbers_vm.context import Context
from numbers_vm.errors import MintLimitError

from ..stdlib.access.ownable import Ownable, get_owner, init_owner, require_owner
from ..stdlib.math.safe_uint import u256_add, u256_mul
from ..stdlib.token import key_id, require_address, require_amount
from ..stdlib.token import nonfungible
from ..stdlib.token.nonfungible import NonFungibleToken
from ..stdlib.token.royalty import INTERFACE_ERC2981, Royalty, set_default_royalty

NAME: Final[str] = "NumbersNFT"
SYMBOL: Final[str] = "nNUM"

DEFAULT_PRICE: Final[int] = 10
ROYALTY_BPS: Final[int] = 500

K_COUNT: Final[bytes] = b"nnum:count"
K_SUPPLY_CAP: Final[bytes] = b"nnum:cap"
K_PRICE: Final[bytes] = b"nnum:price"
K_LEDGER: Final[bytes] = b"nnum:ledger"
CONTENT_PREFIX: Final[bytes] = b"nnum:content:"

EVT_PRICE_UPDATED: Final[bytes] = b"PriceUpdated"
EVT_SUPPLY_CAP_INCREASED: Final[bytes] = b"SupplyCapIncreased"
EVT_WITHDRAWAL: Final[bytes] = b"Withdrawal"


class NumbersNFT(Ownable, Royalty, NonFungibleToken, Contract):
    SUPPORTED_INTERFACES = NonFungibleToken.SUPPORTED_INTERFACES + (INTERFACE_ERC2981,)

    def constructor(self, ctx: Context, total_supply_cap: int, num_token: bytes, beneficiary: bytes) -> None:
        nonfungible.init(ctx, NAME, SYMBOL)
        init_owner(ctx, ctx.sender)
        ctx.storage.set_int(K_SUPPLY_CAP, require_amount(total_supply_cap))
        ctx.storage.set(K_LEDGER, require_address(num_token, allow_zero=False, message="invalid NUM token address"))
        ctx.storage.set_int(K_PRICE, DEFAULT_PRICE)
        set_default_royalty(ctx, beneficiary, ROYALTY_BPS)

    # ---- minting ----

    def _next_id(self, ctx: Context) -> int:
        item_id = ctx.storage.get_int(K_COUNT)
        if item_id >= ctx.storage.get_int(K_SUPPLY_CAP):
            raise MintLimitError(data={"count": item_id})
        return item_id

    def _issue(self, ctx: Context, to: bytes, item_id: int) -> None:
        ctx.storage.set_int(K_COUNT, item_id + 1)
        ctx.storage.set_bool(key_id(CONTENT_PREFIX, item_id), True)
        nonfungible.safe_mint(ctx, to, item_id)

    @public
    def safeMint(self, ctx: Context, to: bytes) -> int:
        require_owner(ctx)
        item_id = self._next_id(ctx)
        self._issue(ctx, to, item_id)
        return item_id

    @public
    def payToMint(self, ctx: Context, to: bytes) -> int:
        item_id = self._next_id(ctx)
        ledger = ctx.storage.get(K_LEDGER)
        unit = 10 ** ctx.call(ledger, "decimals")
        amount = u256_mul(ctx.storage.get_int(K_PRICE), unit)
        ctx.call(ledger, "transferFrom", ctx.sender, ctx.address, amount)
        self._issue(ctx, to, item_id)
        return item_id

    # ---- owner controls ----

    @public
    def updatePrice(self, ctx: Context, new_price: int) -> None:
        require_owner(ctx)
        ctx.storage.set_int(K_PRICE, require_amount(new_price))
        ctx.emit(EVT_PRICE_UPDATED, {"price": new_price})

    @public
    def increaseAvailableTotalSupply(self, ctx: Context, amount: int) -> int:
        require_owner(ctx)
        new_cap = u256_add(ctx.storage.get_int(K_SUPPLY_CAP), require_amount(amount))
        ctx.storage.set_int(K_SUPPLY_CAP, new_cap)
        ctx.emit(EVT_SUPPLY_CAP_INCREASED, {"totalSupplyCap": new_cap})
        return new_cap

    @public
    def withdrawNUM(self, ctx: Context) -> int:
        require_owner(ctx)
        ledger = ctx.storage.get(K_LEDGER)
        owner = get_owner(ctx)
        value = ctx.call(ledger, "balanceOf", ctx.address)
        if value:
            ctx.call(ledger, "transfer", owner, value)
        ctx.emit(EVT_WITHDRAWAL, {"to": owner, "value": value})
        return value

    # ---- views ----

    @view
    def isContentOwned(self, ctx: Context, item_id: int) -> bool:
        return ctx.storage.get_bool(key_id(CONTENT_PREFIX, require_amount(item_id)))

    @view
    def count(self, ctx: Context) -> int:
        return ctx.storage.get_int(K_COUNT)

    @view
    def totalSupplyCap(self, ctx: Context) -> int:
        return ctx.storage.get_int(K_SUPPLY_CAP)

    @view
    def price(self, ctx: Context) -> int:
        return ctx.storage.get_int(K_PRICE)

    @view
    def numToken(self, ctx: Context) -> bytes:
        return ctx.storage.get(K_LEDGER)
