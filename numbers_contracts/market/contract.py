# -*- coding: utf-8 -*-
"""
Market (stub)
-------------

Marketplace contract deployed with (numToken, fee, feeRecipient). Only its
construction parameters are stored and readable; listing and sale settlement
are not implemented.

Views:
  - numToken() -> bytes
  - fee() -> int
  - feeRecipient() -> bytes
  - owner() -> bytes
"""
from __future__ import annotations

from typing import Final

from numbers_vm.abi import Contract, view
from numbers_vm.context import Context

from ..stdlib.access.ownable import Ownable, init_owner
from ..stdlib.token import require_address, require_amount

K_TOKEN: Final[bytes] = b"market:token"
K_FEE: Final[bytes] = b"market:fee"
K_FEE_RECIPIENT: Final[bytes] = b"market:recipient"


class Market(Ownable, Contract):
    def constructor(self, ctx: Context, num_token: bytes, fee: int, fee_recipient: bytes) -> None:
        init_owner(ctx, ctx.sender)
        ctx.storage.set(K_TOKEN, require_address(num_token, allow_zero=False, message="invalid NUM token address"))
        ctx.storage.set_int(K_FEE, require_amount(fee))
        ctx.storage.set(
            K_FEE_RECIPIENT, require_address(fee_recipient, allow_zero=False, message="invalid fee recipient")
        )

    @view
    def numToken(self, ctx: Context) -> bytes:
        return ctx.storage.get(K_TOKEN)

    @view
    def fee(self, ctx: Context) -> int:
        return ctx.storage.get_int(K_FEE)

    @view
    def feeRecipient(self, ctx: Context) -> bytes:
        return ctx.storage.get(K_FEE_RECIPIENT)
