# -*- coding: utf-8 -*-
"""
ERC-2981 style royalty info.

A single default royalty (receiver + fraction in basis points) applies to
every item: royaltyInfo(id, salePrice) = (receiver, salePrice * bps / 10_000).
"""

from __future__ import annotations

from typing import Final, Tuple

from numbers_vm.abi import view
from numbers_vm.context import Context
from numbers_vm.errors import InvalidAmountError

from ..math.safe_uint import BPS_DENOMINATOR, apply_bps
from . import require_address, require_amount

INTERFACE_ERC2981: Final[bytes] = bytes.fromhex("2a55205a")

K_ROYALTY_RECEIVER: Final[bytes] = b"royalty:receiver"
K_ROYALTY_BPS: Final[bytes] = b"royalty:bps"


def set_default_royalty(ctx: Context, receiver: bytes, bps: int) -> None:
    receiver = require_address(receiver, allow_zero=False, message="ERC2981: invalid receiver")
    if require_amount(bps) > BPS_DENOMINATOR:
        raise InvalidAmountError("ERC2981: royalty fee will exceed salePrice", data={"bps": bps})
    ctx.storage.set(K_ROYALTY_RECEIVER, receiver)
    ctx.storage.set_int(K_ROYALTY_BPS, bps)


def royalty_info(ctx: Context, item_id: int, sale_price: int) -> Tuple[bytes, int]:
    require_amount(item_id)
    bps = ctx.storage.get_int(K_ROYALTY_BPS)
    return ctx.storage.get(K_ROYALTY_RECEIVER), apply_bps(sale_price, bps)


class Royalty:
    @view
    def royaltyInfo(self, ctx: Context, item_id: int, sale_price: int) -> Tuple[bytes, int]:
        return royalty_info(ctx, item_id, sale_price)
