# -*- coding: utf-8 -*-
"""
ERC-721 style item registry
===========================

Items are identified by u256 ids. Each existing item has exactly one owner;
per-owner item counts are kept alongside. The item owner, the account
approved for that item, or an operator approved for all of the owner's items
may move it. A transfer clears the per-item approval.

Events:
    - b"Transfer"       {from, to, tokenId}    (from = zero address on mint)
    - b"Approval"       {owner, approved, tokenId}
    - b"ApprovalForAll" {owner, operator, approved}

"Safe" variants notify contract recipients through their exported
`onERC721Received(operator, from, tokenId, data)` method, which must return
ERC721_RECEIVED; a recipient without that method rejects the item.
"""

from __future__ import annotations

from typing import Final

from numbers_vm.abi import public, view
from numbers_vm.context import ZERO_ADDRESS, Context
from numbers_vm.errors import (
    InvalidAddressError,
    InvalidReceiverError,
    NonexistentTokenError,
    NotApprovedError,
)

from ..math.safe_uint import u256_add, u256_sub
from . import (
    EVT_APPROVAL,
    EVT_APPROVAL_FOR_ALL,
    EVT_TRANSFER,
    ITEM_APPROVAL_PREFIX,
    ITEM_BAL_PREFIX,
    ITEM_OWNER_PREFIX,
    OPERATOR_PREFIX,
    key_id,
    key_pair,
    require_address,
    require_amount,
)

# bytes4(keccak256("onERC721Received(address,address,uint256,bytes)"))
ERC721_RECEIVED: Final[bytes] = bytes.fromhex("150b7a02")

INTERFACE_ERC165: Final[bytes] = bytes.fromhex("01ffc9a7")
INTERFACE_ERC721: Final[bytes] = bytes.fromhex("80ac58cd")
INTERFACE_ERC721_METADATA: Final[bytes] = bytes.fromhex("5b5e139f")

K_NAME: Final[bytes] = b"nft:meta:name"
K_SYMBOL: Final[bytes] = b"nft:meta:symbol"


def normalize_interface_id(interface_id) -> bytes:
    if isinstance(interface_id, int) and not isinstance(interface_id, bool):
        if not 0 <= interface_id < 1 << 32:
            return b""
        return interface_id.to_bytes(4, "big")
    if isinstance(interface_id, (bytes, bytearray)) and len(interface_id) == 4:
        return bytes(interface_id)
    return b""


# ------------------------------------------------------------------------------
# Init & views
# ------------------------------------------------------------------------------


def init(ctx: Context, name: str, symbol: str) -> None:
    ctx.storage.set(K_NAME, name.encode("utf-8"))
    ctx.storage.set(K_SYMBOL, symbol.encode("utf-8"))


def exists(ctx: Context, item_id: int) -> bool:
    return ctx.storage.exists(key_id(ITEM_OWNER_PREFIX, require_amount(item_id)))


def owner_of(ctx: Context, item_id: int) -> bytes:
    v = ctx.storage.get(key_id(ITEM_OWNER_PREFIX, require_amount(item_id)))
    if not v:
        raise NonexistentTokenError(data={"tokenId": str(item_id)})
    return v


def balance_of(ctx: Context, owner: bytes) -> int:
    owner = require_address(owner, allow_zero=False, message="ERC721: address zero is not a valid owner")
    return ctx.storage.get_int(ITEM_BAL_PREFIX + owner)


def get_approved(ctx: Context, item_id: int) -> bytes:
    owner_of(ctx, item_id)
    v = ctx.storage.get(key_id(ITEM_APPROVAL_PREFIX, item_id))
    return v if v else ZERO_ADDRESS


def is_approved_for_all(ctx: Context, owner: bytes, operator: bytes) -> bool:
    return ctx.storage.get_bool(key_pair(OPERATOR_PREFIX, require_address(owner), require_address(operator)))


def is_approved_or_owner(ctx: Context, spender: bytes, item_id: int) -> bool:
    owner = owner_of(ctx, item_id)
    return spender == owner or is_approved_for_all(ctx, owner, spender) or get_approved(ctx, item_id) == spender


# ------------------------------------------------------------------------------
# Mutations
# ------------------------------------------------------------------------------


def approve(ctx: Context, to: bytes, item_id: int) -> None:
    to = require_address(to)
    owner = owner_of(ctx, item_id)
    if to == owner:
        raise InvalidAddressError("ERC721: approval to current owner")
    if ctx.sender != owner and not is_approved_for_all(ctx, owner, ctx.sender):
        raise NotApprovedError("ERC721: approve caller is not token owner or approved for all")
    _set_approval(ctx, owner, to, item_id)


def set_approval_for_all(ctx: Context, operator: bytes, approved: bool) -> None:
    operator = require_address(operator)
    if operator == ctx.sender:
        raise InvalidAddressError("ERC721: approve to caller")
    approved = bool(approved)
    ctx.storage.set_bool(key_pair(OPERATOR_PREFIX, ctx.sender, operator), approved)
    ctx.emit(EVT_APPROVAL_FOR_ALL, {"owner": ctx.sender, "operator": operator, "approved": approved})


def transfer_from(ctx: Context, src: bytes, to: bytes, item_id: int) -> None:
    if not is_approved_or_owner(ctx, ctx.sender, item_id):
        raise NotApprovedError(data={"tokenId": str(item_id)})
    _transfer(ctx, src, to, item_id)


def safe_transfer_from(ctx: Context, src: bytes, to: bytes, item_id: int, data: bytes = b"") -> None:
    transfer_from(ctx, src, to, item_id)
    check_on_received(ctx, src, to, item_id, data)


def mint(ctx: Context, to: bytes, item_id: int) -> None:
    to = require_address(to, allow_zero=False, message="ERC721: mint to the zero address")
    if exists(ctx, item_id):
        raise InvalidAddressError("ERC721: token already minted", data={"tokenId": str(item_id)})
    bal_key = ITEM_BAL_PREFIX + to
    ctx.storage.set_int(bal_key, u256_add(ctx.storage.get_int(bal_key), 1))
    ctx.storage.set(key_id(ITEM_OWNER_PREFIX, item_id), to)
    ctx.emit(EVT_TRANSFER, {"from": ZERO_ADDRESS, "to": to, "tokenId": item_id})


def safe_mint(ctx: Context, to: bytes, item_id: int, data: bytes = b"") -> None:
    mint(ctx, to, item_id)
    check_on_received(ctx, ZERO_ADDRESS, to, item_id, data)


def check_on_received(ctx: Context, src: bytes, to: bytes, item_id: int, data: bytes) -> None:
    """Ask a contract recipient to accept the item; accounts always accept."""
    if not ctx.is_contract(to):
        return
    if not ctx.exports(to, "onERC721Received"):
        raise InvalidReceiverError(data={"to": "0x" + to.hex()})
    ret = ctx.call(to, "onERC721Received", ctx.sender, src, item_id, bytes(data))
    if ret != ERC721_RECEIVED:
        raise InvalidReceiverError(data={"to": "0x" + to.hex()})


# ------------------------------------------------------------------------------
# Internals
# ------------------------------------------------------------------------------


def _set_approval(ctx: Context, owner: bytes, to: bytes, item_id: int) -> None:
    ctx.storage.set(key_id(ITEM_APPROVAL_PREFIX, item_id), b"" if to == ZERO_ADDRESS else to)
    ctx.emit(EVT_APPROVAL, {"owner": owner, "approved": to, "tokenId": item_id})


def _transfer(ctx: Context, src: bytes, to: bytes, item_id: int) -> None:
    src = require_address(src)
    to = require_address(to, allow_zero=False, message="ERC721: transfer to the zero address")
    if owner_of(ctx, item_id) != src:
        raise InvalidAddressError("ERC721: transfer from incorrect owner")

    # clear the per-item approval without an Approval event
    ctx.storage.delete(key_id(ITEM_APPROVAL_PREFIX, item_id))

    src_key = ITEM_BAL_PREFIX + src
    ctx.storage.set_int(src_key, u256_sub(ctx.storage.get_int(src_key), 1))
    to_key = ITEM_BAL_PREFIX + to
    ctx.storage.set_int(to_key, u256_add(ctx.storage.get_int(to_key), 1))
    ctx.storage.set(key_id(ITEM_OWNER_PREFIX, item_id), to)

    ctx.emit(EVT_TRANSFER, {"from": src, "to": to, "tokenId": item_id})


# ------------------------------------------------------------------------------
# Exported surface
# ------------------------------------------------------------------------------


class NonFungibleToken:
    """ERC-721 ABI; mix into a Contract subclass and call `init` from its constructor."""

    SUPPORTED_INTERFACES = (INTERFACE_ERC165, INTERFACE_ERC721, INTERFACE_ERC721_METADATA)

    @view
    def supportsInterface(self, ctx: Context, interface_id) -> bool:
        return normalize_interface_id(interface_id) in self.SUPPORTED_INTERFACES

    @view
    def name(self, ctx: Context) -> str:
        return ctx.storage.get(K_NAME).decode("utf-8")

    @view
    def symbol(self, ctx: Context) -> str:
        return ctx.storage.get(K_SYMBOL).decode("utf-8")

    @view
    def balanceOf(self, ctx: Context, owner: bytes) -> int:
        return balance_of(ctx, owner)

    @view
    def ownerOf(self, ctx: Context, item_id: int) -> bytes:
        return owner_of(ctx, item_id)

    @view
    def tokenURI(self, ctx: Context, item_id: int) -> str:
        owner_of(ctx, item_id)
        return ""

    @view
    def getApproved(self, ctx: Context, item_id: int) -> bytes:
        return get_approved(ctx, item_id)

    @view
    def isApprovedForAll(self, ctx: Context, owner: bytes, operator: bytes) -> bool:
        return is_approved_for_all(ctx, owner, operator)

    @public
    def approve(self, ctx: Context, to: bytes, item_id: int) -> None:
        approve(ctx, to, item_id)

    @public
    def setApprovalForAll(self, ctx: Context, operator: bytes, approved: bool) -> None:
        set_approval_for_all(ctx, operator, approved)

    @public
    def transferFrom(self, ctx: Context, src: bytes, to: bytes, item_id: int) -> None:
        transfer_from(ctx, src, to, item_id)

    @public
    def safeTransferFrom(self, ctx: Context, src: bytes, to: bytes, item_id: int, data: bytes = b"") -> None:
        safe_transfer_from(ctx, src, to, item_id, data)
