# -*- coding: utf-8 -*-
"""
numbers_contracts.stdlib.access.ownable
=======================================

Single-owner gate for Numbers contracts.

- read the current owner (`get_owner`)
- set the owner once at construction (`init_owner`)
- check that the caller is the owner (`require_owner`)
- transfer ownership to a new account (`transfer_ownership`)
- renounce ownership, leaving the contract ownerless (`renounce_ownership`)

`Ownable` exports the usual ABI (`owner`, `transferOwnership`,
`renounceOwnership`) for contract classes that list it as a base.

Events:
    OwnershipTransferred {previousOwner, newOwner}
"""
from __future__ import annotations

from numbers_vm.abi import public, view
from numbers_vm.context import ZERO_ADDRESS, Context
from numbers_vm.errors import AuthorizationError, InvalidAddressError

from . import EVT_OWNERSHIP_TRANSFERRED, OWNER_KEY

__all__ = [
    "Ownable",
    "get_owner",
    "init_owner",
    "require_owner",
    "transfer_ownership",
    "renounce_ownership",
]


def get_owner(ctx: Context) -> bytes:
    """Current owner, or the zero address when unset/renounced."""
    v = ctx.storage.get(OWNER_KEY)
    return v if v else ZERO_ADDRESS


def _set_owner(ctx: Context, new_owner: bytes) -> None:
    previous = get_owner(ctx)
    ctx.storage.set(OWNER_KEY, b"" if new_owner == ZERO_ADDRESS else new_owner)
    ctx.emit(EVT_OWNERSHIP_TRANSFERRED, {"previousOwner": previous, "newOwner": new_owner})


def init_owner(ctx: Context, owner: bytes) -> None:
    """Set the initial owner. Does not overwrite an existing owner."""
    if not ctx.storage.exists(OWNER_KEY):
        _set_owner(ctx, owner)


def require_owner(ctx: Context) -> None:
    """Raise AuthorizationError unless `ctx.sender` is the owner."""
    owner = get_owner(ctx)
    if owner == ZERO_ADDRESS or ctx.sender != owner:
        raise AuthorizationError(data={"caller": "0x" + ctx.sender.hex()})


def transfer_ownership(ctx: Context, new_owner: bytes) -> None:
    require_owner(ctx)
    if not isinstance(new_owner, (bytes, bytearray)) or len(new_owner) != 20 or new_owner == ZERO_ADDRESS:
        raise InvalidAddressError("Ownable: new owner is the zero address")
    _set_owner(ctx, bytes(new_owner))


def renounce_ownership(ctx: Context) -> None:
    require_owner(ctx)
    _set_owner(ctx, ZERO_ADDRESS)


class Ownable:
    """Exported owner surface; mix into a Contract subclass."""

    @view
    def owner(self, ctx: Context) -> bytes:
        return get_owner(ctx)

    @public
    def transferOwnership(self, ctx: Context, new_owner: bytes) -> None:
        transfer_ownership(ctx, new_owner)

    @public
    def renounceOwnership(self, ctx: Context) -> None:
        renounce_ownership(ctx)
