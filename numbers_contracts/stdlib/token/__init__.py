# -*- coding: utf-8 -*-
"""
numbers_contracts.stdlib.token
==============================

Shared conventions for the token modules: storage prefixes, event names and
argument validation. Nothing here touches storage.

Storage keys (prefixed bytes):
  - fungible balances:   BAL_PREFIX || <addr>
  - allowances:          ALLOW_PREFIX || <owner> || b"|" || <spender>
  - item owner:          ITEM_OWNER_PREFIX || u256(id)
  - item counts:         ITEM_BAL_PREFIX || <addr>
  - item approvals:      ITEM_APPROVAL_PREFIX || u256(id)
  - operator approvals:  OPERATOR_PREFIX || <owner> || b"|" || <operator>

Addresses are raw 20-byte values; amounts and ids are u256 ints.
"""

from __future__ import annotations

from typing import Any, Final

from numbers_vm.context import ADDRESS_LEN, ZERO_ADDRESS
from numbers_vm.errors import InvalidAddressError

from ..math.safe_uint import require_u256

BAL_PREFIX: Final[bytes] = b"tok:bal:"
ALLOW_PREFIX: Final[bytes] = b"tok:allow:"

ITEM_OWNER_PREFIX: Final[bytes] = b"nft:owner:"
ITEM_BAL_PREFIX: Final[bytes] = b"nft:bal:"
ITEM_APPROVAL_PREFIX: Final[bytes] = b"nft:approved:"
OPERATOR_PREFIX: Final[bytes] = b"nft:operator:"

EVT_TRANSFER: Final[bytes] = b"Transfer"
EVT_APPROVAL: Final[bytes] = b"Approval"
EVT_APPROVAL_FOR_ALL: Final[bytes] = b"ApprovalForAll"

DEFAULT_DECIMALS: Final[int] = 18

# Allowance value treated as unlimited (never decremented).
INFINITE_ALLOWANCE: Final[int] = (1 << 256) - 1


def key_balance(addr: bytes) -> bytes:
    return BAL_PREFIX + addr


def key_allow(owner: bytes, spender: bytes) -> bytes:
    return ALLOW_PREFIX + owner + b"|" + spender


def key_id(prefix: bytes, item_id: int) -> bytes:
    return prefix + item_id.to_bytes(32, "big")


def key_pair(prefix: bytes, a: bytes, b: bytes) -> bytes:
    return prefix + a + b"|" + b


def require_address(addr: Any, *, allow_zero: bool = True, message: str = "invalid address") -> bytes:
    """Return `addr` as bytes if it is a 20-byte address, else raise."""
    if not isinstance(addr, (bytes, bytearray)) or len(addr) != ADDRESS_LEN:
        raise InvalidAddressError(message, data={"address": repr(addr)[:80]})
    b = bytes(addr)
    if not allow_zero and b == ZERO_ADDRESS:
        raise InvalidAddressError(message)
    return b


def require_amount(n: Any) -> int:
    require_u256(n)
    return n


__all__ = [
    "BAL_PREFIX",
    "ALLOW_PREFIX",
    "ITEM_OWNER_PREFIX",
    "ITEM_BAL_PREFIX",
    "ITEM_APPROVAL_PREFIX",
    "OPERATOR_PREFIX",
    "EVT_TRANSFER",
    "EVT_APPROVAL",
    "EVT_APPROVAL_FOR_ALL",
    "DEFAULT_DECIMALS",
    "INFINITE_ALLOWANCE",
    "key_balance",
    "key_allow",
    "key_id",
    "key_pair",
    "require_address",
    "require_amount",
]
